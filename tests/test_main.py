"""
Tests for the command line entry point.
"""

import json
import logging

import pytest
import pandas as pd
import yaml

from corrpca.__main__ import main, parse_args


@pytest.fixture
def root_level():
    """Restore the root logger level changed by main()."""
    root = logging.getLogger()
    saved = root.level
    yield root
    root.setLevel(saved)


class TestMain:
    """Tests for main()."""

    def test_iris_text(self, capsys):
        assert main(['--iris', '-k', '2']) == 0
        out = capsys.readouterr().out

        assert 'Correlation matrix' in out
        assert 'Variance explained' in out
        assert 'Projection matrix' in out
        assert 'Species' in out

    def test_iris_json(self, capsys):
        assert main(['--iris', '--components', '2', '--format', 'json', '--solver', 'jacobi']) == 0
        summary = json.loads(capsys.readouterr().out)

        assert summary['solver'] == 'jacobi'
        assert summary['report'][0]['percent'] > 50.0
        assert summary['projected'][0]['label'] == 'setosa'

    def test_csv_yaml(self, tmp_path, capsys):
        path = tmp_path / 'data.csv'
        pd.DataFrame({
            'x': [1.0, 2.0, 3.0, 4.0, 5.0],
            'y': [2.0, 4.1, 5.9, 8.2, 9.9],
            'z': [5.0, 3.0, 4.0, 1.0, 2.0],
            'kind': ['a', 'b', 'a', 'b', 'a']
        }).to_csv(path, index=False)

        assert main(['--input', str(path), '--label-column', 'kind', '-k', '3', '--format', 'yaml']) == 0
        summary = yaml.safe_load(capsys.readouterr().out)
        assert summary['features'] == ['x', 'y', 'z']
        assert [row['label'] for row in summary['projected']] == ['a', 'b', 'a', 'b', 'a']

    def test_config_file(self, tmp_path, capsys):
        path = tmp_path / 'config.yaml'
        path.write_text(yaml.safe_dump({'eigensolver': {'backend': 'scipy'}}))

        assert main(['--iris', '-k', '1', '--format', 'json', '--config', str(path)]) == 0
        assert json.loads(capsys.readouterr().out)['solver'] == 'scipy'

    def test_constant_column_reports_error(self, tmp_path, capsys):
        path = tmp_path / 'data.csv'
        pd.DataFrame({'x': [1.0, 2.0, 3.0], 'y': [4.0, 4.0, 4.0]}).to_csv(path, index=False)

        assert main(['--input', str(path), '-k', '1']) == 2
        assert 'error' in capsys.readouterr().err

    @pytest.mark.parametrize('k', ['0', '5'])
    def test_invalid_k(self, capsys, k):
        assert main(['--iris', '-k', k]) == 2
        assert 'Component count' in capsys.readouterr().err

    def test_components_required(self):
        with pytest.raises(SystemExit):
            parse_args(['--iris'])

    def test_source_required(self):
        with pytest.raises(SystemExit):
            parse_args(['-k', '2'])

    def test_missing_input_file(self, tmp_path, capsys):
        assert main(['--input', str(tmp_path / 'absent.csv'), '-k', '2']) == 2
        assert 'error' in capsys.readouterr().err

    def test_missing_config_file(self, tmp_path, capsys):
        assert main(['--iris', '-k', '2', '--config', str(tmp_path / 'absent.yaml')]) == 2
        assert 'error' in capsys.readouterr().err


class TestLogLevel:
    """Tests for how main() picks the logging level."""

    def test_level_from_environment(self, monkeypatch, root_level, capsys):
        monkeypatch.setenv('LOG_LEVEL', 'debug')
        assert main(['--iris', '-k', '2']) == 0
        assert root_level.level == logging.DEBUG

    def test_level_from_config_file(self, tmp_path, root_level, capsys):
        path = tmp_path / 'config.yaml'
        path.write_text(yaml.safe_dump({'logging': {'level': 'error'}}))

        assert main(['--iris', '-k', '2', '--config', str(path)]) == 0
        assert root_level.level == logging.ERROR

    def test_command_line_wins(self, monkeypatch, root_level, capsys):
        monkeypatch.setenv('LOG_LEVEL', 'debug')
        assert main(['--iris', '-k', '2', '--log-level', 'INFO']) == 0
        assert root_level.level == logging.INFO

    def test_default_level(self, root_level, capsys):
        assert main(['--iris', '-k', '2']) == 0
        assert root_level.level == logging.WARNING
