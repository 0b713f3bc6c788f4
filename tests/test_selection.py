"""
Tests for the selection module.
"""

import pytest
import numpy as np

from corrpca.errors import InvalidArgument
from corrpca.math.corr import correlate
from corrpca.math.eigen import eigendecompose
from corrpca.math.selection import (
    component_names, normalize_signs, rank_and_select, rank_components,
    select_components, validate_n_components, variance_report
)
from corrpca.math.standardize import standardize


@pytest.fixture
def iris_eigen(iris):
    return eigendecompose(correlate(standardize(iris)))


def make_eigen(values, vectors=None, features=None):
    values = np.asarray(values, dtype=float)
    if vectors is None:
        vectors = np.eye(len(values))
    return {
        'eigenvalues': values,
        'eigenvectors': np.asarray(vectors, dtype=float),
        'features': features or [f"f{i}" for i in range(len(values))],
        'solver': 'test'
    }


class TestValidateComponents:
    """Tests for component count validation."""

    @pytest.mark.parametrize('k', [1, 2, 4, np.int64(3)])
    def test_valid(self, k):
        assert validate_n_components(k, 4) == int(k)

    @pytest.mark.parametrize('k', [0, -1, 5, 100])
    def test_out_of_range(self, k):
        with pytest.raises(InvalidArgument):
            validate_n_components(k, 4)

    @pytest.mark.parametrize('k', [2.0, 2.5, '2', None, True])
    def test_not_an_integer(self, k):
        with pytest.raises(InvalidArgument):
            validate_n_components(k, 4)


class TestRanking:
    """Tests for rank_components and normalize_signs."""

    def test_descending_order(self):
        eigen = make_eigen([0.5, 2.5, 1.0])
        ranked = rank_components(eigen)

        assert np.array_equal(ranked['eigenvalues'], [2.5, 1.0, 0.5])
        assert np.array_equal(ranked['order'], [1, 2, 0])
        assert np.array_equal(ranked['eigenvectors'][:, 0], [0.0, 1.0, 0.0])

    def test_ties_keep_original_order(self):
        """Equal eigenvalues are ordered by original index."""
        eigen = make_eigen([1.0, 2.0, 2.0, 0.0])
        ranked = rank_components(eigen)
        assert np.array_equal(ranked['order'], [1, 2, 0, 3])

    def test_input_not_modified(self):
        eigen = make_eigen([0.5, 2.5], vectors=[[0.0, -1.0], [-1.0, 0.0]])
        rank_components(eigen)
        assert np.array_equal(eigen['eigenvalues'], [0.5, 2.5])
        assert np.array_equal(eigen['eigenvectors'], [[0.0, -1.0], [-1.0, 0.0]])

    def test_normalize_signs(self):
        """The largest-magnitude entry of each column becomes positive."""
        vectors = np.array([
            [0.6, 0.1, 0.0],
            [-0.8, -0.9, 0.0],
            [0.0, 0.2, 0.0]
        ])
        result = normalize_signs(vectors)

        assert np.allclose(result[:, 0], [-0.6, 0.8, 0.0])
        assert np.allclose(result[:, 1], [-0.1, 0.9, -0.2])
        assert np.allclose(result[:, 2], 0.0)

    def test_sign_flip_is_canonical(self, iris_eigen):
        """Flipped solver output ranks to identical vectors."""
        flipped = dict(iris_eigen)
        flipped['eigenvectors'] = -iris_eigen['eigenvectors']

        a = rank_components(iris_eigen)['eigenvectors']
        b = rank_components(flipped)['eigenvectors']
        assert np.allclose(a, b)

    def test_without_normalization(self):
        eigen = make_eigen([1.0, 2.0], vectors=[[-1.0, 0.0], [0.0, -1.0]])
        ranked = rank_components(eigen, normalize=False)
        assert np.array_equal(ranked['eigenvectors'], [[0.0, -1.0], [-1.0, 0.0]])


class TestVarianceReport:
    """Tests for variance_report."""

    def test_iris_percentages(self, iris_eigen):
        """Iris: 72.96 / 22.85 / 3.67 / 0.52 percent."""
        report = variance_report(rank_components(iris_eigen)['eigenvalues'])

        assert list(report.index) == ['PC1', 'PC2', 'PC3', 'PC4']
        assert list(report['component']) == [1, 2, 3, 4]
        assert np.allclose(report['percent'], [72.96, 22.85, 3.67, 0.52], atol=0.02)
        assert np.allclose(report['cumulative'], [72.96, 95.81, 99.48, 100.0], atol=0.03)

    def test_round_then_sum(self):
        """Cumulative values are sums of the rounded percentages."""
        report = variance_report([1.0, 1.0, 1.0])

        assert list(report['percent']) == [33.33, 33.33, 33.33]
        assert list(report['cumulative']) == [33.33, 66.66, 99.99]

    def test_total_within_rounding(self, random_data):
        eigen = eigendecompose(correlate(standardize(random_data)))
        report = variance_report(rank_components(eigen)['eigenvalues'])
        p = len(report)
        assert abs(report['percent'].sum() - 100.0) <= 0.01 * p
        assert abs(report['cumulative'].iloc[-1] - 100.0) <= 0.01 * p

    def test_std_dev(self):
        report = variance_report([4.0, 1.0])
        assert np.allclose(report['std_dev'], [2.0, 1.0])

    def test_decimals(self):
        report = variance_report([2.0, 1.0], decimals=0)
        assert list(report['percent']) == [67.0, 33.0]

    def test_zero_total(self):
        with pytest.raises(InvalidArgument):
            variance_report([0.0, 0.0])


class TestRankAndSelect:
    """Tests for select_components and rank_and_select."""

    def test_projection_matrix(self, iris_eigen, iris):
        report, projection = rank_and_select(iris_eigen, 2)

        assert projection.shape == (4, 2)
        assert projection.rownames() == iris.colnames()
        assert projection.colnames() == ['PC1', 'PC2']

        loadings = projection.values
        assert np.allclose(loadings.T @ loadings, np.eye(2), atol=1e-9)
        assert len(report) == 4

    def test_first_column_is_top_eigenvector(self, iris_eigen):
        _, projection = rank_and_select(iris_eigen, 1)
        top = np.argmax(iris_eigen['eigenvalues'])
        assert np.allclose(np.abs(projection.values[:, 0]), np.abs(iris_eigen['eigenvectors'][:, top]))

    def test_all_components(self, iris_eigen):
        _, projection = rank_and_select(iris_eigen, 4)
        assert projection.colnames() == component_names(4)

    @pytest.mark.parametrize('k', [0, 5])
    def test_invalid_k(self, iris_eigen, k):
        with pytest.raises(InvalidArgument):
            rank_and_select(iris_eigen, k)

    def test_select_components_validates(self):
        ranked = rank_components(make_eigen([2.0, 1.0]))
        with pytest.raises(InvalidArgument):
            select_components(ranked, 3)

    def test_deterministic(self, iris_eigen):
        report_a, projection_a = rank_and_select(iris_eigen, 2)
        report_b, projection_b = rank_and_select(iris_eigen, 2)
        assert report_a.equals(report_b)
        assert np.array_equal(projection_a.values, projection_b.values)
