"""
Shared fixtures for the corrpca tests.
"""

import os
import sys

import numpy as np
import pandas as pd
import pytest

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from corrpca.components.config import Config, ConfigManager
from corrpca.datasets import load_iris, load_iris_frame


ENV_VARS = [
    'PCA_EIGENSOLVER', 'PCA_JACOBI_MAX_SWEEPS', 'PCA_EIGEN_TOL', 'PCA_EIGEN_RETRY_TOL',
    'PCA_SYMMETRY_TOL', 'PCA_DIAGONAL_TOL', 'PCA_TRACE_TOL', 'PCA_PSD_TOL',
    'PCA_ORTHONORMAL_TOL', 'PCA_REPORT_DECIMALS', 'PCA_NORMALIZE_SIGNS', 'LOG_LEVEL',
]


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Isolate every test from the environment and the shared config."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    ConfigManager.reset()
    yield
    ConfigManager.reset()


@pytest.fixture
def config():
    return Config()


@pytest.fixture(scope='session')
def iris():
    return load_iris()


@pytest.fixture(scope='session')
def iris_frame():
    return load_iris_frame()


@pytest.fixture
def random_data():
    """Correlated 60 x 5 dataset with named columns."""
    rng = np.random.default_rng(7)
    base = rng.normal(size=(60, 2))
    mixing = rng.normal(size=(2, 5))
    values = base @ mixing + 0.3 * rng.normal(size=(60, 5)) + np.array([1.0, -4.0, 10.0, 0.0, 250.0])
    return pd.DataFrame(values, columns=['a', 'b', 'c', 'd', 'e'])
