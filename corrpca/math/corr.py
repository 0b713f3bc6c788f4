"""
Correlation matrix computation for corrpca.

For standardized data, the covariance matrix Z^T Z / (n - 1) is the Pearson
correlation matrix of the original features.
"""

import logging
import numpy as np

from corrpca.errors import NumericalError
from corrpca.math.named_matrix import NamedMatrix

logger = logging.getLogger(__name__)


def is_symmetric(matrix: np.ndarray, tol: float = 1e-8) -> bool:
    """
    Check whether a square matrix equals its transpose within tolerance.

    Args:
        matrix: Matrix to check
        tol: Absolute tolerance

    Returns:
        True if the matrix is square and symmetric
    """
    matrix = np.asarray(matrix)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        return False
    return bool(np.allclose(matrix, matrix.T, rtol=0.0, atol=tol))


def symmetrize(matrix: np.ndarray) -> np.ndarray:
    """Average a matrix with its transpose."""
    return (matrix + matrix.T) / 2.0


def correlate(standardized: NamedMatrix, diagonal_tol: float = 1e-8) -> NamedMatrix:
    """
    Compute the correlation matrix of standardized data.

    Args:
        standardized: n x p standardized NamedMatrix
        diagonal_tol: Allowed deviation of the diagonal from 1

    Returns:
        p x p correlation NamedMatrix indexed by feature name on both axes

    Raises:
        NumericalError: if the diagonal is not 1 (input was not standardized)
    """
    z = standardized.values.astype(np.float64)
    n_rows = z.shape[0]
    if n_rows < 2:
        raise NumericalError(f"Correlation needs at least 2 observations, got {n_rows}")

    corr = symmetrize(z.T @ z / (n_rows - 1))

    diagonal = np.diag(corr)
    if not np.allclose(diagonal, 1.0, rtol=0.0, atol=diagonal_tol):
        worst = float(np.max(np.abs(diagonal - 1.0)))
        raise NumericalError(
            f"Correlation diagonal deviates from 1 by {worst:.3g}; is the input standardized?"
        )

    # Round-off can push near-perfect correlations just past +/-1
    corr = np.clip(corr, -1.0, 1.0)

    features = standardized.colnames()
    logger.debug(f"Computed {len(features)} x {len(features)} correlation matrix")

    return NamedMatrix(corr, rownames=features, colnames=features)
