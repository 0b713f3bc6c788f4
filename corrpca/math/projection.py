"""
Projection of standardized data onto principal components.
"""

import logging
import numpy as np
import pandas as pd

from corrpca.errors import InvalidArgument
from corrpca.math.named_matrix import NamedMatrix

logger = logging.getLogger(__name__)


def _check_features(standardized_features, projection: NamedMatrix) -> None:
    if list(standardized_features) != projection.rownames():
        raise InvalidArgument(
            f"Feature mismatch: data has {list(standardized_features)}, "
            f"projection has {projection.rownames()}"
        )


def project(standardized: NamedMatrix, projection: NamedMatrix) -> NamedMatrix:
    """
    Map standardized data into the component subspace.

    Args:
        standardized: n x p standardized NamedMatrix
        projection: p x k projection NamedMatrix (features x components)

    Returns:
        n x k NamedMatrix of component scores, rows and labels in input order

    Raises:
        InvalidArgument: if the feature names of the operands differ
    """
    _check_features(standardized.colnames(), projection)

    scores = standardized.values.astype(np.float64) @ projection.values.astype(np.float64)
    logger.debug(f"Projected {scores.shape[0]} rows onto {scores.shape[1]} component(s)")

    return standardized.derive(scores, colnames=projection.colnames())


def inverse_project(projected: NamedMatrix, projection: NamedMatrix) -> NamedMatrix:
    """
    Map component scores back into standardized feature space.

    Exact when all p components were kept; otherwise the best rank-k
    approximation of the standardized data.

    Args:
        projected: n x k component scores
        projection: p x k projection matrix used to produce them

    Returns:
        n x p NamedMatrix in standardized feature space
    """
    if projected.colnames() != projection.colnames():
        raise InvalidArgument(
            f"Component mismatch: scores have {projected.colnames()}, "
            f"projection has {projection.colnames()}"
        )

    loadings = projection.values.astype(np.float64)
    restored = projected.values.astype(np.float64) @ loadings.T
    return projected.derive(restored, colnames=projection.rownames())


def component_variances(projected: NamedMatrix) -> pd.Series:
    """Sample variance (n - 1) of each component score column."""
    return pd.Series(projected.values.astype(np.float64).var(axis=0, ddof=1),
                     index=projected.colnames())
