"""
Component ranking and selection for corrpca.

Orders eigenpairs by explained variance, reports the variance explained by
each component, and builds the projection (loading) matrix from the top k.
"""

import logging
import numbers
import numpy as np
import pandas as pd
from typing import Any, Dict, Tuple

from corrpca.errors import InvalidArgument
from corrpca.math.named_matrix import NamedMatrix

logger = logging.getLogger(__name__)


def component_names(count: int):
    """Return ['PC1', ..., 'PC<count>']."""
    return [f"PC{i + 1}" for i in range(count)]


def validate_n_components(k: Any, n_features: int) -> int:
    """
    Check a requested component count.

    Args:
        k: Requested number of components
        n_features: Number of features p

    Returns:
        k as a plain int

    Raises:
        InvalidArgument: if k is not an integer in [1, p]
    """
    if isinstance(k, bool) or not isinstance(k, numbers.Integral):
        raise InvalidArgument(f"Component count must be an integer, got {k!r}")
    if k < 1 or k > n_features:
        raise InvalidArgument(f"Component count must be in [1, {n_features}], got {k}")
    return int(k)


def normalize_signs(vectors: np.ndarray) -> np.ndarray:
    """
    Flip each column so that its largest-magnitude entry is positive.

    Ties on magnitude resolve to the first such entry.

    Args:
        vectors: Matrix with one vector per column

    Returns:
        Sign-normalized copy
    """
    vectors = np.array(vectors, dtype=np.float64)
    if vectors.size == 0:
        return vectors
    pivots = np.argmax(np.abs(vectors), axis=0)
    signs = np.sign(vectors[pivots, np.arange(vectors.shape[1])])
    signs[signs == 0] = 1.0
    return vectors * signs


def rank_components(eigen: Dict[str, Any], normalize: bool = True) -> Dict[str, Any]:
    """
    Sort eigenpairs by descending eigenvalue.

    Equal eigenvalues keep their original relative order.

    Args:
        eigen: Result of eigendecompose
        normalize: Whether to apply the sign convention to the eigenvectors

    Returns:
        Copy of the decomposition with sorted 'eigenvalues'/'eigenvectors'
        and an 'order' array of original indices
    """
    values = np.asarray(eigen['eigenvalues'], dtype=np.float64)
    vectors = np.asarray(eigen['eigenvectors'], dtype=np.float64)

    order = np.argsort(-values, kind='stable')
    vectors = vectors[:, order]
    if normalize:
        vectors = normalize_signs(vectors)

    ranked = dict(eigen)
    ranked['eigenvalues'] = values[order]
    ranked['eigenvectors'] = vectors
    ranked['order'] = order
    return ranked


def variance_report(eigenvalues: np.ndarray, decimals: int = 2) -> pd.DataFrame:
    """
    Tabulate the variance explained by each component.

    Percentages are rounded per component first and the cumulative column is
    the running sum of those rounded values, so the last cumulative entry can
    differ from 100 by up to 0.5 * 10**-decimals per component.

    Args:
        eigenvalues: Eigenvalues sorted in descending order
        decimals: Decimal places for the percentages

    Returns:
        DataFrame indexed PC1..PCp with columns component, eigenvalue,
        std_dev, percent and cumulative
    """
    eigenvalues = np.asarray(eigenvalues, dtype=np.float64)
    total = eigenvalues.sum()
    if total <= 0:
        raise InvalidArgument("Eigenvalues sum to zero; no variance to report")

    percent = np.round(eigenvalues / total * 100.0, decimals)
    # Re-round the running sum to drop binary round-off from the additions
    cumulative = np.round(np.cumsum(percent), decimals)

    return pd.DataFrame({
        'component': np.arange(1, len(eigenvalues) + 1),
        'eigenvalue': eigenvalues,
        'std_dev': np.sqrt(eigenvalues),
        'percent': percent,
        'cumulative': cumulative
    }, index=component_names(len(eigenvalues)))


def select_components(ranked: Dict[str, Any], k: int) -> NamedMatrix:
    """
    Build the p x k projection matrix from the top k ranked eigenvectors.

    Args:
        ranked: Result of rank_components
        k: Number of components

    Returns:
        NamedMatrix with features as rows and PC1..PCk as columns
    """
    vectors = np.asarray(ranked['eigenvectors'])
    k = validate_n_components(k, vectors.shape[1])
    features = ranked.get('features') or list(range(vectors.shape[0]))
    return NamedMatrix(vectors[:, :k], rownames=features, colnames=component_names(k))


def rank_and_select(eigen: Dict[str, Any],
                    k: int,
                    decimals: int = 2,
                    normalize: bool = True) -> Tuple[pd.DataFrame, NamedMatrix]:
    """
    Rank components and select the top k.

    Args:
        eigen: Result of eigendecompose
        k: Number of components to keep, 1 <= k <= p
        decimals: Decimal places for the report percentages
        normalize: Whether to apply the eigenvector sign convention

    Returns:
        Tuple of (variance report, projection matrix)

    Raises:
        InvalidArgument: if k is outside [1, p]
    """
    k = validate_n_components(k, len(eigen['eigenvalues']))

    ranked = rank_components(eigen, normalize=normalize)
    report = variance_report(ranked['eigenvalues'], decimals)
    projection = select_components(ranked, k)

    logger.info(f"Top {k} component(s) explain {report['cumulative'].iloc[k - 1]:.{decimals}f}% of variance")

    return report, projection
