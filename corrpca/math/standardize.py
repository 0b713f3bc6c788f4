"""
Standardization for corrpca.

Centers and scales every feature column to zero mean and unit sample
standard deviation, after checking that the data is complete and numeric.
"""

import logging
import numpy as np
import pandas as pd
from typing import Any, Optional

from corrpca.errors import InputError
from corrpca.math.named_matrix import NamedMatrix, as_named_matrix

logger = logging.getLogger(__name__)


def validate_dataset(nmat: NamedMatrix) -> np.ndarray:
    """
    Check that a dataset can be analysed and return it as a float array.

    Args:
        nmat: Dataset to check

    Returns:
        n x p float64 array of the dataset values

    Raises:
        InputError: non-numeric column, missing/non-finite value, or too
            few rows or features
    """
    n_rows, n_cols = nmat.shape

    for name, dtype in nmat.dtypes.items():
        if pd.api.types.is_bool_dtype(dtype) or not pd.api.types.is_numeric_dtype(dtype):
            raise InputError(f"Column '{name}' is not numeric (dtype {dtype})")

    if n_cols < 2:
        raise InputError(f"At least 2 features are required, got {n_cols}")
    if n_rows < 2:
        raise InputError(f"At least 2 observations are required, got {n_rows}")

    frame = nmat.matrix

    # Covers NaN as well as pd.NA in nullable Int64/Float64 columns
    missing = frame.isna().to_numpy()
    if missing.any():
        cols = [nmat.colnames()[j] for j in np.flatnonzero(missing.any(axis=0))]
        raise InputError(f"Missing values in column(s) {cols}; supply a complete matrix")

    values = frame.to_numpy(dtype=np.float64)

    if not np.isfinite(values).all():
        cols = [nmat.colnames()[j] for j in np.flatnonzero(~np.isfinite(values).all(axis=0))]
        raise InputError(f"Non-finite values in column(s) {cols}")

    return values


def column_stats(data: Any) -> pd.DataFrame:
    """
    Per-feature mean and sample standard deviation.

    Args:
        data: Dataset (NamedMatrix, DataFrame or 2-D array)

    Returns:
        DataFrame indexed by feature with 'mean' and 'std' columns
    """
    nmat = as_named_matrix(data)
    values = validate_dataset(nmat)
    return pd.DataFrame({
        'mean': values.mean(axis=0),
        'std': values.std(axis=0, ddof=1)
    }, index=nmat.colnames())


def standardize(data: Any,
                zero_variance_tol: float = 1e-12,
                label_column: Optional[Any] = None) -> NamedMatrix:
    """
    Scale each column to zero mean and unit sample standard deviation.

    Uses the unbiased (n - 1) estimator for the standard deviation.

    Args:
        data: Dataset (NamedMatrix, DataFrame or 2-D array)
        zero_variance_tol: Columns whose standard deviation is at or below this
            (relative to the column's magnitude) count as constant
        label_column: Label column to split off when data is a DataFrame

    Returns:
        Standardized NamedMatrix with the same row names, column names and labels

    Raises:
        InputError: if the dataset is invalid or a column has zero variance
    """
    nmat = as_named_matrix(data, label_column)
    values = validate_dataset(nmat)

    means = values.mean(axis=0)
    stds = values.std(axis=0, ddof=1)

    # Constant columns leave only round-off after centering
    scale = np.maximum(1.0, np.abs(means))
    constant = stds <= zero_variance_tol * scale
    if constant.any():
        cols = [nmat.colnames()[j] for j in np.flatnonzero(constant)]
        raise InputError(f"Zero-variance column(s) {cols} cannot be standardized")

    logger.debug(f"Standardizing {values.shape[0]} x {values.shape[1]} dataset")

    return nmat.derive((values - means) / stds)
