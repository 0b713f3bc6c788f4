"""
Named Matrix implementation for corrpca.

This module provides a data structure for matrices with named rows and columns
and an optional per-row label. Every matrix-shaped entity of the PCA pipeline
(dataset, standardized data, correlation matrix, loadings, projected
coordinates) is carried as a NamedMatrix so feature names and row order travel
with the numbers.
"""

import numpy as np
import pandas as pd
from typing import List, Optional, Union, Any, Sequence


class IndexHash:
    """
    Maintains an ordered index of names with fast lookup.
    """

    def __init__(self, names: Optional[Sequence[Any]] = None):
        """
        Initialize an IndexHash with optional initial names.

        Args:
            names: Optional list of initial names
        """
        self._names = [] if names is None else list(names)
        self._index_hash = {name: idx for idx, name in enumerate(self._names)}

    def get_names(self) -> List[Any]:
        """Return the ordered list of names."""
        return self._names.copy()

    def index(self, name: Any) -> Optional[int]:
        """
        Get the index for a given name, or None if not found.

        Args:
            name: The name to look up

        Returns:
            The index if found, None otherwise
        """
        return self._index_hash.get(name)

    def subset(self, names: Sequence[Any]) -> 'IndexHash':
        """
        Create a subset of the index with only the specified names.

        Args:
            names: List of names to include in the subset

        Returns:
            A new IndexHash containing only the specified names
        """
        valid_names = [name for name in names if name in self._index_hash]
        return IndexHash(valid_names)

    def __len__(self) -> int:
        """Return the number of names in the index."""
        return len(self._names)

    def __contains__(self, name: Any) -> bool:
        """Check if a name is in the index."""
        return name in self._index_hash


class NamedMatrix:
    """
    A matrix with named rows and columns and optional row labels.

    Uses a pandas DataFrame as the underlying storage. Instances are treated
    as immutable: every accessor hands out copies and every transformation
    returns a new NamedMatrix.
    """

    def __init__(self,
                 matrix: Union[np.ndarray, pd.DataFrame],
                 rownames: Optional[Sequence[Any]] = None,
                 colnames: Optional[Sequence[Any]] = None,
                 labels: Optional[Sequence[Any]] = None):
        """
        Initialize a NamedMatrix.

        Args:
            matrix: Matrix data (2-D numpy array or pandas DataFrame)
            rownames: List of row names (defaults to 0..n-1 or the frame index)
            colnames: List of column names (defaults to 0..p-1 or the frame columns)
            labels: Optional per-row labels, passed through untouched
        """
        if isinstance(matrix, pd.DataFrame):
            frame = matrix.copy()
            if rownames is not None:
                frame.index = list(rownames)
            if colnames is not None:
                frame.columns = list(colnames)
        else:
            matrix = np.asarray(matrix)
            if matrix.ndim != 2:
                raise ValueError(f"Expected a 2-D matrix, got {matrix.ndim} dimension(s)")
            rows = list(rownames) if rownames is not None else list(range(matrix.shape[0]))
            cols = list(colnames) if colnames is not None else list(range(matrix.shape[1]))
            frame = pd.DataFrame(matrix.copy(), index=rows, columns=cols)

        self._matrix = frame
        self._row_index = IndexHash(frame.index)
        self._col_index = IndexHash(frame.columns)

        if labels is None:
            self._labels = None
        else:
            # Keep the label dtype (e.g. category) and name
            label_series = pd.Series(labels).reset_index(drop=True).copy()
            if len(label_series) != frame.shape[0]:
                raise ValueError(f"Got {len(label_series)} labels for {frame.shape[0]} rows")
            label_series.index = frame.index
            self._labels = label_series

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, label_column: Optional[Any] = None) -> 'NamedMatrix':
        """
        Build a NamedMatrix from a DataFrame, splitting off a label column.

        Args:
            frame: Table with one row per observation
            label_column: Name of the categorical column to carry as labels

        Returns:
            A new NamedMatrix over the remaining columns
        """
        if label_column is None:
            return cls(frame)

        if label_column not in frame.columns:
            raise KeyError(f"Label column '{label_column}' not found")

        labels = frame[label_column].rename(label_column)
        return cls(frame.drop(columns=[label_column]), labels=labels)

    @property
    def matrix(self) -> pd.DataFrame:
        """Get a copy of the underlying DataFrame."""
        return self._matrix.copy()

    @property
    def values(self) -> np.ndarray:
        """Get the matrix as a numpy array."""
        return self._matrix.to_numpy(copy=True)

    @property
    def shape(self):
        """Get the (rows, columns) shape."""
        return self._matrix.shape

    @property
    def dtypes(self) -> pd.Series:
        """Get the per-column dtypes."""
        return self._matrix.dtypes

    @property
    def labels(self) -> Optional[pd.Series]:
        """Get the per-row labels, or None."""
        return None if self._labels is None else self._labels.copy()

    def rownames(self) -> List[Any]:
        """Get the list of row names."""
        return self._row_index.get_names()

    def colnames(self) -> List[Any]:
        """Get the list of column names."""
        return self._col_index.get_names()

    def get_row_by_name(self, row_name: Any) -> np.ndarray:
        """
        Get a row of the matrix by name.

        Args:
            row_name: The name of the row

        Returns:
            The row as a numpy array
        """
        idx = self._row_index.index(row_name)
        if idx is None:
            raise KeyError(f"Row name '{row_name}' not found")
        return self._matrix.iloc[idx].to_numpy(copy=True)

    def get_col_by_name(self, col_name: Any) -> np.ndarray:
        """
        Get a column of the matrix by name.

        Args:
            col_name: The name of the column

        Returns:
            The column as a numpy array
        """
        idx = self._col_index.index(col_name)
        if idx is None:
            raise KeyError(f"Column name '{col_name}' not found")
        return self._matrix.iloc[:, idx].to_numpy(copy=True)

    def colname_subset(self, colnames: List[Any]) -> 'NamedMatrix':
        """
        Create a subset of the matrix with only the specified columns.

        Args:
            colnames: List of column names to include

        Returns:
            A new NamedMatrix with only the specified columns, same rows and labels
        """
        valid_cols = self._col_index.subset(colnames).get_names()
        return NamedMatrix(self._matrix[valid_cols], labels=self._labels)

    def derive(self, values: np.ndarray, colnames: Optional[Sequence[Any]] = None) -> 'NamedMatrix':
        """
        Create a matrix over the same rows (and labels) with new values.

        Args:
            values: n x m array, one row per row of this matrix
            colnames: Column names for the new matrix (defaults to this matrix's)

        Returns:
            A new NamedMatrix
        """
        values = np.asarray(values)
        if values.shape[0] != self.shape[0]:
            raise ValueError(f"Expected {self.shape[0]} rows, got {values.shape[0]}")

        return NamedMatrix(
            values,
            rownames=self.rownames(),
            colnames=self.colnames() if colnames is None else colnames,
            labels=self._labels
        )

    def to_frame(self, label_name: Optional[str] = None) -> pd.DataFrame:
        """
        Convert to a DataFrame, joining the labels as a trailing column.

        Args:
            label_name: Column name for the labels (defaults to the label
                series name, or 'label')

        Returns:
            DataFrame copy of the matrix
        """
        frame = self._matrix.copy()
        if self._labels is not None:
            name = label_name or self._labels.name or 'label'
            frame[name] = self._labels.values
        return frame

    def __repr__(self) -> str:
        """
        String representation of the NamedMatrix.
        """
        return f"NamedMatrix(rows={self.shape[0]}, cols={self.shape[1]})"

    def __str__(self) -> str:
        """
        Human-readable string representation.
        """
        return (f"NamedMatrix with {self.shape[0]} rows and "
                f"{self.shape[1]} columns\n{self._matrix}")


# Utility functions

def as_named_matrix(data: Any, label_column: Optional[Any] = None) -> NamedMatrix:
    """
    Coerce caller input into a NamedMatrix.

    Args:
        data: NamedMatrix, DataFrame, or 2-D array-like (nested lists)
        label_column: Label column to split off when data is a DataFrame

    Returns:
        A NamedMatrix (the input itself when it already is one)
    """
    if isinstance(data, NamedMatrix):
        return data
    if isinstance(data, pd.DataFrame):
        return NamedMatrix.from_frame(data, label_column)
    if label_column is not None:
        raise ValueError("label_column is only supported for DataFrame input")
    return NamedMatrix(np.asarray(data))
