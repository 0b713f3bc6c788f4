"""
End-to-end PCA pipeline for corrpca.

raw data -> standardized -> correlation -> eigenpairs -> ranked components
-> projection matrix -> projected coordinates.
"""

import logging
import numpy as np
from typing import Any, Dict, Optional, Union

from corrpca.components.config import Config, ConfigManager
from corrpca.math.corr import correlate
from corrpca.math.eigen import Eigensolver, eigendecompose
from corrpca.math.named_matrix import as_named_matrix
from corrpca.math.projection import project
from corrpca.math.selection import rank_and_select, validate_n_components
from corrpca.math.standardize import standardize

logger = logging.getLogger(__name__)


def run_pca(data: Any,
            n_components: int,
            label_column: Optional[Any] = None,
            solver: Union[None, str, Eigensolver] = None,
            config: Optional[Config] = None) -> Dict[str, Any]:
    """
    Run the full PCA pipeline.

    Args:
        data: Dataset (NamedMatrix, DataFrame or 2-D array)
        n_components: Number of components to keep, 1 <= k <= p
        label_column: Categorical column of a DataFrame to carry as row labels
        solver: Eigensolver backend name or instance
        config: Configuration (defaults to the shared config)

    Returns:
        Dictionary with 'standardized', 'correlation', 'eigen', 'report',
        'projection' and 'projected'
    """
    config = config or ConfigManager.get_config()

    dataset = as_named_matrix(data, label_column)
    # Reject a bad component count before any matrix is computed
    n_components = validate_n_components(n_components, dataset.shape[1])

    logger.info(f"Running PCA on {dataset.shape[0]} x {dataset.shape[1]} dataset, k={n_components}")

    standardized = standardize(dataset, zero_variance_tol=config.get('standardize.zero-variance-tol'))
    correlation = correlate(standardized, diagonal_tol=config.get('checks.diagonal-tol'))
    eigen = eigendecompose(correlation, solver=solver, config=config)
    report, projection = rank_and_select(
        eigen,
        n_components,
        decimals=config.get('report.decimals'),
        normalize=config.get('selection.normalize-signs')
    )
    projected = project(standardized, projection)

    return {
        'standardized': standardized,
        'correlation': correlation,
        'eigen': eigen,
        'report': report,
        'projection': projection,
        'projected': projected
    }


def _to_builtin(value: Any) -> Any:
    """Convert numpy scalars to plain Python values."""
    if isinstance(value, np.generic):
        return value.item()
    return value


def summarize(result: Dict[str, Any], label_name: str = 'label') -> Dict[str, Any]:
    """
    Convert a pipeline result into JSON/YAML-serializable structures.

    Args:
        result: Result of run_pca
        label_name: Key used for row labels in the projected rows

    Returns:
        Dictionary of plain lists and dicts
    """
    correlation = result['correlation']
    projection = result['projection']
    projected = result['projected']

    report = [
        {key: _to_builtin(val) for key, val in row.items()}
        for row in result['report'].reset_index(drop=True).to_dict(orient='records')
    ]

    labels = projected.labels
    scores = projected.values
    rows = []
    for i, name in enumerate(projected.rownames()):
        row = {'row': _to_builtin(name)}
        row.update({str(pc): float(score) for pc, score in zip(projected.colnames(), scores[i])})
        if labels is not None:
            row[label_name] = _to_builtin(labels.iloc[i])
        rows.append(row)

    return {
        'features': [str(f) for f in correlation.colnames()],
        'solver': result['eigen']['solver'],
        'correlation': correlation.values.tolist(),
        'report': report,
        'projection': {
            str(feature): dict(zip(projection.colnames(), map(float, loadings)))
            for feature, loadings in zip(projection.rownames(), projection.values)
        },
        'projected': rows
    }


class PCAPipeline:
    """
    Pipeline bound to a configuration and eigensolver.

    Holds no data between calls; every fit_transform recomputes from scratch.
    """

    def __init__(self,
                 n_components: int,
                 solver: Union[None, str, Eigensolver] = None,
                 config: Optional[Config] = None):
        """
        Args:
            n_components: Number of components to keep
            solver: Eigensolver backend name or instance
            config: Configuration (defaults to the shared config)
        """
        self.n_components = n_components
        self.solver = solver
        self.config = config or ConfigManager.get_config()

    def fit_transform(self, data: Any, label_column: Optional[Any] = None) -> Dict[str, Any]:
        """Run the pipeline on data; see run_pca."""
        return run_pca(data, self.n_components,
                       label_column=label_column,
                       solver=self.solver,
                       config=self.config)

    def __repr__(self) -> str:
        return f"PCAPipeline(n_components={self.n_components}, solver={self.solver!r})"
