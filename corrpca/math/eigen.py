"""
Eigendecomposition of symmetric matrices for corrpca.

This module provides a small family of interchangeable eigensolvers behind a
single ``eigendecompose`` operation, plus the invariant checks that every
decomposition must pass before the rest of the pipeline may use it.

Backends:
    numpy  -- LAPACK ``syevd`` through ``numpy.linalg.eigh`` (default)
    scipy  -- LAPACK ``syevr`` through ``scipy.linalg.eigh``
    jacobi -- cyclic Jacobi rotations, pure numpy

Eigenpairs come back in no particular order and the sign of each eigenvector
is implementation defined; the component selector sorts and normalizes them.
"""

import logging
import numpy as np
import scipy.linalg
from typing import Any, Dict, Optional, Tuple, Type, Union

from corrpca.components.config import Config, ConfigManager
from corrpca.errors import ConvergenceError, InvalidArgument, NumericalError
from corrpca.math.corr import is_symmetric
from corrpca.math.named_matrix import NamedMatrix

logger = logging.getLogger(__name__)


class Eigensolver:
    """
    Interface for a symmetric eigensolver.

    Subclasses implement ``eigendecompose`` and return ``(values, vectors)``
    where column ``i`` of ``vectors`` pairs with ``values[i]``.
    """

    name = 'abstract'

    # Whether a failed solve may be retried with a looser tolerance
    supports_tolerance = False

    @classmethod
    def from_config(cls, config: Config) -> 'Eigensolver':
        """Build a solver from configuration."""
        return cls()

    def eigendecompose(self, matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        raise NotImplementedError

    def with_tolerance(self, tolerance: float) -> 'Eigensolver':
        """Return a copy of this solver using the given tolerance."""
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class NumpyEigensolver(Eigensolver):
    """Symmetric eigensolver backed by ``numpy.linalg.eigh``."""

    name = 'numpy'

    def eigendecompose(self, matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        try:
            return np.linalg.eigh(matrix)
        except np.linalg.LinAlgError as e:
            raise ConvergenceError(f"numpy eigh failed: {e}") from e


class ScipyEigensolver(Eigensolver):
    """Symmetric eigensolver backed by ``scipy.linalg.eigh``."""

    name = 'scipy'

    def eigendecompose(self, matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        try:
            return scipy.linalg.eigh(matrix, check_finite=False)
        except np.linalg.LinAlgError as e:
            raise ConvergenceError(f"scipy eigh failed: {e}") from e


def _off_diagonal_norm(a: np.ndarray) -> float:
    """Frobenius norm of the off-diagonal part of a square matrix."""
    return float(np.linalg.norm(a - np.diag(np.diag(a))))


class JacobiEigensolver(Eigensolver):
    """
    Cyclic Jacobi eigenvalue algorithm.

    Each sweep visits every (p, q) pair above the diagonal and applies the
    plane rotation that zeroes ``a[p, q]``. The accumulated rotations are the
    eigenvectors. Rotations are orthogonal, so the Frobenius norm and trace are
    preserved and the result is orthonormal by construction. Suited to the
    small dense matrices PCA produces.
    """

    name = 'jacobi'
    supports_tolerance = True

    def __init__(self, max_sweeps: int = 100, tolerance: float = 1e-12):
        """
        Args:
            max_sweeps: Maximum number of full sweeps
            tolerance: Converged once the off-diagonal norm is at most
                tolerance times the matrix norm
        """
        self.max_sweeps = max_sweeps
        self.tolerance = tolerance

    @classmethod
    def from_config(cls, config: Config) -> 'JacobiEigensolver':
        return cls(max_sweeps=config.get('eigensolver.max-sweeps', 100),
                   tolerance=config.get('eigensolver.tolerance', 1e-12))

    def with_tolerance(self, tolerance: float) -> 'JacobiEigensolver':
        return JacobiEigensolver(max_sweeps=self.max_sweeps, tolerance=tolerance)

    @staticmethod
    def _rotate(a: np.ndarray, v: np.ndarray, p: int, q: int) -> None:
        """Apply the rotation that zeroes a[p, q], in place."""
        apq = a[p, q]
        theta = (a[q, q] - a[p, p]) / (2.0 * apq)
        # Smaller root of t^2 + 2 theta t - 1 = 0 keeps the rotation angle <= pi/4
        t = (1.0 if theta >= 0 else -1.0) / (abs(theta) + np.sqrt(theta * theta + 1.0))
        c = 1.0 / np.sqrt(t * t + 1.0)
        s = t * c

        col_p, col_q = a[:, p].copy(), a[:, q].copy()
        a[:, p] = c * col_p - s * col_q
        a[:, q] = s * col_p + c * col_q

        row_p, row_q = a[p, :].copy(), a[q, :].copy()
        a[p, :] = c * row_p - s * row_q
        a[q, :] = s * row_p + c * row_q

        a[p, q] = a[q, p] = 0.0

        vec_p, vec_q = v[:, p].copy(), v[:, q].copy()
        v[:, p] = c * vec_p - s * vec_q
        v[:, q] = s * vec_p + c * vec_q

    def eigendecompose(self, matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        a = np.array(matrix, dtype=np.float64)
        n = a.shape[0]
        v = np.eye(n)

        threshold = self.tolerance * float(np.linalg.norm(a))

        for sweep in range(self.max_sweeps):
            off = _off_diagonal_norm(a)
            if off <= threshold:
                logger.debug(f"Jacobi converged after {sweep} sweep(s), off-diagonal norm {off:.3g}")
                return np.diag(a).copy(), v

            for p in range(n - 1):
                for q in range(p + 1, n):
                    if a[p, q] != 0.0:
                        self._rotate(a, v, p, q)

        off = _off_diagonal_norm(a)
        if off <= threshold:
            return np.diag(a).copy(), v

        raise ConvergenceError(
            f"Jacobi did not converge in {self.max_sweeps} sweeps "
            f"(off-diagonal norm {off:.3g} > {threshold:.3g})"
        )

    def __repr__(self) -> str:
        return f"JacobiEigensolver(max_sweeps={self.max_sweeps}, tolerance={self.tolerance})"


_SOLVERS: Dict[str, Type[Eigensolver]] = {}


def register_eigensolver(name: str, solver_cls: Type[Eigensolver]) -> None:
    """
    Register an eigensolver class under a backend name.

    Args:
        name: Backend name used in configuration
        solver_cls: Eigensolver subclass
    """
    if not (isinstance(solver_cls, type) and issubclass(solver_cls, Eigensolver)):
        raise InvalidArgument(f"{solver_cls!r} is not an Eigensolver subclass")
    _SOLVERS[name.lower()] = solver_cls


def unregister_eigensolver(name: str) -> None:
    """Remove a backend from the registry; unknown names are ignored."""
    _SOLVERS.pop(name.lower(), None)


def available_eigensolvers():
    """Names of the registered backends."""
    return sorted(_SOLVERS)


def get_eigensolver(name: str, config: Optional[Config] = None) -> Eigensolver:
    """
    Instantiate a registered eigensolver.

    Args:
        name: Backend name
        config: Configuration for solver parameters (defaults to the shared config)

    Returns:
        Eigensolver instance

    Raises:
        InvalidArgument: for an unknown backend name
    """
    solver_cls = _SOLVERS.get(str(name).lower())
    if solver_cls is None:
        raise InvalidArgument(
            f"Unknown eigensolver '{name}'; available: {', '.join(available_eigensolvers())}"
        )
    return solver_cls.from_config(config or ConfigManager.get_config())


register_eigensolver('numpy', NumpyEigensolver)
register_eigensolver('scipy', ScipyEigensolver)
register_eigensolver('jacobi', JacobiEigensolver)


def _resolve_solver(solver: Union[None, str, Eigensolver], config: Config) -> Eigensolver:
    if solver is None:
        return get_eigensolver(config.get('eigensolver.backend', 'numpy'), config)
    if isinstance(solver, str):
        return get_eigensolver(solver, config)
    if isinstance(solver, Eigensolver):
        return solver
    raise InvalidArgument(f"Expected an Eigensolver or backend name, got {solver!r}")


def check_decomposition(matrix: np.ndarray,
                        values: np.ndarray,
                        vectors: np.ndarray,
                        config: Config) -> np.ndarray:
    """
    Verify the invariants of a symmetric PSD eigendecomposition.

    Args:
        matrix: The decomposed matrix
        values: Eigenvalues
        vectors: Eigenvectors as columns
        config: Configuration with the check tolerances

    Returns:
        Real eigenvalues with round-off negatives clipped to zero

    Raises:
        NumericalError: if any invariant fails
    """
    n = matrix.shape[0]
    values = np.asarray(values)
    vectors = np.asarray(vectors)

    if values.shape != (n,) or vectors.shape != (n, n):
        raise NumericalError(
            f"Solver returned shapes {values.shape} and {vectors.shape} for a {n} x {n} matrix"
        )

    if np.iscomplexobj(values):
        if np.max(np.abs(values.imag)) > config.get('checks.symmetry-tol'):
            raise NumericalError("Eigenvalues are not real")
        values = values.real
    if np.iscomplexobj(vectors):
        raise NumericalError("Eigenvectors are not real")

    values = values.astype(np.float64)
    trace = float(np.trace(matrix))
    scale = max(1.0, abs(trace))

    psd_tol = config.get('checks.psd-tol') * scale
    if values.min() < -psd_tol:
        raise NumericalError(f"Matrix is not positive semi-definite (eigenvalue {values.min():.3g})")
    values = np.where(values < 0.0, 0.0, values)

    trace_tol = config.get('checks.trace-tol') * scale
    if abs(values.sum() - trace) > trace_tol:
        raise NumericalError(f"Eigenvalue sum {values.sum():.12g} does not match trace {trace:.12g}")

    gram = vectors.T @ vectors
    if not np.allclose(gram, np.eye(n), rtol=0.0, atol=config.get('checks.orthonormal-tol')):
        raise NumericalError("Eigenvectors are not orthonormal")

    return values


def eigendecompose(corr: Union[NamedMatrix, np.ndarray],
                   solver: Union[None, str, Eigensolver] = None,
                   config: Optional[Config] = None) -> Dict[str, Any]:
    """
    Eigendecompose a symmetric positive semi-definite matrix.

    Args:
        corr: p x p correlation matrix
        solver: Backend name or Eigensolver instance (defaults to the
            configured backend)
        config: Configuration (defaults to the shared config)

    Returns:
        Dictionary with 'eigenvalues' (p,), 'eigenvectors' (p x p, columns),
        'features' (names) and 'solver' (backend name). Pairs are unordered.

    Raises:
        NumericalError: if the matrix is not symmetric or a check fails
        ConvergenceError: if the solver fails, including after one retry
    """
    config = config or ConfigManager.get_config()

    if isinstance(corr, NamedMatrix):
        features = corr.colnames()
        matrix = corr.values.astype(np.float64)
    else:
        matrix = np.asarray(corr, dtype=np.float64)
        features = list(range(matrix.shape[-1])) if matrix.ndim == 2 else []

    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise NumericalError(f"Expected a square matrix, got shape {matrix.shape}")
    if not np.isfinite(matrix).all():
        raise NumericalError("Matrix contains non-finite values")
    if not is_symmetric(matrix, config.get('checks.symmetry-tol')):
        raise NumericalError("Matrix is not symmetric within tolerance")

    solver = _resolve_solver(solver, config)
    logger.debug(f"Eigendecomposing {matrix.shape[0]} x {matrix.shape[0]} matrix with {solver!r}")

    try:
        values, vectors = solver.eigendecompose(matrix)
    except ConvergenceError as e:
        if not solver.supports_tolerance:
            raise
        retry_tol = config.get('eigensolver.retry-tolerance')
        logger.warning(f"{e}; retrying once with tolerance {retry_tol:g}")
        values, vectors = solver.with_tolerance(retry_tol).eigendecompose(matrix)

    values = check_decomposition(matrix, values, vectors, config)

    return {
        'eigenvalues': values,
        'eigenvectors': np.asarray(vectors, dtype=np.float64),
        'features': features,
        'solver': solver.name
    }
