"""
Error taxonomy for corrpca.

Every failure in the PCA pipeline surfaces as a subclass of PCAError so
callers can catch the whole family, while the mixed-in builtin bases keep
plain ``except ValueError`` handlers working.
"""


class PCAError(Exception):
    """Base class for all corrpca errors."""


class InputError(PCAError, ValueError):
    """
    The dataset cannot be analysed as supplied.

    Raised for non-numeric columns, missing or non-finite values, too few
    rows or features, and zero-variance columns.
    """


class NumericalError(PCAError, ArithmeticError):
    """A symmetry, diagonal, PSD, trace or orthonormality check failed."""


class ConvergenceError(NumericalError):
    """The eigensolver did not converge."""


class InvalidArgument(PCAError, ValueError):
    """An argument is outside its valid range (e.g. component count)."""
