"""
corrpca: correlation-matrix Principal Component Analysis.

Standardizes a numeric dataset, eigendecomposes its correlation matrix and
projects the data onto the leading principal components.
"""

__version__ = '0.1.0'

from corrpca.errors import PCAError, InputError, NumericalError, ConvergenceError, InvalidArgument
from corrpca.components.config import Config, ConfigManager
from corrpca.math.named_matrix import NamedMatrix
from corrpca.math.pipeline import PCAPipeline, run_pca
