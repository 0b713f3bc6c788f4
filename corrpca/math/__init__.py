"""
Numerical core of corrpca.

This module provides the five PCA stages (standardize, correlate,
eigendecompose, rank_and_select, project) and the pipeline that chains them.
"""

from corrpca.math.named_matrix import NamedMatrix
from corrpca.math.standardize import standardize
from corrpca.math.corr import correlate
from corrpca.math.eigen import Eigensolver, eigendecompose, get_eigensolver, register_eigensolver, unregister_eigensolver
from corrpca.math.selection import rank_and_select
from corrpca.math.projection import project, inverse_project
from corrpca.math.pipeline import PCAPipeline, run_pca
