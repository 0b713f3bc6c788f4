"""
Sample datasets for corrpca.
"""

import pandas as pd
from sklearn import datasets as sk_datasets

from corrpca.math.named_matrix import NamedMatrix

IRIS_FEATURES = ['Sepal.Length', 'Sepal.Width', 'Petal.Length', 'Petal.Width']


def load_iris_frame() -> pd.DataFrame:
    """
    Fisher's iris measurements with a 'Species' column.

    Read from the copy bundled with scikit-learn, so no network access is
    needed.
    """
    bunch = sk_datasets.load_iris()
    frame = pd.DataFrame(bunch.data, columns=IRIS_FEATURES)
    frame['Species'] = pd.Categorical.from_codes(bunch.target, bunch.target_names)
    return frame


def load_iris() -> NamedMatrix:
    """Iris as a 150 x 4 NamedMatrix labelled by species."""
    return NamedMatrix.from_frame(load_iris_frame(), label_column='Species')
