"""
Setup script for corrpca package.
"""

from setuptools import setup, find_packages

setup(
    name="corrpca",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        # Core numerical dependencies
        "numpy>=1.20.0",
        "pandas>=1.3.0",
        "scipy>=1.7.0",

        # Bundled sample data
        "scikit-learn>=1.0.0",

        # Utilities
        "pyyaml>=6.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=6.0.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'corrpca=corrpca.__main__:main',
        ],
    },
    description="Principal Component Analysis over the correlation matrix of a numeric dataset",
    keywords="pca, correlation, eigendecomposition, dimensionality reduction",
    python_requires=">=3.8",
)
