"""
Main entry point for corrpca.

Runs the PCA pipeline on a CSV file (or the bundled iris data) and prints the
correlation matrix, variance report, loadings and projected coordinates.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

import pandas as pd
import yaml

from corrpca.components.config import ConfigManager, load_config_file
from corrpca.errors import PCAError
from corrpca.math.eigen import available_eigensolvers
from corrpca.math.pipeline import run_pca, summarize


def setup_logging(level: str = 'WARNING') -> None:
    """
    Set up logging.

    Args:
        level: Logging level
    """
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler()
        ]
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(numeric_level)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description='Correlation-matrix PCA')

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '--input',
        help='CSV file with one row per observation'
    )
    source.add_argument(
        '--iris',
        action='store_true',
        help='Use the bundled iris dataset'
    )

    parser.add_argument(
        '--label-column',
        help='Categorical column carried through as row labels'
    )

    parser.add_argument(
        '-k', '--components',
        type=int,
        required=True,
        help='Number of principal components to keep'
    )

    parser.add_argument(
        '--solver',
        choices=available_eigensolvers(),
        help='Eigensolver backend'
    )

    parser.add_argument(
        '--config',
        help='Path to configuration file'
    )

    parser.add_argument(
        '--format',
        default='text',
        choices=['text', 'json', 'yaml'],
        help='Output format'
    )

    parser.add_argument(
        '--head',
        type=int,
        default=6,
        help='Projected rows to show in text output'
    )

    parser.add_argument(
        '--log-level',
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (defaults to logging.level in the configuration)'
    )

    return parser.parse_args(argv)


def load_data(args: argparse.Namespace) -> pd.DataFrame:
    """
    Load the input table.

    Args:
        args: Parsed arguments

    Returns:
        DataFrame of observations
    """
    if args.iris:
        from corrpca.datasets import load_iris_frame
        if args.label_column is None:
            args.label_column = 'Species'
        return load_iris_frame()

    return pd.read_csv(args.input)


def render_text(result: dict, head: int) -> str:
    """
    Render a pipeline result as plain text tables.

    Args:
        result: Result of run_pca
        head: Number of projected rows to include

    Returns:
        Printable text
    """
    with pd.option_context('display.width', 120, 'display.float_format', '{:.4f}'.format):
        sections = [
            ('Correlation matrix', result['correlation'].matrix),
            ('Variance explained', result['report']),
            ('Projection matrix', result['projection'].matrix),
            ('Projected data', result['projected'].to_frame().head(head)),
        ]
        return '\n\n'.join(f"{title}:\n{table.to_string()}" for title, table in sections)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.
    """
    # Parse arguments
    args = parse_args(argv)

    try:
        # Load configuration from file if provided
        overrides = load_config_file(args.config) if args.config else {}
        config = ConfigManager.get_config(overrides)

        # Command line level wins over the configured one
        setup_logging(args.log_level or config.get('logging.level', 'warning'))

        data = load_data(args)
        result = run_pca(data, args.components,
                         label_column=args.label_column,
                         solver=args.solver,
                         config=config)
    except (PCAError, KeyError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.format == 'json':
        print(json.dumps(summarize(result), indent=2))
    elif args.format == 'yaml':
        print(yaml.safe_dump(summarize(result), sort_keys=False))
    else:
        print(render_text(result, args.head))

    return 0


if __name__ == '__main__':
    sys.exit(main())
