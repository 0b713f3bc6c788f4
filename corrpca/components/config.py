"""
Configuration management for corrpca.

This module provides functionality for managing configuration,
including loading from environment variables, files and default values.
"""

import os
import json
import logging
import threading
from typing import Dict, Optional, Any
from copy import deepcopy
import yaml

# Set up logging
logger = logging.getLogger(__name__)


def to_int(value: Any) -> Optional[int]:
    """
    Convert a value to an integer.

    Args:
        value: Value to convert

    Returns:
        Integer value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def to_float(value: Any) -> Optional[float]:
    """
    Convert a value to a float.

    Args:
        value: Value to convert

    Returns:
        Float value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def to_bool(value: Any) -> Optional[bool]:
    """
    Convert a value to a boolean.

    Args:
        value: Value to convert

    Returns:
        Boolean value, or None if conversion failed
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return value

    if isinstance(value, (int, float)):
        return bool(value)

    if isinstance(value, str):
        value = value.lower().strip()
        if value in ('true', 'yes', 'y', '1', 't'):
            return True
        if value in ('false', 'no', 'n', '0', 'f'):
            return False

    return None


def _env(name: str, convert, default: Any) -> Any:
    """Read an environment variable, falling back to default when unset or unparseable."""
    if name not in os.environ:
        return default

    value = convert(os.environ[name])
    if value is None:
        logger.warning(f"Ignoring unparseable value for {name}: {os.environ[name]!r}")
        return default
    return value


class Config:
    """
    Configuration manager for corrpca.
    """

    def __init__(self, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            overrides: Optional configuration overrides
        """
        self._lock = threading.RLock()
        self._config = {}
        self._initialized = False

        # Load configuration
        self.load_config(overrides)

    def load_config(self, overrides: Optional[Dict[str, Any]] = None) -> None:
        """
        Load configuration from all sources.

        Args:
            overrides: Optional configuration overrides
        """
        with self._lock:
            # Start with default configuration
            config = self._get_defaults()

            # Apply environment variables
            config = self._apply_env_vars(config)

            # Apply overrides
            if overrides:
                config = self._apply_overrides(config, overrides)

            # Apply inferred values
            config = self._apply_inferred_values(config)

            # Store configuration
            self._config = config
            self._initialized = True

            logger.debug("Configuration loaded")

    def _get_defaults(self) -> Dict[str, Any]:
        """
        Get default configuration values.

        Returns:
            Default configuration
        """
        return {
            # Eigensolver backend
            'eigensolver': {
                'backend': 'numpy',
                'max-sweeps': 100,         # jacobi only
                'tolerance': 1e-12,        # relative off-diagonal norm
                'retry-tolerance': 1e-9    # used once after a convergence failure
            },

            # Runtime invariant checks
            'checks': {
                'symmetry-tol': 1e-8,
                'diagonal-tol': 1e-8,
                'trace-tol': 1e-8,         # scaled by p
                'psd-tol': 1e-10,          # scaled by p
                'orthonormal-tol': 1e-8
            },

            'standardize': {
                'zero-variance-tol': 1e-12
            },

            'report': {
                'decimals': 2
            },

            'selection': {
                'normalize-signs': True
            },

            # Logging
            'logging': {
                'level': 'warning'
            }
        }

    def _apply_env_vars(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variables to configuration.

        Args:
            config: Current configuration

        Returns:
            Updated configuration
        """
        # Make a copy
        config = deepcopy(config)

        # Eigensolver
        solver = config['eigensolver']
        solver['backend'] = os.environ.get('PCA_EIGENSOLVER', solver['backend']).lower()
        solver['max-sweeps'] = _env('PCA_JACOBI_MAX_SWEEPS', to_int, solver['max-sweeps'])
        solver['tolerance'] = _env('PCA_EIGEN_TOL', to_float, solver['tolerance'])
        solver['retry-tolerance'] = _env('PCA_EIGEN_RETRY_TOL', to_float, solver['retry-tolerance'])

        # Checks
        checks = config['checks']
        checks['symmetry-tol'] = _env('PCA_SYMMETRY_TOL', to_float, checks['symmetry-tol'])
        checks['diagonal-tol'] = _env('PCA_DIAGONAL_TOL', to_float, checks['diagonal-tol'])
        checks['trace-tol'] = _env('PCA_TRACE_TOL', to_float, checks['trace-tol'])
        checks['psd-tol'] = _env('PCA_PSD_TOL', to_float, checks['psd-tol'])
        checks['orthonormal-tol'] = _env('PCA_ORTHONORMAL_TOL', to_float, checks['orthonormal-tol'])

        # Report and selection
        config['report']['decimals'] = _env('PCA_REPORT_DECIMALS', to_int, config['report']['decimals'])
        config['selection']['normalize-signs'] = _env('PCA_NORMALIZE_SIGNS', to_bool,
                                                      config['selection']['normalize-signs'])

        # Logging
        config['logging']['level'] = os.environ.get('LOG_LEVEL', config['logging']['level']).lower()

        return config

    def _apply_overrides(self, config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply configuration overrides.

        Args:
            config: Current configuration
            overrides: Configuration overrides

        Returns:
            Updated configuration
        """
        # Make a copy
        config = deepcopy(config)

        # Helper function for deep update
        def deep_update(d, u):
            for k, v in u.items():
                if isinstance(v, dict) and k in d and isinstance(d[k], dict):
                    d[k] = deep_update(d[k], v)
                else:
                    d[k] = v
            return d

        # Apply overrides
        return deep_update(config, deepcopy(overrides))

    def _apply_inferred_values(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply inferred configuration values.

        Args:
            config: Current configuration

        Returns:
            Updated configuration
        """
        # Make a copy
        config = deepcopy(config)

        config['eigensolver']['backend'] = str(config['eigensolver']['backend']).lower()

        # The retry tolerance is only useful when it is looser than the first attempt
        solver = config['eigensolver']
        if solver['retry-tolerance'] < solver['tolerance']:
            solver['retry-tolerance'] = solver['tolerance']

        return config

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            path: Configuration path (dot-separated)
            default: Default value if not found

        Returns:
            Configuration value, or default if not found
        """
        if not self._initialized:
            self.load_config()

        # Split path into components
        components = path.split('.')

        # Start with full configuration
        value = self._config

        # Traverse path
        for component in components:
            if isinstance(value, dict) and component in value:
                value = value[component]
            else:
                return default

        return value

    def set(self, path: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            path: Configuration path (dot-separated)
            value: Configuration value
        """
        with self._lock:
            if not self._initialized:
                self.load_config()

            # Split path into components
            components = path.split('.')

            # Start with full configuration
            config = self._config

            # Traverse path
            for component in components[:-1]:
                if component not in config:
                    config[component] = {}

                config = config[component]

            # Set value
            config[components[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to a dictionary.

        Returns:
            Configuration dictionary
        """
        if not self._initialized:
            self.load_config()

        return deepcopy(self._config)

    def save_to_file(self, filepath: str) -> None:
        """
        Save configuration to a file.

        Args:
            filepath: Path to save configuration
        """
        if not self._initialized:
            self.load_config()

        # Determine file format from extension
        if filepath.endswith('.json'):
            with open(filepath, 'w') as f:
                json.dump(self._config, f, indent=2)
        elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
            with open(filepath, 'w') as f:
                yaml.dump(self._config, f, default_flow_style=False)
        else:
            raise ValueError(f"Unsupported file format: {filepath}")

    def load_from_file(self, filepath: str) -> None:
        """
        Load configuration from a file.

        Args:
            filepath: Path to load configuration from
        """
        self.load_config(load_config_file(filepath))


def load_config_file(filepath: str) -> Dict[str, Any]:
    """
    Load configuration overrides from a JSON or YAML file.

    Args:
        filepath: Path to configuration file

    Returns:
        Configuration dictionary
    """
    if filepath.endswith('.json'):
        with open(filepath, 'r') as f:
            return json.load(f)
    elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
        with open(filepath, 'r') as f:
            return yaml.safe_load(f) or {}
    else:
        raise ValueError(f"Unsupported configuration file format: {filepath}")


class ConfigManager:
    """
    Singleton manager for configuration.
    """

    _instance = None
    _lock = threading.RLock()

    @classmethod
    def get_config(cls, overrides: Optional[Dict[str, Any]] = None) -> Config:
        """
        Get the configuration instance.

        Args:
            overrides: Optional configuration overrides

        Returns:
            Config instance
        """
        with cls._lock:
            if cls._instance is None:
                cls._instance = Config(overrides)
            elif overrides:
                cls._instance.load_config(overrides)

            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the shared instance so the next call reloads from scratch."""
        with cls._lock:
            cls._instance = None
