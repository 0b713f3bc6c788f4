"""
System components for corrpca.

This module provides the configuration layer shared by the pipeline and CLI.
"""

from corrpca.components.config import Config, ConfigManager
