"""
Runtime Configuration Module

Provides configuration loading and management for tree construction.
"""

from .runtime import (
    DEFAULT_CONFIG_PATHS,
    ENV_PREFIX,
    LoggingConfig,
    RuntimeConfig,
    TreeConfig,
    get_default_config_template,
    load_config,
)

__all__ = [
    "DEFAULT_CONFIG_PATHS",
    "ENV_PREFIX",
    "LoggingConfig",
    "RuntimeConfig",
    "TreeConfig",
    "get_default_config_template",
    "load_config",
]
