"""Application configuration helpers."""

from __future__ import annotations

from .catalog import CatalogConfig, get_catalog_config
from .env import env_path, optional_env_var, require_env_vars
from .errors import (
    ConfigurationError,
    InvalidPathConfigurationError,
    MissingConfigurationError,
)
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "CatalogConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidPathConfigurationError",
    "MissingConfigurationError",
    "StorageConfig",
    "configure_logging",
    "env_path",
    "get_catalog_config",
    "get_database_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_vars",
]
