"""Application configuration helpers."""

from __future__ import annotations

from .env import int_env_var, str_env_var
from .errors import ConfigurationError
from .logging import configure_logging
from .review import DEFAULT_ACTOR, ReviewConfig, get_review_config
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)

__all__ = [
    "DEFAULT_ACTOR",
    "ConfigurationError",
    "DatabaseConfig",
    "ReviewConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_database_uri",
    "get_review_config",
    "get_storage_config",
    "int_env_var",
    "str_env_var",
]
