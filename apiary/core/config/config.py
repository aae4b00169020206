"""
Static configuration management for Apiary.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults and light validation. This module handles settings
that are fixed at application startup: environment, logging, storage backend
selection and connection strings.

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to static configuration values
- Validate critical settings on startup
- Track which values came from the environment versus defaults

Non-Responsibilities
--------------------
- Balance tables (handled by ConfigManager)
- Runtime configuration changes (except explicit reload)
- Secrets management (use environment variables)

Architecture Notes
------------------
- Singleton pattern via class attributes and class methods (no instantiation)
- `Config.reload()` re-reads the environment, which tests use after patching

Environment Variables
---------------------
- APIARY_ENV: Environment type (default: development)
- APIARY_LOG_LEVEL: Logging level (default: INFO)
- APIARY_LOG_JSON: Force JSON console logs (default: production only)
- APIARY_LOGS_DIR: Directory for the rotating file log (default: unset, no file)
- APIARY_CONFIG_DIR: Directory holding balance YAML files (default: config)
- APIARY_STORAGE_BACKEND: memory | redis | sql (default: memory)
- APIARY_REDIS_URL: Redis connection string (default: redis://localhost:6379/0)
- APIARY_DATABASE_URL: SQLAlchemy URL (default: sqlite:///apiary.db)
"""

import os
from enum import Enum
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("production") == Environment.PRODUCTION
        True
        >>> Environment.from_string("invalid") == Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.lower())
        except ValueError:
            # Structured logger is not initialized yet at this point
            import logging

            logging.warning(
                f"Unknown environment '{value}', defaulting to development"
            )
            return cls.DEVELOPMENT


class StorageBackend(Enum):
    """Persistence adapter selection."""

    MEMORY = "memory"
    REDIS = "redis"
    SQL = "sql"


class _ConfigLoadMetrics:
    """Tracks which configuration values came from the environment."""

    def __init__(self) -> None:
        self.env_vars_loaded: Dict[str, bool] = {}
        self.defaults_used: Dict[str, Any] = {}

    def record_env_load(self, key: str, from_env: bool, default: Any) -> None:
        self.env_vars_loaded[key] = from_env
        if from_env:
            self.defaults_used.pop(key, None)
        else:
            self.defaults_used[key] = default

    def get_summary(self) -> Dict[str, Any]:
        return {
            "total_configs": len(self.env_vars_loaded),
            "from_environment": sum(1 for v in self.env_vars_loaded.values() if v),
            "from_defaults": sum(1 for v in self.env_vars_loaded.values() if not v),
            "defaults_used": list(self.defaults_used.keys()),
        }


_metrics = _ConfigLoadMetrics()


def _env_str(key: str, default: Optional[str]) -> Optional[str]:
    raw = os.getenv(key)
    _metrics.record_env_load(key, raw is not None, default)
    return raw if raw is not None else default


def _env_bool(key: str, default: Optional[bool]) -> Optional[bool]:
    raw = os.getenv(key)
    _metrics.record_env_load(key, raw is not None, default)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """
    Centralized static configuration for Apiary.

    All values are loaded from environment variables with defaults. Call
    `Config.reload()` after changing the environment to re-read them.
    """

    ENVIRONMENT: Environment = Environment.DEVELOPMENT
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None
    LOG_COLORS: bool = True
    LOGS_DIR: Optional[str] = None
    CONFIG_DIR: str = "config"

    STORAGE_BACKEND: StorageBackend = StorageBackend.MEMORY
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_KEY_PREFIX: str = "apiary:"
    DATABASE_URL: str = "sqlite:///apiary.db"

    @classmethod
    def reload(cls) -> None:
        """Re-read every setting from the environment."""
        cls.ENVIRONMENT = Environment.from_string(
            _env_str("APIARY_ENV", "development") or "development"
        )
        cls.LOG_LEVEL = (_env_str("APIARY_LOG_LEVEL", "INFO") or "INFO").upper()
        cls.LOG_JSON = _env_bool("APIARY_LOG_JSON", None)
        cls.LOG_COLORS = bool(_env_bool("APIARY_LOG_COLORS", True))
        cls.LOGS_DIR = _env_str("APIARY_LOGS_DIR", None)
        cls.CONFIG_DIR = _env_str("APIARY_CONFIG_DIR", "config") or "config"

        backend = (_env_str("APIARY_STORAGE_BACKEND", "memory") or "memory").lower()
        try:
            cls.STORAGE_BACKEND = StorageBackend(backend)
        except ValueError:
            import logging

            logging.warning(
                f"Unknown storage backend '{backend}', defaulting to memory"
            )
            cls.STORAGE_BACKEND = StorageBackend.MEMORY

        cls.REDIS_URL = _env_str("APIARY_REDIS_URL", cls.REDIS_URL) or cls.REDIS_URL
        cls.REDIS_KEY_PREFIX = (
            _env_str("APIARY_REDIS_KEY_PREFIX", "apiary:") or "apiary:"
        )
        cls.DATABASE_URL = (
            _env_str("APIARY_DATABASE_URL", "sqlite:///apiary.db")
            or "sqlite:///apiary.db"
        )

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT == Environment.PRODUCTION

    @classmethod
    def get_load_summary(cls) -> Dict[str, Any]:
        """Return a summary of which settings came from the environment."""
        return _metrics.get_summary()


Config.reload()
