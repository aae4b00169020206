"""
Configuration package.

- `Config`: static settings from the environment (python-dotenv)
- `apiary.core.config.manager.ConfigManager`: balance tables from defaults + YAML

ConfigManager is not re-exported here because it depends on the logging
subsystem, which itself reads `Config`.
"""

from apiary.core.config.config import Config, Environment, StorageBackend

__all__ = ["Config", "Environment", "StorageBackend"]
