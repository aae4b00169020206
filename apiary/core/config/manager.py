"""
Balance configuration management for Apiary.

Purpose
-------
Provide dot-notation access to balance tables (rarity weights, perk effects,
reward profiles, hive thresholds). Values come from built-in defaults with
YAML files from the config directory deep-merged on top.

Responsibilities
----------------
- Recursively load every `*.yaml` / `*.yml` file under the config directory
- Deep-merge YAML documents over the supplied defaults
- Resolve dot-notation keys (`"rewards.profiles.memory-match"`)
- Accept in-process overrides (tests, tooling)
- Track simple read metrics

Non-Responsibilities
--------------------
- Environment/static settings (handled by Config)
- Persisting configuration changes

Design Notes
------------
- Instance-based so that each application session (and each test) owns its
  own configuration view.
- A missing config directory is not an error; defaults are used.
- A YAML file that fails to parse is skipped with a warning.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Union

import yaml

from apiary.core.logging.logger import get_logger

logger = get_logger(__name__)

_MISSING = object()


@dataclass
class ConfigMetrics:
    gets: int = 0
    misses: int = 0
    yaml_files_loaded: int = 0
    yaml_files_failed: int = 0


class ConfigManager:
    """
    Balance configuration with YAML overlays and dot-notation access.

    Examples
    --------
    >>> manager = ConfigManager(defaults={"hive": {"room_unlock_step": 5}})
    >>> manager.load()
    >>> manager.get("hive.room_unlock_step")
    5
    """

    def __init__(
        self,
        defaults: Optional[Mapping[str, Any]] = None,
        config_dir: Optional[Union[str, Path]] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._defaults: Dict[str, Any] = copy.deepcopy(dict(defaults or {}))
        self._config_dir = Path(config_dir) if config_dir is not None else None
        self._overrides: Dict[str, Any] = copy.deepcopy(dict(overrides or {}))
        self._cache: Dict[str, Any] = {}
        self._loaded = False
        self._metrics = ConfigMetrics()

    # =========================================================================
    # LOADING
    # =========================================================================

    @staticmethod
    def _deep_merge_dict(
        target: MutableMapping[str, Any],
        source: Mapping[str, Any],
    ) -> None:
        """Recursively merge `source` into `target` (in-place)."""
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                ConfigManager._deep_merge_dict(target[key], value)
            else:
                target[key] = copy.deepcopy(value)

    def _load_yaml_configs(self, merged: Dict[str, Any]) -> None:
        config_dir = self._config_dir
        if config_dir is None:
            return

        if not config_dir.exists():
            logger.warning(
                "Config directory not found; using built-in defaults only",
                extra={"config_dir": str(config_dir)},
            )
            return

        yaml_files = sorted(
            list(config_dir.rglob("*.yaml")) + list(config_dir.rglob("*.yml"))
        )

        for yaml_file in yaml_files:
            relative = str(yaml_file.relative_to(config_dir))
            try:
                with yaml_file.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle)
            except (OSError, yaml.YAMLError) as exc:
                self._metrics.yaml_files_failed += 1
                logger.warning(
                    "Failed to load YAML config",
                    extra={
                        "file": relative,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                )
                continue

            if isinstance(data, dict):
                self._deep_merge_dict(merged, data)
                self._metrics.yaml_files_loaded += 1
                logger.debug("Loaded YAML config", extra={"file": relative})
            elif data is not None:
                logger.warning(
                    "Ignoring non-dict YAML root object",
                    extra={"file": relative, "root_type": type(data).__name__},
                )

    def load(self) -> None:
        """Materialize defaults, YAML files and overrides into the cache."""
        merged = copy.deepcopy(self._defaults)
        self._load_yaml_configs(merged)
        self._deep_merge_dict(merged, self._overrides)
        self._cache = merged
        self._loaded = True

        logger.info(
            "Balance configuration loaded",
            extra={
                "yaml_file_count": self._metrics.yaml_files_loaded,
                "top_level_keys": len(self._cache),
            },
        )

    # =========================================================================
    # ACCESS
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value by dot-notation path.

        Returns `default` when any path segment is missing.
        """
        if not self._loaded:
            self.load()

        self._metrics.gets += 1
        value: Any = self._cache
        for part in key.split("."):
            if not isinstance(value, dict):
                self._metrics.misses += 1
                return default
            value = value.get(part, _MISSING)
            if value is _MISSING:
                self._metrics.misses += 1
                return default

        return copy.deepcopy(value) if value is not None else default

    def set_override(self, key: str, value: Any) -> None:
        """Override a single dot-notation key for this session."""
        node: Dict[str, Any] = {}
        root = node
        parts = key.split(".")
        for part in parts[:-1]:
            node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._deep_merge_dict(self._overrides, root)
        self._loaded = False

    def get_all_keys(self) -> List[str]:
        if not self._loaded:
            self.load()
        return list(self._cache.keys())

    def health_snapshot(self) -> Dict[str, Any]:
        return {
            "loaded": self._loaded,
            "config_dir": str(self._config_dir) if self._config_dir else None,
            "gets": self._metrics.gets,
            "misses": self._metrics.misses,
            "yaml_files_loaded": self._metrics.yaml_files_loaded,
            "yaml_files_failed": self._metrics.yaml_files_failed,
        }
