"""
Service Container
=================

Purpose
-------
Centralized dependency injection container for the hive engine. Builds the
persistence adapter selected in `Config`, the balance ConfigManager and the
EventBus (unless provided), then wires every domain service.

Responsibilities
----------------
- Select and construct the persistence backend (memory, redis, sql)
- Initialize services in dependency order
- Restore the species catalog override and the stored hive at startup
- Release backend resources on shutdown

Non-Responsibilities
--------------------
- Business rules (delegated to domain models and services)
- Logging setup (call `setup_logging()` before initializing)

Architecture Notes
------------------
- Domain services follow the constructor pattern
  (..., config_manager, event_bus, logger)
- Redis and SQL adapters are imported only when selected, so the memory
  backend runs without those backends reachable
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Dict, Optional

from apiary.core.config.config import Config, StorageBackend
from apiary.core.config.manager import ConfigManager
from apiary.core.event.bus import EventBus
from apiary.core.logging.logger import get_logger
from apiary.core.persistence.base import PersistenceAdapter
from apiary.core.persistence.memory import InMemoryPersistence
from apiary.modules.catalog import SpeciesCatalogService
from apiary.modules.hive import HiveService
from apiary.modules.hive.service import Clock, epoch_millis
from apiary.modules.perks import PerkModifierService
from apiary.modules.rewards import PersistentProgressRecorder, RewardDistributorService
from apiary.modules.rewards.progress import ProgressRecorder
from apiary.modules.shared.constants import BALANCE_DEFAULTS

if TYPE_CHECKING:
    from logging import Logger


def build_persistence(backend: Optional[StorageBackend] = None) -> PersistenceAdapter:
    """Construct the adapter for `backend` (defaults to Config.STORAGE_BACKEND)."""
    backend = backend or Config.STORAGE_BACKEND

    if backend is StorageBackend.REDIS:
        from apiary.core.persistence.redis_store import RedisPersistence

        return RedisPersistence(url=Config.REDIS_URL, key_prefix=Config.REDIS_KEY_PREFIX)

    if backend is StorageBackend.SQL:
        from apiary.core.persistence.sql_store import SqlPersistence

        return SqlPersistence(url=Config.DATABASE_URL)

    return InMemoryPersistence()


class ServiceContainer:
    """
    Dependency injection container for all hive services.

    Usage:
        container = ServiceContainer()
        container.initialize()

        container.hive.initialize("user-1", "My Hive")
        container.rewards.complete_game("user-1", "memory-match", 80)
    """

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        event_bus: Optional[EventBus] = None,
        logger: Optional[Logger] = None,
        persistence: Optional[PersistenceAdapter] = None,
        progress: Optional[ProgressRecorder] = None,
        clock: Clock = epoch_millis,
    ) -> None:
        self._config_manager = config_manager or ConfigManager(
            defaults=BALANCE_DEFAULTS, config_dir=Config.CONFIG_DIR
        )
        self._event_bus = event_bus or EventBus()
        self._logger = logger or get_logger(__name__)
        self._persistence = persistence
        self._progress = progress
        self._clock = clock

        self._catalog: Optional[SpeciesCatalogService] = None
        self._hive: Optional[HiveService] = None
        self._perks: Optional[PerkModifierService] = None
        self._rewards: Optional[RewardDistributorService] = None

        self._initialized = False
        self._service_init_times: Dict[str, float] = {}

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def initialize(self, user_id: Optional[str] = None) -> None:
        """
        Build every service and restore persisted state.

        `user_id`, when given, restricts hive restoration to that user's hive.
        """
        if self._initialized:
            self._logger.warning("ServiceContainer already initialized")
            return

        init_start = time.perf_counter()
        self._logger.info("Service container initialization starting...")

        try:
            if self._persistence is None:
                self._persistence = build_persistence()
            if self._progress is None:
                self._progress = PersistentProgressRecorder(self._persistence, self._clock)

            self._catalog = self._create_service(
                "catalog", SpeciesCatalogService, persistence=self._persistence
            )
            self._hive = self._create_service(
                "hive", HiveService, persistence=self._persistence, clock=self._clock
            )
            self._perks = self._create_service(
                "perks", PerkModifierService, hive_service=self._hive, catalog=self._catalog
            )
            self._rewards = self._create_service(
                "rewards",
                RewardDistributorService,
                hive_service=self._hive,
                catalog=self._catalog,
                perk_service=self._perks,
                progress=self._progress,
                clock=self._clock,
            )

            self._catalog.load_override()
            self._hive.load(user_id)

            self._initialized = True
            self._logger.info(
                "Service container initialized successfully",
                extra={
                    "service_count": len(self._service_init_times),
                    "storage_backend": self._persistence.name,
                    "total_duration": round(time.perf_counter() - init_start, 3),
                },
            )
        except Exception as e:
            self._logger.critical(
                "Service container initialization failed",
                exc_info=True,
                extra={"error_message": str(e)},
            )
            raise

    def _create_service(self, name: str, cls: type, **dependencies: Any) -> Any:
        start = time.perf_counter()

        try:
            instance = cls(
                config_manager=self._config_manager,
                event_bus=self._event_bus,
                logger=get_logger(f"{cls.__module__}.{cls.__name__}"),
                **dependencies,
            )
        except Exception:
            self._logger.error(f"Failed to initialize {name}", exc_info=True)
            raise

        duration = time.perf_counter() - start
        self._service_init_times[name] = duration
        self._logger.debug(f"Initialized {name} in {duration:.3f}s")
        return instance

    def shutdown(self) -> None:
        if not self._initialized:
            return

        self._logger.info("Shutting down service container...")
        if self._persistence is not None:
            self._persistence.close()
        self._initialized = False
        self._logger.info("Service container shut down")

    def health_check(self) -> Dict[str, Any]:
        return {
            "initialized": self._initialized,
            "service_count": len(self._service_init_times),
            "storage_backend": self._persistence.name if self._persistence else None,
            "hive_loaded": bool(self._hive and self._hive.hive is not None),
            "config": self._config_manager.health_snapshot(),
        }

    # ========================================================================
    # Accessors
    # ========================================================================

    def _require(self, service: Any) -> Any:
        if not self._initialized or service is None:
            raise RuntimeError("ServiceContainer not initialized. Call initialize() first.")
        return service

    @property
    def config_manager(self) -> ConfigManager:
        return self._config_manager

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def catalog(self) -> SpeciesCatalogService:
        return self._require(self._catalog)

    @property
    def hive(self) -> HiveService:
        return self._require(self._hive)

    @property
    def perks(self) -> PerkModifierService:
        return self._require(self._perks)

    @property
    def rewards(self) -> RewardDistributorService:
        return self._require(self._rewards)

    @property
    def is_initialized(self) -> bool:
        return self._initialized
