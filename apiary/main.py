"""
Apiary - Application Entry Point
================================

Bootstrap
---------
- Logging setup
- Config validation
- ConfigManager initialization
- Service container initialization
- Graceful shutdown

Running the module starts the engine against the configured backend, logs
a health snapshot and shuts down. Host applications call `startup()` and
`shutdown()` themselves.
"""

from __future__ import annotations

import sys
from typing import Optional

from apiary.core.config.config import Config
from apiary.core.config.manager import ConfigManager
from apiary.core.event.bus import EventBus
from apiary.core.logging.logger import get_logger, setup_logging, shutdown_logging
from apiary.core.services.container import ServiceContainer
from apiary.modules.shared.constants import BALANCE_DEFAULTS

logger = get_logger(__name__)


def startup(user_id: Optional[str] = None) -> ServiceContainer:
    """Initialize infrastructure and services, restoring persisted state."""
    setup_logging()
    logger.info("========== APIARY INITIALIZATION START ==========")
    logger.info("Configuration loaded", extra=Config.get_load_summary())

    try:
        config_manager = ConfigManager(defaults=BALANCE_DEFAULTS, config_dir=Config.CONFIG_DIR)
        config_manager.load()
        logger.info("✓ Config manager initialized")
    except Exception as exc:
        logger.critical(f"Config manager initialization failed: {exc}", exc_info=True)
        raise

    try:
        container = ServiceContainer(
            config_manager=config_manager,
            event_bus=EventBus(),
            logger=get_logger("apiary.core.services.container"),
        )
        container.initialize(user_id)
        logger.info("✓ Service container initialized")
    except Exception as exc:
        logger.critical(f"Service container initialization failed: {exc}", exc_info=True)
        raise

    logger.info("========== APIARY INITIALIZED SUCCESSFULLY ==========")
    return container


def shutdown(container: Optional[ServiceContainer]) -> None:
    logger.info("========== APIARY SHUTDOWN START ==========")
    if container is not None:
        try:
            container.shutdown()
            logger.info("✓ Service container shut down")
        except Exception as exc:
            logger.error(f"Service container shutdown error: {exc}", exc_info=True)
    logger.info("========== SHUTDOWN COMPLETE ==========")
    shutdown_logging()


def main() -> int:
    container: Optional[ServiceContainer] = None
    try:
        container = startup()
        logger.info("Health check", extra=container.health_check())
        return 0
    except KeyboardInterrupt:
        logger.info("Manual shutdown via keyboard interrupt.")
        return 0
    except Exception as exc:
        logger.critical(f"Fatal startup error: {exc}", exc_info=True)
        return 1
    finally:
        shutdown(container)


if __name__ == "__main__":
    sys.exit(main())
