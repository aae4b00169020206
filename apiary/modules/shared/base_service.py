"""
Base Service Foundation

Purpose
-------
Provides the foundational class for the hive engine's services. Services
implement business orchestration, read balance values from ConfigManager,
and publish events for observers.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Safe config access patterns
- Event emission helpers
- Validation helpers raising domain `ValidationError`

What this class does NOT do:
- Own persistence (adapters are injected where needed)
- Contain game-specific rules (those live in domain models and formulas)

Usage
-----
    class HiveService(BaseService):
        def __init__(self, persistence, config_manager, event_bus, logger):
            super().__init__(config_manager, event_bus, logger)
            self._persistence = persistence
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from apiary.modules.shared.exceptions import (
    ConfigurationError,
    ErrorSeverity,
    ValidationError,
    get_error_severity,
    is_transient_error,
)

if TYPE_CHECKING:
    from logging import Logger

    from apiary.core.config.manager import ConfigManager
    from apiary.core.event.bus import EventBus


_SEVERITY_LEVELS: Dict[ErrorSeverity, int] = {
    ErrorSeverity.DEBUG: logging.DEBUG,
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


class BaseService:
    """
    Base class for all domain services.

    Args:
        config_manager: Balance configuration manager
        event_bus: Event bus for observer notification
        logger: Logger instance
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config = config_manager
        self._events = event_bus
        self.log = logger

    def get_config(
        self, key: str, default: Optional[Any] = None, required: bool = False
    ) -> Any:
        """
        Safely retrieve configuration value.

        Raises:
            ConfigurationError: If required=True and key is missing
        """
        value = self._config.get(key, default)
        if required and value is None:
            raise ConfigurationError(
                key, f"Required configuration key '{key}' is missing"
            )
        return value

    def emit_event(
        self,
        event_type: str,
        data: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Publish an event for observers."""
        self._events.publish(event_type, {**data, **(context or {})})

    def log_operation(self, operation: str, **context: Any) -> None:
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

    def log_error(
        self,
        operation: str,
        error: Exception,
        **context: Any,
    ) -> None:
        """Log a failure at the level its severity maps to."""
        severity = get_error_severity(error)
        self.log.log(
            _SEVERITY_LEVELS[severity],
            f"Service error during {operation}: {str(error)}",
            extra={
                "operation": operation,
                "error_type": type(error).__name__,
                "error_message": str(error),
                "severity": severity.value,
                "retryable": is_transient_error(error),
                **context,
            },
        )

    def validate_non_negative_int(self, value: int, name: str) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(
                name, f"{name} must be a non-negative integer, got {value}"
            )

    def validate_identifier(self, value: str, name: str) -> None:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(name, f"{name} must be a non-empty string")
