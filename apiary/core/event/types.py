"""
Core event types for the Apiary EventBus.

Priority Levels
---------------
- CRITICAL (0): state integrity listeners, run first.
- HIGH (10): game logic reacting to progression.
- NORMAL (50): UI refresh and notifications.
- LOW (100): logging and analytics.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

# Simple dict structure that should be JSON-serializable
EventPayload = dict[str, Any]


class ListenerPriority(Enum):
    """Priority levels for event listeners (lower value runs earlier)."""

    CRITICAL = 0
    HIGH = 10
    NORMAL = 50
    LOW = 100


CallbackType = Callable[[EventPayload], Any]


@dataclass(frozen=True)
class EventListener:
    """
    Represents a registered event listener.

    Attributes
    ----------
    callback:
        Callable invoked with the event payload.
    priority:
        ListenerPriority determining execution order.
    identifier:
        Unique string identifier for deduplication and unsubscription.
    once:
        If True, the listener is removed before its first execution.
    """

    callback: CallbackType
    priority: ListenerPriority
    identifier: str
    once: bool = False

    @classmethod
    def from_callback(
        cls,
        event_name: str,
        callback: CallbackType,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
    ) -> "EventListener":
        if identifier is None:
            module = getattr(callback, "__module__", "unknown")
            qualname = getattr(callback, "__qualname__", repr(callback))
            identifier = f"{module}.{qualname}@{event_name}"
        return cls(
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
        )
