"""
Apiary EventBus: synchronous pub/sub for hive observers.

Purpose
-------
Lets the hive store and reward distributor announce state changes
("hive.updated", "hive.egg_hatched", "reward.distributed") to observers such
as UI views, analytics, or achievement tracking without coupling to them.

Responsibilities
----------------
- Register/unregister listeners with priorities
- Publish events to all matching listeners (exact + wildcard)
- Run listeners in priority order, synchronously
- Error isolation (one failing listener never blocks others)
- Simple publish/failure counters for introspection

Design Decisions
----------------
- **Instance-based**: each application session (and each test) owns a bus
- **Synchronous**: every hive mutation is synchronous, so listeners run
  inline before `publish` returns
- **Wildcard support**: "hive.*" matches every "hive." event, "*" matches all
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, List, Optional

from apiary.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)
from apiary.core.logging.logger import get_logger

logger = get_logger(__name__)


class EventBus:
    """
    Synchronous EventBus with priority ordering and wildcard routing.

    Examples
    --------
    >>> bus = EventBus()
    >>> bus.subscribe("hive.updated", refresh_view)
    >>> bus.publish("hive.updated", {"user_id": "u1"})
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[EventListener]] = defaultdict(list)
        self._published: Dict[str, int] = defaultdict(int)
        self._failures: Dict[str, int] = defaultdict(int)

    # ------------------------------------------------------------------ #
    # Subscription API
    # ------------------------------------------------------------------ #

    def subscribe(
        self,
        event_name: str,
        callback: CallbackType,
        *,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
    ) -> str:
        """
        Subscribe a callback to an event or wildcard pattern.

        Returns the listener identifier for later unsubscription. Subscribing
        the same identifier twice to the same event is a no-op.
        """
        if not callable(callback):
            raise ValueError(f"Listener for {event_name!r} must be callable")

        listener = EventListener.from_callback(
            event_name=event_name,
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
        )

        existing = self._listeners[event_name]
        if any(item.identifier == listener.identifier for item in existing):
            logger.warning(
                "EventBus: duplicate listener prevented",
                extra={"event_name": event_name, "listener_id": listener.identifier},
            )
            return listener.identifier

        existing.append(listener)
        existing.sort(key=lambda item: item.priority.value)

        logger.debug(
            "EventBus: subscribed listener",
            extra={
                "event_name": event_name,
                "listener_id": listener.identifier,
                "priority": listener.priority.name,
                "once": listener.once,
            },
        )
        return listener.identifier

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        listeners = self._listeners.get(event_name, [])
        remaining = [item for item in listeners if item.identifier != identifier]
        removed = len(remaining) != len(listeners)
        if removed:
            self._listeners[event_name] = remaining
        return removed

    def clear(self) -> None:
        self._listeners.clear()

    # ------------------------------------------------------------------ #
    # Publish API
    # ------------------------------------------------------------------ #

    def _matching(self, event_name: str) -> List[tuple[str, EventListener]]:
        matches: List[tuple[str, EventListener]] = []
        for pattern, listeners in self._listeners.items():
            if pattern == event_name or pattern == "*" or (
                pattern.endswith(".*") and event_name.startswith(pattern[:-1])
            ):
                matches.extend((pattern, listener) for listener in listeners)
        matches.sort(key=lambda item: item[1].priority.value)
        return matches

    def publish(self, event_name: str, data: EventPayload) -> List[Any]:
        """
        Publish an event to every matching listener.

        Listener exceptions are logged and counted, never propagated.
        Returns the results of the listeners that completed.
        """
        self._published[event_name] += 1

        matches = self._matching(event_name)
        if not matches:
            logger.debug(
                "EventBus: no listeners for event", extra={"event_name": event_name}
            )
            return []

        for pattern, listener in matches:
            if listener.once:
                self.unsubscribe(pattern, listener.identifier)

        results: List[Any] = []
        for _, listener in matches:
            try:
                results.append(listener.callback(data))
            except Exception as exc:
                self._failures[event_name] += 1
                logger.error(
                    "EventBus: listener failed",
                    extra={
                        "event_name": event_name,
                        "listener_id": listener.identifier,
                        "error_type": type(exc).__name__,
                        "error_message": str(exc),
                    },
                    exc_info=True,
                )
        return results

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_listener_count(self, event_name: Optional[str] = None) -> int:
        if event_name is not None:
            return len(self._listeners.get(event_name, []))
        return sum(len(items) for items in self._listeners.values())

    def get_metrics_summary(self) -> Dict[str, Any]:
        return {
            "published": dict(self._published),
            "listener_failures": dict(self._failures),
            "listener_count": self.get_listener_count(),
        }
