"""
Base domain model classes for Apiary.

Purpose
-------
Provide foundational abstractions for rich domain models that encapsulate
business rules, validation, and state transitions.

Responsibilities
----------------
- Define base Entity class with identity and equality semantics
- Define base AggregateRoot class for consistency boundaries
- Provide validation helpers for business rules
- Track domain events for the event bus

Non-Responsibilities
--------------------
- Persistence (handled by persistence adapters)
- Service orchestration (handled by the service layer)

Design Patterns
---------------
- **Entity**: Objects with identity that persist over time
- **Aggregate Root**: Consistency boundary for domain operations
- **Domain Events**: Communicate state changes to other parts of the system

Usage Example
-------------
>>> class Hive(AggregateRoot):
...     def __init__(self, user_id: str, level: int):
...         super().__init__(user_id)
...         self.level = level
...
...     def level_up(self) -> None:
...         self.level += 1
...         self.add_domain_event("hive.level_up", {
...             "user_id": self.id,
...             "new_level": self.level,
...         })
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


# ============================================================================
# DOMAIN EVENTS
# ============================================================================


@dataclass
class DomainEvent:
    """
    Represents a domain event that has occurred.

    Attributes
    ----------
    event_name : str
        Event name (e.g., "hive.egg_hatched")
    payload : Dict[str, Any]
        Event payload with relevant data
    occurred_at : datetime
        When the event occurred (UTC)
    """

    event_name: str
    payload: Dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# ============================================================================
# ENTITY
# ============================================================================


class Entity(ABC):
    """
    Base class for entities with identity.

    Two entities with the same ID are considered the same entity, even if
    their attributes differ.
    """

    def __init__(self, entity_id: str) -> None:
        self._id = entity_id
        self._domain_events: List[DomainEvent] = []

    @property
    def id(self) -> str:
        """Get entity ID (immutable)."""
        return self._id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return False
        return type(self) is type(other) and self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))

    def add_domain_event(self, event_name: str, payload: Dict[str, Any]) -> None:
        """
        Add a domain event to be published.

        Examples
        --------
        >>> self.add_domain_event("hive.room_unlocked", {
        ...     "user_id": self.id,
        ...     "room_id": room.id,
        ... })
        """
        self._domain_events.append(DomainEvent(event_name=event_name, payload=payload))

    def clear_domain_events(self) -> List[DomainEvent]:
        """
        Clear and return all domain events.

        Called by the service after persisting the aggregate and publishing
        its events.
        """
        events = self._domain_events.copy()
        self._domain_events.clear()
        return events

    def get_pending_events(self) -> List[DomainEvent]:
        """Get domain events without clearing them."""
        return self._domain_events.copy()


# ============================================================================
# AGGREGATE ROOT
# ============================================================================


class AggregateRoot(Entity):
    """
    Base class for aggregate roots.

    An aggregate is a cluster of domain objects treated as a single unit for
    data changes. All mutations of child entities go through the root so
    that cross-entity invariants hold after every operation.
    """

    pass


# ============================================================================
# DOMAIN MODEL VALIDATION
# ============================================================================


class DomainValidationError(Exception):
    """Raised when domain model validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


def validate_non_negative(value: float, field_name: str) -> None:
    if value < 0:
        raise DomainValidationError(
            f"{field_name} must be non-negative, got {value}",
            field=field_name,
        )


def validate_not_empty(value: Optional[str], field_name: str) -> None:
    if not value or not value.strip():
        raise DomainValidationError(
            f"{field_name} cannot be empty",
            field=field_name,
        )
