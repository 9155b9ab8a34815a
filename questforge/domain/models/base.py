"""
Base domain model classes for the questforge engine.

Purpose
-------
Provide the foundational abstractions the progression models build on:
entities with identity, immutable value objects, domain events, and the
small validation helpers used in constructors and ``__post_init__``.

Responsibilities
----------------
- Define base Entity class with identity and equality semantics
- Define base ValueObject class for immutable value types
- Track domain events for the engine's event sink
- Provide validation helpers that raise ``DomainValidationError``

Non-Responsibilities
--------------------
- Persistence (the host writes snapshots back after each call)
- Publishing events (handled by the engine facade and its ``EventSink``)

Usage Example
-------------
>>> class Character(Entity):
...     def __init__(self, character_id: str, level: int):
...         super().__init__(character_id)
...         self.level = level
...
...     def gain_level(self) -> None:
...         self.level += 1
...         self.add_domain_event("character.leveled_up", {
...             "character_id": self.id,
...             "new_level": self.level,
...         })
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Hashable, List, Optional


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
        Event name (e.g., "character.leveled_up")
    payload : Dict[str, Any]
        Event payload with relevant data
    occurred_at : datetime
        When the event occurred (UTC)
    """

    event_name: str
    payload: Dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# ============================================================================
# VALUE OBJECT
# ============================================================================


class ValueObject(ABC):
    """
    Base class for immutable value objects.

    Value objects are defined by their attributes, not by identity. Most
    engine value objects are frozen dataclasses that also inherit from this
    class so ``_validate`` has a common home.
    """

    def _validate(self) -> None:
        """Validate business invariants. Subclasses override."""


# ============================================================================
# ENTITY
# ============================================================================


class Entity(ABC):
    """
    Base class for entities with identity.

    Two entities with the same ID are the same entity, even if their
    attributes differ. Entities queue domain events for significant state
    changes; the engine drains and publishes them after each command.
    """

    def __init__(self, entity_id: Hashable) -> None:
        self._id = entity_id
        self._domain_events: List[DomainEvent] = []

    @property
    def id(self) -> Hashable:
        """Get entity ID (immutable)."""
        return self._id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return False
        return type(self) is type(other) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def add_domain_event(self, event_name: str, payload: Dict[str, Any]) -> None:
        """
        Queue a domain event to be published.

        Examples
        --------
        >>> self.add_domain_event("character.reborn", {
        ...     "character_id": self.id,
        ...     "rebirth_count": self.rebirth_count,
        ... })
        """
        self._domain_events.append(DomainEvent(event_name=event_name, payload=payload))

    def clear_domain_events(self) -> List[DomainEvent]:
        """Clear and return all domain events queued since the last clear."""
        events = self._domain_events.copy()
        self._domain_events.clear()
        return events

    def get_pending_events(self) -> List[DomainEvent]:
        """Get domain events without clearing them."""
        return self._domain_events.copy()


class AggregateRoot(Entity):
    """
    Base class for aggregate roots.

    The aggregate root is the single entry point for mutations of the
    objects it owns and is responsible for their cross-object invariants.
    """


# ============================================================================
# DOMAIN MODEL VALIDATION
# ============================================================================


class DomainValidationError(Exception):
    """Raised when a domain model is constructed with invalid values."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


def validate_positive(value: int, field_name: str) -> None:
    """Raise ``DomainValidationError`` unless ``value > 0``."""
    if value <= 0:
        raise DomainValidationError(
            f"{field_name} must be positive, got {value}",
            field=field_name,
        )


def validate_non_negative(value: int, field_name: str) -> None:
    """Raise ``DomainValidationError`` unless ``value >= 0``."""
    if value < 0:
        raise DomainValidationError(
            f"{field_name} must be non-negative, got {value}",
            field=field_name,
        )


def validate_range(value: int, min_val: int, max_val: int, field_name: str) -> None:
    """Raise ``DomainValidationError`` unless ``min_val <= value <= max_val``."""
    if not min_val <= value <= max_val:
        raise DomainValidationError(
            f"{field_name} must be between {min_val} and {max_val}, got {value}",
            field=field_name,
        )
