"""
Event sinks for domain events.

Purpose
-------
The engine drains domain events queued on a character after each command
and hands them to an injected ``EventSink``. Sinks are synchronous: the
engine performs no I/O and never suspends, so a host that needs async
delivery wraps its own bus in a sink that enqueues.

Provided Sinks
--------------
- ``NullEventSink``: discards everything
- ``InMemoryEventSink``: records events (tests, replay)
- ``LoggingEventSink``: logs each event at INFO with its payload
- ``DispatchingEventSink``: synchronous pub/sub with wildcard patterns
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Protocol, Tuple, runtime_checkable
from uuid import uuid4

from questforge.core.event.router import EventRouter
from questforge.core.exceptions import EventSinkError
from questforge.core.logging.logger import get_logger
from questforge.domain.models.base import DomainEvent

logger = get_logger(__name__)

EventCallback = Callable[[DomainEvent], None]


@runtime_checkable
class EventSink(Protocol):
    """Anything that accepts published domain events."""

    def publish(self, event: DomainEvent) -> None:
        ...


class NullEventSink:
    def publish(self, event: DomainEvent) -> None:
        return None


class InMemoryEventSink:
    """Keeps every published event in order."""

    def __init__(self) -> None:
        self.events: List[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self.events.append(event)

    def names(self) -> List[str]:
        return [event.event_name for event in self.events]

    def of(self, event_name: str) -> List[DomainEvent]:
        return [event for event in self.events if event.event_name == event_name]

    def clear(self) -> None:
        self.events.clear()


class LoggingEventSink:
    def publish(self, event: DomainEvent) -> None:
        logger.info(
            f"Domain event: {event.event_name}",
            extra={
                "event_name": event.event_name,
                "payload": event.payload,
                "occurred_at": event.occurred_at.isoformat(),
            },
        )


class DispatchingEventSink:
    """
    Synchronous publish/subscribe keyed by event name or wildcard pattern.

    Listeners run in subscription order. A failing listener is wrapped in
    ``EventSinkError`` and re-raised; later listeners do not run.

    Examples
    --------
    >>> sink = DispatchingEventSink()
    >>> sink.subscribe("character.*", lambda event: print(event.event_name))
    """

    def __init__(self, router: Optional[EventRouter] = None) -> None:
        self._router = router or EventRouter()
        self._listeners: List[Tuple[str, str, EventCallback]] = []

    def subscribe(
        self,
        pattern: str,
        callback: EventCallback,
        identifier: Optional[str] = None,
    ) -> str:
        listener_id = identifier or uuid4().hex[:12]
        self._listeners.append((pattern, listener_id, callback))
        logger.debug(
            "EventSink: subscribed listener",
            extra={"pattern": pattern, "listener_id": listener_id},
        )
        return listener_id

    def unsubscribe(self, identifier: str) -> bool:
        before = len(self._listeners)
        self._listeners = [entry for entry in self._listeners if entry[1] != identifier]
        return len(self._listeners) != before

    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self, event: DomainEvent) -> None:
        for pattern, listener_id, callback in list(self._listeners):
            if not self._router.matches(event.event_name, pattern):
                continue
            try:
                callback(event)
            except Exception as e:
                logger.error(
                    f"EventSink listener failed for {event.event_name}",
                    extra={"listener_id": listener_id, "error_type": type(e).__name__},
                    exc_info=True,
                )
                raise EventSinkError(event.event_name, e) from e


def publish_all(sink: EventSink, events: Iterable[DomainEvent]) -> int:
    """Publish events in order; returns how many were published."""
    count = 0
    for event in events:
        sink.publish(event)
        count += 1
    return count

