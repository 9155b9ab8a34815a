"""Synchronous domain event sinks."""

from questforge.core.event.router import EventRouter
from questforge.core.event.sink import (
    DispatchingEventSink,
    EventSink,
    InMemoryEventSink,
    LoggingEventSink,
    NullEventSink,
    publish_all,
)

__all__ = [
    "EventRouter",
    "EventSink",
    "DispatchingEventSink",
    "InMemoryEventSink",
    "LoggingEventSink",
    "NullEventSink",
    "publish_all",
]
