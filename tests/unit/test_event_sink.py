"""
Unit tests for event sinks and wildcard routing.
"""

import pytest

from questforge.core.event import sink as sink_module
from questforge.core.event.router import EventRouter
from questforge.core.event.sink import (
    DispatchingEventSink,
    InMemoryEventSink,
    LoggingEventSink,
    publish_all,
)
from questforge.core.exceptions import EventSinkError
from questforge.domain.models import DomainEvent


def _event(name: str) -> DomainEvent:
    return DomainEvent(event_name=name, payload={"character_id": "hero-1"})


@pytest.mark.unit
class TestEventRouter:
    """Test wildcard pattern matching."""

    @pytest.mark.parametrize(
        "pattern, expected",
        [
            ("*", True),
            ("equipment.forged", True),
            ("equipment.*", True),
            ("*.forged", True),
            ("eq*for*", True),
            ("character.*", False),
            ("*.salvaged", False),
            ("equipment.forged.extra", False),
        ],
    )
    def test_matches(self, pattern, expected):
        assert EventRouter().matches("equipment.forged", pattern) is expected


@pytest.mark.unit
class TestDispatchingEventSink:
    """Test synchronous publish/subscribe."""

    def test_routes_by_pattern(self, mocker):
        """Only listeners whose pattern matches are called."""
        # Arrange
        sink = DispatchingEventSink()
        on_character = mocker.Mock()
        on_forge = mocker.Mock()
        sink.subscribe("character.*", on_character)
        sink.subscribe("*.forged", on_forge)
        event = _event("equipment.forged")

        # Act
        sink.publish(event)

        # Assert
        on_forge.assert_called_once_with(event)
        on_character.assert_not_called()

    def test_unsubscribe(self, mocker):
        """Removed listeners stop receiving events."""
        sink = DispatchingEventSink()
        callback = mocker.Mock()
        listener_id = sink.subscribe("*", callback, identifier="audit")

        assert sink.unsubscribe(listener_id) is True
        assert sink.unsubscribe(listener_id) is False
        sink.publish(_event("quest.claimed"))

        callback.assert_not_called()
        assert sink.listener_count() == 0

    def test_failing_listener_wrapped(self, mocker):
        """Listener failures surface as EventSinkError and stop later listeners."""
        # Arrange
        sink = DispatchingEventSink()
        sink.subscribe("*", mocker.Mock(side_effect=RuntimeError("boom")))
        later = mocker.Mock()
        sink.subscribe("*", later)

        # Act / Assert
        with pytest.raises(EventSinkError) as exc_info:
            sink.publish(_event("character.reborn"))

        assert exc_info.value.event_name == "character.reborn"
        assert isinstance(exc_info.value.original_error, RuntimeError)
        later.assert_not_called()


@pytest.mark.unit
class TestSimpleSinks:
    """Test the in-memory and logging sinks."""

    def test_in_memory_keeps_order(self):
        sink = InMemoryEventSink()

        count = publish_all(sink, [_event("a.one"), _event("b.two"), _event("a.three")])

        assert count == 3
        assert sink.names() == ["a.one", "b.two", "a.three"]
        assert len(sink.of("b.two")) == 1
        sink.clear()
        assert sink.events == []

    def test_logging_sink_logs_event(self, mocker):
        """Each event becomes one info line carrying its payload."""
        info = mocker.patch.object(sink_module.logger, "info")

        LoggingEventSink().publish(_event("quest.claimed"))

        info.assert_called_once()
        assert info.call_args.kwargs["extra"]["event_name"] == "quest.claimed"
        assert info.call_args.kwargs["extra"]["payload"] == {"character_id": "hero-1"}
