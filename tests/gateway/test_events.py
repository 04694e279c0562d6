"""Tests for gateway signals and the event bus (events.py)."""

from __future__ import annotations

import logging

import pytest

from oracle_arbitrator import (
    ArbitrationRequested,
    CustomFeeChanged,
    DefaultFeeChanged,
    EventBus,
    GatewayEvent,
)

pytestmark = pytest.mark.unit


class TestGatewayEvent:
    """Tests for signal dataclasses."""

    def test_event_type_is_class_name(self):
        assert DefaultFeeChanged(fee=1).event_type == "DefaultFeeChanged"

    def test_to_dict(self):
        """Signals serialize with their type and ISO timestamp."""
        event = ArbitrationRequested(question_id="q1", amount=10, requester="did:key:r")

        data = event.to_dict()

        assert data["event_type"] == "ArbitrationRequested"
        assert data["question_id"] == "q1"
        assert data["amount"] == 10
        assert data["remaining"] == 0
        assert isinstance(data["emitted_at"], str)
        assert data["event_id"]

    def test_event_ids_unique(self):
        assert DefaultFeeChanged(fee=1).event_id != DefaultFeeChanged(fee=1).event_id


class TestEventBus:
    """Tests for EventBus."""

    def test_subscribe_by_type(self):
        """Handlers only see the event types they subscribed to."""
        bus = EventBus()
        seen = []

        @bus.subscribe(CustomFeeChanged)
        def on_custom(event):
            seen.append(event)

        bus.publish(DefaultFeeChanged(fee=1))
        bus.publish(CustomFeeChanged(question_id="q1", fee=2))

        assert [e.event_type for e in seen] == ["CustomFeeChanged"]

    def test_subscribe_all(self):
        """No event types means every signal."""
        bus = EventBus()
        seen = []
        bus.subscribe()(seen.append)

        bus.publish(DefaultFeeChanged(fee=1))
        bus.publish(CustomFeeChanged(question_id="q1", fee=2))

        assert len(seen) == 2
        assert all(isinstance(e, GatewayEvent) for e in seen)

    def test_unsubscribe(self):
        bus = EventBus()
        seen = []
        handler = bus.subscribe()(seen.append)

        assert bus.unsubscribe(handler) is True
        assert bus.unsubscribe(handler) is False
        bus.publish(DefaultFeeChanged(fee=1))

        assert seen == []

    def test_failing_handler_isolated(self, caplog):
        """A failing handler is logged and does not stop the others."""
        bus = EventBus()
        seen = []

        @bus.subscribe()
        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe()(seen.append)

        with caplog.at_level(logging.ERROR):
            bus.publish(DefaultFeeChanged(fee=1))

        assert len(seen) == 1
        assert bus.error_count == 1
        assert bus.published_count == 1
        assert "broken" in caplog.text

    def test_history_is_bounded(self):
        bus = EventBus(history_size=2)

        for fee in range(3):
            bus.publish(DefaultFeeChanged(fee=fee))

        assert [e.fee for e in bus.history] == [1, 2]

    def test_failing_handler_does_not_undo_operation(self, gateway, operator):
        """A committed fee change survives a broken monitor."""

        @gateway.events.subscribe(DefaultFeeChanged)
        def broken(event):
            raise RuntimeError("monitor down")

        gateway.set_default_fee(operator, 10)

        assert gateway.default_fee == 10
