"""Signals emitted by the arbitration gateway.

Signals are published after the state change they describe has been
committed. They exist for external monitoring; nothing in the gateway
consumes them.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 1000


@dataclass
class GatewayEvent:
    """Base class for gateway signals."""

    event_id: str = field(default_factory=lambda: str(uuid4()), kw_only=True)
    emitted_at: datetime = field(default_factory=datetime.now, kw_only=True)

    @property
    def event_type(self) -> str:
        """Get the event type name."""
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["emitted_at"] = self.emitted_at.isoformat()
        data["event_type"] = self.event_type
        return data


@dataclass
class DefaultFeeChanged(GatewayEvent):
    fee: int


@dataclass
class CustomFeeChanged(GatewayEvent):
    question_id: str
    fee: int


@dataclass
class QuestionFeeConfigured(GatewayEvent):
    oracle: str
    fee: int


@dataclass
class ArbitrationRequested(GatewayEvent):
    """A paid request froze a question pending arbitration.

    ``remaining`` is always zero: escrow is pooled, not split per question.
    """

    question_id: str
    amount: int
    requester: str
    remaining: int = 0


@dataclass
class MetadataChanged(GatewayEvent):
    metadata: str


@dataclass
class OperatorTransferred(GatewayEvent):
    previous: str
    current: str


@dataclass
class FundsWithdrawn(GatewayEvent):
    destination: str
    amount: int


@dataclass
class OracleFundsPulled(GatewayEvent):
    oracle: str
    amount: int


EventHandler = Callable[[GatewayEvent], None]


@dataclass
class _Subscription:
    handler: EventHandler
    event_types: tuple[type[GatewayEvent], ...]


class EventBus:
    """Synchronous in-process pub/sub for gateway signals.

    A failing handler is logged and counted. It never affects the operation
    that published the event or the other handlers.
    """

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE) -> None:
        self._subscriptions: list[_Subscription] = []
        self._history: deque[GatewayEvent] = deque(maxlen=history_size)
        self._lock = threading.RLock()
        self.published_count = 0
        self.error_count = 0

    def subscribe(self, *event_types: type[GatewayEvent]) -> Callable[[EventHandler], EventHandler]:
        """Decorator subscribing a handler to the given event types (all if none)."""

        def decorator(handler: EventHandler) -> EventHandler:
            with self._lock:
                self._subscriptions.append(_Subscription(handler, event_types or (GatewayEvent,)))
            return handler

        return decorator

    def unsubscribe(self, handler: EventHandler) -> bool:
        """Remove a handler. Returns True if it was subscribed."""
        with self._lock:
            before = len(self._subscriptions)
            self._subscriptions = [s for s in self._subscriptions if s.handler is not handler]
            return len(self._subscriptions) < before

    def publish(self, event: GatewayEvent) -> None:
        """Record an event and deliver it to matching handlers."""
        with self._lock:
            self.published_count += 1
            self._history.append(event)
            handlers = [s.handler for s in self._subscriptions if isinstance(event, s.event_types)]

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                with self._lock:
                    self.error_count += 1
                logger.exception(f"Handler {getattr(handler, '__name__', handler)!r} failed for {event.event_type}")

    @property
    def history(self) -> list[GatewayEvent]:
        """Events published so far, oldest first."""
        with self._lock:
            return list(self._history)

    def events_of(self, event_type: type[GatewayEvent]) -> list[GatewayEvent]:
        """Published events of one type, oldest first."""
        return [e for e in self.history if isinstance(e, event_type)]
