"""Round events for the event system."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable


class EventType(Enum):
    """Types of round events."""

    ROUND_DEALT = auto()
    CARD_DEALT = auto()
    PLAYER_HIT = auto()
    PLAYER_STAND = auto()
    DEALER_HITS = auto()
    ROUND_SETTLED = auto()


@dataclass(frozen=True)
class GameEvent:
    """
    Immutable round event.

    Events let observers (logging, tests) follow a round without the
    engine knowing who is listening.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


# Type alias for event handlers
EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Simple event emitter for round events.

    Allows subscribing to specific event types or all events.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType | None, list[EventHandler]] = {}
        self._event_history: list[GameEvent] = []

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """
        Subscribe to events.

        Args:
            handler: Function to call when event occurs
            event_type: Specific event type to subscribe to, or None for all events
        """
        self._handlers.setdefault(event_type, []).append(handler)

    def emit_new(self, event_type: EventType, **data: Any) -> GameEvent:
        """Create an event, record it, and notify subscribers."""
        event = GameEvent(event_type=event_type, data=data)
        self._event_history.append(event)

        for handler in self._handlers.get(event_type, []):
            handler(event)
        for handler in self._handlers.get(None, []):
            handler(event)

        return event

    @property
    def history(self) -> list[GameEvent]:
        """Return the event history."""
        return self._event_history.copy()
