"""Round engine and state management."""

from core.game.events import GameEvent, EventType
from core.game.state import RoundState, Outcome
from core.game.engine import Round

__all__ = [
    "GameEvent",
    "EventType",
    "RoundState",
    "Outcome",
    "Round",
]
