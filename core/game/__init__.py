"""Game engine and state management."""

from core.game.events import GameEvent, EventType
from core.game.state import GameState, RoundStatus
from core.game.round import RoundEngine, RoundState
from core.game.engine import BlindPokerGame, RoundOutcome

__all__ = [
    "GameEvent",
    "EventType",
    "GameState",
    "RoundStatus",
    "RoundEngine",
    "RoundState",
    "BlindPokerGame",
    "RoundOutcome",
]
