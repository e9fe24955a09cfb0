"""Game and round state enumerations."""

from enum import Enum, auto


class GameState(Enum):
    """
    Progression state machine states.

    Flow: SELECTING_BLIND → PLAYING → ROUND_RESULT → SELECTING_BLIND
    """

    # Choosing which unlocked blind to play
    SELECTING_BLIND = auto()

    # A round is in progress
    PLAYING = auto()

    # Round finished, outcome available
    ROUND_RESULT = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


class RoundStatus(Enum):
    """
    Round state machine states.

    Flow: INITIALIZED → PLAYING → WON | EXHAUSTED
    """

    INITIALIZED = auto()
    PLAYING = auto()

    # Score target reached
    WON = auto()

    # Plays or cards ran out before the target was reached
    EXHAUSTED = auto()

    @property
    def is_over(self) -> bool:
        """Check if the round has ended."""
        return self in (RoundStatus.WON, RoundStatus.EXHAUSTED)

    def __str__(self) -> str:
        return self.name.title()
