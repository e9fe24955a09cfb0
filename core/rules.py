"""Blind tiers and per-game rule constants."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from config import GameConfig


@dataclass(frozen=True)
class Blind:
    """A score target the player must reach within one round."""

    id: str
    name: str
    requirement: int

    def __str__(self) -> str:
        return f"{self.name} ({self.requirement})"


SMALL_BLIND = Blind("small", "Small Blind", 300)
BIG_BLIND = Blind("big", "Big Blind", 800)
BOSS_BLIND = Blind("boss", "Boss Blind", 2000)

DEFAULT_BLINDS: tuple[Blind, ...] = (SMALL_BLIND, BIG_BLIND, BOSS_BLIND)


@dataclass(frozen=True)
class GameRules:
    """
    Game rules configuration.

    Everything that sizes a round: hand and play sizes, turn budgets and the
    ordered blind tiers.
    """

    # Cards visible to the player
    hand_size: int = 8

    # Maximum cards selected (and cards in a scored play)
    play_size: int = 5

    # Turn budgets per round
    plays_per_round: int = 3
    discards_per_round: int = 7

    blinds: tuple[Blind, ...] = field(default=DEFAULT_BLINDS)

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.play_size < 1:
            raise ValueError("play_size must be at least 1")
        if self.hand_size < self.play_size:
            raise ValueError("hand_size must be at least play_size")
        if self.hand_size > 52:
            raise ValueError("hand_size cannot exceed the deck size")
        if self.plays_per_round < 1:
            raise ValueError("plays_per_round must be at least 1")
        if self.discards_per_round < 0:
            raise ValueError("discards_per_round cannot be negative")
        if not self.blinds:
            raise ValueError("at least one blind is required")

        ids = [b.id for b in self.blinds]
        if len(set(ids)) != len(ids):
            raise ValueError("blind ids must be unique")

        requirements = [b.requirement for b in self.blinds]
        if any(r <= 0 for r in requirements):
            raise ValueError("blind requirements must be positive")
        if any(a >= b for a, b in zip(requirements, requirements[1:])):
            raise ValueError("blind requirements must be strictly ascending")

    def get_blind(self, blind_id: str) -> Blind | None:
        """Look up a blind by id."""
        for blind in self.blinds:
            if blind.id == blind_id:
                return blind
        return None

    def blind_index(self, blind_id: str) -> int | None:
        """Return the tier position of a blind, or None if unknown."""
        for i, blind in enumerate(self.blinds):
            if blind.id == blind_id:
                return i
        return None

    @classmethod
    def from_config(cls, game_config: "GameConfig") -> "GameRules":
        """Build rules from the application's game configuration."""
        return cls(
            hand_size=game_config.hand_size,
            play_size=game_config.play_size,
            plays_per_round=game_config.plays_per_round,
            discards_per_round=game_config.discards_per_round,
            blinds=(
                Blind(SMALL_BLIND.id, SMALL_BLIND.name, game_config.small_blind_requirement),
                Blind(BIG_BLIND.id, BIG_BLIND.name, game_config.big_blind_requirement),
                Blind(BOSS_BLIND.id, BOSS_BLIND.name, game_config.boss_blind_requirement),
            ),
        )
