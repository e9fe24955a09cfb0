"""Blind progression engine with state machine."""

import logging
from dataclasses import dataclass
from random import Random
from typing import Callable

from transitions import Machine

from core.game.events import EventEmitter, EventType, GameEvent
from core.game.round import RoundEngine
from core.game.state import GameState, RoundStatus
from core.rules import Blind, GameRules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundOutcome:
    """Recorded result of a finished round."""

    blind: Blind
    won: bool
    score: int
    requirement: int

    def __str__(self) -> str:
        title = "Blind cleared" if self.won else "Defeat"
        return f"{title}: {self.score} points (target: {self.requirement})"


class BlindPokerGame:
    """
    Blind progression game engine using a state machine.

    Owns exactly one RoundEngine and drives it through its public
    operations only. This is the core game logic, completely UI-agnostic.
    Communication happens through events and return values only.
    """

    # State machine states
    STATES = [s.name.lower() for s in GameState]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "enter_round", "source": "selecting_blind", "dest": "playing"},
        {"trigger": "finish_round", "source": "playing", "dest": "round_result"},
        {"trigger": "return_to_select", "source": "round_result", "dest": "selecting_blind"},
    ]

    def __init__(
        self,
        rules: GameRules | None = None,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a new game.

        Args:
            rules: Game rules (uses defaults if not provided)
            rng: Random number generator for reproducible games
        """
        self.rules = rules or GameRules()
        self.events = EventEmitter()
        self.round = RoundEngine(rules=self.rules, rng=rng, events=self.events)

        self.unlocked_blind_count = 1
        self.current_blind: Blind | None = None
        self.last_outcome: RoundOutcome | None = None

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="selecting_blind",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> GameState:
        """Get current game state as enum."""
        return GameState[self._machine_state.upper()]  # type: ignore

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def _reject(self, message: str, **data) -> bool:
        """Report an invalid command and leave state unchanged."""
        logger.debug("Rejected command in %s: %s", self.state.name, message)
        self.events.emit_new(
            EventType.INVALID_ACTION,
            message=message,
            state=self.state.name,
            **data,
        )
        return False

    def select_blind(self, blind_id: str) -> bool:
        """
        Choose an unlocked blind and start a round against it.

        Args:
            blind_id: Identifier of the blind tier

        Returns:
            True if the blind was accepted
        """
        if self.state != GameState.SELECTING_BLIND:
            return self._reject("Cannot select a blind in current state")

        index = self.rules.blind_index(blind_id)
        if index is None:
            return self._reject(f"Unknown blind: {blind_id}", blind=blind_id)
        if index >= self.unlocked_blind_count:
            return self._reject(f"Blind is locked: {blind_id}", blind=blind_id)

        blind = self.rules.blinds[index]
        self.current_blind = blind
        self.events.emit_new(
            EventType.BLIND_SELECTED,
            blind=blind.id,
            requirement=blind.requirement,
        )
        self.enter_round()  # Trigger state transition
        self.round.start_round(blind.requirement)
        return True

    def toggle_select(self, index: int) -> bool:
        """Select or deselect the card at a hand position."""
        if self.state != GameState.PLAYING:
            return self._reject("No round in progress")
        return self.round.toggle_select(index)

    def discard(self) -> bool:
        """Discard the selected cards."""
        if self.state != GameState.PLAYING:
            return self._reject("No round in progress")
        return self.round.discard()

    def play(self) -> bool:
        """Play the selected cards and settle the round if it ended."""
        if self.state != GameState.PLAYING:
            return self._reject("No round in progress")

        if not self.round.play():
            return False

        if self.round.is_over:
            self._resolve_round()
        return True

    def _resolve_round(self) -> None:
        """Record the round outcome and unlock the next blind on a win."""
        blind = self.current_blind
        if blind is None:
            return

        won = self.round.status == RoundStatus.WON
        self.last_outcome = RoundOutcome(
            blind=blind,
            won=won,
            score=self.round.score,
            requirement=blind.requirement,
        )

        if won:
            previous = self.unlocked_blind_count
            self.unlocked_blind_count = min(previous + 1, len(self.rules.blinds))
            self.events.emit_new(
                EventType.ROUND_WON,
                blind=blind.id,
                score=self.round.score,
                requirement=blind.requirement,
            )
            if self.unlocked_blind_count > previous:
                unlocked = self.rules.blinds[self.unlocked_blind_count - 1]
                self.events.emit_new(EventType.BLIND_UNLOCKED, blind=unlocked.id)
        else:
            self.events.emit_new(
                EventType.ROUND_LOST,
                blind=blind.id,
                score=self.round.score,
                requirement=blind.requirement,
            )

        logger.info("%s (%s)", self.last_outcome, blind.id)
        self.finish_round()

    def start_new_round_after_result(self) -> bool:
        """Return to blind selection once a round result has been shown."""
        if self.state != GameState.ROUND_RESULT:
            return self._reject("No round result to leave")

        self.return_to_select()
        self.events.emit_new(
            EventType.RETURNED_TO_BLIND_SELECT,
            unlocked=[b.id for b in self.unlocked_blinds],
        )
        return True

    @property
    def blinds(self) -> tuple[Blind, ...]:
        """Return every blind tier in order."""
        return self.rules.blinds

    @property
    def unlocked_blinds(self) -> list[Blind]:
        """Return the blinds the player may select."""
        return list(self.rules.blinds[: self.unlocked_blind_count])

    def is_unlocked(self, blind_id: str) -> bool:
        """Check if a blind can be selected."""
        index = self.rules.blind_index(blind_id)
        return index is not None and index < self.unlocked_blind_count

    @property
    def requirement(self) -> int | None:
        """Return the current blind's score target."""
        return self.current_blind.requirement if self.current_blind else None

    @property
    def can_select_blind(self) -> bool:
        """Check if a blind may be chosen now."""
        return self.state == GameState.SELECTING_BLIND

    @property
    def can_play(self) -> bool:
        """Check if playing is allowed."""
        return self.state == GameState.PLAYING and self.round.can_play

    @property
    def can_discard(self) -> bool:
        """Check if discarding is allowed."""
        return self.state == GameState.PLAYING and self.round.can_discard

    @property
    def can_continue(self) -> bool:
        """Check if the player can move on from a round result."""
        return self.state == GameState.ROUND_RESULT
