"""Round engine: deck, hand and turn budgets for a single blind."""

import logging
from dataclasses import dataclass
from random import Random

from transitions import Machine

from core.cards import Card, Deck
from core.evaluator import HandCategory, PlayResult, evaluate, preview
from core.game.events import EventEmitter, EventType
from core.game.state import RoundStatus
from core.hand import Hand
from core.rules import GameRules

logger = logging.getLogger(__name__)


@dataclass
class RoundState:
    """Budgets and score accumulated within one round."""

    plays_remaining: int = 3
    discards_remaining: int = 7
    score: int = 0
    requirement: int = 0
    last_play: PlayResult | None = None

    def reset(self, plays: int, discards: int, requirement: int) -> None:
        """Reset for a new round."""
        self.plays_remaining = plays
        self.discards_remaining = discards
        self.score = 0
        self.requirement = requirement
        self.last_play = None

    @property
    def target_reached(self) -> bool:
        """Check if the running score meets the requirement."""
        return self.score >= self.requirement


class RoundEngine:
    """
    Runs one round: draw to hand size, select, discard and play.

    The engine owns the deck and the hand for the lifetime of a round.
    Invalid commands are no-ops that return False and emit INVALID_ACTION.
    """

    STATES = [s.name.lower() for s in RoundStatus]

    TRANSITIONS = [
        {"trigger": "begin", "source": "*", "dest": "playing"},
        {"trigger": "reach_target", "source": "playing", "dest": "won"},
        {"trigger": "run_out", "source": "playing", "dest": "exhausted"},
    ]

    def __init__(
        self,
        rules: GameRules | None = None,
        rng: Random | None = None,
        events: EventEmitter | None = None,
    ) -> None:
        """
        Initialize a round engine.

        Args:
            rules: Game rules (uses defaults if not provided)
            rng: Random number generator used for shuffling
            events: Emitter shared with the owning game
        """
        self.rules = rules or GameRules()
        self.deck = Deck(rng=rng)
        self.hand = Hand(max_selected=self.rules.play_size)
        self.round_state = RoundState(
            plays_remaining=self.rules.plays_per_round,
            discards_remaining=self.rules.discards_per_round,
        )
        self.events = events or EventEmitter()

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="initialized",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def status(self) -> RoundStatus:
        """Get current round status as enum."""
        return RoundStatus[self._machine_state.upper()]  # type: ignore

    def _reject(self, message: str, **data) -> bool:
        """Report an invalid command and leave state unchanged."""
        logger.debug("Rejected round command: %s", message)
        self.events.emit_new(EventType.INVALID_ACTION, message=message, **data)
        return False

    def start_round(self, requirement: int) -> None:
        """
        Start a fresh round against a score requirement.

        Rebuilds and shuffles the full deck, resets budgets and score,
        and draws a new hand.
        """
        self.deck.reset()
        self.deck.shuffle()
        self.events.emit_new(EventType.DECK_SHUFFLED, cards=len(self.deck))

        self.round_state.reset(
            plays=self.rules.plays_per_round,
            discards=self.rules.discards_per_round,
            requirement=requirement,
        )
        self.hand.clear()
        self.begin()

        self._draw_to_hand_size()
        logger.info("Round started: requirement=%d, hand=%s", requirement, self.hand)
        self.events.emit_new(
            EventType.ROUND_STARTED,
            requirement=requirement,
            plays=self.round_state.plays_remaining,
            discards=self.round_state.discards_remaining,
        )

    def _draw_to_hand_size(self) -> int:
        """Refill the hand until it is full or the deck runs dry."""
        drawn = 0
        while len(self.hand) < self.rules.hand_size:
            card = self.deck.draw()
            if card is None:
                break
            self.hand.add_card(card)
            drawn += 1
            self.events.emit_new(EventType.CARD_DRAWN, card=str(card))
        return drawn

    def toggle_select(self, index: int) -> bool:
        """Select or deselect the card at index."""
        if self.status != RoundStatus.PLAYING:
            return self._reject("Round is not in progress")

        if not 0 <= index < len(self.hand):
            return self._reject("No card at that position", index=index)

        if not self.hand.toggle(index):
            return self._reject(
                f"Cannot select more than {self.rules.play_size} cards",
                index=index,
            )

        card = self.hand.cards[index]
        selected = card in self.hand.selected
        self.events.emit_new(
            EventType.CARD_SELECTED if selected else EventType.CARD_DESELECTED,
            card=str(card),
            index=index,
            selected_count=self.hand.num_selected,
        )
        return True

    def discard(self) -> bool:
        """Throw away the selected cards and draw replacements."""
        if self.status != RoundStatus.PLAYING:
            return self._reject("Round is not in progress")
        if self.round_state.discards_remaining <= 0:
            return self._reject("No discards remaining")
        if self.hand.num_selected == 0:
            return self._reject("No cards selected")

        discarded = self.hand.remove_selected()
        self.round_state.discards_remaining -= 1
        self.events.emit_new(
            EventType.CARDS_DISCARDED,
            cards=[str(c) for c in discarded],
            discards_remaining=self.round_state.discards_remaining,
        )
        self._draw_to_hand_size()
        return True

    def play(self) -> bool:
        """
        Score the selected cards and check the round for completion.

        On reaching the requirement the round ends at once: the played cards
        stay in the hand and nothing more is drawn.
        """
        if self.status != RoundStatus.PLAYING:
            return self._reject("Round is not in progress")
        if self.round_state.plays_remaining <= 0:
            return self._reject("No plays remaining")
        if self.hand.num_selected == 0:
            return self._reject("No cards selected")

        result = evaluate(self.hand.selected_cards)
        self.round_state.score += result.score
        self.round_state.plays_remaining -= 1
        self.round_state.last_play = result

        self.events.emit_new(
            EventType.HAND_PLAYED,
            category=result.category.label,
            cards=[str(c) for c in result.cards],
            score=result.score,
            total=self.round_state.score,
            plays_remaining=self.round_state.plays_remaining,
        )

        if self.round_state.target_reached:
            logger.info(
                "Round won: score=%d requirement=%d",
                self.round_state.score,
                self.round_state.requirement,
            )
            self.reach_target()
            return True

        self.hand.remove_selected()
        self._draw_to_hand_size()

        if self.deck.is_empty and len(self.hand) < self.rules.hand_size:
            logger.info("Round exhausted: deck empty at score=%d", self.round_state.score)
            self.run_out()
        elif self.round_state.plays_remaining == 0:
            logger.info("Round exhausted: no plays left at score=%d", self.round_state.score)
            self.run_out()

        return True

    @property
    def cards(self) -> list[Card]:
        """Return the hand in display order."""
        return list(self.hand.cards)

    @property
    def selected_cards(self) -> list[Card]:
        """Return the selected cards in hand order."""
        return self.hand.selected_cards

    @property
    def selected_category(self) -> HandCategory | None:
        """Return the category of the selection, if it is a full play."""
        return preview(self.hand.selected_cards)

    @property
    def deck_remaining(self) -> int:
        """Return the number of cards left in the deck."""
        return self.deck.cards_remaining

    @property
    def plays_remaining(self) -> int:
        return self.round_state.plays_remaining

    @property
    def discards_remaining(self) -> int:
        return self.round_state.discards_remaining

    @property
    def score(self) -> int:
        return self.round_state.score

    @property
    def requirement(self) -> int:
        return self.round_state.requirement

    @property
    def last_play(self) -> PlayResult | None:
        return self.round_state.last_play

    @property
    def is_over(self) -> bool:
        """Check if the round has been won or exhausted."""
        return self.status.is_over

    @property
    def can_play(self) -> bool:
        """Check if playing is allowed (a full play is selected)."""
        return (
            self.status == RoundStatus.PLAYING
            and self.round_state.plays_remaining > 0
            and self.hand.num_selected == self.rules.play_size
        )

    @property
    def can_discard(self) -> bool:
        """Check if discarding is allowed."""
        return (
            self.status == RoundStatus.PLAYING
            and self.round_state.discards_remaining > 0
            and self.hand.num_selected > 0
        )
