"""Poker hand classification and chip/mult scoring for played cards."""

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence

from core.cards import Card

# Number of cards a play must contain to be classified
PLAY_HAND_SIZE = 5

ACE_LOW_STRAIGHT = (2, 3, 4, 5, 14)
ROYAL_RANKS = (10, 11, 12, 13, 14)


class HandCategory(Enum):
    """Poker hand categories with their (base chips, multiplier) pair."""

    HIGH_CARD = ("High Card", 5, 1)
    PAIR = ("Pair", 10, 2)
    TWO_PAIR = ("Two Pair", 20, 2)
    THREE_OF_A_KIND = ("Three of a Kind", 30, 3)
    STRAIGHT = ("Straight", 30, 4)
    FLUSH = ("Flush", 35, 4)
    FULL_HOUSE = ("Full House", 40, 4)
    FOUR_OF_A_KIND = ("Four of a Kind", 60, 7)
    STRAIGHT_FLUSH = ("Straight Flush", 100, 8)
    ROYAL_FLUSH = ("Royal Flush", 100, 8)

    def __init__(self, label: str, base_chips: int, multiplier: int) -> None:
        self.label = label
        self.base_chips = base_chips
        self.multiplier = multiplier

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class HandAnalysis:
    """Shape of a set of played cards."""

    flush: bool = False
    straight: bool = False
    royal: bool = False
    counts: tuple[int, ...] = ()


@dataclass(frozen=True)
class PlayResult:
    """Outcome of scoring one play."""

    category: HandCategory
    score: int
    cards: tuple[Card, ...]

    @property
    def chip_sum(self) -> int:
        """Return the summed chip value of the played cards."""
        return sum(card.chips for card in self.cards)

    def __str__(self) -> str:
        return f"{self.category} (+{self.score})"


def _is_straight(ranks: Sequence[int]) -> bool:
    """Check if five ranks form a run, counting A-2-3-4-5 as a straight."""
    unique = sorted(set(ranks))
    if len(unique) != PLAY_HAND_SIZE:
        return False
    if tuple(unique) == ACE_LOW_STRAIGHT:
        return True
    return unique[-1] - unique[0] == PLAY_HAND_SIZE - 1


def analyze(cards: Sequence[Card]) -> HandAnalysis:
    """
    Compute flush, straight, royal and rank multiplicities for a play.

    Anything other than exactly five cards yields an empty analysis, which
    classifies as High Card.
    """
    if len(cards) != PLAY_HAND_SIZE:
        return HandAnalysis()

    ranks = [card.rank.value for card in cards]
    flush = len({card.suit for card in cards}) == 1
    straight = _is_straight(ranks)
    royal = flush and tuple(sorted(ranks)) == ROYAL_RANKS
    counts = tuple(sorted(Counter(ranks).values(), reverse=True))

    return HandAnalysis(flush=flush, straight=straight, royal=royal, counts=counts)


def identify(cards: Sequence[Card]) -> HandCategory:
    """Classify played cards; the first matching category wins."""
    info = analyze(cards)
    counts = info.counts

    if info.royal:
        return HandCategory.ROYAL_FLUSH
    if info.straight and info.flush:
        return HandCategory.STRAIGHT_FLUSH
    if 4 in counts:
        return HandCategory.FOUR_OF_A_KIND
    if 3 in counts and 2 in counts:
        return HandCategory.FULL_HOUSE
    if info.flush:
        return HandCategory.FLUSH
    if info.straight:
        return HandCategory.STRAIGHT
    if 3 in counts:
        return HandCategory.THREE_OF_A_KIND
    if counts.count(2) == 2:
        return HandCategory.TWO_PAIR
    if 2 in counts:
        return HandCategory.PAIR
    return HandCategory.HIGH_CARD


def chip_sum(cards: Iterable[Card]) -> int:
    """Sum the chip values of the given cards."""
    return sum(card.chips for card in cards)


def score(cards: Sequence[Card]) -> int:
    """Return (base chips + card chips) * multiplier for a play."""
    category = identify(cards)
    return (category.base_chips + chip_sum(cards)) * category.multiplier


def evaluate(cards: Sequence[Card]) -> PlayResult:
    """Classify and score a play in one pass."""
    category = identify(cards)
    total = (category.base_chips + chip_sum(cards)) * category.multiplier
    return PlayResult(category=category, score=total, cards=tuple(cards))


def preview(cards: Sequence[Card]) -> HandCategory | None:
    """Return the category of a selection, or None unless it is a full play."""
    if len(cards) != PLAY_HAND_SIZE:
        return None
    return identify(cards)
