"""Card and Deck classes - immutable card representations."""

from dataclasses import dataclass
from enum import Enum, auto
from random import Random
from typing import Iterator


class Suit(Enum):
    """Card suits, in deck build order."""

    SPADES = auto()
    HEARTS = auto()
    DIAMONDS = auto()
    CLUBS = auto()

    def __str__(self) -> str:
        symbols = {
            Suit.SPADES: "♠",
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks; the value is the rank's numeric order (Ace high)."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
            Rank.ACE: "A",
        }[self]

    @property
    def chip_value(self) -> int:
        """Return the scoring chip value (Ace = 11, face cards = 10)."""
        if self.value <= 10:
            return self.value
        if self == Rank.ACE:
            return 11
        return 10  # Face cards


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def chips(self) -> int:
        """Return the chip value this card adds to a played hand."""
        return self.rank.chip_value

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '2♣', 'AS', 'Kh' or 'TD'."""
        text = s.strip().upper()
        if len(text) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank = _RANKS_BY_TEXT.get(text[:-1])
        if rank is None:
            raise ValueError(f"Invalid rank: {text[:-1]}")
        suit = _SUITS_BY_TEXT.get(text[-1])
        if suit is None:
            raise ValueError(f"Invalid suit: {text[-1]}")
        return cls(rank, suit)


_RANKS_BY_TEXT: dict[str, Rank] = {str(rank): rank for rank in Rank}
_RANKS_BY_TEXT["T"] = Rank.TEN

# Suits parse from their symbol or their initial letter
_SUITS_BY_TEXT: dict[str, Suit] = {str(suit): suit for suit in Suit}
_SUITS_BY_TEXT.update({suit.name[0]: suit for suit in Suit})


def cards_from_string(s: str) -> list[Card]:
    """Parse a space-separated list of cards, e.g. 'AS 2H 3D 4C 5S'."""
    return [Card.from_string(part) for part in s.split()]


def build_cards() -> list[Card]:
    """Return the 52 distinct cards in base order (suit-major, rank-minor)."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


class Deck:
    """A standard 52-card deck. The top of the deck is the end of the list."""

    def __init__(self, rng: Random | None = None) -> None:
        """Initialize a new deck."""
        self._rng = rng or Random()
        self._cards: list[Card] = []
        self.reset()

    def reset(self) -> None:
        """Reset deck to all 52 cards in order."""
        self._cards = build_cards()

    def shuffle(self) -> None:
        """Shuffle the deck in place."""
        self._rng.shuffle(self._cards)

    def draw(self) -> Card | None:
        """Draw a card from the top of the deck, or None if it is empty."""
        if not self._cards:
            return None
        return self._cards.pop()

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)

    @property
    def is_empty(self) -> bool:
        """Check if every card has been drawn."""
        return not self._cards
