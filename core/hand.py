"""The player's visible hand and its selection state."""

from dataclasses import dataclass, field
from typing import Iterator

from core.cards import Card


@dataclass
class Hand:
    """
    Cards currently visible to the player.

    Selection is held here rather than on the cards, so a card loses its
    selected flag as soon as it leaves the hand.
    """

    cards: list[Card] = field(default_factory=list)
    selected: set[Card] = field(default_factory=set)
    max_selected: int = 5

    def add_card(self, card: Card) -> None:
        """Add a card to the hand, unselected."""
        self.cards.append(card)
        self.selected.discard(card)

    def clear(self) -> None:
        """Remove all cards from the hand."""
        self.cards.clear()
        self.selected.clear()

    def is_selected(self, index: int) -> bool:
        """Check if the card at index is selected."""
        return self.cards[index] in self.selected

    def toggle(self, index: int) -> bool:
        """
        Flip the selection of the card at index.

        Returns:
            True if the selection changed. Selecting beyond max_selected or an
            out-of-range index leaves the hand untouched and returns False.
        """
        if not 0 <= index < len(self.cards):
            return False

        card = self.cards[index]
        if card in self.selected:
            self.selected.remove(card)
            return True

        if len(self.selected) >= self.max_selected:
            return False

        self.selected.add(card)
        return True

    def remove_selected(self) -> list[Card]:
        """Remove and return the selected cards, in hand order."""
        removed = self.selected_cards
        self.cards = [c for c in self.cards if c not in self.selected]
        self.selected.clear()
        return removed

    @property
    def selected_cards(self) -> list[Card]:
        """Return the selected cards in hand order."""
        return [c for c in self.cards if c in self.selected]

    @property
    def num_selected(self) -> int:
        """Return the number of selected cards."""
        return len(self.selected)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        return " ".join(
            f"[{card}]" if card in self.selected else str(card) for card in self.cards
        )

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, selected={len(self.selected)})"
