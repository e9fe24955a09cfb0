"""Core blind poker engine - 100% UI-agnostic."""

from core.cards import Card, Deck, Rank, Suit
from core.evaluator import HandCategory, PlayResult
from core.hand import Hand
from core.rules import Blind, GameRules

__all__ = [
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "HandCategory",
    "PlayResult",
    "Hand",
    "Blind",
    "GameRules",
]
