"""Pytest fixtures for blind poker tests."""

import pytest
from random import Random

from core.cards import Deck, cards_from_string
from core.game import BlindPokerGame, RoundEngine
from core.hand import Hand
from core.rules import Blind, GameRules


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck(rng):
    """A shuffled deck."""
    d = Deck(rng=rng)
    d.shuffle()
    return d


@pytest.fixture
def empty_hand():
    """An empty hand."""
    return Hand()


@pytest.fixture
def royal_flush():
    """10-J-Q-K-A of spades."""
    return cards_from_string("10S JS QS KS AS")


@pytest.fixture
def ace_low_straight():
    """A-2-3-4-5 in mixed suits."""
    return cards_from_string("AS 2H 3D 4C 5S")


@pytest.fixture
def two_pair():
    """Twos and threes with a five kicker."""
    return cards_from_string("2S 2H 3D 3C 5S")


@pytest.fixture
def rules():
    """Default rules."""
    return GameRules()


@pytest.fixture
def easy_rules():
    """Rules whose first blind is cleared by any play."""
    return GameRules(
        blinds=(
            Blind("small", "Small Blind", 1),
            Blind("big", "Big Blind", 2),
            Blind("boss", "Boss Blind", 3),
        ),
    )


@pytest.fixture
def unwinnable_rules():
    """Rules no play can satisfy."""
    return GameRules(
        blinds=(
            Blind("small", "Small Blind", 1_000_000),
            Blind("big", "Big Blind", 2_000_000),
            Blind("boss", "Boss Blind", 3_000_000),
        ),
    )


@pytest.fixture
def round_engine(rules, rng):
    """A round in progress against a 300 point target."""
    engine = RoundEngine(rules=rules, rng=rng)
    engine.start_round(300)
    return engine


@pytest.fixture
def game(rng):
    """A new game instance."""
    return BlindPokerGame(rng=rng)


class UnshuffledRandom(Random):
    """Random source whose shuffle leaves the deck in base order."""

    def shuffle(self, x):
        pass


@pytest.fixture
def ordered_rng():
    """
    Random source that keeps the deck in build order.

    The opening hand is then A♣ K♣ Q♣ J♣ 10♣ 9♣ 8♣ 7♣ and the next
    draws are 6♣ 5♣ 4♣ 3♣ 2♣ A♦ ...
    """
    return UnshuffledRandom()


@pytest.fixture
def ordered_game(ordered_rng):
    """A game dealt from an unshuffled deck."""
    return BlindPokerGame(rng=ordered_rng)
