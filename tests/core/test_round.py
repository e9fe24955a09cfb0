"""Tests for the round engine."""

from core.cards import cards_from_string
from core.evaluator import HandCategory
from core.game import RoundEngine, RoundStatus
from core.game.events import EventType
from core.rules import GameRules


def _select(engine: RoundEngine, *indices: int) -> None:
    for i in indices:
        assert engine.toggle_select(i)


class TestStartRound:
    """Tests for dealing a fresh round."""

    def test_initial_status(self, rules, rng):
        """Test a new engine waits for a round."""
        engine = RoundEngine(rules=rules, rng=rng)
        assert engine.status == RoundStatus.INITIALIZED
        assert not engine.is_over

    def test_start_round_deals_hand(self, round_engine):
        """Test the opening deal."""
        assert round_engine.status == RoundStatus.PLAYING
        assert len(round_engine.cards) == 8
        assert round_engine.deck_remaining == 44
        assert round_engine.plays_remaining == 3
        assert round_engine.discards_remaining == 7
        assert round_engine.score == 0
        assert round_engine.requirement == 300
        assert round_engine.last_play is None

    def test_deck_and_hand_cover_all_cards(self, round_engine):
        """Test deck plus hand is exactly the 52-card set."""
        cards = list(round_engine.deck) + round_engine.cards
        assert len(cards) == 52
        assert len(set(cards)) == 52

    def test_opening_hand_is_top_of_deck(self, rules, ordered_rng):
        """Test cards are drawn from the top of the deck."""
        engine = RoundEngine(rules=rules, rng=ordered_rng)
        engine.start_round(300)
        assert engine.cards == cards_from_string("AC KC QC JC 10C 9C 8C 7C")

    def test_restart_resets_everything(self, round_engine):
        """Test starting again rebuilds deck, budgets and score."""
        _select(round_engine, 0, 1)
        round_engine.discard()
        round_engine.round_state.score = 123

        round_engine.start_round(800)

        assert round_engine.score == 0
        assert round_engine.requirement == 800
        assert round_engine.discards_remaining == 7
        assert round_engine.deck_remaining == 44
        assert round_engine.hand.num_selected == 0

    def test_commands_rejected_before_start(self, rules, rng):
        """Test nothing happens until a round starts."""
        engine = RoundEngine(rules=rules, rng=rng)
        assert not engine.toggle_select(0)
        assert not engine.discard()
        assert not engine.play()


class TestToggleSelect:
    """Tests for card selection."""

    def test_no_sixth_selection(self, round_engine):
        """Test the selection cap."""
        _select(round_engine, 0, 1, 2, 3, 4)
        assert not round_engine.toggle_select(5)
        assert round_engine.hand.num_selected == 5

    def test_deselect_at_cap(self, round_engine):
        """Test deselecting succeeds with five selected."""
        _select(round_engine, 0, 1, 2, 3, 4)
        assert round_engine.toggle_select(4)
        assert round_engine.hand.num_selected == 4

    def test_out_of_range(self, round_engine):
        """Test a bad index is a no-op."""
        assert not round_engine.toggle_select(8)
        assert round_engine.hand.num_selected == 0

    def test_selected_category(self, rules, ordered_rng):
        """Test the preview only appears with five cards selected."""
        engine = RoundEngine(rules=rules, rng=ordered_rng)
        engine.start_round(300)

        _select(engine, 0, 1, 2, 3)
        assert engine.selected_category is None
        _select(engine, 4)
        assert engine.selected_category == HandCategory.ROYAL_FLUSH

    def test_selection_events(self, round_engine):
        """Test selection changes are announced."""
        round_engine.toggle_select(0)
        round_engine.toggle_select(0)
        types = [e.event_type for e in round_engine.events.history]
        assert types[-2:] == [EventType.CARD_SELECTED, EventType.CARD_DESELECTED]


class TestDiscard:
    """Tests for discarding."""

    def test_discard_replaces_cards(self, rules, ordered_rng):
        """Test discarded cards are replaced from the deck."""
        engine = RoundEngine(rules=rules, rng=ordered_rng)
        engine.start_round(300)
        _select(engine, 0, 1)

        assert engine.discard()

        assert engine.cards == cards_from_string("QC JC 10C 9C 8C 7C 6C 5C")
        assert engine.discards_remaining == 6
        assert engine.deck_remaining == 42
        assert engine.hand.num_selected == 0

    def test_discard_without_selection(self, round_engine):
        """Test discarding nothing is a no-op."""
        before = round_engine.cards
        assert not round_engine.discard()
        assert round_engine.cards == before
        assert round_engine.discards_remaining == 7

    def test_discard_with_no_budget(self, round_engine):
        """Test zero discards leaves hand, score and counters unchanged."""
        round_engine.round_state.discards_remaining = 0
        _select(round_engine, 0)
        before = round_engine.cards

        assert not round_engine.discard()

        assert round_engine.cards == before
        assert round_engine.hand.num_selected == 1
        assert round_engine.discards_remaining == 0
        assert round_engine.plays_remaining == 3
        assert round_engine.score == 0
        assert round_engine.deck_remaining == 44

    def test_discard_never_ends_round(self, rules, rng):
        """Test spending every discard keeps the round going."""
        engine = RoundEngine(rules=rules, rng=rng)
        engine.start_round(300)
        for _ in range(7):
            _select(engine, 0, 1, 2, 3, 4)
            assert engine.discard()

        assert engine.status == RoundStatus.PLAYING
        assert engine.discards_remaining == 0
        assert not engine.can_discard

    def test_rejection_emits_event(self, round_engine):
        """Test rejected commands are reported."""
        round_engine.discard()
        last = round_engine.events.history[-1]
        assert last.event_type == EventType.INVALID_ACTION
        assert last.data["message"] == "No cards selected"


class TestPlay:
    """Tests for playing cards."""

    def test_winning_play_ends_round(self, rules, ordered_rng):
        """Test reaching the target stops the round immediately."""
        engine = RoundEngine(rules=rules, rng=ordered_rng)
        engine.start_round(300)
        _select(engine, 0, 1, 2, 3, 4)
        played = engine.selected_cards

        assert engine.play()

        assert engine.status == RoundStatus.WON
        assert engine.is_over
        assert engine.score == 1208
        assert engine.plays_remaining == 2
        assert engine.deck_remaining == 44
        assert all(card in engine.cards for card in played)
        assert engine.last_play.category == HandCategory.ROYAL_FLUSH

    def test_commands_rejected_after_win(self, rules, ordered_rng):
        """Test a finished round accepts no more commands."""
        engine = RoundEngine(rules=rules, rng=ordered_rng)
        engine.start_round(300)
        _select(engine, 0, 1, 2, 3, 4)
        engine.play()

        assert not engine.play()
        assert not engine.discard()
        assert not engine.toggle_select(0)

    def test_play_below_target_refills(self, rules, ordered_rng):
        """Test a play short of the target removes and replaces cards."""
        engine = RoundEngine(rules=rules, rng=ordered_rng)
        engine.start_round(10_000)
        _select(engine, 0, 1, 2, 3, 4)

        assert engine.play()

        assert engine.status == RoundStatus.PLAYING
        assert engine.score == 1208
        assert engine.plays_remaining == 2
        assert engine.cards == cards_from_string("9C 8C 7C 6C 5C 4C 3C 2C")
        assert engine.deck_remaining == 39

    def test_score_accumulates(self, rules, ordered_rng):
        """Test scores add up across plays."""
        engine = RoundEngine(rules=rules, rng=ordered_rng)
        engine.start_round(10_000)
        _select(engine, 0, 1, 2, 3, 4)
        engine.play()
        _select(engine, 0, 1, 2, 3, 4)
        engine.play()

        # Royal flush, then 9-8-7-6-5 of clubs: (100 + 35) * 8
        assert engine.score == 1208 + 1080
        assert engine.last_play.category == HandCategory.STRAIGHT_FLUSH

    def test_out_of_plays_exhausts(self, rules, rng):
        """Test the round is lost once plays run out short of the target."""
        engine = RoundEngine(rules=rules, rng=rng)
        engine.start_round(1_000_000)
        for _ in range(3):
            _select(engine, 0, 1, 2, 3, 4)
            assert engine.play()

        assert engine.status == RoundStatus.EXHAUSTED
        assert engine.plays_remaining == 0
        assert not engine.play()

    def test_empty_deck_exhausts(self, rng):
        """Test running out of cards ends the round with plays left."""
        rules = GameRules(plays_per_round=20)
        engine = RoundEngine(rules=rules, rng=rng)
        engine.start_round(1_000_000)

        for _ in range(8):
            _select(engine, 0, 1, 2, 3, 4)
            engine.play()
            assert engine.status == RoundStatus.PLAYING

        assert engine.deck_remaining == 4
        _select(engine, 0, 1, 2, 3, 4)
        engine.play()

        assert engine.status == RoundStatus.EXHAUSTED
        assert engine.deck_remaining == 0
        assert len(engine.cards) == 7
        assert engine.plays_remaining == 11

    def test_play_without_selection(self, round_engine):
        """Test playing nothing is a no-op."""
        assert not round_engine.play()
        assert round_engine.plays_remaining == 3

    def test_play_with_no_budget(self, round_engine):
        """Test zero plays leaves everything unchanged."""
        round_engine.round_state.plays_remaining = 0
        _select(round_engine, 0, 1, 2, 3, 4)
        before = round_engine.cards

        assert not round_engine.play()

        assert round_engine.cards == before
        assert round_engine.score == 0

    def test_partial_play_degrades_to_high_card(self, rules, ordered_rng):
        """Test the engine scores a short selection as High Card."""
        engine = RoundEngine(rules=rules, rng=ordered_rng)
        engine.start_round(10_000)
        _select(engine, 0, 1)
        assert not engine.can_play

        assert engine.play()

        # (5 + 11 + 10) * 1
        assert engine.last_play.category == HandCategory.HIGH_CARD
        assert engine.score == 26

    def test_can_play_needs_full_selection(self, round_engine):
        """Test the play gate requires five selected cards."""
        _select(round_engine, 0, 1, 2, 3)
        assert not round_engine.can_play
        _select(round_engine, 4)
        assert round_engine.can_play

    def test_play_event(self, rules, ordered_rng):
        """Test plays are announced with category and score."""
        engine = RoundEngine(rules=rules, rng=ordered_rng)
        engine.start_round(300)
        _select(engine, 0, 1, 2, 3, 4)
        engine.play()

        played = [e for e in engine.events.history if e.event_type == EventType.HAND_PLAYED]
        assert len(played) == 1
        assert played[0].data["category"] == "Royal Flush"
        assert played[0].data["score"] == 1208
