"""Tests for the WebSocket game channel."""

from fastapi.testclient import TestClient

from api.main import app
from api.websocket import ConnectionManager, _dispatch, _event_to_message, manager
from core.game import GameState
from core.game.events import EventType, GameEvent


def _receive_until(websocket, msg_type: str) -> dict:
    """Read messages until one of the given type arrives."""
    while True:
        message = websocket.receive_json()
        if message["type"] == msg_type:
            return message


class TestDispatch:
    """Tests for client command handling."""

    def test_select_blind(self, game):
        """Test selecting a blind through a message."""
        assert _dispatch(game, {"type": "select_blind", "blind_id": "small"}) is None
        assert game.state == GameState.PLAYING

    def test_locked_blind(self, game):
        """Test a locked blind reports an error."""
        assert _dispatch(game, {"type": "select_blind", "blind_id": "boss"}) == "Cannot select blind boss"

    def test_toggle_requires_int(self, game):
        """Test a non-integer index is refused."""
        game.select_blind("small")
        assert _dispatch(game, {"type": "toggle", "index": "2"}) is not None
        assert _dispatch(game, {"type": "toggle", "index": 2}) is None
        assert game.round.hand.num_selected == 1

    def test_play_needs_full_selection(self, game):
        """Test partial plays are refused over the socket."""
        game.select_blind("small")
        _dispatch(game, {"type": "toggle", "index": 0})
        assert _dispatch(game, {"type": "play"}) == "Cannot play now"
        assert game.round.plays_remaining == 3

    def test_full_round(self, ordered_game):
        """Test a winning play and returning to blind selection."""
        _dispatch(ordered_game, {"type": "select_blind", "blind_id": "small"})
        for i in range(5):
            _dispatch(ordered_game, {"type": "toggle", "index": i})

        assert _dispatch(ordered_game, {"type": "play"}) is None
        assert ordered_game.state == GameState.ROUND_RESULT
        assert _dispatch(ordered_game, {"type": "next_round"}) is None
        assert ordered_game.state == GameState.SELECTING_BLIND

    def test_discard(self, game):
        """Test discarding through a message."""
        game.select_blind("small")
        assert _dispatch(game, {"type": "discard"}) == "Cannot discard now"
        _dispatch(game, {"type": "toggle", "index": 0})
        assert _dispatch(game, {"type": "discard"}) is None

    def test_unknown_type(self, game):
        """Test unknown message types are reported."""
        assert _dispatch(game, {"type": "shuffle"}) == "Unknown message type: shuffle"


class TestEventMessages:
    """Tests for outgoing event messages."""

    def test_round_won_message(self, game):
        """Test win events carry a round result."""
        event = GameEvent(EventType.ROUND_WON, {"blind": "small", "score": 1208, "requirement": 300})
        message = _event_to_message(event, game)

        assert message["type"] == "event"
        assert message["event_type"] == "ROUND_WON"
        assert message["round_result"] == {"outcome": "win", "score": 1208, "requirement": 300}
        assert message["state"]["state"] == "SELECTING_BLIND"

    def test_plain_event(self, game):
        """Test other events carry no round result."""
        event = GameEvent(EventType.CARD_SELECTED, {"index": 0})
        assert "round_result" not in _event_to_message(event, game)


class TestEndpoint:
    """Tests for the socket endpoint."""

    def test_initial_state_and_errors(self):
        """Test the opening state push and malformed input handling."""
        client = TestClient(app)
        with client.websocket_connect("/ws/game/ws-test-1") as websocket:
            first = websocket.receive_json()
            assert first["type"] == "state_update"
            assert first["state"]["state"] == "SELECTING_BLIND"

            websocket.send_text("not json")
            assert _receive_until(websocket, "error")["message"] == "Malformed message"
            assert manager.active_connections >= 1

    def test_select_blind_streams_events(self):
        """Test commands produce event messages."""
        client = TestClient(app)
        with client.websocket_connect("/ws/game/ws-test-2") as websocket:
            websocket.receive_json()
            websocket.send_json({"type": "select_blind", "blind_id": "small"})

            started = None
            while started is None:
                message = _receive_until(websocket, "event")
                if message["event_type"] == "ROUND_STARTED":
                    started = message

            assert started["data"]["requirement"] == 300
            assert started["state"]["state"] == "PLAYING"

    def test_reset_game(self):
        """Test a reset returns a fresh game."""
        client = TestClient(app)
        with client.websocket_connect("/ws/game/ws-test-3") as websocket:
            websocket.receive_json()
            websocket.send_json({"type": "reset_game"})
            message = _receive_until(websocket, "state_update")
            assert message["state"]["state"] == "SELECTING_BLIND"


class TestConnectionManager:
    """Tests for game retention."""

    def test_idle_games_evicted_oldest_first(self):
        """Test disconnected games beyond the limit are dropped."""
        games = ConnectionManager(max_games=2)
        first = games.get_or_create_game("a")
        games.get_or_create_game("b")
        games.get_or_create_game("c")

        games.disconnect("c")

        assert games.retained_games == 2
        assert games.get_or_create_game("a") is not first
        assert games.retained_games == 2

    def test_games_kept_within_limit(self):
        """Test a disconnected game survives for reconnection."""
        games = ConnectionManager(max_games=2)
        game = games.get_or_create_game("a")

        games.disconnect("a")

        assert games.get_or_create_game("a") is game
