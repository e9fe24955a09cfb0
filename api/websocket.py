"""WebSocket connection management with game engine integration."""

import asyncio
import json
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from typing import Any

from api.routes.game import _game_state_response, _new_game
from core.game import BlindPokerGame
from core.game.events import GameEvent, EventType

logger = logging.getLogger(__name__)

router = APIRouter()


class ConnectionManager:
    """Manage WebSocket connections and game instances."""

    def __init__(self, max_games: int = 1000) -> None:
        self._connections: dict[str, WebSocket] = {}
        self._games: dict[str, BlindPokerGame] = {}
        self._max_games = max_games
        self._event_queues: dict[str, asyncio.Queue] = {}

    async def connect(self, websocket: WebSocket, session_id: str) -> None:
        """Accept and register a new connection."""
        await websocket.accept()
        self._connections[session_id] = websocket
        self._event_queues[session_id] = asyncio.Queue()

    def disconnect(self, session_id: str) -> None:
        """Remove a connection."""
        self._connections.pop(session_id, None)
        self._event_queues.pop(session_id, None)
        # Keep the game for potential reconnection
        self._evict_idle_games()

    def get_or_create_game(self, session_id: str) -> BlindPokerGame:
        """Get or create a game for the session."""
        if session_id not in self._games:
            return self.reset_game(session_id)
        return self._games[session_id]

    def reset_game(self, session_id: str) -> BlindPokerGame:
        """Reset the game for a session."""
        game = _new_game()
        self._games[session_id] = game
        game.subscribe(lambda event: self._queue_event(session_id, event))
        self._evict_idle_games()
        return game

    def _evict_idle_games(self) -> None:
        """Drop the oldest disconnected games once more than max_games are kept."""
        idle = [sid for sid in self._games if sid not in self._connections]
        excess = len(self._games) - self._max_games
        for sid in idle[:max(excess, 0)]:
            del self._games[sid]
            logger.debug("Evicted idle game: %s", sid)

    def _queue_event(self, session_id: str, event: GameEvent) -> None:
        """Queue an event for async delivery."""
        if session_id in self._event_queues:
            self._event_queues[session_id].put_nowait(event)

    async def get_event(self, session_id: str) -> GameEvent | None:
        """Get the next event from the queue."""
        if session_id in self._event_queues:
            try:
                return await asyncio.wait_for(
                    self._event_queues[session_id].get(),
                    timeout=0.1,
                )
            except asyncio.TimeoutError:
                return None
        return None

    async def send_message(self, session_id: str, message: dict[str, Any]) -> None:
        """Send a message to a specific session."""
        if session_id in self._connections:
            await self._connections[session_id].send_json(message)

    @property
    def active_connections(self) -> int:
        """Return number of active connections."""
        return len(self._connections)

    @property
    def retained_games(self) -> int:
        """Return number of games kept in memory."""
        return len(self._games)


# Global connection manager
manager = ConnectionManager()


def _game_state_to_dict(game: BlindPokerGame) -> dict[str, Any]:
    """Convert game state to a dictionary for JSON serialization."""
    return _game_state_response(game).model_dump()


def _event_to_message(event: GameEvent, game: BlindPokerGame) -> dict[str, Any]:
    """Convert a game event to a WebSocket message."""
    base_message = {
        "type": "event",
        "event_type": event.event_type.name,
        "data": event.data,
        "state": _game_state_to_dict(game),
    }

    # Add specific fields based on event type
    if event.event_type in (EventType.ROUND_WON, EventType.ROUND_LOST):
        base_message["round_result"] = {
            "outcome": "win" if event.event_type == EventType.ROUND_WON else "loss",
            "score": event.data.get("score", 0),
            "requirement": event.data.get("requirement", 0),
        }

    return base_message


def _dispatch(game: BlindPokerGame, message: dict[str, Any]) -> str | None:
    """
    Apply a client command to the game.

    Returns:
        An error message if the command was rejected, None otherwise
    """
    msg_type = message.get("type")

    if msg_type == "select_blind":
        blind_id = message.get("blind_id", "")
        if not game.select_blind(str(blind_id)):
            return f"Cannot select blind {blind_id}"

    elif msg_type == "toggle":
        index = message.get("index")
        if not isinstance(index, int) or not game.toggle_select(index):
            return f"Cannot toggle card {index}"

    elif msg_type == "play":
        if not game.can_play or not game.play():
            return "Cannot play now"

    elif msg_type == "discard":
        if not game.discard():
            return "Cannot discard now"

    elif msg_type == "next_round":
        if not game.start_new_round_after_result():
            return "No round result to continue from"

    else:
        return f"Unknown message type: {msg_type}"

    return None


@router.websocket("/game/{session_id}")
async def game_websocket(websocket: WebSocket, session_id: str) -> None:
    """
    WebSocket endpoint for real-time game updates.

    Messages from client:
    - {"type": "select_blind", "blind_id": "small"}
    - {"type": "toggle", "index": 3}
    - {"type": "play"}
    - {"type": "discard"}
    - {"type": "next_round"}
    - {"type": "reset_game"}
    - {"type": "get_state"}

    Messages to client:
    - {"type": "state_update", "state": {...}}
    - {"type": "event", "event_type": "...", "data": {...}, "state": {...}}
    - {"type": "error", "message": "..."}
    """
    await manager.connect(websocket, session_id)
    game = manager.get_or_create_game(session_id)

    # Send initial state
    await manager.send_message(session_id, {
        "type": "state_update",
        "state": _game_state_to_dict(game),
    })

    async def process_events():
        """Process game events and send to client."""
        while True:
            event = await manager.get_event(session_id)
            if event:
                await manager.send_message(session_id, _event_to_message(event, game))
            else:
                await asyncio.sleep(0.01)

    # Start event processor
    event_task = asyncio.create_task(process_events())

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await manager.send_message(session_id, {
                    "type": "error",
                    "message": "Malformed message",
                })
                continue

            msg_type = message.get("type")

            if msg_type == "get_state":
                await manager.send_message(session_id, {
                    "type": "state_update",
                    "state": _game_state_to_dict(game),
                })
                continue

            if msg_type == "reset_game":
                game = manager.reset_game(session_id)
                await manager.send_message(session_id, {
                    "type": "state_update",
                    "state": _game_state_to_dict(game),
                })
                continue

            error = _dispatch(game, message)
            if error is not None:
                await manager.send_message(session_id, {
                    "type": "error",
                    "message": error,
                })

    except WebSocketDisconnect:
        logger.debug("WebSocket disconnected: %s", session_id)
    finally:
        event_task.cancel()
        try:
            await event_task
        except asyncio.CancelledError:
            pass
        manager.disconnect(session_id)
