"""Game API endpoints."""

import time
from fastapi import APIRouter, HTTPException, Header
from typing import Annotated, Any

from api.schemas import (
    ActionRequest,
    BlindData,
    BlindResponse,
    CardData,
    CardResponse,
    GameStateData,
    GameStateResponse,
    HandCardResponse,
    OutcomeData,
    PlayData,
    PlayResponse,
    RoundResultResponse,
    RulesData,
    SelectBlindRequest,
    SessionData,
    ToggleSelectRequest,
)
from api.session import create_session, get_session_store
from config import config
from core.cards import Card, Rank, Suit
from core.evaluator import HandCategory, PlayResult
from core.game import BlindPokerGame, RoundOutcome
from core.rules import Blind, GameRules

router = APIRouter()

# In-memory game cache (for performance, backed by session store)
_games: dict[str, BlindPokerGame] = {}

# Session data keys
SESSION_KEY_GAME = "game"
SESSION_KEY_CREATED_AT = "created_at"


def _new_game() -> BlindPokerGame:
    """Create a game with the configured rules."""
    return BlindPokerGame(rules=GameRules.from_config(config.game))


def _serialize_card(card: Card) -> CardData:
    """Serialize a card."""
    return CardData(rank=card.rank.value, suit=card.suit.value)


def _deserialize_card(data: CardData) -> Card:
    """Deserialize a card."""
    return Card(Rank(data.rank), Suit(data.suit))


def _serialize_rules(rules: GameRules) -> RulesData:
    """Serialize game rules."""
    return RulesData(
        hand_size=rules.hand_size,
        play_size=rules.play_size,
        plays_per_round=rules.plays_per_round,
        discards_per_round=rules.discards_per_round,
        blinds=[BlindData(id=b.id, name=b.name, requirement=b.requirement) for b in rules.blinds],
    )


def _deserialize_rules(data: RulesData) -> GameRules:
    """Deserialize game rules."""
    return GameRules(
        hand_size=data.hand_size,
        play_size=data.play_size,
        plays_per_round=data.plays_per_round,
        discards_per_round=data.discards_per_round,
        blinds=tuple(Blind(b.id, b.name, b.requirement) for b in data.blinds),
    )


def _serialize_game(game: BlindPokerGame) -> dict[str, Any]:
    """Serialize game state for session storage."""
    round_engine = game.round
    last_play = round_engine.last_play
    outcome = game.last_outcome

    data = GameStateData(
        state=game._machine_state,
        round_state=round_engine._machine_state,
        unlocked_blind_count=game.unlocked_blind_count,
        current_blind_id=game.current_blind.id if game.current_blind else None,
        deck_cards=[_serialize_card(c) for c in round_engine.deck],
        hand_cards=[_serialize_card(c) for c in round_engine.hand.cards],
        selected_cards=[_serialize_card(c) for c in round_engine.selected_cards],
        plays_remaining=round_engine.plays_remaining,
        discards_remaining=round_engine.discards_remaining,
        score=round_engine.score,
        requirement=round_engine.requirement,
        last_play=(
            PlayData(
                category=last_play.category.name,
                score=last_play.score,
                cards=[_serialize_card(c) for c in last_play.cards],
            )
            if last_play
            else None
        ),
        last_outcome=(
            OutcomeData(
                blind_id=outcome.blind.id,
                won=outcome.won,
                score=outcome.score,
                requirement=outcome.requirement,
            )
            if outcome
            else None
        ),
        rules=_serialize_rules(game.rules),
    )
    return data.model_dump()


def _deserialize_game(raw: dict[str, Any]) -> BlindPokerGame:
    """Restore game from session data."""
    data = GameStateData.model_validate(raw)
    game = BlindPokerGame(rules=_deserialize_rules(data.rules))

    # Restore state machine states
    game._machine_state = data.state
    game.round._machine_state = data.round_state

    # Restore progression
    game.unlocked_blind_count = data.unlocked_blind_count
    if data.current_blind_id is not None:
        game.current_blind = game.rules.get_blind(data.current_blind_id)
    if data.last_outcome is not None:
        blind = game.rules.get_blind(data.last_outcome.blind_id)
        if blind is not None:
            game.last_outcome = RoundOutcome(
                blind=blind,
                won=data.last_outcome.won,
                score=data.last_outcome.score,
                requirement=data.last_outcome.requirement,
            )

    # Restore deck and hand
    round_engine = game.round
    round_engine.deck._cards = [_deserialize_card(c) for c in data.deck_cards]
    round_engine.hand.cards = [_deserialize_card(c) for c in data.hand_cards]
    round_engine.hand.selected = {_deserialize_card(c) for c in data.selected_cards}

    # Restore budgets
    round_state = round_engine.round_state
    round_state.plays_remaining = data.plays_remaining
    round_state.discards_remaining = data.discards_remaining
    round_state.score = data.score
    round_state.requirement = data.requirement
    if data.last_play is not None:
        round_state.last_play = PlayResult(
            category=HandCategory[data.last_play.category],
            score=data.last_play.score,
            cards=tuple(_deserialize_card(c) for c in data.last_play.cards),
        )

    return game


async def _load_game(session_id: str) -> BlindPokerGame | None:
    """Load game from session store."""
    store = await get_session_store()
    session_data = await store.get(session_id)
    if session_data and session_data.get(SESSION_KEY_GAME):
        return _deserialize_game(session_data[SESSION_KEY_GAME])
    return None


async def _save_game(session_id: str, game: BlindPokerGame) -> None:
    """Save game to session store."""
    store = await get_session_store()
    existing = await store.get(session_id) or {}
    now = int(time.time())
    session = SessionData(
        game=_serialize_game(game),
        created_at=existing.get(SESSION_KEY_CREATED_AT, now),
        last_activity=now,
    )
    await store.set(session_id, session.model_dump())


async def _get_game(session_id: str) -> BlindPokerGame:
    """Get or create a game for the session."""
    # Check memory cache first
    if session_id in _games:
        return _games[session_id]

    # Try to load from session store
    game = await _load_game(session_id)
    if game is not None:
        _games[session_id] = game
        return game

    # Create new game
    game = _new_game()
    _games[session_id] = game
    await _save_game(session_id, game)
    return game


def _card_to_response(card: Card) -> CardResponse:
    """Convert a Card to CardResponse."""
    return CardResponse(rank=str(card.rank), suit=str(card.suit), chips=card.chips)


def _blind_to_response(game: BlindPokerGame, blind: Blind) -> BlindResponse:
    """Convert a Blind to BlindResponse."""
    return BlindResponse(
        id=blind.id,
        name=blind.name,
        requirement=blind.requirement,
        unlocked=game.is_unlocked(blind.id),
    )


def _game_state_response(game: BlindPokerGame) -> GameStateResponse:
    """Convert game state to response."""
    round_engine = game.round
    hand = round_engine.hand
    category = round_engine.selected_category
    last_play = round_engine.last_play
    outcome = game.last_outcome

    return GameStateResponse(
        state=game.state.name,
        round_status=round_engine.status.name,
        blinds=[_blind_to_response(game, b) for b in game.blinds],
        current_blind=(
            _blind_to_response(game, game.current_blind) if game.current_blind else None
        ),
        requirement=game.requirement,
        hand=[
            HandCardResponse(
                rank=str(c.rank),
                suit=str(c.suit),
                chips=c.chips,
                selected=c in hand.selected,
            )
            for c in hand.cards
        ],
        selected_category=category.label if category else None,
        deck_remaining=round_engine.deck_remaining,
        plays_remaining=round_engine.plays_remaining,
        discards_remaining=round_engine.discards_remaining,
        score=round_engine.score,
        can_play=game.can_play,
        can_discard=game.can_discard,
        last_play=(
            PlayResponse(
                category=last_play.category.label,
                score=last_play.score,
                cards=[_card_to_response(c) for c in last_play.cards],
            )
            if last_play
            else None
        ),
        last_outcome=(
            RoundResultResponse(
                outcome="win" if outcome.won else "loss",
                blind_id=outcome.blind.id,
                score=outcome.score,
                requirement=outcome.requirement,
            )
            if outcome
            else None
        ),
    )


@router.post("/new")
async def new_game(
    session_id: Annotated[str | None, Header(alias="X-Session-ID")] = None,
) -> dict[str, str]:
    """Create a new game session."""
    if session_id is None:
        session_id = await create_session()

    # Reset game
    game = _new_game()
    _games[session_id] = game
    await _save_game(session_id, game)

    return {"session_id": session_id}


@router.get("/state")
async def get_state(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Get current game state."""
    game = await _get_game(session_id)
    return _game_state_response(game)


@router.get("/blinds")
async def list_blinds(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> list[BlindResponse]:
    """List blind tiers with their lock status."""
    game = await _get_game(session_id)
    return [_blind_to_response(game, b) for b in game.blinds]


@router.post("/blind")
async def select_blind(
    request: SelectBlindRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Select a blind and deal a new round."""
    game = await _get_game(session_id)

    if not game.select_blind(request.blind_id):
        raise HTTPException(status_code=400, detail=f"Cannot select blind {request.blind_id}")

    await _save_game(session_id, game)
    return _game_state_response(game)


@router.post("/select")
async def toggle_select(
    request: ToggleSelectRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Select or deselect a card in the hand."""
    game = await _get_game(session_id)

    if not game.toggle_select(request.index):
        raise HTTPException(status_code=400, detail=f"Cannot toggle card {request.index}")

    await _save_game(session_id, game)
    return _game_state_response(game)


@router.post("/action")
async def player_action(
    request: ActionRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Play or discard the selected cards."""
    game = await _get_game(session_id)

    if request.action == "play":
        # Only full plays are scored through the API
        accepted = game.can_play and game.play()
    else:
        accepted = game.discard()

    if not accepted:
        raise HTTPException(status_code=400, detail=f"Cannot {request.action} now")

    await _save_game(session_id, game)
    return _game_state_response(game)


@router.post("/next")
async def next_round(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Leave the round result and return to blind selection."""
    game = await _get_game(session_id)

    if not game.start_new_round_after_result():
        raise HTTPException(status_code=400, detail="No round result to continue from")

    await _save_game(session_id, game)
    return _game_state_response(game)
