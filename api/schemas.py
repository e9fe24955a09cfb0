"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Literal


# Game schemas
class SelectBlindRequest(BaseModel):
    """Request to start a round against a blind."""

    blind_id: str = Field(..., min_length=1, description="Blind identifier")


class ToggleSelectRequest(BaseModel):
    """Request to select or deselect a card in the hand."""

    index: int = Field(..., ge=0, description="Position of the card in the hand")


class ActionRequest(BaseModel):
    """Request for player action."""

    action: Literal["play", "discard"]


class CardResponse(BaseModel):
    """Card representation."""

    model_config = ConfigDict(from_attributes=True)

    rank: str
    suit: str
    chips: int


class HandCardResponse(CardResponse):
    """Card resident in the hand, with its selection flag."""

    selected: bool = False


class BlindResponse(BaseModel):
    """Blind tier representation."""

    id: str
    name: str
    requirement: int
    unlocked: bool


class PlayResponse(BaseModel):
    """Most recent play."""

    category: str
    score: int
    cards: list[CardResponse]


class RoundResultResponse(BaseModel):
    """Round result."""

    outcome: Literal["win", "loss"]
    blind_id: str
    score: int
    requirement: int


class GameStateResponse(BaseModel):
    """Current game state."""

    state: str
    round_status: str
    blinds: list[BlindResponse]
    current_blind: BlindResponse | None
    requirement: int | None
    hand: list[HandCardResponse]
    selected_category: str | None
    deck_remaining: int
    plays_remaining: int
    discards_remaining: int
    score: int
    can_play: bool
    can_discard: bool
    last_play: PlayResponse | None
    last_outcome: RoundResultResponse | None


# Game State Persistence schemas
class CardData(BaseModel):
    """Serialized card data."""

    rank: int
    suit: int


class BlindData(BaseModel):
    """Serialized blind data."""

    id: str
    name: str
    requirement: int


class RulesData(BaseModel):
    """Serialized rules data."""

    hand_size: int = 8
    play_size: int = 5
    plays_per_round: int = 3
    discards_per_round: int = 7
    blinds: list[BlindData]


class PlayData(BaseModel):
    """Serialized play result."""

    category: str
    score: int
    cards: list[CardData]


class OutcomeData(BaseModel):
    """Serialized round outcome."""

    blind_id: str
    won: bool
    score: int
    requirement: int


class GameStateData(BaseModel):
    """Serialized game state for session storage."""

    state: str
    round_state: str
    unlocked_blind_count: int
    current_blind_id: str | None
    deck_cards: list[CardData]
    hand_cards: list[CardData]
    selected_cards: list[CardData]
    plays_remaining: int
    discards_remaining: int
    score: int
    requirement: int
    last_play: PlayData | None = None
    last_outcome: OutcomeData | None = None
    rules: RulesData


class SessionData(BaseModel):
    """Complete session data structure."""

    game: GameStateData | None = None
    created_at: int
    last_activity: int
