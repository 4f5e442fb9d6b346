import math
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime

from backend.app.models.enums import Side

MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 3.0

class AIParameters(BaseModel):
    """Per-move behaviour knobs, derived from the current difficulty."""
    model_config = ConfigDict(frozen=True)

    search_depth: int = Field(default=1, ge=1, le=3)
    aggressiveness: float = 0.6
    defensiveness: float = 0.75
    mistake_rate: float = Field(default=0.22, ge=0.0, le=1.0)

    @classmethod
    def from_difficulty(cls, difficulty: float) -> "AIParameters":
        d = min(MAX_DIFFICULTY, max(MIN_DIFFICULTY, difficulty))
        return cls(
            search_depth=math.floor(d),
            aggressiveness=0.4 + d * 0.2,
            defensiveness=0.5 + d * 0.25,
            mistake_rate=max(0.0, 0.3 - d * 0.08),
        )

class RatingSnapshot(BaseModel):
    """Opaque rating state a host can store and restore between sessions."""
    human_rating: float = 1500.0
    computer_rating: float = 1500.0
    human_streak: int = 0
    computer_streak: int = 0
    history: List[Side] = Field(default_factory=list)
    difficulty: float = MIN_DIFFICULTY

    @field_validator("history")
    @classmethod
    def _only_winners(cls, value: List[Side]) -> List[Side]:
        if any(side == Side.EMPTY for side in value):
            raise ValueError("history may only contain HUMAN or COMPUTER")
        return value

    @model_validator(mode="after")
    def _one_side_streaking(self) -> "RatingSnapshot":
        if self.human_streak > 0 and self.computer_streak > 0:
            raise ValueError("human_streak and computer_streak cannot both be positive")
        return self

class MoveRecord(BaseModel):
    # Allow extra fields in the JSON to prevent crashes if schema evolves
    model_config = ConfigDict(extra='ignore')

    player: Side
    row: int
    col: int
    duration: Optional[float] = 0.0

# --- API payloads ---

class SessionCreate(BaseModel):
    player_name: str = Field(default="guest", min_length=1, max_length=64)

class MoveRequest(BaseModel):
    row: int
    col: int

class ForfeitRequest(BaseModel):
    winner: Side = Side.COMPUTER
    reason: str = "forced"

class RatingView(BaseModel):
    human_rating: int
    computer_rating: int
    difficulty: float
    human_streak: int
    computer_streak: int

class GameResponse(BaseModel):
    session_id: int
    player_name: str
    status: str
    winner: Optional[Side] = None
    current_turn: Side
    board: List[List[int]]
    history: List[MoveRecord]
    last_move: Optional[MoveRecord] = None
    ratings: RatingView
    games_played: int
    created_at: datetime

class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    player_name: str
    human_rating: float
    computer_rating: float
    difficulty: float
    games_played: int
    human_wins: int
    computer_wins: int
    draws: int

class HistoryPoint(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    human_rating: float
    computer_rating: float
    difficulty: float
    winner: Optional[Side] = None
    timestamp: datetime