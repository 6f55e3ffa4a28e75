"""Game schemas for request/response validation."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from digmaze.config import MIN_DIMENSION


class GamePosition(BaseModel):
    """Schema for a position on the board."""

    x: int
    y: int


class GameCreateRequest(BaseModel):
    """Schema for creating a new game. Omitted sizes use the server defaults."""

    width: Optional[int] = Field(None, ge=MIN_DIMENSION)
    height: Optional[int] = Field(None, ge=MIN_DIMENSION)
    seed: Optional[int] = None


class GameSummary(BaseModel):
    """Schema for a game list item (without the grid)."""

    id: str
    width: int
    height: int
    started: bool
    finished: bool
    created_at: datetime


class GameState(GameSummary):
    """Schema for the full state of a game."""

    start: GamePosition
    goal: GamePosition
    player: GamePosition
    solving: bool
    elapsed_ms: int
    elapsed: str  # MM:SS.mmm
    grid: list[str]


class GameListResponse(BaseModel):
    """Schema for game list response."""

    games: list[GameSummary]
    total: int


class MoveRequest(BaseModel):
    """Schema for move request."""

    direction: str = Field(..., pattern="^(up|right|down|left)$")


class MoveResponse(BaseModel):
    """Schema for move response."""

    moved: bool
    position: GamePosition
    finished: bool
    elapsed_ms: int
    elapsed: str


class SolveResponse(BaseModel):
    """Schema for solve response. Directions: 0=up, 1=right, 2=down, 3=left."""

    directions: list[int]
    length: int
    path: list[GamePosition]
