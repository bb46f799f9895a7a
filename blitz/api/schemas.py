"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a renderer (browser UI,
dashboard, script) and the engine.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has been ended
- INVALID_STATE: Control not allowed in the session's current state
- VALIDATION_ERROR: Request body failed validation
- INTERNAL_ERROR: Unexpected failure
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field

from ..config import MAX_PLAYERS


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    CREATED = "created"
    RUNNING = "running"
    PAUSED = "paused"
    ROUND_OVER = "round_over"
    CLOSED = "closed"


class BotPolicyName(str, Enum):
    """Bot policies a session can seat."""
    HEURISTIC = "heuristic"
    RANDOM = "random"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Card information for display."""
    rank: int = Field(..., ge=1, le=10)
    color: str
    label: str

    model_config = {"from_attributes": True}


class PlayerInfo(BaseModel):
    """One player's piles for display."""
    name: str
    strategy: Optional[str] = None
    blitz_count: int = 0
    blitz_top: Optional[CardInfo] = None
    draw_count: int = 0
    revealed: list[CardInfo] = Field(default_factory=list)
    post_piles: list[list[CardInfo]] = Field(default_factory=list)
    plays_this_round: int = 0
    total_plays: int = 0
    wins: int = 0
    is_winner: bool = False


class FoundationPileInfo(BaseModel):
    """One shared foundation pile."""
    color: str
    card_count: int = 0
    top_card: Optional[CardInfo] = None


class PlayerStatsInfo(BaseModel):
    """Cross-round statistics for one player."""
    name: str
    wins: int = 0
    win_rate: int = Field(0, description="Percent of rounds won, rounded")
    total_plays: int = 0
    average_plays_per_game: int = 0


class RoundSummaryInfo(BaseModel):
    """A finished round."""
    round_number: int
    winner: Optional[str] = None
    reason: str
    duration_seconds: int
    move_count: int
    plays: dict[str, int] = Field(default_factory=dict)


class EventInfo(BaseModel):
    """An engine event."""
    type: str
    round_number: int
    message: str
    payload: dict[str, Any] = Field(default_factory=dict)
    timestamp: float


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new simulation session."""
    player_count: int = Field(4, ge=1, le=MAX_PLAYERS, description="Number of bots")
    policy: BotPolicyName = Field(BotPolicyName.HEURISTIC, description="Bot policy for every seat")
    random_seed: Optional[int] = Field(None, description="Seed for reproducible simulations")
    tick_interval: Optional[float] = Field(
        None, ge=0.0, le=10.0, description="Seconds between autoplay ticks"
    )
    max_ticks: Optional[int] = Field(None, ge=1, description="Ticks before a round is called off")
    autoplay: bool = Field(False, description="Start a round and run it in the background")


class SpeedRequest(BaseModel):
    """Request to change autoplay speed."""
    tick_interval: float = Field(..., ge=0.0, le=10.0, description="Seconds between ticks")


class RunRequest(BaseModel):
    """Request to play whole rounds synchronously."""
    rounds: int = Field(1, ge=1, le=1000, description="Rounds to play")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class StatsResponse(BaseModel):
    """Cross-round statistics."""
    session_id: str
    total_games: int = 0
    average_round_duration: int = Field(0, description="Seconds, re-rounded every round")
    players: list[PlayerStatsInfo] = Field(default_factory=list)
    recent_rounds: list[RoundSummaryInfo] = Field(default_factory=list)
    api_version: str = "v1"


class GameStateResponse(BaseModel):
    """Complete table state for display."""
    session_id: str
    status: SessionStatus
    round_active: bool
    phase: str
    round_number: int = 0
    duration_seconds: int = 0
    move_count: int = 0
    winner: Optional[str] = None
    end_reason: Optional[str] = None
    players: list[PlayerInfo] = Field(default_factory=list)
    foundation: list[FoundationPileInfo] = Field(default_factory=list)
    stats: Optional[StatsResponse] = Field(None, description="Cross-round statistics at the same moment")
    api_version: str = "v1"


class SessionResponse(BaseModel):
    """Response containing session information."""
    session_id: str
    status: SessionStatus
    policy: BotPolicyName
    player_count: int
    round_number: int = 0
    tick_interval: float = 0.5
    created_at: float = 0.0
    api_version: str = "v1"


class StepResponse(BaseModel):
    """Result of a single manual step."""
    session_id: str
    advanced: bool = Field(..., description="A card was placed or the round ended")
    round_active: bool
    game_state: GameStateResponse
    api_version: str = "v1"


class RunResponse(BaseModel):
    """Result of playing whole rounds."""
    session_id: str
    rounds: list[RoundSummaryInfo] = Field(default_factory=list)
    stats: StatsResponse
    api_version: str = "v1"


class EventsResponse(BaseModel):
    """Recent engine events, oldest first."""
    session_id: str
    events: list[EventInfo] = Field(default_factory=list)
    api_version: str = "v1"


class ControlResponse(BaseModel):
    """Result of pause/resume/speed controls."""
    session_id: str
    success: bool
    status: SessionStatus
    tick_interval: Optional[float] = None


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
