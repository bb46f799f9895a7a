"""
API Module - HTTP interface for renderers.

Exposes the engine via REST for browser UIs and dashboards.
A renderer:
1. Creates a session (a table of bots)
2. Starts rounds and drives them (autoplay, pause, resume, step)
3. Polls snapshots or listens on the WebSocket
4. Reads cross-round statistics

All state is session-scoped and in memory.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    SpeedRequest,
    RunRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    StatsResponse,
    StepResponse,
    RunResponse,
    EventsResponse,
    ControlResponse,
    ErrorResponse,
    # Shared
    PlayerInfo,
    CardInfo,
    FoundationPileInfo,
    # Enums
    ErrorCode,
    SessionStatus,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "SpeedRequest",
    "RunRequest",
    # Responses
    "SessionResponse",
    "GameStateResponse",
    "StatsResponse",
    "StepResponse",
    "RunResponse",
    "EventsResponse",
    "ControlResponse",
    "ErrorResponse",
    # Shared
    "PlayerInfo",
    "CardInfo",
    "FoundationPileInfo",
    # Enums
    "ErrorCode",
    "SessionStatus",
    # Service
    "APIService",
    "create_app",
]
