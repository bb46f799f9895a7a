"""
FastAPI Application - REST API for renderers and dashboards.

Endpoints:
    POST   /api/v1/sessions                 Create simulation session
    GET    /api/v1/sessions                 List sessions
    GET    /api/v1/sessions/{id}            Get session status
    DELETE /api/v1/sessions/{id}            End session
    POST   /api/v1/sessions/{id}/rounds     Start a round (optionally autoplay)
    POST   /api/v1/sessions/{id}/step       Run a single tick
    POST   /api/v1/sessions/{id}/pause      Pause autoplay
    POST   /api/v1/sessions/{id}/resume     Resume autoplay
    POST   /api/v1/sessions/{id}/speed      Change autoplay speed
    POST   /api/v1/sessions/{id}/run        Play whole rounds synchronously
    GET    /api/v1/sessions/{id}/state      Get table snapshot
    GET    /api/v1/sessions/{id}/stats      Get cross-round statistics
    GET    /api/v1/sessions/{id}/events     Get recent engine events
    WS     /api/v1/sessions/{id}/ws         WebSocket for live snapshots

Renderers poll /state (or listen on the WebSocket) and never see a
half-applied move: every response is built from a materialized snapshot.
"""

from typing import Annotated, Optional, Union
import asyncio
import json
import logging
import os

# Environment configuration
BLITZ_ENV = os.getenv("BLITZ_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


logger = logging.getLogger(__name__)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query, WebSocket, WebSocketDisconnect
        from fastapi.concurrency import run_in_threadpool
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import APIService
    from .schemas import (
        # Request models
        CreateSessionRequest,
        SpeedRequest,
        RunRequest,
        # Response models
        ControlResponse,
        EndSessionResponse,
        ErrorResponse,
        EventsResponse,
        GameStateResponse,
        HealthResponse,
        RunResponse,
        SessionListResponse,
        SessionResponse,
        StatsResponse,
        StepResponse,
        # Enums
        ErrorCode,
    )
    from .. import __version__

    app = FastAPI(
        title="Blitz Simulator API",
        description="""
Dutch Blitz simulation among automated players.

## Driving a session

1. `POST /sessions` creates a table of bots
2. `POST /sessions/{id}/rounds` deals a round
   (`?autoplay=true` runs it in the background at the session's speed)
3. `POST /step` advances one tick; `/pause` and `/resume` hold autoplay
4. `GET /state` and `GET /stats` return read-only snapshots

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_STATE` | Control not allowed in the current state |
| `VALIDATION_ERROR` | Invalid request parameters |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()

    # WebSocket connections and autoplay tasks per session
    ws_connections: dict[str, list[WebSocket]] = {}
    autoplay_tasks: dict[str, asyncio.Task] = {}

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def error_to_response(error: ErrorResponse) -> JSONResponse:
        status_code = {
            ErrorCode.SESSION_NOT_FOUND: 404,
            ErrorCode.INVALID_STATE: 409,
        }.get(error.error_code, 400)
        return make_error_response(error.error_code, error.error, status_code, error.details)

    async def broadcast_to_session(session_id: str, message: dict):
        """Broadcast a message to all WebSocket connections for a session."""
        if session_id in ws_connections:
            dead_connections = []
            for ws in ws_connections[session_id]:
                try:
                    await ws.send_json(message)
                except (WebSocketDisconnect, RuntimeError):
                    dead_connections.append(ws)
            for ws in dead_connections:
                ws_connections[session_id].remove(ws)

    async def broadcast_state(session_id: str):
        state = api_service.get_game_state(session_id)
        if not isinstance(state, ErrorResponse):
            await broadcast_to_session(session_id, {
                "type": "state_update",
                "payload": state.model_dump(mode="json"),
            })

    def stop_autoplay(session_id: str):
        """Cancel the session's background round, if one is running."""
        task = autoplay_tasks.pop(session_id, None)
        game_loop = api_service.get_game_loop(session_id)
        if game_loop:
            game_loop.stop()
        if task and not task.done():
            task.cancel()

    def start_autoplay(session_id: str):
        """Run the session's current round in the background."""
        game_loop = api_service.get_game_loop(session_id)
        if not game_loop:
            return
        stop_autoplay(session_id)

        async def on_update(_snapshot):
            await broadcast_state(session_id)

        async def autoplay():
            result = await game_loop.run(on_update=on_update)
            if result.summary:
                await broadcast_to_session(session_id, {
                    "type": "round_over",
                    "payload": result.summary.to_dict(),
                })

        autoplay_tasks[session_id] = asyncio.create_task(autoplay())

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid settings"}},
        tags=["Sessions"],
        summary="Create a new simulation session",
    )
    async def create_session(body: CreateSessionRequest) -> Union[SessionResponse, JSONResponse]:
        """Seat a table of bots. With `autoplay=true` the first round starts immediately."""
        try:
            response = api_service.create_session(body)
        except ValueError as e:
            return make_error_response(ErrorCode.VALIDATION_ERROR, str(e))

        if body.autoplay:
            start_autoplay(response.session_id)
        return response

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        """End a session, stop its autoplay and release resources."""
        stop_autoplay(session_id)
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Control Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/rounds",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Controls"],
        summary="Deal a new round",
    )
    async def start_round(
        session_id: str,
        autoplay: Annotated[bool, Query(description="Run the round in the background")] = False,
    ) -> Union[GameStateResponse, JSONResponse]:
        """Any autoplay of the previous round stops before the new deal."""
        stop_autoplay(session_id)
        response = api_service.start_round(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        if autoplay:
            start_autoplay(session_id)
        await broadcast_state(session_id)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/step",
        response_model=StepResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Controls"],
        summary="Run a single tick",
    )
    async def step(session_id: str) -> Union[StepResponse, JSONResponse]:
        """Stepping an ended round is a no-op that reports `advanced=false`."""
        response = api_service.step(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        await broadcast_state(session_id)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/pause",
        response_model=ControlResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Controls"],
        summary="Pause autoplay",
    )
    async def pause(session_id: str) -> Union[ControlResponse, JSONResponse]:
        response = api_service.pause(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/resume",
        response_model=ControlResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Controls"],
        summary="Resume autoplay",
    )
    async def resume(session_id: str) -> Union[ControlResponse, JSONResponse]:
        response = api_service.resume(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/speed",
        response_model=ControlResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Controls"],
        summary="Change autoplay speed",
    )
    async def set_speed(session_id: str, body: SpeedRequest) -> Union[ControlResponse, JSONResponse]:
        response = api_service.set_speed(session_id, body.tick_interval)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/run",
        response_model=RunResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Controls"],
        summary="Play whole rounds synchronously",
    )
    async def run_rounds(session_id: str, body: RunRequest) -> Union[RunResponse, JSONResponse]:
        response = await run_in_threadpool(api_service.run_rounds, session_id, body.rounds)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        await broadcast_state(session_id)
        return response

    # =========================================================================
    # Observation Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Observation"],
        summary="Get the current table snapshot",
    )
    async def get_game_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        response = api_service.get_game_state(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/stats",
        response_model=StatsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Observation"],
        summary="Get cross-round statistics",
    )
    async def get_stats(session_id: str) -> Union[StatsResponse, JSONResponse]:
        response = api_service.get_stats(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/events",
        response_model=EventsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Observation"],
        summary="Get recent engine events",
    )
    async def get_events(
        session_id: str,
        limit: Annotated[int, Query(ge=1, le=50, description="Most recent N events")] = 50,
    ) -> Union[EventsResponse, JSONResponse]:
        response = api_service.get_events(session_id, limit)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for live updates.

        Messages from server:
        - state_update: Table snapshot after a tick or control
        - round_over: Summary of a finished autoplay round
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()

        ws_connections.setdefault(session_id, []).append(websocket)

        try:
            # Send initial state
            response = api_service.get_game_state(session_id)
            if isinstance(response, ErrorResponse):
                await websocket.send_json({
                    "type": "error",
                    "payload": response.model_dump(mode="json"),
                })
            else:
                await websocket.send_json({
                    "type": "state_update",
                    "payload": response.model_dump(mode="json"),
                })

            # Listen for messages
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                    if message.get("type") == "ping":
                        await websocket.send_json({"type": "pong"})
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })

        except WebSocketDisconnect:
            logger.debug("WebSocket for session %s disconnected", session_id)
        finally:
            if session_id in ws_connections:
                if websocket in ws_connections[session_id]:
                    ws_connections[session_id].remove(websocket)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service="blitz-simulator",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Blitz Simulator API",
            "version": __version__,
            "environment": BLITZ_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn blitz.api.app:create_app --factory
