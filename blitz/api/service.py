"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to session calls
2. Owns one GameLoop per session
3. Formats snapshots and statistics for renderers

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .schemas import (
    # Requests
    CreateSessionRequest,
    # Responses
    ControlResponse,
    ErrorResponse,
    EventsResponse,
    GameStateResponse,
    RunResponse,
    SessionResponse,
    StatsResponse,
    StepResponse,
    # Shared
    CardInfo,
    EventInfo,
    FoundationPileInfo,
    PlayerInfo,
    PlayerStatsInfo,
    RoundSummaryInfo,
    # Enums
    BotPolicyName,
    ErrorCode,
    SessionStatus,
)
from ..config import GameConfig
from ..engine_core.card import Card
from ..engine_core.snapshot import GameSnapshot, StatsSnapshot
from ..session import GameLoop, LoopState, Session, SessionManager
from ..session.stats import RoundSummary


def _card_info(card: Card | None) -> CardInfo | None:
    if card is None:
        return None
    return CardInfo(rank=card.rank, color=card.color.value, label=card.label)


def _summary_info(summary: RoundSummary) -> RoundSummaryInfo:
    return RoundSummaryInfo(**summary.to_dict())


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        session = service.create_session(CreateSessionRequest(player_count=4))
        service.start_round(session.session_id)
        step = service.step(session.session_id)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # Game loops per session
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """Create a new session. Raises ValueError for bad settings."""
        config = GameConfig.from_env(
            player_count=request.player_count,
            seed=request.random_seed,
            tick_interval=request.tick_interval,
            max_ticks=request.max_ticks,
        )
        session = self.session_manager.create_session(
            config=config,
            policy=request.policy.value,
        )
        self._game_loops[session.session_id] = GameLoop(session)

        if request.autoplay:
            session.start_round()

        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str) -> bool:
        """End a session, stopping any autoplay first."""
        game_loop = self._game_loops.pop(session_id, None)
        if game_loop:
            game_loop.stop()
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def get_game_loop(self, session_id: str) -> GameLoop | None:
        return self._game_loops.get(session_id)

    def is_autoplaying(self, session_id: str) -> bool:
        game_loop = self._game_loops.get(session_id)
        return bool(game_loop and game_loop.state == LoopState.RUNNING)

    # =========================================================================
    # Controls
    # =========================================================================

    def start_round(self, session_id: str) -> GameStateResponse | ErrorResponse:
        """Deal a new round. Restarts the current one if it is still going."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        session.start_round()
        return self._snapshot_to_state(session, session.get_snapshot())

    def step(self, session_id: str) -> StepResponse | ErrorResponse:
        """
        Run a single tick.

        Stepping a round that is not active is a harmless no-op.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        advanced = session.step()
        return StepResponse(
            session_id=session_id,
            advanced=advanced,
            round_active=session.is_round_active(),
            game_state=self._snapshot_to_state(session, session.get_snapshot()),
        )

    def pause(self, session_id: str) -> ControlResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        if not session.pause():
            return self._invalid_state(session, "pause")
        return self._control_response(session)

    def resume(self, session_id: str) -> ControlResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        if not session.resume():
            return self._invalid_state(session, "resume")
        return self._control_response(session)

    def set_speed(self, session_id: str, tick_interval: float) -> ControlResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        game_loop = self._game_loops.get(session_id)
        if not session or not game_loop:
            return self._not_found(session_id)
        game_loop.set_speed(tick_interval)
        return self._control_response(session)

    def run_rounds(self, session_id: str, rounds: int) -> RunResponse | ErrorResponse:
        """Play whole rounds synchronously, as fast as possible."""
        session = self.session_manager.get_session(session_id)
        game_loop = self._game_loops.get(session_id)
        if not session or not game_loop:
            return self._not_found(session_id)
        if self.is_autoplaying(session_id):
            return self._invalid_state(session, "run rounds while autoplay is running")

        summaries = game_loop.run_rounds(rounds)
        return RunResponse(
            session_id=session_id,
            rounds=[_summary_info(s) for s in summaries],
            stats=self._stats_response(session),
        )

    # =========================================================================
    # Observation
    # =========================================================================

    def get_game_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._snapshot_to_state(session, session.get_snapshot())

    def get_stats(self, session_id: str) -> StatsResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._stats_response(session)

    def get_events(self, session_id: str, limit: int = 50) -> EventsResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        entries = session.event_log.entries[-limit:] if limit > 0 else []
        return EventsResponse(
            session_id=session_id,
            events=[EventInfo(**event.to_dict()) for event in entries],
        )

    # =========================================================================
    # Conversion Helpers
    # =========================================================================

    def _session_to_response(self, session: Session) -> SessionResponse:
        game_loop = self._game_loops.get(session.session_id)
        return SessionResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            policy=BotPolicyName(session.policy),
            player_count=len(session.players),
            round_number=session.round.round_number,
            tick_interval=game_loop.interval if game_loop else session.config.tick_interval,
            created_at=session.created_at,
        )

    def _snapshot_to_state(self, session: Session, snapshot: GameSnapshot) -> GameStateResponse:
        return GameStateResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            round_active=snapshot.active,
            phase=snapshot.phase,
            round_number=snapshot.round_number,
            duration_seconds=snapshot.duration_seconds,
            move_count=snapshot.move_count,
            winner=snapshot.winner,
            end_reason=snapshot.end_reason,
            players=[
                PlayerInfo(
                    name=p.name,
                    strategy=p.strategy,
                    blitz_count=p.blitz_count,
                    blitz_top=_card_info(p.blitz_top),
                    draw_count=p.draw_count,
                    revealed=[_card_info(c) for c in p.revealed],
                    post_piles=[[_card_info(c) for c in pile] for pile in p.post_piles],
                    plays_this_round=p.plays_this_round,
                    total_plays=p.total_plays,
                    wins=p.wins,
                    is_winner=p.has_won,
                )
                for p in snapshot.players
            ],
            foundation=[
                FoundationPileInfo(
                    color=color.value,
                    card_count=len(pile),
                    top_card=_card_info(pile[-1] if pile else None),
                )
                for color, pile in snapshot.foundation.items()
            ],
            stats=self._stats_response(session, snapshot.stats),
        )

    def _stats_response(self, session: Session, stats: StatsSnapshot | None = None) -> StatsResponse:
        if stats is None:
            stats = session.stats.snapshot()
        return StatsResponse(
            session_id=session.session_id,
            total_games=stats.total_games,
            average_round_duration=stats.average_round_duration,
            players=[
                PlayerStatsInfo(
                    name=p.name,
                    wins=p.wins,
                    win_rate=p.win_rate,
                    total_plays=p.total_plays,
                    average_plays_per_game=p.average_plays_per_game,
                )
                for p in stats.players
            ],
            recent_rounds=[_summary_info(s) for s in session.stats.history],
        )

    def _control_response(self, session: Session) -> ControlResponse:
        game_loop = self._game_loops.get(session.session_id)
        return ControlResponse(
            session_id=session.session_id,
            success=True,
            status=SessionStatus(session.state.value),
            tick_interval=game_loop.interval if game_loop else None,
        )

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

    def _invalid_state(self, session: Session, action: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Cannot {action} while session is {session.state.value}",
            error_code=ErrorCode.INVALID_STATE,
            details={"status": session.state.value},
        )
