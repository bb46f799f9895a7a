"""
Session Manager - Creates and manages simulation sessions.

A session is one table of bots playing round after round:
- Owns the Round (reused every round), the event bus and statistics
- Translates driver controls (start/pause/resume/step/tick) into
  zero or one `play_turn` call
- Serves read-only snapshots for rendering

Sessions live in memory only. Statistics outlive rounds but not the
process.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import logging
import random
import time
import uuid

from ..config import GameConfig
from ..engine_core.events import EventBus, EventLog, LoggingListener
from ..engine_core.round import EndReason, Player, Round, RoundResult
from ..engine_core.snapshot import GameSnapshot
from ..bots import BotPolicy, HeuristicBot, RandomPolicy
from .stats import SessionStats


logger = logging.getLogger(__name__)


POLICIES = ("heuristic", "random")


class SessionState(Enum):
    """State of a simulation session."""
    CREATED = "created"  # No round started yet
    RUNNING = "running"  # Round in progress, driver ticking
    PAUSED = "paused"  # Round in progress, driver holding
    ROUND_OVER = "round_over"  # Last round finished; ready for another
    CLOSED = "closed"  # Session ended


@dataclass
class Session:
    """
    A live simulation session.

    Contains:
    - The Round and its players
    - Cross-round statistics
    - The event bus plus a bounded log of recent events
    """
    session_id: str
    config: GameConfig
    round: Round
    created_at: float
    stats: SessionStats = field(default_factory=SessionStats)
    events: EventBus = field(default_factory=EventBus)
    event_log: EventLog = field(default_factory=EventLog)

    state: SessionState = SessionState.CREATED
    ticks: int = 0  # Ticks played in the current round
    policy: str = "heuristic"

    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.round.events = self.events
        self.round.on_round_end = self._on_round_end
        self.events.subscribe(self.event_log)

    @property
    def players(self) -> list[Player]:
        return self.round.players

    def is_active(self) -> bool:
        """Check if session is still usable."""
        return self.state != SessionState.CLOSED

    def is_round_active(self) -> bool:
        return self.round.is_active

    # ------------------------------------------------------------------
    # Driver controls
    # ------------------------------------------------------------------

    def start_round(self):
        """Deal a new round and start running it."""
        if not self.is_active():
            raise ValueError(f"Session {self.session_id} is closed")
        self.ticks = 0
        self.round.start()
        self.state = SessionState.RUNNING

    def pause(self) -> bool:
        """Hold the driver. Does not touch engine state."""
        if self.state != SessionState.RUNNING:
            return False
        self.state = SessionState.PAUSED
        return True

    def resume(self) -> bool:
        if self.state != SessionState.PAUSED:
            return False
        self.state = SessionState.RUNNING
        return True

    def tick(self) -> bool:
        """Timer-driven step: skipped while paused."""
        if self.state != SessionState.RUNNING:
            return False
        return self._advance()

    def step(self) -> bool:
        """Single manual step, allowed whether running or paused."""
        if not self.round.is_active:
            return False
        return self._advance()

    def call_off(self) -> RoundResult | None:
        """End the current round with no winner after too many ticks."""
        if not self.round.is_active:
            return None
        logger.info(
            "Session %s: calling off round %d after %d ticks",
            self.session_id, self.round.round_number, self.ticks,
        )
        return self.round.end_round(None, EndReason.TURN_LIMIT)

    def _advance(self) -> bool:
        self.ticks += 1
        return self.round.play_turn()

    def _on_round_end(self, result: RoundResult):
        self.stats.record(result)
        if self.state != SessionState.CLOSED:
            self.state = SessionState.ROUND_OVER

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def get_snapshot(self) -> GameSnapshot:
        """Read-only view of the table plus statistics."""
        return self.round.snapshot(self.stats.snapshot())


def create_bot(policy: str, rng: random.Random) -> BotPolicy:
    """Build a bot for the named policy."""
    if policy == "heuristic":
        return HeuristicBot(rng=rng)
    if policy == "random":
        return RandomPolicy(rng=rng)
    raise ValueError(f"Unknown policy: {policy!r} (expected one of {', '.join(POLICIES)})")


def create_players(config: GameConfig, rng: random.Random, policy: str = "heuristic") -> list[Player]:
    """Seat `config.player_count` bots named 'Bot 1', 'Bot 2', ..."""
    return [
        Player(name=f"Bot {i + 1}", bot=create_bot(policy, rng))
        for i in range(config.player_count)
    ]


class SessionManager:
    """
    Manages simulation sessions.

    Responsibilities:
    - Create sessions with seated bots
    - Track active sessions
    - Clean up closed or stale sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, log_events: bool = True):
        self._sessions: dict[str, Session] = {}
        self.log_events = log_events

    def create_session(
        self,
        config: GameConfig | None = None,
        policy: str = "heuristic",
        clock: Callable[[], float] = time.monotonic,
    ) -> Session:
        """
        Create a new session.

        Args:
            config: Simulation settings (default: from environment)
            policy: Bot policy for every seat ("heuristic" or "random")
            clock: Time source for round durations

        Returns:
            New Session ready for `start_round`
        """
        config = config or GameConfig.from_env()
        rng = random.Random(config.seed)
        players = create_players(config, rng, policy)

        session_id = str(uuid.uuid4())
        round_ = Round(players, config=config, rng=rng, clock=clock)
        session = Session(
            session_id=session_id,
            config=config,
            round=round_,
            created_at=time.time(),
            stats=SessionStats([p.name for p in players]),
            policy=policy,
        )
        if self.log_events:
            session.events.subscribe(LoggingListener())

        self._sessions[session_id] = session
        logger.info("Created session %s with %d %s bots", session_id, len(players), policy)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """
        End a session and forget it.

        Returns False if the session did not exist.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        session.state = SessionState.CLOSED
        session.event_log.clear()
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Remove sessions older than max_age that are not mid-round.

        Returns the number of sessions removed.
        """
        current_time = time.time()
        to_remove = [
            session_id
            for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds
            and not session.is_round_active()
        ]

        for session_id in to_remove:
            self.end_session(session_id)
        return len(to_remove)
