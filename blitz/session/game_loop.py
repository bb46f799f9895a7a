"""
Game Loop - Drives a session tick by tick.

The loop:
1. Start a round (deal)
2. Tick the session at the configured speed
3. Skip ticks while paused
4. Stop when the round ends, or call it off at the tick cap
5. Report the round summary

`run_round` runs synchronously as fast as possible (CLI, tests).
`run` is the paced asyncio driver used for live autoplay.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, TYPE_CHECKING
import asyncio
import logging

if TYPE_CHECKING:
    from .manager import Session
    from .stats import RoundSummary
    from ..engine_core.snapshot import GameSnapshot


logger = logging.getLogger(__name__)


class LoopState(Enum):
    """State of the game loop."""
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"  # Round ended
    STOPPED = "stopped"  # Driver stopped before the round ended


@dataclass
class LoopResult:
    """What a driver run produced."""
    loop_state: LoopState
    ticks: int = 0
    summary: RoundSummary | None = None
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "loop_state": self.loop_state.value,
            "ticks": self.ticks,
            "summary": self.summary.to_dict() if self.summary else None,
            "errors": list(self.errors),
        }


class GameLoop:
    """
    The tick driver for one session.

    Usage:
        loop = GameLoop(session)

        # Headless
        result = loop.run_round()

        # Live, paced
        await loop.run(on_update=render)
    """

    def __init__(
        self,
        session: Session,
        interval: float | None = None,
        max_ticks: int | None = None,
    ):
        self.session = session
        self.interval = session.config.tick_interval if interval is None else interval
        self.max_ticks = max_ticks or session.config.max_ticks
        self.state = LoopState.IDLE
        self._stop_requested = False
        self._run_id = 0

    def set_speed(self, interval: float):
        """Change seconds between ticks; applies from the next tick."""
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.interval = interval

    def stop(self):
        """Ask a running `run` to return after its current tick."""
        self._stop_requested = True

    def run_round(self, start: bool = True) -> LoopResult:
        """
        Play the current round to its end without pausing between ticks.

        Args:
            start: Deal a new round first if none is active
        """
        session = self.session
        if start and not session.is_round_active():
            session.start_round()
        if not session.is_round_active():
            return LoopResult(loop_state=LoopState.IDLE, errors=["No active round"])

        self.state = LoopState.RUNNING
        while session.is_round_active():
            if session.ticks >= self.max_ticks:
                session.call_off()
                break
            session.step()

        return self._finish()

    def run_rounds(self, count: int) -> list[RoundSummary]:
        """Play `count` full rounds back to back."""
        summaries = []
        for _ in range(count):
            result = self.run_round()
            if result.summary:
                summaries.append(result.summary)
        return summaries

    async def run(
        self,
        on_update: Callable[[GameSnapshot], Awaitable[None]] | None = None,
    ) -> LoopResult:
        """
        Paced autoplay for the current round.

        Ticks are skipped (not queued) while the session is paused.
        `on_update` receives a snapshot after every tick that ran.
        The loop only drives the round it started on: once another round
        is dealt it returns STOPPED without touching the new one.
        """
        session = self.session
        if not session.is_round_active():
            return LoopResult(loop_state=LoopState.IDLE, errors=["No active round"])

        self.state = LoopState.RUNNING
        self._stop_requested = False
        self._run_id += 1
        run_id = self._run_id

        try:
            return await self._drive(on_update)
        except asyncio.CancelledError:
            # A newer run may already own the loop
            if self._run_id == run_id:
                self.state = LoopState.STOPPED
            raise

    async def _drive(self, on_update) -> LoopResult:
        session = self.session
        round_number = session.round.round_number

        while session.is_round_active():
            if self._stop_requested or session.round.round_number != round_number:
                return self._stopped(round_number)

            if session.ticks >= self.max_ticks:
                session.call_off()
                break

            before = session.ticks
            session.tick()
            if on_update and session.ticks != before:
                await on_update(session.get_snapshot())

            await asyncio.sleep(self.interval)

        if session.round.round_number != round_number:
            return self._stopped(round_number)
        if on_update:
            await on_update(session.get_snapshot())
        return self._finish()

    def _stopped(self, round_number: int) -> LoopResult:
        if self.session.round.round_number != round_number:
            logger.debug("Round %d was replaced; autoplay stops", round_number)
        self.state = LoopState.STOPPED
        return LoopResult(loop_state=self.state, ticks=self.session.ticks)

    def _finish(self) -> LoopResult:
        self.state = LoopState.FINISHED
        history = self.session.stats.history
        summary = history[0] if history else None
        if summary:
            logger.debug(
                "Round %d finished after %d ticks (%s)",
                summary.round_number, self.session.ticks, summary.reason,
            )
        return LoopResult(loop_state=self.state, ticks=self.session.ticks, summary=summary)
