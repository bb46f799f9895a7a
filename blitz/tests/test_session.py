"""
Tests for sessions, statistics and the game loop.
"""

import asyncio
import time

import pytest

from ..config import GameConfig
from ..engine_core.events import EventType
from ..engine_core.round import EndReason, RoundResult
from ..session import (
    GameLoop,
    LoopState,
    SessionManager,
    SessionState,
    SessionStats,
)
from ..session.stats import round_half_up
from .conftest import FakeClock, stuck_hand


def make_result(number, winner, duration, plays, reason=EndReason.BLITZ):
    return RoundResult(
        round_number=number,
        winner=winner,
        reason=reason,
        duration_seconds=duration,
        move_count=sum(plays.values()),
        plays_per_player=plays,
    )


@pytest.fixture
def manager():
    return SessionManager(log_events=False)


@pytest.fixture
def session(manager):
    return manager.create_session(config=GameConfig(player_count=2, seed=7))


# =============================================================================
# Statistics
# =============================================================================

class TestSessionStats:
    """Tests for cross-round statistics."""

    def test_running_average_duration(self):
        stats = SessionStats(["Bot 1", "Bot 2"])

        stats.record_round_result("Bot 1", 10, {"Bot 1": 10, "Bot 2": 4})
        assert stats.average_round_duration == 10

        stats.record_round_result("Bot 2", 20, {"Bot 1": 6, "Bot 2": 12})
        assert stats.average_round_duration == 15
        assert stats.total_games == 2

    def test_average_is_rerounded_each_round(self):
        stats = SessionStats(["A"])
        for duration in (1, 2, 2):
            stats.record_round_result(None, duration, {"A": 0})
        # round(1.5) = 2, then round((2*2 + 2) / 3) = 2
        assert stats.average_round_duration == 2

    def test_wins_and_plays(self):
        stats = SessionStats(["A", "B"])
        stats.record_round_result("A", 5, {"A": 10, "B": 3})
        stats.record_round_result("A", 5, {"A": 7, "B": 8})
        stats.record_round_result(None, 5, {"A": 2, "B": 4})

        a, b = stats.get_player("A"), stats.get_player("B")
        assert (a.wins, a.total_plays, a.average_plays_per_game) == (2, 19, 6)
        assert (b.wins, b.total_plays, b.average_plays_per_game) == (0, 15, 5)
        assert a.win_rate(stats.total_games) == 67
        assert b.win_rate(stats.total_games) == 0

    def test_win_rate_with_no_games(self):
        stats = SessionStats(["A"])
        assert stats.get_player("A").win_rate(0) == 0

    def test_unknown_player_is_added(self):
        stats = SessionStats()
        stats.record_round_result("Late", 3, {"Late": 4})
        assert stats.get_player("Late").wins == 1

    def test_history_is_newest_first_and_bounded(self):
        stats = SessionStats(["A"], history_size=3)
        for number in range(1, 6):
            stats.record(make_result(number, "A", 1, {"A": 1}))

        assert [s.round_number for s in stats.history] == [5, 4, 3]
        assert stats.history[0].reason == "blitz"

    def test_snapshot(self):
        stats = SessionStats(["A", "B"])
        stats.record(make_result(1, "B", 12, {"A": 1, "B": 9}))

        snapshot = stats.snapshot()
        assert snapshot.total_games == 1
        assert snapshot.average_round_duration == 12
        assert [p.name for p in snapshot.players] == ["A", "B"]
        assert snapshot.players[1].win_rate == 100
        assert snapshot.to_dict()["players"]["A"]["total_plays"] == 1

    @pytest.mark.parametrize("value,expected", [
        (0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2), (66.666, 67), (0, 0),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


# =============================================================================
# Session
# =============================================================================

class TestSession:
    """Tests for session driver controls."""

    def test_new_session(self, session):
        assert session.state == SessionState.CREATED
        assert [p.name for p in session.players] == ["Bot 1", "Bot 2"]
        assert not session.is_round_active()
        assert session.tick() is False
        assert session.step() is False

    def test_start_round(self, session):
        session.start_round()

        assert session.state == SessionState.RUNNING
        assert session.is_round_active()
        assert session.ticks == 0
        assert len(session.event_log.of_type(EventType.ROUND_STARTED)) == 1

    def test_tick_counts(self, session):
        session.start_round()
        session.tick()
        session.tick()
        assert session.ticks == 2

    def test_pause_blocks_ticks_but_not_steps(self, session):
        session.start_round()
        assert session.pause()
        assert session.state == SessionState.PAUSED

        moves = session.round.move_count
        assert session.tick() is False
        assert session.ticks == 0
        assert session.round.move_count == moves

        session.step()
        assert session.ticks == 1

        assert session.resume()
        assert session.state == SessionState.RUNNING

    def test_pause_and_resume_need_right_state(self, session):
        assert not session.pause()
        assert not session.resume()
        session.start_round()
        assert not session.resume()

    def test_round_end_updates_stats(self, session):
        session.start_round()
        for player in session.players:
            player.hand = stuck_hand()

        session.step()

        assert session.state == SessionState.ROUND_OVER
        assert session.stats.total_games == 1
        assert session.stats.history[0].reason == "stalemate"
        assert session.stats.history[0].winner is None

    def test_call_off(self, session):
        session.start_round()
        result = session.call_off()

        assert result.reason == EndReason.TURN_LIMIT
        assert session.state == SessionState.ROUND_OVER
        assert session.call_off() is None

    def test_snapshot_includes_stats(self, session):
        session.start_round()
        session.call_off()

        snapshot = session.get_snapshot()
        assert not snapshot.active
        assert snapshot.end_reason == "turn_limit"
        assert snapshot.stats.total_games == 1
        assert len(snapshot.players) == 2

    def test_restart_mid_round_is_not_recorded(self, session):
        session.start_round()
        session.step()
        session.start_round()

        assert session.round.round_number == 2
        assert session.stats.total_games == 0


class TestSessionManager:
    """Tests for SessionManager."""

    def test_create_and_get(self, manager):
        session = manager.create_session(config=GameConfig(player_count=3))
        assert manager.get_session(session.session_id) is session
        assert len(session.players) == 3
        assert session.policy == "heuristic"
        assert all(p.strategy in ("aggressive", "balanced") for p in session.players)

    def test_random_policy(self, manager):
        session = manager.create_session(config=GameConfig(player_count=2), policy="random")
        assert all(p.strategy is None for p in session.players)

    def test_unknown_policy(self, manager):
        with pytest.raises(ValueError):
            manager.create_session(policy="genius")

    def test_get_missing(self, manager):
        assert manager.get_session("nope") is None

    def test_end_session(self, manager, session):
        assert manager.end_session(session.session_id)
        assert session.state == SessionState.CLOSED
        assert manager.get_session(session.session_id) is None
        assert not manager.end_session(session.session_id)
        with pytest.raises(ValueError):
            session.start_round()

    def test_list_active(self, manager):
        first = manager.create_session(config=GameConfig(player_count=1))
        second = manager.create_session(config=GameConfig(player_count=1))
        manager.end_session(first.session_id)
        assert manager.list_active_sessions() == [second.session_id]

    def test_cleanup_stale(self, manager):
        old = manager.create_session(config=GameConfig(player_count=1))
        busy = manager.create_session(config=GameConfig(player_count=1))
        fresh = manager.create_session(config=GameConfig(player_count=1))
        old.created_at = time.time() - 7200
        busy.created_at = time.time() - 7200
        busy.start_round()

        removed = manager.cleanup_stale_sessions(max_age_seconds=3600)

        assert removed == 1
        assert manager.get_session(old.session_id) is None
        assert manager.get_session(busy.session_id) is busy
        assert manager.get_session(fresh.session_id) is fresh

    def test_seeded_sessions_match(self, manager):
        def play(seed):
            s = manager.create_session(
                config=GameConfig(player_count=2, seed=seed),
                clock=FakeClock(),
            )
            GameLoop(s, max_ticks=50).run_round()
            return s.stats.history[0].to_dict()

        assert play(3) == play(3)


# =============================================================================
# Game loop
# =============================================================================

class TestGameLoop:
    """Tests for the tick driver."""

    def test_run_round_to_completion(self, session):
        result = GameLoop(session).run_round()

        assert result.loop_state == LoopState.FINISHED
        assert result.summary is not None
        assert result.summary.round_number == 1
        assert result.summary.reason in ("blitz", "stalemate", "turn_limit")
        assert not session.is_round_active()
        assert session.stats.total_games == 1

    def test_tick_cap_calls_off_round(self, session):
        result = GameLoop(session, max_ticks=1).run_round()

        assert result.ticks == 1
        assert result.summary.reason == "turn_limit"
        assert result.summary.winner is None
        assert session.get_snapshot().end_reason == "turn_limit"

    def test_run_without_round(self, session):
        result = GameLoop(session).run_round(start=False)
        assert result.loop_state == LoopState.IDLE
        assert result.errors

    def test_run_rounds(self, session):
        summaries = GameLoop(session, max_ticks=200).run_rounds(3)

        assert [s.round_number for s in summaries] == [1, 2, 3]
        assert session.stats.total_games == 3
        wins = sum(p.wins for p in session.stats.players.values())
        assert wins == sum(1 for s in summaries if s.winner)

    def test_set_speed(self, session):
        loop = GameLoop(session, interval=1.0)
        loop.set_speed(0.25)
        assert loop.interval == 0.25
        with pytest.raises(ValueError):
            loop.set_speed(-1)

    def test_async_run(self, session):
        session.start_round()
        loop = GameLoop(session, interval=0, max_ticks=20)
        updates = []

        async def on_update(snapshot):
            updates.append(snapshot)

        result = asyncio.run(loop.run(on_update=on_update))

        assert result.loop_state == LoopState.FINISHED
        assert not session.is_round_active()
        assert updates
        assert not updates[-1].active

    def test_async_run_stops(self, session):
        session.start_round()
        loop = GameLoop(session, interval=0, max_ticks=50)
        loop.stop()

        result = asyncio.run(loop.run())

        # stop() before run() is reset on entry
        assert result.loop_state == LoopState.FINISHED

    def test_async_run_stop_mid_round(self, session):
        session.start_round()
        loop = GameLoop(session, interval=0, max_ticks=1000)

        async def on_update(snapshot):
            loop.stop()

        result = asyncio.run(loop.run(on_update=on_update))

        if session.is_round_active():
            assert result.loop_state == LoopState.STOPPED
            assert result.ticks == 1

    def test_async_run_leaves_redealt_round_alone(self, session):
        session.start_round()
        loop = GameLoop(session, interval=0, max_ticks=1000)
        dealt = []

        async def on_update(snapshot):
            if not dealt:
                session.start_round()
                dealt.append(session.round.round_number)

        result = asyncio.run(loop.run(on_update=on_update))

        assert dealt == [2]
        assert result.loop_state == LoopState.STOPPED
        assert loop.state == LoopState.STOPPED
        assert session.round.round_number == 2
        assert session.round.move_count == 0
        assert session.is_round_active()

    def test_cancelled_run_marks_loop_stopped(self, session):
        session.start_round()
        loop = GameLoop(session, interval=0.01, max_ticks=1000)

        async def main():
            task = asyncio.create_task(loop.run())
            await asyncio.sleep(0.02)
            assert loop.state == LoopState.RUNNING
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(main())

        assert loop.state == LoopState.STOPPED

    def test_loop_result_to_dict(self, session):
        result = GameLoop(session, max_ticks=1).run_round()
        data = result.to_dict()
        assert data["loop_state"] == "finished"
        assert data["summary"]["reason"] == "turn_limit"


# =============================================================================
# Configuration
# =============================================================================

class TestConfig:
    """Tests for GameConfig."""

    def test_defaults(self):
        config = GameConfig()
        assert config.player_count == 4
        assert config.moves_per_turn == 3
        assert config.max_attempts == 5
        assert config.extra_draw_attempts == 2

    @pytest.mark.parametrize("kwargs", [
        {"player_count": 0},
        {"player_count": 9},
        {"moves_per_turn": 0},
        {"tick_interval": -0.1},
        {"extra_draw_attempts": -1},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            GameConfig(**kwargs)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("BLITZ_PLAYERS", "6")
        monkeypatch.setenv("BLITZ_SEED", "42")
        monkeypatch.setenv("BLITZ_TICK_INTERVAL", "0.1")

        config = GameConfig.from_env()

        assert config.player_count == 6
        assert config.seed == 42
        assert config.tick_interval == 0.1

    def test_overrides_beat_env(self, monkeypatch):
        monkeypatch.setenv("BLITZ_PLAYERS", "6")
        config = GameConfig.from_env(player_count=2, seed=None)
        assert config.player_count == 2
        assert config.seed is None

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("BLITZ_MAX_TICKS", "lots")
        with pytest.raises(ValueError, match="BLITZ_MAX_TICKS"):
            GameConfig.from_env()
