"""
Session Statistics - Aggregates results across rounds.

Tracks, per session:
- Total games and the running average round duration
- Per player: wins, total plays, average plays per game
- A short history of recent round summaries (newest first)

The average duration is re-rounded to an integer after every round, so
it drifts from the exact mean over many rounds.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
import math

from ..engine_core.snapshot import PlayerStatsSnapshot, StatsSnapshot

if TYPE_CHECKING:
    from ..engine_core.round import RoundResult


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


@dataclass
class PlayerStats:
    """Cumulative numbers for one player."""
    name: str
    wins: int = 0
    total_plays: int = 0
    average_plays_per_game: int = 0

    def win_rate(self, total_games: int) -> int:
        """Win percentage, rounded."""
        if total_games <= 0:
            return 0
        return round_half_up(self.wins / total_games * 100)


@dataclass
class RoundSummary:
    """Compact record of a finished round."""
    round_number: int
    winner: str | None
    reason: str
    duration_seconds: int
    move_count: int
    plays: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "round_number": self.round_number,
            "winner": self.winner,
            "reason": self.reason,
            "duration_seconds": self.duration_seconds,
            "move_count": self.move_count,
            "plays": dict(self.plays),
        }


class SessionStats:
    """Statistics that outlive individual rounds."""

    def __init__(self, player_names: list[str] | None = None, history_size: int = 50):
        self.total_games = 0
        self.average_round_duration = 0
        self.players: dict[str, PlayerStats] = {
            name: PlayerStats(name=name) for name in (player_names or [])
        }
        self.history: deque[RoundSummary] = deque(maxlen=history_size)

    def record_round_result(
        self,
        winner: str | None,
        duration_seconds: int,
        plays_per_player: dict[str, int],
    ):
        """
        Fold one finished round into the totals.

        Args:
            winner: Winning player's name, or None for a round with no winner
            duration_seconds: How long the round ran
            plays_per_player: Placements each player made this round
        """
        self.total_games += 1
        n = self.total_games
        self.average_round_duration = round_half_up(
            (self.average_round_duration * (n - 1) + duration_seconds) / n
        )

        for name in plays_per_player:
            self.players.setdefault(name, PlayerStats(name=name))
        if winner is not None:
            self.players.setdefault(winner, PlayerStats(name=winner)).wins += 1

        for name, stats in self.players.items():
            stats.total_plays += plays_per_player.get(name, 0)
            stats.average_plays_per_game = round_half_up(stats.total_plays / n)

    def record(self, result: RoundResult) -> RoundSummary:
        """Record a RoundResult and keep its summary in the history."""
        self.record_round_result(
            result.winner,
            result.duration_seconds,
            result.plays_per_player,
        )
        summary = RoundSummary(
            round_number=result.round_number,
            winner=result.winner,
            reason=result.reason.value,
            duration_seconds=result.duration_seconds,
            move_count=result.move_count,
            plays=dict(result.plays_per_player),
        )
        self.history.appendleft(summary)
        return summary

    def get_player(self, name: str) -> PlayerStats | None:
        return self.players.get(name)

    def snapshot(self) -> StatsSnapshot:
        return StatsSnapshot(
            total_games=self.total_games,
            average_round_duration=self.average_round_duration,
            players=tuple(
                PlayerStatsSnapshot(
                    name=s.name,
                    wins=s.wins,
                    total_plays=s.total_plays,
                    average_plays_per_game=s.average_plays_per_game,
                    win_rate=s.win_rate(self.total_games),
                )
                for s in self.players.values()
            ),
        )
