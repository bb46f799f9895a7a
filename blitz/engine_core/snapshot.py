"""
Snapshots - Read-only, fully materialized copies of engine state.

Renderers poll snapshots instead of touching live piles, so they can
never observe a half-applied placement. Every pile is copied into a
tuple; Cards are immutable, so sharing them is safe.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from .card import Card, Color


def _labels(cards: tuple[Card, ...]) -> list[str]:
    return [c.label for c in cards]


@dataclass(frozen=True)
class PlayerSnapshot:
    """One player's piles at a point in time."""
    name: str
    strategy: str | None
    blitz_count: int
    blitz_top: Card | None
    draw_count: int
    revealed: tuple[Card, ...]
    post_piles: tuple[tuple[Card, ...], ...]
    plays_this_round: int
    total_plays: int
    wins: int
    has_won: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "strategy": self.strategy,
            "blitz_count": self.blitz_count,
            "blitz_top": self.blitz_top.to_dict() if self.blitz_top else None,
            "draw_count": self.draw_count,
            "revealed": _labels(self.revealed),
            "post_piles": [_labels(pile) for pile in self.post_piles],
            "plays_this_round": self.plays_this_round,
            "total_plays": self.total_plays,
            "wins": self.wins,
            "has_won": self.has_won,
        }


@dataclass(frozen=True)
class PlayerStatsSnapshot:
    name: str
    wins: int
    total_plays: int
    average_plays_per_game: int
    win_rate: int  # Percent, rounded


@dataclass(frozen=True)
class StatsSnapshot:
    """Cross-round statistics at a point in time."""
    total_games: int = 0
    average_round_duration: int = 0
    players: tuple[PlayerStatsSnapshot, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_games": self.total_games,
            "average_round_duration": self.average_round_duration,
            "players": {
                p.name: {
                    "wins": p.wins,
                    "total_plays": p.total_plays,
                    "average_plays_per_game": p.average_plays_per_game,
                    "win_rate": p.win_rate,
                }
                for p in self.players
            },
        }


@dataclass(frozen=True)
class GameSnapshot:
    """Everything a renderer needs for one frame."""
    active: bool
    phase: str
    winner: str | None
    end_reason: str | None
    round_number: int
    duration_seconds: int
    move_count: int
    players: tuple[PlayerSnapshot, ...]
    foundation: dict[Color, tuple[Card, ...]]
    stats: StatsSnapshot = field(default_factory=StatsSnapshot)

    def foundation_top(self, color: Color) -> Card | None:
        pile = self.foundation.get(color, ())
        return pile[-1] if pile else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "active": self.active,
            "phase": self.phase,
            "winner": self.winner,
            "end_reason": self.end_reason,
            "round_number": self.round_number,
            "duration_seconds": self.duration_seconds,
            "move_count": self.move_count,
            "players": [p.to_dict() for p in self.players],
            "foundation": {
                color.value: _labels(pile) for color, pile in self.foundation.items()
            },
            "stats": self.stats.to_dict(),
        }
