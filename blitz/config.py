"""
Configuration - Simulation knobs, with environment overrides.

Environment variables (all optional):
    BLITZ_PLAYERS          Number of bot players (default 4)
    BLITZ_MOVES_PER_TURN   Placements per player per tick (default 3)
    BLITZ_MAX_ATTEMPTS     Bot invocations per player per tick (default 5)
    BLITZ_TICK_INTERVAL    Seconds between autoplay ticks (default 0.5)
    BLITZ_MAX_TICKS        Tick cap before a round is called off (default 5000)
    BLITZ_SEED             Seed for reproducible simulations
"""

from __future__ import annotations
from dataclasses import dataclass
import os


MAX_PLAYERS = 8


@dataclass
class GameConfig:
    """Settings for one simulation session."""
    player_count: int = 4
    moves_per_turn: int = 3
    max_attempts: int = 5  # Guards against draw cycling that never yields a play
    extra_draw_attempts: int = 2
    state_report_interval: int = 20  # Emit a state report every N placements
    tick_interval: float = 0.5
    max_ticks: int = 5000
    seed: int | None = None

    def __post_init__(self):
        if not 1 <= self.player_count <= MAX_PLAYERS:
            raise ValueError(f"player_count must be 1-{MAX_PLAYERS}, got {self.player_count}")
        for name in ("moves_per_turn", "max_attempts", "state_report_interval", "max_ticks"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        if self.extra_draw_attempts < 0:
            raise ValueError("extra_draw_attempts must not be negative")
        if self.tick_interval < 0:
            raise ValueError("tick_interval must not be negative")

    @classmethod
    def from_env(cls, **overrides) -> GameConfig:
        """Build a config from BLITZ_* environment variables, then apply overrides."""
        values: dict = {}

        env_ints = {
            "BLITZ_PLAYERS": "player_count",
            "BLITZ_MOVES_PER_TURN": "moves_per_turn",
            "BLITZ_MAX_ATTEMPTS": "max_attempts",
            "BLITZ_MAX_TICKS": "max_ticks",
            "BLITZ_SEED": "seed",
        }
        for env_name, field_name in env_ints.items():
            raw = os.getenv(env_name)
            if raw:
                try:
                    values[field_name] = int(raw)
                except ValueError:
                    raise ValueError(f"{env_name} must be an integer, got {raw!r}")

        raw_interval = os.getenv("BLITZ_TICK_INTERVAL")
        if raw_interval:
            try:
                values["tick_interval"] = float(raw_interval)
            except ValueError:
                raise ValueError(f"BLITZ_TICK_INTERVAL must be a number, got {raw_interval!r}")

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
