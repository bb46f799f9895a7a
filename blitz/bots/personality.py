"""
Bot Strategies - Configurable play styles.

A strategy is an enum value with an associated weight table rather than
a subclass. Strategies adjust:
- Bonus for playing off the blitz pile
- Bonus for playing onto a foundation
- Random jitter (for unpredictability between otherwise-equal moves)
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import random


class Strategy(str, Enum):
    """Play styles a bot can be assigned."""
    AGGRESSIVE = "aggressive"
    BALANCED = "balanced"


@dataclass(frozen=True)
class MoveWeights:
    """
    Base weights shared by every strategy.

    Higher values = more importance.
    """
    start_foundation: float = 200.0  # Placing a 1 to open a foundation pile
    from_blitz: float = 100.0
    to_foundation: float = 50.0
    low_rank: float = 5.0  # Per step below rank 11

    # Cascade filter: high cards only go on a cascade with a wide gap
    high_rank_cutoff: int = 8
    min_cascade_gap: int = 2


@dataclass(frozen=True)
class StrategyWeights:
    """Per-strategy modifiers layered on top of MoveWeights."""
    name: str
    description: str = ""
    blitz_bonus: float = 0.0
    foundation_bonus: float = 0.0
    jitter: float = 0.0  # Uniform random in [0, jitter)


DEFAULT_WEIGHTS = MoveWeights()


# ============================================================================
# Strategy Table
# ============================================================================

STRATEGY_WEIGHTS: dict[Strategy, StrategyWeights] = {
    Strategy.AGGRESSIVE: StrategyWeights(
        name="Aggressive",
        description="Races to clear the blitz pile onto foundations",
        blitz_bonus=50.0,
        foundation_bonus=30.0,
    ),
    Strategy.BALANCED: StrategyWeights(
        name="Balanced",
        description="Weighs all moves evenly, breaking ties at random",
        jitter=20.0,
    ),
}


def random_strategy(rng: random.Random | None = None) -> Strategy:
    """Pick a strategy uniformly at random."""
    rng = rng or random.Random()
    return rng.choice(list(Strategy))
