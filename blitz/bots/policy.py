"""
Bot Policy - Interface for bot decision-making.

A BotPolicy looks at one Hand and the shared Foundation and makes at
most one placement per invocation. When no placement exists it cycles
the draw pile instead; the return value of `make_move` says whether
anything happened at all.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING
import logging
import random

from .evaluator import MoveCandidate, MoveEvaluator
from .personality import Strategy, MoveWeights, random_strategy

if TYPE_CHECKING:
    from ..engine_core.hand import Hand
    from ..engine_core.foundation import Foundation


logger = logging.getLogger(__name__)


@dataclass
class BotDecision:
    """
    A placement chosen by a bot.

    Contains the chosen candidate plus evaluation details (for debugging).
    """
    candidate: MoveCandidate
    evaluated_moves: int = 0
    explanation: str = ""

    @property
    def best_score(self) -> float:
        return self.candidate.score


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    Subclasses decide which legal placement to make; the shared
    `make_move` handles draw refresh, execution and draw cycling.
    """

    strategy: Strategy | None = None

    @abstractmethod
    def select_move(self, hand: Hand, foundation: Foundation) -> BotDecision | None:
        """
        Pick a placement without executing it.

        Returns None if there is no legal placement.
        """
        pass

    def make_move(self, hand: Hand, foundation: Foundation) -> bool:
        """
        Make at most one placement.

        Returns True if a card was placed or new draw cards were surfaced,
        False if the hand has no options left.
        """
        if not hand.revealed and hand.draw_pile:
            hand.cycle_draw()

        decision = self.select_move(hand, foundation)
        if decision is None:
            return hand.cycle_draw()

        candidate = decision.candidate
        logger.debug(
            "%s: %s (best of %d, score %.1f)",
            self.get_name(), decision.explanation, decision.evaluated_moves, decision.best_score,
        )
        placed = hand.place(candidate.card, candidate.source, candidate.destination, foundation)
        if not placed:
            # Candidates come from the live hand, so this means a bug upstream
            logger.warning("%s rejected its own move %s", self.get_name(), candidate.describe())
        return placed

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class HeuristicBot(BotPolicy):
    """
    Priority-scoring bot.

    Scores every legal placement and takes the first one at the top
    score. The strategy is fixed for the bot's lifetime; if not given,
    it is chosen uniformly at random at construction.
    """

    def __init__(
        self,
        strategy: Strategy | None = None,
        weights: MoveWeights | None = None,
        rng: random.Random | None = None,
    ):
        self.rng = rng or random.Random()
        self.strategy = strategy or random_strategy(self.rng)
        self.evaluator = MoveEvaluator(weights)

    def select_move(self, hand: Hand, foundation: Foundation) -> BotDecision | None:
        candidates = self.evaluator.enumerate(hand, foundation)
        if not candidates:
            return None

        best = None
        for candidate in candidates:
            self.evaluator.score(candidate, self.strategy, self.rng)
            if best is None or candidate.score > best.score:
                best = candidate

        return BotDecision(
            candidate=best,
            evaluated_moves=len(candidates),
            explanation=f"{self.strategy.value}: {best.describe()} scored {best.score:.1f}",
        )

    def get_name(self) -> str:
        return f"HeuristicBot({self.strategy.value})"


class RandomPolicy(BotPolicy):
    """
    Random policy - picks any legal placement uniformly at random.

    Used for:
    - Testing
    - Baseline comparison against the heuristic bots
    """

    def __init__(self, seed: int | None = None, rng: random.Random | None = None):
        self.rng = rng or random.Random(seed)

    def select_move(self, hand: Hand, foundation: Foundation) -> BotDecision | None:
        candidates = MoveEvaluator().enumerate(hand, foundation)
        if not candidates:
            return None

        return BotDecision(
            candidate=self.rng.choice(candidates),
            evaluated_moves=len(candidates),
            explanation="Selected randomly",
        )
