"""
Move Evaluator - Enumerates and scores candidate placements.

For every available card the evaluator tries, in order:
1. The foundation pile of the card's color
2. Each of the three cascades

Cascade moves that would bury a high card on a non-empty cascade are
filtered out. Surviving candidates are scored with MoveWeights plus the
strategy's modifiers; the caller picks the first candidate at max score.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
import random

from ..engine_core.card import Card
from ..engine_core.hand import (
    CardSource,
    Destination,
    SourceKind,
    POST_PILE_COUNT,
)
from .personality import MoveWeights, Strategy, STRATEGY_WEIGHTS, DEFAULT_WEIGHTS

if TYPE_CHECKING:
    from ..engine_core.hand import Hand
    from ..engine_core.foundation import Foundation


@dataclass
class MoveCandidate:
    """A legal placement and its score."""
    card: Card
    source: CardSource
    destination: Destination
    score: float = 0.0
    breakdown: dict[str, float] = field(default_factory=dict)

    def describe(self) -> str:
        return f"{self.card.label} {self.source} -> {self.destination}"


class MoveEvaluator:
    """
    Enumerates legal placements and scores them.

    Enumeration order is stable (blitz, posts, revealed; foundation
    before cascades) and is the tie-break order.
    """

    def __init__(self, weights: MoveWeights | None = None):
        self.weights = weights or DEFAULT_WEIGHTS

    def enumerate(self, hand: Hand, foundation: Foundation) -> list[MoveCandidate]:
        """List every legal (card, source, destination), in declaration order."""
        candidates = []

        for available in hand.available_cards():
            card, source = available.card, available.source

            if foundation.can_accept(card):
                candidates.append(MoveCandidate(
                    card=card,
                    source=source,
                    destination=Destination.foundation(card.color),
                ))

            for i in range(POST_PILE_COUNT):
                top = hand.post_top(i)
                if not card.can_place_on_cascade(top):
                    continue
                if not self._cascade_allowed(card, top):
                    continue
                candidates.append(MoveCandidate(
                    card=card,
                    source=source,
                    destination=Destination.cascade(i),
                ))

        return candidates

    def _cascade_allowed(self, card: Card, top: Card | None) -> bool:
        """Keep high cards off non-empty cascades unless the gap is wide."""
        if top is None:
            return True
        if card.rank < self.weights.high_rank_cutoff:
            return True
        return top.rank - card.rank >= self.weights.min_cascade_gap

    def score(
        self,
        candidate: MoveCandidate,
        strategy: Strategy,
        rng: random.Random | None = None,
    ) -> float:
        """Score a candidate in place and return the score."""
        w = self.weights
        modifiers = STRATEGY_WEIGHTS[strategy]
        to_foundation = candidate.destination.is_foundation
        from_blitz = candidate.source.kind == SourceKind.BLITZ
        breakdown: dict[str, float] = {}

        if to_foundation and candidate.card.rank == 1:
            breakdown["start_foundation"] = w.start_foundation
        if from_blitz:
            breakdown["from_blitz"] = w.from_blitz
        if to_foundation:
            breakdown["to_foundation"] = w.to_foundation
        breakdown["low_rank"] = w.low_rank * (11 - candidate.card.rank)

        if from_blitz and modifiers.blitz_bonus:
            breakdown["strategy_blitz"] = modifiers.blitz_bonus
        if to_foundation and modifiers.foundation_bonus:
            breakdown["strategy_foundation"] = modifiers.foundation_bonus
        if modifiers.jitter:
            rng = rng or random.Random()
            breakdown["jitter"] = rng.random() * modifiers.jitter

        candidate.breakdown = breakdown
        candidate.score = sum(breakdown.values())
        return candidate.score
