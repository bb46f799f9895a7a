"""
Tests for bot move selection.

Tests:
- Bots only make legal placements
- Priority scoring and strategy modifiers
- Cascade filtering and tie-breaking
- Draw cycling when nothing is playable
"""

import logging
import random

import pytest

from ..bots import HeuristicBot, RandomPolicy, Strategy, STRATEGY_WEIGHTS, random_strategy
from ..bots.evaluator import MoveCandidate, MoveEvaluator
from ..engine_core.hand import CardSource, Destination, SourceKind
from .conftest import card, make_hand, stuck_hand, R, B, G, Y


class TestBlitzExample:
    """A single 1 on the blitz pile and an empty foundation."""

    @pytest.mark.parametrize("strategy", list(Strategy))
    def test_single_one_goes_to_foundation_and_wins(self, foundation, strategy):
        hand = make_hand(blitz=[card(1, R)], draw=[card(5, B), card(1, G), card(1, Y), card(9, R)])
        bot = HeuristicBot(strategy=strategy, rng=random.Random(0))

        assert bot.make_move(hand, foundation)

        assert foundation.top(R) == card(1, R)
        assert hand.has_won()


class TestScoring:
    """Tests for MoveEvaluator.score."""

    def _candidate(self, rank, source_kind, destination):
        return MoveCandidate(
            card=card(rank, R),
            source=CardSource(source_kind),
            destination=destination,
        )

    def test_aggressive_foundation_one_from_blitz(self):
        candidate = self._candidate(1, SourceKind.BLITZ, Destination.foundation(R))
        score = MoveEvaluator().score(candidate, Strategy.AGGRESSIVE)

        # 200 start + 100 blitz + 50 foundation + 50 low rank + 50 + 30 strategy
        assert score == 480
        assert candidate.breakdown["start_foundation"] == 200

    def test_aggressive_cascade_from_revealed(self):
        candidate = self._candidate(6, SourceKind.REVEALED, Destination.cascade(1))
        score = MoveEvaluator().score(candidate, Strategy.AGGRESSIVE)

        assert score == 25  # 5 x (11 - 6), no bonuses

    def test_balanced_adds_bounded_jitter(self):
        evaluator = MoveEvaluator()
        rng = random.Random(5)
        for _ in range(200):
            candidate = self._candidate(4, SourceKind.BLITZ, Destination.foundation(R))
            score = evaluator.score(candidate, Strategy.BALANCED, rng)
            base = 100 + 50 + 35
            assert base <= score < base + 20
            assert "strategy_blitz" not in candidate.breakdown

    def test_lower_rank_scores_higher(self):
        evaluator = MoveEvaluator()
        low = self._candidate(2, SourceKind.POST, Destination.cascade(0))
        high = self._candidate(7, SourceKind.POST, Destination.cascade(0))
        assert evaluator.score(low, Strategy.AGGRESSIVE) > evaluator.score(high, Strategy.AGGRESSIVE)

    def test_strategy_table(self):
        assert STRATEGY_WEIGHTS[Strategy.AGGRESSIVE].blitz_bonus == 50
        assert STRATEGY_WEIGHTS[Strategy.AGGRESSIVE].foundation_bonus == 30
        assert STRATEGY_WEIGHTS[Strategy.BALANCED].jitter == 20
        assert STRATEGY_WEIGHTS[Strategy.BALANCED].blitz_bonus == 0


class TestEnumeration:
    """Tests for MoveEvaluator.enumerate."""

    def test_foundation_before_cascades(self, foundation):
        hand = make_hand(blitz=[card(1, B)])
        candidates = MoveEvaluator().enumerate(hand, foundation)

        assert [str(c.destination) for c in candidates] == [
            "foundation[blue]", "cascade[0]", "cascade[1]", "cascade[2]",
        ]

    def test_high_card_kept_off_nonempty_cascade(self, foundation):
        hand = make_hand(blitz=[card(8, R)], posts=[[card(9, B)], [card(4, G)], [card(2, Y)]])
        assert MoveEvaluator().enumerate(hand, foundation) == []

    def test_high_card_may_start_empty_cascade(self, foundation):
        hand = make_hand(blitz=[card(9, R)], posts=[[card(10, B)], [], [card(2, Y)]])
        candidates = MoveEvaluator().enumerate(hand, foundation)
        from_blitz = [c.destination for c in candidates if c.source.kind == SourceKind.BLITZ]
        assert from_blitz == [Destination.cascade(1)]

    def test_low_card_may_join_cascade(self, foundation):
        hand = make_hand(blitz=[card(7, R)], posts=[[card(8, B)], [card(4, G)], [card(2, Y)]])
        candidates = MoveEvaluator().enumerate(hand, foundation)
        assert [c.destination for c in candidates] == [Destination.cascade(0)]

    def test_every_candidate_is_legal(self, foundation):
        foundation.push(card(1, R))
        foundation.push(card(1, G))
        hand = make_hand(
            blitz=[card(2, R)],
            revealed=[card(2, G), card(5, Y), card(3, B)],
            posts=[[card(6, B)], [card(4, Y)], []],
        )
        for candidate in MoveEvaluator().enumerate(hand, foundation):
            assert hand.can_place(candidate.card, candidate.destination, foundation)


class TestHeuristicBot:
    """Tests for HeuristicBot decisions."""

    def test_first_candidate_wins_ties(self, foundation, aggressive_bot):
        """Three identical empty cascades: the first one is used."""
        hand = make_hand(blitz=[card(6, R), card(5, B)])

        assert aggressive_bot.make_move(hand, foundation)

        assert hand.post_piles == [[card(5, B)], [], []]

    def test_prefers_blitz_card(self, foundation, aggressive_bot):
        hand = make_hand(
            blitz=[card(7, Y), card(4, R)],
            revealed=[card(3, B)],
            posts=[[card(5, G)], [card(4, Y)], [card(9, G)]],
        )
        decision = aggressive_bot.select_move(hand, foundation)

        assert decision.candidate.source.kind == SourceKind.BLITZ
        assert decision.candidate.destination == Destination.cascade(0)
        assert decision.evaluated_moves == 3

    def test_make_move_logs_decision(self, foundation, aggressive_bot, caplog):
        hand = make_hand(
            blitz=[card(7, Y), card(4, R)],
            revealed=[card(3, B)],
            posts=[[card(5, G)], [card(4, Y)], [card(9, G)]],
        )

        with caplog.at_level(logging.DEBUG, logger="blitz.bots.policy"):
            assert aggressive_bot.make_move(hand, foundation)

        messages = [r.getMessage() for r in caplog.records if r.name == "blitz.bots.policy"]
        assert len(messages) == 1
        assert messages[0].startswith("HeuristicBot(aggressive): aggressive: 4R")
        assert "best of 3, score" in messages[0]

    def test_prefers_opening_foundation(self, foundation, aggressive_bot):
        hand = make_hand(blitz=[card(4, R)], revealed=[card(1, G)], posts=[[card(5, B)], [], []])
        decision = aggressive_bot.select_move(hand, foundation)

        assert decision.candidate.card == card(1, G)
        assert decision.candidate.destination == Destination.foundation(G)

    def test_refreshes_empty_revealed_before_choosing(self, foundation, aggressive_bot):
        hand = make_hand(
            blitz=[card(5, R)],
            draw=[card(8, Y), card(1, B)],
            posts=[[card(9, B)], [card(9, G)], [card(9, Y)]],
        )

        assert aggressive_bot.make_move(hand, foundation)

        assert foundation.top(B) == card(1, B)

    def test_no_move_cycles_draw(self, foundation, aggressive_bot):
        hand = make_hand(
            blitz=[card(5, R)],
            draw=[card(2, Y), card(3, Y), card(4, Y), card(1, B)],
            revealed=[card(7, G), card(10, G), card(10, Y)],
            posts=[[card(9, B)], [card(9, G)], [card(9, Y)]],
        )

        assert aggressive_bot.make_move(hand, foundation)

        assert hand.plays_this_round == 0
        assert hand.revealed == [card(1, B), card(4, Y), card(3, Y)]

    def test_exhausted_hand_returns_false(self, foundation, aggressive_bot):
        hand = stuck_hand()
        assert not aggressive_bot.make_move(hand, foundation)
        assert hand.plays_this_round == 0

    def test_strategy_fixed_at_construction(self, foundation):
        bot = HeuristicBot(rng=random.Random(11))
        first = bot.strategy
        hand = make_hand(blitz=[card(3, R)])
        bot.make_move(hand, foundation)
        assert bot.strategy == first

    def test_random_strategy_covers_both(self):
        rng = random.Random(2024)
        picked = {random_strategy(rng) for _ in range(50)}
        assert picked == set(Strategy)


class TestRandomPolicy:
    """Tests for the uniform random baseline."""

    def test_random_policy_only_plays_legal(self, foundation):
        policy = RandomPolicy(seed=3)
        for _ in range(20):
            hand = make_hand(
                blitz=[card(1, R)],
                revealed=[card(1, B), card(6, G)],
                posts=[[card(7, Y)], [], [card(2, G)]],
            )
            decision = policy.select_move(hand, foundation)
            assert hand.can_place(decision.candidate.card, decision.candidate.destination, foundation)

    def test_random_policy_is_reproducible(self, foundation):
        def choices(seed):
            policy = RandomPolicy(seed=seed)
            hand = make_hand(blitz=[card(4, R)], revealed=[card(6, G), card(2, Y)])
            return [str(policy.select_move(hand, foundation).candidate.destination) for _ in range(10)]

        assert choices(8) == choices(8)

    def test_random_policy_none_when_stuck(self, foundation):
        assert RandomPolicy(seed=1).select_move(stuck_hand(), foundation) is None
