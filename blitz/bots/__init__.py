"""
Bots module - Automated Blitz players.

Provides:
- BotPolicy: Interface for bot decision-making
- HeuristicBot: Priority-scoring bot with a fixed strategy
- RandomPolicy: Uniformly random legal moves
- MoveEvaluator: Enumerates and scores legal placements
- Strategy: Play styles and their weight tables
"""

from .policy import BotPolicy, BotDecision, HeuristicBot, RandomPolicy
from .evaluator import MoveEvaluator, MoveCandidate
from .personality import Strategy, StrategyWeights, MoveWeights, STRATEGY_WEIGHTS, random_strategy

__all__ = [
    "BotPolicy",
    "BotDecision",
    "HeuristicBot",
    "RandomPolicy",
    "MoveEvaluator",
    "MoveCandidate",
    "Strategy",
    "StrategyWeights",
    "MoveWeights",
    "STRATEGY_WEIGHTS",
    "random_strategy",
]
