"""
Session Module - Manages in-memory simulation sessions.

A session represents one table of bots:
- Created with a config and a bot policy
- Plays any number of rounds, one tick at a time
- Aggregates statistics across rounds
- Destroyed when the caller ends it

Nothing is persisted.
"""

from .manager import SessionManager, Session, SessionState, create_players
from .game_loop import GameLoop, LoopState, LoopResult
from .stats import SessionStats, PlayerStats, RoundSummary

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "create_players",
    "GameLoop",
    "LoopState",
    "LoopResult",
    "SessionStats",
    "PlayerStats",
    "RoundSummary",
]
