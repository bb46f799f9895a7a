"""
Engine Core - Card rules, piles and the round state machine.

The engine:
1. Deals each player a shuffled 40-card deck
2. Validates placements onto foundations and cascades
3. Steps rounds one tick at a time via bot decisions
4. Detects wins and stalemates
5. Publishes read-only snapshots and structured events
"""

from .card import Card, Color, build_deck
from .foundation import Foundation
from .hand import Hand, CardSource, SourceKind, Destination, DestinationKind, AvailableCard
from .events import EventBus, EventType, GameEvent, EventLog, LoggingListener
from .round import Round, RoundPhase, EndReason, Player, RoundResult
from .snapshot import GameSnapshot, PlayerSnapshot, StatsSnapshot

__all__ = [
    "Card",
    "Color",
    "build_deck",
    "Foundation",
    "Hand",
    "CardSource",
    "SourceKind",
    "Destination",
    "DestinationKind",
    "AvailableCard",
    "EventBus",
    "EventType",
    "GameEvent",
    "EventLog",
    "LoggingListener",
    "Round",
    "RoundPhase",
    "EndReason",
    "Player",
    "RoundResult",
    "GameSnapshot",
    "PlayerSnapshot",
    "StatsSnapshot",
]
