"""
Pytest fixtures for Blitz tests.
"""

import random

import pytest

from ..bots import HeuristicBot, Strategy
from ..config import GameConfig
from ..engine_core.card import Card, Color
from ..engine_core.events import EventBus, EventLog
from ..engine_core.foundation import Foundation
from ..engine_core.hand import Hand
from ..engine_core.round import Player, Round


R, B, G, Y = Color.RED, Color.BLUE, Color.GREEN, Color.YELLOW


def card(rank: int, color: Color = Color.RED) -> Card:
    return Card(rank=rank, color=color)


def make_hand(
    blitz: list[Card] | None = None,
    draw: list[Card] | None = None,
    revealed: list[Card] | None = None,
    posts: list[list[Card]] | None = None,
) -> Hand:
    """Build a hand with exact piles. Tops are the last element."""
    posts = posts or [[], [], []]
    return Hand(
        blitz_pile=list(blitz or []),
        draw_pile=list(draw or []),
        revealed=list(revealed or []),
        post_piles=[list(p) for p in posts],
    )


def stuck_hand() -> Hand:
    """A hand with no legal move and nothing left to draw."""
    return make_hand(
        blitz=[card(5, R)],
        posts=[[card(9, B)], [card(9, G)], [card(9, Y)]],
    )


class FakeClock:
    """Manually advanced clock for duration tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def advance(self, seconds: float):
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def foundation() -> Foundation:
    return Foundation()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def aggressive_bot(rng) -> HeuristicBot:
    return HeuristicBot(strategy=Strategy.AGGRESSIVE, rng=rng)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def event_log() -> EventLog:
    return EventLog()


@pytest.fixture
def two_player_round(rng, clock, event_log) -> Round:
    """A started 2-player round with aggressive bots and a fake clock."""
    players = [
        Player(name="Bot 1", bot=HeuristicBot(strategy=Strategy.AGGRESSIVE, rng=rng)),
        Player(name="Bot 2", bot=HeuristicBot(strategy=Strategy.AGGRESSIVE, rng=rng)),
    ]
    events = EventBus()
    events.subscribe(event_log)
    round_ = Round(
        players,
        config=GameConfig(player_count=2, seed=1234),
        rng=rng,
        clock=clock,
        events=events,
    )
    round_.start()
    return round_


@pytest.fixture
def four_player_round(clock, event_log) -> Round:
    """An unstarted 4-player round with seeded, mixed-strategy bots."""
    rng = random.Random(42)
    players = [Player(name=f"Bot {i + 1}", bot=HeuristicBot(rng=rng)) for i in range(4)]
    events = EventBus()
    events.subscribe(event_log)
    return Round(
        players,
        config=GameConfig(player_count=4, seed=42),
        rng=rng,
        clock=clock,
        events=events,
    )
