"""
Foundation - The four shared piles every player builds on.

One pile per color, building strictly upward from 1 to 10.
The foundation is written by whichever player currently holds
priority; turns within a tick are serialized by the Round.
"""

from __future__ import annotations

from .card import Card, Color


class Foundation:
    """Shared per-color piles, reset to empty at round start."""

    def __init__(self):
        self.piles: dict[Color, list[Card]] = {color: [] for color in Color}

    def reset(self):
        """Empty all four piles."""
        self.piles = {color: [] for color in Color}

    def top(self, color: Color) -> Card | None:
        """Get the top card of a color's pile."""
        pile = self.piles[color]
        return pile[-1] if pile else None

    def can_accept(self, card: Card) -> bool:
        """Check whether the card's color pile will take it."""
        return card.can_place_on_foundation(self.top(card.color))

    def push(self, card: Card) -> bool:
        """Place a card on its color's pile. Returns False if illegal."""
        if not self.can_accept(card):
            return False
        self.piles[card.color].append(card)
        return True

    def size(self, color: Color) -> int:
        return len(self.piles[color])

    def total_cards(self) -> int:
        return sum(len(pile) for pile in self.piles.values())

    def copy_piles(self) -> dict[Color, tuple[Card, ...]]:
        """Materialized copy of every pile, safe to hand to renderers."""
        return {color: tuple(pile) for color, pile in self.piles.items()}
