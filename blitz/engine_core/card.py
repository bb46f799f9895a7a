"""
Cards - The immutable value type every pile is built from.

A player's deck holds 40 cards: ranks 1-10 in each of four colors.
Two placement rules apply:
- Foundation (shared): same color, exactly one rank higher; empty takes a 1
- Cascade (personal post pile): exactly one rank lower, any color; empty takes anything
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any


MIN_RANK = 1
MAX_RANK = 10


class Color(str, Enum):
    """Card colors. Declaration order is the foundation display order."""
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"


@dataclass(frozen=True)
class Card:
    """A single card. Immutable once created."""
    rank: int
    color: Color

    def __post_init__(self):
        if not MIN_RANK <= self.rank <= MAX_RANK:
            raise ValueError(f"Card rank must be {MIN_RANK}-{MAX_RANK}, got {self.rank}")
        if not isinstance(self.color, Color):
            object.__setattr__(self, "color", Color(self.color))

    def can_place_on_foundation(self, top: Card | None) -> bool:
        """Check whether this card may go on a foundation pile with the given top."""
        if top is None:
            return self.rank == MIN_RANK
        return top.color == self.color and self.rank == top.rank + 1

    def can_place_on_cascade(self, top: Card | None) -> bool:
        """Check whether this card may go on a cascade with the given top."""
        if top is None:
            return True
        return self.rank == top.rank - 1

    @property
    def label(self) -> str:
        """Short label, e.g. '7R' for the red seven."""
        return f"{self.rank}{self.color.value[0].upper()}"

    def to_dict(self) -> dict[str, Any]:
        return {"rank": self.rank, "color": self.color.value, "label": self.label}

    def __str__(self) -> str:
        return self.label


def build_deck() -> list[Card]:
    """Build one player's unshuffled 40-card deck."""
    return [
        Card(rank=rank, color=color)
        for color in Color
        for rank in range(MIN_RANK, MAX_RANK + 1)
    ]
