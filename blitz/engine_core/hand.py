"""
Hand - One player's private card structures.

Each hand owns:
- Blitz pile: 10 cards, top is playable; emptying it wins the round
- Draw pile: the rest of the deck, surfaced three at a time
- Revealed buffer: up to 3 face-up cards from the draw pile, all playable
- Post piles: 3 personal cascades building down by one, any color

Cards are never created or destroyed after the deal, only relocated.
Cards this hand plays to the shared foundation are remembered in
`played_to_foundation` so the 40-card set can always be accounted for.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import random

from .card import Card, Color, build_deck
from .foundation import Foundation


BLITZ_PILE_SIZE = 10
REVEAL_COUNT = 3
POST_PILE_COUNT = 3


class SourceKind(Enum):
    """Where an available card currently sits."""
    BLITZ = "blitz"
    POST = "post"
    REVEALED = "revealed"


class DestinationKind(Enum):
    """Where a card can be placed."""
    FOUNDATION = "foundation"
    CASCADE = "cascade"


@dataclass(frozen=True)
class CardSource:
    """Identifies the structure an available card will be popped from."""
    kind: SourceKind
    index: int = 0  # Post pile index or revealed position

    def __str__(self) -> str:
        if self.kind == SourceKind.BLITZ:
            return "blitz"
        return f"{self.kind.value}[{self.index}]"


@dataclass(frozen=True)
class Destination:
    """A placement target: a foundation pile by color, or a cascade by index."""
    kind: DestinationKind
    color: Color | None = None
    index: int = 0

    @classmethod
    def foundation(cls, color: Color) -> Destination:
        return cls(kind=DestinationKind.FOUNDATION, color=color)

    @classmethod
    def cascade(cls, index: int) -> Destination:
        return cls(kind=DestinationKind.CASCADE, index=index)

    @property
    def is_foundation(self) -> bool:
        return self.kind == DestinationKind.FOUNDATION

    def __str__(self) -> str:
        if self.is_foundation:
            return f"foundation[{self.color.value}]"
        return f"cascade[{self.index}]"


@dataclass(frozen=True)
class AvailableCard:
    """A card the hand may play right now, with where it comes from."""
    card: Card
    source: CardSource


@dataclass
class Hand:
    """
    A player's piles for the current round.

    `total_plays` survives re-deals; everything else is reset by `deal`.
    """
    blitz_pile: list[Card] = field(default_factory=list)
    draw_pile: list[Card] = field(default_factory=list)
    revealed: list[Card] = field(default_factory=list)
    post_piles: list[list[Card]] = field(
        default_factory=lambda: [[] for _ in range(POST_PILE_COUNT)]
    )
    played_to_foundation: list[Card] = field(default_factory=list)
    plays_this_round: int = 0
    total_plays: int = 0

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def deal(self, rng: random.Random | None = None):
        """
        Shuffle a fresh 40-card deck and split it 10/30.

        Clears the revealed buffer, post piles and round counter,
        then surfaces the first three draw cards.
        """
        rng = rng or random.Random()
        deck = build_deck()
        rng.shuffle(deck)

        self.blitz_pile = deck[:BLITZ_PILE_SIZE]
        self.draw_pile = deck[BLITZ_PILE_SIZE:]
        self.revealed = []
        self.post_piles = [[] for _ in range(POST_PILE_COUNT)]
        self.played_to_foundation = []
        self.plays_this_round = 0

        self.cycle_draw()

    # ------------------------------------------------------------------
    # Draw cycling
    # ------------------------------------------------------------------

    def cycle_draw(self) -> bool:
        """
        Surface up to three new cards from the draw pile.

        Any currently revealed cards go back under the draw pile first,
        in reverse, so a full pass visits cards in the same order.
        Returns False when nothing new can be surfaced.
        """
        if not self.draw_pile:
            return False

        if self.revealed:
            self.draw_pile[0:0] = list(reversed(self.revealed))
            self.revealed = []

        for _ in range(REVEAL_COUNT):
            if not self.draw_pile:
                break
            self.revealed.append(self.draw_pile.pop())
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def blitz_top(self) -> Card | None:
        return self.blitz_pile[-1] if self.blitz_pile else None

    def post_top(self, index: int) -> Card | None:
        pile = self.post_piles[index]
        return pile[-1] if pile else None

    def available_cards(self) -> list[AvailableCard]:
        """Blitz top, each post pile top, then every revealed card."""
        available = []

        if self.blitz_pile:
            available.append(AvailableCard(self.blitz_pile[-1], CardSource(SourceKind.BLITZ)))

        for i, pile in enumerate(self.post_piles):
            if pile:
                available.append(AvailableCard(pile[-1], CardSource(SourceKind.POST, i)))

        for i, card in enumerate(self.revealed):
            available.append(AvailableCard(card, CardSource(SourceKind.REVEALED, i)))

        return available

    def has_won(self) -> bool:
        return not self.blitz_pile

    def has_any_legal_move(self, foundation: Foundation) -> bool:
        """Check whether any available card fits a foundation or a cascade."""
        for available in self.available_cards():
            card = available.card
            if foundation.can_accept(card):
                return True
            for i in range(POST_PILE_COUNT):
                if card.can_place_on_cascade(self.post_top(i)):
                    return True
        return False

    def can_place(self, card: Card, destination: Destination, foundation: Foundation) -> bool:
        """Check a placement against the destination's current top."""
        if destination.is_foundation:
            if destination.color != card.color:
                return False
            return foundation.can_accept(card)
        if not 0 <= destination.index < POST_PILE_COUNT:
            return False
        return card.can_place_on_cascade(self.post_top(destination.index))

    def all_cards(self) -> list[Card]:
        """Every card this hand was dealt, wherever it sits now."""
        cards = list(self.blitz_pile) + list(self.draw_pile) + list(self.revealed)
        for pile in self.post_piles:
            cards.extend(pile)
        cards.extend(self.played_to_foundation)
        return cards

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def place(
        self,
        card: Card,
        source: CardSource,
        destination: Destination,
        foundation: Foundation,
    ) -> bool:
        """
        Move a card from its source to a destination.

        All-or-nothing: returns False and changes nothing if the source
        does not hold the card or the destination will not take it.
        """
        if self._peek_source(source) != card:
            return False
        if not self.can_place(card, destination, foundation):
            return False

        self._pop_source(source)
        if destination.is_foundation:
            foundation.push(card)
            self.played_to_foundation.append(card)
        else:
            self.post_piles[destination.index].append(card)

        self.plays_this_round += 1
        self.total_plays += 1
        return True

    def _peek_source(self, source: CardSource) -> Card | None:
        if source.kind == SourceKind.BLITZ:
            return self.blitz_top
        if source.kind == SourceKind.POST:
            if not 0 <= source.index < POST_PILE_COUNT:
                return None
            return self.post_top(source.index)
        if 0 <= source.index < len(self.revealed):
            return self.revealed[source.index]
        return None

    def _pop_source(self, source: CardSource) -> Card:
        if source.kind == SourceKind.BLITZ:
            return self.blitz_pile.pop()
        if source.kind == SourceKind.POST:
            return self.post_piles[source.index].pop()
        return self.revealed.pop(source.index)
