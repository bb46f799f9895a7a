"""
Round - The turn/round state machine.

States:
    IDLE   -> before the first start
    ACTIVE -> cards are being played
    ENDED  -> terminal; a winner emptied their blitz pile, or nobody could move

`start` re-enters ACTIVE from IDLE or ENDED, resetting the foundation
and re-dealing every hand. `play_turn` is one bounded simulation step:
each player, in seat order, gets a few bot invocations. The first player
to empty their blitz pile wins immediately.

Stalemate is judged per tick: a player who cannot place even after
cycling the draw pile casts a vote. If nobody placed anything and every
player voted, the round ends with no winner. Players that got stuck
early in a tick are not re-checked after later players change the
foundation, so this is an approximation of a global stalemate.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, TYPE_CHECKING
import logging
import random
import time

from ..config import GameConfig
from .events import EventBus, EventType, GameEvent
from .foundation import Foundation
from .hand import Hand
from .snapshot import GameSnapshot, PlayerSnapshot, StatsSnapshot

if TYPE_CHECKING:
    from ..bots.policy import BotPolicy


logger = logging.getLogger(__name__)


class RoundPhase(Enum):
    """Round lifecycle."""
    IDLE = "idle"
    ACTIVE = "active"
    ENDED = "ended"


class EndReason(Enum):
    """Why a round ended."""
    BLITZ = "blitz"  # A player emptied their blitz pile
    STALEMATE = "stalemate"
    TURN_LIMIT = "turn_limit"  # Driver gave up after too many ticks


@dataclass
class Player:
    """A seat at the table: a bot and the hand it plays."""
    name: str
    bot: BotPolicy
    hand: Hand = field(default_factory=Hand)
    wins: int = 0

    @property
    def strategy(self) -> str | None:
        strategy = getattr(self.bot, "strategy", None)
        return strategy.value if strategy else None


@dataclass
class RoundResult:
    """Outcome of a finished round."""
    round_number: int
    winner: str | None
    reason: EndReason
    duration_seconds: int
    move_count: int
    plays_per_player: dict[str, int] = field(default_factory=dict)


class Round:
    """
    Owns the shared foundation and all hands for a game.

    The same Round object is reused for every round of a session; its
    piles are reset on each `start`.
    """

    def __init__(
        self,
        players: list[Player],
        config: GameConfig | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        events: EventBus | None = None,
        on_round_end: Callable[[RoundResult], None] | None = None,
    ):
        if not players:
            raise ValueError("A round needs at least one player")

        self.players = players
        self.config = config or GameConfig(player_count=len(players))
        self.rng = rng or random.Random(self.config.seed)
        self.clock = clock
        self.events = events or EventBus()
        self.on_round_end = on_round_end

        self.foundation = Foundation()
        self.phase = RoundPhase.IDLE
        self.winner: Player | None = None
        self.end_reason: EndReason | None = None
        self.round_number = 0
        self.move_count = 0
        self.duration_seconds = 0

        self._started_at = 0.0
        self._reports_sent = 0

    @property
    def is_active(self) -> bool:
        return self.phase == RoundPhase.ACTIVE

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Reset the table and deal a fresh round."""
        if self.is_active:
            logger.info("Restarting round %d before it finished", self.round_number)

        self.phase = RoundPhase.ACTIVE
        self.winner = None
        self.end_reason = None
        self.round_number += 1
        self.move_count = 0
        self.duration_seconds = 0
        self._reports_sent = 0
        self._started_at = self.clock()

        self.foundation.reset()
        for player in self.players:
            player.hand.deal(self.rng)

        self._emit(EventType.ROUND_STARTED, f"Starting round {self.round_number}", {
            "players": [p.name for p in self.players],
        })
        self._report_state()

    def end_round(
        self,
        winner: Player | None,
        reason: EndReason | None = None,
    ) -> RoundResult | None:
        """
        Finish the active round and forward its result.

        Call exactly once per round; calls on a round that is not
        active are ignored and return None.
        """
        if not self.is_active:
            logger.warning("end_round called on a %s round; ignored", self.phase.value)
            return None

        reason = reason or (EndReason.BLITZ if winner else EndReason.STALEMATE)
        self.phase = RoundPhase.ENDED
        self.winner = winner
        self.end_reason = reason
        self.duration_seconds = self._elapsed()
        if winner:
            winner.wins += 1

        result = RoundResult(
            round_number=self.round_number,
            winner=winner.name if winner else None,
            reason=reason,
            duration_seconds=self.duration_seconds,
            move_count=self.move_count,
            plays_per_player={p.name: p.hand.plays_this_round for p in self.players},
        )

        if winner:
            message = f"{winner.name} wins round {self.round_number}"
        else:
            message = f"Round {self.round_number} ended without a winner ({reason.value})"
        self._emit(EventType.ROUND_ENDED, message, {
            "winner": result.winner,
            "reason": reason.value,
            "duration_seconds": result.duration_seconds,
            "move_count": result.move_count,
            "plays": dict(result.plays_per_player),
            "blitz_left": {p.name: len(p.hand.blitz_pile) for p in self.players},
        })

        if self.on_round_end:
            self.on_round_end(result)
        return result

    # ------------------------------------------------------------------
    # Simulation step
    # ------------------------------------------------------------------

    def play_turn(self) -> bool:
        """
        Run one tick.

        Returns True if the round ended during this tick or any card
        was placed; False if nothing was placed (or the round is not
        active, in which case nothing happens at all).
        """
        if not self.is_active:
            return False

        placements = 0
        stalemate_votes = 0

        for player in self.players:
            if player.hand.has_won():
                continue

            placed, stuck = self._take_turn(player)
            placements += placed
            if not self.is_active:
                return True
            if stuck:
                stalemate_votes += 1

        self.duration_seconds = self._elapsed()

        if placements == 0 and stalemate_votes == len(self.players):
            self._emit(EventType.STALEMATE, "Stalemate - no player can make any moves")
            self.end_round(None, EndReason.STALEMATE)
            return True

        if self.move_count // self.config.state_report_interval > self._reports_sent:
            self._reports_sent = self.move_count // self.config.state_report_interval
            self._report_state()

        return placements > 0

    def _take_turn(self, player: Player) -> tuple[int, bool]:
        """
        Give one player their bot invocations for this tick.

        Returns (placements made, whether the player is stuck).
        """
        cfg = self.config
        placements = 0
        actions = 0
        attempts = 0

        while actions < cfg.moves_per_turn and attempts < cfg.max_attempts:
            attempts += 1
            acted, placed = self._invoke_bot(player)
            placements += placed
            if placed and self._check_win(player):
                return placements, False
            if acted:
                actions += 1
                continue

            # Nothing to do; dig through the draw pile before giving up
            for _ in range(cfg.extra_draw_attempts):
                if not player.hand.cycle_draw():
                    return placements, True
                acted, placed = self._invoke_bot(player)
                placements += placed
                if placed and self._check_win(player):
                    return placements, False
                if acted:
                    break
            break

        return placements, False

    def _invoke_bot(self, player: Player) -> tuple[bool, bool]:
        """Run the bot once. Returns (anything happened, card placed)."""
        before = player.hand.plays_this_round
        acted = player.bot.make_move(player.hand, self.foundation)
        placed = player.hand.plays_this_round > before
        if placed:
            self.move_count += 1
        return acted, placed

    def _check_win(self, player: Player) -> bool:
        if player.hand.has_won():
            self.end_round(player, EndReason.BLITZ)
            return True
        return False

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def snapshot(self, stats: StatsSnapshot | None = None) -> GameSnapshot:
        """Materialized copy of the current state."""
        duration = self._elapsed() if self.is_active else self.duration_seconds
        return GameSnapshot(
            active=self.is_active,
            phase=self.phase.value,
            winner=self.winner.name if self.winner else None,
            end_reason=self.end_reason.value if self.end_reason else None,
            round_number=self.round_number,
            duration_seconds=duration,
            move_count=self.move_count,
            players=tuple(self._player_snapshot(p) for p in self.players),
            foundation=self.foundation.copy_piles(),
            stats=stats or StatsSnapshot(),
        )

    def _player_snapshot(self, player: Player) -> PlayerSnapshot:
        hand = player.hand
        return PlayerSnapshot(
            name=player.name,
            strategy=player.strategy,
            blitz_count=len(hand.blitz_pile),
            blitz_top=hand.blitz_top,
            draw_count=len(hand.draw_pile),
            revealed=tuple(hand.revealed),
            post_piles=tuple(tuple(pile) for pile in hand.post_piles),
            plays_this_round=hand.plays_this_round,
            total_plays=hand.total_plays,
            wins=player.wins,
            has_won=self.winner is player,
        )

    def _report_state(self):
        piles = " ".join(
            f"{color.value[0].upper()}:{self.foundation.size(color)}"
            for color in self.foundation.piles
        )
        lines = [f"Move {self.move_count} - Foundation {piles}"]
        for p in self.players:
            h = p.hand
            posts = ",".join(str(len(pile)) for pile in h.post_piles)
            lines.append(
                f"{p.name}: Blitz:{len(h.blitz_pile)} Draw:{len(h.draw_pile)}+{len(h.revealed)} "
                f"Posts:[{posts}] Plays:{h.plays_this_round}"
            )
        self._emit(EventType.STATE_REPORT, " | ".join(lines), {
            "move_count": self.move_count,
            "foundation": {c.value: self.foundation.size(c) for c in self.foundation.piles},
            "blitz_left": {p.name: len(p.hand.blitz_pile) for p in self.players},
        })

    def _elapsed(self) -> int:
        return max(0, int(self.clock() - self._started_at))

    def _emit(self, event_type: EventType, message: str, payload: dict | None = None):
        self.events.emit(GameEvent(
            event_type=event_type,
            round_number=self.round_number,
            message=message,
            payload=payload or {},
        ))
