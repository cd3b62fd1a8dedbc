"""
Monte Carlo simulator for card-counting strategies.

One Simulator seats one Strategy at its own Table (own shoe, own dealer) and
plays a configured number of hands per simulation, folding every round into
a SimulationSummary. The shoe is not reshuffled between simulations; it
reshuffles itself at the penetration point.

    Game.run(num_hands)              → GameTotals     one bankroll's session
    Simulator.run_single_simulation  → SimulationSummary delta for one session
    Simulator.run                    → SimulationSummary over num_simulations

Round classification: a round is a win, push or loss according to the net of
its main bet(s), so wins + pushes + losses equals the number of rounds
played. Insurance is excluded from the classification but included in
winnings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields

import numpy as np

from src.engine.config import SimulatorConfig
from src.engine.errors import OutOfFunds
from src.engine.player import Player
from src.engine.rules import Outcome
from src.engine.shoe import Shoe
from src.engine.table import RoundResult, Table
from src.strategy.composite import Strategy

logger = logging.getLogger(__name__)


# ─── Result types ─────────────────────────────────────────────────────────────

@dataclass
class GameTotals:
    """Totals for one Game.run session."""
    wins: int = 0
    pushes: int = 0
    losses: int = 0
    blackjacks: int = 0
    winnings: float = 0.0
    hands_played: int = 0
    ended_early: bool = False

    def record(self, result: RoundResult) -> None:
        outcome = result.outcome
        if outcome is Outcome.WIN:
            self.wins += 1
        elif outcome is Outcome.LOSS:
            self.losses += 1
        else:
            self.pushes += 1
        if result.blackjack:
            self.blackjacks += 1
        self.winnings += result.total_net
        self.hands_played += 1


@dataclass
class SimulationSummary:
    """Additive per-strategy accumulator.

    ``merge`` is plain field-wise addition, so summaries can be combined in
    any order and grouping.

    Attributes:
        label:          Strategy label.
        wins:           Rounds with positive main-bet net.
        pushes:         Rounds with zero main-bet net.
        losses:         Rounds with negative main-bet net.
        early_endings:  Sessions that stopped because the bankroll ran out.
        winnings:       Total net winnings including insurance.
        blackjacks:     Player naturals dealt (paid or pushed).
        hands_played:   Rounds played.
        simulations:    Sessions folded into this summary.
    """
    label: str
    wins: int = 0
    pushes: int = 0
    losses: int = 0
    early_endings: int = 0
    winnings: float = 0.0
    blackjacks: int = 0
    hands_played: int = 0
    simulations: int = 0

    @classmethod
    def from_totals(cls, label: str, totals: GameTotals) -> SimulationSummary:
        return cls(
            label=label,
            wins=totals.wins,
            pushes=totals.pushes,
            losses=totals.losses,
            early_endings=int(totals.ended_early),
            winnings=totals.winnings,
            blackjacks=totals.blackjacks,
            hands_played=totals.hands_played,
            simulations=1,
        )

    def merge(self, other: SimulationSummary) -> None:
        """Add *other*'s counters into this summary in place."""
        for f in fields(self):
            if f.name != "label":
                setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))

    # ─── Derived statistics ──────────────────────────────────────────────────

    @property
    def total_hands(self) -> int:
        return self.wins + self.pushes + self.losses

    def _pct(self, n: int) -> float:
        return n / self.total_hands if self.total_hands else 0.0

    @property
    def win_pct(self) -> float:
        return self._pct(self.wins)

    @property
    def push_pct(self) -> float:
        return self._pct(self.pushes)

    @property
    def loss_pct(self) -> float:
        return self._pct(self.losses)

    @property
    def avg_winnings_per_hand(self) -> float:
        return self.winnings / self.total_hands if self.total_hands else 0.0

    def __str__(self) -> str:
        return (
            f"{self.label}: {self.total_hands:,} hands | "
            f"W/P/L {self.win_pct:.2%}/{self.push_pct:.2%}/{self.loss_pct:.2%} | "
            f"winnings {self.winnings:+,.2f} ({self.avg_winnings_per_hand:+.4f}/hand) | "
            f"BJ {self.blackjacks:,} | early endings {self.early_endings}"
        )


# ─── Game loop ────────────────────────────────────────────────────────────────

class Game:
    """Plays rounds between one Player and one Table."""

    def __init__(self, player: Player, table: Table) -> None:
        self.player = player
        self.table = table

    def play_round(self, bet: int) -> RoundResult:
        player, table = self.player, self.table
        player.place_bet(bet)
        table.deal_hand(player)
        up_card = table.dealer.up_card
        while not player.turn_is_over():
            table.play_option(player, player.decide_option(up_card))
        result = table.finish_hand(player)
        player.reset()
        table.reset()
        return result

    def run(self, num_hands: int) -> GameTotals:
        """Play up to *num_hands* rounds or until the bankroll runs out.

        Raises:
            BetBelowMinimum: The strategy bet above zero but under the minimum.
            InvalidBet:      The strategy bet more than the balance.
            NoValidOption:   The strategy chose an illegal action.
        """
        totals = GameTotals()
        for _ in range(num_hands):
            if not self.player.can_continue():
                totals.ended_early = True
                break
            try:
                bet = self.player.bet()
            except OutOfFunds:
                totals.ended_early = True
                break
            totals.record(self.play_round(bet))
        return totals


# ─── Simulator ────────────────────────────────────────────────────────────────

class Simulator:
    """Repeated sessions of one Strategy at its own table.

    Args:
        strategy: The strategy to evaluate; owned by this simulator.
        config:   Table rules and simulation sizes.
        rng:      numpy Generator or seed for the shoe; defaults to
                  ``config.seed``.
        shoe:     Pre-built shoe, mainly for tests.
    """

    def __init__(
        self,
        strategy: Strategy,
        config: SimulatorConfig,
        rng: np.random.Generator | int | None = None,
        shoe: Shoe | None = None,
    ) -> None:
        self.strategy = strategy
        self.config = config
        self.player = Player(strategy, config)
        self.table = Table(config, rng=rng if rng is not None else config.seed, shoe=shoe)
        self.game = Game(self.player, self.table)
        self.summary = SimulationSummary(label=strategy.label)

    def run_single_simulation(self) -> SimulationSummary:
        """Play one session, fold it into ``summary`` and return its delta."""
        totals = self.game.run(self.config.hands_per_simulation)
        delta = SimulationSummary.from_totals(self.strategy.label, totals)
        self.summary.merge(delta)
        self.player.reset_balance()
        self.table.reset_balance()
        return delta

    def run(self) -> SimulationSummary:
        for i in range(self.config.num_simulations):
            self.run_single_simulation()
            logger.debug("%s: simulation %d/%d done", self.strategy.label, i + 1, self.config.num_simulations)
        return self.summary


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from src.strategy.catalog import build_strategy

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    cfg = SimulatorConfig(hands_per_simulation=10_000, num_simulations=10, seed=42)
    sim = Simulator(build_strategy("Hi-Lo", "Basic Strategy", "Margin Betting", margin=1.0), cfg)
    print(sim.run())
