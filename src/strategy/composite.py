"""
The Strategy bundle seated at a table.

A Strategy composes one counting system, one decision policy, one betting
policy and one insurance policy behind the five calls the engine makes:

    update(card)                       count a card the player has seen
    bet(BetState) -> int               size the next wager (0 = broke)
    decide_option(TableState, legal)   choose a legal Action
    take_insurance() -> bool           only asked when the dealer shows an Ace
    reset()                            new shoe, forget the count

The engine knows nothing about which systems are inside.
"""

from __future__ import annotations

from src.engine.cards import Card
from src.engine.rules import Action
from src.strategy.betting import BettingPolicy
from src.strategy.counting import CountingSystem
from src.strategy.decision import DecisionPolicy
from src.strategy.state import BetState, TableState

DEFAULT_INSURANCE_THRESHOLD: float = 3.0


# ─── Insurance ────────────────────────────────────────────────────────────────

class InsurancePolicy:
    """Take insurance once the true count reaches *threshold*."""

    def __init__(self, threshold: float = DEFAULT_INSURANCE_THRESHOLD) -> None:
        self.threshold = threshold

    def take(self, counting: CountingSystem) -> bool:
        return counting.true_count >= self.threshold

    def __str__(self) -> str:
        return f"Insure at TC >= {self.threshold:g}"


class NeverInsure(InsurancePolicy):
    def __init__(self) -> None:
        super().__init__(threshold=float("inf"))

    def take(self, counting: CountingSystem) -> bool:
        return False

    def __str__(self) -> str:
        return "Never insure"


# ─── Composite ────────────────────────────────────────────────────────────────

class Strategy:
    """A complete playing strategy.

    Args:
        counting:  Counting system; owns the running/true count state.
        decision:  Chooses actions from the legal option set.
        betting:   Sizes each wager.
        insurance: Insurance policy; defaults to the TC >= 3 rule.
        label:     Display name; built from the parts when omitted.
    """

    def __init__(
        self,
        counting: CountingSystem,
        decision: DecisionPolicy,
        betting: BettingPolicy,
        insurance: InsurancePolicy | None = None,
        label: str | None = None,
    ) -> None:
        self.counting = counting
        self.decision = decision
        self.betting = betting
        self.insurance = insurance if insurance is not None else InsurancePolicy()
        self.label = label or f"{counting} / {decision} / {betting}"

    @property
    def num_decks(self) -> int:
        return self.counting.num_decks

    @property
    def running_count(self) -> float:
        return self.counting.running_count

    @property
    def true_count(self) -> float:
        return self.counting.true_count

    def update(self, card: Card) -> None:
        self.counting.update(card)

    def reset(self) -> None:
        self.counting.reset()

    def bet_state(self, balance: float) -> BetState:
        return BetState(
            balance=balance,
            running_count=self.counting.running_count,
            true_count=self.counting.true_count,
            num_decks=self.counting.num_decks,
        )

    def bet(self, state: BetState) -> int:
        return self.betting.bet(state)

    def decide_option(self, state: TableState, options: frozenset[Action]) -> Action:
        return self.decision.decide(state, options)

    def take_insurance(self) -> bool:
        return self.insurance.take(self.counting)

    def __str__(self) -> str:
        return self.label

    def __repr__(self) -> str:
        return f"Strategy({self.label!r})"
