"""
Read-only snapshots handed to decision and betting policies.

Both are built on demand by the Player from its current hand, balance and
counting state and are never stored.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.engine.cards import Card


@dataclass(frozen=True)
class TableState:
    cards: tuple[Card, ...]
    hard_total: int
    soft_total: int | None
    bet: int
    balance: float
    running_count: float
    true_count: float
    num_decks: int
    dealer_up_card: Card

    @property
    def best_total(self) -> int:
        return self.soft_total if self.soft_total is not None else self.hard_total

    @property
    def is_soft(self) -> bool:
        return self.soft_total is not None

    @property
    def is_pair(self) -> bool:
        return len(self.cards) == 2 and self.cards[0].rank == self.cards[1].rank

    @property
    def dealer_value(self) -> int:
        """Dealer up-card value, Ace = 1."""
        return self.dealer_up_card.value


@dataclass(frozen=True)
class BetState:
    balance: float
    running_count: float
    true_count: float
    num_decks: int
