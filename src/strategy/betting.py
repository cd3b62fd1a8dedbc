"""
Bet sizing policies.

A betting policy maps a BetState to an integer bet. Returning 0 is the only
way to say "cannot cover the table minimum"; the game treats it as the end
of the bankroll rather than an error.
"""

from __future__ import annotations

import math

from src.strategy.state import BetState


class BettingPolicy:
    name: str = ""

    def __init__(self, min_bet: int) -> None:
        if min_bet < 1:
            raise ValueError(f"min_bet must be >= 1, got {min_bet}")
        self.min_bet = min_bet

    def bet(self, state: BetState) -> int:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.name


class MarginBettingStrategy(BettingPolicy):
    """Ramp the bet by *margin* table minimums per positive true-count point.

        bet = min_bet × ceil(true_count) × margin   if true_count > 0
        bet = min_bet                               otherwise

    capped by the balance.

    Examples:
        >>> policy = MarginBettingStrategy(margin=2.0, min_bet=5)
        >>> policy.bet(BetState(balance=500, running_count=6, true_count=2.4, num_decks=6))
        30
        >>> policy.bet(BetState(balance=4, running_count=0, true_count=0.0, num_decks=6))
        0
    """
    name = "Margin Betting"

    def __init__(self, margin: float, min_bet: int) -> None:
        super().__init__(min_bet)
        if margin <= 0:
            raise ValueError(f"margin must be positive, got {margin}")
        self.margin = margin

    def bet(self, state: BetState) -> int:
        balance = math.floor(state.balance)
        if balance < self.min_bet:
            return 0
        if state.true_count > 0:
            ramp = math.floor(self.min_bet * math.ceil(state.true_count) * self.margin)
            return max(self.min_bet, min(balance, ramp))
        return self.min_bet


class FlatBettingStrategy(BettingPolicy):
    """Always bet the table minimum."""
    name = "Flat Betting"

    def bet(self, state: BetState) -> int:
        if state.balance < self.min_bet:
            return 0
        return self.min_bet
