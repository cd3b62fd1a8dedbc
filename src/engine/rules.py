"""
Actions, outcomes, dealer drawing rule and settlement.

Settlement of a standing hand against the dealer's final total:
    1. Player bust          → LOSS   (already resolved during play)
    2. Dealer bust          → WIN    (bet returned + equal profit)
    3. Higher total wins; equal totals push.

Blackjack pays 3:2 and is settled immediately after the deal. Insurance,
when offered, pays 2:1.

Net convention (player's perspective, stake already taken from balance):
    WIN  → balance += 2 × bet,  net = +bet
    PUSH → balance += bet,      net = 0
    LOSS → balance += 0,        net = -bet
"""

from __future__ import annotations

from enum import Enum, auto

from .hand import HandValue

BLACKJACK_PAYOUT: float = 1.5
INSURANCE_PAYOUT: float = 2.0
DEALER_STANDS_ON: int = 17


class Action(Enum):
    HIT = auto()
    STAND = auto()
    DOUBLE_DOWN = auto()
    SPLIT = auto()
    SURRENDER = auto()


class Outcome(Enum):
    WIN = auto()
    LOSS = auto()
    PUSH = auto()
    BLACKJACK = auto()
    SURRENDER = auto()


def dealer_should_hit(value: HandValue, hits_soft_17: bool = False) -> bool:
    """Return True if the dealer must draw on *value*.

    Examples:
        >>> dealer_should_hit(HandValue(16))
        True
        >>> dealer_should_hit(HandValue(7, 17))
        False
        >>> dealer_should_hit(HandValue(7, 17), hits_soft_17=True)
        True
    """
    total = value.best
    if total < DEALER_STANDS_ON:
        return True
    return hits_soft_17 and total == DEALER_STANDS_ON and value.is_soft


def compare_totals(player_total: int, dealer_total: int) -> Outcome:
    """Outcome of a non-busted player total against the dealer's final total.

    Examples:
        >>> compare_totals(18, 22)
        <Outcome.WIN: 1>
        >>> compare_totals(18, 18)
        <Outcome.PUSH: 3>
    """
    if dealer_total > 21 or player_total > dealer_total:
        return Outcome.WIN
    if player_total == dealer_total:
        return Outcome.PUSH
    return Outcome.LOSS


def payout_multiplier(outcome: Outcome, blackjack_payout: float = BLACKJACK_PAYOUT) -> float:
    """Net profit in units of the bet for a settled outcome.

    Examples:
        >>> payout_multiplier(Outcome.BLACKJACK)
        1.5
        >>> payout_multiplier(Outcome.SURRENDER)
        -0.5
    """
    if outcome is Outcome.WIN:
        return 1.0
    if outcome is Outcome.BLACKJACK:
        return blackjack_payout
    if outcome is Outcome.PUSH:
        return 0.0
    if outcome is Outcome.SURRENDER:
        return -0.5
    return -1.0
