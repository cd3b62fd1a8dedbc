"""
The seated player: bankroll, sub-hands and the strategy that drives them.

A Player owns 1 to max_hands PlayerHands (more appear only through splits)
and a cursor marking the sub-hand being played. Stakes are taken from the
balance when they are committed; settlement credits the balance back.
"""

from __future__ import annotations

from .cards import Card
from .config import SimulatorConfig
from .errors import BetBelowMinimum, InvalidBet, NoValidOption, OutOfFunds
from .hand import HandPhase, PlayerHand
from .rules import Action
from src.strategy.composite import Strategy
from src.strategy.state import TableState


class Player:
    def __init__(self, strategy: Strategy, config: SimulatorConfig) -> None:
        self.strategy = strategy
        self.config = config
        self.balance: float = config.player_starting_balance
        self.hands: list[PlayerHand] = []
        self.hand_idx = 0
        self.insurance_bet: float = 0.0
        self.insurance_net: float = 0.0

    # ─── Betting ─────────────────────────────────────────────────────────────

    def can_continue(self) -> bool:
        """True while the balance still covers the table minimum."""
        return self.balance >= self.config.min_bet

    def bet(self) -> int:
        """Ask the strategy for the next wager.

        Raises:
            OutOfFunds: If the betting policy returns 0.
        """
        amount = self.strategy.bet(self.strategy.bet_state(self.balance))
        if amount == 0:
            raise OutOfFunds(f"{self.strategy.label}: balance {self.balance:.2f} below table minimum")
        return amount

    def place_bet(self, amount: int) -> None:
        """Commit *amount* as the stake of a fresh single-hand round.

        Raises:
            BetBelowMinimum: Non-zero bet below the table minimum.
            InvalidBet:      Negative bet or bet above the balance.
        """
        if amount < 0:
            raise InvalidBet(f"bet must be non-negative, got {amount}")
        if 0 < amount < self.config.min_bet:
            raise BetBelowMinimum(f"bet {amount} is below the table minimum {self.config.min_bet}")
        if amount > self.balance:
            raise InvalidBet(f"bet {amount} exceeds balance {self.balance:.2f}")
        self.balance -= amount
        self.hands = [PlayerHand(bet=amount)]
        self.hand_idx = 0

    # ─── Cards and counting ──────────────────────────────────────────────────

    @property
    def current_hand(self) -> PlayerHand:
        return self.hands[self.hand_idx]

    def receive_card(self, card: Card) -> None:
        """Deal *card* face-up to the current sub-hand and count it."""
        self.current_hand.receive(card)
        self.observe(card)

    def observe(self, card: Card) -> None:
        self.strategy.update(card)

    def reset_count(self) -> None:
        self.strategy.reset()

    # ─── Decisions ───────────────────────────────────────────────────────────

    def legal_options(self, dealer_up: Card) -> frozenset[Action]:
        """Actions allowed for the current sub-hand right now."""
        if self.turn_is_over():
            return frozenset()
        hand = self.current_hand
        if hand.phase is not HandPhase.AWAITING_DECISION:
            return frozenset()
        options = {Action.HIT, Action.STAND}
        two_cards = len(hand.cards) == 2
        covers_bet = self.balance >= hand.bet
        if two_cards and covers_bet and (self.config.double_after_split or not hand.split_from):
            options.add(Action.DOUBLE_DOWN)
        if hand.is_pair and covers_bet and len(self.hands) < self.config.max_hands:
            options.add(Action.SPLIT)
        if (
            self.config.surrender
            and two_cards
            and len(self.hands) == 1
            and not hand.split_from
            and dealer_up.value in self.config.surrender_upcards
        ):
            options.add(Action.SURRENDER)
        return frozenset(options)

    def table_state(self, dealer_up: Card) -> TableState:
        hand = self.current_hand
        return TableState(
            cards=tuple(hand.cards),
            hard_total=hand.value.hard,
            soft_total=hand.value.soft,
            bet=hand.bet,
            balance=self.balance,
            running_count=self.strategy.running_count,
            true_count=self.strategy.true_count,
            num_decks=self.strategy.num_decks,
            dealer_up_card=dealer_up,
        )

    def decide_option(self, dealer_up: Card) -> Action:
        """Ask the strategy for the current sub-hand's action.

        Raises:
            NoValidOption: If the strategy picks an action outside the legal set.
        """
        options = self.legal_options(dealer_up)
        if not options:
            raise NoValidOption("no sub-hand is awaiting a decision")
        action = self.strategy.decide_option(self.table_state(dealer_up), options)
        if action not in options:
            raise NoValidOption(f"{self.strategy.label} chose illegal action {action.name}")
        return action

    def advance(self) -> None:
        """Move the cursor to the next sub-hand."""
        self.hand_idx += 1

    def end_turn(self) -> None:
        self.hand_idx = len(self.hands)

    def turn_is_over(self) -> bool:
        return self.hand_idx >= len(self.hands)

    # ─── Round bookkeeping ───────────────────────────────────────────────────

    def reset(self) -> None:
        """Clear hands and side bets between rounds; balance and count persist."""
        self.hands = []
        self.hand_idx = 0
        self.insurance_bet = 0.0
        self.insurance_net = 0.0

    def reset_balance(self) -> None:
        self.balance = self.config.player_starting_balance
