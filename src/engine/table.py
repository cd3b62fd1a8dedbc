"""
The table: dealer, shoe and the hand-play state machine.

Round flow for one seated player:

    deal_hand    → shuffle if due, P / D-up / P / D-hole, insurance,
                   immediate blackjack settlement
    play_option  → HIT / STAND / DOUBLE_DOWN / SPLIT / SURRENDER on the
                   current sub-hand until every sub-hand is done
    finish_hand  → dealer plays out if any sub-hand is still standing,
                   standing hands are settled, a RoundResult is returned

Sub-hand phases: DEALING → AWAITING_DECISION → (STANDING) → RESOLVED.

Every card the player can see is passed to the strategy's counting system:
all player cards, the dealer's up-card, the hole card once it is revealed
and every dealer hit. The hole card is always revealed by the end of the
round so the count never misses it.

Money moves at the moment it is committed or settled:
    stake / double / split / insurance   balance -= amount
    win                                  balance += 2 × bet
    push                                 balance += bet
    blackjack                            balance += bet + 1.5 × bet
    surrender                            balance += bet / 2
    insurance win (2:1)                  balance += 3 × stake
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from .cards import Card
from .config import SimulatorConfig
from .errors import NoValidOption
from .hand import DealerHand, HandPhase, HandValue, PlayerHand
from .player import Player
from .rules import (
    INSURANCE_PAYOUT,
    Action,
    Outcome,
    compare_totals,
    dealer_should_hit,
    payout_multiplier,
)
from .shoe import Shoe

logger = logging.getLogger(__name__)


# ─── Round result ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RoundResult:
    """Per-round log entry, from the player's perspective.

    Attributes:
        net:           Sum of the sub-hands' nets (insurance excluded).
        insurance_net: Net of the insurance side bet (0 when not taken).
        blackjack:     True if the player was dealt a natural, whether it
                       paid 3:2 or pushed against a dealer natural.
        outcomes:      Outcome of each sub-hand in table order.
        dealer_total:  Dealer's final best total.
    """
    net: float
    insurance_net: float
    blackjack: bool
    outcomes: tuple[Outcome, ...]
    dealer_total: int

    @property
    def outcome(self) -> Outcome:
        """Round classified by the main-bet net."""
        if self.net > 0:
            return Outcome.WIN
        if self.net < 0:
            return Outcome.LOSS
        return Outcome.PUSH

    @property
    def total_net(self) -> float:
        return self.net + self.insurance_net


# ─── Table ────────────────────────────────────────────────────────────────────

class Table:
    """One dealer, one shoe, one seat.

    Args:
        config: Table rules.
        rng:    numpy Generator or seed for the shoe.
        shoe:   Pre-built shoe (e.g. Shoe.stacked for deterministic rounds);
                overrides *rng*.
    """

    def __init__(
        self,
        config: SimulatorConfig,
        rng: np.random.Generator | int | None = None,
        shoe: Shoe | None = None,
    ) -> None:
        self.config = config
        self.shoe = shoe if shoe is not None else Shoe(config.num_decks, config.penetration, rng)
        self.dealer = DealerHand()
        self.balance: float = config.table_starting_balance
        self._blackjack = False

    # ─── Dealing ─────────────────────────────────────────────────────────────

    def deal_hand(self, player: Player) -> None:
        """Deal a new round to *player*, whose stake has already been placed."""
        if self.shoe.shuffle_due:
            self.shoe.shuffle(self.config.num_shuffles)
            player.reset_count()
            logger.debug("reshuffled %d-deck shoe", self.config.num_decks)

        self.dealer = DealerHand()
        self._blackjack = False
        hand = player.current_hand

        player.receive_card(self._draw(player))
        up_card = self._draw(player)
        self.dealer.receive(up_card)
        player.observe(up_card)
        player.receive_card(self._draw(player))
        self.dealer.receive(self._draw(player))
        hand.phase = HandPhase.AWAITING_DECISION

        if self.config.insurance and up_card.is_ace and player.strategy.take_insurance():
            stake = hand.bet / 2
            if stake > 0 and player.balance >= stake:
                player.balance -= stake
                player.insurance_bet = stake

        if self.dealer.has_blackjack:
            self._reveal_hole(player)
            if player.insurance_bet:
                player.balance += player.insurance_bet * (1 + INSURANCE_PAYOUT)
                player.insurance_net = player.insurance_bet * INSURANCE_PAYOUT
            if hand.is_blackjack:
                self._blackjack = True
                self._settle(player, hand, Outcome.PUSH)
            else:
                self._settle(player, hand, Outcome.LOSS)
            player.end_turn()
            return

        if player.insurance_bet:
            player.insurance_net = -player.insurance_bet

        if hand.is_blackjack:
            self._blackjack = True
            self._settle(player, hand, Outcome.BLACKJACK)
            player.advance()

    def _draw(self, player: Player) -> Card:
        """Draw one card, reshuffling the discards if the shoe runs dry mid-round."""
        if self.shoe.cards_remaining == 0:
            in_play = [c for h in player.hands for c in h.cards] + self.dealer.cards
            self.shoe.reshuffle_in_play(in_play, self.config.num_shuffles)
            player.reset_count()
            logger.debug("shoe ran out mid-round, reshuffled %d discards", self.shoe.cards_remaining)
        return self.shoe.draw()

    def _reveal_hole(self, player: Player) -> None:
        if not self.dealer.hole_revealed:
            self.dealer.hole_revealed = True
            player.observe(self.dealer.hole_card)

    def _settle(self, player: Player, hand: PlayerHand, outcome: Outcome) -> None:
        """Resolve *hand*, crediting the balance with stake plus profit."""
        profit = payout_multiplier(outcome, self.config.blackjack_payout) * hand.bet
        player.balance += hand.bet + profit
        hand.outcome = outcome
        hand.net = profit
        hand.phase = HandPhase.RESOLVED

    # ─── Player options ──────────────────────────────────────────────────────

    def play_option(self, player: Player, action: Action) -> None:
        """Apply *action* to the current sub-hand.

        Raises:
            NoValidOption: If *action* is not legal for that sub-hand now.
        """
        if action not in player.legal_options(self.dealer.up_card):
            raise NoValidOption(f"{action.name} is not legal for the current hand")
        handlers = {
            Action.HIT: self.hit,
            Action.STAND: self.stand,
            Action.DOUBLE_DOWN: self.double_down,
            Action.SPLIT: self.split,
            Action.SURRENDER: self.surrender,
        }
        handlers[action](player)

    def hit(self, player: Player) -> None:
        hand = player.current_hand
        player.receive_card(self._draw(player))
        if hand.value.is_bust:
            self._settle(player, hand, Outcome.LOSS)
            player.advance()

    def stand(self, player: Player) -> None:
        player.current_hand.phase = HandPhase.STANDING
        player.advance()

    def double_down(self, player: Player) -> None:
        hand = player.current_hand
        player.balance -= hand.bet
        hand.bet *= 2
        player.receive_card(self._draw(player))
        if hand.value.is_bust:
            self._settle(player, hand, Outcome.LOSS)
        else:
            hand.phase = HandPhase.STANDING
        player.advance()

    def split(self, player: Player) -> None:
        hand = player.current_hand
        player.balance -= hand.bet
        second = PlayerHand(bet=hand.bet, split_from=True, phase=HandPhase.AWAITING_DECISION)
        second.receive(hand.cards.pop())
        hand.value = HandValue.from_cards(hand.cards)
        hand.split_from = True
        player.hands.insert(player.hand_idx + 1, second)

        for sub in (hand, second):
            card = self._draw(player)
            sub.receive(card)
            player.observe(card)

    def surrender(self, player: Player) -> None:
        self._settle(player, player.current_hand, Outcome.SURRENDER)
        player.advance()

    # ─── Dealer play and settlement ──────────────────────────────────────────

    def dealer_final_total(self, player: Player) -> int:
        """Reveal the hole card and draw to the house rule."""
        self._reveal_hole(player)
        while dealer_should_hit(self.dealer.value, self.config.dealer_hits_soft_17):
            card = self._draw(player)
            self.dealer.receive(card)
            player.observe(card)
        return self.dealer.value.best

    def finish_hand(self, player: Player) -> RoundResult:
        """Settle every standing sub-hand against the dealer and log the round."""
        standing = [h for h in player.hands if h.phase is HandPhase.STANDING and h.bet > 0]
        if standing:
            dealer_total = self.dealer_final_total(player)
        else:
            self._reveal_hole(player)
            dealer_total = self.dealer.value.best

        for hand in standing:
            self._settle(player, hand, compare_totals(hand.value.best, dealer_total))

        result = RoundResult(
            net=sum(h.net for h in player.hands),
            insurance_net=player.insurance_net,
            blackjack=self._blackjack,
            outcomes=tuple(h.outcome for h in player.hands),
            dealer_total=dealer_total,
        )
        self.balance -= result.total_net
        return result

    def reset(self) -> None:
        """Clear the dealer's hand between rounds; the shoe carries on."""
        self.dealer = DealerHand()
        self._blackjack = False

    def reset_balance(self) -> None:
        self.balance = self.config.table_starting_balance
