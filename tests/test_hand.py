"""Tests for src/engine/hand.py — hard/soft totals and hand state."""

from __future__ import annotations

import pytest

from src.engine.cards import Card, str_to_card
from src.engine.hand import DealerHand, HandPhase, HandValue, PlayerHand


def cards(*card_strs: str) -> list[Card]:
    return [str_to_card(s) for s in card_strs]


def value(*card_strs: str) -> HandValue:
    return HandValue.from_cards(cards(*card_strs))


class TestHandValue:
    def test_empty(self):
        assert HandValue().values == (0,)

    def test_soft_seventeen(self):
        v = value('AS', '6H')
        assert v.values == (7, 17)
        assert v.is_soft
        assert v.best == 17

    def test_soft_drops_when_it_would_bust(self):
        v = value('AS', '6H', '9D')
        assert v.values == (16,)
        assert not v.is_soft

    def test_two_aces(self):
        assert value('AS', 'AH').values == (2, 12)

    def test_soft_twenty_one(self):
        assert value('AS', 'KH').best == 21

    def test_late_ace_becomes_soft(self):
        assert value('5S', '4H', 'AD').values == (10, 20)

    def test_late_ace_stays_hard(self):
        assert value('9S', '4H', 'AD').values == (14,)

    def test_bust(self):
        v = value('KS', 'QH', '5D')
        assert v.is_bust
        assert v.best == 25

    def test_incremental_matches_from_cards(self):
        v = HandValue()
        for card in cards('AS', '2H', 'AD', '7C'):
            v.add(card)
        assert v == value('AS', '2H', 'AD', '7C')


class TestPlayerHand:
    def test_blackjack(self):
        hand = PlayerHand(bet=10)
        for card in cards('AS', 'KD'):
            hand.receive(card)
        assert hand.is_blackjack

    def test_split_twenty_one_is_not_blackjack(self):
        hand = PlayerHand(bet=10, split_from=True)
        for card in cards('AS', 'KD'):
            hand.receive(card)
        assert not hand.is_blackjack

    def test_three_card_twenty_one_is_not_blackjack(self):
        hand = PlayerHand()
        for card in cards('7S', '7D', '7H'):
            hand.receive(card)
        assert not hand.is_blackjack

    @pytest.mark.parametrize("pair,expected", [(('8S', '8D'), True), (('KS', 'QD'), False)])
    def test_pair_is_equal_rank(self, pair, expected):
        hand = PlayerHand()
        for card in cards(*pair):
            hand.receive(card)
        assert hand.is_pair is expected

    def test_phase_default(self):
        hand = PlayerHand()
        assert hand.phase is HandPhase.DEALING
        assert not hand.is_done


class TestDealerHand:
    def test_up_and_hole(self):
        dealer = DealerHand()
        for card in cards('9H', '7C'):
            dealer.receive(card)
        assert str(dealer.up_card) == '9H'
        assert str(dealer.hole_card) == '7C'
        assert not dealer.has_blackjack

    def test_blackjack(self):
        dealer = DealerHand()
        for card in cards('AH', 'QC'):
            dealer.receive(card)
        assert dealer.has_blackjack
