"""
Tests for src/engine/table.py and src/engine/player.py

Covers:
    - Betting: stake deduction, minimum / balance checks
    - Dealing: naturals, dealer blackjack, insurance
    - Options: hit, stand, double, split (up to four hands), surrender
    - finish_hand: dealer play-out and settlement of standing hands
    - Counting: every visible card reaches the strategy
"""

from __future__ import annotations

import pytest

from src.engine.config import SimulatorConfig
from src.engine.errors import BetBelowMinimum, InvalidBet, NoValidOption, OutOfFunds, ShoeExhausted
from src.engine.hand import HandPhase
from src.engine.player import Player
from src.engine.rules import Action, Outcome
from src.engine.shoe import Shoe
from src.engine.table import Table
from src.strategy.betting import FlatBettingStrategy
from src.strategy.catalog import build_strategy
from src.strategy.composite import InsurancePolicy, Strategy
from src.strategy.counting import HiLo
from src.strategy.decision import BasicStrategy


def always_insure_strategy() -> Strategy:
    return Strategy(HiLo(6), BasicStrategy(), FlatBettingStrategy(5), insurance=InsurancePolicy(threshold=-100))


# ─── Betting ──────────────────────────────────────────────────────────────────


class TestPlaceBet:
    def test_stake_leaves_balance(self, config, seat):
        player, _ = seat(config)
        player.place_bet(10)
        assert player.balance == 490
        assert player.current_hand.bet == 10

    def test_below_minimum_raises(self, config, seat):
        player, _ = seat(config)
        with pytest.raises(BetBelowMinimum):
            player.place_bet(3)

    def test_below_minimum_is_invalid_bet(self, config, seat):
        player, _ = seat(config)
        with pytest.raises(InvalidBet):
            player.place_bet(1)

    def test_negative_raises(self, config, seat):
        player, _ = seat(config)
        with pytest.raises(InvalidBet):
            player.place_bet(-5)

    def test_above_balance_raises(self, config, seat):
        player, _ = seat(config)
        with pytest.raises(InvalidBet):
            player.place_bet(501)

    def test_broke_player_is_out_of_funds(self, seat):
        cfg = SimulatorConfig(player_starting_balance=4.0)
        player, _ = seat(cfg)
        assert not player.can_continue()
        with pytest.raises(OutOfFunds):
            player.bet()


# ─── Dealing ──────────────────────────────────────────────────────────────────


class TestDeal:
    def test_deal_order(self, config, seat):
        player, table = seat(config, '9S', '10H', '8D', '7C')
        player.place_bet(10)
        table.deal_hand(player)
        assert [str(c) for c in player.current_hand.cards] == ['9S', '8D']
        assert str(table.dealer.up_card) == '10H'
        assert str(table.dealer.hole_card) == '7C'
        assert player.current_hand.phase is HandPhase.AWAITING_DECISION

    def test_blackjack_pays_three_to_two(self, config, seat):
        player, table = seat(config, 'AS', '9H', 'KD', '7C')
        player.place_bet(10)
        table.deal_hand(player)
        assert player.balance == 515
        assert player.turn_is_over()
        result = table.finish_hand(player)
        assert result.blackjack
        assert result.net == 15
        assert result.outcomes == (Outcome.BLACKJACK,)
        assert result.outcome is Outcome.WIN

    def test_both_blackjack_push(self, config, seat):
        player, table = seat(config, 'AS', 'AH', 'KD', 'KC')
        player.place_bet(10)
        table.deal_hand(player)
        result = table.finish_hand(player)
        assert player.balance == 500
        assert result.blackjack
        assert result.outcome is Outcome.PUSH

    def test_dealer_blackjack_beats_player(self, config, seat):
        player, table = seat(config, '9S', 'AH', '8D', 'KC')
        player.place_bet(10)
        table.deal_hand(player)
        assert player.turn_is_over()
        result = table.finish_hand(player)
        assert player.balance == 490
        assert result.net == -10
        assert not result.blackjack

    def test_table_balance_mirrors_player(self, config, seat):
        player, table = seat(config, '9S', 'AH', '8D', 'KC')
        player.place_bet(10)
        table.deal_hand(player)
        table.finish_hand(player)
        assert table.balance == 10_010


class TestInsurance:
    def test_insurance_pays_two_to_one(self, seat):
        cfg = SimulatorConfig(insurance=True)
        player, table = seat(cfg, '10S', 'AH', '9D', 'KC', strategy=always_insure_strategy())
        player.place_bet(10)
        table.deal_hand(player)
        result = table.finish_hand(player)
        assert player.balance == 500
        assert result.insurance_net == 10
        assert result.net == -10
        assert result.total_net == 0

    def test_insurance_lost_when_no_dealer_blackjack(self, seat):
        cfg = SimulatorConfig(insurance=True)
        player, table = seat(cfg, '10S', 'AH', '9D', '6C', strategy=always_insure_strategy())
        player.place_bet(10)
        table.deal_hand(player)
        assert player.balance == 485
        table.play_option(player, Action.STAND)
        result = table.finish_hand(player)
        assert result.outcome is Outcome.WIN
        assert result.insurance_net == -5
        assert player.balance == 505

    def test_not_offered_when_disabled(self, config, seat):
        player, table = seat(config, '10S', 'AH', '9D', '6C', strategy=always_insure_strategy())
        player.place_bet(10)
        table.deal_hand(player)
        assert player.insurance_bet == 0
        assert player.balance == 490


# ─── Player options ───────────────────────────────────────────────────────────


class TestOptions:
    def test_stand_then_win(self, config, seat):
        player, table = seat(config, 'KS', '10H', '9D', '7C')
        player.place_bet(10)
        table.deal_hand(player)
        table.play_option(player, Action.STAND)
        result = table.finish_hand(player)
        assert result.dealer_total == 17
        assert result.outcome is Outcome.WIN
        assert player.balance == 510

    def test_dealer_draws_and_busts(self, config, seat):
        player, table = seat(config, '10S', '6H', '8D', '10C', '9S')
        player.place_bet(10)
        table.deal_hand(player)
        table.play_option(player, Action.STAND)
        result = table.finish_hand(player)
        assert result.dealer_total == 25
        assert result.outcome is Outcome.WIN

    def test_push(self, config, seat):
        player, table = seat(config, '10S', '10H', '8D', '8C')
        player.place_bet(10)
        table.deal_hand(player)
        table.play_option(player, Action.STAND)
        result = table.finish_hand(player)
        assert result.outcome is Outcome.PUSH
        assert player.balance == 500

    def test_hit_bust_loses_without_dealer_play(self, config, seat):
        player, table = seat(config, '10S', '7H', '6D', '10C', '9S')
        player.place_bet(10)
        table.deal_hand(player)
        table.play_option(player, Action.HIT)
        assert player.turn_is_over()
        result = table.finish_hand(player)
        assert result.outcomes == (Outcome.LOSS,)
        assert len(table.dealer.cards) == 2
        assert player.balance == 490

    def test_double_down(self, config, seat):
        player, table = seat(config, '6S', '6H', '5D', '10C', '10S', '10D')
        player.place_bet(10)
        table.deal_hand(player)
        table.play_option(player, Action.DOUBLE_DOWN)
        hand = player.hands[0]
        assert hand.bet == 20
        assert len(hand.cards) == 3
        assert player.balance == 480
        result = table.finish_hand(player)
        assert result.net == 20
        assert player.balance == 520

    def test_split_eights(self, config, seat):
        player, table = seat(config, '8S', '10H', '8D', '7C', '3S', '2H')
        player.place_bet(10)
        table.deal_hand(player)
        table.play_option(player, Action.SPLIT)
        assert len(player.hands) == 2
        assert [str(c) for c in player.hands[0].cards] == ['8S', '3S']
        assert [str(c) for c in player.hands[1].cards] == ['8D', '2H']
        assert all(h.bet == 10 for h in player.hands)
        assert all(h.split_from for h in player.hands)
        assert player.balance == 480

    def test_split_capped_at_four_hands(self, config, seat):
        player, table = seat(
            config, '8S', '10H', '8D', '7C', '8C', '2S', '8H', '3S', '8S', '4S',
        )
        player.place_bet(10)
        table.deal_hand(player)
        for _ in range(3):
            table.play_option(player, Action.SPLIT)
        assert len(player.hands) == 4
        assert player.current_hand.is_pair
        assert Action.SPLIT not in player.legal_options(table.dealer.up_card)
        assert player.balance == 460

    def test_surrender(self, seat):
        cfg = SimulatorConfig(surrender=True)
        player, table = seat(cfg, '10S', '10H', '6D', '7C')
        player.place_bet(10)
        table.deal_hand(player)
        table.play_option(player, Action.SURRENDER)
        result = table.finish_hand(player)
        assert result.outcomes == (Outcome.SURRENDER,)
        assert result.net == -5
        assert player.balance == 495

    def test_surrender_needs_listed_upcard(self, seat):
        cfg = SimulatorConfig(surrender=True)
        player, table = seat(cfg, '10S', '5H', '6D', '7C')
        player.place_bet(10)
        table.deal_hand(player)
        assert Action.SURRENDER not in player.legal_options(table.dealer.up_card)

    def test_illegal_option_raises(self, config, seat):
        player, table = seat(config, '10S', '5H', '6D', '7C')
        player.place_bet(10)
        table.deal_hand(player)
        with pytest.raises(NoValidOption):
            table.play_option(player, Action.SPLIT)

    def test_no_double_after_three_cards(self, config, seat):
        player, table = seat(config, '2S', '5H', '3D', '7C', '4S')
        player.place_bet(10)
        table.deal_hand(player)
        table.play_option(player, Action.HIT)
        assert Action.DOUBLE_DOWN not in player.legal_options(table.dealer.up_card)


# ─── Dealer rules ─────────────────────────────────────────────────────────────


class TestDealerRules:
    def test_s17_stands_soft_seventeen(self, config, seat):
        player, table = seat(config, '10S', 'AH', '8D', '6C')
        player.place_bet(10)
        table.deal_hand(player)
        table.play_option(player, Action.STAND)
        assert table.finish_hand(player).dealer_total == 17

    def test_h17_hits_soft_seventeen(self, seat):
        cfg = SimulatorConfig(dealer_hits_soft_17=True)
        player, table = seat(cfg, '10S', 'AH', '8D', '6C', '2S')
        player.place_bet(10)
        table.deal_hand(player)
        table.play_option(player, Action.STAND)
        result = table.finish_hand(player)
        assert result.dealer_total == 19
        assert result.outcome is Outcome.LOSS


# ─── Counting hooks ───────────────────────────────────────────────────────────


class TestCounting:
    def test_every_visible_card_is_counted(self, config, seat):
        player, table = seat(config, 'AS', '9H', 'KD', '7C')
        player.place_bet(10)
        table.deal_hand(player)
        # hole card still face down
        assert player.strategy.counting.cards_seen == 3
        table.finish_hand(player)
        assert player.strategy.counting.cards_seen == 4
        assert player.strategy.running_count == -2

    def test_dealer_draws_are_counted(self, config, seat):
        strategy = build_strategy("Hi-Lo", "Basic Strategy", "Flat Betting")
        player, table = seat(config, '10S', '6H', '8D', '10C', '2S', strategy=strategy)
        player.place_bet(10)
        table.deal_hand(player)
        table.play_option(player, Action.STAND)
        table.finish_hand(player)
        # 10 -1, 6 +1, 8 0, 10 -1, 2 +1
        assert strategy.running_count == 0
        assert strategy.counting.cards_seen == 5

    def test_reshuffle_resets_count(self, config):
        strategy = build_strategy("Hi-Lo", "Basic Strategy", "Flat Betting")
        strategy.counting.running_count = 7.0
        strategy.counting.cards_seen = 99
        player = Player(strategy, config)
        table = Table(config, rng=0)
        player.place_bet(5)
        table.deal_hand(player)
        assert strategy.counting.cards_seen == 3


# ─── Running out of cards mid-round ───────────────────────────────────────────


class TestMidRoundReshuffle:
    @pytest.fixture
    def dry_round(self, config, c):
        # 4C is a discard; the round's four cards leave the shoe empty
        strategy = build_strategy("Hi-Lo", "Basic Strategy", "Flat Betting")
        player = Player(strategy, config)
        shoe = Shoe.stacked(c('4C', '10S', '10H', '6D', '7C'))
        shoe.cursor = 1
        table = Table(config, shoe=shoe)
        player.place_bet(10)
        table.deal_hand(player)
        return player, table

    def test_hit_reshuffles_discards(self, dry_round):
        player, table = dry_round
        assert table.shoe.cards_remaining == 0
        # 16 vs 10 hits
        table.play_option(player, player.decide_option(table.dealer.up_card))
        assert str(player.hands[0].cards[-1]) == '4C'
        assert player.hands[0].value.best == 20

    def test_cards_on_table_stay_out_of_the_shoe(self, dry_round):
        player, table = dry_round
        table.hit(player)
        assert sorted(map(str, table.shoe.cards[:4])) == ['10H', '10S', '6D', '7C']
        assert table.shoe.cursor == 5

    def test_count_restarts_after_reshuffle(self, dry_round):
        player, table = dry_round
        table.hit(player)
        assert player.strategy.counting.cards_seen == 1
        assert player.strategy.running_count == 1

    def test_round_settles(self, dry_round):
        player, table = dry_round
        table.hit(player)
        table.play_option(player, Action.STAND)
        result = table.finish_hand(player)
        assert result.outcome is Outcome.WIN
        assert player.balance == 510

    def test_every_card_on_table_raises(self, config, seat):
        player, table = seat(config, '10S', '10H', '6D', '7C')
        player.place_bet(10)
        table.deal_hand(player)
        with pytest.raises(ShoeExhausted):
            table.hit(player)
