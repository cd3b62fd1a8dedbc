"""Tests for src/strategy/counting.py — point tables, IRCs and true count."""

from __future__ import annotations

import pytest

from src.engine.cards import Card, standard_deck, str_to_card
from src.engine.shoe import Shoe
from src.strategy.counting import (
    COUNTING_SYSTEMS,
    KISS,
    KO,
    HiLo,
    KISSII,
    RedSeven,
    UnbalancedZen2,
    WongHalves,
)

BALANCED = [cls for cls in COUNTING_SYSTEMS if cls.balanced]
UNBALANCED = [cls for cls in COUNTING_SYSTEMS if not cls.balanced]


def count_all(system, cards: list[Card]) -> float:
    for card in cards:
        system.update(card)
    return system.running_count


class TestCatalogue:
    def test_sixteen_systems(self):
        assert len(COUNTING_SYSTEMS) == 16

    def test_unique_names(self):
        assert len({cls.name for cls in COUNTING_SYSTEMS}) == 16

    @pytest.mark.parametrize("cls", COUNTING_SYSTEMS, ids=lambda cls: cls.name)
    def test_points_cover_every_value(self, cls):
        assert set(cls.points) == set(range(1, 11))


class TestBalanced:
    @pytest.mark.parametrize("cls", BALANCED, ids=lambda cls: cls.name)
    def test_full_deck_sums_to_zero(self, cls):
        system = cls(num_decks=1)
        assert count_all(system, standard_deck()) == pytest.approx(0.0)

    @pytest.mark.parametrize("cls", BALANCED, ids=lambda cls: cls.name)
    def test_six_deck_shoe_dealt_out_returns_to_zero(self, cls):
        system = cls(num_decks=6)
        shoe = Shoe(6, rng=11)
        shoe.shuffle(7)
        while shoe.cards_remaining:
            system.update(shoe.draw())
        assert system.cards_seen == 312
        assert system.running_count == pytest.approx(0.0)

    @pytest.mark.parametrize("cls", BALANCED, ids=lambda cls: cls.name)
    def test_starts_at_zero(self, cls):
        assert cls(num_decks=6).running_count == 0.0

    def test_true_count_divides_by_decks_remaining(self):
        hilo = HiLo(num_decks=6)
        count_all(hilo, [str_to_card('5H')] * 26)
        assert hilo.running_count == 26
        assert hilo.true_count == pytest.approx(26 / 5.5)

    def test_wong_halves_fractions(self):
        halves = WongHalves(num_decks=1)
        assert count_all(halves, [Card('2', 'S'), Card('5', 'S'), Card('9', 'S')]) == pytest.approx(1.5)


class TestUnbalanced:
    @pytest.mark.parametrize(
        "cls,decks,irc",
        [(KO, 1, 0), (KO, 6, -20), (RedSeven, 6, -12), (KISS, 6, 0), (UnbalancedZen2, 2, -8)],
    )
    def test_initial_running_count(self, cls, decks, irc):
        assert cls(num_decks=decks).running_count == irc

    def test_ko_full_deck_ends_at_four(self):
        assert count_all(KO(num_decks=1), standard_deck()) == 4

    def test_red_seven_full_deck_returns_to_zero(self):
        assert count_all(RedSeven(num_decks=1), standard_deck()) == 0

    def test_red_seven_counts_only_red_sevens(self):
        red_seven = RedSeven(num_decks=1)
        assert red_seven.card_points(Card('7', 'H')) == 1
        assert red_seven.card_points(Card('7', 'S')) == 0

    def test_kiss_counts_only_black_deuces(self):
        kiss = KISS(num_decks=1)
        assert kiss.card_points(Card('2', 'C')) == 1
        assert kiss.card_points(Card('2', 'D')) == 0

    def test_kiss_ii_counts_aces(self):
        assert KISS(1).card_points(Card('A', 'S')) == 0
        assert KISSII(1).card_points(Card('A', 'S')) == -1

    @pytest.mark.parametrize("cls", UNBALANCED, ids=lambda cls: cls.name)
    def test_true_count_is_running_count(self, cls):
        system = cls(num_decks=6)
        count_all(system, [str_to_card('5H')] * 10)
        assert system.true_count == system.running_count


class TestReset:
    def test_reset_restores_irc(self):
        ko = KO(num_decks=6)
        count_all(ko, [str_to_card('5H')] * 10)
        ko.reset()
        assert ko.running_count == -20
        assert ko.cards_seen == 0

    def test_zero_decks_raises(self):
        with pytest.raises(ValueError):
            HiLo(num_decks=0)
