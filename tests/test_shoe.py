"""Tests for src/engine/shoe.py — multi-deck shoe, shuffling and penetration."""

from __future__ import annotations

import numpy as np
import pytest

from src.engine.cards import Card, str_to_card
from src.engine.errors import ShoeExhausted
from src.engine.shoe import Shoe


def cards(*card_strs: str) -> list[Card]:
    return [str_to_card(s) for s in card_strs]


class TestConstruction:
    def test_six_deck_size(self):
        assert len(Shoe(6, rng=0)) == 312

    def test_fresh_shoe_is_due_for_shuffle(self):
        assert Shoe(1, rng=0).shuffle_due

    def test_zero_decks_raises(self):
        with pytest.raises(ValueError):
            Shoe(0)

    @pytest.mark.parametrize("penetration", [0.0, -0.1, 1.5])
    def test_bad_penetration_raises(self, penetration):
        with pytest.raises(ValueError):
            Shoe(1, penetration=penetration)

    def test_cut_index(self):
        assert Shoe(1, penetration=0.8, rng=0).cut_index == 40  # floor(51 * 0.8)


class TestShuffle:
    def test_same_seed_same_order(self):
        a, b = Shoe(2, rng=7), Shoe(2, rng=7)
        a.shuffle(3)
        b.shuffle(3)
        assert a.cards == b.cards

    def test_shuffle_keeps_composition(self):
        shoe = Shoe(2, rng=np.random.default_rng(1))
        before = sorted(map(str, shoe.cards))
        shoe.shuffle(7)
        assert sorted(map(str, shoe.cards)) == before

    def test_shuffle_resets_cursor(self):
        shoe = Shoe(1, rng=0)
        shoe.shuffle()
        shoe.draw()
        shoe.shuffle()
        assert shoe.cursor == 0
        assert not shoe.shuffle_due

    def test_zero_passes_raises(self):
        with pytest.raises(ValueError):
            Shoe(1, rng=0).shuffle(0)


class TestDraw:
    def test_stacked_order(self):
        shoe = Shoe.stacked(cards('AS', 'KD', '5H'))
        assert [str(shoe.draw()) for _ in range(3)] == ['AS', 'KD', '5H']

    def test_exhausted_raises(self):
        shoe = Shoe.stacked(cards('AS'))
        shoe.draw()
        with pytest.raises(ShoeExhausted):
            shoe.draw()

    def test_shuffle_due_at_cut(self):
        shoe = Shoe(1, penetration=0.5, rng=0)
        shoe.shuffle()
        for _ in range(shoe.cut_index - 1):
            shoe.draw()
        assert not shoe.shuffle_due
        assert not shoe.penetration_reached
        shoe.draw()
        assert shoe.shuffle_due
        assert shoe.penetration_reached

    def test_counters(self):
        shoe = Shoe(1, rng=0)
        shoe.shuffle()
        for _ in range(13):
            shoe.draw()
        assert shoe.cards_dealt == 13
        assert shoe.cards_remaining == 39
        assert shoe.decks_remaining == pytest.approx(0.75)


class TestReshuffleInPlay:
    def test_in_play_cards_lead_the_shoe(self):
        shoe = Shoe(1, rng=0)
        shoe.shuffle()
        for _ in range(52):
            shoe.draw()
        in_play = cards('AS', 'KD', '5H')
        shoe.reshuffle_in_play(in_play)
        assert shoe.cards[:3] == in_play
        assert shoe.cursor == 3
        assert shoe.cards_remaining == 49
        assert not shoe.shuffle_due

    def test_composition_kept(self):
        shoe = Shoe(2, rng=3)
        before = sorted(map(str, shoe.cards))
        shoe.reshuffle_in_play(cards('2C', '2C', 'QH'), n_passes=2)
        assert sorted(map(str, shoe.cards)) == before
        assert str_to_card('2C') not in shoe.cards[3:]

    def test_drawn_cards_exclude_in_play(self):
        shoe = Shoe(1, rng=5)
        shoe.reshuffle_in_play(cards('AS', 'KD'))
        drawn = [str(shoe.draw()) for _ in range(shoe.cards_remaining)]
        assert len(drawn) == 50
        assert 'AS' not in drawn and 'KD' not in drawn

    def test_nothing_left_raises(self):
        shoe = Shoe.stacked(cards('AS', 'KD'))
        with pytest.raises(ShoeExhausted):
            shoe.reshuffle_in_play(cards('AS', 'KD'))
