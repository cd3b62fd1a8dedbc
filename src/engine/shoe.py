"""
Multi-deck shoe with penetration-triggered reshuffles.

The shoe holds num_decks × 52 Card objects and a cursor. Drawing returns the
card under the cursor and advances it; once the cursor reaches the
penetration point floor((len - 1) * penetration) the shoe reports
``shuffle_due`` and the table reshuffles before the next round.

Randomness comes from an injected numpy Generator so runs are reproducible
from a seed.
"""

from __future__ import annotations

import math

import numpy as np

from .cards import Card, standard_deck
from .errors import ShoeExhausted

DEFAULT_PENETRATION: float = 0.8


class Shoe:
    """A shoe of one or more standard decks.

    Args:
        num_decks:   Number of 52-card decks, >= 1.
        penetration: Fraction of the shoe dealt before a reshuffle is due,
                     in (0, 1].
        rng:         numpy Generator or integer seed. None draws fresh
                     entropy from the OS.

    A freshly built shoe is unshuffled and already ``shuffle_due``, so the
    first round always begins with a shuffle.
    """

    def __init__(
        self,
        num_decks: int,
        penetration: float = DEFAULT_PENETRATION,
        rng: np.random.Generator | int | None = None,
    ) -> None:
        if num_decks < 1:
            raise ValueError(f"num_decks must be >= 1, got {num_decks}")
        if not 0.0 < penetration <= 1.0:
            raise ValueError(f"penetration must be in (0, 1], got {penetration}")
        self.num_decks = num_decks
        self.penetration = penetration
        self.rng = rng if isinstance(rng, np.random.Generator) else np.random.default_rng(rng)
        self.cards: list[Card] = standard_deck() * num_decks
        self.cursor = 0
        self.shuffle_due = True

    @classmethod
    def stacked(cls, cards: list[Card], num_decks: int = 1) -> Shoe:
        """Build a shoe that deals exactly *cards* in order.

        Used to set up deterministic rounds. The stacked shoe is not
        ``shuffle_due`` so the table deals from it as-is.
        """
        shoe = cls(num_decks, penetration=1.0, rng=0)
        shoe.cards = list(cards)
        shoe.shuffle_due = False
        return shoe

    # ─── Properties ──────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self.cards)

    @property
    def cut_index(self) -> int:
        return math.floor((len(self.cards) - 1) * self.penetration)

    @property
    def cards_dealt(self) -> int:
        return self.cursor

    @property
    def cards_remaining(self) -> int:
        return len(self.cards) - self.cursor

    @property
    def decks_remaining(self) -> float:
        return self.cards_remaining / 52

    @property
    def penetration_reached(self) -> bool:
        return self.cursor >= self.cut_index

    # ─── Operations ──────────────────────────────────────────────────────────

    def shuffle(self, n_passes: int = 1) -> None:
        """Apply *n_passes* independent random permutations and reset the cursor."""
        self.cards = self._permuted(self.cards, n_passes)
        self.cursor = 0
        self.shuffle_due = False

    def reshuffle_in_play(self, in_play: list[Card], n_passes: int = 1) -> None:
        """Shuffle every card except *in_play* back into the shoe mid-round.

        The cards still on the table are placed ahead of the cursor, so they
        count as dealt and the shoe keeps its full composition for the next
        regular shuffle.

        Raises:
            ShoeExhausted: If no card is left outside *in_play*.
        """
        rest = list(self.cards)
        for card in in_play:
            rest.remove(card)
        if not rest:
            raise ShoeExhausted(f"all {len(self.cards)} cards are on the table")
        self.cards = list(in_play) + self._permuted(rest, n_passes)
        self.cursor = len(in_play)
        self.shuffle_due = self.penetration_reached

    def _permuted(self, cards: list[Card], n_passes: int) -> list[Card]:
        if n_passes < 1:
            raise ValueError(f"n_passes must be >= 1, got {n_passes}")
        for _ in range(n_passes):
            order = self.rng.permutation(len(cards))
            cards = [cards[i] for i in order]
        return cards

    def draw(self) -> Card:
        """Deal the next card.

        Raises:
            ShoeExhausted: If every card has already been dealt.
        """
        if self.cursor >= len(self.cards):
            raise ShoeExhausted(f"shoe of {len(self.cards)} cards is exhausted")
        card = self.cards[self.cursor]
        self.cursor += 1
        if self.penetration_reached:
            self.shuffle_due = True
        return card
