"""
Card counting systems.

Every system is a point table keyed by card value (Ace = 1, all ten-valued
cards = 10) behind one interface: ``update(card)``, ``reset()``,
``running_count`` and ``true_count``. The engine never special-cases a
system; suit-dependent counts (Red Seven, the KISS family) override
``card_points``.

Balanced systems sum to zero over a full deck, start at 0 and normalise the
running count by the estimated decks remaining:

    true_count = running_count / (num_decks - cards_seen / 52)

Unbalanced systems start from an initial running count (IRC) chosen so the
pivot lands near zero, and are bet off the running count directly, so their
``true_count`` is the running count.

    >>> hilo = HiLo(num_decks=1)
    >>> for c in ('2S', '5H', 'KD'):
    ...     hilo.update(str_to_card(c))
    >>> hilo.running_count
    1.0
"""

from __future__ import annotations

from src.engine.cards import Card


class CountingSystem:
    """Base point-count system.

    Subclasses set ``name``, ``points`` (value 1-10 → tag) and, for
    unbalanced systems, ``balanced = False`` plus ``initial_running_count``.
    """
    name: str = ""
    points: dict[int, float] = {}
    balanced: bool = True

    def __init__(self, num_decks: int) -> None:
        if num_decks < 1:
            raise ValueError(f"num_decks must be >= 1, got {num_decks}")
        self.num_decks = num_decks
        self.running_count: float = 0.0
        self.cards_seen = 0
        self.reset()

    def initial_running_count(self) -> float:
        return 0.0

    def card_points(self, card: Card) -> float:
        return self.points[card.value]

    def update(self, card: Card) -> None:
        """Absorb one seen card."""
        self.running_count += self.card_points(card)
        self.cards_seen += 1

    def reset(self) -> None:
        """Start a fresh shoe."""
        self.running_count = float(self.initial_running_count())
        self.cards_seen = 0

    @property
    def decks_remaining(self) -> float:
        return self.num_decks - self.cards_seen / 52

    @property
    def true_count(self) -> float:
        if not self.balanced:
            return self.running_count
        remaining = self.decks_remaining
        if remaining <= 0:
            return self.running_count
        return self.running_count / remaining

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}(num_decks={self.num_decks}, running_count={self.running_count})"


def _tags(two, three, four, five, six, seven, eight, nine, ten, ace) -> dict[int, float]:
    return {
        1: ace, 2: two, 3: three, 4: four, 5: five,
        6: six, 7: seven, 8: eight, 9: nine, 10: ten,
    }


# ─── Balanced systems ─────────────────────────────────────────────────────────

class HiLo(CountingSystem):
    name = "Hi-Lo"
    points = _tags(1, 1, 1, 1, 1, 0, 0, 0, -1, -1)


class WongHalves(CountingSystem):
    name = "Wong Halves"
    points = _tags(0.5, 1, 1, 1.5, 1, 0.5, 0, -0.5, -1, -1)


class Halves(CountingSystem):
    """Wong Halves doubled to integer tags."""
    name = "Halves"
    points = _tags(1, 2, 2, 3, 2, 1, 0, -1, -2, -2)


class HiOptI(CountingSystem):
    name = "Hi-Opt I"
    points = _tags(0, 1, 1, 1, 1, 0, 0, 0, -1, 0)


class HiOptII(CountingSystem):
    name = "Hi-Opt II"
    points = _tags(1, 1, 2, 2, 1, 1, 0, 0, -2, 0)


class AceFive(CountingSystem):
    name = "Ace-Five"
    points = _tags(0, 0, 0, 1, 0, 0, 0, 0, 0, -1)


class OmegaII(CountingSystem):
    name = "Omega II"
    points = _tags(1, 1, 2, 2, 2, 1, 0, -1, -2, 0)


class ZenCount(CountingSystem):
    name = "Zen Count"
    points = _tags(1, 1, 2, 2, 2, 1, 0, 0, -2, -1)


class SilverFox(CountingSystem):
    name = "Silver Fox"
    points = _tags(1, 1, 1, 1, 1, 1, 0, -1, -1, -1)


class JNoir(CountingSystem):
    name = "J Noir"
    points = _tags(1, 1, 1, 1, 1, 1, 1, 1, -2, 0)


# ─── Unbalanced systems ───────────────────────────────────────────────────────

class KO(CountingSystem):
    """Knock-Out: Hi-Lo with the seven counted, IRC 4 - 4 × decks."""
    name = "KO"
    points = _tags(1, 1, 1, 1, 1, 1, 0, 0, -1, -1)
    balanced = False

    def initial_running_count(self) -> float:
        return 4 - 4 * self.num_decks


class RedSeven(CountingSystem):
    """Hi-Lo plus red sevens, IRC -2 × decks."""
    name = "Red Seven"
    points = _tags(1, 1, 1, 1, 1, 0, 0, 0, -1, -1)
    balanced = False

    def initial_running_count(self) -> float:
        return -2 * self.num_decks

    def card_points(self, card: Card) -> float:
        if card.value == 7:
            return 1 if card.is_red else 0
        return self.points[card.value]


class KISS(CountingSystem):
    """Keep It Simple Stupid: only black deuces count among the twos."""
    name = "KISS"
    points = _tags(1, 1, 1, 1, 1, 0, 0, 0, -1, 0)
    balanced = False

    def card_points(self, card: Card) -> float:
        if card.value == 2:
            return 0 if card.is_red else 1
        return self.points[card.value]


class KISSII(KISS):
    name = "KISS II"
    points = _tags(1, 1, 1, 1, 1, 0, 0, 0, -1, -1)


class KISSIII(KISS):
    name = "KISS III"
    points = _tags(1, 1, 1, 1, 1, 1, 0, 0, -1, -1)


class UnbalancedZen2(CountingSystem):
    name = "Unbalanced Zen 2"
    points = _tags(1, 2, 2, 2, 2, 1, 0, 0, -2, -1)
    balanced = False

    def initial_running_count(self) -> float:
        return -4 * self.num_decks


COUNTING_SYSTEMS: tuple[type[CountingSystem], ...] = (
    HiLo, WongHalves, KO, RedSeven, HiOptI, HiOptII, AceFive, OmegaII,
    ZenCount, Halves, KISS, KISSII, KISSIII, SilverFox, JNoir, UnbalancedZen2,
)
