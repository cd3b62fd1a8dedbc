"""
Card type, rank/suit constants, and human-readable I/O helpers.

A Card is an immutable (rank, suit) pair. Point values follow standard
blackjack: 2-9 face value, 10/J/Q/K = 10, Ace = 1 (the soft 11 is resolved
by HandValue, never by the card itself).

    >>> str_to_card('AS')
    Card(rank='A', suit='S')
    >>> str_to_card('10H').value
    10

Cards are shared by reference between the shoe and the hands dealt from it,
so they are frozen and hashable.
"""

from __future__ import annotations

from dataclasses import dataclass

RANK_NAMES: tuple[str, ...] = ('2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K', 'A')
SUIT_NAMES: tuple[str, ...] = ('C', 'D', 'H', 'S')

RED_SUITS: frozenset[str] = frozenset({'D', 'H'})
TEN_VALUE_RANKS: frozenset[str] = frozenset({'10', 'J', 'Q', 'K'})

_RANK_VALUES: dict[str, int] = {
    '2': 2, '3': 3, '4': 4, '5': 5, '6': 6, '7': 7, '8': 8, '9': 9,
    '10': 10, 'J': 10, 'Q': 10, 'K': 10, 'A': 1,
}


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in _RANK_VALUES:
            raise ValueError(f"Unknown rank {self.rank!r}")
        if self.suit not in SUIT_NAMES:
            raise ValueError(f"Unknown suit {self.suit!r}")

    @property
    def value(self) -> int:
        """Blackjack point value, 1-10 (Ace = 1)."""
        return _RANK_VALUES[self.rank]

    @property
    def is_ace(self) -> bool:
        return self.rank == 'A'

    @property
    def is_red(self) -> bool:
        return self.suit in RED_SUITS

    def __str__(self) -> str:
        return card_to_str(self)


def card_to_str(card: Card) -> str:
    """Convert a card to its short string form.

    Examples:
        >>> card_to_str(Card('A', 'S'))
        'AS'
        >>> card_to_str(Card('10', 'C'))
        '10C'
    """
    return card.rank + card.suit


def str_to_card(s: str) -> Card:
    """Parse a short card string such as '7H' or '10C'.

    The suit is the last character; everything before it is the rank.

    Raises:
        ValueError: If the rank or suit is not recognised.

    Examples:
        >>> str_to_card('KD')
        Card(rank='K', suit='D')
    """
    return Card(s[:-1], s[-1])


def hand_to_str(cards: list[Card] | tuple[Card, ...]) -> str:
    """Space-separated string for a sequence of cards.

    Examples:
        >>> hand_to_str([Card('A', 'C'), Card('K', 'S')])
        'AC KS'
    """
    return ' '.join(card_to_str(c) for c in cards)


def standard_deck() -> list[Card]:
    """Return the 52 cards of one deck in fixed suit-major order."""
    return [Card(rank, suit) for suit in SUIT_NAMES for rank in RANK_NAMES]
