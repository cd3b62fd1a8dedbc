"""
Hand totals and per-hand state.

A blackjack total has at most two readings: the hard total (every ace = 1)
and a soft total (one ace = 11) that exists only while it does not bust.

    [A, 6]     → hard 7, soft 17
    [A, 6, 9]  → hard 16 (the soft 26 is dropped)

HandValue is updated incrementally as cards arrive so the engine never
re-scans a hand. Only one ace can ever be promoted to 11: two would make
at least 22.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from .cards import Card, hand_to_str


# ─── Totals ───────────────────────────────────────────────────────────────────

@dataclass
class HandValue:
    hard: int = 0
    soft: int | None = None

    @classmethod
    def from_cards(cls, cards: list[Card] | tuple[Card, ...]) -> HandValue:
        """Build a HandValue by adding *cards* one at a time.

        Examples:
            >>> HandValue.from_cards([Card('A', 'S'), Card('6', 'H')]).values
            (7, 17)
        """
        value = cls()
        for card in cards:
            value.add(card)
        return value

    def add(self, card: Card) -> None:
        """Fold one card into the total."""
        self.hard += card.value
        if self.soft is not None:
            self.soft += card.value
            if self.soft > 21:
                self.soft = None
        elif card.is_ace and self.hard <= 11:
            self.soft = self.hard + 10

    @property
    def values(self) -> tuple[int, ...]:
        if self.soft is None:
            return (self.hard,)
        return (self.hard, self.soft)

    @property
    def best(self) -> int:
        """Highest non-busting reading, else the (busted) hard total."""
        return self.soft if self.soft is not None else self.hard

    @property
    def is_soft(self) -> bool:
        return self.soft is not None

    @property
    def is_bust(self) -> bool:
        return self.hard > 21


# ─── Player / dealer hands ────────────────────────────────────────────────────

class HandPhase(Enum):
    DEALING = auto()
    AWAITING_DECISION = auto()
    STANDING = auto()
    RESOLVED = auto()


@dataclass
class PlayerHand:
    """One sub-hand of a seated player.

    ``net`` is the signed change to the player's balance once the hand is
    resolved (stake already deducted, so a lost bet is -bet).
    """
    bet: int = 0
    cards: list[Card] = field(default_factory=list)
    value: HandValue = field(default_factory=HandValue)
    phase: HandPhase = HandPhase.DEALING
    outcome: object | None = None
    net: float = 0.0
    split_from: bool = False

    def receive(self, card: Card) -> None:
        self.cards.append(card)
        self.value.add(card)

    @property
    def is_blackjack(self) -> bool:
        """Two-card 21 on an unsplit hand."""
        return len(self.cards) == 2 and self.value.best == 21 and not self.split_from

    @property
    def is_pair(self) -> bool:
        return len(self.cards) == 2 and self.cards[0].rank == self.cards[1].rank

    @property
    def is_done(self) -> bool:
        return self.phase in (HandPhase.STANDING, HandPhase.RESOLVED)

    def __str__(self) -> str:
        return f"{hand_to_str(self.cards)} ({'/'.join(map(str, self.value.values))}) bet={self.bet}"


@dataclass
class DealerHand:
    cards: list[Card] = field(default_factory=list)
    value: HandValue = field(default_factory=HandValue)
    hole_revealed: bool = False

    def receive(self, card: Card) -> None:
        self.cards.append(card)
        self.value.add(card)

    @property
    def up_card(self) -> Card | None:
        return self.cards[0] if self.cards else None

    @property
    def hole_card(self) -> Card | None:
        return self.cards[1] if len(self.cards) > 1 else None

    @property
    def has_blackjack(self) -> bool:
        return len(self.cards) == 2 and self.value.best == 21

    def __str__(self) -> str:
        return f"{hand_to_str(self.cards)} ({self.value.best})"
