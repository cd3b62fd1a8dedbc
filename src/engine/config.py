"""
Table rules and simulation sizing.

SimulatorConfig is frozen and validated on construction; every component
(shoe, table, player, simulator, runner) reads its rules from one instance.

    >>> cfg = SimulatorConfig(num_decks=8, dealer_hits_soft_17=True)
    >>> cfg.min_bet
    5
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from .rules import BLACKJACK_PAYOUT


@dataclass(frozen=True)
class SimulatorConfig:
    num_decks: int = 6
    num_shuffles: int = 7
    min_bet: int = 5
    player_starting_balance: float = 500.0
    table_starting_balance: float = math.inf
    surrender: bool = False
    surrender_upcards: frozenset[int] = field(default_factory=lambda: frozenset({1, 10}))
    dealer_hits_soft_17: bool = False
    insurance: bool = False
    double_after_split: bool = True
    max_hands: int = 4
    penetration: float = 0.8
    blackjack_payout: float = BLACKJACK_PAYOUT
    hands_per_simulation: int = 1000
    num_simulations: int = 1
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.num_decks < 1:
            raise ValueError(f"num_decks must be >= 1, got {self.num_decks}")
        if self.num_shuffles < 1:
            raise ValueError(f"num_shuffles must be >= 1, got {self.num_shuffles}")
        if self.min_bet < 1:
            raise ValueError(f"min_bet must be >= 1, got {self.min_bet}")
        if self.player_starting_balance < 0:
            raise ValueError("player_starting_balance must be non-negative")
        if self.table_starting_balance < 0:
            raise ValueError("table_starting_balance must be non-negative")
        if not 0.0 < self.penetration <= 1.0:
            raise ValueError(f"penetration must be in (0, 1], got {self.penetration}")
        if not 1 <= self.max_hands <= 4:
            raise ValueError(f"max_hands must be between 1 and 4, got {self.max_hands}")
        if self.blackjack_payout <= 0:
            raise ValueError("blackjack_payout must be positive")
        if self.hands_per_simulation < 1:
            raise ValueError("hands_per_simulation must be >= 1")
        if self.num_simulations < 1:
            raise ValueError("num_simulations must be >= 1")
        # accept any iterable for the up-card set
        object.__setattr__(self, "surrender_upcards", frozenset(self.surrender_upcards))
        if not self.surrender_upcards <= frozenset(range(1, 11)):
            raise ValueError("surrender_upcards must hold card values 1-10")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SimulatorConfig:
        """Build a config from a JSON-style mapping.

        Missing keys and ``None`` values fall back to the defaults; unknown
        keys raise ValueError.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        kwargs = {k: v for k, v in data.items() if v is not None}
        if "surrender_upcards" in kwargs:
            kwargs["surrender_upcards"] = frozenset(kwargs["surrender_upcards"])
        return cls(**kwargs)
