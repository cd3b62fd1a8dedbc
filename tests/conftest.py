"""
Shared pytest fixtures for the blackjack simulator tests.

``seat`` puts a player at a table dealing from a stacked shoe, so single
rounds can be replayed card by card. Stacked deal order: player, dealer
up-card, player, dealer hole card, then every later draw (hits, doubles,
split cards, dealer draws) in order.
"""

from __future__ import annotations

import pytest

from src.engine.cards import Card, str_to_card
from src.engine.config import SimulatorConfig
from src.engine.player import Player
from src.engine.shoe import Shoe
from src.engine.table import Table
from src.strategy.catalog import build_strategy
from src.strategy.composite import Strategy


def cards(*card_strs: str) -> list[Card]:
    """Build a card list from human-readable strings.

    Examples:
        >>> cards('AS', '10H')
        [Card(rank='A', suit='S'), Card(rank='10', suit='H')]
    """
    return [str_to_card(s) for s in card_strs]


def make_strategy(
    counting: str = "Hi-Lo",
    decision: str = "Basic Strategy",
    betting: str = "Flat Betting",
    **kwargs,
) -> Strategy:
    return build_strategy(counting, decision, betting, **kwargs)


@pytest.fixture
def config() -> SimulatorConfig:
    """Default rules with a finite house bankroll."""
    return SimulatorConfig(table_starting_balance=10_000.0)


@pytest.fixture
def seat():
    """Return a factory: seat(config, *card_strs, strategy=None) -> (player, table)."""

    def _seat(
        config: SimulatorConfig,
        *card_strs: str,
        strategy: Strategy | None = None,
    ) -> tuple[Player, Table]:
        if strategy is None:
            strategy = make_strategy(num_decks=config.num_decks, min_bet=config.min_bet)
        player = Player(strategy, config)
        table = Table(config, shoe=Shoe.stacked(cards(*card_strs)))
        return player, table

    return _seat


@pytest.fixture
def c():
    """Expose the cards() helper as a fixture for convenience."""
    return cards
