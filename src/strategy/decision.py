"""
Decision policies: multi-deck S17 basic strategy and count-based index plays.

Charts are written the way they are printed on a strategy card: one row per
player hand, one column per dealer up-card in the order 2 3 4 5 6 7 8 9 T A.

    H  = hit            S  = stand          D  = double, else hit
    Ds = double, else stand                 P  = split
    R  = surrender      -  = no entry (fall through)

Lookup order for a hand: split → surrender → soft → hard, so 8-8 splits
against a ten rather than surrendering. Whatever the chart says must be in
the legal option set; doubles fall back to hit (or stand for Ds), anything
else raises NoValidOption.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import Callable

from src.engine.errors import NoValidOption
from src.engine.rules import Action
from src.strategy.state import TableState

DEALER_COLUMNS: tuple[int, ...] = (2, 3, 4, 5, 6, 7, 8, 9, 10, 1)


def _chart(rows: dict[int, str]) -> dict[tuple[int, int], str]:
    """Expand printed chart rows into a {(row, dealer_value): code} table."""
    table: dict[tuple[int, int], str] = {}
    for key, row in rows.items():
        codes = row.split()
        if len(codes) != len(DEALER_COLUMNS):
            raise ValueError(f"chart row {key} has {len(codes)} columns")
        for dealer, code in zip(DEALER_COLUMNS, codes):
            if code != '-':
                table[(key, dealer)] = code
    return table


# ─── S17 multi-deck charts ────────────────────────────────────────────────────

#                       2  3  4  5  6  7  8  9  T  A
_HARD = _chart({
    **{t: "H  H  H  H  H  H  H  H  H  H" for t in range(4, 9)},
    9:    "H  D  D  D  D  H  H  H  H  H",
    10:   "D  D  D  D  D  D  D  D  H  H",
    11:   "D  D  D  D  D  D  D  D  D  D",
    12:   "H  H  S  S  S  H  H  H  H  H",
    **{t: "S  S  S  S  S  H  H  H  H  H" for t in range(13, 17)},
    **{t: "S  S  S  S  S  S  S  S  S  S" for t in range(17, 22)},
})

_SOFT = _chart({
    12:   "H  H  H  H  H  H  H  H  H  H",
    13:   "H  H  H  D  D  H  H  H  H  H",
    14:   "H  H  H  D  D  H  H  H  H  H",
    15:   "H  H  D  D  D  H  H  H  H  H",
    16:   "H  H  D  D  D  H  H  H  H  H",
    17:   "H  D  D  D  D  H  H  H  H  H",
    18:   "S  Ds Ds Ds Ds S  S  H  H  H",
    **{t: "S  S  S  S  S  S  S  S  S  S" for t in range(19, 22)},
})

# keyed by the value of either card of the pair
_PAIRS = _chart({
    1:    "P  P  P  P  P  P  P  P  P  P",
    2:    "P  P  P  P  P  P  -  -  -  -",
    3:    "P  P  P  P  P  P  -  -  -  -",
    4:    "-  -  -  P  P  -  -  -  -  -",
    6:    "P  P  P  P  P  -  -  -  -  -",
    7:    "P  P  P  P  P  P  -  -  -  -",
    8:    "P  P  P  P  P  P  P  P  P  P",
    9:    "P  P  P  P  P  -  P  P  -  -",
})

_SURRENDER = _chart({
    15:   "-  -  -  -  -  -  -  -  R  -",
    16:   "-  -  -  -  -  -  -  R  R  R",
})

_CODES: dict[str, Action] = {
    'H': Action.HIT,
    'S': Action.STAND,
    'D': Action.DOUBLE_DOWN,
    'Ds': Action.DOUBLE_DOWN,
    'P': Action.SPLIT,
    'R': Action.SURRENDER,
}


# ─── Policies ─────────────────────────────────────────────────────────────────

class DecisionPolicy:
    """Chooses an Action from the legal set for the hand being played."""
    name: str = ""

    def decide(self, state: TableState, options: frozenset[Action]) -> Action:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.name


class BasicStrategy(DecisionPolicy):
    """Count-independent S17 multi-deck basic strategy."""
    name = "Basic Strategy"

    def chart_code(self, state: TableState, options: frozenset[Action]) -> str:
        """Return the chart entry that governs *state* given the legal *options*."""
        dealer = state.dealer_value
        if Action.SPLIT in options and state.is_pair:
            code = _PAIRS.get((state.cards[0].value, dealer))
            if code is not None:
                return code
        if Action.SURRENDER in options and not state.is_soft:
            code = _SURRENDER.get((state.hard_total, dealer))
            if code is not None:
                return code
        if state.is_soft:
            code = _SOFT.get((state.soft_total, dealer))
        else:
            code = _HARD.get((state.hard_total, dealer))
        if code is None:
            raise NoValidOption(
                f"no chart entry for {'soft' if state.is_soft else 'hard'} "
                f"{state.best_total} vs {dealer}"
            )
        return code

    def decide(self, state: TableState, options: frozenset[Action]) -> Action:
        return resolve_code(self.chart_code(state, options), options)


def resolve_code(code: str, options: frozenset[Action]) -> Action:
    """Map a chart code onto a legal Action, applying double-down fallbacks.

    Raises:
        NoValidOption: If the resulting action is not legal.
    """
    action = _CODES[code]
    if action is Action.DOUBLE_DOWN and action not in options:
        action = Action.STAND if code == 'Ds' else Action.HIT
    if action not in options:
        raise NoValidOption(f"{action.name} is not one of {sorted(a.name for a in options)}")
    return action


# ─── Index plays ──────────────────────────────────────────────────────────────

_COMPARATORS: dict[str, Callable[[float, float], bool]] = {
    '>': operator.gt,
    '>=': operator.ge,
    '<': operator.lt,
}


@dataclass(frozen=True)
class Deviation:
    """Play *action* with hard *total* vs *dealer* when the count crosses *threshold*.

    ``pair`` entries key on the pair's card value instead of the hard total.
    ``count`` selects the running or the true count.
    """
    total: int
    dealer: int
    action: Action
    threshold: float
    op: str = '>='
    count: str = 'true'
    pair: bool = False

    def matches(self, state: TableState) -> bool:
        if state.dealer_value != self.dealer or state.is_soft:
            return False
        if self.pair:
            return state.is_pair and state.cards[0].value == self.total
        return state.hard_total == self.total

    def triggered(self, state: TableState) -> bool:
        value = state.running_count if self.count == 'running' else state.true_count
        return _COMPARATORS[self.op](value, self.threshold)


# Fab 4 late-surrender indices
S17_SURRENDER_DEVIATIONS: tuple[Deviation, ...] = (
    Deviation(14, 10, Action.SURRENDER, 3),
    Deviation(15, 10, Action.SURRENDER, 0),
    Deviation(15, 9, Action.SURRENDER, 2),
    Deviation(15, 1, Action.SURRENDER, 1),
)

# Illustrious 18 (insurance lives in the insurance policy)
S17_PLAY_DEVIATIONS: tuple[Deviation, ...] = (
    Deviation(16, 10, Action.STAND, 0, op='>', count='running'),
    Deviation(15, 10, Action.STAND, 4),
    Deviation(10, 5, Action.SPLIT, 5, pair=True),
    Deviation(10, 6, Action.SPLIT, 4, pair=True),
    Deviation(10, 10, Action.DOUBLE_DOWN, 4),
    Deviation(12, 3, Action.STAND, 2),
    Deviation(12, 2, Action.STAND, 3),
    Deviation(9, 2, Action.DOUBLE_DOWN, 1),
    Deviation(10, 1, Action.DOUBLE_DOWN, 4),
    Deviation(9, 7, Action.DOUBLE_DOWN, 3),
    Deviation(16, 9, Action.STAND, 5),
    Deviation(13, 2, Action.HIT, -1, op='<'),
    Deviation(12, 4, Action.HIT, 0, op='<'),
    Deviation(12, 5, Action.HIT, -2, op='<'),
    Deviation(12, 6, Action.HIT, -1, op='<'),
    Deviation(13, 3, Action.HIT, -2, op='<'),
)


class S17DeviationStrategy(DecisionPolicy):
    """Basic strategy plus count-driven index plays for S17 games.

    Surrender indices replace the basic-strategy surrender cell they cover:
    below the index the hand is played out instead of surrendered. Play
    indices only fire when their action is legal; otherwise the chart
    decides.
    """
    name = "S17 Deviations"

    def __init__(
        self,
        surrender_deviations: tuple[Deviation, ...] = S17_SURRENDER_DEVIATIONS,
        play_deviations: tuple[Deviation, ...] = S17_PLAY_DEVIATIONS,
    ) -> None:
        self.basic = BasicStrategy()
        self.surrender_deviations = surrender_deviations
        self.play_deviations = play_deviations

    def decide(self, state: TableState, options: frozenset[Action]) -> Action:
        if Action.SURRENDER in options:
            for dev in self.surrender_deviations:
                if dev.matches(state):
                    if dev.triggered(state):
                        return Action.SURRENDER
                    options = options - {Action.SURRENDER}
                    break

        splitting = (
            Action.SPLIT in options
            and state.is_pair
            and self.basic.chart_code(state, options) == 'P'
        )
        for dev in self.play_deviations:
            if not dev.matches(state) or dev.action not in options:
                continue
            if splitting and not dev.pair:
                continue
            if dev.triggered(state):
                return dev.action

        return self.basic.decide(state, options)
