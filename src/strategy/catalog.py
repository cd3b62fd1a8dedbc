"""
Closed name → policy catalog.

Front ends (dashboard, command line, JSON requests) pick strategies by name.
Each family is an Enum whose members carry their factory, so the set of
selectable systems is exhaustive and lives in one place.

    >>> s = build_strategy("Hi-Lo", "S17 Deviations", "Margin Betting", margin=2, num_decks=6, min_bet=5)
    >>> s.label
    'Hi-Lo / S17 Deviations / Margin Betting x2'
"""

from __future__ import annotations

from enum import Enum

from src.strategy.betting import BettingPolicy, FlatBettingStrategy, MarginBettingStrategy
from src.strategy.composite import InsurancePolicy, NeverInsure, Strategy
from src.strategy.counting import (
    COUNTING_SYSTEMS,
    KISS,
    KISSII,
    KISSIII,
    KO,
    AceFive,
    CountingSystem,
    Halves,
    HiLo,
    HiOptI,
    HiOptII,
    JNoir,
    OmegaII,
    RedSeven,
    SilverFox,
    UnbalancedZen2,
    WongHalves,
    ZenCount,
)
from src.strategy.decision import BasicStrategy, DecisionPolicy, S17DeviationStrategy


class CountingSystemName(Enum):
    HI_LO = HiLo.name
    WONG_HALVES = WongHalves.name
    KO = KO.name
    RED_SEVEN = RedSeven.name
    HI_OPT_I = HiOptI.name
    HI_OPT_II = HiOptII.name
    ACE_FIVE = AceFive.name
    OMEGA_II = OmegaII.name
    ZEN_COUNT = ZenCount.name
    HALVES = Halves.name
    KISS = KISS.name
    KISS_II = KISSII.name
    KISS_III = KISSIII.name
    SILVER_FOX = SilverFox.name
    J_NOIR = JNoir.name
    UNBALANCED_ZEN_2 = UnbalancedZen2.name


_COUNTING_BY_NAME: dict[CountingSystemName, type[CountingSystem]] = {
    CountingSystemName(cls.name): cls for cls in COUNTING_SYSTEMS
}


class DecisionPolicyName(Enum):
    BASIC = BasicStrategy.name
    S17_DEVIATIONS = S17DeviationStrategy.name


class BettingPolicyName(Enum):
    MARGIN = MarginBettingStrategy.name
    FLAT = FlatBettingStrategy.name


def _coerce(enum_cls: type[Enum], value: Enum | str) -> Enum:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(repr(m.value) for m in enum_cls)
        raise ValueError(f"Unknown {enum_cls.__name__} {value!r}; expected one of {choices}") from None


def make_counting(name: CountingSystemName | str, num_decks: int) -> CountingSystem:
    return _COUNTING_BY_NAME[_coerce(CountingSystemName, name)](num_decks)


def make_decision(name: DecisionPolicyName | str) -> DecisionPolicy:
    name = _coerce(DecisionPolicyName, name)
    if name is DecisionPolicyName.BASIC:
        return BasicStrategy()
    if name is DecisionPolicyName.S17_DEVIATIONS:
        return S17DeviationStrategy()
    raise AssertionError(f"unhandled decision policy {name}")


def make_betting(name: BettingPolicyName | str, margin: float, min_bet: int) -> BettingPolicy:
    name = _coerce(BettingPolicyName, name)
    if name is BettingPolicyName.MARGIN:
        return MarginBettingStrategy(margin, min_bet)
    if name is BettingPolicyName.FLAT:
        return FlatBettingStrategy(min_bet)
    raise AssertionError(f"unhandled betting policy {name}")


def build_strategy(
    counting: CountingSystemName | str,
    decision: DecisionPolicyName | str,
    betting: BettingPolicyName | str,
    *,
    margin: float = 1.0,
    num_decks: int = 6,
    min_bet: int = 5,
    insure: bool = True,
) -> Strategy:
    """Assemble a Strategy from catalog names.

    Raises:
        ValueError: If any name is not in its catalog.
    """
    counting_system = make_counting(counting, num_decks)
    decision_policy = make_decision(decision)
    betting_policy = make_betting(betting, margin, min_bet)
    bet_label = str(betting_policy)
    if isinstance(betting_policy, MarginBettingStrategy):
        bet_label += f" x{margin:g}"
    return Strategy(
        counting_system,
        decision_policy,
        betting_policy,
        insurance=InsurancePolicy() if insure else NeverInsure(),
        label=f"{counting_system} / {decision_policy} / {bet_label}",
    )


def all_counting_strategies(
    decision: DecisionPolicyName | str = DecisionPolicyName.S17_DEVIATIONS,
    betting: BettingPolicyName | str = BettingPolicyName.MARGIN,
    *,
    margin: float = 1.0,
    num_decks: int = 6,
    min_bet: int = 5,
) -> list[Strategy]:
    """One fresh Strategy per counting system, sharing the other policies' names."""
    return [
        build_strategy(name, decision, betting, margin=margin, num_decks=num_decks, min_bet=min_bet)
        for name in CountingSystemName
    ]
