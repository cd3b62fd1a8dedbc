"""Decision-chart heat maps and result bar charts.

Data builders return NumPy matrices that can be used programmatically or
passed to the plot helpers:

    build_decision_matrices(policy, true_count)  — hard / soft / pair matrices

Plot functions render matplotlib figures:

    plot_decision_charts(policy, true_count, ...)  — 1×3 figure (hard, soft, pairs)
    plot_results_comparison(rows, ...)             — win % and EV per strategy

Matrix convention:
    Columns : dealer up-card 2 3 4 5 6 7 8 9 T A
    Rows    : hard 5–20, soft 13–20 (A-2 … A-9), pairs A-A, 2-2 … T-T
    Values  : index into ACTIONS (HIT=0, STAND=1, DOUBLE=2, SPLIT=3, SURRENDER=4)

Every cell is evaluated with all actions legal (surrender only when
``surrender=True``), so the chart shows what the policy prefers, not what a
particular hand history would allow.
"""

from __future__ import annotations

import matplotlib
import matplotlib.colors
import matplotlib.figure
import matplotlib.patches
import matplotlib.pyplot as plt
import numpy as np

from src.analysis.report import ReportRow
from src.engine.cards import Card
from src.engine.hand import HandValue
from src.engine.rules import Action
from src.strategy.decision import DEALER_COLUMNS, DecisionPolicy
from src.strategy.state import TableState

# ─── Constants ────────────────────────────────────────────────────────────────

ACTIONS: tuple[Action, ...] = (
    Action.HIT, Action.STAND, Action.DOUBLE_DOWN, Action.SPLIT, Action.SURRENDER,
)
_ACTION_LETTERS: dict[Action, str] = {
    Action.HIT: "H",
    Action.STAND: "S",
    Action.DOUBLE_DOWN: "D",
    Action.SPLIT: "P",
    Action.SURRENDER: "R",
}
_ACTION_COLORS: list[str] = ["#2ca02c", "#d62728", "#1f77b4", "#ff7f0e", "#7f7f7f"]

HARD_TOTALS: list[int] = list(range(5, 21))
SOFT_TOTALS: list[int] = list(range(13, 21))
PAIR_VALUES: list[int] = [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]

COL_LABELS: list[str] = ["A" if d == 1 else ("T" if d == 10 else str(d)) for d in DEALER_COLUMNS]
HARD_LABELS: list[str] = [str(t) for t in HARD_TOTALS]
SOFT_LABELS: list[str] = [f"A-{t - 11}" for t in SOFT_TOTALS]
PAIR_LABELS: list[str] = ["A-A" if v == 1 else ("T-T" if v == 10 else f"{v}-{v}") for v in PAIR_VALUES]

_RANK_FOR_VALUE: dict[int, str] = {1: "A", **{v: str(v) for v in range(2, 10)}, 10: "K"}


def _make_action_cmap() -> matplotlib.colors.ListedColormap:
    return matplotlib.colors.ListedColormap(_ACTION_COLORS)


_ACTION_CMAP: matplotlib.colors.ListedColormap = _make_action_cmap()


# ─── Representative hands ─────────────────────────────────────────────────────


def _hard_cards(total: int) -> tuple[Card, Card]:
    """Two non-pair, non-ace cards summing to *total* (5–20)."""
    first = min(10, total - 2)
    second = total - first
    # K + 10 keeps hard 20 from reading as a pair
    second_rank = "10" if second == 10 else str(second)
    return Card(_RANK_FOR_VALUE[first], "S"), Card(second_rank, "H")


def _soft_cards(total: int) -> tuple[Card, Card]:
    return Card("A", "S"), Card(_RANK_FOR_VALUE[total - 11], "H")


def _pair_cards(value: int) -> tuple[Card, Card]:
    rank = _RANK_FOR_VALUE[value]
    return Card(rank, "S"), Card(rank, "H")


def _state(cards: tuple[Card, Card], dealer: int, true_count: float, num_decks: int) -> TableState:
    value = HandValue.from_cards(cards)
    return TableState(
        cards=cards,
        hard_total=value.hard,
        soft_total=value.soft,
        bet=1,
        balance=float("inf"),
        running_count=true_count * num_decks,
        true_count=true_count,
        num_decks=num_decks,
        dealer_up_card=Card(_RANK_FOR_VALUE[dealer], "D"),
    )


# ─── Data builders ────────────────────────────────────────────────────────────


def build_decision_matrices(
    policy: DecisionPolicy,
    true_count: float = 0.0,
    *,
    surrender: bool = True,
    num_decks: int = 6,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return (hard, soft, pairs) action-index matrices for *policy*.

    Args:
        policy:     Decision policy to chart.
        true_count: Count fed to count-aware policies; the running count is
                    set to true_count × num_decks.
        surrender:  Whether surrender is offered on two-card hands.
        num_decks:  Shoe size reported in the table state.

    Returns:
        Three float64 matrices with one column per dealer up-card:
        hard (16 rows), soft (8 rows), pairs (10 rows).
    """
    base = {Action.HIT, Action.STAND, Action.DOUBLE_DOWN}
    if surrender:
        base.add(Action.SURRENDER)
    plain = frozenset(base)
    with_split = frozenset(base | {Action.SPLIT})

    def fill(rows: list[int], make_cards, options: frozenset[Action]) -> np.ndarray:
        matrix = np.full((len(rows), len(DEALER_COLUMNS)), np.nan)
        for r, key in enumerate(rows):
            cards = make_cards(key)
            for c, dealer in enumerate(DEALER_COLUMNS):
                action = policy.decide(_state(cards, dealer, true_count, num_decks), options)
                matrix[r, c] = ACTIONS.index(action)
        return matrix

    return (
        fill(HARD_TOTALS, _hard_cards, plain),
        fill(SOFT_TOTALS, _soft_cards, plain),
        fill(PAIR_VALUES, _pair_cards, with_split),
    )


# ─── Rendering helper ─────────────────────────────────────────────────────────


def _render_panel(
    ax: matplotlib.axes.Axes,
    data: np.ndarray,
    row_labels: list[str],
) -> matplotlib.image.AxesImage:
    """Render one chart onto *ax*; the caller sets title and axis labels."""
    masked = np.ma.masked_invalid(data)
    im = ax.imshow(masked, cmap=_ACTION_CMAP, vmin=-0.5, vmax=len(ACTIONS) - 0.5, aspect="auto")

    ax.set_xticks(range(len(COL_LABELS)))
    ax.set_xticklabels(COL_LABELS, fontsize=9)
    ax.set_yticks(range(len(row_labels)))
    ax.set_yticklabels(row_labels, fontsize=9)

    for r in range(data.shape[0]):
        for c in range(data.shape[1]):
            val = data[r, c]
            if np.isnan(val):
                continue
            ax.text(
                c,
                r,
                _ACTION_LETTERS[ACTIONS[int(val)]],
                ha="center",
                va="center",
                fontsize=8,
                color="white",
                fontweight="bold",
            )
    return im


# ─── Public plot functions ────────────────────────────────────────────────────


def plot_decision_charts(
    policy: DecisionPolicy,
    true_count: float = 0.0,
    *,
    surrender: bool = True,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot hard, soft and pair charts for *policy* as a 1×3 figure.

    Args:
        policy:     Decision policy to chart.
        true_count: Count at which to evaluate count-aware policies.
        surrender:  Whether surrender is offered.
        show:       If True, call plt.show() after rendering.
        save_path:  If not None, save the figure to this path before showing.

    Returns:
        matplotlib.figure.Figure.
    """
    hard, soft, pairs = build_decision_matrices(policy, true_count, surrender=surrender)

    fig, (ax_hard, ax_soft, ax_pair) = plt.subplots(1, 3, figsize=(15, 7))
    fig.suptitle(f"{policy}  (true count {true_count:+g})", fontsize=13, fontweight="bold")

    for ax, data, labels, title in (
        (ax_hard, hard, HARD_LABELS, "Hard totals"),
        (ax_soft, soft, SOFT_LABELS, "Soft totals"),
        (ax_pair, pairs, PAIR_LABELS, "Pairs"),
    ):
        _render_panel(ax, data, labels)
        ax.set_title(title, fontsize=10)
        ax.set_xlabel("Dealer up-card", fontsize=9)
    ax_hard.set_ylabel("Player hand", fontsize=9)

    handles = [
        matplotlib.patches.Patch(color=color, label=action.name.replace("_", " ").title())
        for action, color in zip(ACTIONS, _ACTION_COLORS)
    ]
    fig.legend(handles=handles, loc="lower center", ncol=len(ACTIONS), fontsize=9)
    plt.tight_layout(rect=(0, 0.06, 1, 1))

    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=120)
    if show:
        plt.show()

    return fig


def plot_results_comparison(
    rows: list[ReportRow],
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Horizontal bars of win % (with Wilson 95% CI) and EV per hand per strategy.

    Args:
        rows:      Report rows, one per strategy.
        show:      If True, call plt.show().
        save_path: If not None, save to path.

    Returns:
        matplotlib.figure.Figure with two axes.
    """
    labels = [r.counting_strategy for r in rows]
    y = np.arange(len(rows))
    win = np.array([r.win_pct for r in rows])
    err = np.array([
        [r.win_pct - r.win_pct_ci_low for r in rows],
        [r.win_pct_ci_high - r.win_pct for r in rows],
    ])
    ev = np.array([r.avg_winnings_per_hand for r in rows])

    fig, (ax_win, ax_ev) = plt.subplots(1, 2, figsize=(13, max(3.0, 0.45 * len(rows) + 1.5)), sharey=True)
    fig.suptitle("Strategy comparison", fontsize=13, fontweight="bold")

    ax_win.barh(y, win * 100, xerr=err * 100, color="#1f77b4", capsize=3)
    ax_win.set_yticks(y)
    ax_win.set_yticklabels(labels, fontsize=8)
    ax_win.set_xlabel("Win % (95% CI)", fontsize=9)

    colors = ["#2ca02c" if v >= 0 else "#d62728" for v in ev]
    ax_ev.barh(y, ev, color=colors)
    ax_ev.axvline(0.0, color="black", linewidth=0.8)
    ax_ev.set_xlabel("Average winnings per hand", fontsize=9)

    plt.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=120)
    if show:
        plt.show()

    return fig


# ─── Entry point ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from src.strategy.decision import BasicStrategy, S17DeviationStrategy

    matplotlib.use("Agg")
    print("Generating decision charts …")
    plot_decision_charts(BasicStrategy(), show=False, save_path="basic_strategy.png")
    plot_decision_charts(S17DeviationStrategy(), 4.0, show=False, save_path="deviations_tc4.png")
    print("Saved: basic_strategy.png, deviations_tc4.png")
