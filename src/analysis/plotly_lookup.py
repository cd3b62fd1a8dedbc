"""Interactive Plotly figures for decision charts and run results.

Four public functions:

    build_decision_lookup_figure(policy, true_count)
        — Hard / soft / pair charts; hover shows the hand and chosen action.
    build_count_comparison_figure(policy, true_counts)
        — Hard-total chart at several counts, to see index plays switch on.
    build_results_figure(rows)
        — Win % with Wilson 95% error bars and EV per hand, per strategy.
    save_lookup_html(fig, path)
        — Export any figure to a self-contained HTML file.
"""

from __future__ import annotations

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from src.analysis.heat_maps import (
    COL_LABELS,
    HARD_LABELS,
    PAIR_LABELS,
    SOFT_LABELS,
    ACTIONS,
    build_decision_matrices,
)
from src.analysis.report import ReportRow
from src.strategy.decision import DecisionPolicy

# ─── Constants ────────────────────────────────────────────────────────────────

# One flat band per action index 0..4 on a 0..4 z-range.
_ACTION_COLORSCALE: list[list] = [
    [0.0, "#2ca02c"], [0.2, "#2ca02c"],
    [0.2, "#d62728"], [0.4, "#d62728"],
    [0.4, "#1f77b4"], [0.6, "#1f77b4"],
    [0.6, "#ff7f0e"], [0.8, "#ff7f0e"],
    [0.8, "#7f7f7f"], [1.0, "#7f7f7f"],
]


# ─── Hover text / traces ──────────────────────────────────────────────────────


def _build_hover(data: np.ndarray, row_labels: list[str], kind: str) -> list[list[str]]:
    rows: list[list[str]] = []
    for r, label in enumerate(row_labels):
        row: list[str] = []
        for c, dealer in enumerate(COL_LABELS):
            val = data[r, c]
            if np.isnan(val):
                row.append("")
                continue
            action = ACTIONS[int(val)].name.replace("_", " ")
            row.append(
                "<br>".join([
                    f"{kind}: <b>{label}</b>",
                    f"Dealer: {dealer}",
                    f"Action: <b>{action}</b>",
                ])
            )
        rows.append(row)
    return rows


def _make_heatmap_trace(
    data: np.ndarray,
    row_labels: list[str],
    hover_text: list[list[str]],
    *,
    name: str,
    showscale: bool = False,
) -> go.Heatmap:
    z = [[None if np.isnan(v) else v for v in row] for row in data.tolist()]
    return go.Heatmap(
        z=z,
        x=COL_LABELS,
        y=row_labels,
        colorscale=_ACTION_COLORSCALE,
        zmin=-0.5,
        zmax=len(ACTIONS) - 0.5,
        text=hover_text,
        hovertemplate="%{text}<extra></extra>",
        showscale=showscale,
        colorbar={
            "tickvals": list(range(len(ACTIONS))),
            "ticktext": [a.name.replace("_", " ").title() for a in ACTIONS],
        },
        name=name,
    )


# ─── Public figure builders ───────────────────────────────────────────────────


def build_decision_lookup_figure(
    policy: DecisionPolicy,
    true_count: float = 0.0,
    *,
    surrender: bool = True,
) -> go.Figure:
    """Interactive hard / soft / pair charts for *policy* at *true_count*.

    Returns:
        go.Figure with three heatmap traces in a 1×3 subplot layout.
    """
    hard, soft, pairs = build_decision_matrices(policy, true_count, surrender=surrender)

    fig = make_subplots(
        rows=1,
        cols=3,
        subplot_titles=["Hard totals", "Soft totals", "Pairs"],
        horizontal_spacing=0.07,
    )
    panels = [
        (hard, HARD_LABELS, "Hard"),
        (soft, SOFT_LABELS, "Soft"),
        (pairs, PAIR_LABELS, "Pair"),
    ]
    for col, (data, labels, kind) in enumerate(panels, start=1):
        fig.add_trace(
            _make_heatmap_trace(
                data, labels, _build_hover(data, labels, kind), name=kind, showscale=(col == 3)
            ),
            row=1,
            col=col,
        )
        fig.update_yaxes(autorange="reversed", row=1, col=col)

    fig.update_layout(
        title_text=f"{policy} — true count {true_count:+g}",
        title_font_size=15,
        height=560,
        width=1150,
    )
    fig.update_xaxes(title_text="Dealer up-card")
    fig.update_yaxes(title_text="Player hand", col=1)
    return fig


def build_count_comparison_figure(
    policy: DecisionPolicy,
    true_counts: tuple[float, ...] = (-2.0, 0.0, 2.0, 4.0),
) -> go.Figure:
    """Hard-total charts for *policy* side by side at each of *true_counts*."""
    fig = make_subplots(
        rows=1,
        cols=len(true_counts),
        subplot_titles=[f"TC {tc:+g}" for tc in true_counts],
        horizontal_spacing=0.05,
        shared_yaxes=True,
    )
    for col, tc in enumerate(true_counts, start=1):
        hard, _, _ = build_decision_matrices(policy, tc)
        fig.add_trace(
            _make_heatmap_trace(
                hard, HARD_LABELS, _build_hover(hard, HARD_LABELS, "Hard"),
                name=f"tc{tc:+g}", showscale=(col == len(true_counts)),
            ),
            row=1,
            col=col,
        )
    fig.update_yaxes(autorange="reversed")
    fig.update_layout(
        title_text=f"{policy} — hard totals by true count",
        title_font_size=15,
        height=560,
        width=300 * len(true_counts) + 150,
    )
    return fig


def build_results_figure(rows: list[ReportRow]) -> go.Figure:
    """Two-panel bar chart: win % with 95% CI and average winnings per hand."""
    labels = [r.counting_strategy for r in rows]
    fig = make_subplots(
        rows=1,
        cols=2,
        subplot_titles=["Win % (95% CI)", "Average winnings per hand"],
        shared_yaxes=True,
        horizontal_spacing=0.04,
    )
    fig.add_trace(
        go.Bar(
            x=[r.win_pct * 100 for r in rows],
            y=labels,
            orientation="h",
            error_x={
                "type": "data",
                "symmetric": False,
                "array": [(r.win_pct_ci_high - r.win_pct) * 100 for r in rows],
                "arrayminus": [(r.win_pct - r.win_pct_ci_low) * 100 for r in rows],
            },
            marker_color="#1f77b4",
            name="Win %",
            hovertemplate="%{y}<br>Win %{x:.3f}%<extra></extra>",
        ),
        row=1,
        col=1,
    )
    fig.add_trace(
        go.Bar(
            x=[r.avg_winnings_per_hand for r in rows],
            y=labels,
            orientation="h",
            marker_color=["#2ca02c" if r.avg_winnings_per_hand >= 0 else "#d62728" for r in rows],
            name="EV / hand",
            hovertemplate="%{y}<br>%{x:+.4f} per hand<extra></extra>",
        ),
        row=1,
        col=2,
    )
    fig.update_layout(
        title_text="Strategy comparison",
        title_font_size=15,
        height=max(320, 32 * len(rows) + 160),
        width=1100,
        showlegend=False,
    )
    return fig


# ─── HTML export ───────────────────────────────────────────────────────────────


def save_lookup_html(fig: go.Figure, path: str) -> None:
    """Save a Plotly figure to an HTML file that loads Plotly JS from the CDN."""
    fig.write_html(path, include_plotlyjs="cdn")


# ─── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from src.strategy.decision import BasicStrategy, S17DeviationStrategy

    print("Building interactive lookup figures …")
    save_lookup_html(build_decision_lookup_figure(BasicStrategy()), "basic_lookup.html")
    save_lookup_html(build_count_comparison_figure(S17DeviationStrategy()), "deviations_by_count.html")
    print("Saved: basic_lookup.html, deviations_by_count.html")
