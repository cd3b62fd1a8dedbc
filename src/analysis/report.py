"""Final per-strategy report for a multi-strategy run.

    build_report(result)        — ReportRow per worker id, with derived stats
    format_report(rows)         — 80-column "simulation #id" text blocks
    report_to_json(rows)        — {"summaries": {id: {...}}} JSON document
    write_report(rows, dest)    — write text or JSON to a path or open file
    print_report(rows)          — format_report to stdout

The win rate carries a Wilson score interval (scipy.stats.norm quantile) so
strategies can be told apart from noise.
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass
from typing import IO, Mapping

from scipy import stats

from src.analysis.runner import RunResult
from src.analysis.simulator import SimulationSummary
from src.engine.errors import ReportWriteFailure

_WIDTH: int = 80
_TEXT_WIDTH: int = len("number of player blackjacks") + 20


# ─── Rows ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ReportRow:
    sim_id: int
    counting_strategy: str
    wins: int
    pushes: int
    losses: int
    early_endings: int
    winnings: float
    player_blackjacks: int
    total_hands_played: int
    simulations: int
    win_pct: float
    push_pct: float
    lose_pct: float
    avg_winnings_per_hand: float
    win_pct_ci_low: float
    win_pct_ci_high: float


def wilson_interval(successes: int, n: int, confidence: float = 0.95) -> tuple[float, float]:
    """Wilson score interval for a binomial proportion.

    Args:
        successes:  Number of successes.
        n:          Number of trials; (0.0, 0.0) is returned for n == 0.
        confidence: Two-sided confidence level in (0, 1).

    Returns:
        (low, high) bounds, both within [0, 1].

    Examples:
        >>> low, high = wilson_interval(50, 100)
        >>> round(low, 3), round(high, 3)
        (0.404, 0.596)
    """
    if not 0.0 < confidence < 1.0:
        raise ValueError(f"confidence must be in (0, 1), got {confidence}")
    if n == 0:
        return 0.0, 0.0
    z = float(stats.norm.ppf(1.0 - (1.0 - confidence) / 2.0))
    p = successes / n
    denom = 1.0 + z * z / n
    centre = (p + z * z / (2 * n)) / denom
    half = z * math.sqrt(p * (1 - p) / n + z * z / (4 * n * n)) / denom
    return max(0.0, centre - half), min(1.0, centre + half)


def summary_to_row(sim_id: int, summary: SimulationSummary) -> ReportRow:
    low, high = wilson_interval(summary.wins, summary.total_hands)
    return ReportRow(
        sim_id=sim_id,
        counting_strategy=summary.label,
        wins=summary.wins,
        pushes=summary.pushes,
        losses=summary.losses,
        early_endings=summary.early_endings,
        winnings=summary.winnings,
        player_blackjacks=summary.blackjacks,
        total_hands_played=summary.total_hands,
        simulations=summary.simulations,
        win_pct=summary.win_pct,
        push_pct=summary.push_pct,
        lose_pct=summary.loss_pct,
        avg_winnings_per_hand=summary.avg_winnings_per_hand,
        win_pct_ci_low=low,
        win_pct_ci_high=high,
    )


def build_report(result: RunResult | Mapping[int, SimulationSummary]) -> list[ReportRow]:
    """Rows ordered by worker id."""
    summaries = result.summaries if isinstance(result, RunResult) else result
    return [summary_to_row(i, s) for i, s in sorted(summaries.items())]


# ─── Rendering ────────────────────────────────────────────────────────────────

def _line(name: str, value: str) -> str:
    return f"{name:<{_TEXT_WIDTH}}{value:>{_WIDTH - _TEXT_WIDTH}}\n"


def format_row(row: ReportRow) -> str:
    header = f"simulation #{row.sim_id}".center(_WIDTH, "-")
    body = "".join([
        _line("strategy", row.counting_strategy),
        _line("number of wins", f"{row.wins:,}"),
        _line("number of pushes", f"{row.pushes:,}"),
        _line("number of losses", f"{row.losses:,}"),
        _line("number of early endings", f"{row.early_endings:,}"),
        _line("number of player blackjacks", f"{row.player_blackjacks:,}"),
        _line("total hands played", f"{row.total_hands_played:,}"),
        _line("total winnings", f"{row.winnings:+,.2f}"),
        _line("win %", f"{row.win_pct:.4%}"),
        _line("win % 95% CI", f"[{row.win_pct_ci_low:.4%}, {row.win_pct_ci_high:.4%}]"),
        _line("push %", f"{row.push_pct:.4%}"),
        _line("loss %", f"{row.lose_pct:.4%}"),
        _line("average winnings per hand", f"{row.avg_winnings_per_hand:+.4f}"),
    ])
    return f"{header}\n{body}{'-' * _WIDTH}\n"


def format_report(rows: list[ReportRow]) -> str:
    return "".join(format_row(r) for r in rows)


def report_to_json(rows: list[ReportRow], indent: int | None = None) -> str:
    payload = {"summaries": {str(r.sim_id): asdict(r) for r in rows}}
    return json.dumps(payload, indent=indent)


def write_report(rows: list[ReportRow], dest: str | IO[str], *, as_json: bool = False) -> None:
    """Write the report to a file path or an open text stream.

    Raises:
        ReportWriteFailure: If the destination rejects the output.
    """
    text = report_to_json(rows, indent=2) if as_json else format_report(rows)
    try:
        if isinstance(dest, str):
            with open(dest, "w", encoding="utf-8") as fh:
                fh.write(text)
        else:
            dest.write(text)
    except OSError as exc:
        raise ReportWriteFailure(f"could not write report: {exc}") from exc


def print_report(rows: list[ReportRow]) -> None:
    print(format_report(rows), end="")
