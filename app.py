"""Card-Counting Blackjack Simulator — Streamlit Dashboard.

Four-tab interactive dashboard:
  Tab 1 — Decision Charts      (matplotlib, basic strategy vs index plays)
  Tab 2 — Interactive Lookup   (Plotly, hover for hand / dealer / action)
  Tab 3 — Simulation Results   (concurrent multi-strategy run, tables + charts)
  Tab 4 — Report               (80-column text report and JSON export)

Nothing is simulated until **Run Simulation** is pressed.

Run:
    PYTHONPATH=. streamlit run app.py
"""

from __future__ import annotations

import logging

import matplotlib

matplotlib.use("Agg")  # must be set before any other matplotlib imports

import streamlit as st

# ─── Page config ──────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Blackjack Counting Simulator",
    page_icon="🃏",
    layout="wide",
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# ─── Lazy imports (inside functions to keep startup fast) ─────────────────────


@st.cache_resource
def _load_analysis_modules():
    """Import analysis modules once (cached for the process lifetime)."""
    from src.analysis.heat_maps import plot_decision_charts, plot_results_comparison
    from src.analysis.plotly_lookup import (
        build_count_comparison_figure,
        build_decision_lookup_figure,
        build_results_figure,
    )
    from src.analysis.report import build_report, format_report, report_to_json
    from src.strategy.catalog import (
        BettingPolicyName,
        CountingSystemName,
        DecisionPolicyName,
        make_decision,
    )

    return {
        "plot_decision_charts": plot_decision_charts,
        "plot_results_comparison": plot_results_comparison,
        "build_decision_lookup_figure": build_decision_lookup_figure,
        "build_count_comparison_figure": build_count_comparison_figure,
        "build_results_figure": build_results_figure,
        "build_report": build_report,
        "format_report": format_report,
        "report_to_json": report_to_json,
        "CountingSystemName": CountingSystemName,
        "DecisionPolicyName": DecisionPolicyName,
        "BettingPolicyName": BettingPolicyName,
        "make_decision": make_decision,
    }


@st.cache_data(show_spinner=False)
def _run_simulation(
    config_items: tuple,
    counting_names: tuple[str, ...],
    decision_name: str,
    betting_name: str,
    margin: float,
):
    """Run the multi-strategy simulation and cache the report rows."""
    from src.analysis.report import build_report
    from src.analysis.runner import FailurePolicy, MultiStrategyRunner
    from src.engine.config import SimulatorConfig
    from src.strategy.catalog import build_strategy

    config = SimulatorConfig(**dict(config_items))
    strategies = [
        build_strategy(
            name, decision_name, betting_name,
            margin=margin, num_decks=config.num_decks, min_bet=config.min_bet,
        )
        for name in counting_names
    ]
    result = MultiStrategyRunner(config, strategies, FailurePolicy.PARTIAL).run()
    failures = {result.labels[i]: str(exc) for i, exc in result.failures.items()}
    return build_report(result), failures


m = _load_analysis_modules()

# ─── Sidebar controls ─────────────────────────────────────────────────────────

with st.sidebar:
    st.title("🃏 Counting Simulator")
    st.markdown("---")

    st.subheader("Table rules")
    num_decks = st.slider("Decks", min_value=1, max_value=8, value=6)
    min_bet = st.number_input("Minimum bet", min_value=1, max_value=100, value=5, step=1)
    starting_balance = st.number_input("Player bankroll", min_value=10, max_value=100_000, value=500, step=50)
    penetration = st.slider("Penetration", min_value=0.5, max_value=1.0, value=0.8, step=0.05)
    surrender = st.checkbox("Late surrender", value=False)
    dealer_hits_soft_17 = st.checkbox("Dealer hits soft 17", value=False)
    insurance = st.checkbox("Insurance offered", value=False)

    st.markdown("---")
    st.subheader("Strategies")
    counting_names = st.multiselect(
        "Counting systems",
        options=[n.value for n in m["CountingSystemName"]],
        default=["Hi-Lo", "KO", "Wong Halves", "Omega II"],
    )
    decision_name = st.selectbox("Decision policy", options=[n.value for n in m["DecisionPolicyName"]], index=1)
    betting_name = st.selectbox("Betting policy", options=[n.value for n in m["BettingPolicyName"]], index=0)
    margin = st.slider("Betting margin", min_value=0.5, max_value=5.0, value=2.0, step=0.5)

    st.markdown("---")
    st.subheader("Simulation size")
    hands_per_simulation = st.slider("Hands per simulation", min_value=100, max_value=10_000, value=1_000, step=100)
    num_simulations = st.slider("Simulations per strategy", min_value=1, max_value=200, value=20)
    seed = st.number_input("Seed", min_value=0, max_value=2**31 - 1, value=42, step=1)

    run_sim = st.button("Run Simulation", type="primary")

# ─── Simulation result ────────────────────────────────────────────────────────

config_items = (
    ("num_decks", int(num_decks)),
    ("min_bet", int(min_bet)),
    ("player_starting_balance", float(starting_balance)),
    ("penetration", float(penetration)),
    ("surrender", bool(surrender)),
    ("dealer_hits_soft_17", bool(dealer_hits_soft_17)),
    ("insurance", bool(insurance)),
    ("hands_per_simulation", int(hands_per_simulation)),
    ("num_simulations", int(num_simulations)),
    ("seed", int(seed)),
)

rows = None
failures: dict[str, str] = {}
if run_sim:
    if not counting_names:
        st.sidebar.error("Pick at least one counting system.")
    else:
        total = len(counting_names) * num_simulations * hands_per_simulation
        with st.spinner(f"Simulating {total:,} hands across {len(counting_names)} strategies …"):
            rows, failures = _run_simulation(
                config_items, tuple(counting_names), decision_name, betting_name, float(margin)
            )
        st.sidebar.success(f"Done — {sum(r.total_hands_played for r in rows):,} hands played")

# ─── Tabs ─────────────────────────────────────────────────────────────────────

tab1, tab2, tab3, tab4 = st.tabs(
    [
        "Decision Charts",
        "Interactive Lookup",
        "Simulation Results",
        "Report",
    ]
)

policy = m["make_decision"](decision_name)

# ── Tab 1: Decision Charts ────────────────────────────────────────────────────

with tab1:
    st.header("Decision Charts")
    st.caption(
        "Rows = player hand | Cols = dealer up-card | "
        "H = hit, S = stand, D = double, P = split, R = surrender"
    )
    chart_tc = st.slider("True count", min_value=-5, max_value=8, value=0, key="chart_tc")
    fig_chart = m["plot_decision_charts"](policy, float(chart_tc), surrender=surrender, show=False)
    st.pyplot(fig_chart)

# ── Tab 2: Interactive Lookup ─────────────────────────────────────────────────

with tab2:
    st.header("Interactive Decision Lookup")
    st.caption("Hover over any cell to see the hand, the dealer up-card and the chosen action.")
    lookup_tc = st.slider("True count", min_value=-5, max_value=8, value=0, key="lookup_tc")
    st.plotly_chart(
        m["build_decision_lookup_figure"](policy, float(lookup_tc), surrender=surrender),
        use_container_width=True,
    )
    st.markdown("---")
    st.subheader("Hard totals across counts")
    st.plotly_chart(m["build_count_comparison_figure"](policy), use_container_width=True)

# ── Tab 3: Simulation Results ─────────────────────────────────────────────────

with tab3:
    st.header("Simulation Results")
    if rows is not None:
        import pandas as pd

        for label, err in failures.items():
            st.error(f"{label} failed: {err}")

        df = pd.DataFrame(
            [
                {
                    "Strategy": r.counting_strategy,
                    "Hands": r.total_hands_played,
                    "Win %": f"{r.win_pct:.2%}",
                    "Push %": f"{r.push_pct:.2%}",
                    "Loss %": f"{r.lose_pct:.2%}",
                    "Winnings": f"{r.winnings:+,.2f}",
                    "EV / hand": f"{r.avg_winnings_per_hand:+.4f}",
                    "Blackjacks": r.player_blackjacks,
                    "Early endings": r.early_endings,
                }
                for r in rows
            ]
        )
        st.dataframe(df, use_container_width=True, hide_index=True)

        st.markdown("---")
        st.plotly_chart(m["build_results_figure"](rows), use_container_width=True)
        st.pyplot(m["plot_results_comparison"](rows, show=False))
    else:
        st.info("Press **Run Simulation** in the sidebar to compare strategies.")

# ── Tab 4: Report ─────────────────────────────────────────────────────────────

with tab4:
    st.header("Report")
    if rows is not None:
        st.code(m["format_report"](rows), language=None)
        st.download_button(
            "Download JSON",
            data=m["report_to_json"](rows, indent=2),
            file_name="blackjack_report.json",
            mime="application/json",
        )
    else:
        st.info("Press **Run Simulation** in the sidebar to see the report.")
