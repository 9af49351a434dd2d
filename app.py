"""Blackjack Monte Carlo Advisor — Streamlit Dashboard.

Two-tab interactive dashboard:
  Tab 1 — Action Advisor   (EV + win/loss/tie for each candidate action)
  Tab 2 — Strategy Chart   (best action per hard total × dealer up-card)

Run:
    streamlit run app.py
"""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")  # must be set before any other matplotlib imports

import streamlit as st

# ─── Page config ──────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Blackjack Monte Carlo Advisor",
    page_icon="🃏",
    layout="wide",
)

_NO_CARD: str = "—"
_CARD_OPTIONS: list[str] = [_NO_CARD, "A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K"]
_MAX_PLAYER_CARDS: int = 6

# ─── Lazy imports (inside functions to keep startup fast) ─────────────────────


@st.cache_resource
def _load_analysis_modules():
    """Import analysis modules once (cached for the process lifetime)."""
    import pandas as pd

    from blackjack_mc.analysis.heat_maps import plot_best_action_heatmap
    from blackjack_mc.analysis.plotly_lookup import (
        build_action_outcome_figure,
        build_best_action_lookup_figure,
    )
    from blackjack_mc.analysis.report import (
        action_rows,
        format_estimated_value,
        format_interval,
        format_probability_percentage,
    )
    from blackjack_mc.analysis.simulator import SLOT_LABELS, compute_action_outcomes
    from blackjack_mc.analysis.user_input import (
        MAX_N_DECKS,
        RawGameInput,
        parse_game_input,
        parse_int_field,
    )
    from blackjack_mc.engine.game_state import DEFAULT_N_DECKS, AdvisorError

    return {
        "pd": pd,
        "plot_best_action_heatmap": plot_best_action_heatmap,
        "build_action_outcome_figure": build_action_outcome_figure,
        "build_best_action_lookup_figure": build_best_action_lookup_figure,
        "action_rows": action_rows,
        "format_estimated_value": format_estimated_value,
        "format_interval": format_interval,
        "format_probability_percentage": format_probability_percentage,
        "SLOT_LABELS": SLOT_LABELS,
        "RawGameInput": RawGameInput,
        "parse_game_input": parse_game_input,
        "parse_int_field": parse_int_field,
        "MAX_N_DECKS": MAX_N_DECKS,
        "DEFAULT_N_DECKS": DEFAULT_N_DECKS,
        "compute_action_outcomes": compute_action_outcomes,
        "AdvisorError": AdvisorError,
    }


@st.cache_data
def _run_best_action_grid(n_trials: int, n_decks: int):
    """Simulate the strategy chart and cache it (keyed on trials and decks)."""
    from blackjack_mc.analysis.heat_maps import build_best_action_data

    return build_best_action_data(n_trials=n_trials, n_decks=n_decks)


# ─── Sidebar controls ─────────────────────────────────────────────────────────

with st.sidebar:
    st.title("🃏 Blackjack Advisor")
    st.markdown("---")

    st.subheader("Your cards")
    player_entries = [
        st.selectbox(
            f"Card {i + 1}",
            options=_CARD_OPTIONS,
            index=0,
            key=f"player_card_{i}",
        )
        for i in range(_MAX_PLAYER_CARDS)
    ]

    st.subheader("Dealer")
    dealer_entry = st.selectbox("Up-card", options=_CARD_OPTIONS, index=0, key="dealer_card")

    st.markdown("---")
    n_decks_text = st.text_input("Number of decks", value="6")
    bet_size_text = st.text_input("Bet size", value="10")
    n_trials_text = st.text_input("Simulations per action", value="10000")

    run_advice = st.button("Simulate", type="primary")

    st.markdown("---")
    n_chart_trials = st.slider(
        "Strategy chart trials",
        min_value=200,
        max_value=5_000,
        value=1_000,
        step=200,
    )
    run_chart = st.button("Build strategy chart")

    st.markdown("---")
    st.caption("Monte Carlo estimates: results vary slightly between runs.")

# ─── Tabs ─────────────────────────────────────────────────────────────────────

tab1, tab2 = st.tabs(["Action Advisor", "Strategy Chart"])

m = _load_analysis_modules()

# ── Tab 1: Action Advisor ─────────────────────────────────────────────────────

with tab1:
    st.header("Action Advisor")
    st.caption(
        "Pick at least two player cards and the dealer's up-card, then press "
        "**Simulate**. Split rows appear only for a pair."
    )

    if run_advice:
        raw = m["RawGameInput"](
            player_cards=player_entries,
            dealer_cards=[dealer_entry],
            n_decks=n_decks_text,
            bet_size=bet_size_text,
            n_trials=n_trials_text,
        )
        try:
            state = m["parse_game_input"](raw)
            with st.spinner(f"Simulating {state.n_trials:,} trials per action …"):
                report = m["compute_action_outcomes"](state)
        except m["AdvisorError"] as exc:
            st.error(str(exc))
        else:
            best = report.best_action()
            if best is not None:
                best_outcome = getattr(report, best)
                ev_ci = m["format_interval"](
                    best_outcome.ev_ci_95(state.bet_size), m["format_estimated_value"]
                )
                col1, col2, col3 = st.columns(3)
                col1.metric("Best action", m["SLOT_LABELS"][best])
                col2.metric(
                    "EV",
                    m["format_estimated_value"](best_outcome.estimated_value),
                    help=f"95% CI: {ev_ci}",
                )
                col3.metric("Win", m["format_probability_percentage"](best_outcome.win))

            rows = m["action_rows"](report, state.bet_size)
            st.dataframe(m["pd"].DataFrame(rows), use_container_width=True, hide_index=True)
            st.plotly_chart(m["build_action_outcome_figure"](report), use_container_width=True)
    else:
        st.info("Choose your cards in the sidebar and press **Simulate**.")

# ── Tab 2: Strategy Chart ─────────────────────────────────────────────────────

with tab2:
    st.header("Strategy Chart")
    st.caption(
        "Rows = player hard total (two-card hands) | Cols = dealer up-card | "
        "S = stand, H1–H3 = hit that many times"
    )

    if run_chart or "chart_cached" in st.session_state:
        try:
            chart_decks = m["parse_int_field"]("n_decks", n_decks_text, m["MAX_N_DECKS"])
        except m["AdvisorError"]:
            chart_decks = m["DEFAULT_N_DECKS"]
            st.caption(f"Using {chart_decks} decks: the deck count in the sidebar is not valid.")
        with st.spinner(f"Simulating strategy chart ({n_chart_trials:,} trials per action) …"):
            best_grid, ev_grid = _run_best_action_grid(n_chart_trials, max(chart_decks, 1))
        st.session_state["chart_cached"] = True

        fig_chart = m["plot_best_action_heatmap"](best_grid, ev_grid, show=False)
        st.pyplot(fig_chart)

        st.markdown("---")
        st.plotly_chart(
            m["build_best_action_lookup_figure"](best_grid, ev_grid),
            use_container_width=True,
        )
    else:
        st.info("Press **Build strategy chart** in the sidebar to simulate the chart.")
