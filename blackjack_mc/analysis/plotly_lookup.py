"""Interactive Plotly views of simulation results.

Three public functions:

    build_action_outcome_figure(report)
        — EV bars plus stacked win/tie/loss bars for each simulated action.
    build_best_action_lookup_figure(best, ev, totals, upcards)
        — Hoverable best-action grid from heat_maps.build_best_action_data().
    save_lookup_html(fig, path)
        — Export any figure to a self-contained HTML file.

Actions that were not simulated (split slots for a non-pair hand) are left
out of the outcome figure.
"""

from __future__ import annotations

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from blackjack_mc.analysis.heat_maps import (
    BEST_ACTION_SLOTS,
    DEFAULT_TOTALS,
    DEFAULT_UPCARDS,
)
from blackjack_mc.analysis.report import format_estimated_value, format_probability_percentage
from blackjack_mc.analysis.simulator import SLOT_LABELS, ActionOutcomeReport
from blackjack_mc.engine.cards import Rank, rank_to_str

# ─── Constants ────────────────────────────────────────────────────────────────

_WIN_COLOR: str = "#2ca02c"
_LOSS_COLOR: str = "#d62728"
_TIE_COLOR: str = "#7f7f7f"
_BEST_COLOR: str = "#1f77b4"

# Discrete colorscale over best-action index 0..3 (STAND, HIT 1..3).
_ACTION_COLORSCALE: list[list] = [
    [0.0, "#d62728"],
    [0.249, "#d62728"],
    [0.25, "#98df8a"],
    [0.499, "#98df8a"],
    [0.5, "#2ca02c"],
    [0.749, "#2ca02c"],
    [0.75, "#1a6b1a"],
    [1.0, "#1a6b1a"],
]


# ─── Figure builders ──────────────────────────────────────────────────────────


def build_action_outcome_figure(report: ActionOutcomeReport) -> go.Figure:
    """Build a 1×2 figure: EV per action (left) and outcome mix (right).

    The best action's EV bar is highlighted.

    Args:
        report: Result of compute_action_outcomes().

    Returns:
        go.Figure with four bar traces: EV, Win, Tie, Loss.
    """
    computed = [(slot, outcome) for slot, outcome in report.items() if outcome.computed]
    labels = [SLOT_LABELS[slot] for slot, _ in computed]
    best = report.best_action()

    ev_colors = []
    for slot, outcome in computed:
        if slot == best:
            ev_colors.append(_BEST_COLOR)
        else:
            ev_colors.append(_WIN_COLOR if outcome.estimated_value >= 0 else _LOSS_COLOR)

    fig = make_subplots(
        rows=1,
        cols=2,
        subplot_titles=["Expected value", "Outcome probabilities"],
        horizontal_spacing=0.12,
    )

    fig.add_trace(
        go.Bar(
            x=labels,
            y=[o.estimated_value for _, o in computed],
            marker_color=ev_colors,
            text=[format_estimated_value(o.estimated_value) for _, o in computed],
            hovertemplate="%{x}<br>EV: %{text}<extra></extra>",
            name="EV",
            showlegend=False,
        ),
        row=1,
        col=1,
    )

    for name, attr, color in (
        ("Win", "win", _WIN_COLOR),
        ("Tie", "tie", _TIE_COLOR),
        ("Loss", "loss", _LOSS_COLOR),
    ):
        values = [getattr(o, attr) for _, o in computed]
        fig.add_trace(
            go.Bar(
                x=labels,
                y=values,
                marker_color=color,
                text=[format_probability_percentage(v) for v in values],
                hovertemplate=f"%{{x}}<br>{name}: %{{text}}<extra></extra>",
                name=name,
            ),
            row=1,
            col=2,
        )

    best_label = SLOT_LABELS[best] if best is not None else "none"
    fig.update_layout(
        title_text=f"Action outcomes — best: {best_label}",
        title_font_size=15,
        barmode="stack",
        height=420,
        width=980,
    )
    fig.update_yaxes(title_text="EV", col=1)
    fig.update_yaxes(title_text="Probability", range=[0.0, 1.0], col=2)
    return fig


def _build_best_action_hover(
    best: np.ndarray,
    ev: np.ndarray,
    totals: list[int],
    upcards: list[Rank],
) -> list[list[str]]:
    """Return a rows×cols list of hover strings (empty for absent cells)."""
    rows: list[list[str]] = []
    for r, total in enumerate(totals):
        row: list[str] = []
        for c, upcard in enumerate(upcards):
            val = best[r, c]
            if np.isnan(val):
                row.append("")
                continue
            slot = BEST_ACTION_SLOTS[int(val)]
            row.append(
                "<br>".join(
                    [
                        f"Player total: <b>{total}</b>",
                        f"Dealer shows: {rank_to_str(upcard)}",
                        f"Action: <b>{SLOT_LABELS[slot]}</b>",
                        f"EV per unit: {ev[r, c]:+.4f}",
                    ]
                )
            )
        rows.append(row)
    return rows


def build_best_action_lookup_figure(
    best: np.ndarray,
    ev: np.ndarray,
    totals: list[int] | None = None,
    upcards: list[Rank] | None = None,
) -> go.Figure:
    """Build an interactive heatmap of the best action per position.

    Args:
        best:    Matrix from heat_maps.build_best_action_data().
        ev:      Matching EV matrix.
        totals:  Row labels. Defaults to 5–19.
        upcards: Column labels. Defaults to 2–10, A.

    Returns:
        go.Figure with a single heatmap trace.
    """
    totals = DEFAULT_TOTALS if totals is None else totals
    upcards = DEFAULT_UPCARDS if upcards is None else upcards

    z = [[None if np.isnan(v) else v for v in row] for row in best.tolist()]
    fig = go.Figure(
        go.Heatmap(
            z=z,
            x=[rank_to_str(u) for u in upcards],
            y=[str(t) for t in totals],
            colorscale=_ACTION_COLORSCALE,
            zmin=0.0,
            zmax=float(len(BEST_ACTION_SLOTS) - 1),
            text=_build_best_action_hover(best, ev, totals, upcards),
            hovertemplate="%{text}<extra></extra>",
            colorbar={
                "title": "Action",
                "tickvals": list(range(len(BEST_ACTION_SLOTS))),
                "ticktext": [SLOT_LABELS[s] for s in BEST_ACTION_SLOTS],
            },
            name="Best action",
        )
    )
    fig.update_layout(
        title_text="Best action lookup — two-card hard hands",
        title_font_size=15,
        height=560,
        width=720,
    )
    fig.update_xaxes(title_text="Dealer up-card")
    fig.update_yaxes(title_text="Player hard total")
    return fig


# ─── HTML export ───────────────────────────────────────────────────────────────


def save_lookup_html(fig: go.Figure, path: str) -> None:
    """Save a Plotly figure to a self-contained HTML file.

    Plotly JS is loaded from the CDN so the file itself remains compact.

    Args:
        fig:  Any go.Figure produced by this module.
        path: Destination file path (e.g. ``"action_outcomes.html"``).
    """
    fig.write_html(path, include_plotlyjs="cdn")
