"""Best-action heat maps for two-card hard hands.

One public data-builder runs the Monte Carlo advisor over a grid of
positions and returns NumPy matrices:

    build_best_action_data(...)  — (best_action_index, best_ev) matrices

One public plot function renders a matplotlib figure:

    plot_best_action_heatmap(best, ev, ...)  — annotated best-action grid

Matrix convention:
    Shape  : (len(totals), len(upcards)) — rows = player hard totals,
             cols = dealer up-cards
    best   : index into BEST_ACTION_SLOTS (0=STAND, 1..3=HIT n times)
    ev     : EV of the best action per unit bet
             np.nan = position not simulated

Each row uses a fixed representative two-card hand for its total (see
_REPRESENTATIVE_HANDS); pairs are avoided so split slots never compete.
"""

from __future__ import annotations

import matplotlib
import matplotlib.colors
import matplotlib.figure
import matplotlib.pyplot as plt
import numpy as np

from blackjack_mc.analysis.simulator import compute_action_outcomes
from blackjack_mc.engine.cards import Rank, rank_to_str
from blackjack_mc.engine.deck import NumpyRandomSource
from blackjack_mc.engine.game_state import DEFAULT_N_DECKS, GameState

# ─── Constants ────────────────────────────────────────────────────────────────

BEST_ACTION_SLOTS: list[str] = ["stand", "hit_once", "hit_twice", "hit_thrice"]
_ACTION_SHORT: list[str] = ["S", "H1", "H2", "H3"]

_REPRESENTATIVE_HANDS: dict[int, tuple[Rank, Rank]] = {
    5: (Rank.TWO, Rank.THREE),
    6: (Rank.TWO, Rank.FOUR),
    7: (Rank.TWO, Rank.FIVE),
    8: (Rank.TWO, Rank.SIX),
    9: (Rank.TWO, Rank.SEVEN),
    10: (Rank.TWO, Rank.EIGHT),
    11: (Rank.TWO, Rank.NINE),
    12: (Rank.TWO, Rank.TEN),
    13: (Rank.THREE, Rank.TEN),
    14: (Rank.FOUR, Rank.TEN),
    15: (Rank.FIVE, Rank.TEN),
    16: (Rank.SIX, Rank.TEN),
    17: (Rank.SEVEN, Rank.TEN),
    18: (Rank.EIGHT, Rank.TEN),
    19: (Rank.NINE, Rank.TEN),
}

DEFAULT_TOTALS: list[int] = sorted(_REPRESENTATIVE_HANDS)
DEFAULT_UPCARDS: list[Rank] = [
    Rank.TWO, Rank.THREE, Rank.FOUR, Rank.FIVE, Rank.SIX,
    Rank.SEVEN, Rank.EIGHT, Rank.NINE, Rank.TEN, Rank.ACE,
]

_NAN_COLOR: str = "#cccccc"


def _make_action_cmap() -> matplotlib.colors.ListedColormap:
    """Red=STAND, shades of green=HIT 1..3, grey=absent (NaN)."""
    return matplotlib.colors.ListedColormap(
        ["#d62728", "#98df8a", "#2ca02c", "#1a6b1a"]
    ).with_extremes(bad=_NAN_COLOR)


_ACTION_CMAP: matplotlib.colors.Colormap = _make_action_cmap()


def representative_hand(total: int) -> tuple[Rank, Rank]:
    """Return the two-card hard hand used to represent ``total``.

    Raises:
        ValueError: If no representative hand exists for the total.
    """
    if total not in _REPRESENTATIVE_HANDS:
        raise ValueError(
            f"No representative hand for total {total}; "
            f"choose from {DEFAULT_TOTALS[0]}–{DEFAULT_TOTALS[-1]}."
        )
    return _REPRESENTATIVE_HANDS[total]


# ─── Data builder ─────────────────────────────────────────────────────────────


def build_best_action_data(
    totals: list[int] | None = None,
    upcards: list[Rank] | None = None,
    *,
    n_trials: int = 2_000,
    n_decks: int = DEFAULT_N_DECKS,
    seed: int | None = 42,
) -> tuple[np.ndarray, np.ndarray]:
    """Simulate every (total, up-card) position and record the best action.

    EVs are per unit bet (bet_size = 1).

    Args:
        totals:   Player hard totals (rows). Defaults to 5–19.
        upcards:  Dealer up-cards (columns). Defaults to 2–10, A.
        n_trials: Trials per action per position.
        n_decks:  Shoe size.
        seed:     Seed for the shared NumpyRandomSource; None for a
                  non-deterministic run.

    Returns:
        (best, ev) float64 matrices of shape (len(totals), len(upcards)).
    """
    totals = DEFAULT_TOTALS if totals is None else totals
    upcards = DEFAULT_UPCARDS if upcards is None else upcards
    rng = NumpyRandomSource(seed)

    best = np.full((len(totals), len(upcards)), np.nan)
    ev = np.full((len(totals), len(upcards)), np.nan)

    for r, total in enumerate(totals):
        player = representative_hand(total)
        for c, upcard in enumerate(upcards):
            state = GameState(
                player_cards=player,
                dealer_cards=(upcard,),
                n_decks=n_decks,
                bet_size=1.0,
                n_trials=n_trials,
            )
            report = compute_action_outcomes(state, rng=rng)
            slot = report.best_action()
            if slot is None:
                continue
            best[r, c] = BEST_ACTION_SLOTS.index(slot)
            ev[r, c] = getattr(report, slot).estimated_value

    return best, ev


# ─── Plot ─────────────────────────────────────────────────────────────────────


def plot_best_action_heatmap(
    best: np.ndarray,
    ev: np.ndarray,
    totals: list[int] | None = None,
    upcards: list[Rank] | None = None,
    *,
    title: str = "Best action by EV (two-card hard hands)",
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Render the best-action grid with S/H1/H2/H3 and EV annotations.

    Args:
        best:      Matrix from build_best_action_data(); NaN=absent.
        ev:        Matching EV matrix.
        totals:    Row labels (player totals). Defaults to 5–19.
        upcards:   Column labels (dealer up-cards). Defaults to 2–10, A.
        title:     Axes title.
        show:      If True, call plt.show() after rendering.
        save_path: If not None, save the figure to this path before showing.

    Returns:
        matplotlib.figure.Figure.
    """
    totals = DEFAULT_TOTALS if totals is None else totals
    upcards = DEFAULT_UPCARDS if upcards is None else upcards

    fig, ax = plt.subplots(figsize=(1.0 + 0.7 * len(upcards), 1.0 + 0.45 * len(totals)))
    ax.imshow(
        np.ma.masked_invalid(best),
        cmap=_ACTION_CMAP,
        vmin=-0.5,
        vmax=len(BEST_ACTION_SLOTS) - 0.5,
        aspect="auto",
    )

    ax.set_xticks(range(len(upcards)))
    ax.set_xticklabels([rank_to_str(u) for u in upcards], fontsize=9)
    ax.set_yticks(range(len(totals)))
    ax.set_yticklabels([str(t) for t in totals], fontsize=9)
    ax.set_xlabel("Dealer up-card", fontsize=9)
    ax.set_ylabel("Player hard total", fontsize=9)
    ax.set_title(title, fontsize=11, fontweight="bold")

    for r in range(best.shape[0]):
        for c in range(best.shape[1]):
            val = best[r, c]
            if np.isnan(val):
                continue
            ax.text(
                c,
                r,
                f"{_ACTION_SHORT[int(val)]}\n{ev[r, c]:+.2f}",
                ha="center",
                va="center",
                fontsize=7,
                color="white" if int(val) != 1 else "black",
                fontweight="bold",
            )

    plt.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=120)
    if show:
        plt.show()

    return fig


# ─── Entry point ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    matplotlib.use("Agg")

    n_trials = int(sys.argv[1]) if len(sys.argv) > 1 else 2_000
    print(f"Simulating best actions ({n_trials:,} trials per action) …")
    best, ev = build_best_action_data(n_trials=n_trials)
    plot_best_action_heatmap(best, ev, show=False, save_path="best_action.png")
    print("Saved: best_action.png")
