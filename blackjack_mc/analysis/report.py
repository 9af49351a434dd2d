"""Plain-text report for an ActionOutcomeReport.

    format_estimated_value(value)         — '$12.50' / '-$3.00'
    format_probability_percentage(p)      — '47.25%'
    format_interval(bounds, formatter)    — '-$1.20 to $6.20'
    action_rows(report, bet_size)         — one dict of display strings per simulated action
    format_action_table(report, bet_size) — list of table lines
    print_action_report(state, report)    — header + table + recommendation
"""

from __future__ import annotations

from collections.abc import Callable

from blackjack_mc.analysis.simulator import SLOT_LABELS, ActionOutcomeReport
from blackjack_mc.engine.game_state import GameState

_RULE_WIDTH: int = 108


def format_estimated_value(value: float) -> str:
    """Format an EV as a dollar amount with a leading minus for losses.

    Examples:
        >>> format_estimated_value(12.5)
        '$12.50'
        >>> format_estimated_value(-3.0)
        '-$3.00'
    """
    if value < 0:
        return f"-${-value:.2f}"
    return f"${value:.2f}"


def format_probability_percentage(probability: float) -> str:
    """Format a probability in [0, 1] as a percentage with two decimals.

    Examples:
        >>> format_probability_percentage(0.4725)
        '47.25%'
    """
    return f"{probability * 100:.2f}%"


def format_interval(bounds: tuple[float, float], formatter: Callable[[float], str]) -> str:
    """Format a (low, high) interval with the given value formatter.

    Examples:
        >>> format_interval((-1.2, 6.2), format_estimated_value)
        '-$1.20 to $6.20'
    """
    low, high = bounds
    return f"{formatter(low)} to {formatter(high)}"


def action_rows(report: ActionOutcomeReport, bet_size: float) -> list[dict[str, str]]:
    """Display strings for every simulated action, in slot order.

    Each row carries the EV and win probability with their 95% confidence
    intervals, plus the loss and tie probabilities. ``bet_size`` must be the
    bet the report was simulated with.
    """
    rows = []
    for slot, outcome in report.items():
        if not outcome.computed:
            continue
        rows.append({
            "Action": SLOT_LABELS[slot],
            "EV": format_estimated_value(outcome.estimated_value),
            "EV 95% CI": format_interval(outcome.ev_ci_95(bet_size), format_estimated_value),
            "Win": format_probability_percentage(outcome.win),
            "Win 95% CI": format_interval(outcome.win_ci_95(), format_probability_percentage),
            "Loss": format_probability_percentage(outcome.loss),
            "Tie": format_probability_percentage(outcome.tie),
        })
    return rows


def format_action_table(
    report: ActionOutcomeReport,
    bet_size: float,
    include_uncomputed: bool = False,
) -> list[str]:
    """Return the per-action table as a list of lines.

    Args:
        report:             Report to format.
        bet_size:           Bet the report was simulated with (for the EV interval).
        include_uncomputed: If True, also list slots that were not simulated
                            (split slots for a non-pair hand), marked 'n/a'.
    """
    lines = [
        f"  {'Action':<24}{'EV':>10}{'EV 95% CI':>22}{'Win':>10}{'Win 95% CI':>20}{'Loss':>10}{'Tie':>10}",
        f"  {'-' * 22:<24}{'-' * 8:>10}{'-' * 20:>22}{'-' * 8:>10}{'-' * 18:>20}{'-' * 8:>10}{'-' * 8:>10}",
    ]
    computed = {row["Action"]: row for row in action_rows(report, bet_size)}
    for slot, _ in report.items():
        label = SLOT_LABELS[slot]
        row = computed.get(label)
        if row is None:
            if include_uncomputed:
                lines.append(f"  {label:<24}{'n/a':>10}")
            continue
        lines.append(
            f"  {label:<24}{row['EV']:>10}{row['EV 95% CI']:>22}"
            f"{row['Win']:>10}{row['Win 95% CI']:>20}{row['Loss']:>10}{row['Tie']:>10}"
        )
    return lines


def print_action_report(state: GameState, report: ActionOutcomeReport) -> None:
    """Print the position, the per-action table, and the recommended action.

    Args:
        state:  The simulated game state.
        report: Result of compute_action_outcomes(state).
    """
    print("=" * _RULE_WIDTH)
    print("Action Outcomes")
    print("=" * _RULE_WIDTH)
    print(f"  {state}")
    print()
    for line in format_action_table(report, state.bet_size):
        print(line)
    print()

    best = report.best_action()
    if best is None:
        print("  No action was simulated.")
    else:
        best_outcome = getattr(report, best)
        ci = format_interval(best_outcome.ev_ci_95(state.bet_size), format_estimated_value)
        print(
            f"  Best action: {SLOT_LABELS[best]}  "
            f"(EV {format_estimated_value(best_outcome.estimated_value)}, 95% CI {ci})"
        )
    print()
