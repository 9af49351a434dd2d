"""
Outcome classification for a fully played hand.

Classification priority (highest to lowest):
    1. Player bust (no total <= 21)  → LOSS (even if the dealer also busts)
    2. Dealer bust                   → WIN
    3. Best-total comparison         → WIN / LOSS / TIE
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum, auto

from .cards import Rank
from .hand import best_total, is_bust


class Outcome(Enum):
    WIN = auto()
    LOSS = auto()
    TIE = auto()


def classify_outcome(
    player_cards: Sequence[Rank],
    dealer_cards: Sequence[Rank],
) -> Outcome:
    """Determine the outcome of a fully played hand.

    Args:
        player_cards: Player's final hand.
        dealer_cards: Dealer's final hand, after the dealer policy has run.

    Returns:
        Outcome from the player's perspective.

    Examples:
        >>> classify_outcome((Rank.JACK, Rank.FIVE), (Rank.JACK, Rank.SIX, Rank.QUEEN))
        <Outcome.WIN: 1>
        >>> classify_outcome((Rank.SIX, Rank.FIVE), (Rank.SIX, Rank.FIVE))
        <Outcome.TIE: 3>
    """
    # ── Rule 1: Player bust loses, whatever the dealer holds ──────────────────
    if is_bust(player_cards):
        return Outcome.LOSS

    # ── Rule 2: Dealer bust ───────────────────────────────────────────────────
    if is_bust(dealer_cards):
        return Outcome.WIN

    # ── Rule 3: Total comparison ──────────────────────────────────────────────
    player_best = best_total(player_cards)
    dealer_best = best_total(dealer_cards)
    if player_best > dealer_best:
        return Outcome.WIN
    if dealer_best > player_best:
        return Outcome.LOSS
    return Outcome.TIE

