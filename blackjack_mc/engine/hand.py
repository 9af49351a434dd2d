"""
Hand evaluation: achievable totals, best total, and split eligibility.

Every card contributes one of its admissible values (see cards.RANK_VALUES),
so a hand has a *set* of achievable totals: the sums over all choices of one
value per card. Only aces branch, so the set has at most 2**num_aces
entries, and since 1 + 11 repeats across aces it is usually far smaller.

All functions operate on tuples (or any sequence) of Rank values.
"""

from __future__ import annotations

from collections.abc import Sequence

from .cards import Rank, values_of

BLACKJACK: int = 21


def achievable_totals(cards: Sequence[Rank]) -> tuple[int, ...]:
    """Return every total the hand can make, sorted ascending, without duplicates.

    An empty hand has the single total 0.

    Examples:
        >>> achievable_totals((Rank.ACE, Rank.FIVE, Rank.THREE))
        (9, 19)
        >>> achievable_totals((Rank.ACE, Rank.ACE))
        (2, 12, 22)
        >>> achievable_totals((Rank.KING, Rank.SEVEN))
        (17,)
    """
    totals = {0}
    for card in cards:
        totals = {total + value for total in totals for value in values_of(card)}
    return tuple(sorted(totals))


def best_total(cards: Sequence[Rank]) -> int | None:
    """Return the highest achievable total that does not exceed 21.

    Returns:
        Best total <= 21, or None if every achievable total busts.

    Examples:
        >>> best_total((Rank.ACE, Rank.FIVE, Rank.THREE))
        19
        >>> best_total((Rank.JACK, Rank.FIVE, Rank.SEVEN)) is None
        True
    """
    playable = [t for t in achievable_totals(cards) if t <= BLACKJACK]
    return max(playable) if playable else None


def max_total(cards: Sequence[Rank]) -> int:
    """Return the highest achievable total, bust or not.

    This is the quantity the dealer's drawing rule looks at.

    Examples:
        >>> max_total((Rank.ACE, Rank.SIX))
        17
        >>> max_total((Rank.TEN, Rank.SIX, Rank.ACE))
        27
    """
    return achievable_totals(cards)[-1]


def is_bust(cards: Sequence[Rank]) -> bool:
    """Return True if every achievable total exceeds 21."""
    return best_total(cards) is None


def is_soft(cards: Sequence[Rank]) -> bool:
    """Return True if the hand holds an ace that can count as 11 without busting.

    Examples:
        >>> is_soft((Rank.ACE, Rank.SIX))         # soft 17
        True
        >>> is_soft((Rank.ACE, Rank.SIX, Rank.NINE))  # ace must be 1: hard 16
        False
    """
    if Rank.ACE not in cards:
        return False
    hard_total = achievable_totals(cards)[0]  # every ace counted as 1
    return hard_total + 10 <= BLACKJACK


def can_split(cards: Sequence[Rank]) -> bool:
    """Return True if the hand is exactly two cards of the same rank.

    Ten-value cards of different ranks (e.g. K-Q) are not a pair.

    Examples:
        >>> can_split((Rank.EIGHT, Rank.EIGHT))
        True
        >>> can_split((Rank.KING, Rank.QUEEN))
        False
    """
    return len(cards) == 2 and cards[0] == cards[1]
