"""
Card ranks, point values, and human-readable I/O helpers.

Rank encoding (IntEnum 1–13):
    1=A, 2=2, ..., 9=9, 10=10, 11=J, 12=Q, 13=K

Suits play no part in blackjack totals, so cards are identified by rank
only. The numbering matches the 1–13 card selector used by the dashboard.
String representations are used exclusively at I/O boundaries.
"""

from __future__ import annotations

from enum import IntEnum


class Rank(IntEnum):
    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13


ALL_RANKS: tuple[Rank, ...] = tuple(Rank)
N_RANKS: int = len(ALL_RANKS)

RANK_NAMES: list[str] = ['A', '2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K']

# Admissible point values per rank. Ace is the only dual-valued rank.
RANK_VALUES: dict[Rank, tuple[int, ...]] = {
    Rank.ACE: (1, 11),
    Rank.TWO: (2,),
    Rank.THREE: (3,),
    Rank.FOUR: (4,),
    Rank.FIVE: (5,),
    Rank.SIX: (6,),
    Rank.SEVEN: (7,),
    Rank.EIGHT: (8,),
    Rank.NINE: (9,),
    Rank.TEN: (10,),
    Rank.JACK: (10,),
    Rank.QUEEN: (10,),
    Rank.KING: (10,),
}


def values_of(rank: Rank) -> tuple[int, ...]:
    """Return the admissible point values of a rank.

    Examples:
        >>> values_of(Rank.ACE)
        (1, 11)
        >>> values_of(Rank.QUEEN)
        (10,)
    """
    return RANK_VALUES[Rank(rank)]


def rank_to_str(rank: Rank) -> str:
    """Convert a rank to its short display name.

    Examples:
        >>> rank_to_str(Rank.ACE)
        'A'
        >>> rank_to_str(Rank.TEN)
        '10'
    """
    return RANK_NAMES[int(rank) - 1]


def str_to_rank(s: str) -> Rank:
    """Parse a short rank name ('A', '2'-'10', 'T', 'J', 'Q', 'K').

    Matching is case-insensitive and ignores surrounding whitespace.

    Raises:
        ValueError: If the text is not a known rank name.

    Examples:
        >>> str_to_rank('a')
        <Rank.ACE: 1>
        >>> str_to_rank('T')
        <Rank.TEN: 10>
    """
    name = s.strip().upper()
    if name == 'T':
        name = '10'
    if name not in RANK_NAMES:
        raise ValueError(f"Unknown card rank: {s!r}")
    return Rank(RANK_NAMES.index(name) + 1)


def hand_to_str(cards: tuple[Rank, ...]) -> str:
    """Convert a hand to a space-separated string.

    Examples:
        >>> hand_to_str((Rank.ACE, Rank.KING))
        'A K'
    """
    return ' '.join(rank_to_str(c) for c in cards)
