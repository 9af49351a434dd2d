"""
Deck creation and card dealing operations.

The deck is a numpy int64 array of length 13 holding the number of cards
of each rank still in the shoe:
    deck[rank - 1] = remaining copies of that rank

A shoe of N standard decks starts with 4 * N copies of every rank. Drawing
is weighted by the remaining counts, which is equivalent to picking one
physical card uniformly at random from the shoe.

Randomness is injected through the RandomSource protocol (a single
``randbelow(n)`` operation) so simulations can be replayed with a scripted
source in tests.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np

from .cards import N_RANKS, Rank

# Returned when a draw is requested from an empty shoe. The simulation never
# exhausts a shoe under the GameState invariants; this keeps the trial
# loop total rather than signalling an error mid-trial.
EXHAUSTED_DECK_RANK: Rank = Rank.ACE


class RandomSource(Protocol):
    """Capability contract for the engine's only source of randomness."""

    def randbelow(self, n: int) -> int:
        """Return an unbiased integer in [0, n)."""
        ...


class NumpyRandomSource:
    """RandomSource backed by a ``numpy.random.Generator``.

    Args:
        seed: None for a non-deterministic stream, an int or SeedSequence for
              a reproducible one, or an existing Generator to wrap.
    """

    def __init__(
        self,
        seed: int | np.random.SeedSequence | np.random.Generator | None = None,
    ) -> None:
        if isinstance(seed, np.random.Generator):
            self._gen = seed
        else:
            self._gen = np.random.default_rng(seed)

    def randbelow(self, n: int) -> int:
        return int(self._gen.integers(n))

    def spawn(self, n_children: int) -> list[NumpyRandomSource]:
        """Return independent child streams, one per unit of parallel work."""
        return [NumpyRandomSource(child) for child in self._gen.spawn(n_children)]


def create_deck(n_decks: int = 1) -> np.ndarray:
    """Create a full shoe of ``n_decks`` standard 52-card decks.

    Returns:
        np.ndarray: int64 array of shape (13,), every entry 4 * n_decks.

    Raises:
        ValueError: If n_decks < 1.

    Examples:
        >>> deck = create_deck(2)
        >>> int(deck.sum())
        104
    """
    if n_decks < 1:
        raise ValueError(f"A shoe needs at least one deck, got {n_decks}.")
    return np.full(N_RANKS, 4 * n_decks, dtype=np.int64)


def cards_remaining(deck: np.ndarray) -> int:
    """Return the number of cards left in the shoe.

    Examples:
        >>> cards_remaining(create_deck())
        52
    """
    return int(deck.sum())


def remove_known(deck: np.ndarray, rank: Rank) -> None:
    """Take a known card (already in a hand) out of the shoe.

    Removing a rank with no copies left is a silent no-op, so listing the
    same card twice never drives a count negative.

    Args:
        deck: Mutable deck array, modified in place.
        rank: Rank of the card to remove.

    Examples:
        >>> deck = create_deck()
        >>> remove_known(deck, Rank.KING)
        >>> int(deck[Rank.KING - 1])
        3
    """
    position = int(rank) - 1
    if deck[position] > 0:
        deck[position] -= 1


def draw_card(deck: np.ndarray, rng: RandomSource) -> Rank:
    """Draw one random card from the shoe and remove it.

    The card is chosen with probability proportional to the remaining count
    of its rank.

    Degraded paths (never expected under valid game states):
        - Empty shoe: EXHAUSTED_DECK_RANK is returned and no count changes.
        - Random source raises OSError or returns an index outside
          [0, cards_remaining): the lowest rank with cards left is drawn.

    Args:
        deck: Mutable deck array, modified in place.
        rng:  RandomSource used to pick the card.

    Returns:
        The drawn rank.
    """
    total = cards_remaining(deck)
    if total == 0:
        return EXHAUSTED_DECK_RANK

    try:
        index = rng.randbelow(total)
    except OSError:
        index = -1

    if 0 <= index < total:
        position = int(np.searchsorted(np.cumsum(deck), index, side='right'))
    else:
        position = int(np.flatnonzero(deck)[0])

    deck[position] -= 1
    return Rank(position + 1)


def build_deck_from_hands(n_decks: int, *hands: tuple[Rank, ...]) -> np.ndarray:
    """Create a shoe with every card of the given hands already removed.

    Args:
        n_decks: Number of standard decks in the shoe.
        *hands:  Any number of rank tuples (player hand, dealer up-card, ...).

    Returns:
        np.ndarray: deck template with the known cards taken out.

    Examples:
        >>> deck = build_deck_from_hands(1, (Rank.ACE, Rank.KING), (Rank.SIX,))
        >>> cards_remaining(deck)
        49
    """
    deck = create_deck(n_decks)
    for hand in hands:
        for rank in hand:
            remove_known(deck, rank)
    return deck
