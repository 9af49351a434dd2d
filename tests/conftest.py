"""
Shared pytest fixtures for blackjack advisor tests.

Provides a hand() helper for building hands from rank names and scripted
random sources for deterministic engine runs.
"""

from __future__ import annotations

import numpy as np
import pytest

from blackjack_mc.engine.cards import Rank, str_to_rank
from blackjack_mc.engine.deck import create_deck


def hand(*rank_strs: str) -> tuple[Rank, ...]:
    """Build a hand tuple from rank names.

    Examples:
        >>> hand('A', 'K')
        (<Rank.ACE: 1>, <Rank.KING: 13>)
    """
    return tuple(str_to_rank(s) for s in rank_strs)


def draws(*rank_strs: str):
    """Return a draw() callable yielding the given ranks in order."""
    return iter(hand(*rank_strs)).__next__


class ScriptedRandomSource:
    """RandomSource returning a fixed, cycling sequence of indices.

    Index 0 always draws the lowest rank still in the shoe.
    """

    def __init__(self, indices: list[int]) -> None:
        self._indices = list(indices)
        self._pos = 0
        self.calls: list[int] = []

    def randbelow(self, n: int) -> int:
        self.calls.append(n)
        value = self._indices[self._pos % len(self._indices)]
        self._pos += 1
        return value


class FailingRandomSource:
    """RandomSource whose entropy source is unavailable."""

    def randbelow(self, n: int) -> int:
        raise OSError("entropy source unavailable")


@pytest.fixture
def fresh_deck() -> np.ndarray:
    """Return a full single-deck shoe."""
    return create_deck(1)


@pytest.fixture
def lowest_card_rng() -> ScriptedRandomSource:
    """Random source that always draws the lowest remaining rank."""
    return ScriptedRandomSource([0])


@pytest.fixture
def h():
    """Expose the hand() helper as a fixture for convenience."""
    return hand
