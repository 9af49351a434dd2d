"""Tests for blackjack_mc/engine/cards.py — ranks, values, and string I/O."""

from __future__ import annotations

import pytest

from blackjack_mc.engine.cards import (
    ALL_RANKS,
    N_RANKS,
    RANK_NAMES,
    Rank,
    hand_to_str,
    rank_to_str,
    str_to_rank,
    values_of,
)


class TestRankModel:
    def test_thirteen_ranks(self):
        assert N_RANKS == 13
        assert len(ALL_RANKS) == 13

    def test_numbering_matches_selector(self):
        assert Rank.ACE == 1
        assert Rank.TEN == 10
        assert Rank.KING == 13

    def test_ace_is_dual_valued(self):
        assert values_of(Rank.ACE) == (1, 11)

    @pytest.mark.parametrize("rank", range(2, 10))
    def test_pip_cards_use_face_value(self, rank):
        assert values_of(Rank(rank)) == (rank,)

    @pytest.mark.parametrize("rank", [Rank.TEN, Rank.JACK, Rank.QUEEN, Rank.KING])
    def test_ten_and_faces_worth_ten(self, rank):
        assert values_of(rank) == (10,)

    def test_every_rank_has_values(self):
        for rank in ALL_RANKS:
            assert len(values_of(rank)) >= 1

    def test_values_of_accepts_plain_int(self):
        assert values_of(1) == (1, 11)


class TestStringIO:
    def test_rank_to_str_roundtrip_names(self):
        assert [rank_to_str(r) for r in ALL_RANKS] == RANK_NAMES

    def test_str_to_rank_case_insensitive(self):
        assert str_to_rank('a') == Rank.ACE
        assert str_to_rank(' q ') == Rank.QUEEN

    def test_str_to_rank_ten_aliases(self):
        assert str_to_rank('10') == Rank.TEN
        assert str_to_rank('T') == Rank.TEN

    def test_str_to_rank_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown card rank"):
            str_to_rank('11')

    def test_hand_to_str(self):
        assert hand_to_str((Rank.ACE, Rank.TEN, Rank.JACK)) == 'A 10 J'

    def test_hand_to_str_empty(self):
        assert hand_to_str(()) == ''
