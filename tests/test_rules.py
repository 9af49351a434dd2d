"""Tests for blackjack_mc/engine/rules.py — outcome classification."""

from __future__ import annotations

from blackjack_mc.engine.rules import Outcome, classify_outcome
from tests.conftest import hand


class TestClassifyPlayerBust:
    """Rule 1: a busted player loses regardless of the dealer."""

    def test_player_bust_loses(self):
        player = hand('J', '5', '7')   # 22
        dealer = hand('J', '6', 'Q')   # 26
        assert classify_outcome(player, dealer) == Outcome.LOSS

    def test_player_bust_dealer_standing(self):
        player = hand('K', 'Q', '5')   # 25
        dealer = hand('10', '8')       # 18
        assert classify_outcome(player, dealer) == Outcome.LOSS

    def test_both_bust_is_loss(self):
        player = hand('K', 'Q', '2')
        dealer = hand('K', '6', '9')
        assert classify_outcome(player, dealer) == Outcome.LOSS


class TestClassifyDealerBust:
    """Rule 2: a standing player beats a busted dealer."""

    def test_low_player_wins_on_dealer_bust(self):
        player = hand('J', '5')        # 15
        dealer = hand('J', '6', 'Q')   # 26
        assert classify_outcome(player, dealer) == Outcome.WIN

    def test_soft_player_wins_on_dealer_bust(self):
        player = hand('A', '2')
        dealer = hand('10', '6', '8')
        assert classify_outcome(player, dealer) == Outcome.WIN


class TestClassifyComparison:
    """Rule 3: best totals compared."""

    def test_equal_totals_tie(self):
        assert classify_outcome(hand('6', '5'), hand('6', '5')) == Outcome.TIE

    def test_equal_totals_with_aces_tie(self):
        # Both best totals are 12 (6 + 5 + 1)
        assert classify_outcome(hand('6', '5', 'A'), hand('6', '5', 'A')) == Outcome.TIE

    def test_player_higher_wins(self):
        assert classify_outcome(hand('10', '9'), hand('10', '7')) == Outcome.WIN

    def test_dealer_higher_loses(self):
        assert classify_outcome(hand('10', '7'), hand('10', '9')) == Outcome.LOSS

    def test_soft_total_counts_ace_high(self):
        # A-8 = 19 beats 18
        assert classify_outcome(hand('A', '8'), hand('10', '8')) == Outcome.WIN

    def test_blackjack_vs_three_card_21_ties(self):
        # No natural bonus: 21 vs 21 is a tie
        assert classify_outcome(hand('A', 'K'), hand('7', '7', '7')) == Outcome.TIE
