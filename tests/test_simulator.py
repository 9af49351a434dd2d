"""
Tests for blackjack_mc/analysis/simulator.py

Covers:
    - TrialCounts / ProbabilityOutcome / ActionOutcomeReport structure
    - run_trials(): deterministic runs with a scripted source, template safety,
      exhausted-shoe fallback
    - simulate_action(): probability and EV invariants, known positions
    - compute_action_outcomes(): slot filling, split eligibility, seeding
    - parallel trials: count conservation across worker processes
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from blackjack_mc.analysis.simulator import (
    SLOT_FOR_ACTION,
    ActionOutcomeReport,
    ProbabilityOutcome,
    TrialCounts,
    _partition_trials,
    compute_action_outcomes,
    run_trials,
    simulate_action,
)
from blackjack_mc.engine.deck import NumpyRandomSource, build_deck_from_hands, cards_remaining
from blackjack_mc.engine.game_state import (
    HIT_ACTIONS,
    SPLIT_ACTIONS,
    STAND,
    Action,
    GameState,
    InvalidGameState,
)
from tests.conftest import ScriptedRandomSource, hand


def _state(player=('10', '7'), dealer=('6',), n_decks=1, bet_size=10.0, n_trials=50) -> GameState:
    return GameState(
        player_cards=hand(*player),
        dealer_cards=hand(*dealer),
        n_decks=n_decks,
        bet_size=bet_size,
        n_trials=n_trials,
    )


# ─── Result types ─────────────────────────────────────────────────────────────


class TestTrialCounts:
    def test_total(self):
        assert TrialCounts(3, 2, 1).total == 6

    def test_combine_is_elementwise_sum(self):
        assert TrialCounts(1, 2, 3).combine(TrialCounts(4, 5, 6)) == TrialCounts(5, 7, 9)

    def test_combine_order_independent(self):
        a, b, c = TrialCounts(1, 0, 2), TrialCounts(0, 3, 1), TrialCounts(2, 2, 2)
        assert a.combine(b).combine(c) == c.combine(a).combine(b)


class TestProbabilityOutcome:
    def test_neutral_default(self):
        outcome = ProbabilityOutcome()
        assert outcome.estimated_value == 0.0
        assert outcome.win == 0.5
        assert outcome.loss == 0.5
        assert outcome.tie == 0.0
        assert not outcome.computed

    def test_from_counts(self):
        outcome = ProbabilityOutcome.from_counts(TrialCounts(5, 3, 2), bet_size=100.0)
        assert outcome.win == 0.5
        assert outcome.loss == 0.3
        assert outcome.tie == 0.2
        assert outcome.estimated_value == 100.0 * (0.5 - 0.3)
        assert outcome.n_trials == 10
        assert outcome.computed

    def test_from_zero_counts_raises(self):
        with pytest.raises(ValueError):
            ProbabilityOutcome.from_counts(TrialCounts(), bet_size=1.0)

    def test_win_ci_contains_estimate(self):
        outcome = ProbabilityOutcome.from_counts(TrialCounts(40, 50, 10), bet_size=1.0)
        low, high = outcome.win_ci_95()
        assert 0.0 <= low < outcome.win < high <= 1.0

    def test_win_ci_width_matches_normal_approximation(self):
        outcome = ProbabilityOutcome.from_counts(TrialCounts(50, 50, 0), bet_size=1.0)
        low, high = outcome.win_ci_95()
        assert math.isclose(high - low, 2 * 1.959964 * math.sqrt(0.25 / 100), rel_tol=1e-5)

    def test_ev_ci_contains_estimate(self):
        outcome = ProbabilityOutcome.from_counts(TrialCounts(45, 45, 10), bet_size=10.0)
        low, high = outcome.ev_ci_95(10.0)
        assert low < outcome.estimated_value < high

    def test_default_intervals_are_uninformative(self):
        assert ProbabilityOutcome().win_ci_95() == (0.0, 1.0)
        assert ProbabilityOutcome().ev_ci_95(5.0) == (-5.0, 5.0)


class TestActionOutcomeReport:
    def test_seven_neutral_slots(self):
        report = ActionOutcomeReport()
        slots = list(report.items())
        assert len(slots) == 7
        assert all(not o.computed for _, o in slots)

    def test_slots_are_distinct_objects(self):
        report = ActionOutcomeReport()
        assert report.stand is not report.hit_once

    def test_slot_order(self):
        assert [slot for slot, _ in ActionOutcomeReport().items()] == [
            "stand",
            "hit_once",
            "hit_twice",
            "hit_thrice",
            "split_hit_once",
            "split_hit_twice",
            "split_hit_thrice",
        ]

    def test_best_action_none_when_nothing_ran(self):
        assert ActionOutcomeReport().best_action() is None

    def test_best_action_picks_highest_ev(self):
        report = ActionOutcomeReport(
            stand=ProbabilityOutcome(-2.0, 0.4, 0.6, 0.0, 10),
            hit_once=ProbabilityOutcome(1.0, 0.55, 0.45, 0.0, 10),
            hit_twice=ProbabilityOutcome(-5.0, 0.2, 0.7, 0.1, 10),
        )
        assert report.best_action() == "hit_once"

    def test_best_action_ignores_uncomputed_slots(self):
        # Neutral split slots have EV 0 but must not beat a computed negative EV.
        report = ActionOutcomeReport(stand=ProbabilityOutcome(-1.0, 0.4, 0.5, 0.1, 10))
        assert report.best_action() == "stand"

    def test_best_action_tie_keeps_earlier_slot(self):
        report = ActionOutcomeReport(
            stand=ProbabilityOutcome(1.0, 0.5, 0.4, 0.1, 10),
            hit_once=ProbabilityOutcome(1.0, 0.5, 0.4, 0.1, 10),
        )
        assert report.best_action() == "stand"

    def test_reports_compare_by_value(self):
        assert ActionOutcomeReport() == ActionOutcomeReport()
        assert ActionOutcomeReport() != ActionOutcomeReport(stand=ProbabilityOutcome(1.0, 0.6, 0.4, 0.0, 10))


# ─── run_trials ───────────────────────────────────────────────────────────────


class TestRunTrials:
    def test_scripted_stand_ties(self, lowest_card_rng):
        # Index 0 always draws an ace: dealer 6 + A = soft 17 vs player 17.
        template = build_deck_from_hands(1, hand('10', '7'), hand('6'))
        counts = run_trials(hand('10', '7'), hand('6'), template, STAND, 5, lowest_card_rng)
        assert counts == TrialCounts(0, 0, 5)

    def test_scripted_hit_wins(self, lowest_card_rng):
        # Player 10-7 + A = 18; dealer 6 + A = 17.
        template = build_deck_from_hands(1, hand('10', '7'), hand('6'))
        counts = run_trials(hand('10', '7'), hand('6'), template, Action.hit(1), 4, lowest_card_rng)
        assert counts == TrialCounts(4, 0, 0)

    def test_player_draws_before_dealer(self):
        # Player 2-3 hits once; the first drawn card must go to the player.
        template = np.zeros(13, dtype=np.int64)
        template[9] = 1   # one ten
        template[6] = 1   # one seven
        # Index 1 → the ten (cumsum: sevens at 0, ten at 1); index 0 → the seven.
        rng = ScriptedRandomSource([1, 0])
        counts = run_trials(hand('2', '3'), hand('K'), template, Action.hit(1), 1, rng)
        # Player 2-3-10 = 15, dealer K-7 = 17 → loss
        assert counts == TrialCounts(0, 1, 0)

    def test_template_not_modified(self):
        template = build_deck_from_hands(1, hand('10', '7'), hand('6'))
        before = template.copy()
        run_trials(hand('10', '7'), hand('6'), template, Action.hit(3), 20, NumpyRandomSource(3))
        assert np.array_equal(template, before)
        assert cards_remaining(template) == 49

    def test_counts_sum_to_trials(self):
        template = build_deck_from_hands(2, hand('9', '4'), hand('Q'))
        counts = run_trials(hand('9', '4'), hand('Q'), template, Action.hit(1), 300, NumpyRandomSource(11))
        assert counts.total == 300

    def test_exhausted_shoe_falls_back_and_completes(self):
        # Empty shoe: every draw yields the fallback ace without raising.
        template = np.zeros(13, dtype=np.int64)
        counts = run_trials(hand('10', '7'), hand('6'), template, Action.hit(1), 3, NumpyRandomSource(0))
        # Player 10-7-A = 18, dealer 6-A = 17
        assert counts == TrialCounts(3, 0, 0)

    def test_low_hand_standing_loses_more_than_it_wins(self):
        template = build_deck_from_hands(10, hand('2', '3'), hand('6'))
        counts = run_trials(hand('2', '3'), hand('6'), template, STAND, 5_000, NumpyRandomSource(1))
        assert counts.losses > counts.wins
        assert counts.ties == 0


# ─── simulate_action ──────────────────────────────────────────────────────────


class TestSimulateAction:
    def test_probabilities_sum_to_one(self):
        outcome = simulate_action(_state(n_trials=777), Action.hit(2), NumpyRandomSource(5))
        assert math.isclose(outcome.win + outcome.loss + outcome.tie, 1.0)

    def test_ev_formula(self):
        state = _state(bet_size=37.5, n_trials=500)
        outcome = simulate_action(state, STAND, NumpyRandomSource(8))
        assert outcome.estimated_value == state.bet_size * (outcome.win - outcome.loss)

    def test_probabilities_in_unit_interval(self):
        outcome = simulate_action(_state(n_trials=200), Action.hit(1), NumpyRandomSource(2))
        for p in (outcome.win, outcome.loss, outcome.tie):
            assert 0.0 <= p <= 1.0

    def test_zero_bet_zero_ev(self):
        outcome = simulate_action(_state(bet_size=0.0, n_trials=100), STAND, NumpyRandomSource(2))
        assert outcome.estimated_value == 0.0

    def test_natural_standing_never_loses(self):
        state = _state(player=('A', 'J'), dealer=('6',), n_decks=10, bet_size=100.0, n_trials=10_000)
        outcome = simulate_action(state, STAND, NumpyRandomSource(2024))
        assert outcome.loss == 0.0
        assert 0.0 < outcome.win < 1.0
        assert 0.0 < outcome.tie < 1.0
        assert outcome.win > outcome.loss

    def test_natural_hitting_mixes_outcomes(self):
        state = _state(player=('A', 'J'), dealer=('6',), n_decks=10, bet_size=100.0, n_trials=10_000)
        outcome = simulate_action(state, Action.hit(1), NumpyRandomSource(99))
        for p in (outcome.win, outcome.loss, outcome.tie):
            assert 0.0 < p < 1.0

    def test_hitting_hard_twenty_three_times_always_busts(self):
        # 10-10 plus three cards is at least 23.
        state = _state(player=('10', 'K'), n_decks=4, n_trials=200)
        outcome = simulate_action(state, Action.hit(3), NumpyRandomSource(4))
        assert outcome.loss == 1.0
        assert outcome.estimated_value == -state.bet_size

    def test_invalid_state_raises(self):
        with pytest.raises(InvalidGameState):
            simulate_action(_state(n_trials=0), STAND)

    def test_scripted_source_is_deterministic(self):
        state = _state(n_trials=5)
        outcome = simulate_action(state, STAND, ScriptedRandomSource([0]))
        assert outcome.tie == 1.0
        assert outcome.estimated_value == 0.0


# ─── compute_action_outcomes ──────────────────────────────────────────────────


class TestComputeActionOutcomes:
    def test_non_pair_leaves_split_slots_neutral(self):
        report = compute_action_outcomes(_state(n_trials=100), seed=1)
        for action in (STAND, *HIT_ACTIONS):
            assert getattr(report, SLOT_FOR_ACTION[action]).n_trials == 100
        for action in SPLIT_ACTIONS:
            slot = getattr(report, SLOT_FOR_ACTION[action])
            assert slot == ProbabilityOutcome()

    def test_pair_fills_all_seven_slots(self):
        report = compute_action_outcomes(_state(player=('8', '8'), dealer=('10',), n_trials=100), seed=1)
        assert all(outcome.computed for _, outcome in report.items())

    def test_every_computed_slot_sums_to_one(self):
        report = compute_action_outcomes(_state(player=('9', '9'), n_trials=150), seed=3)
        for _, outcome in report.items():
            assert math.isclose(outcome.win + outcome.loss + outcome.tie, 1.0)

    def test_same_seed_reproducible(self):
        state = _state(player=('A', '7'), dealer=('9',), n_trials=300)
        a = compute_action_outcomes(state, seed=42)
        b = compute_action_outcomes(state, seed=42)
        assert a == b

    def test_rng_takes_precedence_over_seed(self):
        state = _state(n_trials=5)
        report = compute_action_outcomes(state, rng=ScriptedRandomSource([0]), seed=123)
        assert report.stand.tie == 1.0

    def test_invalid_state_raises_before_simulating(self):
        with pytest.raises(InvalidGameState):
            compute_action_outcomes(_state(dealer=()))

    def test_best_action_for_hard_twenty_is_stand(self):
        report = compute_action_outcomes(_state(player=('10', 'K'), dealer=('7',), n_decks=6, n_trials=2_000), seed=7)
        assert report.best_action() == "stand"

    def test_state_validated_once_per_report(self, monkeypatch):
        calls = []
        original = GameState.validate

        def counting_validate(state):
            calls.append(state)
            original(state)

        monkeypatch.setattr(GameState, "validate", counting_validate)
        report = compute_action_outcomes(_state(player=('8', '8'), n_trials=5), seed=1)
        assert report.split_hit_thrice.computed
        assert len(calls) == 1

    def test_simulate_action_still_validates(self):
        with pytest.raises(InvalidGameState):
            simulate_action(_state(n_trials=0), STAND, NumpyRandomSource(0))


# ─── Parallel trials ──────────────────────────────────────────────────────────


class TestPartitionTrials:
    def test_even_split(self):
        assert _partition_trials(100, 4) == [25, 25, 25, 25]

    def test_remainder_spread_over_first_units(self):
        assert _partition_trials(10, 3) == [4, 3, 3]

    def test_more_units_than_trials(self):
        assert _partition_trials(2, 5) == [1, 1]


class TestParallel:
    def test_parallel_counts_conserved(self):
        state = _state(player=('8', '8'), dealer=('6',), n_trials=401)
        report = compute_action_outcomes(state, seed=5, n_workers=2)
        for _, outcome in report.items():
            assert outcome.n_trials == 401
            assert math.isclose(outcome.win + outcome.loss + outcome.tie, 1.0)

    def test_parallel_single_action(self):
        outcome = simulate_action(_state(n_trials=200), STAND, NumpyRandomSource(6), n_workers=2)
        assert outcome.n_trials == 200

    def test_parallel_needs_spawnable_source(self):
        with pytest.raises(ValueError, match="NumpyRandomSource"):
            simulate_action(_state(n_trials=20), STAND, ScriptedRandomSource([0]), n_workers=2)
