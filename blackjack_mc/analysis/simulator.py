"""
Monte Carlo action-outcome simulator for a single blackjack position.

For a known position (player cards, dealer up-card, shoe size, bet), every
candidate action is played out many times against a freshly copied shoe and
the dealer's fixed drawing rule. Win/loss/tie counts are reduced into
probabilities and an expected value per action:

    EV = bet × (P(win) − P(loss))      (ties return the bet)

Up to seven actions are simulated: STAND, HIT(1..3) and, for a pair only,
SPLIT(1..3). Split slots of a non-pair hand keep the neutral default
(EV 0, win 0.5, loss 0.5, tie 0).

Trials are independent. With n_workers > 1 each action's trials are
partitioned across worker processes; each unit owns a spawned numpy stream
and its own shoe copies, and the per-unit (wins, losses, ties) counts are
summed afterwards.
"""

from __future__ import annotations

import functools
import math
from concurrent.futures import Executor, ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Iterator, NamedTuple

import numpy as np
from scipy import stats

from blackjack_mc.engine.cards import Rank
from blackjack_mc.engine.deck import (
    NumpyRandomSource,
    RandomSource,
    build_deck_from_hands,
    draw_card,
)
from blackjack_mc.engine.game_state import (
    HIT_ACTIONS,
    SPLIT_ACTIONS,
    STAND,
    Action,
    GameState,
    apply_player_action,
    play_dealer,
)
from blackjack_mc.engine.rules import Outcome, classify_outcome

# ─── Result types ─────────────────────────────────────────────────────────────


class TrialCounts(NamedTuple):
    """Raw tallies from a batch of trials."""

    wins: int = 0
    losses: int = 0
    ties: int = 0

    @property
    def total(self) -> int:
        return self.wins + self.losses + self.ties

    def combine(self, other: TrialCounts) -> TrialCounts:
        return TrialCounts(
            self.wins + other.wins,
            self.losses + other.losses,
            self.ties + other.ties,
        )


@dataclass
class ProbabilityOutcome:
    """Estimated outcome distribution and EV for one action.

    Attributes:
        estimated_value: bet × (win − loss), in the bet's currency.
        win:             Fraction of trials the player won.
        loss:            Fraction of trials the player lost.
        tie:             Fraction of trials that tied.
        n_trials:        Trials behind the estimate; 0 for the neutral default.
    """

    estimated_value: float = 0.0
    win: float = 0.5
    loss: float = 0.5
    tie: float = 0.0
    n_trials: int = 0

    @classmethod
    def from_counts(cls, counts: TrialCounts, bet_size: float) -> ProbabilityOutcome:
        n = counts.total
        if n == 0:
            raise ValueError("Cannot estimate probabilities from zero trials.")
        win = counts.wins / n
        loss = counts.losses / n
        tie = counts.ties / n
        return cls(
            estimated_value=bet_size * (win - loss),
            win=win,
            loss=loss,
            tie=tie,
            n_trials=n,
        )

    @property
    def computed(self) -> bool:
        return self.n_trials > 0

    def win_ci_95(self) -> tuple[float, float]:
        """Normal-approximation 95% confidence interval for the win probability."""
        if not self.computed:
            return (0.0, 1.0)
        z = float(stats.norm.ppf(0.975))
        margin = z * math.sqrt(self.win * (1.0 - self.win) / self.n_trials)
        return (max(0.0, self.win - margin), min(1.0, self.win + margin))

    def ev_ci_95(self, bet_size: float) -> tuple[float, float]:
        """Normal-approximation 95% confidence interval for the EV.

        Per-trial payouts are +bet, −bet or 0, so the payout variance is
        bet² × (win + loss) − EV².
        """
        if not self.computed:
            return (-bet_size, bet_size)
        variance = bet_size ** 2 * (self.win + self.loss) - self.estimated_value ** 2
        z = float(stats.norm.ppf(0.975))
        margin = z * math.sqrt(max(variance, 0.0) / self.n_trials)
        return (self.estimated_value - margin, self.estimated_value + margin)


# Report slot for each action, in display order.
SLOT_FOR_ACTION: dict[Action, str] = {
    STAND: "stand",
    HIT_ACTIONS[0]: "hit_once",
    HIT_ACTIONS[1]: "hit_twice",
    HIT_ACTIONS[2]: "hit_thrice",
    SPLIT_ACTIONS[0]: "split_hit_once",
    SPLIT_ACTIONS[1]: "split_hit_twice",
    SPLIT_ACTIONS[2]: "split_hit_thrice",
}

SLOT_LABELS: dict[str, str] = {
    "stand": "Stand",
    "hit_once": "Hit once",
    "hit_twice": "Hit twice",
    "hit_thrice": "Hit three times",
    "split_hit_once": "Split, hit once",
    "split_hit_twice": "Split, hit twice",
    "split_hit_thrice": "Split, hit three times",
}


@dataclass
class ActionOutcomeReport:
    """Outcome estimates for all seven candidate actions."""

    stand: ProbabilityOutcome = field(default_factory=ProbabilityOutcome)
    hit_once: ProbabilityOutcome = field(default_factory=ProbabilityOutcome)
    hit_twice: ProbabilityOutcome = field(default_factory=ProbabilityOutcome)
    hit_thrice: ProbabilityOutcome = field(default_factory=ProbabilityOutcome)
    split_hit_once: ProbabilityOutcome = field(default_factory=ProbabilityOutcome)
    split_hit_twice: ProbabilityOutcome = field(default_factory=ProbabilityOutcome)
    split_hit_thrice: ProbabilityOutcome = field(default_factory=ProbabilityOutcome)

    def items(self) -> Iterator[tuple[str, ProbabilityOutcome]]:
        """Yield (slot_name, outcome) pairs in display order."""
        for slot in SLOT_FOR_ACTION.values():
            yield slot, getattr(self, slot)

    def best_action(self) -> str | None:
        """Return the computed slot with the highest EV, or None if none ran.

        Ties keep the earlier slot in display order (stand before hits).
        """
        best_slot: str | None = None
        best_ev = -math.inf
        for slot, outcome in self.items():
            if outcome.computed and outcome.estimated_value > best_ev:
                best_slot, best_ev = slot, outcome.estimated_value
        return best_slot


# ─── Core trial loop ──────────────────────────────────────────────────────────


def run_trials(
    player_cards: tuple[Rank, ...],
    dealer_cards: tuple[Rank, ...],
    deck_template: np.ndarray,
    action: Action,
    n_trials: int,
    rng: RandomSource,
) -> TrialCounts:
    """Play ``n_trials`` independent hands and tally the outcomes.

    Each trial copies the shoe template, plays the player's action, then the
    dealer's policy from the same copy, and classifies the result. The
    template itself is never modified.

    Args:
        player_cards:  Player's known hand.
        dealer_cards:  Dealer's known card(s).
        deck_template: Shoe with the known cards already removed.
        action:        Player action to evaluate.
        n_trials:      Number of trials to run.
        rng:           Random source for every draw in this batch.

    Returns:
        TrialCounts with wins + losses + ties == n_trials.
    """
    wins = losses = ties = 0

    for _ in range(n_trials):
        deck = deck_template.copy()
        draw = functools.partial(draw_card, deck, rng)

        final_player = apply_player_action(player_cards, action, draw)
        final_dealer = play_dealer(dealer_cards, draw)

        outcome = classify_outcome(final_player, final_dealer)
        if outcome == Outcome.WIN:
            wins += 1
        elif outcome == Outcome.LOSS:
            losses += 1
        else:
            ties += 1

    return TrialCounts(wins, losses, ties)


def _partition_trials(n_trials: int, n_units: int) -> list[int]:
    """Split n_trials into at most n_units non-empty, near-equal batches."""
    base, extra = divmod(n_trials, n_units)
    sizes = [base + (1 if i < extra else 0) for i in range(n_units)]
    return [s for s in sizes if s > 0]


def _run_trials_parallel(
    state: GameState,
    deck_template: np.ndarray,
    action: Action,
    rng: RandomSource,
    n_workers: int,
    pool: Executor,
) -> TrialCounts:
    if not isinstance(rng, NumpyRandomSource):
        raise ValueError("Parallel runs need a NumpyRandomSource to spawn worker streams.")

    sizes = _partition_trials(state.n_trials, n_workers)
    streams = rng.spawn(len(sizes))
    futures = [
        pool.submit(
            run_trials,
            state.player_cards,
            state.dealer_cards,
            deck_template,
            action,
            size,
            stream,
        )
        for size, stream in zip(sizes, streams)
    ]

    counts = TrialCounts()
    for future in futures:
        counts = counts.combine(future.result())
    return counts


# ─── Public API ───────────────────────────────────────────────────────────────


def simulate_action(
    state: GameState,
    action: Action,
    rng: RandomSource | None = None,
    n_workers: int = 1,
    pool: Executor | None = None,
) -> ProbabilityOutcome:
    """Estimate the outcome distribution and EV of one action.

    Args:
        state:     Game state (validated here).
        action:    Player action to evaluate.
        rng:       Random source. Defaults to a fresh non-deterministic
                   NumpyRandomSource.
        n_workers: Worker processes to spread the trials over. 1 runs
                   everything in-process.
        pool:      Existing executor to reuse when n_workers > 1.

    Returns:
        ProbabilityOutcome over state.n_trials trials.

    Raises:
        InvalidGameState: If the state violates a domain invariant.
    """
    state.validate()
    if rng is None:
        rng = NumpyRandomSource()
    return _simulate_validated(state, action, rng, n_workers, pool)


def _simulate_validated(
    state: GameState,
    action: Action,
    rng: RandomSource,
    n_workers: int,
    pool: Executor | None,
) -> ProbabilityOutcome:
    deck_template = build_deck_from_hands(
        state.n_decks, state.player_cards, state.dealer_cards
    )

    if n_workers <= 1:
        counts = run_trials(
            state.player_cards,
            state.dealer_cards,
            deck_template,
            action,
            state.n_trials,
            rng,
        )
    elif pool is not None:
        counts = _run_trials_parallel(state, deck_template, action, rng, n_workers, pool)
    else:
        with ProcessPoolExecutor(max_workers=n_workers) as own_pool:
            counts = _run_trials_parallel(
                state, deck_template, action, rng, n_workers, own_pool
            )

    return ProbabilityOutcome.from_counts(counts, state.bet_size)


def compute_action_outcomes(
    state: GameState,
    rng: RandomSource | None = None,
    seed: int | None = None,
    n_workers: int = 1,
) -> ActionOutcomeReport:
    """Simulate every candidate action for a position and collect the results.

    STAND and HIT(1..3) are always simulated; SPLIT(1..3) only when the
    player holds a pair. Unsimulated slots keep their neutral default.

    Args:
        state:     Game state; must satisfy the GameState invariants.
        rng:       Random source shared by all actions. Takes precedence
                   over ``seed``.
        seed:      Seed for a NumpyRandomSource when ``rng`` is None.
                   None for a non-deterministic run.
        n_workers: Worker processes per action (1 = sequential).

    Returns:
        ActionOutcomeReport with one ProbabilityOutcome per slot.

    Raises:
        InvalidGameState: If the state violates a domain invariant.
    """
    state.validate()
    if rng is None:
        rng = NumpyRandomSource(seed)

    report = ActionOutcomeReport()
    actions = state.candidate_actions()

    if n_workers <= 1:
        for action in actions:
            outcome = _simulate_validated(state, action, rng, 1, None)
            setattr(report, SLOT_FOR_ACTION[action], outcome)
        return report

    with ProcessPoolExecutor(max_workers=n_workers) as pool:
        for action in actions:
            outcome = _simulate_validated(state, action, rng, n_workers, pool)
            setattr(report, SLOT_FOR_ACTION[action], outcome)
    return report


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from blackjack_mc.analysis.report import print_action_report

    demo = GameState(
        player_cards=(Rank.EIGHT, Rank.EIGHT),
        dealer_cards=(Rank.TEN,),
        n_decks=6,
        bet_size=10.0,
        n_trials=50_000,
    )
    print(f"Blackjack Monte Carlo advisor — {demo.n_trials:,} trials per action\n")
    print_action_report(demo, compute_action_outcomes(demo, seed=42))
