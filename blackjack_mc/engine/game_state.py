"""
Game state, candidate player actions, and the hand-resolution policies.

A trial resolves one hand in a fixed order:
    PLAYER_ACTION → DEALER_ACTION → CLASSIFICATION

Rules modelled here:
    - Candidate actions are STAND, HIT(n) and SPLIT(n) for n in 1..3.
      A HIT(n) takes exactly n cards regardless of the running total.
    - SPLIT(n) keeps the first card, discards the second, and continues the
      single remaining hand with n hits. The outcome of that one hand stands
      in for both split hands; across many trials the aggregate converges to
      the two-hand expectation.
    - The dealer draws while the highest achievable total is 16 or less and
      stands on every 17, soft 17 included.
    - Player draws always precede dealer draws from the same shoe.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable

from .cards import Rank, hand_to_str
from .hand import can_split, max_total

# ─── Defaults ─────────────────────────────────────────────────────────────────

DEFAULT_N_DECKS: int = 6
DEFAULT_N_TRIALS: int = 10_000
DEFAULT_BET_SIZE: float = 10.0
MAX_HITS: int = 3
DEALER_STAND_TOTAL: int = 17


# ─── Errors ───────────────────────────────────────────────────────────────────

class AdvisorError(ValueError):
    """Base class for errors surfaced to the caller of the advisor."""


class InvalidGameState(AdvisorError):
    """The inputs parsed, but do not describe a playable blackjack position."""


# ─── Actions ──────────────────────────────────────────────────────────────────

class ActionKind(Enum):
    STAND = auto()
    HIT = auto()
    SPLIT = auto()


@dataclass(frozen=True)
class Action:
    """A candidate player action: STAND, or HIT/SPLIT followed by ``n_hits`` draws."""
    kind: ActionKind
    n_hits: int = 0

    def __post_init__(self) -> None:
        if self.kind == ActionKind.STAND:
            if self.n_hits != 0:
                raise ValueError("STAND takes no hits.")
        elif not 1 <= self.n_hits <= MAX_HITS:
            raise ValueError(
                f"{self.kind.name} needs between 1 and {MAX_HITS} hits, got {self.n_hits}."
            )

    @classmethod
    def stand(cls) -> Action:
        return cls(ActionKind.STAND)

    @classmethod
    def hit(cls, n_hits: int) -> Action:
        return cls(ActionKind.HIT, n_hits)

    @classmethod
    def split(cls, n_hits: int) -> Action:
        return cls(ActionKind.SPLIT, n_hits)

    def __str__(self) -> str:
        if self.kind == ActionKind.STAND:
            return "STAND"
        return f"{self.kind.name}({self.n_hits})"


STAND: Action = Action.stand()
HIT_ACTIONS: tuple[Action, ...] = tuple(Action.hit(n) for n in range(1, MAX_HITS + 1))
SPLIT_ACTIONS: tuple[Action, ...] = tuple(Action.split(n) for n in range(1, MAX_HITS + 1))


# ─── State ────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GameState:
    """Validated inputs for one advisory request.

    Card sequences are normalised to tuples of Rank on construction.
    Call validate() before simulating; compute_action_outcomes() does so.
    """
    player_cards: tuple[Rank, ...]
    dealer_cards: tuple[Rank, ...]
    n_decks: int = DEFAULT_N_DECKS
    bet_size: float = DEFAULT_BET_SIZE
    n_trials: int = DEFAULT_N_TRIALS

    def __post_init__(self) -> None:
        object.__setattr__(self, "player_cards", tuple(Rank(c) for c in self.player_cards))
        object.__setattr__(self, "dealer_cards", tuple(Rank(c) for c in self.dealer_cards))

    def validate(self) -> None:
        """Raise InvalidGameState if any domain invariant is violated."""
        if len(self.player_cards) < 2:
            raise InvalidGameState(
                f"Player needs at least 2 cards, got {len(self.player_cards)}."
            )
        if len(self.dealer_cards) != 1:
            raise InvalidGameState(
                f"Dealer must show exactly 1 card, got {len(self.dealer_cards)}."
            )
        if self.n_decks < 1:
            raise InvalidGameState(f"Number of decks must be at least 1, got {self.n_decks}.")
        if self.n_trials < 1:
            raise InvalidGameState(f"Number of trials must be at least 1, got {self.n_trials}.")
        if not math.isfinite(self.bet_size) or self.bet_size < 0:
            raise InvalidGameState(f"Bet size must be a non-negative number, got {self.bet_size}.")

    def candidate_actions(self) -> tuple[Action, ...]:
        """Actions worth simulating for this hand: SPLIT only on a pair."""
        actions = (STAND, *HIT_ACTIONS)
        if can_split(self.player_cards):
            actions += SPLIT_ACTIONS
        return actions

    def __str__(self) -> str:
        return (
            f"Player: {hand_to_str(self.player_cards)} | "
            f"Dealer: {hand_to_str(self.dealer_cards)} | "
            f"Decks: {self.n_decks} | Bet: {self.bet_size:.2f} | Trials: {self.n_trials:,}"
        )


# ─── Resolution policies ──────────────────────────────────────────────────────

# draw() -> Rank, bound to one trial's shoe and random stream
DrawFn = Callable[[], Rank]


def apply_player_action(
    player_cards: Sequence[Rank],
    action: Action,
    draw: DrawFn,
) -> tuple[Rank, ...]:
    """Play the player's hand according to ``action``.

    Args:
        player_cards: The player's current hand (not modified).
        action:       Action to execute.
        draw:         Callable returning the next card from the trial's shoe.

    Returns:
        The player's final hand.
    """
    cards = list(player_cards)

    if action.kind == ActionKind.STAND:
        return tuple(cards)

    if action.kind == ActionKind.SPLIT:
        # Continue the first card as the only hand; see module docstring.
        del cards[1]

    for _ in range(action.n_hits):
        cards.append(draw())
    return tuple(cards)


def dealer_should_draw(dealer_cards: Sequence[Rank]) -> bool:
    """Return True while the dealer's highest achievable total is 16 or less.

    The highest total counts every ace as 11, bust or not. Soft 17 therefore
    stands, a busted hand stands, and so does a hand like A-5-10 whose best
    total is 16 but whose uncapped maximum is 26.
    """
    return max_total(dealer_cards) < DEALER_STAND_TOTAL


def play_dealer(dealer_cards: Sequence[Rank], draw: DrawFn) -> tuple[Rank, ...]:
    """Draw dealer cards until the hand stands.

    Terminates because every draw adds at least 1 to every achievable total.

    Args:
        dealer_cards: The dealer's visible cards (not modified).
        draw:         Callable returning the next card from the trial's shoe.

    Returns:
        The dealer's final hand.
    """
    cards = list(dealer_cards)
    while dealer_should_draw(cards):
        cards.append(draw())
    return tuple(cards)
