"""
Boundary adapter: raw user input → validated GameState.

The dashboard collects cards from selectors that may be left on a "no card"
placeholder, and numeric fields as free text. This module:

    1. drops placeholder card entries,
    2. parses the numeric fields (decks and trials as integers, bet as a real),
       raising MalformedInput that names the failing field,
    3. builds a GameState and re-checks its invariants, raising
       InvalidGameState.

Accepted card entries:
    Rank / int 1–13  → that rank (1 = Ace, 11–13 = J, Q, K)
    'A', '2'–'10', 'T', 'J', 'Q', 'K' (any case)
    None, '', -1, '-', '—' → placeholder, ignored
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from blackjack_mc.engine.cards import Rank, str_to_rank
from blackjack_mc.engine.game_state import AdvisorError, GameState

CardEntry = Rank | int | str | None

PLACEHOLDER_CARDS: frozenset = frozenset({None, "", "-", "—", -1})

EXPECT_INTEGER: str = "integer"
EXPECT_REAL: str = "real"

# Largest accepted values for the integer fields (unsigned 8- and 32-bit).
MAX_N_DECKS: int = 2 ** 8 - 1
MAX_N_TRIALS: int = 2 ** 32 - 1


class MalformedInput(AdvisorError):
    """A numeric field could not be parsed as the required type.

    Attributes:
        field:    Name of the offending field, e.g. 'n_decks'.
        expected: 'integer' or 'real'.
        value:    The raw text that failed to parse.
    """

    def __init__(self, field: str, expected: str, value: str) -> None:
        self.field = field
        self.expected = expected
        self.value = value
        super().__init__(f"{field}: expected {expected} number, got {value!r}.")


@dataclass
class RawGameInput:
    """Unparsed inputs as collected by a UI."""
    player_cards: list[CardEntry] = field(default_factory=list)
    dealer_cards: list[CardEntry] = field(default_factory=list)
    n_decks: str = "6"
    bet_size: str = "10"
    n_trials: str = "10000"


# ─── Parsing helpers ──────────────────────────────────────────────────────────

def _is_placeholder(entry: CardEntry) -> bool:
    if isinstance(entry, str):
        return entry.strip() in PLACEHOLDER_CARDS
    return entry in PLACEHOLDER_CARDS


def parse_card(entry: CardEntry) -> Rank:
    """Convert one non-placeholder card entry to a Rank.

    Raises:
        ValueError: If the entry is not a known rank.

    Examples:
        >>> parse_card(1)
        <Rank.ACE: 1>
        >>> parse_card('q')
        <Rank.QUEEN: 12>
    """
    if isinstance(entry, str):
        return str_to_rank(entry)
    if isinstance(entry, int) and not isinstance(entry, bool):
        return Rank(entry)
    raise ValueError(f"Unknown card entry: {entry!r}")


def parse_cards(entries: Iterable[CardEntry]) -> tuple[Rank, ...]:
    """Drop placeholder entries and convert the rest to Ranks, keeping order."""
    return tuple(parse_card(e) for e in entries if not _is_placeholder(e))


def parse_int_field(name: str, text: str, maximum: int | None = None) -> int:
    """Parse a non-negative integer field; raise MalformedInput otherwise.

    Only plain digit strings are accepted, so '1.5', '-3' and '1e3' are all
    malformed. Values above ``maximum`` are malformed too.
    """
    stripped = str(text).strip()
    if not (stripped.isascii() and stripped.isdigit()):
        raise MalformedInput(name, EXPECT_INTEGER, str(text))
    value = int(stripped)
    if maximum is not None and value > maximum:
        raise MalformedInput(name, EXPECT_INTEGER, str(text))
    return value


def parse_real_field(name: str, text: str) -> float:
    """Parse a finite real field; raise MalformedInput otherwise."""
    try:
        value = float(str(text).strip())
    except ValueError:
        raise MalformedInput(name, EXPECT_REAL, str(text)) from None
    if not math.isfinite(value):
        raise MalformedInput(name, EXPECT_REAL, str(text))
    return value


# ─── Public API ───────────────────────────────────────────────────────────────

def parse_game_input(raw: RawGameInput) -> GameState:
    """Turn raw UI input into a validated GameState.

    Raises:
        MalformedInput:   A numeric field did not parse.
        InvalidGameState: The parsed values do not form a playable position.
        ValueError:       A card entry is neither a rank nor a placeholder.
    """
    n_decks = parse_int_field("n_decks", raw.n_decks, MAX_N_DECKS)
    bet_size = parse_real_field("bet_size", raw.bet_size)
    n_trials = parse_int_field("n_trials", raw.n_trials, MAX_N_TRIALS)

    state = GameState(
        player_cards=parse_cards(raw.player_cards),
        dealer_cards=parse_cards(raw.dealer_cards),
        n_decks=n_decks,
        bet_size=bet_size,
        n_trials=n_trials,
    )
    state.validate()
    return state
