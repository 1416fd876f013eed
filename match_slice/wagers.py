"""Pot and wager sizes as of the current point of a match state.

Wager amounts are "to" amounts: the total the acting position would have put
in during the current round after making the wager.
"""

from __future__ import annotations

from fractions import Fraction
from numbers import Real
from typing import Union

from match_slice.engine import HandSnapshot, pot_at_start_of_round, replay
from match_slice.models import GameDefinition, MatchState

__all__ = [
    "all_in",
    "minimum_wager_to",
    "no_limit",
    "pot_after_call",
    "pot_at_start_of_round",
    "pot_fraction_wager_to",
]


def no_limit(game_def: GameDefinition) -> bool:
    return game_def.no_limit


def _pot_after_call(snapshot: HandSnapshot) -> int:
    seat = snapshot.acting_seat
    if seat is None:
        return snapshot.pot
    return snapshot.pot + snapshot.amount_to_call(seat)


def _all_in(snapshot: HandSnapshot) -> int:
    seat = snapshot.acting_seat
    return seat.all_in_amount if seat is not None else 0


def pot_after_call(state: MatchState, game_def: GameDefinition) -> int:
    """Pot size if the position to act called the current street high."""
    return _pot_after_call(replay(state, game_def))


def minimum_wager_to(state: MatchState, game_def: GameDefinition) -> int:
    """Smallest legal raise-to amount for the position to act.

    No-limit raises must grow the street high by at least the largest raise
    of the round (the big blind before anyone raised); limit raises grow it by
    the round's fixed size.  A position that cannot cover that goes all-in.
    """
    snapshot = replay(state, game_def)
    if snapshot.acting_seat is None:
        return 0
    if game_def.no_limit:
        increment = snapshot.min_increment
    else:
        increment = game_def.raise_sizes[snapshot.round]
    return min(snapshot.street_high + increment, _all_in(snapshot))


def pot_fraction_wager_to(
    state: MatchState,
    game_def: GameDefinition,
    fraction: Union[Real, Fraction, str] = 1,
) -> int:
    """Raise-to amount that matches the street high and adds *fraction* of the pot.

    The pot is taken after the acting position's call.  Fractional chips are
    truncated toward zero; the result is neither raised to the legal minimum
    nor capped at the stack.
    """
    snapshot = replay(state, game_def)
    share = Fraction(str(fraction)) * _pot_after_call(snapshot)
    return snapshot.street_high + int(share)


def all_in(state: MatchState, game_def: GameDefinition) -> int:
    """Raise-to amount that commits the acting position's whole stack."""
    return _all_in(replay(state, game_def))
