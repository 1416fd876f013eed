"""Per-seat views of a hand, rotated to a viewer's seat."""

from __future__ import annotations

from typing import Optional, Sequence

from match_slice.engine import replay
from match_slice.errors import InvalidSeat
from match_slice.models import GameDefinition, MatchState, PlayerView


def position_of(seat: int, viewing_seat: int, state: MatchState, n: int) -> int:
    """In-hand position of a table seat, given the viewer sits at viewing_seat."""
    return (seat + state.viewing_seat - viewing_seat) % n


def _hole_cards(
    state: MatchState, game_def: GameDefinition, position: int, folded: bool
) -> str:
    """Cards shown for a position; folded hands are mucked, even the viewer's."""
    if folded:
        return ""
    cards = state.hole_cards[position] if position < len(state.hole_cards) else ""
    if position == state.viewing_seat or cards:
        return cards
    return "_" * game_def.number_of_hole_cards


def players(
    state: MatchState,
    game_def: GameDefinition,
    viewing_seat: int,
    names: Sequence[str],
    settled_balances: Optional[Sequence[int]] = None,
) -> list[PlayerView]:
    """One view per seat, starting with *viewing_seat* and going round the table.

    *names* and *settled_balances* are indexed by table seat.  A settled
    balance is what the seat was awarded when the hand was settled; it is
    reported as the seat's winnings and added to its balance.
    """
    n = game_def.number_of_players
    if not 0 <= viewing_seat < n:
        raise InvalidSeat(viewing_seat, n)
    if len(names) != n:
        raise ValueError(f"Expected {n} player names, got {len(names)}")
    if settled_balances is not None and len(settled_balances) != n:
        raise ValueError(f"Expected {n} settled balances, got {len(settled_balances)}")

    snapshot = replay(state, game_def)

    views: list[PlayerView] = []
    for i in range(n):
        seat = (viewing_seat + i) % n
        position = position_of(seat, viewing_seat, state, n)
        s = snapshot.seats[position]
        winnings = settled_balances[seat] if settled_balances is not None else 0
        views.append(
            PlayerView(
                name=names[seat],
                seat=seat,
                chip_stack=s.current_stack,
                chip_contributions=list(s.contributions),
                chip_balance=winnings - s.total_contribution,
                hole_cards=_hole_cards(state, game_def, position, s.folded),
                winnings=winnings,
            )
        )
    return views
