"""Contribution accounting for a hand replayed from its betting sequence.

Every query rebuilds the hand from the blinds and the decoded tokens, so
there is no engine state that outlives a call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from match_slice.actions import Action, ActionKind, Token, parse_betting_sequence
from match_slice.errors import InvalidSeat, MalformedActionToken
from match_slice.models import GameDefinition, MatchState

logger = logging.getLogger(__name__)


class SeatState:
    """Chips committed by one position, round by round."""

    def __init__(self, position: int, starting_stack: int) -> None:
        self.position = position
        self.starting_stack = starting_stack
        self.contributions: list[int] = [0]
        self.folded: bool = False

    @property
    def bet_this_round(self) -> int:
        return self.contributions[-1]

    @property
    def previous_rounds(self) -> int:
        """Chips committed before the current round."""
        return sum(self.contributions[:-1])

    @property
    def total_contribution(self) -> int:
        return sum(self.contributions)

    @property
    def current_stack(self) -> int:
        return self.starting_stack - self.total_contribution

    @property
    def all_in(self) -> bool:
        return self.current_stack <= 0

    @property
    def is_active(self) -> bool:
        """Still in the hand and can act."""
        return not self.folded and not self.all_in

    @property
    def all_in_amount(self) -> int:
        """Round contribution that would exhaust the stack."""
        return self.starting_stack - self.previous_rounds

    def reset_for_new_round(self) -> None:
        self.contributions.append(0)

    def commit_to(self, round_total: int) -> int:
        """Bring this round's contribution to *round_total*, capped at the stack.

        Returns the chips actually added.
        """
        target = min(round_total, self.all_in_amount)
        added = target - self.bet_this_round
        self.contributions[-1] = target
        return added

    def __repr__(self) -> str:
        return (
            f"SeatState(position={self.position}, contributions={self.contributions}, "
            f"folded={self.folded}, all_in={self.all_in})"
        )


@dataclass(frozen=True)
class HandSnapshot:
    """Result of replaying a hand up to the last token of a match state."""

    round: int
    seats: tuple[SeatState, ...]
    actions: tuple[Action, ...]
    street_high: int
    min_increment: int  # largest raise increment of the round so far
    action_on: Optional[int]  # position to act next, None when nobody can

    @property
    def pot(self) -> int:
        return sum(s.total_contribution for s in self.seats)

    @property
    def acting_seat(self) -> Optional[SeatState]:
        return self.seats[self.action_on] if self.action_on is not None else None

    def amount_to_call(self, seat: SeatState) -> int:
        return max(0, min(self.street_high, seat.all_in_amount) - seat.bet_this_round)

    def pot_at_start_of_round(self, round: int) -> int:
        return sum(sum(s.contributions[:round]) for s in self.seats)


class HandReplay:
    """Folds the tokens of a betting sequence into per-position contributions."""

    def __init__(self, game_def: GameDefinition) -> None:
        self.game_def = game_def
        self.seats: list[SeatState] = [
            SeatState(position, stack)
            for position, stack in enumerate(game_def.chip_stacks)
        ]
        self.round: int = 0
        self.street_high: int = 0
        self.min_increment: int = self._opening_increment()
        self.action_on: Optional[int] = None
        self.actions: list[Action] = []

        self._post_blinds()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def _opening_increment(self) -> int:
        return max(self.game_def.big_blind, 1)

    def _players_in_hand(self) -> list[int]:
        """Indices of non-folded positions."""
        return [i for i, s in enumerate(self.seats) if not s.folded]

    def _next_seat(self, idx: int, include_self: bool = False) -> Optional[int]:
        """Find the next position after idx that can act, wrapping around."""
        if len(self._players_in_hand()) < 2:
            return None
        n = len(self.seats)
        start = 0 if include_self else 1
        for offset in range(start, n + start):
            i = (idx + offset) % n
            if self.seats[i].is_active:
                return i
        return None

    def snapshot(self) -> HandSnapshot:
        return HandSnapshot(
            round=self.round,
            seats=tuple(self.seats),
            actions=tuple(self.actions),
            street_high=self.street_high,
            min_increment=self.min_increment,
            action_on=self.action_on,
        )

    # ------------------------------------------------------------------
    # Round management
    # ------------------------------------------------------------------

    def _post_blinds(self) -> None:
        for seat, blind in zip(self.seats, self.game_def.blinds):
            seat.commit_to(blind)
        self.street_high = max(s.bet_this_round for s in self.seats)
        self.action_on = self._next_seat(self.game_def.first_position(0), include_self=True)

    def start_round(self, round: int) -> None:
        for seat in self.seats:
            seat.reset_for_new_round()
        self.round = round
        self.street_high = 0
        self.min_increment = self._opening_increment()
        self.action_on = self._next_seat(
            self.game_def.first_position(round), include_self=True
        )

    # ------------------------------------------------------------------
    # Action processing
    # ------------------------------------------------------------------

    def apply(self, token: Token) -> Action:
        if self.action_on is None:
            raise MalformedActionToken(
                f"No position left to take {token.text!r}", self.round, token.offset
            )
        seat = self.seats[self.action_on]
        street_high = self.street_high
        to_call = max(0, street_high - seat.bet_this_round)

        if token.kind == ActionKind.FOLD:
            seat.folded = True
        elif token.kind == ActionKind.CALL:
            seat.commit_to(street_high)
        else:
            self._do_raise(seat, token)

        action = Action(
            round=self.round,
            position=seat.position,
            kind=token.kind,
            token=token.text,
            street_high=street_high,
            to_call=to_call,
            wager_to=seat.bet_this_round,
        )
        self.actions.append(action)
        self.action_on = self._next_seat(seat.position)
        return action

    def _do_raise(self, seat: SeatState, token: Token) -> None:
        """Raise to the token's hand total, or by the fixed increment in limit."""
        if token.amount is not None:
            round_total = token.amount - seat.previous_rounds
        elif self.game_def.no_limit:
            raise MalformedActionToken(
                "Raise without an amount in a no-limit game", self.round, token.offset
            )
        else:
            round_total = self.street_high + self.game_def.raise_sizes[self.round]

        seat.commit_to(round_total)
        raise_size = seat.bet_this_round - self.street_high
        if raise_size > 0:
            self.min_increment = max(self.min_increment, raise_size)
            self.street_high = seat.bet_this_round


def replay(state: MatchState, game_def: GameDefinition) -> HandSnapshot:
    """Rebuild the hand described by *state* from a zero state."""
    if state.viewing_seat >= game_def.number_of_players:
        raise InvalidSeat(state.viewing_seat, game_def.number_of_players)

    rounds = parse_betting_sequence(state.betting_sequence)
    if len(rounds) > game_def.number_of_rounds:
        raise MalformedActionToken(
            f"Game has only {game_def.number_of_rounds} rounds",
            len(rounds) - 1,
            0,
        )

    hand = HandReplay(game_def)
    for round, tokens in enumerate(rounds):
        if round > 0:
            hand.start_round(round)
        for token in tokens:
            hand.apply(token)

    logger.debug(
        "Replayed hand %d to round %d: %d actions, pot %d, action on %s",
        state.hand_number,
        hand.round,
        len(hand.actions),
        sum(s.total_contribution for s in hand.seats),
        hand.action_on,
    )
    return hand.snapshot()


def decode_actions(state: MatchState, game_def: GameDefinition) -> list[Action]:
    """Tokens of the betting sequence attributed to the positions that took them."""
    return list(replay(state, game_def).actions)


def pot_at_start_of_round(
    state: MatchState, game_def: GameDefinition, round: Optional[int] = None
) -> int:
    """Chips in the pot before any action of *round* (default: current round)."""
    snapshot = replay(state, game_def)
    if round is None:
        round = snapshot.round
    if round < 0:
        raise ValueError(f"Round must be non-negative, got {round}")
    return snapshot.pot_at_start_of_round(round)
