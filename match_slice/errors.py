"""Errors raised while reconstructing a hand from a match state."""

from __future__ import annotations


class MatchSliceError(Exception):
    """Base class for every error the engine raises on bad input."""


class MalformedActionToken(MatchSliceError):
    """A betting-sequence token could not be decoded."""

    def __init__(self, message: str, round: int, offset: int) -> None:
        super().__init__(f"{message} (round {round}, offset {offset})")
        self.round = round
        self.offset = offset


class InvalidSeat(MatchSliceError):
    def __init__(self, seat: int, number_of_players: int) -> None:
        super().__init__(
            f"Seat {seat} is outside the table (0..{number_of_players - 1})"
        )
        self.seat = seat
        self.number_of_players = number_of_players


class InconsistentGameDefinition(MatchSliceError):
    """Per-position or per-round arrays of a game definition disagree."""


class MalformedMatchState(MatchSliceError):
    """A match-state string does not have the MATCHSTATE field layout."""
