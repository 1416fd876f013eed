"""Pydantic models for game definitions, match states and player views."""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from match_slice.errors import InconsistentGameDefinition, MalformedMatchState


class BettingType(str, Enum):
    LIMIT = "limit"
    NOLIMIT = "nolimit"


# --- Game definition ---


class GameDefinition(BaseModel):
    """Static rules of a game, indexed by in-hand position and by round."""

    model_config = ConfigDict(frozen=True)

    betting_type: BettingType = BettingType.LIMIT
    number_of_players: Optional[int] = None  # inferred from chip_stacks
    first_player_positions: tuple[int, ...]
    chip_stacks: tuple[int, ...]
    blinds: tuple[int, ...]
    raise_sizes: tuple[int, ...] = ()  # limit only
    max_number_of_wagers: tuple[int, ...] = ()
    number_of_suits: int = 4
    number_of_ranks: int = 13
    number_of_hole_cards: int = 2
    number_of_board_cards: tuple[int, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _infer_number_of_players(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("number_of_players") is None:
            data = {**data, "number_of_players": len(data.get("chip_stacks") or ())}
        return data

    @model_validator(mode="after")
    def _check_consistency(self) -> GameDefinition:
        n = self.number_of_players
        if n is None or n < 2:
            raise InconsistentGameDefinition(
                f"A game needs at least 2 players, got {n}"
            )
        if len(self.chip_stacks) != n or len(self.blinds) != n:
            raise InconsistentGameDefinition(
                f"Expected {n} chip stacks and blinds, got "
                f"{len(self.chip_stacks)} and {len(self.blinds)}"
            )
        if not self.first_player_positions:
            raise InconsistentGameDefinition("A game needs at least one round")
        if any(p < 0 for p in self.first_player_positions):
            raise InconsistentGameDefinition("First player positions must be non-negative")
        if any(b < 0 for b in self.blinds) or any(s < 0 for s in self.chip_stacks):
            raise InconsistentGameDefinition("Blinds and chip stacks must be non-negative")

        rounds = len(self.first_player_positions)
        if self.raise_sizes and len(self.raise_sizes) != rounds:
            raise InconsistentGameDefinition(
                f"Expected {rounds} raise sizes, got {len(self.raise_sizes)}"
            )
        if self.betting_type == BettingType.LIMIT and not self.raise_sizes:
            raise InconsistentGameDefinition("Limit games need a raise size per round")
        if self.max_number_of_wagers and len(self.max_number_of_wagers) != rounds:
            raise InconsistentGameDefinition(
                f"Expected {rounds} wager caps, got {len(self.max_number_of_wagers)}"
            )
        return self

    @property
    def number_of_rounds(self) -> int:
        return len(self.first_player_positions)

    @property
    def big_blind(self) -> int:
        return max(self.blinds)

    @property
    def no_limit(self) -> bool:
        return self.betting_type == BettingType.NOLIMIT

    def first_position(self, round: int) -> int:
        """Position that opens the betting in *round*.

        ``first_player_positions`` counts positions from 1, as ``.game``
        files do; 0 is read as the first position.
        """
        return max(self.first_player_positions[round] - 1, 0) % self.number_of_players


# --- Match state ---


class MatchState(BaseModel):
    """One point-in-time view of a hand, as sent to the player at viewing_seat.

    ``viewing_seat`` is the viewer's position in this hand; ``hole_cards``
    holds one string per position, empty where the cards are hidden.
    """

    model_config = ConfigDict(frozen=True)

    LABEL: ClassVar[str] = "MATCHSTATE"
    HAND_SEPARATOR: ClassVar[str] = "|"
    BOARD_SEPARATOR: ClassVar[str] = "/"

    viewing_seat: int = Field(..., ge=0)
    hand_number: int = Field(default=0, ge=0)
    betting_sequence: str = ""
    hole_cards: tuple[str, ...] = ()
    board_cards: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> MatchState:
        """Split a ``MATCHSTATE:<pos>:<hand>:<betting>:<cards>`` string."""
        fields = text.strip().split(":")
        if len(fields) != 5 or fields[0] != cls.LABEL:
            raise MalformedMatchState(f"Not a match state: {text!r}")
        label, position, hand_number, betting, cards = fields
        if not position.isdigit() or not hand_number.isdigit():
            raise MalformedMatchState(
                f"Position and hand number must be integers: {text!r}"
            )
        hands, *boards = cards.split(cls.BOARD_SEPARATOR)
        return cls(
            viewing_seat=int(position),
            hand_number=int(hand_number),
            betting_sequence=betting,
            hole_cards=tuple(hands.split(cls.HAND_SEPARATOR)),
            board_cards=tuple(boards),
        )

    def __str__(self) -> str:
        cards = self.HAND_SEPARATOR.join(self.hole_cards)
        if self.board_cards:
            cards += self.BOARD_SEPARATOR + self.BOARD_SEPARATOR.join(self.board_cards)
        return ":".join(
            [self.LABEL, str(self.viewing_seat), str(self.hand_number), self.betting_sequence, cards]
        )


# --- Response / state models ---


class PlayerView(BaseModel):
    """Per-seat snapshot handed to the player-facing layer."""

    name: str
    seat: int
    chip_stack: int
    chip_contributions: list[int]
    chip_balance: int
    hole_cards: str
    winnings: int = 0


class GameDefinitionSummary(BaseModel):
    name: str
    betting_type: BettingType
    number_of_players: int


class SliceResponse(BaseModel):
    """Every derived quantity for one match state."""

    hand_number: int
    round: int
    betting_sequence: str
    no_limit: bool
    pot_at_start_of_round: int
    pot_after_call: int
    minimum_wager_to: int
    pot_fraction_wager_to: int
    all_in: int
    players: list[PlayerView] = []


class ErrorResponse(BaseModel):
    detail: str


# --- Request models ---


class SliceRequest(BaseModel):
    match_state: str = Field(..., min_length=1)
    # Name of a standard game, or the fields of a GameDefinition
    game_definition: Union[str, dict[str, Any]]
    seat: Optional[int] = Field(default=None, ge=0)
    player_names: Optional[list[str]] = None
    settled_balances: Optional[list[int]] = None
    pot_fraction: float = Field(default=1.0, allow_inf_nan=False)
