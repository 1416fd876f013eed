"""Decoding of the ACPC betting-sequence string.

A betting sequence is a list of rounds separated by ``/``.  Within a round,
tokens are concatenated without delimiters:

* ``c`` checks or calls,
* ``f`` folds,
* ``r<n>`` raises so that the actor has committed ``n`` chips to the hand in
  total (``r`` alone raises by the round's fixed increment in limit games).
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, NamedTuple, Optional

from match_slice.errors import MalformedActionToken

if TYPE_CHECKING:
    from match_slice.models import GameDefinition, MatchState

ROUND_SEPARATOR = "/"


class ActionKind(str, Enum):
    FOLD = "f"
    CALL = "c"  # check or call
    RAISE = "r"


class Token(NamedTuple):
    """One raw token of a round, before it is attributed to a position."""

    kind: ActionKind
    amount: Optional[int]  # hand total for raises, None otherwise or for bare "r"
    offset: int  # character offset inside the round
    text: str


class Action(NamedTuple):
    """A token attributed to the position that took it."""

    round: int
    position: int
    kind: ActionKind
    token: str
    street_high: int  # highest round contribution before the action
    to_call: int  # what the position had to add to match street_high
    wager_to: int  # position's round contribution after the action

    @property
    def is_check(self) -> bool:
        return self.kind == ActionKind.CALL and self.to_call == 0

    @property
    def is_bet(self) -> bool:
        """First wager of a round nobody had opened."""
        return self.kind == ActionKind.RAISE and self.street_high == 0


def tokenize_round(text: str, round: int = 0) -> list[Token]:
    """Split the actions of one round into tokens."""
    tokens: list[Token] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == ActionKind.CALL.value or ch == ActionKind.FOLD.value:
            tokens.append(Token(ActionKind(ch), None, i, ch))
            i += 1
        elif ch == ActionKind.RAISE.value:
            end = i + 1
            while end < len(text) and text[end].isdigit():
                end += 1
            digits = text[i + 1:end]
            if end < len(text) and text[end] not in "cfr":
                raise MalformedActionToken(
                    f"Unparseable raise amount {text[i:end + 1]!r}", round, i
                )
            amount = int(digits) if digits else None
            tokens.append(Token(ActionKind.RAISE, amount, i, text[i:end]))
            i = end
        else:
            raise MalformedActionToken(f"Unknown action {ch!r}", round, i)
    return tokens


def parse_betting_sequence(sequence: str) -> list[list[Token]]:
    """Tokenize every round of a betting sequence.

    A trailing separator opens a new, still empty round, so ``"cc/"`` yields
    two rounds.
    """
    return [
        tokenize_round(text, round)
        for round, text in enumerate(sequence.split(ROUND_SEPARATOR))
    ]


def format_action(action: Action, own: bool = False) -> str:
    """Display symbol of a single action; upper-case for the viewer's own."""
    if action.kind == ActionKind.FOLD:
        symbol = "f"
    elif action.kind == ActionKind.CALL:
        symbol = "k" if action.is_check else "c"
    else:
        symbol = ("b" if action.is_bet else "r") + str(action.wager_to)
    return symbol.upper() if own else symbol


def format_actions(actions: list[Action], viewer: int, number_of_rounds: int) -> str:
    """Render decoded actions round by round, joined by the round separator."""
    rounds: list[list[str]] = [[] for _ in range(number_of_rounds)]
    for action in actions:
        rounds[action.round].append(format_action(action, action.position == viewer))
    return ROUND_SEPARATOR.join("".join(symbols) for symbols in rounds)


def betting_sequence(state: MatchState, game_def: GameDefinition) -> str:
    """Human-readable form of the state's betting sequence.

    ``k`` checks, ``c`` calls, ``b<n>``/``r<n>`` bets and raises to ``n`` chips
    in the round, ``f`` folds.  The viewer's own actions are upper-cased.
    """
    from match_slice.engine import replay

    snapshot = replay(state, game_def)
    return format_actions(list(snapshot.actions), state.viewing_seat, snapshot.round + 1)
