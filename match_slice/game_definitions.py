"""Standard ACPC competition games.

First player positions count from 1, as in the ``.game`` files the dealer
reads.  Limit games are played without a stack limit, which the
protocol represents as the largest 32-bit integer.
"""

from __future__ import annotations

from typing import Optional

from match_slice.models import BettingType, GameDefinition

UNLIMITED_STACK = 2**31 - 1

_HOLDEM_CARDS = {
    "number_of_suits": 4,
    "number_of_ranks": 13,
    "number_of_hole_cards": 2,
    "number_of_board_cards": (0, 3, 1, 1),
}

STATIC_GAME_DEFINITIONS: dict[str, GameDefinition] = {
    "two_player_limit": GameDefinition(
        betting_type=BettingType.LIMIT,
        chip_stacks=(UNLIMITED_STACK,) * 2,
        blinds=(10, 5),
        raise_sizes=(10, 10, 20, 20),
        first_player_positions=(2, 1, 1, 1),
        max_number_of_wagers=(3, 4, 4, 4),
        **_HOLDEM_CARDS,
    ),
    "two_player_nolimit": GameDefinition(
        betting_type=BettingType.NOLIMIT,
        chip_stacks=(20000, 20000),
        blinds=(100, 50),
        first_player_positions=(2, 1, 1, 1),
        **_HOLDEM_CARDS,
    ),
    "three_player_limit": GameDefinition(
        betting_type=BettingType.LIMIT,
        chip_stacks=(UNLIMITED_STACK,) * 3,
        blinds=(5, 10, 0),
        raise_sizes=(10, 10, 20, 20),
        first_player_positions=(3, 1, 1, 1),
        max_number_of_wagers=(3, 4, 4, 4),
        **_HOLDEM_CARDS,
    ),
    "three_player_nolimit": GameDefinition(
        betting_type=BettingType.NOLIMIT,
        chip_stacks=(20000, 20000, 20000),
        blinds=(50, 100, 0),
        first_player_positions=(3, 1, 1, 1),
        **_HOLDEM_CARDS,
    ),
}


def get_game_definition(name: str) -> Optional[GameDefinition]:
    return STATIC_GAME_DEFINITIONS.get(name)
