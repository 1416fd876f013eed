"""Tests for the contribution accumulator: blinds, calls, raises, folds and all-ins."""

import pytest

from match_slice.actions import parse_betting_sequence
from match_slice.engine import SeatState, pot_at_start_of_round, replay
from match_slice.errors import InvalidSeat
from match_slice.game_definitions import STATIC_GAME_DEFINITIONS
from match_slice.models import BettingType, GameDefinition, MatchState


# ── Helpers ──────────────────────────────────────────────────────────

def _make_game_def(
    chip_stacks=(200, 200, 200),
    blinds=(10, 0, 5),
    first_player_positions=(3, 2, 2, 2),
    betting_type=BettingType.LIMIT,
    raise_sizes=(10, 10, 10, 10),
) -> GameDefinition:
    return GameDefinition(
        betting_type=betting_type,
        first_player_positions=first_player_positions,
        chip_stacks=chip_stacks,
        blinds=blinds,
        raise_sizes=raise_sizes,
        number_of_ranks=3,
    )


def _state(betting: str, position: int = 1, players: int = 3) -> MatchState:
    hands = "|".join([""] * players)
    return MatchState.parse(f"{MatchState.LABEL}:{position}:0:{betting}:{hands}")


def _prefixes(sequence: str) -> list[str]:
    """Every prefix of the sequence that ends on a token boundary."""
    prefixes = [""]
    for round, tokens in enumerate(parse_betting_sequence(sequence)):
        current = prefixes[-1]
        if round > 0:
            current += "/"
            prefixes.append(current)
        for token in tokens:
            current += token.text
            prefixes.append(current)
    return prefixes


# ── SeatState ────────────────────────────────────────────────────────

class TestSeatState:
    def test_initial_state(self):
        s = SeatState(1, 500)
        assert s.contributions == [0]
        assert s.current_stack == 500
        assert s.is_active
        assert not s.all_in

    def test_commit_to_sets_round_total(self):
        s = SeatState(0, 500)
        assert s.commit_to(20) == 20
        assert s.commit_to(50) == 30
        assert s.contributions == [50]

    def test_commit_to_is_capped_at_stack(self):
        s = SeatState(0, 100)
        s.commit_to(40)
        s.reset_for_new_round()
        assert s.commit_to(500) == 60
        assert s.contributions == [40, 60]
        assert s.all_in
        assert not s.is_active

    def test_all_in_amount_excludes_earlier_rounds(self):
        s = SeatState(0, 5000)
        s.commit_to(100)
        s.reset_for_new_round()
        s.commit_to(30)
        assert s.previous_rounds == 100
        assert s.all_in_amount == 4900

    def test_folded_is_not_active(self):
        s = SeatState(0, 500)
        s.folded = True
        assert not s.is_active


# ── Replay ───────────────────────────────────────────────────────────

class TestReplay:
    def test_blinds_seed_round_zero(self):
        snap = replay(_state(""), _make_game_def())
        assert [s.contributions for s in snap.seats] == [[10], [0], [5]]
        assert snap.street_high == 10
        assert snap.round == 0
        assert snap.action_on == 2

    def test_later_rounds_open_at_first_player_position(self):
        snap = replay(_state("ccr20cc/"), _make_game_def())
        assert snap.round == 1
        assert snap.action_on == 1

    def test_first_player_position_zero_opens_at_position_zero(self):
        game_def = _make_game_def(first_player_positions=(0, 0, 0, 0))
        assert replay(_state(""), game_def).action_on == 0

    def test_blind_larger_than_stack_is_clamped(self):
        game_def = _make_game_def(chip_stacks=(200, 200, 4))
        snap = replay(_state(""), game_def)
        assert snap.seats[2].contributions == [4]
        assert snap.seats[2].all_in
        # Position 2 is first to act but all-in, so position 0 acts
        assert snap.action_on == 0

    def test_raise_amounts_are_hand_totals(self):
        snap = replay(_state("ccr20cc/r50fr100c"), _make_game_def())
        assert [s.contributions for s in snap.seats] == [[20, 80], [20, 80], [20, 0]]
        assert snap.seats[2].folded

    def test_call_matches_street_high(self):
        snap = replay(_state("ccr20"), _make_game_def())
        assert snap.street_high == 20
        assert snap.action_on == 2
        assert snap.amount_to_call(snap.seats[2]) == 10

    def test_call_for_less_goes_all_in(self):
        game_def = _make_game_def(
            chip_stacks=(300, 1000),
            blinds=(100, 50),
            first_player_positions=(2, 1, 1, 1),
            betting_type=BettingType.NOLIMIT,
        )
        snap = replay(_state("r1000c", players=2), game_def)
        assert [s.contributions for s in snap.seats] == [[300], [1000]]
        assert all(s.all_in for s in snap.seats)
        assert snap.action_on is None

    def test_raise_beyond_stack_is_clamped(self):
        game_def = _make_game_def(
            chip_stacks=(1000, 300),
            blinds=(100, 50),
            first_player_positions=(2, 1, 1, 1),
            betting_type=BettingType.NOLIMIT,
        )
        snap = replay(_state("r2000", players=2), game_def)
        assert snap.seats[1].contributions == [300]
        assert snap.seats[1].all_in
        assert snap.street_high == 300

    def test_limit_bare_raise_uses_round_raise_size(self):
        game_def = STATIC_GAME_DEFINITIONS["two_player_limit"]
        snap = replay(_state("rc/crr", position=0, players=2), game_def)
        assert [s.contributions for s in snap.seats] == [[20, 20], [20, 10]]
        assert snap.street_high == 20

    def test_last_fold_ends_the_hand(self):
        snap = replay(_state("r300f", position=0, players=2),
                      STATIC_GAME_DEFINITIONS["two_player_nolimit"])
        assert snap.action_on is None
        assert snap.pot == 400

    def test_min_increment_tracks_largest_raise(self):
        game_def = _make_game_def(
            chip_stacks=(1000, 2000, 1500),
            blinds=(0, 10, 5),
            first_player_positions=(0, 0, 0),
            betting_type=BettingType.NOLIMIT,
            raise_sizes=(10, 10, 10),
        )
        snap = replay(_state("cr30r100"), game_def)
        assert snap.min_increment == 70
        snap = replay(_state("cr30r100cc/"), game_def)
        assert snap.min_increment == 10
        assert snap.street_high == 0

    def test_viewer_outside_table(self):
        with pytest.raises(InvalidSeat):
            replay(_state("", position=3), _make_game_def())


# ── Pot at start of round ────────────────────────────────────────────

class TestPotAtStartOfRound:
    def test_after_each_action(self):
        game_def = _make_game_def()
        rounds = [["c", "c", "r20", "c", "c"], ["r50", "f", "r100", "c"], ["c", "c"], ["c", "c"]]
        expected = [0, 60, 220, 220]

        sequence = ""
        for round, actions in enumerate(rounds):
            if round > 0:
                sequence += "/"
            for action in actions:
                sequence += action
                assert pot_at_start_of_round(_state(sequence), game_def) == expected[round]

    def test_explicit_round(self):
        state = _state("ccr20cc/r50fr100c/cc/cc")
        game_def = _make_game_def()
        assert [pot_at_start_of_round(state, game_def, r) for r in range(4)] == [0, 60, 220, 220]

    def test_is_monotonic(self):
        state = _state("ccr20cc/r50fr100c/cc/cc")
        game_def = _make_game_def()
        pots = [pot_at_start_of_round(state, game_def, r) for r in range(6)]
        assert pots == sorted(pots)

    def test_negative_round(self):
        with pytest.raises(ValueError):
            pot_at_start_of_round(_state("cc"), _make_game_def(), -1)


# ── Properties ───────────────────────────────────────────────────────

class TestConservation:
    @pytest.mark.parametrize(
        "game_def, sequence, players",
        [
            (_make_game_def(), "ccr20cc/r50fr100c/cc/cc", 3),
            (
                _make_game_def(
                    chip_stacks=(100, 1000, 1000),
                    blinds=(0, 10, 5),
                    first_player_positions=(0, 0),
                    betting_type=BettingType.NOLIMIT,
                    raise_sizes=(),
                ),
                "r100cr400c/r1000c",
                3,
            ),
            (STATIC_GAME_DEFINITIONS["two_player_nolimit"], "r300r900c/cr20000c", 2),
        ],
    )
    def test_chips_are_conserved_at_every_prefix(self, game_def, sequence, players):
        starting = sum(game_def.chip_stacks)
        for prefix in _prefixes(sequence):
            snap = replay(_state(prefix, position=0, players=players), game_def)
            stacks = sum(s.current_stack for s in snap.seats)
            committed = sum(s.total_contribution for s in snap.seats)
            assert stacks + committed == starting
            assert all(s.current_stack >= 0 for s in snap.seats)

    def test_replay_is_idempotent(self):
        state = _state("ccr20cc/r50fr100c")
        game_def = _make_game_def()
        first = replay(state, game_def)
        second = replay(state, game_def)
        assert [s.contributions for s in first.seats] == [s.contributions for s in second.seats]
        assert first.actions == second.actions
        assert first.action_on == second.action_on
