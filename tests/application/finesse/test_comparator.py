import pytest

from finesse_trainer.application.finesse.comparator import (
    compare_moves,
    is_valid_move_prefix,
    judge_drop,
    judge_free_drop,
    rotations_equivalent,
)
from finesse_trainer.application.finesse.table import default_table
from finesse_trainer.domain.models import DropEvent
from finesse_trainer.domain.pieces import PieceType, parse_moves


def moves_set(*sequences):
    return tuple(parse_moves(s) for s in sequences)


T_COL1 = moves_set("L L DROP", "DL R DROP")


def test_compare_exact_match():
    assert compare_moves(parse_moves("L L DROP"), T_COL1)
    assert compare_moves(parse_moves("DL R DROP"), T_COL1)


def test_compare_ignores_order():
    assert compare_moves(parse_moves("R DL DROP"), T_COL1)


def test_compare_wrong_moves():
    assert not compare_moves(parse_moves("R R DROP"), T_COL1)
    assert not compare_moves(parse_moves("L L L DROP"), T_COL1)


def test_compare_no_targets():
    assert not compare_moves(parse_moves("DROP"), ())


def test_compare_fewer_inputs_than_optimal_is_accepted():
    assert compare_moves(parse_moves("DROP"), moves_set("DL DROP"))


def test_compare_soft_drop_is_accepted():
    assert compare_moves(parse_moves("L L L SD DROP"), T_COL1)


@pytest.mark.parametrize(
    "played,expected",
    [
        ("", True),
        ("DROP", True),
        ("DL", True),
        ("L", True),
        ("L L", True),
        ("R DL", True),
        ("R", False),
        ("L R", False),
        ("L L L", False),
    ],
)
def test_prefix_validation(played, expected):
    assert is_valid_move_prefix(parse_moves(played), T_COL1) is expected


def test_prefix_without_targets_is_valid():
    assert is_valid_move_prefix(parse_moves("R R"), ())


def test_rotations_equivalent():
    assert rotations_equivalent(PieceType.Z, 1, 3)
    assert rotations_equivalent(PieceType.I, 0, 2)
    assert not rotations_equivalent(PieceType.T, 1, 3)
    assert rotations_equivalent(PieceType.T, 2, 2)


def test_judge_drop_correct():
    target = default_table().resolve_pattern("T_1_0")
    event = DropEvent(PieceType.T, 1, 0, parse_moves("DL R DROP"))

    judgement = judge_drop(event, target)
    assert judgement.position_correct
    assert judgement.moves_correct
    assert judgement.correct


def test_judge_drop_wrong_column():
    target = default_table().resolve_pattern("T_1_0")
    event = DropEvent(PieceType.T, 2, 0, parse_moves("L DROP"))

    judgement = judge_drop(event, target)
    assert not judgement.position_correct
    assert not judgement.correct


def test_judge_drop_symmetric_rotation_counts_as_position_match():
    target = default_table().resolve_pattern("Z_3_3")
    event = DropEvent(PieceType.Z, 3, 1, parse_moves("CC DROP"))

    assert judge_drop(event, target).correct


def test_judge_drop_symmetric_piece_falls_back_to_landing_moves():
    target = default_table().resolve_pattern("Z_3_3")
    # Optimal for where it actually landed, but not where it should have
    event = DropEvent(PieceType.Z, 4, 1, parse_moves("C DROP"))

    judgement = judge_drop(event, target)
    assert judgement.moves_correct
    assert not judgement.position_correct
    assert not judgement.correct


def test_judge_free_drop():
    assert judge_free_drop(DropEvent(PieceType.T, 0, 0, parse_moves("DL DROP"))).correct
    assert not judge_free_drop(
        DropEvent(PieceType.T, 0, 0, parse_moves("L L L L DROP"))
    ).correct
