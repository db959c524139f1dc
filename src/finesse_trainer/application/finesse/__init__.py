# Application Finesse Package
from .comparator import (
    DropJudgement,
    compare_moves,
    is_valid_move_prefix,
    judge_drop,
    judge_free_drop,
    rotations_equivalent,
)
from .table import (
    FinesseTable,
    OrientationLayer,
    default_table,
    generate_target,
    get_optimal_moves,
    load_finesse_table,
)

__all__ = [
    "FinesseTable",
    "OrientationLayer",
    "default_table",
    "load_finesse_table",
    "get_optimal_moves",
    "generate_target",
    "compare_moves",
    "is_valid_move_prefix",
    "rotations_equivalent",
    "judge_drop",
    "judge_free_drop",
    "DropJudgement",
]
