"""
Finesse comparator: judges played inputs against optimal sequences.

Pure computation, no I/O.
"""

from collections import Counter
from dataclasses import dataclass

from finesse_trainer.domain.models import DropEvent, FinesseTarget
from finesse_trainer.domain.pieces import FinesseMove, MoveSequence, MoveSequenceSet, PieceType

from .table import FinesseTable, default_table


@dataclass(frozen=True)
class DropJudgement:
    """Outcome of judging a drop against its target."""

    position_correct: bool
    moves_correct: bool

    @property
    def correct(self) -> bool:
        return self.position_correct and self.moves_correct


def compare_moves(played: MoveSequence, targets: MoveSequenceSet) -> bool:
    """
    Decide whether ``played`` is finesse-correct for ``targets``.

    - No targets: never correct.
    - Fewer inputs than the first target: correct (DAS charge was preserved).
    - Any soft drop: correct.
    - Otherwise the played moves, ignoring order, must equal one target's moves.
    """
    if not targets:
        return False

    if len(played) < len(targets[0]):
        return True

    if FinesseMove.SOFT_DROP in played:
        return True

    played_counts = Counter(played)
    return any(
        len(seq) == len(played) and Counter(seq) == played_counts for seq in targets
    )


def _strip_drops(moves: MoveSequence) -> MoveSequence:
    return tuple(m for m in moves if not m.is_drop)


def is_valid_move_prefix(played: MoveSequence, targets: MoveSequenceSet) -> bool:
    """
    Check whether ``played`` can still become an optimal sequence.

    Used for retry-on-fault: drops are ignored on both sides, then the played
    inputs must start some target, either in order or as the same multiset as
    that target's first ``len(played)`` inputs.
    """
    if not targets or not played:
        return True

    normalized = _strip_drops(played)
    if not normalized:
        return True

    n = len(normalized)
    for seq in targets:
        candidate = _strip_drops(seq)

        if n <= len(candidate) and candidate[:n] == normalized:
            return True

        prefix = candidate[:n]
        if len(prefix) == n and Counter(prefix) == Counter(normalized):
            return True

    return False


def rotations_equivalent(piece: PieceType, a: int, b: int) -> bool:
    """Two-fold symmetric pieces look identical after a half turn."""
    if PieceType(piece).two_fold_symmetric:
        return a % 2 == b % 2
    return a == b


def judge_drop(
    event: DropEvent,
    target: FinesseTarget,
    table: FinesseTable | None = None,
) -> DropJudgement:
    """
    Judge a drop against the active target.

    For Z, S and I the vertical orientation can be reached clockwise or
    counter-clockwise, so when the target's moves don't match, the moves for
    the rotation the piece actually landed in are also accepted.
    """
    table = table or default_table()

    rotation_matches = rotations_equivalent(
        event.piece, event.landing_rotation, target.rotation
    )
    position_correct = event.landing_column == target.column and rotation_matches

    moves_correct = compare_moves(event.moves, target.moves)
    if not moves_correct and rotation_matches and PieceType(event.piece).two_fold_symmetric:
        alternative = table.get_optimal_moves(
            event.piece, event.landing_column, event.landing_rotation
        )
        moves_correct = compare_moves(event.moves, alternative)

    return DropJudgement(position_correct=position_correct, moves_correct=moves_correct)


def judge_free_drop(event: DropEvent, table: FinesseTable | None = None) -> DropJudgement:
    """Judge a drop with no target against the optimal moves for where it landed."""
    table = table or default_table()
    optimal = table.get_optimal_moves(event.piece, event.landing_column, event.landing_rotation)
    return DropJudgement(
        position_correct=True,
        moves_correct=compare_moves(event.moves, optimal),
    )
