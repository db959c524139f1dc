"""
Pieces, finesse moves and pattern identifiers.

These are pure value types with no I/O or external dependencies.
"""

from dataclasses import dataclass
from enum import Enum


class PieceType(str, Enum):
    """Tetromino types, in finesse-table order (piece index 0..6)."""

    Z = "Z"
    S = "S"
    I = "I"  # noqa: E741
    T = "T"
    O = "O"  # noqa: E741
    L = "L"
    J = "J"

    @property
    def index(self) -> int:
        return list(PieceType).index(self)

    @property
    def two_fold_symmetric(self) -> bool:
        """Z, S and I look the same after a half turn."""
        return self in (PieceType.Z, PieceType.S, PieceType.I)


class FinesseMove(str, Enum):
    """Atomic input actions, valued by their short table token."""

    LEFT = "L"
    RIGHT = "R"
    DAS_LEFT = "DL"
    DAS_RIGHT = "DR"
    ROTATE_CW = "C"
    ROTATE_CCW = "CC"
    HARD_DROP = "DROP"
    SOFT_DROP = "SD"

    @property
    def label(self) -> str:
        return MOVE_LABELS[self]

    @property
    def is_drop(self) -> bool:
        return self in (FinesseMove.HARD_DROP, FinesseMove.SOFT_DROP)


MOVE_LABELS: dict[FinesseMove, str] = {
    FinesseMove.LEFT: "LEFT",
    FinesseMove.RIGHT: "RIGHT",
    FinesseMove.DAS_LEFT: "DAS LEFT",
    FinesseMove.DAS_RIGHT: "DAS RIGHT",
    FinesseMove.ROTATE_CW: "CLOCKWISE",
    FinesseMove.ROTATE_CCW: "COUNTER-CW",
    FinesseMove.HARD_DROP: "HARD DROP",
    FinesseMove.SOFT_DROP: "SOFT DROP",
}

# An ordered list of inputs, and a set of alternatives any of which is optimal.
MoveSequence = tuple[FinesseMove, ...]
MoveSequenceSet = tuple[MoveSequence, ...]


def parse_moves(tokens: list[str] | str) -> MoveSequence:
    """
    Parse move tokens ("DL DROP" or ["DL", "DROP"]) into a MoveSequence.

    Accepts short tokens (``DL``) and enum names (``DAS_LEFT``), case-insensitive.
    Raises ValueError on an unknown token.
    """
    if isinstance(tokens, str):
        tokens = tokens.replace(",", " ").split()

    moves: list[FinesseMove] = []
    for token in tokens:
        key = token.strip().upper()
        if key in FinesseMove.__members__:
            moves.append(FinesseMove[key])
            continue
        try:
            moves.append(FinesseMove(key))
        except ValueError:
            raise ValueError(f"Unknown finesse move: {token!r}") from None
    return tuple(moves)


def format_moves(moves: MoveSequence) -> str:
    return " ".join(m.value for m in moves)


@dataclass(frozen=True)
class PatternId:
    """
    One practice target: a piece placed at a column with a rotation.

    Canonical string form is ``"{piece}_{column}_{rotation}"``.
    """

    piece: PieceType
    column: int
    rotation: int

    def __str__(self) -> str:
        return f"{self.piece.value}_{self.column}_{self.rotation}"


def create_pattern_id(piece: PieceType | str, column: int, rotation: int) -> str:
    return str(PatternId(PieceType(piece), column, rotation))


def parse_pattern_id(pattern_id: str) -> PatternId:
    """
    Parse ``"Z_0_3"`` back into its components.

    Raises ValueError when the id is malformed.
    """
    parts = pattern_id.split("_")
    if len(parts) != 3:
        raise ValueError(f"Malformed pattern id: {pattern_id!r}")
    piece, col, rot = parts
    try:
        return PatternId(PieceType(piece), int(col), int(rot))
    except ValueError:
        raise ValueError(f"Malformed pattern id: {pattern_id!r}") from None
