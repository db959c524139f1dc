"""
Finesse table: optimal input sequences per piece, orientation and column.

The data ships as YAML (``finesse_trainer/data/finesse_table.yaml``) and is
loaded once into an immutable ``FinesseTable``.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml  # type: ignore

from finesse_trainer.domain.models import FinesseTarget
from finesse_trainer.domain.pieces import (
    FinesseMove,
    MoveSequenceSet,
    PatternId,
    PieceType,
    create_pattern_id,
    parse_pattern_id,
)
from finesse_trainer.domain.ports import RandomSource

logger = logging.getLogger(__name__)

DEFAULT_TABLE_PATH = Path(__file__).resolve().parents[2] / "data" / "finesse_table.yaml"


@dataclass(frozen=True)
class OrientationLayer:
    """One visually distinct orientation of a piece and its per-column moves."""

    rotation: int
    columns: tuple[MoveSequenceSet, ...]


class FinesseTable:
    """
    Lookup of optimal moves keyed by piece, column index and rotation.

    Lookups never raise: out-of-range indices yield an empty MoveSequenceSet.
    """

    def __init__(self, layers: dict[PieceType, tuple[OrientationLayer, ...]]):
        self._layers = layers

    @property
    def pieces(self) -> list[PieceType]:
        return list(self._layers)

    def layers(self, piece: PieceType) -> tuple[OrientationLayer, ...]:
        return self._layers.get(PieceType(piece), ())

    def layer_index(self, piece: PieceType, rotation: int) -> int:
        """
        Map a rotation state to an orientation layer.

        One layer (O): always 0. Two layers (Z, S, I): 0/2 -> 0, 1/3 -> 1.
        Four layers: rotation is the layer index.
        """
        count = len(self.layers(piece))
        if count == 1:
            return 0
        if count == 2:
            return rotation % 2
        return rotation

    def get_optimal_moves(
        self, piece: PieceType, column_index: int, rotation: int
    ) -> MoveSequenceSet:
        layers = self.layers(piece)
        if not layers or column_index < 0 or rotation < 0:
            return ()

        idx = self.layer_index(piece, rotation)
        if idx >= len(layers):
            return ()

        columns = layers[idx].columns
        if column_index >= len(columns):
            return ()
        return columns[column_index]

    def generate_target(self, piece: PieceType, rng: RandomSource) -> FinesseTarget:
        """Pick a uniformly random orientation, then a uniformly random column in it."""
        piece = PieceType(piece)
        layers = self.layers(piece)
        layer_idx = rng.choice_index(len(layers))
        layer = layers[layer_idx]
        column = rng.choice_index(len(layer.columns))

        return FinesseTarget(
            piece=piece,
            column=column,
            rotation=layer.rotation,
            moves=self.get_optimal_moves(piece, column, layer_idx),
        )

    def all_pattern_ids(self) -> list[str]:
        """Every practice target in table order."""
        ids: list[str] = []
        for piece, layers in self._layers.items():
            for layer in layers:
                for column in range(len(layer.columns)):
                    ids.append(create_pattern_id(piece, column, layer.rotation))
        return ids

    def canonical_pattern_id(self, piece: PieceType, column: int, rotation: int) -> str | None:
        """
        Pattern id of the table entry a placement belongs to.

        Equivalent rotations collapse onto the stored layer, so Z rotation 1 maps
        to the rotation 3 entry. Returns None for placements outside the table.
        """
        layers = self.layers(piece)
        if not layers or rotation < 0:
            return None

        idx = self.layer_index(piece, rotation)
        if idx >= len(layers) or not 0 <= column < len(layers[idx].columns):
            return None
        return create_pattern_id(piece, column, layers[idx].rotation)

    def resolve_pattern(self, pattern_id: str | PatternId) -> FinesseTarget | None:
        """
        Turn a pattern id back into a spawnable target.

        Returns None when the id is malformed or names no entry of the table.
        """
        if isinstance(pattern_id, PatternId):
            pid = pattern_id
        else:
            try:
                pid = parse_pattern_id(pattern_id)
            except ValueError:
                logger.warning(f"Cannot resolve malformed pattern id {pattern_id!r}")
                return None

        layers = self.layers(pid.piece)
        if not layers or pid.rotation < 0:
            return None

        idx = self.layer_index(pid.piece, pid.rotation)
        if idx >= len(layers) or layers[idx].rotation != pid.rotation:
            return None
        if not 0 <= pid.column < len(layers[idx].columns):
            return None

        return FinesseTarget(
            piece=pid.piece,
            column=pid.column,
            rotation=pid.rotation,
            moves=layers[idx].columns[pid.column],
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FinesseTable":
        """
        Build a table from parsed YAML.

        Raises ValueError when the data is malformed.
        """
        layers: dict[PieceType, tuple[OrientationLayer, ...]] = {}

        for piece in PieceType:
            raw_layers = data.get(piece.value)
            if not isinstance(raw_layers, list) or len(raw_layers) not in (1, 2, 4):
                raise ValueError(f"Piece {piece.value} needs 1, 2 or 4 orientation layers")

            parsed: list[OrientationLayer] = []
            for raw in raw_layers:
                if not isinstance(raw, dict):
                    raise ValueError(f"Malformed orientation layer for piece {piece.value}")
                rotation = raw.get("rotation")
                columns = raw.get("columns")
                if not isinstance(rotation, int) or not isinstance(columns, list) or not columns:
                    raise ValueError(f"Malformed orientation layer for piece {piece.value}")

                parsed.append(
                    OrientationLayer(
                        rotation=rotation,
                        columns=tuple(_parse_column(piece, col) for col in columns),
                    )
                )
            layers[piece] = tuple(parsed)

        return cls(layers)


def _parse_column(piece: PieceType, raw: Any) -> MoveSequenceSet:
    if not isinstance(raw, list) or not raw:
        raise ValueError(f"Empty move set for piece {piece.value}")

    sequences = []
    for seq in raw:
        moves = tuple(FinesseMove(str(token)) for token in seq)
        if not moves or moves[-1] != FinesseMove.HARD_DROP:
            raise ValueError(f"Sequence {seq} for piece {piece.value} must end in DROP")
        sequences.append(moves)
    return tuple(sequences)


def load_finesse_table(path: Path | None = None) -> FinesseTable:
    """Load and validate a finesse table from YAML."""
    path = path or DEFAULT_TABLE_PATH
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    table = FinesseTable.from_dict(data)
    logger.debug(f"Loaded finesse table from {path}: {len(table.all_pattern_ids())} patterns")
    return table


@lru_cache(maxsize=1)
def default_table() -> FinesseTable:
    return load_finesse_table()


def get_optimal_moves(piece: PieceType, column_index: int, rotation: int) -> MoveSequenceSet:
    return default_table().get_optimal_moves(piece, column_index, rotation)


def generate_target(piece: PieceType, rng: RandomSource) -> FinesseTarget:
    return default_table().generate_target(piece, rng)
