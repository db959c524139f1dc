"""
Mastery statistics derived from the card map.

This is a pure computation module with no I/O.
"""

from finesse_trainer.application.finesse.table import FinesseTable
from finesse_trainer.application.scheduler.sm2 import is_card_mastered
from finesse_trainer.domain.models import (
    GridCell,
    GridPiece,
    GridRotation,
    MasteryCard,
    MasteryGrid,
    MasteryStats,
    PatternStats,
    SessionRecord,
)
from finesse_trainer.domain.pieces import create_pattern_id


def calculate_mastery_stats(
    cards: dict[str, MasteryCard], total_pattern_count: int
) -> MasteryStats:
    """
    Summarize mastery over all cards.

    Cards without any review count as not started.
    """
    practiced = [c for c in cards.values() if c.attempts > 0]
    mastered_count = sum(1 for c in practiced if is_card_mastered(c))

    total_success = sum(c.success_count for c in practiced)
    total_attempts = sum(c.attempts for c in practiced)

    return MasteryStats(
        mastered_count=mastered_count,
        in_progress_count=len(practiced) - mastered_count,
        not_started_count=total_pattern_count - len(practiced),
        overall_accuracy=total_success / total_attempts if total_attempts else 0.0,
        total_attempts=total_attempts,
    )


def pattern_stats(card: MasteryCard | None) -> PatternStats | None:
    if card is None:
        return None
    return PatternStats(
        accuracy=card.accuracy,
        attempts=card.attempts,
        mastered=is_card_mastered(card),
    )


def build_mastery_grid(cards: dict[str, MasteryCard], table: FinesseTable) -> MasteryGrid:
    """
    Lay out mastery by piece, orientation and column.

    Unattempted cells report accuracy -1.
    """
    pieces: list[GridPiece] = []

    for piece in table.pieces:
        rotations: list[GridRotation] = []
        for layer in table.layers(piece):
            cells: list[GridCell] = []
            for column in range(len(layer.columns)):
                card = cards.get(create_pattern_id(piece, column, layer.rotation))
                cells.append(
                    GridCell(
                        column=column,
                        accuracy=card.accuracy if card else -1.0,
                        attempts=card.attempts if card else 0,
                        mastered=is_card_mastered(card) if card else False,
                    )
                )
            rotations.append(GridRotation(rotation=layer.rotation, columns=tuple(cells)))
        pieces.append(GridPiece(piece=piece, rotations=tuple(rotations)))

    return MasteryGrid(pieces=tuple(pieces))


def create_session_record(
    timestamp: int,
    total_attempts: int,
    correct_attempts: int,
    patterns_reviewed: int,
    new_patterns_mastered: int,
) -> SessionRecord:
    return SessionRecord(
        timestamp=timestamp,
        total_attempts=total_attempts,
        correct_attempts=correct_attempts,
        accuracy=correct_attempts / total_attempts if total_attempts > 0 else 0.0,
        patterns_reviewed=patterns_reviewed,
        new_patterns_mastered=new_patterns_mastered,
    )
