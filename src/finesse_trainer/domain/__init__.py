# Domain Package
from .models import (
    CurrentSession,
    DifficultyTier,
    DropEvent,
    FinesseTarget,
    LearningProgress,
    MasteryCard,
    PerformanceState,
    SessionRecord,
)
from .pieces import (
    FinesseMove,
    MoveSequence,
    MoveSequenceSet,
    PatternId,
    PieceType,
    create_pattern_id,
    parse_moves,
    parse_pattern_id,
)
from .ports import Clock, ProgressRepository, RandomSource

__all__ = [
    "PieceType",
    "FinesseMove",
    "MoveSequence",
    "MoveSequenceSet",
    "PatternId",
    "create_pattern_id",
    "parse_pattern_id",
    "parse_moves",
    "FinesseTarget",
    "DropEvent",
    "MasteryCard",
    "SessionRecord",
    "CurrentSession",
    "LearningProgress",
    "DifficultyTier",
    "PerformanceState",
    "RandomSource",
    "Clock",
    "ProgressRepository",
]
