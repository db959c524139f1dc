"""
Domain models for finesse practice and mastery tracking.

These are pure data structures with no I/O or external dependencies.
Every record is frozen: updates build a new value with ``dataclasses.replace``
so callers may keep earlier snapshots around.
"""

from dataclasses import dataclass, field
from enum import Enum

from .constants import DEFAULT_EASINESS, INITIAL_INTERVAL
from .pieces import MoveSequence, MoveSequenceSet, PieceType


@dataclass(frozen=True)
class FinesseTarget:
    """
    A placement to practice and the optimal ways to reach it.

    Attributes:
        piece: Piece to place.
        column: Leftmost filled column of the placed piece (0-9).
        rotation: Rotation state (0-3) of the placed piece.
        moves: Alternative optimal input sequences (any one is correct).
    """

    piece: PieceType
    column: int
    rotation: int
    moves: MoveSequenceSet = ()


@dataclass(frozen=True)
class DropEvent:
    """
    A completed placement reported by the board simulation.

    Attributes:
        piece: Piece that was dropped.
        landing_column: Leftmost filled column where it landed.
        landing_rotation: Rotation state it landed in.
        moves: Inputs the player pressed, including the final drop.
        response_time_ms: Time from spawn to drop, if measured.
    """

    piece: PieceType
    landing_column: int
    landing_rotation: int
    moves: MoveSequence
    response_time_ms: float | None = None


@dataclass(frozen=True)
class MasteryCard:
    """
    SM-2 learning state for one pattern.

    Attributes:
        pattern_id: Canonical pattern id ("Z_0_0").
        easiness: SM-2 easiness factor (>= 1.3).
        interval: Global repetitions until the card is due again (>= 1).
        repetitions: Consecutive successful reviews.
        success_count: Lifetime correct attempts.
        fail_count: Lifetime incorrect attempts.
        last_reviewed_at: Epoch milliseconds of the last review.
        next_due_at: Global repetition count at which the card is due.
    """

    pattern_id: str
    easiness: float = DEFAULT_EASINESS
    interval: int = INITIAL_INTERVAL
    repetitions: int = 0
    success_count: int = 0
    fail_count: int = 0
    last_reviewed_at: int = 0
    next_due_at: int = INITIAL_INTERVAL

    @property
    def attempts(self) -> int:
        return self.success_count + self.fail_count

    @property
    def accuracy(self) -> float:
        if self.attempts == 0:
            return 0.0
        return self.success_count / self.attempts


@dataclass(frozen=True)
class SessionRecord:
    """Snapshot of a finished practice session."""

    timestamp: int
    total_attempts: int
    correct_attempts: int
    accuracy: float
    patterns_reviewed: int
    new_patterns_mastered: int


@dataclass(frozen=True)
class CurrentSession:
    """The running session. Never persisted."""

    started_at: int = 0
    attempts: int = 0
    correct: int = 0
    patterns_reviewed: frozenset[str] = frozenset()
    newly_mastered_count: int = 0


@dataclass(frozen=True)
class LearningProgress:
    """
    Aggregate root of the learner's history.

    ``current_session`` is ephemeral; everything else is durable.
    """

    cards: dict[str, MasteryCard] = field(default_factory=dict)
    session_history: tuple[SessionRecord, ...] = ()
    global_repetition_count: int = 0
    last_mastered_review_at: int = 0
    current_session: CurrentSession = field(default_factory=CurrentSession)


@dataclass(frozen=True)
class MasteryStats:
    mastered_count: int
    in_progress_count: int
    not_started_count: int
    overall_accuracy: float
    total_attempts: int


@dataclass(frozen=True)
class OverallStats(MasteryStats):
    total_patterns: int = 0


@dataclass(frozen=True)
class PatternStats:
    accuracy: float
    attempts: int
    mastered: bool


@dataclass(frozen=True)
class GridCell:
    """One column of the mastery grid. ``accuracy`` is -1 when never attempted."""

    column: int
    accuracy: float
    attempts: int
    mastered: bool


@dataclass(frozen=True)
class GridRotation:
    rotation: int
    columns: tuple[GridCell, ...]


@dataclass(frozen=True)
class GridPiece:
    piece: PieceType
    rotations: tuple[GridRotation, ...]


@dataclass(frozen=True)
class MasteryGrid:
    """Mastery by piece -> orientation -> column, for visualization."""

    pieces: tuple[GridPiece, ...]


class DifficultyTier(str, Enum):
    CASUAL = "CASUAL"
    STANDARD = "STANDARD"
    HARDCORE = "HARDCORE"
    INSANE = "INSANE"


@dataclass(frozen=True)
class TierSettings:
    """
    Per-tier tuning.

    ``accuracy_threshold``, ``time_threshold_ms`` and ``perfect_required`` are
    informational; the bias parameters feed pattern selection.
    """

    name: str
    description: str
    accuracy_threshold: float
    time_threshold_ms: int
    weak_pattern_bias: float
    new_pattern_rate: float
    perfect_required: bool = False


@dataclass(frozen=True)
class PerformanceState:
    """
    Rolling performance of the player and the parameters derived from it.

    Everything except the two windows and ``flow_streak`` is recomputed on
    each attempt.
    """

    recent_accuracy: tuple[int, ...] = ()
    recent_response_times: tuple[float, ...] = ()
    current_accuracy: float = 0.5
    average_response_time: float = 1000.0
    consistency_score: float = 0.5
    is_in_flow: bool = False
    flow_streak: int = 0
    current_difficulty: int = 50
    difficulty_tier: DifficultyTier = DifficultyTier.STANDARD
    adaptive_speed: float = 1.0
    weak_pattern_bias: float = 0.5
    new_pattern_rate: float = 0.2


@dataclass(frozen=True)
class PatternSelectionParams:
    weak_pattern_bias: float
    new_pattern_rate: float
    should_introduce_new: bool
