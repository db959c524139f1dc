"""
Learning Progress Service: application layer orchestrator.

Owns one LearningProgress snapshot per practice session, applies SM-2 reviews,
aggregates sessions and persists the durable subset after every change.
"""

import logging
from dataclasses import replace

from finesse_trainer.application.finesse.table import FinesseTable, default_table
from finesse_trainer.application.scheduler.sm2 import (
    ReviewPolicy,
    init_card,
    is_card_mastered,
    review_card,
    select_next_pattern,
)
from finesse_trainer.domain.constants import MAX_SESSION_HISTORY
from finesse_trainer.domain.models import (
    CurrentSession,
    FinesseTarget,
    LearningProgress,
    MasteryCard,
    MasteryGrid,
    OverallStats,
    PatternStats,
    SessionRecord,
)
from finesse_trainer.domain.pieces import PieceType, create_pattern_id
from finesse_trainer.domain.ports import Clock, ProgressRepository, RandomSource

from .stats import build_mastery_grid, calculate_mastery_stats, create_session_record, pattern_stats

logger = logging.getLogger(__name__)


class LearningProgressService:
    """
    Application service for adaptive pattern practice.

    Follows Dependency Inversion: depends on the ProgressRepository, RandomSource
    and Clock abstractions, not concrete adapters.
    """

    def __init__(
        self,
        *,
        rng: RandomSource,
        clock: Clock,
        repository: ProgressRepository | None = None,
        table: FinesseTable | None = None,
        policy: ReviewPolicy = ReviewPolicy.CANONICAL,
        max_session_history: int = MAX_SESSION_HISTORY,
    ):
        """
        Args:
            rng: Randomness for pattern selection.
            clock: Time source for review and session timestamps.
            repository: Where progress is stored; nothing is persisted if None.
            table: Finesse table; uses the bundled one if not provided.
            policy: SM-2 failure policy.
            max_session_history: Number of finished sessions kept.
        """
        self._rng = rng
        self._clock = clock
        self._repo = repository
        self._table = table or default_table()
        self._policy = ReviewPolicy(policy)
        self._max_history = max_session_history
        self._all_pattern_ids = self._table.all_pattern_ids()
        self._progress = self._load()

    @property
    def progress(self) -> LearningProgress:
        return self._progress

    @property
    def table(self) -> FinesseTable:
        return self._table

    @property
    def all_pattern_ids(self) -> list[str]:
        return list(self._all_pattern_ids)

    def _fresh_session(self) -> CurrentSession:
        return CurrentSession(started_at=self._clock.now())

    def _load(self) -> LearningProgress:
        if self._repo is None:
            return LearningProgress(current_session=self._fresh_session())

        stored = self._repo.load()
        known = set(self._all_pattern_ids)
        cards = {pid: card for pid, card in stored.cards.items() if pid in known}
        if len(cards) != len(stored.cards):
            dropped = sorted(set(stored.cards) - known)
            logger.warning(f"Ignoring {len(dropped)} stored cards for unknown patterns: {dropped}")

        return replace(stored, cards=cards, current_session=self._fresh_session())

    def _commit(self, progress: LearningProgress) -> None:
        self._progress = progress
        if self._repo is not None:
            self._repo.save(progress)

    def select_next_learning_pattern(self, introduce_new: bool = True) -> FinesseTarget | None:
        """
        Pick what to spawn next.

        Args:
            introduce_new: Whether unreviewed patterns may be introduced now.

        Returns:
            The target with its optimal moves, or None if there is nothing to practice.
        """
        p = self._progress
        pattern_id = select_next_pattern(
            p.cards,
            self._all_pattern_ids,
            p.global_repetition_count,
            p.last_mastered_review_at,
            self._rng,
            introduce_new=introduce_new,
        )
        if pattern_id is None:
            return None

        target = self._table.resolve_pattern(pattern_id)
        if target is None:
            logger.warning(f"Selected pattern {pattern_id} is not in the finesse table")
        return target

    def record_result(
        self, piece: PieceType, column: int, rotation: int, correct: bool
    ) -> MasteryCard:
        """
        Record the outcome of a completed placement and return the updated card.

        Raises ValueError when the placement has no entry in the finesse table.
        """
        pattern_id = self._table.canonical_pattern_id(piece, column, rotation)
        if pattern_id is None:
            raise ValueError(
                f"No finesse entry for {create_pattern_id(piece, column, rotation)}"
            )
        prev = self._progress
        count = prev.global_repetition_count
        now = self._clock.now()

        card = prev.cards.get(pattern_id)
        was_mastered = is_card_mastered(card) if card else False
        if card is None:
            card = init_card(pattern_id, count, created_at=now)

        updated = review_card(card, correct, count, reviewed_at=now, policy=self._policy)
        now_mastered = is_card_mastered(updated)

        session = prev.current_session
        session = replace(
            session,
            attempts=session.attempts + 1,
            correct=session.correct + (1 if correct else 0),
            patterns_reviewed=session.patterns_reviewed | {pattern_id},
            newly_mastered_count=session.newly_mastered_count
            + (1 if now_mastered and not was_mastered else 0),
        )

        if now_mastered and not was_mastered:
            logger.info(f"Pattern {pattern_id} mastered")

        self._commit(
            replace(
                prev,
                cards={**prev.cards, pattern_id: updated},
                global_repetition_count=count + 1,
                last_mastered_review_at=count if was_mastered else prev.last_mastered_review_at,
                current_session=session,
            )
        )
        return updated

    def get_pattern_stats(self, pattern_id: str) -> PatternStats | None:
        return pattern_stats(self._progress.cards.get(pattern_id))

    def get_mastery_grid(self) -> MasteryGrid:
        return build_mastery_grid(self._progress.cards, self._table)

    def get_overall_stats(self) -> OverallStats:
        total = len(self._all_pattern_ids)
        stats = calculate_mastery_stats(self._progress.cards, total)
        return OverallStats(
            mastered_count=stats.mastered_count,
            in_progress_count=stats.in_progress_count,
            not_started_count=stats.not_started_count,
            overall_accuracy=stats.overall_accuracy,
            total_attempts=stats.total_attempts,
            total_patterns=total,
        )

    def start_new_session(self) -> None:
        self._commit(replace(self._progress, current_session=self._fresh_session()))

    def end_session(self) -> SessionRecord | None:
        """
        Close the current session and add it to the history.

        Empty sessions are not recorded.
        """
        session = self._progress.current_session
        if session.attempts == 0:
            return None

        record = create_session_record(
            timestamp=self._clock.now(),
            total_attempts=session.attempts,
            correct_attempts=session.correct,
            patterns_reviewed=len(session.patterns_reviewed),
            new_patterns_mastered=session.newly_mastered_count,
        )
        history = ((record,) + self._progress.session_history)[: self._max_history]

        logger.info(
            f"Session ended: {record.correct_attempts}/{record.total_attempts} correct, "
            f"{record.patterns_reviewed} patterns"
        )
        self._commit(
            replace(
                self._progress,
                session_history=history,
                current_session=self._fresh_session(),
            )
        )
        return record

    def reset_progress(self) -> None:
        """Hard reset of all durable state."""
        logger.info("Resetting all learning progress")
        self._progress = LearningProgress(current_session=self._fresh_session())
        if self._repo is not None:
            self._repo.clear()
