"""
Practice session orchestrator.

Sits between the board simulation and the learning core: chooses the next
target, judges each drop, keeps the finesse score and feeds the outcome to the
SM-2 progress service and the difficulty adapter.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum

from finesse_trainer.application.difficulty.adapter import DifficultyAdapter
from finesse_trainer.application.finesse.comparator import (
    DropJudgement,
    is_valid_move_prefix,
    judge_drop,
    judge_free_drop,
)
from finesse_trainer.application.progress.service import LearningProgressService
from finesse_trainer.domain.models import DropEvent, FinesseTarget, MasteryCard
from finesse_trainer.domain.pieces import MoveSequence, PieceType
from finesse_trainer.domain.ports import Clock, RandomSource

logger = logging.getLogger(__name__)


class PracticeMode(str, Enum):
    LEARNING = "learning"
    ALL_RANDOM = "all_random"
    Z_ONLY = "z_only"
    S_ONLY = "s_only"
    I_ONLY = "i_only"
    T_ONLY = "t_only"
    O_ONLY = "o_only"
    L_ONLY = "l_only"
    J_ONLY = "j_only"
    FREE_STACK = "free_stack"

    @property
    def piece(self) -> PieceType | None:
        """The only piece practiced in a single-piece mode."""
        if self.value.endswith("_only"):
            return PieceType(self.value[0].upper())
        return None


@dataclass(frozen=True)
class PracticeScore:
    correct: int = 0
    total: int = 0
    combo: int = 0
    top_combo: int = 0
    total_keys: int = 0

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total else 0.0

    @property
    def keys_per_piece(self) -> float:
        return self.total_keys / self.total if self.total else 0.0


@dataclass(frozen=True)
class DropOutcome:
    judgement: DropJudgement
    retry: bool
    card: MasteryCard | None = None

    @property
    def correct(self) -> bool:
        return self.judgement.correct


class PracticeSession:
    """
    One practice run in a given mode.

    Call ``next_target`` to learn what to spawn, then ``handle_drop`` when the
    piece lands. When the outcome asks for a retry, the same target stays
    active.
    """

    def __init__(
        self,
        progress: LearningProgressService,
        difficulty: DifficultyAdapter,
        rng: RandomSource,
        mode: PracticeMode = PracticeMode.LEARNING,
        retry_on_fault: bool = False,
        adaptive_introduction: bool = False,
        clock: Clock | None = None,
    ):
        """
        Args:
            progress: SM-2 progress service (used in learning mode).
            difficulty: Adapter receiving every attempt.
            rng: Randomness for non-learning targets.
            mode: Practice mode.
            retry_on_fault: Repeat a target until it is placed correctly.
            adaptive_introduction: Introduce new patterns only with the
                adapter's new-pattern rate instead of always.
            clock: Used to time drops that arrive without a response time.
        """
        self.progress = progress
        self.difficulty = difficulty
        self.mode = PracticeMode(mode)
        self.retry_on_fault = retry_on_fault
        self.adaptive_introduction = adaptive_introduction
        self._rng = rng
        self._clock = clock
        self._target: FinesseTarget | None = None
        self._from_learning = False
        self._spawned_at: int | None = None
        self.score = PracticeScore()

    @property
    def target(self) -> FinesseTarget | None:
        return self._target

    def _spawn(self, target: FinesseTarget | None, from_learning: bool) -> FinesseTarget | None:
        self._target = target
        self._from_learning = from_learning
        self._spawned_at = self._clock.now() if self._clock else None
        return target

    def next_target(self, piece: PieceType | None = None) -> FinesseTarget | None:
        """
        Choose the next target.

        Args:
            piece: The piece the board is about to spawn, for random modes.
                Ignored in learning and single-piece modes.

        Returns:
            The target, or None in free stacking.
        """
        if self.mode == PracticeMode.FREE_STACK:
            return self._spawn(None, False)

        table = self.progress.table

        if self.mode == PracticeMode.LEARNING:
            introduce_new = True
            if self.adaptive_introduction:
                params = self.difficulty.pattern_selection_params(self._rng)
                introduce_new = params.should_introduce_new or not self.progress.progress.cards

            target = self.progress.select_next_learning_pattern(introduce_new=introduce_new)
            if target is not None:
                return self._spawn(target, True)
            logger.debug("No learning target available; falling back to a random target")

        chosen = self.mode.piece or piece
        if chosen is None:
            pieces = table.pieces
            chosen = pieces[self._rng.choice_index(len(pieces))]
        return self._spawn(table.generate_target(chosen, self._rng), False)

    def check_prefix(self, moves: MoveSequence) -> bool:
        """Whether the inputs so far can still be finesse-correct for the target."""
        if self._target is None:
            return True
        return is_valid_move_prefix(moves, self._target.moves)

    def handle_drop(self, event: DropEvent) -> DropOutcome:
        """Judge a drop, record it everywhere and decide whether to retry."""
        target = self._target
        table = self.progress.table

        if target is None:
            judgement = judge_free_drop(event, table)
        else:
            judgement = judge_drop(event, target, table)
        correct = judgement.correct

        combo = self.score.combo + 1 if correct else 0
        self.score = replace(
            self.score,
            correct=self.score.correct + (1 if correct else 0),
            total=self.score.total + 1,
            combo=combo,
            top_combo=max(self.score.top_combo, combo),
            total_keys=self.score.total_keys + len(event.moves),
        )

        card = None
        if target is not None and self._from_learning:
            card = self.progress.record_result(
                target.piece, target.column, target.rotation, correct
            )

        response_time = event.response_time_ms
        if response_time is None and self._clock and self._spawned_at is not None:
            response_time = self._clock.now() - self._spawned_at
        if response_time is not None:
            self.difficulty.record_attempt(correct, response_time)

        retry = self.retry_on_fault and not correct and target is not None
        if retry:
            self._spawn(target, self._from_learning)
        else:
            self._target = None

        return DropOutcome(judgement=judgement, retry=retry, card=card)
