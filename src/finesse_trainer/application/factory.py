"""
Service Factory
Centralizes wiring of the progress service and practice session from config.
"""

from finesse_trainer.application.config import AppConfig
from finesse_trainer.application.difficulty.adapter import DifficultyAdapter
from finesse_trainer.application.practice import PracticeMode, PracticeSession
from finesse_trainer.application.progress.service import LearningProgressService
from finesse_trainer.application.scheduler.sm2 import ReviewPolicy
from finesse_trainer.domain.ports import Clock, ProgressRepository, RandomSource
from finesse_trainer.infrastructure.adapters.system import SystemClock, SystemRandomSource
from finesse_trainer.infrastructure.persistence.json_store import JsonProgressRepository
from finesse_trainer.infrastructure.persistence.memory import InMemoryProgressRepository


def get_progress_repository(config: AppConfig, persist: bool = True) -> ProgressRepository:
    """
    Returns the JSON file repository, or an in-memory one when not persisting.
    """
    if not persist or config.progress_file is None:
        return InMemoryProgressRepository()
    return JsonProgressRepository(config.progress_file)


def get_progress_service(
    config: AppConfig,
    rng: RandomSource | None = None,
    clock: Clock | None = None,
    repository: ProgressRepository | None = None,
) -> LearningProgressService:
    return LearningProgressService(
        rng=rng or SystemRandomSource(config.seed),
        clock=clock or SystemClock(),
        repository=repository or get_progress_repository(config),
        policy=ReviewPolicy(config.review_policy),
        max_session_history=config.max_session_history,
    )


def get_practice_session(
    config: AppConfig,
    rng: RandomSource | None = None,
    clock: Clock | None = None,
    repository: ProgressRepository | None = None,
) -> PracticeSession:
    rng = rng or SystemRandomSource(config.seed)
    clock = clock or SystemClock()
    progress = get_progress_service(config, rng=rng, clock=clock, repository=repository)
    return PracticeSession(
        progress=progress,
        difficulty=DifficultyAdapter(),
        rng=rng,
        mode=PracticeMode(config.mode),
        retry_on_fault=config.retry_on_fault,
        adaptive_introduction=config.adaptive_introduction,
        clock=clock,
    )
