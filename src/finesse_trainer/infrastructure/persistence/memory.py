from dataclasses import replace

from finesse_trainer.domain.models import CurrentSession, LearningProgress
from finesse_trainer.domain.ports import ProgressRepository


class InMemoryProgressRepository(ProgressRepository):
    """Keeps the last saved progress in memory. The current session is dropped, as on disk."""

    def __init__(self, initial: LearningProgress | None = None):
        self._stored = initial
        self.save_count = 0

    def load(self) -> LearningProgress:
        if self._stored is None:
            return LearningProgress()
        return self._stored

    def save(self, progress: LearningProgress) -> None:
        self._stored = replace(progress, current_session=CurrentSession())
        self.save_count += 1

    def clear(self) -> None:
        self._stored = None
