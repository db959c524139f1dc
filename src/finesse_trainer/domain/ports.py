"""
Ports (interfaces) for the finesse trainer.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import LearningProgress


class RandomSource(ABC):
    """
    Source of uniform randomness for target and pattern selection.

    Implementations:
        - SystemRandomSource: Backed by ``random.Random`` (optionally seeded).
        - Test doubles replaying a fixed sequence.
    """

    @abstractmethod
    def random(self) -> float:
        """Return a float uniformly distributed in [0, 1)."""
        pass

    def choice_index(self, n: int) -> int:
        """Uniform index in ``range(n)``. ``n`` must be positive."""
        assert n > 0
        return min(int(self.random() * n), n - 1)


class Clock(ABC):
    """Monotonic non-decreasing wall clock in epoch milliseconds."""

    @abstractmethod
    def now(self) -> int:
        pass


class ProgressRepository(ABC):
    """
    Port for persisting the durable subset of LearningProgress.

    Implementations:
        - JsonProgressRepository: A JSON file on disk.
        - InMemoryProgressRepository: Process-local, for tests and ephemeral runs.
    """

    @abstractmethod
    def load(self) -> LearningProgress:
        """
        Load stored progress.

        Returns:
            The stored progress with a fresh current session, or an empty
            LearningProgress when nothing valid is stored. Never raises for
            malformed data.
        """
        pass

    @abstractmethod
    def save(self, progress: LearningProgress) -> None:
        """Store the durable subset of ``progress`` (current session excluded)."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove any stored progress."""
        pass
