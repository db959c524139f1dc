import pytest

from finesse_trainer.application.progress.service import LearningProgressService
from finesse_trainer.domain.ports import Clock, RandomSource
from finesse_trainer.infrastructure.persistence.memory import InMemoryProgressRepository


class SequenceRandom(RandomSource):
    """Replays a fixed list of values, cycling when exhausted."""

    def __init__(self, values=(0.0,)):
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


class FakeClock(Clock):
    def __init__(self, start: int = 1_000_000):
        self.current = start

    def now(self) -> int:
        return self.current

    def advance(self, ms: int) -> None:
        self.current += ms


@pytest.fixture
def make_random():
    """Factory for a RandomSource replaying the given values."""
    return SequenceRandom


@pytest.fixture
def rng():
    return SequenceRandom([0.0])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repo():
    return InMemoryProgressRepository()


@pytest.fixture
def service(rng, clock, repo):
    return LearningProgressService(rng=rng, clock=clock, repository=repo)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Isolate config and progress files
    monkeypatch.setenv("HOME", str(home))
    for var in ("FINESSE_DATA_DIR", "FINESSE_PROGRESS_FILE", "FINESSE_SEED", "FINESSE_MODE"):
        monkeypatch.delenv(var, raising=False)
    return home
