"""System-backed implementations of the RandomSource and Clock ports."""

import random
import time

from finesse_trainer.domain.ports import Clock, RandomSource


class SystemRandomSource(RandomSource):
    """Uniform randomness from ``random.Random``; pass a seed for reproducible runs."""

    def __init__(self, seed: int | None = None):
        self._random = random.Random(seed)

    def random(self) -> float:
        return self._random.random()


class SystemClock(Clock):
    """Wall clock that never goes backwards within one process."""

    def __init__(self):
        self._last = 0

    def now(self) -> int:
        self._last = max(self._last, int(time.time() * 1000))
        return self._last
