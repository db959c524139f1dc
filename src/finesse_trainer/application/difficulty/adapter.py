"""
Difficulty and flow adapter.

Tracks the last 20 attempts and derives a difficulty score, a tier and the
bias parameters that pattern selection consumes.
"""

import logging
import math
from dataclasses import replace

from finesse_trainer.domain.constants import (
    CONSISTENCY_STDDEV_SCALE,
    FLOW_MAX_RESPONSE_MS,
    FLOW_MIN_ACCURACY,
    FLOW_MIN_CONSISTENCY,
    FLOW_MIN_STREAK,
    FLOW_NEW_PATTERN_MULT,
    FLOW_SPEED,
    MIN_CONSISTENCY_SAMPLES,
    PERFORMANCE_WINDOW,
    STRUGGLE_ACCURACY,
    STRUGGLE_BIAS_MULT,
    STRUGGLE_SPEED,
)
from finesse_trainer.domain.models import (
    DifficultyTier,
    PatternSelectionParams,
    PerformanceState,
    TierSettings,
)
from finesse_trainer.domain.ports import RandomSource

logger = logging.getLogger(__name__)

DIFFICULTY_TIERS: dict[DifficultyTier, TierSettings] = {
    DifficultyTier.CASUAL: TierSettings(
        name="Casual",
        description="Relaxed timing, generous scoring",
        accuracy_threshold=0.0,
        time_threshold_ms=3000,
        weak_pattern_bias=0.3,
        new_pattern_rate=0.3,
    ),
    DifficultyTier.STANDARD: TierSettings(
        name="Standard",
        description="Normal SM-2 progression",
        accuracy_threshold=0.5,
        time_threshold_ms=1500,
        weak_pattern_bias=0.5,
        new_pattern_rate=0.2,
    ),
    DifficultyTier.HARDCORE: TierSettings(
        name="Hardcore",
        description="Strict timing, harder patterns first",
        accuracy_threshold=0.75,
        time_threshold_ms=800,
        weak_pattern_bias=0.7,
        new_pattern_rate=0.1,
    ),
    DifficultyTier.INSANE: TierSettings(
        name="Insane",
        description="Perfect inputs only, speed required",
        accuracy_threshold=0.9,
        time_threshold_ms=400,
        weak_pattern_bias=0.8,
        new_pattern_rate=0.05,
        perfect_required=True,
    ),
}


def _mean(values: tuple[float, ...] | tuple[int, ...]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def calculate_consistency(times: tuple[float, ...]) -> float:
    """
    Inverse-normalized population stddev of response times.

    A stddev of 0 ms scores 1.0, 500 ms or more scores 0.0. Fewer than three
    samples score a neutral 0.5.
    """
    if len(times) < MIN_CONSISTENCY_SAMPLES:
        return 0.5

    mean = _mean(times)
    variance = _mean(tuple((t - mean) ** 2 for t in times))
    std_dev = math.sqrt(variance)
    return max(0.0, min(1.0, 1 - std_dev / CONSISTENCY_STDDEV_SCALE))


def detect_flow(accuracy: float, consistency: float, avg_time: float, streak: int) -> bool:
    return (
        accuracy > FLOW_MIN_ACCURACY
        and consistency > FLOW_MIN_CONSISTENCY
        and avg_time < FLOW_MAX_RESPONSE_MS
        and streak >= FLOW_MIN_STREAK
    )


def calculate_difficulty(accuracy: float, avg_time: float, consistency: float) -> int:
    """
    Difficulty on a 0-100 scale.

    Accuracy weighs 40, speed 30 (2000 ms scores 0, 500 ms or faster scores 30)
    and consistency 30.
    """
    accuracy_score = accuracy * 40
    speed_score = max(0.0, min(30.0, (2000 - avg_time) / 50))
    consistency_score = consistency * 30
    return math.floor(accuracy_score + speed_score + consistency_score + 0.5)


def tier_from_difficulty(difficulty: int) -> DifficultyTier:
    if difficulty >= 80:
        return DifficultyTier.INSANE
    if difficulty >= 60:
        return DifficultyTier.HARDCORE
    if difficulty >= 35:
        return DifficultyTier.STANDARD
    return DifficultyTier.CASUAL


def _derive(
    state: PerformanceState, manual_tier: DifficultyTier | None
) -> PerformanceState:
    """Recompute tier and bias parameters from the state's rolling metrics."""
    tier = manual_tier or tier_from_difficulty(state.current_difficulty)
    settings = DIFFICULTY_TIERS[tier]

    struggling = state.current_accuracy < STRUGGLE_ACCURACY
    weak_bias = min(1.0, settings.weak_pattern_bias * (STRUGGLE_BIAS_MULT if struggling else 1))
    new_rate = settings.new_pattern_rate * (FLOW_NEW_PATTERN_MULT if state.is_in_flow else 1)

    if state.is_in_flow:
        speed = FLOW_SPEED
    elif struggling:
        speed = STRUGGLE_SPEED
    else:
        speed = 1.0

    return replace(
        state,
        difficulty_tier=tier,
        weak_pattern_bias=weak_bias,
        new_pattern_rate=new_rate,
        adaptive_speed=speed,
    )


def record_attempt(
    state: PerformanceState,
    correct: bool,
    response_time_ms: float,
    manual_tier: DifficultyTier | None = None,
) -> PerformanceState:
    """Push one attempt into the rolling windows and recompute everything."""
    accuracy_window = (state.recent_accuracy + (1 if correct else 0,))[-PERFORMANCE_WINDOW:]
    time_window = (state.recent_response_times + (float(response_time_ms),))[-PERFORMANCE_WINDOW:]

    current_accuracy = _mean(accuracy_window)
    average_time = _mean(time_window)
    consistency = calculate_consistency(time_window)
    streak = state.flow_streak + 1 if correct else 0
    in_flow = detect_flow(current_accuracy, consistency, average_time, streak)

    updated = replace(
        state,
        recent_accuracy=accuracy_window,
        recent_response_times=time_window,
        current_accuracy=current_accuracy,
        average_response_time=average_time,
        consistency_score=consistency,
        is_in_flow=in_flow,
        flow_streak=streak,
        current_difficulty=calculate_difficulty(current_accuracy, average_time, consistency),
    )
    return _derive(updated, manual_tier)


class DifficultyAdapter:
    """
    Holds the player's PerformanceState and an optional manual tier override.

    While an override is set the tier and its bias parameters are pinned; the
    difficulty score is still tracked.
    """

    def __init__(self, state: PerformanceState | None = None):
        self._state = state or PerformanceState()
        self._manual_tier: DifficultyTier | None = None

    @property
    def state(self) -> PerformanceState:
        return self._state

    @property
    def manual_tier(self) -> DifficultyTier | None:
        return self._manual_tier

    @property
    def tier_settings(self) -> TierSettings:
        return DIFFICULTY_TIERS[self._manual_tier or self._state.difficulty_tier]

    def record_attempt(self, correct: bool, response_time_ms: float) -> PerformanceState:
        previous_tier = self._state.difficulty_tier
        self._state = record_attempt(self._state, correct, response_time_ms, self._manual_tier)

        if self._state.difficulty_tier != previous_tier:
            logger.info(
                f"Difficulty tier {previous_tier.value} -> {self._state.difficulty_tier.value} "
                f"(score {self._state.current_difficulty})"
            )
        return self._state

    def set_tier(self, tier: DifficultyTier) -> None:
        """Pin the tier and adopt its bias parameters until cleared or reset."""
        tier = DifficultyTier(tier)
        settings = DIFFICULTY_TIERS[tier]
        self._manual_tier = tier
        self._state = replace(
            self._state,
            difficulty_tier=tier,
            weak_pattern_bias=settings.weak_pattern_bias,
            new_pattern_rate=settings.new_pattern_rate,
        )

    def clear_tier_override(self) -> None:
        self._manual_tier = None
        if self._state.recent_accuracy:
            self._state = _derive(self._state, None)
        else:
            self._state = PerformanceState()

    def pattern_selection_params(self, rng: RandomSource) -> PatternSelectionParams:
        return PatternSelectionParams(
            weak_pattern_bias=self._state.weak_pattern_bias,
            new_pattern_rate=self._state.new_pattern_rate,
            should_introduce_new=rng.random() < self._state.new_pattern_rate,
        )

    def reset(self) -> None:
        self._manual_tier = None
        self._state = PerformanceState()
