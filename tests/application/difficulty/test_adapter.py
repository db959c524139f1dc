import pytest

from finesse_trainer.application.difficulty.adapter import (
    DIFFICULTY_TIERS,
    DifficultyAdapter,
    calculate_consistency,
    calculate_difficulty,
    detect_flow,
    record_attempt,
    tier_from_difficulty,
)
from finesse_trainer.domain.models import DifficultyTier, PerformanceState


def test_consistency_needs_three_samples():
    assert calculate_consistency(()) == 0.5
    assert calculate_consistency((100.0, 900.0)) == 0.5


def test_consistency_scale():
    assert calculate_consistency((700.0, 700.0, 700.0)) == 1.0
    assert calculate_consistency((0.0, 1000.0, 0.0, 1000.0)) == 0.0
    # stddev 100 -> 0.8
    assert calculate_consistency((400.0, 600.0, 400.0, 600.0)) == pytest.approx(0.8)


def test_calculate_difficulty():
    assert calculate_difficulty(1.0, 500.0, 1.0) == 100
    assert calculate_difficulty(0.5, 1000.0, 0.5) == 55
    assert calculate_difficulty(0.0, 3000.0, 0.0) == 0


@pytest.mark.parametrize(
    "difficulty,tier",
    [
        (100, DifficultyTier.INSANE),
        (80, DifficultyTier.INSANE),
        (79, DifficultyTier.HARDCORE),
        (60, DifficultyTier.HARDCORE),
        (59, DifficultyTier.STANDARD),
        (35, DifficultyTier.STANDARD),
        (34, DifficultyTier.CASUAL),
        (0, DifficultyTier.CASUAL),
    ],
)
def test_tier_from_difficulty(difficulty, tier):
    assert tier_from_difficulty(difficulty) == tier


def test_detect_flow_thresholds():
    assert detect_flow(0.85, 0.7, 900.0, 5)
    assert not detect_flow(0.8, 0.7, 900.0, 5)
    assert not detect_flow(0.85, 0.6, 900.0, 5)
    assert not detect_flow(0.85, 0.7, 1000.0, 5)
    assert not detect_flow(0.85, 0.7, 900.0, 4)


def test_default_state():
    state = PerformanceState()
    assert state.current_difficulty == 50
    assert state.difficulty_tier == DifficultyTier.STANDARD
    assert state.weak_pattern_bias == 0.5
    assert state.new_pattern_rate == 0.2


def test_first_correct_attempt():
    state = record_attempt(PerformanceState(), True, 1000)

    assert state.recent_accuracy == (1,)
    assert state.current_accuracy == 1.0
    assert state.average_response_time == 1000.0
    assert state.consistency_score == 0.5
    assert state.flow_streak == 1
    assert not state.is_in_flow
    # 40 + 20 + 15
    assert state.current_difficulty == 75
    assert state.difficulty_tier == DifficultyTier.HARDCORE
    assert state.weak_pattern_bias == pytest.approx(0.7)
    assert state.new_pattern_rate == pytest.approx(0.1)
    assert state.adaptive_speed == 1.0


def test_struggling_player():
    state = record_attempt(PerformanceState(), False, 2000)

    assert state.current_difficulty == 15
    assert state.difficulty_tier == DifficultyTier.CASUAL
    assert state.flow_streak == 0
    assert state.weak_pattern_bias == pytest.approx(0.39)
    assert state.new_pattern_rate == pytest.approx(0.3)
    assert state.adaptive_speed == 0.8


def test_flow_after_streak():
    state = PerformanceState()
    for _ in range(4):
        state = record_attempt(state, True, 500)
    assert not state.is_in_flow

    state = record_attempt(state, True, 500)
    assert state.is_in_flow
    assert state.current_difficulty == 100
    assert state.difficulty_tier == DifficultyTier.INSANE
    assert state.new_pattern_rate == pytest.approx(0.05 * 0.7)
    assert state.adaptive_speed == 1.2

    state = record_attempt(state, False, 500)
    assert state.flow_streak == 0
    assert not state.is_in_flow


def test_windows_are_capped():
    state = PerformanceState()
    for i in range(25):
        state = record_attempt(state, i % 2 == 0, 100 * i)

    assert len(state.recent_accuracy) == 20
    assert len(state.recent_response_times) == 20
    assert state.recent_response_times[0] == 500.0


def test_adapter_manual_tier_is_pinned():
    adapter = DifficultyAdapter()
    adapter.set_tier(DifficultyTier.CASUAL)
    assert adapter.state.weak_pattern_bias == DIFFICULTY_TIERS[DifficultyTier.CASUAL].weak_pattern_bias

    for _ in range(6):
        adapter.record_attempt(True, 400)

    assert adapter.state.current_difficulty == 100
    assert adapter.state.difficulty_tier == DifficultyTier.CASUAL
    assert adapter.tier_settings.name == "Casual"


def test_adapter_clear_override():
    adapter = DifficultyAdapter()
    adapter.set_tier(DifficultyTier.INSANE)
    adapter.clear_tier_override()
    assert adapter.manual_tier is None
    assert adapter.state == PerformanceState()

    adapter.set_tier(DifficultyTier.CASUAL)
    adapter.record_attempt(True, 1000)
    adapter.clear_tier_override()
    assert adapter.state.difficulty_tier == DifficultyTier.HARDCORE


def test_adapter_logs_tier_change(caplog):
    adapter = DifficultyAdapter()
    with caplog.at_level("INFO"):
        adapter.record_attempt(True, 1000)
    assert "STANDARD -> HARDCORE" in caplog.text


def test_pattern_selection_params(make_random):
    adapter = DifficultyAdapter()
    params = adapter.pattern_selection_params(make_random([0.1]))
    assert params.should_introduce_new
    assert params.new_pattern_rate == 0.2

    assert not adapter.pattern_selection_params(make_random([0.3])).should_introduce_new


def test_adapter_reset():
    adapter = DifficultyAdapter()
    adapter.set_tier(DifficultyTier.HARDCORE)
    adapter.record_attempt(False, 1500)
    adapter.reset()
    assert adapter.state == PerformanceState()
    assert adapter.manual_tier is None
