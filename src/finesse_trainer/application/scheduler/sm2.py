"""
SM-2 spaced repetition adapted for finesse patterns.

Intervals are counted in global repetitions (drops), not days. Every function
here is pure: cards are never modified in place.
"""

import logging
import math
from dataclasses import replace
from enum import Enum

from finesse_trainer.domain.constants import (
    DEFAULT_EASINESS,
    INITIAL_INTERVAL,
    LENIENT_EASINESS_PENALTY,
    LENIENT_MIN_INTERVAL,
    MASTERED_REVIEW_MAX,
    MASTERED_REVIEW_MIN,
    MASTERY_THRESHOLD,
    MIN_ATTEMPTS_FOR_MASTERY,
    MIN_EASINESS,
    PASSING_QUALITY,
    QUALITY_CORRECT,
    QUALITY_INCORRECT,
    SECOND_INTERVAL,
)
from finesse_trainer.domain.models import MasteryCard
from finesse_trainer.domain.ports import RandomSource

logger = logging.getLogger(__name__)


class ReviewPolicy(str, Enum):
    """
    How a failed review is penalized.

    CANONICAL: standard SM-2 easiness update, repetitions and interval reset.
    LENIENT: easiness drops by 0.1, half the repetitions are kept and the
    interval is halved (never below 2).
    """

    CANONICAL = "canonical"
    LENIENT = "lenient"


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def get_quality(correct: bool) -> int:
    """Binary simplification of the 0-5 SM-2 quality scale."""
    return QUALITY_CORRECT if correct else QUALITY_INCORRECT


def init_card(
    pattern_id: str, global_repetition_count: int = 0, *, created_at: int
) -> MasteryCard:
    """Fresh card; `created_at` is a millisecond timestamp from the caller's Clock."""
    return MasteryCard(
        pattern_id=pattern_id,
        easiness=DEFAULT_EASINESS,
        interval=INITIAL_INTERVAL,
        repetitions=0,
        success_count=0,
        fail_count=0,
        last_reviewed_at=created_at,
        next_due_at=global_repetition_count + INITIAL_INTERVAL,
    )


def calculate_easiness(
    easiness: float, quality: int, policy: ReviewPolicy = ReviewPolicy.CANONICAL
) -> float:
    """EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at 1.3."""
    if policy == ReviewPolicy.LENIENT and quality < PASSING_QUALITY:
        return max(MIN_EASINESS, easiness - LENIENT_EASINESS_PENALTY)

    delta = 0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02)
    return max(MIN_EASINESS, easiness + delta)


def _next_interval(card: MasteryCard) -> int:
    """Interval after a successful review, from the card's pre-review state."""
    if card.repetitions == 0:
        return INITIAL_INTERVAL
    if card.repetitions == 1:
        return SECOND_INTERVAL
    return round_half_up(card.interval * card.easiness)


def review_card(
    card: MasteryCard,
    correct: bool,
    global_repetition_count: int,
    *,
    reviewed_at: int,
    policy: ReviewPolicy = ReviewPolicy.CANONICAL,
) -> MasteryCard:
    """
    Apply one review outcome and return the updated card.

    The caller owns the global repetition count and must advance it by one
    per recorded result. `reviewed_at` comes from the caller's Clock.
    """
    quality = get_quality(correct)
    easiness = calculate_easiness(card.easiness, quality, policy)

    if quality < PASSING_QUALITY:
        if policy == ReviewPolicy.LENIENT:
            repetitions = card.repetitions // 2
            interval = max(LENIENT_MIN_INTERVAL, card.interval // 2)
        else:
            repetitions = 0
            interval = INITIAL_INTERVAL
    else:
        repetitions = card.repetitions + 1
        interval = _next_interval(card)

    updated = replace(
        card,
        easiness=easiness,
        interval=interval,
        repetitions=repetitions,
        success_count=card.success_count + (1 if correct else 0),
        fail_count=card.fail_count + (0 if correct else 1),
        last_reviewed_at=reviewed_at,
        next_due_at=global_repetition_count + interval,
    )
    assert updated.easiness >= MIN_EASINESS and updated.interval >= 1
    return updated


def get_card_accuracy(card: MasteryCard) -> float:
    return card.accuracy


def is_card_mastered(card: MasteryCard) -> bool:
    if card.attempts < MIN_ATTEMPTS_FOR_MASTERY:
        return False
    return card.accuracy >= MASTERY_THRESHOLD


def get_due_cards(cards: dict[str, MasteryCard], global_repetition_count: int) -> list[MasteryCard]:
    return [c for c in cards.values() if c.next_due_at <= global_repetition_count]


def get_unmastered_cards(cards: dict[str, MasteryCard]) -> list[MasteryCard]:
    return [c for c in cards.values() if not is_card_mastered(c)]


def get_mastered_cards(cards: dict[str, MasteryCard]) -> list[MasteryCard]:
    return [c for c in cards.values() if is_card_mastered(c)]


def _practice_order(card: MasteryCard) -> tuple[int, float]:
    # Least practiced first, then weakest
    return (card.attempts, card.accuracy)


def select_next_pattern(
    cards: dict[str, MasteryCard],
    all_pattern_ids: list[str],
    global_repetition_count: int,
    last_mastered_review_at: int,
    rng: RandomSource,
    introduce_new: bool = True,
) -> str | None:
    """
    Select the next pattern to practice.

    Priority:
    1. Unreviewed patterns, one at a time at random (skipped if not introduce_new)
    2. Due cards, least practiced then weakest first
    3. Unmastered cards, same order
    4. A random mastered card, once 10-19 repetitions have passed since the
       last mastered review
    5. Any pattern at random

    Returns:
        A pattern id, or None only when ``all_pattern_ids`` is empty.
    """
    if introduce_new:
        unreviewed = [pid for pid in all_pattern_ids if pid not in cards]
        if unreviewed:
            logger.debug(f"Introducing new pattern ({len(unreviewed)} unreviewed)")
            return unreviewed[rng.choice_index(len(unreviewed))]

    due = get_due_cards(cards, global_repetition_count)
    if due:
        return sorted(due, key=_practice_order)[0].pattern_id

    unmastered = get_unmastered_cards(cards)
    if unmastered:
        return sorted(unmastered, key=_practice_order)[0].pattern_id

    mastered = get_mastered_cards(cards)
    if mastered:
        review_gap = MASTERED_REVIEW_MIN + int(
            rng.random() * (MASTERED_REVIEW_MAX - MASTERED_REVIEW_MIN)
        )
        if global_repetition_count - last_mastered_review_at >= review_gap:
            logger.debug("Reviewing a mastered pattern")
            return mastered[rng.choice_index(len(mastered))].pattern_id

    if all_pattern_ids:
        return all_pattern_ids[rng.choice_index(len(all_pattern_ids))]

    return None
