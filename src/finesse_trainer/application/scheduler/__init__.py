# Application Scheduler Package
from .sm2 import (
    ReviewPolicy,
    calculate_easiness,
    get_card_accuracy,
    get_due_cards,
    get_mastered_cards,
    get_quality,
    get_unmastered_cards,
    init_card,
    is_card_mastered,
    review_card,
    select_next_pattern,
)

__all__ = [
    "ReviewPolicy",
    "init_card",
    "review_card",
    "get_quality",
    "calculate_easiness",
    "get_card_accuracy",
    "is_card_mastered",
    "get_due_cards",
    "get_unmastered_cards",
    "get_mastered_cards",
    "select_next_pattern",
]
