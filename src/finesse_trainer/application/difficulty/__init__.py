# Application Difficulty Package
from .adapter import DIFFICULTY_TIERS, DifficultyAdapter, record_attempt, tier_from_difficulty

__all__ = ["DIFFICULTY_TIERS", "DifficultyAdapter", "record_attempt", "tier_from_difficulty"]
