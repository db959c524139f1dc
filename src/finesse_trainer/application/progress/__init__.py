# Application Progress Package
from .service import LearningProgressService
from .stats import build_mastery_grid, calculate_mastery_stats, create_session_record

__all__ = [
    "LearningProgressService",
    "calculate_mastery_stats",
    "build_mastery_grid",
    "create_session_record",
]
