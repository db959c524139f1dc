# Infrastructure Persistence Package
from .json_store import JsonProgressRepository
from .memory import InMemoryProgressRepository

__all__ = ["JsonProgressRepository", "InMemoryProgressRepository"]
