# Infrastructure Adapters Package
from .system import SystemClock, SystemRandomSource

__all__ = ["SystemClock", "SystemRandomSource"]
