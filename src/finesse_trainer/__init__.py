"""Finesse trainer: finesse validation and adaptive practice scheduling."""

from .consts import VERSION

__version__ = VERSION
