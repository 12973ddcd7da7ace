"""Time operations abstraction for testing.

This module provides an ABC for clock access so that branch names and PR
titles derived from the current time are deterministic in tests.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class Time(ABC):
    """Abstract time operations for dependency injection."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current local time as a timezone-aware datetime."""
        ...
