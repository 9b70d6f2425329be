# tests/conftest.py
"""
Shared fixtures for the StoryCore test suite.

Provides a controllable clock so that recency scoring, time labels and
session expiry can be tested without real sleeps.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure source is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float = 0, minutes: float = 0, hours: float = 0) -> datetime:
        self.current += timedelta(seconds=seconds, minutes=minutes, hours=hours)
        return self.current

    def ago(self, seconds: float = 0, minutes: float = 0, hours: float = 0) -> datetime:
        """A point in the past relative to the current frozen time."""
        return self.current - timedelta(seconds=seconds, minutes=minutes, hours=hours)


@pytest.fixture
def frozen_clock() -> FrozenClock:
    """A clock frozen at 2024-06-01 12:00 UTC."""
    return FrozenClock()
