# src/storycore/utils/clock.py
"""
Time sources for recency scoring and TTL expiry.

Scoring and session expiry never call ``datetime.now()`` directly; they ask
an injected ``Clock``.  Production code uses ``SystemClock``; tests pass a
clock whose time they control.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Protocol for anything that can report the current UTC time."""

    def now(self) -> datetime:
        """
        Return the current time.

        Returns:
            A timezone-aware ``datetime`` in UTC.
        """
        ...


class SystemClock:
    """Clock backed by the system wall clock."""

    def now(self) -> datetime:
        """Current wall-clock time in UTC."""
        return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def elapsed_seconds(earlier: datetime, now: datetime) -> float:
    """Seconds elapsed from ``earlier`` to ``now`` (negative if in the future)."""
    return (ensure_utc(now) - ensure_utc(earlier)).total_seconds()
