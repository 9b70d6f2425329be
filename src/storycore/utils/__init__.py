"""Utility helpers shared across StoryCore (time sources, token estimation)."""

from .clock import Clock, SystemClock, elapsed_seconds, ensure_utc
from .tokens import CharRatioEstimator

__all__ = [
    "CharRatioEstimator",
    "Clock",
    "SystemClock",
    "elapsed_seconds",
    "ensure_utc",
]
