# src/storycore/memory/__init__.py
"""
Memory module for StoryCore.

Provides the in-process session memory store that keeps per-session
conversation turns for the cross-agent relevance engine.
"""

from .session_store import SessionLockRegistry, SessionMemoryStore

__all__ = ["SessionLockRegistry", "SessionMemoryStore"]
