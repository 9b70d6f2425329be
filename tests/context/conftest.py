# tests/context/conftest.py
"""
Shared fixtures for cross-agent context tests.

Provides a frozen-clock memory store, an engine wired to it, and helpers
for building scored turns and context entries by hand.
"""

from datetime import datetime

import pytest

from storycore.config.models import ContextInjectionConfig, MemoryStoreConfig
from storycore.context.injector import ContextRelevanceEngine
from storycore.memory.session_store import SessionMemoryStore
from storycore.models import ContextEntry, ConversationTurn, ScoredTurn


@pytest.fixture
def memory_store(frozen_clock) -> SessionMemoryStore:
    return SessionMemoryStore(MemoryStoreConfig(max_entries_per_session=100), clock=frozen_clock)


@pytest.fixture
def engine(memory_store, frozen_clock) -> ContextRelevanceEngine:
    """Engine with the writing-studio roster and default settings."""
    return ContextRelevanceEngine(memory_store, ContextInjectionConfig(), clock=frozen_clock)


@pytest.fixture
def make_scored():
    """Factory for ``ScoredTurn`` objects."""

    def _make(
        message: str,
        *,
        agent_id: str = "world-builder",
        role: str = "assistant",
        timestamp: datetime | None = None,
        score: float = 0.5,
        index: int = 0,
    ) -> ScoredTurn:
        kwargs = {"agent_id": agent_id, "role": role, "message": message}
        if timestamp is not None:
            kwargs["timestamp"] = timestamp
        return ScoredTurn(
            turn=ConversationTurn(**kwargs),
            relevance_score=score,
            original_index=index,
        )

    return _make


@pytest.fixture
def make_entry(frozen_clock):
    """Factory for ``ContextEntry`` objects (one hour old by default)."""

    def _make(
        message: str,
        *,
        agent_id: str = "world-builder",
        display_name: str = "World Builder",
        role: str = "assistant",
        timestamp: datetime | None = None,
        score: float = 0.5,
    ) -> ContextEntry:
        return ContextEntry(
            agent_id=agent_id,
            display_name=display_name,
            role=role,
            message=message,
            timestamp=timestamp or frozen_clock.ago(hours=1),
            relevance_score=score,
        )

    return _make
