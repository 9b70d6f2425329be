# tests/memory/conftest.py
"""
Shared pytest fixtures for session memory store tests.
"""

import pytest

from storycore.config.models import MemoryStoreConfig
from storycore.memory.session_store import SessionMemoryStore


@pytest.fixture
def store_config() -> MemoryStoreConfig:
    """Small cap and short TTL so bounds are easy to hit."""
    return MemoryStoreConfig(
        max_entries_per_session=5,
        session_ttl_seconds=60,
        cleanup_interval_seconds=30,
    )


@pytest.fixture
def store(store_config, frozen_clock) -> SessionMemoryStore:
    """A store driven by the frozen clock (cleanup loop not started)."""
    return SessionMemoryStore(store_config, clock=frozen_clock)
