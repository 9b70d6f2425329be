# tests/api_server/conftest.py
"""
Pytest configuration and fixtures for API server tests.

The application is built with ``create_app`` around a frozen clock and run
through ``TestClient`` as a context manager so that the lifespan (store
start-up and destruction) is exercised.
"""

import pytest
from fastapi.testclient import TestClient

from storycore.api_server.main import create_app
from storycore.config.models import MemoryStoreConfig, StoryCoreConfig
from storycore.logging_config import reset_logging


@pytest.fixture(autouse=True)
def _reset_logging():
    """Each app start configures logging; undo it after the test."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def app_config() -> StoryCoreConfig:
    return StoryCoreConfig(memory=MemoryStoreConfig(max_entries_per_session=5))


@pytest.fixture
def app(app_config, frozen_clock):
    return create_app(app_config, clock=frozen_clock)


@pytest.fixture
def api_client(app):
    """
    Create a FastAPI test client with the lifespan running.
    """
    with TestClient(app) as client:
        yield client


@pytest.fixture
def add_turn(api_client):
    """Helper that records a turn through the API and returns the response."""

    def _add(session_id: str, agent_id: str, role: str, message: str):
        return api_client.post(
            f"/api/memory/{session_id}/conversations",
            json={"agent_id": agent_id, "role": role, "message": message},
        )

    return _add
