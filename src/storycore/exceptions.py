# src/storycore/exceptions.py
"""
Custom exceptions for the StoryCore library.

This module defines a hierarchy of custom exception classes so that callers
can tell structural errors (a malformed session id, an invalid turn) apart
from the best-effort context enrichment path, whose failures never escape
the relevance engine.
"""

from typing import Any


class StoryCoreError(Exception):
    """Base class for all StoryCore specific errors."""
    def __init__(self, message: str = "An unspecified error occurred in StoryCore."):
        super().__init__(message)

class ConfigError(StoryCoreError):
    """Raised for errors related to configuration loading or validation."""
    def __init__(self, message: str = "Configuration error."):
        super().__init__(message)

class MemoryStoreError(StoryCoreError):
    """Base class for errors raised by the session memory store."""
    def __init__(self, message: str = "Memory store error."):
        super().__init__(message)

class InvalidSessionIdError(MemoryStoreError):
    """
    Raised when a session id is missing, empty, or not a string.
    Direct store callers see this error; the relevance engine swallows it.
    """
    def __init__(self, session_id: Any = None, message: str = "Invalid session ID."):
        self.session_id = session_id
        super().__init__(f"{message} Got: {session_id!r}")

class InvalidTurnError(MemoryStoreError):
    """Raised when a conversation turn carries an invalid agent id, role or message."""
    def __init__(self, field: str = "unknown", message: str = "Invalid conversation turn."):
        self.field = field
        super().__init__(f"{message} Field: '{field}'")

class ContextError(StoryCoreError):
    """Base class for errors related to cross-agent context handling."""
    def __init__(self, message: str = "Context error."):
        super().__init__(message)

class RelevanceComputationError(ContextError):
    """
    Raised internally when scoring, selecting or formatting context fails.
    Always caught at the top of the relevance engine and turned into a
    ``None`` result.
    """
    def __init__(self, session_id: str = "Unknown", agent_id: str = "Unknown", message: str = "Relevance computation failed."):
        self.session_id = session_id
        self.agent_id = agent_id
        super().__init__(f"{message} Session: '{session_id}', Agent: '{agent_id}'.")
