# src/storycore/__init__.py
"""
StoryCore - Cross-agent context sharing for multi-agent writing assistants.

This library keeps a bounded, per-session memory of the turns exchanged with
each agent persona, and on every new message decides which turns of *other*
agents are worth showing to the agent about to answer: scored by keyword
overlap, lexical similarity, recency and agent affinity, fitted into a token
budget and rendered as a context block ready for prompt injection.
"""

from importlib.metadata import PackageNotFoundError, version

from .config import (
    ContextInjectionConfig,
    LoggingSettings,
    MemoryStoreConfig,
    PostFilterConfig,
    RelevanceWeights,
    StoryCoreConfig,
    load_config,
)
from .context import (
    PRESETS,
    STORY_DRIVE,
    WRITING_STUDIO,
    AgentAffinityMatrix,
    AgentRosterPreset,
    ContextPostFilter,
    ContextRelevanceEngine,
    get_preset,
)
from .exceptions import (
    ConfigError,
    ContextError,
    InvalidSessionIdError,
    InvalidTurnError,
    MemoryStoreError,
    RelevanceComputationError,
    StoryCoreError,
)
from .logging_config import configure_logging, log_display
from .memory import SessionMemoryStore
from .models import (
    ContextBundle,
    ContextEntry,
    ContextMetadata,
    ConversationTurn,
    Role,
    ScoredTurn,
    SessionStats,
)
from .utils import Clock, SystemClock

try:
    __version__ = version("storycore")
except PackageNotFoundError:
    __version__ = "0.0.0"


__all__ = [
    # Memory and engine
    "SessionMemoryStore",
    "ContextRelevanceEngine",
    "ContextPostFilter",
    # Rosters
    "AgentAffinityMatrix",
    "AgentRosterPreset",
    "PRESETS",
    "STORY_DRIVE",
    "WRITING_STUDIO",
    "get_preset",
    # Models
    "ContextBundle",
    "ContextEntry",
    "ContextMetadata",
    "ConversationTurn",
    "Role",
    "ScoredTurn",
    "SessionStats",
    # Configuration
    "ContextInjectionConfig",
    "LoggingSettings",
    "MemoryStoreConfig",
    "PostFilterConfig",
    "RelevanceWeights",
    "StoryCoreConfig",
    "load_config",
    # Exceptions
    "StoryCoreError",
    "ConfigError",
    "MemoryStoreError",
    "InvalidSessionIdError",
    "InvalidTurnError",
    "ContextError",
    "RelevanceComputationError",
    # Logging
    "configure_logging",
    "log_display",
    # Utilities
    "Clock",
    "SystemClock",
    "__version__",
]
