# src/storycore/config/models.py
"""
StoryCore configuration models.

This module defines Pydantic models for every configuration section.  They
are used for type-safe loading, validation with sensible defaults, and the
read-only configuration dumps exposed to operational tooling.

The configuration hierarchy:
    StoryCoreConfig (root)
    ├── MemoryStoreConfig        - Session memory bounds and expiry
    ├── ContextInjectionConfig   - Cross-agent relevance engine
    │   └── RelevanceWeights     - Weights of the four score components
    ├── PostFilterConfig         - Second-pass relevance refinement
    └── LoggingSettings          - Console/file logging

Usage:
    >>> from storycore.config import StoryCoreConfig
    >>> config = StoryCoreConfig()  # All defaults
    >>> config.memory.max_entries_per_session
    100

    >>> config = StoryCoreConfig(
    ...     context=ContextInjectionConfig(default_max_tokens=800)
    ... )
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

# =============================================================================
# MEMORY STORE CONFIGURATION
# =============================================================================


class MemoryStoreConfig(BaseModel):
    """
    Configuration for the session memory store.

    Examples:
        >>> config = MemoryStoreConfig()
        >>> config.session_ttl_seconds
        86400.0
    """

    max_entries_per_session: int = Field(
        default=100,
        ge=1,
        description="Hard cap on turns per session; oldest turns are evicted first",
    )
    session_ttl_seconds: float = Field(
        default=24 * 60 * 60.0,
        gt=0.0,
        description="Idle time after which a session is eligible for cleanup",
    )
    cleanup_interval_seconds: float = Field(
        default=60 * 60.0,
        gt=0.0,
        description="Period of the background expiry sweep",
    )


# =============================================================================
# CONTEXT INJECTION CONFIGURATION
# =============================================================================


class RelevanceWeights(BaseModel):
    """
    Weights for the combined relevance score.

    The weights should sum to ~1.0 for interpretability, but this is not
    required: the engine divides by ``total`` so scores stay in [0, 1].
    """

    keyword_match: float = Field(default=0.3, ge=0.0)
    semantic_similarity: float = Field(default=0.3, ge=0.0)
    recency: float = Field(default=0.2, ge=0.0)
    agent_relation: float = Field(default=0.2, ge=0.0)

    @property
    def total(self) -> float:
        """Sum of all weights."""
        return self.keyword_match + self.semantic_similarity + self.recency + self.agent_relation

    @model_validator(mode="after")
    def check_total(self) -> "RelevanceWeights":
        if self.total <= 0:
            raise ValueError("At least one relevance weight must be positive")
        return self


class ContextInjectionConfig(BaseModel):
    """
    Configuration for the cross-agent context relevance engine.

    ``agent_limits`` entries override the token limits of the active preset;
    agents listed nowhere fall back to ``default_max_tokens``.
    """

    enabled: bool = Field(default=True, description="Global kill switch for context injection")
    default_max_tokens: int = Field(
        default=500,
        ge=1,
        description="Token budget for agents without an explicit limit",
    )
    agent_limits: dict[str, int] = Field(
        default_factory=dict,
        description="Per-agent token budgets (override preset limits)",
    )
    relevance_weights: RelevanceWeights = Field(default_factory=RelevanceWeights)
    threshold: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Turns scoring at or below this value are dropped",
    )
    tokens_per_char: float = Field(
        default=0.25,
        gt=0.0,
        description="Chars-to-tokens ratio used for budget estimation",
    )
    recency_window_seconds: float = Field(
        default=60 * 60.0,
        gt=0.0,
        description="Age at which the recency component reaches zero",
    )
    disabled_agents: list[str] = Field(
        default_factory=list,
        description="Agents that start with injection switched off",
    )

    @field_validator("agent_limits")
    @classmethod
    def check_limits(cls, v: dict[str, int]) -> dict[str, int]:
        for agent_id, limit in v.items():
            if limit < 1:
                raise ValueError(f"Token limit for '{agent_id}' must be at least 1")
        return v


class PostFilterConfig(BaseModel):
    """
    Configuration for the second-pass relevance filter.

    Keyword-overlap tiers map to fixed bands: above ``topic_overlap_cutoff``
    scores ``topic_overlap``, above ``entity_match_cutoff`` scores
    ``entity_match``, above ``thematic_link_cutoff`` scores ``thematic_link``.
    """

    min_relevance: float = Field(default=0.5, ge=0.0, le=1.0)
    max_entries: int = Field(default=3, ge=1)
    recency_window_seconds: float = Field(default=10 * 60.0, gt=0.0)
    recency_bonus: float = Field(default=0.1, ge=0.0, le=1.0)

    direct_mention: float = Field(default=1.0, ge=0.0, le=1.0)
    topic_overlap: float = Field(default=0.7, ge=0.0, le=1.0)
    entity_match: float = Field(default=0.6, ge=0.0, le=1.0)
    thematic_link: float = Field(default=0.4, ge=0.0, le=1.0)

    topic_overlap_cutoff: float = Field(default=0.4, ge=0.0, le=1.0)
    entity_match_cutoff: float = Field(default=0.2, ge=0.0, le=1.0)
    thematic_link_cutoff: float = Field(default=0.1, ge=0.0, le=1.0)


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _check_level(value: str) -> str:
    level = value.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level '{value}'; expected one of {', '.join(LOG_LEVELS)}")
    return level


class LoggingSettings(BaseModel):
    """
    Logging section, applied by ``storycore.logging_config.configure_logging``.

    With the defaults the console only shows ``log_display`` records and
    nothing is written to disk.
    """

    console_enabled: bool = Field(
        default=False,
        description="Show every record on stderr, not only display records",
    )
    console_level: str = Field(default="WARNING", description="Console level when enabled")
    display_min_level: str = Field(
        default="INFO",
        description="Minimum level of display records shown while the console is quiet",
    )
    file_enabled: bool = Field(default=False, description="Write a rotating log file")
    file_level: str = Field(default="DEBUG")
    file_directory: str = Field(default="~/.local/share/storycore/logs")
    rotation_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    rotation_backup_count: int = Field(default=5, ge=0)
    components: dict[str, str] = Field(
        default_factory=dict,
        description="Per-logger levels, merged over the built-in component levels",
    )

    @field_validator("console_level", "display_min_level", "file_level")
    @classmethod
    def check_level(cls, v: str) -> str:
        return _check_level(v)

    @field_validator("components")
    @classmethod
    def check_component_levels(cls, v: dict[str, str]) -> dict[str, str]:
        return {name: _check_level(level) for name, level in v.items()}


# =============================================================================
# ROOT CONFIGURATION
# =============================================================================


class StoryCoreConfig(BaseModel):
    """
    Root configuration.

    ``preset`` selects the agent roster: its affinity matrix, display names
    and default token limits.
    """

    preset: Literal["writing-studio", "story-drive"] = Field(
        default="writing-studio",
        description="Agent roster preset",
    )
    memory: MemoryStoreConfig = Field(default_factory=MemoryStoreConfig)
    context: ContextInjectionConfig = Field(default_factory=ContextInjectionConfig)
    post_filter: PostFilterConfig = Field(default_factory=PostFilterConfig)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
