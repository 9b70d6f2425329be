# src/storycore/context/__init__.py
"""
Cross-agent context module for the StoryCore library.

Scores prior turns of other agents against the current message, fits the
best of them into a per-agent token budget and formats them for injection
into an agent's prompt.
"""

from .affinity import (
    PRESETS,
    STORY_DRIVE,
    WRITING_STUDIO,
    AgentAffinityMatrix,
    AgentRosterPreset,
    get_preset,
)
from .formatting import format_context, format_time_ago
from .injector import ContextRelevanceEngine
from .post_filter import ContextPostFilter
from .relevance import (
    extract_keywords,
    keyword_overlap,
    lexical_similarity,
    recency_decay,
)
from .selection import select_within_budget

__all__ = [
    "AgentAffinityMatrix",
    "AgentRosterPreset",
    "ContextPostFilter",
    "ContextRelevanceEngine",
    "PRESETS",
    "STORY_DRIVE",
    "WRITING_STUDIO",
    "extract_keywords",
    "format_context",
    "format_time_ago",
    "get_preset",
    "keyword_overlap",
    "lexical_similarity",
    "recency_decay",
    "select_within_budget",
]
