# src/storycore/context/affinity.py
"""
Agent affinity configuration.

An ``AgentAffinityMatrix`` expresses how relevant content from one agent is
presumed to be for another.  It is static configuration: the engine reads it
but never changes it.  Two rosters ship with the library:

- ``writing-studio``: the eight long-form personas (``plot-architect``,
  ``character-psychologist``, ...).
- ``story-drive``: the short-id roster (``plot``, ``character``, ``dialog``,
  ...), which adds the ``narrative`` and ``reader`` agents.

Each preset bundles the matrix, the display names and default token limits.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from pydantic import BaseModel, Field, field_validator

DEFAULT_AFFINITY = 0.3


class AgentAffinityMatrix(BaseModel):
    """
    Directed (agent, other agent) → affinity lookup.

    Pairs are not forced to be symmetric.  Unlisted pairs resolve to
    ``default_affinity``.

    Attributes:
        relationships: ``{agent_id: {other_agent_id: affinity}}``.
        display_names: Human-readable agent names for formatted context.
        default_affinity: Affinity of pairs missing from ``relationships``.
    """

    relationships: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    display_names: Dict[str, str] = Field(default_factory=dict)
    default_affinity: float = Field(default=DEFAULT_AFFINITY, ge=0.0, le=1.0)

    model_config = {"frozen": True}

    @field_validator("relationships")
    @classmethod
    def check_range(cls, v: Dict[str, Dict[str, float]]) -> Dict[str, Dict[str, float]]:
        for agent_id, row in v.items():
            for other_id, value in row.items():
                if not 0.0 <= value <= 1.0:
                    raise ValueError(
                        f"Affinity {agent_id} -> {other_id} must be within [0, 1], got {value}"
                    )
        return v

    def affinity(self, agent_id: str, other_agent_id: str) -> float:
        """Affinity of ``other_agent_id``'s content for ``agent_id``."""
        return self.relationships.get(agent_id, {}).get(other_agent_id, self.default_affinity)

    def display_name(self, agent_id: str) -> str:
        """Display name for an agent, or the raw id if none is configured."""
        return self.display_names.get(agent_id, agent_id)

    @property
    def agents(self) -> List[str]:
        """Every agent id mentioned as a row, a column or a display name."""
        seen: Dict[str, None] = {}
        for agent_id, row in self.relationships.items():
            seen.setdefault(agent_id)
            for other_id in row:
                seen.setdefault(other_id)
        for agent_id in self.display_names:
            seen.setdefault(agent_id)
        return list(seen)

    def to_dict(self) -> Dict[str, object]:
        """Read-only dump for operational tooling."""
        return {
            "relationships": {k: dict(v) for k, v in self.relationships.items()},
            "display_names": dict(self.display_names),
            "default_affinity": self.default_affinity,
        }


@dataclass(frozen=True)
class AgentRosterPreset:
    """A named agent roster: affinity matrix plus default token limits."""

    name: str
    matrix: AgentAffinityMatrix
    agent_limits: Dict[str, int] = field(default_factory=dict)


# =============================================================================
# Writing-studio roster
# =============================================================================

WRITING_STUDIO = AgentRosterPreset(
    name="writing-studio",
    matrix=AgentAffinityMatrix(
        relationships={
            "plot-architect": {
                "character-psychologist": 0.9,
                "world-builder": 0.8,
                "genre-specialist": 0.7,
                "dialogue-coach": 0.5,
                "style-mentor": 0.5,
                "editor": 0.4,
                "research-assistant": 0.6,
            },
            "character-psychologist": {
                "plot-architect": 0.9,
                "dialogue-coach": 0.9,
                "world-builder": 0.6,
                "style-mentor": 0.5,
                "genre-specialist": 0.5,
                "editor": 0.4,
                "research-assistant": 0.6,
            },
            "dialogue-coach": {
                "character-psychologist": 0.9,
                "plot-architect": 0.5,
                "style-mentor": 0.8,
                "genre-specialist": 0.6,
                "editor": 0.7,
                "world-builder": 0.4,
                "research-assistant": 0.5,
            },
            "world-builder": {
                "plot-architect": 0.8,
                "genre-specialist": 0.8,
                "character-psychologist": 0.6,
                "research-assistant": 0.8,
                "style-mentor": 0.5,
                "dialogue-coach": 0.4,
                "editor": 0.4,
            },
            "genre-specialist": {
                "plot-architect": 0.7,
                "world-builder": 0.8,
                "style-mentor": 0.8,
                "research-assistant": 0.7,
                "character-psychologist": 0.5,
                "dialogue-coach": 0.6,
                "editor": 0.6,
            },
            "style-mentor": {
                "dialogue-coach": 0.8,
                "genre-specialist": 0.8,
                "editor": 0.9,
                "plot-architect": 0.5,
                "character-psychologist": 0.5,
                "world-builder": 0.5,
                "research-assistant": 0.5,
            },
            "editor": {
                "style-mentor": 0.9,
                "dialogue-coach": 0.7,
                "genre-specialist": 0.6,
                "plot-architect": 0.4,
                "character-psychologist": 0.4,
                "world-builder": 0.4,
                "research-assistant": 0.5,
            },
            "research-assistant": {
                "world-builder": 0.8,
                "genre-specialist": 0.7,
                "plot-architect": 0.6,
                "character-psychologist": 0.6,
                "dialogue-coach": 0.5,
                "style-mentor": 0.5,
                "editor": 0.5,
            },
        },
        display_names={
            "plot-architect": "Plot Architect",
            "character-psychologist": "Character Psychologist",
            "dialogue-coach": "Dialogue Coach",
            "world-builder": "World Builder",
            "genre-specialist": "Genre Specialist",
            "style-mentor": "Style Mentor",
            "editor": "Editor",
            "research-assistant": "Research Assistant",
        },
    ),
    agent_limits={
        "plot-architect": 750,
        "character-psychologist": 600,
        "dialogue-coach": 400,
        "research-assistant": 1000,
        "world-builder": 500,
        "genre-specialist": 400,
        "editor": 300,
        "style-mentor": 400,
    },
)


# =============================================================================
# Story-drive roster
# =============================================================================

STORY_DRIVE = AgentRosterPreset(
    name="story-drive",
    matrix=AgentAffinityMatrix(
        relationships={
            "plot": {
                "character": 0.95,
                "world": 0.8,
                "genre": 0.7,
                "dialog": 0.5,
                "narrative": 0.9,
                "editor": 0.6,
                "reader": 0.6,
            },
            "character": {
                "plot": 0.95,
                "dialog": 0.9,
                "world": 0.6,
                "narrative": 0.8,
                "genre": 0.5,
                "editor": 0.5,
                "reader": 0.7,
            },
            "dialog": {
                "character": 0.9,
                "plot": 0.5,
                "editor": 0.8,
                "genre": 0.6,
                "narrative": 0.7,
                "world": 0.4,
                "reader": 0.6,
            },
            "world": {
                "plot": 0.8,
                "genre": 0.85,
                "character": 0.6,
                "narrative": 0.8,
                "editor": 0.4,
                "dialog": 0.4,
                "reader": 0.5,
            },
            "genre": {
                "plot": 0.7,
                "world": 0.85,
                "narrative": 0.7,
                "editor": 0.6,
                "character": 0.5,
                "dialog": 0.6,
                "reader": 0.6,
            },
            "editor": {
                "narrative": 0.8,
                "dialog": 0.8,
                "plot": 0.6,
                "genre": 0.6,
                "character": 0.5,
                "world": 0.4,
                "reader": 0.7,
            },
            "reader": {
                "plot": 0.6,
                "character": 0.7,
                "narrative": 0.6,
                "dialog": 0.6,
                "editor": 0.7,
                "world": 0.5,
                "genre": 0.6,
            },
            "narrative": {
                "plot": 0.9,
                "character": 0.8,
                "world": 0.8,
                "editor": 0.8,
                "dialog": 0.7,
                "genre": 0.7,
                "reader": 0.6,
            },
        },
        display_names={
            "plot": "Plot Doctor",
            "character": "Character Coach",
            "dialog": "Dialog Director",
            "world": "World Builder",
            "genre": "Genre Guide",
            "editor": "Editor",
            "reader": "Beta Reader",
            "narrative": "Narrator",
        },
    ),
    agent_limits={
        "plot": 750,
        "character": 600,
        "dialog": 500,
        "world": 600,
        "genre": 400,
        "editor": 400,
        "reader": 350,
        "narrative": 700,
    },
)

PRESETS: Dict[str, AgentRosterPreset] = {
    WRITING_STUDIO.name: WRITING_STUDIO,
    STORY_DRIVE.name: STORY_DRIVE,
}


def get_preset(name: str) -> AgentRosterPreset:
    """
    Look up a roster preset by name.

    Raises:
        KeyError: If no preset has that name.
    """
    try:
        return PRESETS[name]
    except KeyError:
        raise KeyError(f"Unknown agent roster preset: '{name}'. Available: {sorted(PRESETS)}") from None
