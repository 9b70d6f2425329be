# src/storycore/context/formatting.py
"""
Rendering of selected turns into an injectable context block.

The block looks like::

    [CONTEXT FROM OTHER AGENTS]
    User to Plot Architect (5 minutes ago): I want a heist on Mars
    Plot Architect (4 minutes ago): Start with the vault, then the crew.
    [Message truncated for token limit]
    [END CONTEXT]

Turns are grouped by agent (groups appear in relevance order) and listed
chronologically inside each group.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Dict, Iterable, List, Sequence

from ..models import ContextBundle, ContextEntry, ContextMetadata, Role, ScoredTurn
from ..utils.clock import elapsed_seconds
from .affinity import AgentAffinityMatrix

CONTEXT_HEADER = "[CONTEXT FROM OTHER AGENTS]"
CONTEXT_FOOTER = "[END CONTEXT]"
TRUNCATION_MARKER = "[Message truncated for token limit]"


def format_time_ago(timestamp: datetime, now: datetime) -> str:
    """
    Coarse relative time label.

    Only minute and hour granularity exist; a week-old turn reads
    "168 hours ago".
    """
    diff = elapsed_seconds(timestamp, now)
    minutes = math.floor(diff / 60)
    hours = math.floor(diff / 3600)

    if minutes < 1:
        return "just now"
    if minutes == 1:
        return "1 minute ago"
    if minutes < 60:
        return f"{minutes} minutes ago"
    if hours == 1:
        return "1 hour ago"
    return f"{hours} hours ago"


def render_entry(entry: ContextEntry, now: datetime) -> List[str]:
    """Lines for a single entry (the truncation marker adds a second line)."""
    time_ago = format_time_ago(entry.timestamp, now)
    if entry.role == Role.USER.value:
        lines = [f"User to {entry.display_name} ({time_ago}): {entry.message}"]
    else:
        lines = [f"{entry.display_name} ({time_ago}): {entry.message}"]
    if entry.truncated:
        lines.append(TRUNCATION_MARKER)
    return lines


def render_block(entries: Iterable[ContextEntry], now: datetime) -> str:
    """Wrap rendered entries in the context envelope; every line ends with a newline."""
    lines = [CONTEXT_HEADER]
    for entry in entries:
        lines.extend(render_entry(entry, now))
    lines.append(CONTEXT_FOOTER)
    return "\n".join(lines) + "\n"


def group_by_agent(selected: Sequence[ScoredTurn]) -> Dict[str, List[ScoredTurn]]:
    """Group turns by agent; groups keep first-appearance order, members are chronological."""
    groups: Dict[str, List[ScoredTurn]] = {}
    for scored in selected:
        groups.setdefault(scored.agent_id, []).append(scored)
    for members in groups.values():
        members.sort(key=lambda s: s.timestamp)
    return groups


def to_entry(scored: ScoredTurn, matrix: AgentAffinityMatrix) -> ContextEntry:
    return ContextEntry(
        agent_id=scored.agent_id,
        display_name=matrix.display_name(scored.agent_id),
        role=scored.role,
        message=scored.message,
        timestamp=scored.timestamp,
        relevance_score=scored.relevance_score,
        truncated=scored.truncated,
    )


def format_context(
    selected: Sequence[ScoredTurn],
    target_agent: str,
    matrix: AgentAffinityMatrix,
    now: datetime,
) -> ContextBundle | None:
    """
    Build a ``ContextBundle`` from selected turns.

    Args:
        selected: Turns chosen by budget selection, in relevance order.
        target_agent: Agent the context is assembled for.
        matrix: Source of display names.
        now: Reference time for relative labels and ``injected_at``.

    Returns:
        The bundle, or ``None`` if nothing was selected.
    """
    if not selected:
        return None

    groups = group_by_agent(selected)
    entries = [to_entry(scored, matrix) for members in groups.values() for scored in members]

    return ContextBundle(
        formatted_text=render_block(entries, now),
        metadata=ContextMetadata(
            context_count=len(selected),
            agents=list(groups),
            injected_at=now,
            target_agent=target_agent,
        ),
        entries=entries,
    )
