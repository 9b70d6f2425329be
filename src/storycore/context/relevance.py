# src/storycore/context/relevance.py
"""
Relevance scoring primitives for cross-agent context.

All scoring is intentionally shallow: bag-of-words keyword overlap, a
Jaccard-plus-length lexical similarity, linear recency decay and a static
agent affinity.  There are no embeddings involved.

The combined score for a turn is::

    score = w_k * keyword_overlap
          + w_s * lexical_similarity
          + w_r * recency_decay
          + w_a * affinity

where the weights are divided by their total and every component is clamped
to [0, 1], so the score itself always lies in [0, 1].
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import FrozenSet, Iterable, List, Sequence

from ..config.models import RelevanceWeights
from ..utils.clock import elapsed_seconds

_NON_WORD = re.compile(r"[^\w\s]")

STOP_WORDS: FrozenSet[str] = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "up", "about", "into", "through", "during",
    "is", "are", "was", "were", "been", "be", "have", "has", "had", "do",
    "does", "did", "will", "would", "could", "should", "may", "might",
    "i", "you", "he", "she", "it", "we", "they", "me", "him", "her",
})


def extract_keywords(text: str, stop_words: Iterable[str] = STOP_WORDS) -> List[str]:
    """
    Pull comparable keywords out of free text.

    Lowercases, turns punctuation into spaces, splits on whitespace and drops
    tokens of two characters or fewer as well as stop words.  Duplicates are
    kept, since overlap is normalized by keyword count.
    """
    if not text:
        return []
    stop = stop_words if isinstance(stop_words, (set, frozenset)) else frozenset(stop_words)
    return [
        word
        for word in _NON_WORD.sub(" ", text.lower()).split()
        if len(word) > 2 and word not in stop
    ]


def keyword_overlap(keywords1: Sequence[str], keywords2: Sequence[str]) -> float:
    """Distinct shared keywords divided by the longer keyword list's length."""
    if not keywords1 or not keywords2:
        return 0.0
    shared = set(keywords1) & set(keywords2)
    return len(shared) / max(len(keywords1), len(keywords2))


def lexical_similarity(text1: str, text2: str) -> float:
    """
    Cheap similarity between two texts.

    70% Jaccard similarity of the lowercase whitespace-split word sets, 30%
    ratio of the shorter to the longer text length.
    """
    if not text1 or not text2:
        return 0.0

    words1 = set(text1.lower().split())
    words2 = set(text2.lower().split())
    union = words1 | words2
    jaccard = len(words1 & words2) / len(union) if union else 0.0
    length_similarity = min(len(text1), len(text2)) / max(len(text1), len(text2))

    return jaccard * 0.7 + length_similarity * 0.3


def recency_decay(timestamp: datetime, now: datetime, window_seconds: float = 3600.0) -> float:
    """Linear decay from 1.0 (just now) to 0.0 at ``window_seconds`` of age."""
    age = elapsed_seconds(timestamp, now)
    return _clamp(1.0 - age / window_seconds)


def combine_scores(
    weights: RelevanceWeights,
    *,
    keyword: float,
    semantic: float,
    recency: float,
    relation: float,
) -> float:
    """
    Weighted combination of the four components.

    Args:
        weights: Component weights; normalized by their total.
        keyword: Keyword overlap (0.0–1.0).
        semantic: Lexical similarity (0.0–1.0).
        recency: Recency decay (0.0–1.0).
        relation: Agent affinity (0.0–1.0).

    Returns:
        Combined score in [0, 1].
    """
    total = weights.total
    return (
        (weights.keyword_match / total) * _clamp(keyword)
        + (weights.semantic_similarity / total) * _clamp(semantic)
        + (weights.recency / total) * _clamp(recency)
        + (weights.agent_relation / total) * _clamp(relation)
    )


def _clamp(value: float) -> float:
    return max(0.0, min(value, 1.0))
