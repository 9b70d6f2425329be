# src/storycore/utils/tokens.py
"""Character-ratio token estimation used for context budgets."""

from __future__ import annotations

import math


class CharRatioEstimator:
    """
    Token estimator using a fixed tokens-per-character ratio.

    No real tokenizer is involved; ``0.25`` tokens per character (about four
    characters per token) is close enough for budgeting injected context.
    """

    def __init__(self, tokens_per_char: float = 0.25) -> None:
        if tokens_per_char <= 0:
            raise ValueError("tokens_per_char must be positive")
        self.tokens_per_char = tokens_per_char

    def count(self, text: str) -> int:
        """Estimated token cost of ``text``, rounded up."""
        return math.ceil(len(text) * self.tokens_per_char)

    def max_chars(self, max_tokens: int) -> int:
        """Largest number of characters whose cost stays within ``max_tokens``."""
        return math.floor(max_tokens / self.tokens_per_char)
