# tests/context/test_selection.py
"""
Tests for greedy budget-constrained selection.

Budget costs use the default estimator: ceil(len(message) * 0.25) tokens.
"""

from storycore.context.selection import TRUNCATION_SUFFIX, select_within_budget
from storycore.utils.tokens import CharRatioEstimator


class TestSelectWithinBudget:
    """Tests for select_within_budget."""

    def test_empty_input(self):
        assert select_within_budget([], 100) == []

    def test_all_fit(self, make_scored):
        ranked = [make_scored("x" * 40, index=i) for i in range(3)]  # 10 tokens each

        selected = select_within_budget(ranked, 30)

        assert selected == ranked

    def test_exact_fit_is_included(self, make_scored):
        ranked = [make_scored("x" * 40), make_scored("y" * 40)]
        assert len(select_within_budget(ranked, 20)) == 2

    def test_stops_at_first_misfit(self, make_scored):
        ranked = [
            make_scored("a" * 40),   # 10 tokens
            make_scored("b" * 120),  # 30 tokens, does not fit
            make_scored("c" * 20),   # 5 tokens, would fit but is never reached
        ]

        selected = select_within_budget(ranked, 20)

        assert [s.message[0] for s in selected] == ["a"]

    def test_preserves_score_order(self, make_scored):
        ranked = [make_scored("first", score=0.9), make_scored("second", score=0.5)]
        selected = select_within_budget(ranked, 100)
        assert [s.message for s in selected] == ["first", "second"]

    def test_oversized_top_item_is_truncated(self, make_scored):
        original = make_scored("x" * 100)  # 25 tokens

        selected = select_within_budget([original, make_scored("short")], 10)

        assert len(selected) == 1
        assert selected[0].truncated is True
        assert selected[0].message == "x" * 40 + TRUNCATION_SUFFIX
        assert selected[0].turn is original.turn

    def test_truncation_does_not_mutate_input(self, make_scored):
        original = make_scored("x" * 100)

        select_within_budget([original], 10)

        assert original.message == "x" * 100
        assert original.truncated is False
        assert original.turn.message == "x" * 100

    def test_rounding_up_cost(self, make_scored):
        # 5 chars -> ceil(1.25) = 2 tokens
        ranked = [make_scored("abcde"), make_scored("fghij")]
        assert len(select_within_budget(ranked, 3)) == 1

    def test_custom_estimator(self, make_scored):
        estimator = CharRatioEstimator(tokens_per_char=0.5)
        original = make_scored("x" * 100)  # 50 tokens at 0.5/char

        selected = select_within_budget([original], 10, estimator)

        assert selected[0].message == "x" * 20 + TRUNCATION_SUFFIX
