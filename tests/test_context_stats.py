"""
Tests for context statistics around target tokens.
"""
from collections import Counter

import pytest

from seedgen.services.context_stats import ContextCounts, build_context_counts, focus_tokens
from seedgen.services.tokenizer import tokenize


class TestContextCounts:
    """Test suite for ContextCounts dataclass."""

    def test_initialization(self):
        """Test counts initialize empty."""
        stats = ContextCounts()

        assert stats.counts == Counter()
        assert stats.totals == Counter()
        assert stats.occurrences == 0
        assert stats.empty
        assert stats.pairs() == 0


class TestBuildContextCounts:
    """Test suite for build_context_counts."""

    def test_scenario_counts(self, scenario_corpus):
        """Test counts around 猫 with a window of 2."""
        tokens = tokenize(scenario_corpus)
        stats = build_context_counts(tokens, {"猫"}, window=2)

        assert stats.occurrences == 2
        assert stats.counts[(1, "が")] == 2
        assert stats.counts[(2, "走")] == 1
        assert stats.counts[(2, "鳴")] == 1
        assert stats.counts[(-1, "。")] == 1
        assert stats.counts[(-2, "る")] == 1
        assert stats.totals == Counter({1: 2, 2: 2, -1: 1, -2: 1})

    def test_counts_match_positions(self, sample_corpus):
        """Test every counted pair is realized in the token sequence."""
        tokens = tokenize(sample_corpus)
        targets = {"猫"}
        window = 4
        stats = build_context_counts(tokens, targets, window)

        expected = Counter()
        for i, tok in enumerate(tokens):
            if tok not in targets:
                continue
            for rel in range(-window, window + 1):
                if rel != 0 and 0 <= i + rel < len(tokens):
                    expected[(rel, tokens[i + rel])] += 1

        assert stats.counts == expected

    def test_totals_sum_to_pairs(self, sample_corpus):
        """Test totals sum to in-bounds (occurrence, offset) pairs."""
        tokens = tokenize(sample_corpus)
        window = 3
        stats = build_context_counts(tokens, {"猫"}, window)

        positions = [i for i, tok in enumerate(tokens) if tok == "猫"]
        in_bounds = sum(
            1
            for i in positions
            for rel in range(-window, window + 1)
            if rel != 0 and 0 <= i + rel < len(tokens)
        )

        assert stats.pairs() == in_bounds
        assert sum(stats.counts.values()) == in_bounds

    def test_edges_clipped(self):
        """Test offsets outside the sequence are skipped."""
        stats = build_context_counts(["T", "a"], {"T"}, window=5)

        assert stats.counts == Counter({(1, "a"): 1})
        assert stats.totals == Counter({1: 1})

    def test_empty_targets(self, sample_corpus):
        """Test an empty target set gives empty statistics."""
        stats = build_context_counts(tokenize(sample_corpus), set(), window=5)

        assert stats.empty
        assert stats.occurrences == 0

    def test_no_matching_target(self, sample_corpus):
        """Test targets absent from the corpus give empty statistics."""
        stats = build_context_counts(tokenize(sample_corpus), {"象"}, window=5)

        assert stats.empty
        assert stats.totals == Counter()

    def test_zero_window(self, scenario_corpus):
        """Test a zero window counts nothing."""
        stats = build_context_counts(tokenize(scenario_corpus), {"猫"}, window=0)

        assert stats.empty


class TestFocusTokens:
    """Test suite for focus_tokens."""

    def test_window_around_first_hit(self):
        tokens = ["a", "b", "c", "T", "d", "e", "T"]

        assert focus_tokens(tokens, {"T"}, 2) == (1, 5)

    def test_clamped_to_bounds(self):
        tokens = ["T", "a", "b"]

        assert focus_tokens(tokens, {"T"}, 10) == (0, 3)

    @pytest.mark.parametrize("radius,expected", [(2, (0, 2)), (10, (0, 4))])
    def test_no_target_uses_prefix(self, radius, expected):
        """Test the leading tokens are used when no target occurs."""
        assert focus_tokens(["a", "b", "c", "d"], {"T"}, radius) == expected
