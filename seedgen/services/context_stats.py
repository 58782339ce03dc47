"""
Context statistics around target tokens.

For every occurrence of a target token, count which tokens appear at each
relative offset within a window of +/- ``window`` positions:

    counts[(rel, token)] += 1
    totals[rel]          += 1

``counts[(rel, token)] / totals[rel]`` is the empirical probability of
seeing ``token`` ``rel`` positions away from a target.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import AbstractSet, Sequence, Tuple


@dataclass
class ContextCounts:
    """Raw co-occurrence counts keyed by (relative offset, token)."""
    counts: Counter = field(default_factory=Counter)
    totals: Counter = field(default_factory=Counter)
    occurrences: int = 0

    @property
    def empty(self) -> bool:
        return not self.counts

    def pairs(self) -> int:
        """Number of (occurrence, in-bounds offset) pairs counted."""
        return sum(self.totals.values())


def build_context_counts(
    tokens: Sequence[str],
    targets: AbstractSet[str],
    window: int = 50,
) -> ContextCounts:
    """
    Count context tokens around every target occurrence.

    Args:
        tokens: Tokenized corpus
        targets: Target token texts
        window: Largest relative offset considered

    Returns:
        ContextCounts (empty when no target occurs)
    """
    stats = ContextCounts()
    if not targets or window <= 0:
        return stats

    n = len(tokens)
    for i, tok in enumerate(tokens):
        if tok not in targets:
            continue
        stats.occurrences += 1
        lo = max(0, i - window)
        hi = min(n - 1, i + window)
        for j in range(lo, hi + 1):
            if j == i:
                continue
            rel = j - i
            stats.counts[(rel, tokens[j])] += 1
            stats.totals[rel] += 1

    return stats


def focus_tokens(
    tokens: Sequence[str],
    targets: AbstractSet[str],
    radius: int,
) -> Tuple[int, int]:
    """
    Bounds of the neighbourhood of the first target occurrence.

    Returns ``(start, end)`` so that ``tokens[start:end]`` spans ``radius``
    tokens on each side of the first hit, or the first ``radius`` tokens
    when no target occurs.
    """
    for i, tok in enumerate(tokens):
        if tok in targets:
            return max(0, i - radius), min(len(tokens), i + radius)
    return 0, min(len(tokens), radius)
