"""
Feature scoring and selection.

score(rel, token) = (counts[(rel, token)] / totals[rel]) ** power

A power above 1 sharpens the distribution: weakly associated context tokens
fall toward zero much faster than strongly associated ones.
"""
from __future__ import annotations

from typing import Dict, List, Tuple

from .context_stats import ContextCounts
from .tokens import Feature


def compute_scores(stats: ContextCounts, power: float = 4.0) -> Dict[Tuple[int, str], float]:
    """
    Normalize raw counts per offset and raise them to ``power``.

    Args:
        stats: Context counts
        power: Score exponent

    Returns:
        Mapping (rel, token) -> score
    """
    scores: Dict[Tuple[int, str], float] = {}
    for (rel, token), count in stats.counts.items():
        total = stats.totals[rel]
        if total <= 0:
            continue
        scores[(rel, token)] = (count / total) ** power
    return scores


def select_features(
    scores: Dict[Tuple[int, str], float],
    threshold: float = 1e-7,
) -> List[Feature]:
    """
    Keep features scoring at least ``threshold``.

    Ordered by offset ascending, score descending, then token text, so the
    result does not depend on dict iteration order.
    """
    kept = [
        Feature(rel=rel, token=token, score=score)
        for (rel, token), score in scores.items()
        if score >= threshold
    ]
    kept.sort(key=lambda f: (f.rel, -f.score, f.token))
    return kept
