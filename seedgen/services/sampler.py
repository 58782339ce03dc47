"""
Next-token sampling from a transition bucket.

Each entry in a bucket is one observed continuation, so a uniform choice is
already frequency-weighted. The weighted mode additionally boosts target
tokens and tokens whose features point at the current targets:

    weight = 1.0
    weight *= target_boost                       if candidate is a target
    weight *= (1 + score * feature_boost)        per feature whose token is a target
"""
from __future__ import annotations

import random
from typing import AbstractSet, Callable, Dict, Sequence, Tuple

from .errors import DeadEndError
from .tokens import Feature, PlainToken, TargetToken, Token


def feature_factor(
    features: Tuple[Feature, ...],
    targets: AbstractSet[str],
    feature_boost: float = 5.0,
) -> float:
    factor = 1.0
    for feature in features:
        if feature.token in targets:
            factor *= 1.0 + feature.score * feature_boost
    return factor


FactorFn = Callable[[Tuple[Feature, ...], AbstractSet[str], float], float]


def candidate_weight(
    token: Token,
    targets: AbstractSet[str],
    target_boost: float = 4.0,
    feature_boost: float = 5.0,
    factor: FactorFn = feature_factor,
) -> float:
    """Weight of one candidate; ``factor`` scores a target's feature list."""
    if isinstance(token, PlainToken):
        return 1.0
    if isinstance(token, TargetToken):
        return target_boost * factor(token.features, targets, feature_boost)
    raise TypeError(f"unsupported token type: {type(token).__name__}")


def _pick(bucket: Sequence[Token], weights: Sequence[float], rng: random.Random) -> Token:
    total = sum(weights)
    if total <= 0:
        return rng.choice(bucket)

    r = rng.random() * total
    for tok, weight in zip(bucket, weights):
        r -= weight
        if r <= 0:
            return tok
    return bucket[-1]


class TokenSampler:
    """
    Sampler bound to one generation run.

    Feature lists are shared between target occurrences, so the feature
    factor is computed once per distinct list.
    """

    def __init__(
        self,
        targets: AbstractSet[str],
        rng: random.Random,
        weighted: bool = True,
        target_boost: float = 4.0,
        feature_boost: float = 5.0,
    ):
        self.targets = targets
        self.rng = rng
        self.weighted = weighted
        self.target_boost = target_boost
        self.feature_boost = feature_boost
        # id(features tuple) -> (tuple, factor); the tuple is held to pin its id
        self._factors: Dict[int, Tuple[Tuple[Feature, ...], float]] = {}

    def _cached_factor(
        self,
        features: Tuple[Feature, ...],
        targets: AbstractSet[str],
        feature_boost: float,
    ) -> float:
        cached = self._factors.get(id(features))
        if cached is None:
            cached = (features, feature_factor(features, targets, feature_boost))
            self._factors[id(features)] = cached
        return cached[1]

    def weight(self, token: Token) -> float:
        return candidate_weight(
            token,
            self.targets,
            self.target_boost,
            self.feature_boost,
            factor=self._cached_factor,
        )

    def __call__(self, bucket: Sequence[Token]) -> Token:
        """
        Choose the next token from ``bucket``.

        Raises:
            DeadEndError: if the bucket is empty
        """
        if not bucket:
            raise DeadEndError("empty transition bucket")
        if not self.weighted:
            return self.rng.choice(bucket)
        return _pick(bucket, [self.weight(tok) for tok in bucket], self.rng)


def sample_next(
    bucket: Sequence[Token],
    targets: AbstractSet[str],
    rng: random.Random,
    weighted: bool = True,
    target_boost: float = 4.0,
    feature_boost: float = 5.0,
) -> Token:
    """One-off draw through a fresh ``TokenSampler``."""
    return TokenSampler(targets, rng, weighted, target_boost, feature_boost)(bucket)
