"""
Tests for next-token sampling.
"""
import math
import random

import pytest

from seedgen.services.errors import DeadEndError
from seedgen.services.sampler import (
    TokenSampler,
    candidate_weight,
    feature_factor,
    sample_next,
)
from seedgen.services.tokens import Feature, PlainToken, TargetToken

TARGETS = frozenset({"猫"})
SEED_FEATURES = (Feature(rel=1, token="猫", score=0.5), Feature(rel=2, token="犬", score=0.9))


@pytest.fixture
def bucket():
    return [PlainToken("が"), PlainToken("は"), TargetToken("猫", SEED_FEATURES)]


class TestCandidateWeight:
    """Test suite for candidate weighting."""

    def test_plain_weight(self):
        assert candidate_weight(PlainToken("が"), TARGETS) == 1.0

    def test_target_without_features(self):
        """Test a bare target gets only the target boost."""
        assert candidate_weight(TargetToken("猫"), TARGETS, target_boost=4.0) == 4.0

    def test_feature_boost_applies_to_target_features(self):
        """Test only features pointing at targets add weight."""
        weight = candidate_weight(
            TargetToken("猫", SEED_FEATURES), TARGETS, target_boost=4.0, feature_boost=5.0
        )

        assert weight == pytest.approx(4.0 * (1 + 0.5 * 5.0))

    def test_feature_factor_multiplies(self):
        features = (Feature(1, "猫", 0.2), Feature(-1, "猫", 0.4))

        assert feature_factor(features, TARGETS, 5.0) == pytest.approx(2.0 * 3.0)

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            candidate_weight("猫", TARGETS)


class TestSampleNext:
    """Test suite for sample_next."""

    def test_empty_bucket_is_dead_end(self):
        with pytest.raises(DeadEndError):
            sample_next([], TARGETS, random.Random(0))

    def test_returns_bucket_member(self, bucket):
        rng = random.Random(1)
        for weighted in (True, False):
            for _ in range(50):
                assert sample_next(bucket, TARGETS, rng, weighted=weighted) in bucket

    def test_single_candidate(self):
        tok = PlainToken("が")

        assert sample_next([tok], TARGETS, random.Random(0)) is tok

    def test_zero_weights_fall_back_to_uniform(self, bucket):
        """Test zero boosts do not break selection."""
        only_targets = [TargetToken("猫"), TargetToken("猫")]

        tok = sample_next(only_targets, TARGETS, random.Random(0), target_boost=0.0)
        assert tok in only_targets

    def test_weighted_prefers_seed_features(self, bucket):
        """Test a boosted target is chosen more often than uniform sampling."""
        trials = 3000
        target = bucket[2]

        weighted_rng = random.Random(1234)
        weighted_hits = sum(
            sample_next(bucket, TARGETS, weighted_rng, weighted=True) is target
            for _ in range(trials)
        )
        uniform_rng = random.Random(1234)
        uniform_hits = sum(
            sample_next(bucket, TARGETS, uniform_rng, weighted=False) is target
            for _ in range(trials)
        )

        baseline = 1 / 3
        margin = 4 * math.sqrt(baseline * (1 - baseline) / trials)
        assert weighted_hits / trials > baseline + margin
        assert weighted_hits > uniform_hits

    def test_weighted_frequency_close_to_expected(self, bucket):
        """Test the empirical rate matches weight / total weight."""
        trials = 4000
        rng = random.Random(99)
        hits = sum(sample_next(bucket, TARGETS, rng) is bucket[2] for _ in range(trials))

        expected = 14.0 / 16.0
        margin = 4 * math.sqrt(expected * (1 - expected) / trials)
        assert abs(hits / trials - expected) < margin


class TestTokenSampler:
    """Test suite for TokenSampler."""

    def test_weight_matches_candidate_weight(self, bucket):
        sampler = TokenSampler(TARGETS, random.Random(0))

        for tok in bucket:
            assert sampler.weight(tok) == pytest.approx(candidate_weight(tok, TARGETS))

    def test_factor_cached_per_feature_list(self, bucket):
        sampler = TokenSampler(TARGETS, random.Random(0))
        sampler.weight(bucket[2])
        sampler.weight(TargetToken("猫", SEED_FEATURES))

        assert len(sampler._factors) == 1

    def test_empty_bucket_is_dead_end(self):
        sampler = TokenSampler(TARGETS, random.Random(0))

        with pytest.raises(DeadEndError):
            sampler([])

    def test_same_seed_same_choices(self, bucket):
        first = TokenSampler(TARGETS, random.Random(7))
        second = TokenSampler(TARGETS, random.Random(7))

        assert [first(bucket) for _ in range(30)] == [second(bucket) for _ in range(30)]

    def test_matches_sample_next(self, bucket):
        """Test the run-bound sampler and the one-off draw pick the same tokens."""
        sampler = TokenSampler(TARGETS, random.Random(11), target_boost=2.0)
        rng = random.Random(11)

        for _ in range(50):
            assert sampler(bucket) is sample_next(bucket, TARGETS, rng, target_boost=2.0)

    def test_custom_factor(self):
        weight = candidate_weight(
            TargetToken("猫", SEED_FEATURES),
            TARGETS,
            target_boost=2.0,
            factor=lambda features, targets, boost: 3.0,
        )

        assert weight == 6.0
