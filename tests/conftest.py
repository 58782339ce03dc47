"""
Shared pytest fixtures for generation pipeline tests.
"""
import asyncio
import json
import random
from typing import List, Sequence, Tuple

import pytest

from seedgen.services.corpus import CorpusHandle
from seedgen.services.sampler import TokenSampler
from seedgen.services.tokens import PlainToken, Token


# Three short sentences around the seed 猫
SCENARIO_CORPUS = "猫が走る。犬が走る。猫が鳴く。"

SAMPLE_CORPUS = (
    "猫が庭で眠る。犬が庭で走る。猫は窓の外を見る。"
    "子供が公園で遊ぶ。猫が公園で鳴く。鳥が空を飛ぶ。"
    "雨の日は猫が家で眠る。晴れた日は犬が外で遊ぶ。"
    "猫と犬が庭で遊ぶ。子供は猫が好きだ！犬も好きか？"
    "The cat sleeps in the garden. The dog runs! Does the cat dream? "
)


@pytest.fixture
def scenario_corpus() -> str:
    return SCENARIO_CORPUS


@pytest.fixture
def sample_corpus() -> str:
    """Mixed Japanese / English prose with frequent seed occurrences."""
    return SAMPLE_CORPUS


@pytest.fixture
def corpus_handle(sample_corpus) -> CorpusHandle:
    return CorpusHandle.from_text(sample_corpus, chunk_size=40)


@pytest.fixture
def uniform_sampler() -> TokenSampler:
    """Unweighted sampler with a fixed seed."""
    return TokenSampler(frozenset(), random.Random(0), weighted=False)


# Helper functions for tests


def plain(texts: Sequence[str]) -> List[Token]:
    """Wrap token strings as plain tokens."""
    return [PlainToken(t) for t in texts]


def collect(stream) -> list:
    """Drain an async event stream into a list."""
    async def _drain():
        return [event async for event in stream]

    return asyncio.run(_drain())


def parse_sse(body: str) -> List[Tuple[str, dict]]:
    """Split an SSE body into (event, data) pairs."""
    events = []
    for frame in body.strip().split("\n\n"):
        lines = frame.split("\n")
        event = lines[0][len("event: "):]
        data = json.loads("".join(line[len("data: "):] for line in lines[1:]))
        events.append((event, data))
    return events
