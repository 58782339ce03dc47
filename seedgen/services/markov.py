"""
Markov chain over embedded corpus tokens (CPU-only).

Keys are tuples of ``order`` bare tokens: the tag (plain / target) is part
of the key, the feature payload is not, so every target occurrence of the
same text shares one context. Successors keep their payload because the
sampler weights candidates by it.
"""
from __future__ import annotations

import random
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from .errors import DeadEndError, EmptyModelError, InvalidParameterError
from .tokenizer import ends_sentence_mark, is_punctuation, is_whitespace
from .tokens import Token

MarkovKey = Tuple[Token, ...]


@dataclass
class ChainStats:
    order: int = 0
    keys: int = 0
    transitions: int = 0
    start_keys: int = 0


def make_key(tokens: Sequence[Token]) -> MarkovKey:
    return tuple(tok.bare() for tok in tokens)


class MarkovChain:
    def __init__(self, order: int = 2):
        if order < 1:
            raise InvalidParameterError(f"order must be >= 1, got {order}")
        self.order = order
        self.transitions: Dict[MarkovKey, List[Token]] = defaultdict(list)
        self.start_keys: List[MarkovKey] = []
        self._keys: List[MarkovKey] = []

    @classmethod
    def build(cls, tokens: Sequence[Token], order: int = 2) -> "MarkovChain":
        chain = cls(order)
        chain._train(tokens)
        return chain

    def _train(self, tokens: Sequence[Token]):
        seen_starts = set()
        # Corpus start counts as a sentence boundary
        at_boundary = True

        for i in range(len(tokens) - self.order):
            tok = tokens[i]
            key = make_key(tokens[i : i + self.order])
            self.transitions[key].append(tokens[i + self.order])

            if at_boundary and not is_whitespace(tok.text) and not is_punctuation(tok.text):
                if key not in seen_starts:
                    seen_starts.add(key)
                    self.start_keys.append(key)

            if ends_sentence_mark(tok.text):
                at_boundary = True
            elif not (is_whitespace(tok.text) or is_punctuation(tok.text)):
                at_boundary = False

        # Freeze: lookups of unknown keys must not create empty buckets
        self.transitions = dict(self.transitions)
        self._keys = list(self.transitions)

    def __len__(self) -> int:
        return len(self.transitions)

    def keys(self) -> List[MarkovKey]:
        return list(self._keys)

    def successors(self, key: MarkovKey) -> List[Token]:
        bucket = self.transitions.get(key)
        if not bucket:
            raise DeadEndError(f"no successor for key of {len(key)} tokens")
        return bucket

    def key_for(self, buffer: Sequence[Token]) -> MarkovKey:
        """Key made of the trailing ``order`` tokens of ``buffer``."""
        return make_key(buffer[-self.order:])

    def random_key(self, rng: random.Random) -> MarkovKey:
        if not self._keys:
            raise EmptyModelError("transition table is empty")
        return rng.choice(self._keys)

    def start_key(self, rng: random.Random) -> MarkovKey:
        """Prefer keys that open a sentence, fall back to any key."""
        if self.start_keys:
            return rng.choice(self.start_keys)
        return self.random_key(rng)

    def stats(self) -> ChainStats:
        return ChainStats(
            order=self.order,
            keys=len(self.transitions),
            transitions=sum(len(bucket) for bucket in self.transitions.values()),
            start_keys=len(self.start_keys),
        )
