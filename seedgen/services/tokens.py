"""
Token types produced by the corpus embedder.

A token is either a ``PlainToken`` or a ``TargetToken``. Target tokens carry
the scored context features selected for the current seed phrase.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple, Union


@dataclass(frozen=True)
class Feature:
    """Token ``token`` tends to appear ``rel`` positions from a target."""

    rel: int
    token: str
    score: float


@dataclass(frozen=True)
class PlainToken:
    text: str

    @property
    def is_target(self) -> bool:
        return False

    def bare(self) -> "PlainToken":
        return self


@dataclass(frozen=True)
class TargetToken:
    text: str
    features: Tuple[Feature, ...] = ()

    @property
    def is_target(self) -> bool:
        return True

    def bare(self) -> "TargetToken":
        """Same tag and text, feature payload dropped."""
        if not self.features:
            return self
        return TargetToken(self.text)


Token = Union[PlainToken, TargetToken]


def render(tokens: Iterable[Token]) -> str:
    return "".join(tok.text for tok in tokens)
