"""
Corpus embedding: tag target occurrences with their context features.
"""
from __future__ import annotations

from typing import AbstractSet, List, Literal, Sequence

from .errors import InvalidParameterError
from .tokens import Feature, PlainToken, TargetToken, Token

FeatureStrategy = Literal["global", "local"]


def embed(
    tokens: Sequence[str],
    targets: AbstractSet[str],
    features: Sequence[Feature],
    strategy: FeatureStrategy = "global",
) -> List[Token]:
    """
    Replace target occurrences with ``TargetToken`` instances.

    Strategies:
        global: every occurrence carries the full selected feature list
        local:  an occurrence carries only the selected features realized
                around it (``tokens[i + rel] == feature.token``)

    Args:
        tokens: Tokenized corpus
        targets: Target token texts
        features: Selected features, in selection order
        strategy: Feature attachment strategy

    Returns:
        Mixed sequence of PlainToken and TargetToken
    """
    if strategy not in ("global", "local"):
        raise InvalidParameterError(f"unknown feature strategy: {strategy}")

    shared = tuple(features)
    n = len(tokens)
    embedded: List[Token] = []

    for i, tok in enumerate(tokens):
        if tok not in targets:
            embedded.append(PlainToken(tok))
        elif strategy == "global":
            embedded.append(TargetToken(tok, shared))
        else:
            local = tuple(
                f for f in shared
                if 0 <= i + f.rel < n and tokens[i + f.rel] == f.token
            )
            embedded.append(TargetToken(tok, local))

    return embedded
