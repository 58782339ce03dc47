"""
Sentence-boundary correction for generated token sequences.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Sequence

from .errors import DeadEndError
from .markov import MarkovChain
from .tokenizer import ends_sentence_mark, is_punctuation, is_whitespace
from .tokens import Token

logger = logging.getLogger(__name__)


def fix_start_tokens(tokens: Sequence[Token]) -> int:
    """
    Index at which the output should start.

    Skips past the first sentence-ending mark (plus any whitespace and
    further marks after it). Without a usable mark, only a leading run of
    whitespace / punctuation is skipped.
    """
    n = len(tokens)
    for i, tok in enumerate(tokens):
        if ends_sentence_mark(tok.text):
            j = i + 1
            while j < n and (is_whitespace(tokens[j].text) or ends_sentence_mark(tokens[j].text)):
                j += 1
            if j < n:
                return j
            break

    logger.debug("[GEN] No sentence boundary to trim at, stripping leading punctuation")
    j = 0
    while j < n and (is_whitespace(tokens[j].text) or is_punctuation(tokens[j].text)):
        j += 1
    return j if j < n else 0


def ends_sentence(tokens: Sequence[Token]) -> bool:
    for tok in reversed(tokens):
        if not is_whitespace(tok.text):
            return ends_sentence_mark(tok.text)
    return False


def fix_end_tokens(
    tokens: Sequence[Token],
    chain: MarkovChain,
    sample: Callable[[Sequence[Token]], Token],
    max_extend: int = 150,
) -> List[Token]:
    """
    Extend ``tokens`` until it ends a sentence.

    At most ``max_extend`` tokens are appended; a dead end stops early.
    The input is always a prefix of the result.
    """
    out = list(tokens)
    added = 0
    while added < max_extend and not ends_sentence(out):
        try:
            nxt = sample(chain.successors(chain.key_for(out)))
        except DeadEndError:
            logger.debug(f"[GEN] Dead end after {added} extension tokens")
            break
        out.append(nxt)
        added += 1
    return out
