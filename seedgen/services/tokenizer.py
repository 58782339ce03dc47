"""
Script-aware tokenizer for mixed Japanese / Latin text.

Splits text into runs of CJK ideographs, hiragana, katakana, word
characters, single whitespace characters and single punctuation marks.
Long runs are cut into fixed-size slices so that an unsegmented script
(Japanese has no spaces) still yields tokens of bounded length.

The tokenizer is lossless: ``"".join(tokenize(text)) == text``.
"""
from __future__ import annotations

import re
from typing import FrozenSet, List

from .errors import EmptySeedError, InvalidParameterError

CJK = "一-鿿"
HIRAGANA = "぀-ゟ"
KATAKANA = "゠-ヿ"

TOKEN_PATTERN = re.compile(
    rf"[{CJK}]+"
    rf"|[{HIRAGANA}]+"
    rf"|[{KATAKANA}]+"
    rf"|[^\W{CJK}{HIRAGANA}{KATAKANA}]+"
    r"|\s"
    r"|[^\w\s]"
)

SENTENCE_END_MARKS = "。！？!?…"

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[^\w\s]+")


def is_whitespace(text: str) -> bool:
    return bool(_WHITESPACE.fullmatch(text))


def is_punctuation(text: str) -> bool:
    return bool(_PUNCTUATION.fullmatch(text))


def ends_sentence_mark(text: str) -> bool:
    """True if ``text`` ends with a sentence-ending mark."""
    return bool(text) and text[-1] in SENTENCE_END_MARKS


def tokenize(text: str, max_token_len: int = 10) -> List[str]:
    """
    Tokenize text into script runs.

    Args:
        text: Raw text
        max_token_len: Longest run kept whole; longer runs are sliced

    Returns:
        List of token strings whose concatenation is ``text``
    """
    if max_token_len < 1:
        raise InvalidParameterError(f"max_token_len must be >= 1, got {max_token_len}")

    tokens: List[str] = []
    for match in TOKEN_PATTERN.finditer(text):
        run = match.group(0)
        if len(run) > max_token_len and not (is_whitespace(run) or is_punctuation(run)):
            tokens.extend(run[i:i + max_token_len] for i in range(0, len(run), max_token_len))
        else:
            tokens.append(run)
    return tokens


def seed_targets(seed: str, max_token_len: int = 3) -> FrozenSet[str]:
    """
    Derive the target token set from a seed phrase.

    Whitespace and punctuation tokens are left out so that sentence marks
    never become anchors.

    Raises:
        InvalidParameterError: if the seed is not a string
        EmptySeedError: if the seed is empty or whitespace-only
    """
    if seed is not None and not isinstance(seed, str):
        raise InvalidParameterError("seed must be a string")
    if not seed or not seed.strip():
        raise EmptySeedError("seed phrase is empty")

    return frozenset(
        tok for tok in tokenize(seed, max_token_len)
        if not (is_whitespace(tok) or is_punctuation(tok))
    )
