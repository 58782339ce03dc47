"""
Corpus handle and store.

The raw corpus is kept as fixed-size chunks so that tokenization of a very
large text can hand control back to the event loop between batches. A
handle never changes once created; loading new text replaces the handle in
the store, so runs already in flight keep reading the corpus they started
with.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .cancellation import CancellationToken
from .errors import EmptyCorpusError
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


@dataclass
class CorpusSummary:
    """Acknowledgement returned to the host after initialization."""
    chars: int = 0
    chunks: int = 0

    @property
    def message(self) -> str:
        return f"corpus split into {self.chunks} chunks ({self.chars} chars)"

    def to_event(self) -> Dict[str, object]:
        return {
            "type": "log",
            "message": self.message,
            "chars": self.chars,
            "chunks": self.chunks,
        }


def split_chunks(text: str, chunk_size: int) -> List[str]:
    return [text[i:i + chunk_size] for i in range(0, len(text), chunk_size)]


class CorpusHandle:
    """Read-only corpus shared by generation runs."""

    def __init__(self, chunks: Sequence[str]):
        self.chunks: Tuple[str, ...] = tuple(chunk for chunk in chunks if chunk)
        self._tokens: Dict[int, Tuple[str, ...]] = {}
        self._lock = asyncio.Lock()

    @classmethod
    def from_text(cls, text: str, chunk_size: int = 80000) -> "CorpusHandle":
        return cls(split_chunks(text, chunk_size))

    @classmethod
    def from_file(cls, path: Path, chunk_size: int = 80000) -> "CorpusHandle":
        with path.open("r", encoding="utf-8") as f:
            return cls.from_text(f.read(), chunk_size)

    @property
    def chars(self) -> int:
        return sum(len(chunk) for chunk in self.chunks)

    def summary(self) -> CorpusSummary:
        return CorpusSummary(chars=self.chars, chunks=len(self.chunks))

    async def tokens(
        self,
        max_token_len: int = 10,
        batch_chunks: int = 4,
        cancel: Optional[CancellationToken] = None,
    ) -> Tuple[str, ...]:
        """
        Tokenize the corpus chunk by chunk, yielding between batches.

        The result is cached per ``max_token_len``.

        Raises:
            EmptyCorpusError: if the corpus yields no tokens
            GenerationCancelled: if ``cancel`` trips at a batch boundary
        """
        async with self._lock:
            cached = self._tokens.get(max_token_len)
            if cached is None:
                collected: List[str] = []
                for i, chunk in enumerate(self.chunks, start=1):
                    collected.extend(tokenize(chunk, max_token_len))
                    if i % batch_chunks == 0:
                        await asyncio.sleep(0)
                        if cancel is not None:
                            cancel.raise_if_cancelled()
                cached = tuple(collected)
                self._tokens[max_token_len] = cached
                logger.info(f"[CORPUS] Tokenized {len(self.chunks)} chunks into {len(cached)} tokens")

        if not cached:
            raise EmptyCorpusError("corpus tokenizes to zero tokens")
        return cached


class CorpusStore:
    """Holds the current corpus handle for the process lifetime."""

    def __init__(self, chunk_size: int = 80000):
        self.chunk_size = chunk_size
        self._handle: Optional[CorpusHandle] = None

    def load_text(self, text: str) -> CorpusSummary:
        return self._replace(CorpusHandle.from_text(text, self.chunk_size))

    def load_chunks(self, chunks: Sequence[str]) -> CorpusSummary:
        return self._replace(CorpusHandle(chunks))

    def load_file(self, path: Path) -> CorpusSummary:
        return self._replace(CorpusHandle.from_file(path, self.chunk_size))

    def _replace(self, handle: CorpusHandle) -> CorpusSummary:
        self._handle = handle
        summary = handle.summary()
        logger.info(f"[CORPUS] {summary.message}")
        return summary

    @property
    def handle(self) -> Optional[CorpusHandle]:
        return self._handle

    def require(self) -> CorpusHandle:
        if self._handle is None or not self._handle.chunks:
            raise EmptyCorpusError("no corpus has been initialized")
        return self._handle
