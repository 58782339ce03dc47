"""
Cooperative cancellation for long-running generation tasks.
"""
from __future__ import annotations

import asyncio

from .errors import GenerationCancelled


class CancellationToken:
    """Flag checked by the pipeline at every yield point."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason = ""

    def cancel(self, reason: str = "cancelled by host"):
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self):
        if self._event.is_set():
            raise GenerationCancelled(self.reason)

    async def checkpoint(self, delay: float = 0.0):
        """Yield control to the event loop, then check the flag."""
        await asyncio.sleep(delay)
        self.raise_if_cancelled()
