"""Bounded FIFO queue of batches waiting to be retried."""

from __future__ import annotations

from collections import deque
from typing import Any


class RetryQueue:
    """FIFO queue holding at most ``limit`` batches.

    Pushing onto a full queue drops the oldest batch. Every batch leaving the
    queue gets its ``evicted`` flag set.
    """

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError("retry queue limit must be positive")
        self.limit = limit
        self._items: deque[Any] = deque()

    def push(self, batch: Any) -> bool:
        """Append a batch; return True if the oldest batch had to be dropped."""
        overwritten = False
        if len(self._items) == self.limit:
            self.pop()
            overwritten = True
        self._items.append(batch)
        return overwritten

    def pop(self) -> Any:
        """Remove and return the oldest batch, marking it evicted, or None if empty."""
        if not self._items:
            return None
        batch = self._items.popleft()
        batch.evicted = True
        return batch

    def first(self) -> Any:
        """Return the oldest batch without removing it; IndexError if empty."""
        if not self._items:
            raise IndexError("retry queue is empty")
        return self._items[0]

    def __len__(self) -> int:
        return len(self._items)