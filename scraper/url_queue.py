"""In-memory FIFO of URLs waiting to be scraped."""

from __future__ import annotations

import threading
from collections import deque
from typing import Iterable


class UrlQueue:
    """Unbounded, thread-safe FIFO buffer of pending page URLs.

    Nothing is persisted: entries still queued when the process exits are lost.
    """

    def __init__(self) -> None:
        self._entries: deque[str] = deque()
        self._lock = threading.Lock()

    def enqueue(self, urls: Iterable[str]) -> int:
        """Append ``urls`` in order and return the resulting queue length."""
        batch = list(urls)
        with self._lock:
            self._entries.extend(batch)
            return len(self._entries)

    def dequeue_up_to(self, limit: int) -> list[str]:
        if limit <= 0:
            return []
        with self._lock:
            count = min(limit, len(self._entries))
            return [self._entries.popleft() for _ in range(count)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __bool__(self) -> bool:
        return len(self) > 0
