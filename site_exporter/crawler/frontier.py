"""
Breadth-first frontier queue with visited-set bookkeeping.
"""

from collections import deque
from typing import Deque, Iterable, Optional, Set

from .scope import FrontierEntry


class FrontierQueue:
    """
    FIFO queue of frontier entries for a single job.

    A URL is queued at most once and marked visited when it is dequeued for
    export. Not thread-safe; each job's traversal loop owns its queue.
    """

    def __init__(self, entries: Optional[Iterable[FrontierEntry]] = None):
        self._queue: Deque[FrontierEntry] = deque()
        self._queued: Set[str] = set()
        self.visited: Set[str] = set()

        for entry in entries or ():
            self.push(entry)

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)

    def push(self, entry: FrontierEntry) -> bool:
        """
        Queue an entry unless its URL was already queued or visited.

        Returns:
            True if the entry was added
        """
        if entry.url in self.visited or entry.url in self._queued:
            return False
        self._queue.append(entry)
        self._queued.add(entry.url)
        return True

    def pop(self) -> FrontierEntry:
        """Remove and return the oldest entry."""
        return self._queue.popleft()

    def is_visited(self, url: str) -> bool:
        return url in self.visited

    def mark_visited(self, url: str) -> None:
        self.visited.add(url)
