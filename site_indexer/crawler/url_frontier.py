"""
URL Frontier: FIFO of pending URLs, visited set and quiescence tracking.
"""

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Optional, Set


@dataclass
class URLTask:
    """Represents a URL crawling task. Depth 0 is a seed."""
    url: str
    depth: int
    parent_url: Optional[str] = None
    discovered_time: float = field(default_factory=time.time)


class URLFrontier:
    """
    Shared work queue for the crawl workers.

    ``claim`` is the authoritative exactly-once check: it tests and inserts
    without yielding to the event loop. ``get`` counts each handed-out task
    as in flight until ``task_done``, and only reports exhaustion once the
    queue is empty with nothing in flight, so a worker never quits while
    another one may still discover links.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._queue: Deque[URLTask] = deque()
        self._visited: Set[str] = set()
        self._in_flight = 0
        self._closed = False
        self._condition = asyncio.Condition()

    async def add_url(self, task: URLTask) -> bool:
        """Queue a task. Returns False once the frontier is closed."""
        async with self._condition:
            if self._closed:
                return False
            self._queue.append(task)
            self._condition.notify()
        self.logger.debug(f"Added URL to frontier: {task.url} (depth {task.depth})")
        return True

    async def get_next_url(self) -> Optional[URLTask]:
        """
        Next task in FIFO order, or None when the crawl has nothing left.

        Callers must pair every returned task with ``task_done``.
        """
        async with self._condition:
            while not self._queue:
                if self._closed or self._in_flight == 0:
                    return None
                await self._condition.wait()
            if self._closed:
                return None
            self._in_flight += 1
            return self._queue.popleft()

    async def task_done(self):
        async with self._condition:
            self._in_flight -= 1
            if self._in_flight == 0 or self._queue:
                self._condition.notify_all()

    async def close(self):
        """Stop handing out work and wake all waiting workers."""
        async with self._condition:
            self._closed = True
            self._condition.notify_all()

    def claim(self, url: str) -> bool:
        """Mark ``url`` visited. True only for the first caller."""
        if url in self._visited:
            return False
        self._visited.add(url)
        return True

    def is_visited(self, url: str) -> bool:
        """Advisory check; ``claim`` is authoritative."""
        return url in self._visited

    def qsize(self) -> int:
        return len(self._queue)

    def get_stats(self) -> Dict[str, int]:
        """Get frontier statistics."""
        return {
            'total_queued': len(self._queue),
            'total_visited': len(self._visited),
            'in_flight': self._in_flight
        }
