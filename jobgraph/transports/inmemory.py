"""In-process job queues for tests and single-process runs."""

from __future__ import annotations

import asyncio
from collections import defaultdict, deque
from typing import AsyncIterator, Deque, Dict, List, Optional, Tuple

from ..contracts import JobMessage
from .base import BaseTransport

POLL_INTERVAL = 0.05


class InMemoryTransport(BaseTransport[JobMessage]):
    """Per-topic FIFO queues held in memory.

    All access happens on one event loop and no ``await`` separates checking a
    queue from popping it, so no lock is needed. Consumers that publish while
    handling a message (a worker reporting a finished job) never block.
    """

    def __init__(self) -> None:
        self._queues: Dict[str, Deque[JobMessage]] = defaultdict(deque)
        self.acked: List[str] = []

    async def publish(self, topic: str, message: JobMessage) -> None:
        self._queues[topic].append(message)

    def pending(self, topic: str) -> List[JobMessage]:
        """Messages waiting on ``topic`` without consuming them."""
        return list(self._queues[topic])

    async def subscribe(
        self, topic: str, lifespan: Optional[float] = None
    ) -> AsyncIterator[Tuple[JobMessage, JobMessage]]:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + lifespan if lifespan else None

        while deadline is None or loop.time() < deadline:
            queue = self._queues[topic]
            if not queue:
                await asyncio.sleep(POLL_INTERVAL)
                continue
            message = queue.popleft()
            yield message, message

    async def ack(self, raw_message: JobMessage) -> None:
        self.acked.append(raw_message.message_id)

    async def nack(self, raw_message: JobMessage, requeue: bool = True) -> None:
        if requeue:
            self._queues[raw_message.job_klass].appendleft(raw_message)
