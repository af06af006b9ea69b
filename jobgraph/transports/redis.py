"""Redis list queues for cross-process workers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Optional, Tuple

import redis.asyncio as redis
from pydantic import ValidationError

from ..constants import QUEUE_PREFIX
from ..contracts import JobMessage
from .base import BaseTransport

logger = logging.getLogger(__name__)


class RedisTransport(BaseTransport[str]):
    """One Redis list per job type; producers ``LPUSH`` and workers ``BRPOP``."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: Optional[str] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.db = db
        self.password = password
        self._redis: Optional[Any] = None

    @staticmethod
    def queue_name(topic: str) -> str:
        return f"{QUEUE_PREFIX}:{topic}"

    async def connect(self) -> None:
        self._redis = redis.Redis(
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            decode_responses=True,
        )
        await self._redis.ping()

    async def disconnect(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def _client(self) -> Any:
        if not self._redis:
            await self.connect()
        return self._redis

    async def publish(self, topic: str, message: JobMessage) -> None:
        client = await self._client()
        await client.lpush(self.queue_name(topic), message.to_json())

    async def subscribe(
        self, topic: str, lifespan: Optional[float] = None
    ) -> AsyncIterator[Tuple[str, JobMessage]]:
        client = await self._client()
        queue_name = self.queue_name(topic)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + lifespan if lifespan else None

        while deadline is None or loop.time() < deadline:
            result = await client.brpop(queue_name, timeout=1)
            if not result:
                continue
            _, message_json = result
            try:
                message = JobMessage.from_json(message_json)
            except ValidationError as e:
                logger.error(f"Dropping malformed message on {queue_name}: {e}")
                continue
            yield message_json, message

    async def ack(self, raw_message: str) -> None:
        """BRPOP already removed the message; nothing to confirm."""

    async def nack(self, raw_message: str, requeue: bool = True) -> None:
        if not requeue:
            return
        message = JobMessage.from_json(raw_message)
        client = await self._client()
        # RPUSH puts it where BRPOP reads next
        await client.rpush(self.queue_name(message.job_klass), raw_message)
