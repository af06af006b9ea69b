"""Job queue backends."""

from __future__ import annotations

import os
from typing import Optional

from ..config import JobgraphConfig, load_config
from .base import BaseTransport
from .inmemory import InMemoryTransport

BACKENDS = ("inmemory", "redis")


def get_transport(
    backend: Optional[str] = None, config: Optional[JobgraphConfig] = None
) -> BaseTransport:
    """Build the queue backend named by ``backend``, ``JOBGRAPH_TRANSPORT`` or config."""

    config = config or load_config()
    backend = (backend or os.getenv("JOBGRAPH_TRANSPORT") or config.transport.backend).lower()

    if backend == "inmemory":
        return InMemoryTransport()
    if backend == "redis":
        # imported lazily so the in-memory path never touches the redis client
        from .redis import RedisTransport

        redis_conf = config.transport.redis
        return RedisTransport(
            host=redis_conf.host,
            port=redis_conf.port,
            db=redis_conf.db,
            password=redis_conf.password,
        )
    raise ValueError(f"Unsupported transport backend: {backend} (expected one of {BACKENDS})")


__all__ = ["BACKENDS", "BaseTransport", "InMemoryTransport", "get_transport"]
