from __future__ import annotations

import logging
import os
from typing import Optional, Literal

import yaml
from pydantic import BaseModel

from .constants import DEFAULT_DEPTH_MULTIPLIER, DEFAULT_LOGGER_BUILDER


class RedisConfig(BaseModel):
    """Configuration for Redis transport."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None


class TransportConfig(BaseModel):
    """Transport configuration settings."""

    backend: Literal["inmemory", "redis"] = "inmemory"
    redis: RedisConfig = RedisConfig()


class ResolverConfig(BaseModel):
    """Frontier resolver tuning."""

    # depth bound = node count * depth_multiplier
    depth_multiplier: int = DEFAULT_DEPTH_MULTIPLIER


class JobgraphConfig(BaseModel):
    """Top-level configuration model."""

    transport: TransportConfig = TransportConfig()
    resolver: ResolverConfig = ResolverConfig()
    logger_builder: str = DEFAULT_LOGGER_BUILDER
    log_level: str = "INFO"
    database_url: Optional[str] = None


def load_config(path: Optional[str] = None) -> JobgraphConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to JOBGRAPH_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("JOBGRAPH_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = JobgraphConfig(**data)
    else:
        config = JobgraphConfig()

    env_db_url = os.getenv("JOBGRAPH_DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url
    return config


def configure_logging(config: Optional[JobgraphConfig] = None) -> None:
    """Apply the configured log level to the root logger."""
    config = config or load_config()
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
