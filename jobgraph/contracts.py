"""Serialized contracts: persisted workflow state and queue messages."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field


class JobRecord(BaseModel):
    """Persisted state of a single job node."""

    name: str
    klass: str
    finished: bool = False
    enqueued: bool = False
    failed: bool = False
    running: bool = False
    incoming: List[str] = Field(default_factory=list)
    outgoing: List[str] = Field(default_factory=list)
    finished_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None


class WorkflowRecord(BaseModel):
    """Persisted state of a workflow; field names are a stable contract."""

    id: str
    name: str
    klass: str
    status: str
    total: int
    finished: int
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    stopped: bool = False
    logger_builder: str
    nodes: List[JobRecord] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str) -> "WorkflowRecord":
        return cls.model_validate_json(data)


class JobMessage(BaseModel):
    """Envelope published to a queue when a job is enqueued."""

    message_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    workflow_id: str
    job_name: str
    job_klass: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_json(self) -> str:
        """Serialize message to JSON."""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str) -> "JobMessage":
        """Deserialize message from JSON."""
        return cls.model_validate_json(data)
