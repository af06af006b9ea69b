"""Job nodes: a single unit of work inside a workflow graph."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, ClassVar, List, Optional, Type

from pydantic import BaseModel, Field

from .exceptions import InvalidJobTransition
from .registry import JOB_TYPES

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def job_type_name(job_cls: Type["Job"]) -> str:
    """Return the type identifier used to register and persist ``job_cls``."""
    return job_cls.__dict__.get("job_type") or job_cls.__name__


class Job(BaseModel):
    """A vertex of the workflow graph and its execution state.

    Subclass to declare a job kind; the subclass name (or its ``job_type``
    class attribute) becomes the job's ``klass``. Nodes only know their
    neighbours by name and never hold a reference to their workflow, so
    readiness is always evaluated through a lookup supplied by the caller.
    """

    job_type: ClassVar[Optional[str]] = None

    name: str = ""
    klass: str = ""
    incoming: List[str] = Field(default_factory=list)
    outgoing: List[str] = Field(default_factory=list)

    enqueued: bool = False
    running: bool = False
    finished: bool = False
    failed: bool = False

    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        JOB_TYPES.register(job_type_name(cls), cls)

    def model_post_init(self, __context: Any) -> None:
        if not self.klass:
            self.klass = job_type_name(type(self))
        if not self.name:
            self.name = self.klass

    # ------------------------------------------------------------------
    # State transitions
    @property
    def terminal(self) -> bool:
        return self.finished or self.failed

    def _ensure_not_terminal(self, transition: str) -> None:
        if self.terminal:
            state = "finished" if self.finished else "failed"
            raise InvalidJobTransition(
                f"Cannot mark job '{self.name}' as {transition}: job already {state}"
            )

    def mark_enqueued(self) -> None:
        self._ensure_not_terminal("enqueued")
        if self.running:
            raise InvalidJobTransition(
                f"Cannot mark job '{self.name}' as enqueued: job already running"
            )
        self.enqueued = True

    def mark_unqueued(self) -> None:
        """Return an enqueued job to idle when its message never reached a queue."""
        self.enqueued = False

    def mark_running(self, at: Optional[datetime] = None) -> None:
        self._ensure_not_terminal("running")
        self.enqueued = False
        self.running = True
        if self.started_at is None:
            self.started_at = at or utcnow()

    def mark_finished(self, at: Optional[datetime] = None) -> None:
        if self.finished:
            logger.debug(f"Job {self.name} already finished; ignoring")
            return
        self._ensure_not_terminal("finished")
        self.enqueued = False
        self.running = False
        self.finished = True
        self.finished_at = at or utcnow()

    def mark_failed(self, at: Optional[datetime] = None) -> None:
        if self.failed:
            logger.debug(f"Job {self.name} already failed; ignoring")
            return
        self._ensure_not_terminal("failed")
        self.enqueued = False
        self.running = False
        self.failed = True
        self.failed_at = at or utcnow()

    # ------------------------------------------------------------------
    # Graph queries
    def has_parents(self) -> bool:
        return bool(self.incoming)

    def has_children(self) -> bool:
        return bool(self.outgoing)

    def is_ready(self, resolve: Callable[[str], "Job"]) -> bool:
        """Return ``True`` when this job can be enqueued now.

        A failed parent never becomes finished, so descendants of a failure
        are excluded without any extra bookkeeping.
        """
        if self.finished or self.failed or self.enqueued or self.running:
            return False
        return all(resolve(name).finished for name in self.incoming)


JOB_TYPES.register(job_type_name(Job), Job)
