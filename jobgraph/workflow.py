"""Workflow graph: declarative construction and status aggregation."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Optional,
    Sequence,
    Tuple,
    Type,
    Union,
)

from .constants import (
    DEFAULT_DEPTH_MULTIPLIER,
    STATUS_FAILED,
    STATUS_FINISHED,
    STATUS_PENDING,
    STATUS_RUNNING,
)
from .exceptions import DuplicateJob, JobNotFound
from .job import Job, job_type_name
from .logger_builder import LoggerBuilder, ensure_importable, load_logger_builder
from .registry import JOB_TYPES, WORKFLOW_TYPES
from .resolver import FrontierResolver

if TYPE_CHECKING:
    from .config import JobgraphConfig
    from .contracts import WorkflowRecord

logger = logging.getLogger(__name__)

JobRef = Union[str, Type[Job]]
JobRefs = Union[JobRef, Sequence[JobRef], None]


def workflow_type_name(workflow_cls: type) -> str:
    return workflow_cls.__dict__.get("workflow_type") or workflow_cls.__name__


class Workflow:
    """A directed graph of named jobs plus workflow-level metadata.

    Subclasses declare their jobs in ``configure``::

        class ImportWorkflow(Workflow):
            def configure(self):
                self.run(Prepare)
                self.run(FetchUsers, after=Prepare)
                self.run(FetchOrders, after=Prepare)
                self.run(Normalize, after=[FetchUsers, FetchOrders])

    Edges are collected while jobs are declared and only attached to the
    nodes by ``create_dependencies``, so ``before``/``after`` may point at jobs
    declared further down.
    """

    workflow_type: Optional[str] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        WORKFLOW_TYPES.register(workflow_type_name(cls), cls)

    def __init__(
        self,
        id: Optional[str] = None,
        configure: bool = True,
        logger_builder: Optional[type] = None,
        config: Optional["JobgraphConfig"] = None,
    ) -> None:
        self.id = id or str(uuid.uuid4())
        self.klass = workflow_type_name(type(self))
        self.name = self.klass
        self.nodes: List[Job] = []
        self.stopped = False
        self._dependencies: List[Tuple[str, str]] = []
        self._depth_multiplier = (
            config.resolver.depth_multiplier if config else DEFAULT_DEPTH_MULTIPLIER
        )
        if logger_builder is None:
            logger_builder = (
                load_logger_builder(config.logger_builder) if config else LoggerBuilder
            )
        self.logger_builder = ensure_importable(logger_builder)

        if configure:
            self.configure()
            self.create_dependencies()

    def __repr__(self) -> str:
        return f"<{self.klass} id={self.id} status={self.status} jobs={self.total}>"

    def configure(self) -> None:
        """Declare jobs with ``run``; override in subclasses."""

    # ------------------------------------------------------------------
    # Construction
    def run(
        self,
        job_type: JobRef,
        name: Optional[str] = None,
        after: JobRefs = None,
        before: JobRefs = None,
    ) -> Job:
        """Add a job of ``job_type`` to the graph and record its ordering.

        Args:
            job_type: ``Job`` subclass or registered job type identifier.
            name: Unique job name; defaults to the job type identifier.
            after: Job(s) that must finish before this one starts.
            before: Job(s) that may only start after this one finishes.

        Without ``after`` and ``before`` the job runs after the most recently
        added job.
        """
        job_cls = JOB_TYPES.get(job_type) if isinstance(job_type, str) else job_type
        job = job_cls(name=name or "")
        previous = self.nodes[-1] if self.nodes else None
        self.add_job(job)

        for parent in self._reference_names(after):
            self._dependencies.append((parent, job.name))
        for child in self._reference_names(before):
            self._dependencies.append((job.name, child))
        if after is None and before is None and previous is not None:
            self._dependencies.append((previous.name, job.name))
        return job

    def add_job(self, job: Job) -> Job:
        """Append an already built job without recording any edges."""
        if any(existing.name == job.name for existing in self.nodes):
            raise DuplicateJob(f"Job '{job.name}' already declared in workflow {self.id}")
        self.nodes.append(job)
        return job

    def create_dependencies(self) -> None:
        """Attach every recorded edge to both of its endpoints.

        Safe to call repeatedly; an edge is only stored once.
        """
        for parent_name, child_name in self._dependencies:
            parent = self.find_job(parent_name)
            child = self.find_job(child_name)
            if child.name not in parent.outgoing:
                parent.outgoing.append(child.name)
            if parent.name not in child.incoming:
                child.incoming.append(parent.name)
        logger.debug(f"Resolved {len(self._dependencies)} edges for workflow {self.id}")

    @staticmethod
    def _reference_names(refs: JobRefs) -> List[str]:
        if refs is None:
            return []
        if isinstance(refs, (str, type)):
            refs = [refs]
        return [ref if isinstance(ref, str) else job_type_name(ref) for ref in refs]

    def find_job(self, name: JobRef) -> Job:
        """Return the job called ``name``, falling back to a job of that type."""
        if not isinstance(name, str):
            name = job_type_name(name)
        for job in self.nodes:
            if job.name == name:
                return job
        for job in self.nodes:
            if job.klass == name:
                return job
        raise JobNotFound(name, self.id)

    # ------------------------------------------------------------------
    # Frontier
    def resolver(self) -> FrontierResolver:
        return FrontierResolver(self.nodes, depth_multiplier=self._depth_multiplier)

    def next_jobs(self) -> List[Job]:
        return self.resolver().next_jobs()

    def levels(self) -> List[List[str]]:
        return self.resolver().levels()

    # ------------------------------------------------------------------
    # Status
    def failed(self) -> bool:
        return any(job.failed for job in self.nodes)

    def running(self) -> bool:
        return any(job.enqueued or job.running for job in self.nodes)

    def finished(self) -> bool:
        return all(job.finished for job in self.nodes)

    def started(self) -> bool:
        return any(
            job.enqueued or job.running or job.finished or job.failed
            for job in self.nodes
        )

    def stop(self) -> None:
        self.stopped = True

    def start(self) -> None:
        self.stopped = False

    @property
    def status(self) -> str:
        if self.failed():
            return STATUS_FAILED
        if self.nodes and self.finished():
            return STATUS_FINISHED
        if self.started():
            return STATUS_RUNNING
        return STATUS_PENDING

    @property
    def total(self) -> int:
        return len(self.nodes)

    @property
    def finished_count(self) -> int:
        return sum(1 for job in self.nodes if job.finished)

    @property
    def started_at(self) -> Optional[datetime]:
        stamps = [job.started_at for job in self.nodes if job.started_at]
        return min(stamps) if stamps else None

    @property
    def finished_at(self) -> Optional[datetime]:
        if not self.nodes or not self.finished():
            return None
        stamps = [job.finished_at for job in self.nodes if job.finished_at]
        return max(stamps) if stamps else None

    # ------------------------------------------------------------------
    # Logging
    def set_logger_builder(self, builder: type) -> None:
        self.logger_builder = ensure_importable(builder)

    def build_logger_for_job(self, job: Job, run_id: Any) -> Any:
        return self.logger_builder(self.id).build(job, run_id)

    # ------------------------------------------------------------------
    # Serialization
    def to_record(self) -> "WorkflowRecord":
        from .serializer import WorkflowSerializer

        return WorkflowSerializer.serialize(self)

    def to_dict(self) -> Dict[str, Any]:
        return self.to_record().model_dump(mode="json")

    def to_json(self) -> str:
        return self.to_record().to_json()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Workflow":
        from .serializer import WorkflowSerializer

        return WorkflowSerializer.deserialize(data)

    @classmethod
    def from_json(cls, data: str) -> "Workflow":
        from .serializer import WorkflowSerializer

        return WorkflowSerializer.deserialize(data)


WORKFLOW_TYPES.register(workflow_type_name(Workflow), Workflow)
