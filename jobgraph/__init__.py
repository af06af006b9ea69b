"""jobgraph: dependency-graph core for job workflows."""

from .contracts import JobMessage, JobRecord, WorkflowRecord
from .dispatch import WorkflowDispatcher
from .exceptions import (
    DependencyLevelTooDeep,
    DuplicateJob,
    InvalidJobTransition,
    JobgraphError,
    JobNotFound,
    UnknownType,
    WorkflowNotFound,
)
from .job import Job
from .logger_builder import LoggerBuilder
from .persistence import get_repository
from .registry import JOB_TYPES, WORKFLOW_TYPES
from .resolver import FrontierResolver
from .serializer import WorkflowSerializer
from .transports import get_transport
from .worker import JobWorker
from .workflow import Workflow

__version__ = "0.1.0"
__all__ = [
    "DependencyLevelTooDeep",
    "DuplicateJob",
    "FrontierResolver",
    "InvalidJobTransition",
    "Job",
    "JobMessage",
    "JobNotFound",
    "JobRecord",
    "JobWorker",
    "JobgraphError",
    "JOB_TYPES",
    "LoggerBuilder",
    "UnknownType",
    "Workflow",
    "WorkflowDispatcher",
    "WorkflowNotFound",
    "WorkflowRecord",
    "WorkflowSerializer",
    "WORKFLOW_TYPES",
    "get_repository",
    "get_transport",
]
