"""Exceptions raised by the jobgraph engine."""

from __future__ import annotations


class JobgraphError(Exception):
    """Base class for all jobgraph errors."""


class JobNotFound(JobgraphError, KeyError):
    """Raised when a job name cannot be resolved inside a workflow."""

    def __init__(self, name: str, workflow_id: str | None = None) -> None:
        self.name = name
        self.workflow_id = workflow_id
        where = f" in workflow {workflow_id}" if workflow_id else ""
        super().__init__(f"Job '{name}' not found{where}")

    def __str__(self) -> str:
        return self.args[0]


class DuplicateJob(JobgraphError):
    """Raised when two jobs in one workflow share a name."""


class DependencyLevelTooDeep(JobgraphError):
    """Raised when dependency resolution exceeds its depth bound.

    This signals a cyclic (or pathologically deep) graph. The workflow
    definition itself should be treated as invalid.
    """

    def __init__(self, depth: int, limit: int) -> None:
        self.depth = depth
        self.limit = limit
        super().__init__(
            f"Dependency resolution reached depth {depth} (limit {limit}); "
            "the workflow graph is likely cyclic"
        )


class InvalidJobTransition(JobgraphError):
    """Raised when a state change would revert a terminal job."""


class UnknownType(JobgraphError, LookupError):
    """Raised when a job or workflow type identifier is not registered."""


class WorkflowNotFound(JobgraphError, LookupError):
    """Raised when a persisted workflow cannot be located."""
