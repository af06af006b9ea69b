"""Per-job logger construction."""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, Any, Type

if TYPE_CHECKING:
    from .job import Job


class LoggerBuilder:
    """Default strategy: a ``LoggerAdapter`` tagged with workflow and job ids.

    Replace it per workflow with ``Workflow.set_logger_builder`` to route job
    logs elsewhere. Custom builders take the workflow id in their constructor
    and implement ``build(job, run_id)``.
    """

    def __init__(self, workflow_id: str) -> None:
        self.workflow_id = workflow_id

    def build(self, job: "Job", run_id: Any) -> logging.LoggerAdapter:
        base = logging.getLogger(f"jobgraph.jobs.{job.name}")
        return logging.LoggerAdapter(
            base,
            {"workflow_id": self.workflow_id, "job": job.name, "run_id": run_id},
        )


def logger_builder_path(builder: Type[Any]) -> str:
    """Dotted import path identifying ``builder`` in serialized workflows."""
    return f"{builder.__module__}.{builder.__qualname__}"


def load_logger_builder(path: str) -> Type[Any]:
    """Import a logger builder class from its dotted path."""
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ValueError(f"Invalid logger builder path: {path}")
    try:
        module = importlib.import_module(module_name)
        return getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ValueError(f"Failed to load logger builder '{path}': {e}") from e


def ensure_importable(builder: Type[Any]) -> Type[Any]:
    """Reject builders that cannot be reloaded from their dotted path.

    Classes defined inside a function carry ``<locals>`` in their qualified
    name, so a workflow using one could be saved but never loaded again.
    """
    path = logger_builder_path(builder)
    try:
        loaded = load_logger_builder(path)
    except ValueError:
        loaded = None
    if loaded is not builder:
        raise ValueError(
            f"Logger builder {path} is not importable by path; define it at module level"
        )
    return builder
