"""Repository abstraction for workflow state persistence."""

from __future__ import annotations

from typing import Protocol

from ..contracts import WorkflowRecord


class WorkflowRepository(Protocol):
    """Protocol for workflow state persistence backends."""

    async def save_workflow(self, record: WorkflowRecord) -> None:
        """Insert or replace the stored state of a workflow."""

    async def get_workflow(self, workflow_id: str) -> WorkflowRecord | None:
        """Retrieve the workflow record by id."""

    async def list_workflows(self) -> list[WorkflowRecord]:
        """Return all persisted workflows."""

    async def delete_workflow(self, workflow_id: str) -> None:
        """Forget a workflow."""

    def close(self) -> None:
        """Release backend resources."""
