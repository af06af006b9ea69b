"""In-memory implementation of the workflow repository."""

from __future__ import annotations

from typing import Dict

from ..contracts import WorkflowRecord
from .repository import WorkflowRepository


class InMemoryWorkflowRepository(WorkflowRepository):
    """Store workflow state in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts.
    """

    def __init__(self) -> None:
        self._workflows: Dict[str, str] = {}

    # records are stored as JSON so callers never share mutable state
    async def save_workflow(self, record: WorkflowRecord) -> None:
        self._workflows[record.id] = record.to_json()

    async def get_workflow(self, workflow_id: str) -> WorkflowRecord | None:
        data = self._workflows.get(workflow_id)
        return WorkflowRecord.from_json(data) if data is not None else None

    async def list_workflows(self) -> list[WorkflowRecord]:
        return [WorkflowRecord.from_json(data) for data in self._workflows.values()]

    async def delete_workflow(self, workflow_id: str) -> None:
        self._workflows.pop(workflow_id, None)

    def close(self) -> None:
        pass
