"""Workflow dispatcher: glue between the graph, a queue and a repository."""

from __future__ import annotations

import logging
from typing import List, Optional

from .exceptions import WorkflowNotFound
from .job import Job
from .persistence import WorkflowRepository, get_repository
from .serializer import WorkflowSerializer
from .transports import BaseTransport, get_transport
from .workflow import Workflow

logger = logging.getLogger(__name__)


class WorkflowDispatcher:
    """Drive workflows forward as workers report job lifecycle events.

    Each call loads the workflow from the repository, applies one change,
    persists the result and publishes whatever the frontier now allows. Jobs
    are published to a queue named after their type. The dispatcher expects
    the surrounding runtime to serialise feedback per workflow.
    """

    def __init__(
        self,
        transport: BaseTransport,
        repository: WorkflowRepository | None = None,
    ) -> None:
        self._transport = transport
        self._repository = repository or get_repository()

    async def create_workflow(self, workflow: Workflow) -> str:
        """Persist a freshly configured workflow without starting it."""
        await self.save_workflow(workflow)
        logger.info(f"Created workflow {workflow.id} ({workflow.klass}, {workflow.total} jobs)")
        return workflow.id

    async def save_workflow(self, workflow: Workflow) -> None:
        await self._repository.save_workflow(WorkflowSerializer.serialize(workflow))

    async def load_workflow(self, workflow_id: str) -> Workflow:
        record = await self._repository.get_workflow(workflow_id)
        if record is None:
            raise WorkflowNotFound(f"Workflow not found: {workflow_id}")
        return WorkflowSerializer.deserialize(record)

    async def start_workflow(self, workflow: Workflow) -> List[Job]:
        """Clear the stop flag and enqueue the workflow's roots."""
        workflow.start()
        return await self._advance(workflow)

    async def stop_workflow(self, workflow_id: str) -> Workflow:
        """Flag a workflow as stopped; jobs already queued keep running."""
        workflow = await self.load_workflow(workflow_id)
        workflow.stop()
        await self.save_workflow(workflow)
        logger.info(f"Stopped workflow {workflow_id}")
        return workflow

    async def resume_workflow(self, workflow_id: str) -> List[Job]:
        workflow = await self.load_workflow(workflow_id)
        return await self.start_workflow(workflow)

    # ------------------------------------------------------------------
    # Runtime feedback
    async def job_started(self, workflow_id: str, job_name: str) -> Job:
        workflow = await self.load_workflow(workflow_id)
        job = workflow.find_job(job_name)
        job.mark_running()
        await self.save_workflow(workflow)
        logger.info(f"Job {job.name} started for workflow_id={workflow_id}")
        return job

    async def job_finished(self, workflow_id: str, job_name: str) -> List[Job]:
        """Record a successful job and enqueue the jobs it unblocked."""
        workflow = await self.load_workflow(workflow_id)
        job = workflow.find_job(job_name)
        job.mark_finished()
        logger.info(f"Job {job.name} finished for workflow_id={workflow_id}")
        enqueued = await self._advance(workflow)
        if workflow.finished():
            logger.info(f"Workflow completed for workflow_id={workflow_id}")
        return enqueued

    async def job_failed(self, workflow_id: str, job_name: str) -> Job:
        """Record a failed job; its dependents are never enqueued."""
        workflow = await self.load_workflow(workflow_id)
        job = workflow.find_job(job_name)
        job.mark_failed()
        await self.save_workflow(workflow)
        logger.warning(f"Job {job.name} failed for workflow_id={workflow_id}")
        return job

    # ------------------------------------------------------------------
    async def _advance(self, workflow: Workflow) -> List[Job]:
        if workflow.stopped:
            logger.info(f"Workflow {workflow.id} is stopped; not enqueuing jobs")
            await self.save_workflow(workflow)
            return []

        ready = workflow.next_jobs()
        for job in ready:
            job.mark_enqueued()
        await self.save_workflow(workflow)

        for index, job in enumerate(ready):
            try:
                await self._transport.enqueue_job(workflow.id, job)
            except Exception as e:
                unsent = ready[index:]
                for pending in unsent:
                    pending.mark_unqueued()
                await self.save_workflow(workflow)
                logger.error(
                    f"Failed to enqueue {job.name} for workflow_id={workflow.id}: {e}. "
                    f"Returned {len(unsent)} job(s) to the frontier."
                )
                raise
            logger.info(f"Enqueued {job.name} for workflow_id={workflow.id}")
        return ready


def get_dispatcher(
    transport: Optional[BaseTransport] = None,
    repository: Optional[WorkflowRepository] = None,
) -> WorkflowDispatcher:
    return WorkflowDispatcher(transport or get_transport(), repository)
