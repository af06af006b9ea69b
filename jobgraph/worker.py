"""Queue consumer that runs jobs and reports back to the dispatcher."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from .contracts import JobMessage
from .dispatch import WorkflowDispatcher
from .job import Job
from .transports import BaseTransport

logger = logging.getLogger(__name__)

JobHandler = Callable[[Job, JobMessage, Any], Union[None, Awaitable[None]]]


class JobWorker:
    """Consume one job type's queue and feed lifecycle events to a dispatcher.

    ``handler(job, message, job_logger)`` holds the business logic; it may be
    a plain function or a coroutine function. Raising marks the job failed,
    which keeps its dependents out of the frontier. Returning normally marks
    it finished and enqueues whatever it unblocked.
    """

    def __init__(
        self,
        transport: BaseTransport,
        dispatcher: WorkflowDispatcher,
        job_type: str,
        handler: JobHandler,
    ) -> None:
        self._transport = transport
        self._dispatcher = dispatcher
        self.job_type = job_type
        self._handler = handler
        self.processed = 0

    async def run(
        self, lifespan: Optional[float] = None, max_jobs: Optional[int] = None
    ) -> int:
        """Process messages until ``lifespan`` expires or ``max_jobs`` are done."""
        logger.info(f"Worker for {self.job_type} started")
        async for raw_message, message in self._transport.subscribe(
            self.job_type, lifespan=lifespan
        ):
            await self.handle(raw_message, message)
            if max_jobs is not None and self.processed >= max_jobs:
                break
        return self.processed

    async def handle(self, raw_message: Any, message: JobMessage) -> bool:
        """Run one job; return ``True`` when it finished."""
        workflow = await self._dispatcher.load_workflow(message.workflow_id)
        if workflow.find_job(message.job_name).terminal:
            logger.info(
                f"Skipping redelivered {message.job_name} for workflow_id={message.workflow_id}"
            )
            await self._transport.ack(raw_message)
            return False

        job = await self._dispatcher.job_started(message.workflow_id, message.job_name)
        job_logger = workflow.build_logger_for_job(job, message.message_id)

        try:
            result = self._handler(job, message, job_logger)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            job_logger.error(f"Job {job.name} raised: {e}")
            await self._dispatcher.job_failed(message.workflow_id, job.name)
            await self._transport.ack(raw_message)
            self.processed += 1
            return False

        await self._dispatcher.job_finished(message.workflow_id, job.name)
        await self._transport.ack(raw_message)
        self.processed += 1
        return True
