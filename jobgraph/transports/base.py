"""Queue seam between the dispatcher and the workers that run jobs."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, AsyncIterator, Generic, Optional, Tuple, TypeVar

from ..contracts import JobMessage

if TYPE_CHECKING:
    from ..job import Job

RawMessageT = TypeVar("RawMessageT")


class BaseTransport(Generic[RawMessageT], metaclass=abc.ABCMeta):
    """Abstract job queue.

    Every job type has its own queue, named after the job's ``klass``, so a
    worker subscribes to exactly the kinds of job it knows how to run.
    """

    async def connect(self) -> None:
        """Open connection to broker (no-op by default)."""
        pass

    async def disconnect(self) -> None:
        """Close connection to broker (no-op by default)."""
        pass

    async def __aenter__(self) -> "BaseTransport[RawMessageT]":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.disconnect()

    @staticmethod
    def topic_for(job: "Job") -> str:
        return job.klass

    async def enqueue_job(self, workflow_id: str, job: "Job") -> JobMessage:
        """Publish ``job`` to its type's queue and return the message sent."""
        message = JobMessage(workflow_id=workflow_id, job_name=job.name, job_klass=job.klass)
        await self.publish(self.topic_for(job), message)
        return message

    @abc.abstractmethod
    async def publish(self, topic: str, message: JobMessage) -> None:
        """Append a message to the queue called ``topic``."""
        raise NotImplementedError

    @abc.abstractmethod
    async def subscribe(
        self, topic: str, lifespan: Optional[float] = None
    ) -> AsyncIterator[Tuple[RawMessageT, JobMessage]]:
        """Yield raw transport message and JobMessage pairs.

        Args:
            topic: The queue to consume.
            lifespan: Seconds to keep consuming. If None, runs indefinitely.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def ack(self, raw_message: RawMessageT) -> None:
        """Acknowledge successful processing."""
        raise NotImplementedError

    @abc.abstractmethod
    async def nack(self, raw_message: RawMessageT, requeue: bool = True) -> None:
        """Reject a message, optionally putting it back at the head of its queue."""
        raise NotImplementedError
