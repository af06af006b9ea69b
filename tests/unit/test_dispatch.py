"""Dispatcher tests: driving a workflow through transport and repository."""

import pytest

from jobgraph import WorkflowDispatcher, WorkflowNotFound
from jobgraph.persistence import InMemoryWorkflowRepository
from jobgraph.transports.inmemory import InMemoryTransport


def names(jobs):
    return sorted(job.name for job in jobs)


@pytest.fixture
def transport():
    return InMemoryTransport()


@pytest.fixture
def repo():
    return InMemoryWorkflowRepository()


@pytest.fixture
def dispatcher(transport, repo):
    return WorkflowDispatcher(transport, repository=repo)


@pytest.mark.asyncio
async def test_start_enqueues_roots(dispatcher, transport, repo, workflow):
    await dispatcher.create_workflow(workflow)
    enqueued = await dispatcher.start_workflow(workflow)

    assert names(enqueued) == ["Prepare"]
    [message] = transport.pending("Prepare")
    assert message.workflow_id == "test-workflow"
    assert message.job_name == "Prepare"

    stored = await repo.get_workflow("test-workflow")
    assert stored.status == "Running"
    assert stored.nodes[0].enqueued is True


@pytest.mark.asyncio
async def test_full_run_to_completion(dispatcher, repo, workflow):
    await dispatcher.start_workflow(workflow)

    await dispatcher.job_started("test-workflow", "Prepare")
    assert names(await dispatcher.job_finished("test-workflow", "Prepare")) == [
        "FetchFirstJob",
        "FetchSecondJob",
    ]
    assert names(await dispatcher.job_finished("test-workflow", "FetchFirstJob")) == [
        "PersistFirstJob"
    ]
    assert await dispatcher.job_finished("test-workflow", "FetchSecondJob") == []
    assert names(await dispatcher.job_finished("test-workflow", "PersistFirstJob")) == [
        "NormalizeJob"
    ]
    assert await dispatcher.job_finished("test-workflow", "NormalizeJob") == []

    loaded = await dispatcher.load_workflow("test-workflow")
    assert loaded.finished()
    assert loaded.status == "Finished"
    assert loaded.started_at is not None
    assert (await repo.get_workflow("test-workflow")).finished == 5


@pytest.mark.asyncio
async def test_failed_job_blocks_dependents(dispatcher, transport, workflow):
    await dispatcher.start_workflow(workflow)
    await dispatcher.job_finished("test-workflow", "Prepare")

    failed = await dispatcher.job_failed("test-workflow", "FetchFirstJob")
    assert failed.failed

    assert await dispatcher.job_finished("test-workflow", "FetchSecondJob") == []
    assert transport.pending("PersistFirstJob") == []

    loaded = await dispatcher.load_workflow("test-workflow")
    assert loaded.status == "Failed"
    assert loaded.next_jobs() == []


@pytest.mark.asyncio
async def test_stopped_workflow_enqueues_nothing(dispatcher, transport, workflow):
    await dispatcher.start_workflow(workflow)
    stopped = await dispatcher.stop_workflow("test-workflow")
    assert stopped.stopped

    assert await dispatcher.job_finished("test-workflow", "Prepare") == []
    assert transport.pending("FetchFirstJob") == []

    resumed = await dispatcher.resume_workflow("test-workflow")
    assert names(resumed) == ["FetchFirstJob", "FetchSecondJob"]
    assert len(transport.pending("FetchFirstJob")) == 1


@pytest.mark.asyncio
async def test_unknown_workflow(dispatcher):
    with pytest.raises(WorkflowNotFound):
        await dispatcher.job_finished("missing", "Prepare")


@pytest.mark.asyncio
async def test_publish_failure_propagates(repo, workflow):
    class BrokenTransport(InMemoryTransport):
        async def publish(self, topic, message):
            raise ConnectionError("queue unavailable")

    dispatcher = WorkflowDispatcher(BrokenTransport(), repository=repo)
    with pytest.raises(ConnectionError):
        await dispatcher.start_workflow(workflow)


@pytest.mark.asyncio
async def test_failed_publish_returns_jobs_to_frontier(repo, workflow):
    class FlakyTransport(InMemoryTransport):
        def __init__(self):
            super().__init__()
            self.failures = 1

        async def publish(self, topic, message):
            if self.failures:
                self.failures -= 1
                raise ConnectionError("queue unavailable")
            await super().publish(topic, message)

    transport = FlakyTransport()
    dispatcher = WorkflowDispatcher(transport, repository=repo)
    await dispatcher.create_workflow(workflow)

    with pytest.raises(ConnectionError):
        await dispatcher.start_workflow(workflow)

    stored = await repo.get_workflow("test-workflow")
    assert stored.nodes[0].enqueued is False

    resumed = await dispatcher.resume_workflow("test-workflow")
    assert names(resumed) == ["Prepare"]
    assert [m.job_name for m in transport.pending("Prepare")] == ["Prepare"]


@pytest.mark.asyncio
async def test_partial_publish_keeps_sent_jobs_enqueued(repo, workflow):
    class SecondPublishFails(InMemoryTransport):
        async def publish(self, topic, message):
            if message.job_name == "FetchSecondJob":
                raise ConnectionError("queue unavailable")
            await super().publish(topic, message)

    dispatcher = WorkflowDispatcher(SecondPublishFails(), repository=repo)
    await dispatcher.start_workflow(workflow)

    with pytest.raises(ConnectionError):
        await dispatcher.job_finished("test-workflow", "Prepare")

    loaded = await dispatcher.load_workflow("test-workflow")
    assert loaded.find_job("FetchFirstJob").enqueued is True
    assert loaded.find_job("FetchSecondJob").enqueued is False
    assert names(loaded.next_jobs()) == ["FetchSecondJob"]
