"""Shared job types and workflows for the test-suite."""

from types import SimpleNamespace

import pytest

from jobgraph import Job, Workflow


class Prepare(Job):
    pass


class FetchFirstJob(Job):
    pass


class FetchSecondJob(Job):
    pass


class PersistFirstJob(Job):
    pass


class PersistSecondJob(Job):
    pass


class NormalizeJob(Job):
    pass


class SampleWorkflow(Workflow):
    def configure(self):
        self.run(Prepare)
        self.run(NormalizeJob)

        self.run(FetchFirstJob, after=Prepare)
        self.run(FetchSecondJob, after=Prepare, before=NormalizeJob)
        self.run(PersistFirstJob, after=FetchFirstJob, before=NormalizeJob)


@pytest.fixture
def jobs() -> SimpleNamespace:
    return SimpleNamespace(
        Prepare=Prepare,
        FetchFirstJob=FetchFirstJob,
        FetchSecondJob=FetchSecondJob,
        PersistFirstJob=PersistFirstJob,
        PersistSecondJob=PersistSecondJob,
        NormalizeJob=NormalizeJob,
    )


@pytest.fixture
def workflow() -> SampleWorkflow:
    return SampleWorkflow("test-workflow")
