"""Frontier resolution tests."""

import random

import pytest

from jobgraph import DependencyLevelTooDeep, FrontierResolver, Job, Workflow


def names(jobs):
    return sorted(job.name for job in jobs)


def test_returns_roots_before_anything_ran(workflow):
    assert names(workflow.next_jobs()) == ["Prepare"]


def test_two_node_chain():
    flow = Workflow("chain")
    flow.run(Job, name="A")
    flow.run(Job, name="B")
    flow.create_dependencies()

    assert names(flow.next_jobs()) == ["A"]
    flow.find_job("A").finished = True
    assert names(flow.next_jobs()) == ["B"]


def test_skips_dependents_of_failed_jobs(workflow):
    workflow.find_job("Prepare").finished = True
    workflow.find_job("FetchFirstJob").failed = True
    assert names(workflow.next_jobs()) == ["FetchSecondJob"]


def test_returns_parallel_jobs(workflow):
    workflow.find_job("Prepare").finished = True
    assert names(workflow.next_jobs()) == ["FetchFirstJob", "FetchSecondJob"]


def test_empty_while_root_is_enqueued(workflow):
    workflow.find_job("Prepare").enqueued = True
    assert workflow.next_jobs() == []


def test_returns_unfinished_jobs_from_parallel_level(workflow):
    workflow.find_job("Prepare").finished = True
    workflow.find_job("FetchFirstJob").finished = True
    assert names(workflow.next_jobs()) == ["FetchSecondJob", "PersistFirstJob"]


def test_returns_next_level_after_parallel_level(workflow):
    for name in ("Prepare", "PersistFirstJob", "FetchFirstJob", "FetchSecondJob"):
        workflow.find_job(name).finished = True
    assert names(workflow.next_jobs()) == ["NormalizeJob"]


def test_empty_when_everything_finished(workflow):
    for job in workflow.nodes:
        job.mark_finished()
    assert workflow.next_jobs() == []


def test_result_follows_declaration_order(workflow):
    workflow.find_job("Prepare").finished = True
    assert [job.name for job in workflow.next_jobs()] == ["FetchFirstJob", "FetchSecondJob"]


def test_nested_sequential_flows_inside_parallel_ones(jobs):
    flow = Workflow("workflow")

    flow.run(jobs.Prepare)
    flow.run(jobs.NormalizeJob)

    flow.run(jobs.FetchFirstJob, after=jobs.Prepare)
    flow.run(jobs.PersistFirstJob, after=jobs.FetchFirstJob, before=jobs.NormalizeJob)
    flow.run(jobs.FetchSecondJob, after=jobs.Prepare)
    flow.run(jobs.PersistSecondJob, after=jobs.FetchSecondJob, before=jobs.NormalizeJob)

    flow.create_dependencies()

    assert names(flow.next_jobs()) == ["Prepare"]
    flow.find_job("Prepare").finished = True
    assert names(flow.next_jobs()) == ["FetchFirstJob", "FetchSecondJob"]
    flow.find_job("FetchFirstJob").finished = True
    assert names(flow.next_jobs()) == ["FetchSecondJob", "PersistFirstJob"]
    flow.find_job("FetchSecondJob").finished = True
    assert names(flow.next_jobs()) == ["PersistFirstJob", "PersistSecondJob"]
    flow.find_job("PersistFirstJob").finished = True
    assert names(flow.next_jobs()) == ["PersistSecondJob"]
    flow.find_job("PersistSecondJob").finished = True
    assert names(flow.next_jobs()) == ["NormalizeJob"]


def test_descendants_of_failure_never_become_ready():
    flow = Workflow("workflow")
    flow.run(Job, name="A")
    flow.run(Job, name="B")
    flow.run(Job, name="C")
    flow.create_dependencies()

    flow.find_job("A").mark_finished()
    flow.find_job("B").mark_failed()

    for _ in range(3):
        assert flow.next_jobs() == []


def test_fails_when_dependency_resolution_recurses_too_deep():
    class CycleFirst(Job):
        pass

    class CycleSecond(Job):
        pass

    class CycleThird(Job):
        pass

    flow = Workflow("workflow")
    flow.run(CycleFirst, after=CycleThird)
    flow.run(CycleSecond, after=CycleFirst)
    flow.run(CycleThird, after=CycleSecond)
    flow.create_dependencies()

    with pytest.raises(DependencyLevelTooDeep) as excinfo:
        flow.next_jobs()
    assert excinfo.value.limit >= flow.total


def test_cycle_reachable_from_root_is_detected():
    flow = Workflow("workflow")
    flow.run(Job, name="root")
    flow.run(Job, name="x", after=["root", "z"])
    flow.run(Job, name="y", after="x")
    flow.run(Job, name="z", after="y")
    flow.create_dependencies()

    with pytest.raises(DependencyLevelTooDeep):
        flow.next_jobs()


def test_self_loop_is_detected():
    flow = Workflow("workflow")
    flow.run(Job, name="loop", after="loop")
    flow.create_dependencies()

    with pytest.raises(DependencyLevelTooDeep):
        flow.next_jobs()


def test_depth_limit_never_below_node_count():
    nodes = [Job(name=f"J{i}", incoming=[f"J{i - 1}"] if i else []) for i in range(10)]
    resolver = FrontierResolver(nodes, depth_limit=1)

    assert resolver.depth_limit == 10
    assert [job.name for job in resolver.next_jobs()] == ["J0"]


def test_levels(workflow):
    assert workflow.levels() == [
        ["Prepare"],
        ["FetchFirstJob", "FetchSecondJob"],
        ["PersistFirstJob"],
        ["NormalizeJob"],
    ]


def _random_workflow(rng, size):
    flow = Workflow(f"random-{size}")
    for i in range(size):
        parents = [f"J{p}" for p in range(i) if rng.random() < 0.3]
        flow.run(Job, name=f"J{i}", after=parents)
    flow.create_dependencies()

    for job in flow.nodes:
        roll = rng.random()
        if roll < 0.4:
            job.finished = True
        elif roll < 0.5:
            job.failed = True
        elif roll < 0.6:
            job.enqueued = True
        elif roll < 0.65:
            job.running = True
    return flow


@pytest.mark.parametrize("seed", range(25))
def test_frontier_matches_readiness_definition(seed):
    rng = random.Random(seed)
    flow = _random_workflow(rng, rng.randint(1, 30))

    ready = {job.name for job in flow.next_jobs()}
    for job in flow.nodes:
        idle = not (job.finished or job.failed or job.enqueued or job.running)
        parents_done = all(flow.find_job(name).finished for name in job.incoming)
        assert (job.name in ready) == (idle and parents_done)
