"""Command line interface for inspecting and steering jobgraph workflows."""

from __future__ import annotations

import asyncio

import typer

from jobgraph.config import configure_logging
from jobgraph.dispatch import get_dispatcher
from jobgraph.exceptions import WorkflowNotFound
from jobgraph.persistence import get_repository
from jobgraph.serializer import WorkflowSerializer

app = typer.Typer(help="CLI for jobgraph workflows")

workflow_app = typer.Typer(help="Commands for managing workflows")

app.add_typer(workflow_app, name="workflow")


@app.callback()
def main() -> None:
    """jobgraph CLI entry point."""
    configure_logging()


@workflow_app.command("list")
def workflow_list() -> None:
    """
    List all workflows with their current status.

    Example:
        jobgraph workflow list
        # Output: abc123-def456-789    ImportWorkflow    Running    2/5
    """
    repo = get_repository()
    workflows = asyncio.run(repo.list_workflows())
    if not workflows:
        typer.echo("No workflows found")
        return
    for wf in workflows:
        typer.echo(f"{wf.id}\t{wf.name}\t{wf.status}\t{wf.finished}/{wf.total}")


@workflow_app.command("show")
def workflow_show(workflow_id: str) -> None:
    """
    Show detailed information for a specific workflow.

    Displays the workflow status, every job with its state and dependencies,
    and the jobs that are ready to be enqueued next.

    Example:
        jobgraph workflow show abc123-def456-789
        # Output: Workflow abc123-def456-789 (ImportWorkflow): Running
        #         - Prepare: finished
        #         - FetchUsers: running (after Prepare)
        #         Next: FetchOrders
    """
    repo = get_repository()
    record = asyncio.run(repo.get_workflow(workflow_id))
    if record is None:
        typer.echo("Workflow not found")
        raise typer.Exit(code=1)
    typer.echo(f"Workflow {record.id} ({record.name}): {record.status}")
    if record.stopped:
        typer.echo("Stopped: yes")
    for node in record.nodes:
        typer.echo(
            f"- {node.name}: {_job_state(node)}"
            + (f" (after {', '.join(node.incoming)})" if node.incoming else "")
        )
    workflow = WorkflowSerializer.deserialize(record)
    ready = [job.name for job in workflow.next_jobs()]
    typer.echo(f"Next: {', '.join(ready) if ready else '(none)'}")


@workflow_app.command("stop")
def workflow_stop(workflow_id: str) -> None:
    """Flag a workflow as stopped so no further jobs are enqueued."""
    dispatcher = get_dispatcher()
    try:
        asyncio.run(dispatcher.stop_workflow(workflow_id))
    except WorkflowNotFound:
        typer.echo("Workflow not found")
        raise typer.Exit(code=1)
    typer.echo(f"Workflow {workflow_id} stopped")


@workflow_app.command("resume")
def workflow_resume(workflow_id: str) -> None:
    """Clear the stop flag and enqueue the jobs that are ready."""
    dispatcher = get_dispatcher()
    try:
        enqueued = asyncio.run(dispatcher.resume_workflow(workflow_id))
    except WorkflowNotFound:
        typer.echo("Workflow not found")
        raise typer.Exit(code=1)
    typer.echo(f"Workflow {workflow_id} resumed")
    for job in enqueued:
        typer.echo(f"Enqueued {job.name}")


def _job_state(node) -> str:
    if node.failed:
        return "failed"
    if node.finished:
        return "finished"
    if node.running:
        return "running"
    if node.enqueued:
        return "enqueued"
    return "pending"


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
