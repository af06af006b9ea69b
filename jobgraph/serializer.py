"""Conversion between live workflows and their persisted records."""

from __future__ import annotations

import logging
from typing import Any, Dict, Union

from .contracts import JobRecord, WorkflowRecord
from .job import Job
from .logger_builder import load_logger_builder, logger_builder_path
from .registry import JOB_TYPES, WORKFLOW_TYPES
from .workflow import Workflow

logger = logging.getLogger(__name__)


class WorkflowSerializer:
    """
    Serialize workflows for persistence and rebuild them from records.

    Job and workflow classes are looked up by their type identifier in the
    process registries; unknown identifiers fall back to the base classes so
    that a stored workflow stays inspectable in a process that lacks its code.
    """

    @staticmethod
    def serialize(workflow: Workflow) -> WorkflowRecord:
        nodes = [
            JobRecord(
                name=job.name,
                klass=job.klass,
                finished=job.finished,
                enqueued=job.enqueued,
                failed=job.failed,
                running=job.running,
                incoming=list(job.incoming),
                outgoing=list(job.outgoing),
                finished_at=job.finished_at,
                started_at=job.started_at,
                failed_at=job.failed_at,
            )
            for job in workflow.nodes
        ]
        return WorkflowRecord(
            id=workflow.id,
            name=workflow.name,
            klass=workflow.klass,
            status=workflow.status,
            total=workflow.total,
            finished=workflow.finished_count,
            started_at=workflow.started_at,
            finished_at=workflow.finished_at,
            stopped=workflow.stopped,
            logger_builder=logger_builder_path(workflow.logger_builder),
            nodes=nodes,
        )

    @staticmethod
    def deserialize(data: Union[WorkflowRecord, Dict[str, Any], str]) -> Workflow:
        if isinstance(data, str):
            record = WorkflowRecord.from_json(data)
        elif isinstance(data, dict):
            record = WorkflowRecord.model_validate(data)
        else:
            record = data

        workflow_cls = WORKFLOW_TYPES.find(record.klass)
        if workflow_cls is None:
            logger.warning(
                f"Workflow type '{record.klass}' is not registered; loading {record.id} as Workflow"
            )
            workflow_cls = Workflow

        workflow = workflow_cls(
            id=record.id,
            configure=False,
            logger_builder=load_logger_builder(record.logger_builder),
        )
        workflow.klass = record.klass
        workflow.name = record.name
        workflow.stopped = record.stopped
        for node in record.nodes:
            workflow.add_job(WorkflowSerializer._build_job(node))
        return workflow

    @staticmethod
    def _build_job(node: JobRecord) -> Job:
        job_cls = JOB_TYPES.find(node.klass)
        if job_cls is None:
            logger.warning(f"Job type '{node.klass}' is not registered; loading {node.name} as Job")
            job_cls = Job
        return job_cls.model_validate(node.model_dump())
