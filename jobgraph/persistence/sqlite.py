"""SQLite implementation of the workflow repository."""

from __future__ import annotations

import asyncio
import sqlite3
from pathlib import Path
from typing import Any

from ..contracts import WorkflowRecord
from .repository import WorkflowRepository


class SQLiteWorkflowRepository(WorkflowRepository):
    """Persist workflow state using SQLite."""

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    def close(self) -> None:
        """Close the underlying connection; the repository is unusable afterwards."""
        self._conn.close()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS workflows (
                id TEXT PRIMARY KEY,
                klass TEXT NOT NULL,
                status TEXT NOT NULL,
                record TEXT NOT NULL
            )
            """
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        self._conn.commit()

    def _fetchone(self, query: str, *params: Any) -> sqlite3.Row | None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchone()

    def _fetchall(self, query: str, *params: Any) -> list[sqlite3.Row]:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchall()

    # ------------------------------------------------------------------
    # Repository API
    async def save_workflow(self, record: WorkflowRecord) -> None:
        await asyncio.to_thread(
            self._execute,
            """
            INSERT INTO workflows (id, klass, status, record) VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                klass = excluded.klass,
                status = excluded.status,
                record = excluded.record
            """,
            record.id,
            record.klass,
            record.status,
            record.to_json(),
        )

    async def get_workflow(self, workflow_id: str) -> WorkflowRecord | None:
        row = await asyncio.to_thread(
            self._fetchone,
            "SELECT record FROM workflows WHERE id = ?",
            workflow_id,
        )
        if not row:
            return None
        return WorkflowRecord.from_json(row["record"])

    async def list_workflows(self) -> list[WorkflowRecord]:
        rows = await asyncio.to_thread(
            self._fetchall,
            "SELECT record FROM workflows ORDER BY rowid",
        )
        return [WorkflowRecord.from_json(row["record"]) for row in rows]

    async def delete_workflow(self, workflow_id: str) -> None:
        await asyncio.to_thread(
            self._execute,
            "DELETE FROM workflows WHERE id = ?",
            workflow_id,
        )
