# Rev 0.2.0
from __future__ import annotations

import asyncio
import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from functools import partial, wraps
from typing import Any, Dict, List, Optional, Tuple

from trackboard.models.entities import Person, Project, Task
from trackboard.models.types import DONE_TASK_STATUSES
from trackboard.repositories.assignment_store import (
    AssignmentStore,
    ConstraintError,
    NotFoundError,
    StoreError,
)
from trackboard.repositories.db import Database
from trackboard.services.priority_service import to_date

log = logging.getLogger(__name__)


def _off_loop(fn):
    """Run a blocking method on the store's worker thread and await it.

    sqlite3 failures surface as StoreError so callers never see driver types.
    """
    @wraps(fn)
    async def wrapper(self, *args, **kwargs):
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._executor, partial(fn, self, *args, **kwargs))
        except sqlite3.IntegrityError as exc:
            raise ConstraintError(f"{fn.__name__}: {exc}") from exc
        except sqlite3.Error as exc:
            raise StoreError(f"{fn.__name__}: {exc}") from exc
    return wrapper


class SQLiteAssignmentStore(AssignmentStore):
    """
    AssignmentStore over the local SQLite schema (data/migrations).

    Statements run on one worker thread, so the event loop keeps ticking while
    SQLite waits on a lock and calls on the shared connection never interleave.
    Each write is one Database.transaction().
    """

    def __init__(self, db: Database):
        self._db = db
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="trackboard-store")

    def close(self) -> None:
        """Wait for queued statements, then stop the worker."""
        self._executor.shutdown(wait=True)

    # -------------------------
    # Helpers (worker thread)
    # -------------------------
    def _require(self, table: str, row_id: int) -> None:
        row = self._db.conn.execute(f"SELECT 1 FROM {table} WHERE id = ?", (row_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"{table} id={row_id} does not exist")

    def _fetch_all(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        cur = self._db.conn.execute(sql, params)
        cols = [d[0] for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]

    @staticmethod
    def _edges(rows) -> Dict[int, Tuple[int, ...]]:
        out: Dict[int, List[int]] = {}
        for owner_id, person_id in rows:
            out.setdefault(owner_id, []).append(person_id)
        return {k: tuple(v) for k, v in out.items()}

    # -------------------------
    # Reads
    # -------------------------
    @_off_loop
    def list_people(self) -> List[Person]:
        rows = self._db.conn.execute(
            "SELECT id, full_name, avatar_url, default_role FROM people ORDER BY full_name, id"
        ).fetchall()
        return [Person(r[0], r[1], r[2], r[3]) for r in rows]

    @_off_loop
    def list_projects(self, *, include_completed: bool = False) -> List[Project]:
        done = ",".join("?" for _ in DONE_TASK_STATUSES)
        rows = self._fetch_all(
            f"""
            SELECT p.id, p.name, p.client, p.deadline, p.priority, p.status, p.quick_note,
                   (SELECT COUNT(*) FROM tasks t WHERE t.project_id = p.id) AS total_tasks,
                   (SELECT COUNT(*) FROM tasks t
                     WHERE t.project_id = p.id AND t.status IN ({done})) AS completed_tasks
            FROM projects p
            WHERE ? OR p.status != 'completed'
            ORDER BY p.created_at_utc DESC, p.id DESC
            """,
            (*DONE_TASK_STATUSES, int(include_completed)),
        )
        members = self._edges(self._db.conn.execute(
            "SELECT project_id, person_id FROM project_members ORDER BY created_at_utc, rowid"
        ).fetchall())
        return [
            Project(
                id=r["id"], name=r["name"], client=r["client"], deadline=to_date(r["deadline"]),
                priority=r["priority"], status=r["status"], quick_note=r["quick_note"],
                members=members.get(r["id"], ()),
                total_tasks=r["total_tasks"], completed_tasks=r["completed_tasks"],
            )
            for r in rows
        ]

    @_off_loop
    def list_tasks(self, project_id: int) -> List[Task]:
        rows = self._fetch_all(
            """
            SELECT id, project_id, title, description, deadline, priority, status
            FROM tasks WHERE project_id = ? ORDER BY id
            """,
            (project_id,),
        )
        assignees = self._edges(self._db.conn.execute(
            """
            SELECT a.task_id, a.person_id FROM task_assignments a
            JOIN tasks t ON t.id = a.task_id
            WHERE t.project_id = ? ORDER BY a.created_at_utc, a.rowid
            """,
            (project_id,),
        ).fetchall())
        return [
            Task(
                id=r["id"], project_id=r["project_id"], title=r["title"], description=r["description"],
                deadline=to_date(r["deadline"]), priority=r["priority"], status=r["status"],
                assignees=assignees.get(r["id"], ()),
            )
            for r in rows
        ]

    # -------------------------
    # Writes
    # -------------------------
    @_off_loop
    def update_project_priority(self, project_id: int, priority: str) -> None:
        with self._db.transaction() as con:
            n = con.execute("UPDATE projects SET priority = ? WHERE id = ?", (priority, project_id)).rowcount
        if n == 0:
            raise NotFoundError(f"projects id={project_id} does not exist")
        log.info("project %s priority -> %s", project_id, priority)

    @_off_loop
    def update_task_status(self, task_id: int, status: str) -> None:
        with self._db.transaction() as con:
            n = con.execute("UPDATE tasks SET status = ? WHERE id = ?", (status, task_id)).rowcount
        if n == 0:
            raise NotFoundError(f"tasks id={task_id} does not exist")
        log.info("task %s status -> %s", task_id, status)

    @_off_loop
    def replace_project_members(self, project_id: int, person_id: Optional[int]) -> None:
        self._require("projects", project_id)
        if person_id is not None:
            self._require("people", person_id)
        with self._db.transaction() as con:
            con.execute("DELETE FROM project_members WHERE project_id = ?", (project_id,))
            if person_id is not None:
                con.execute(
                    "INSERT INTO project_members(project_id, person_id) VALUES (?, ?)",
                    (project_id, person_id),
                )
        log.info("project %s members replaced with %s", project_id, person_id if person_id is not None else "nobody")

    @_off_loop
    def upsert_project_member(self, project_id: int, person_id: int) -> None:
        self._require("projects", project_id)
        self._require("people", person_id)
        with self._db.transaction() as con:
            con.execute(
                """
                INSERT INTO project_members(project_id, person_id) VALUES (?, ?)
                ON CONFLICT(project_id, person_id) DO NOTHING
                """,
                (project_id, person_id),
            )
        log.info("project %s member upserted: %s", project_id, person_id)

    @_off_loop
    def upsert_task_assignment(self, task_id: int, person_id: int) -> None:
        self._require("tasks", task_id)
        self._require("people", person_id)
        with self._db.transaction() as con:
            con.execute(
                """
                INSERT INTO task_assignments(task_id, person_id) VALUES (?, ?)
                ON CONFLICT(task_id, person_id) DO NOTHING
                """,
                (task_id, person_id),
            )
        log.info("task %s assignee upserted: %s", task_id, person_id)
