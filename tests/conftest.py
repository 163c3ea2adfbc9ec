# Rev 0.2.0

"""Pytest fixtures for trackboard (Rev 0.2.0)"""
from __future__ import annotations
import asyncio
from dataclasses import replace
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest
from PySide6.QtCore import QCoreApplication

from trackboard.models.entities import Person, Project, Task
from trackboard.repositories.assignment_store import AssignmentStore
from trackboard.repositories.db import Database
from trackboard.repositories.sqlite_assignment_store import SQLiteAssignmentStore
from trackboard.services.drag_session import DragSession
from trackboard.services.notifier import Notifier
from trackboard.services.reassignment_resolver import ReassignmentResolver
from trackboard.viewmodels.optimistic_state import OptimisticViewState

TODAY = date(2026, 3, 10)


def days(n: int) -> date:
    return TODAY + timedelta(days=n)


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture()
def db(tmp_path: Path):
    database = Database(path=tmp_path / "test.db")
    try:
        database.run_migrations()
        yield database
    finally:
        database.close()


@pytest.fixture()
def db_conn(db: Database):
    return db.conn


@pytest.fixture()
def sqlite_store(db: Database):
    store = SQLiteAssignmentStore(db)
    try:
        yield store
    finally:
        store.close()


# --- A tiny in-memory stub store just for unit tests -----------------------

class StubStore(AssignmentStore):
    def __init__(self):
        self.people: List[Person] = []
        self.projects: Dict[int, Project] = {}
        self.tasks: Dict[int, Task] = {}
        self.calls: List[Tuple] = []
        self.fail_with: Optional[BaseException] = None
        self.gate: Optional[asyncio.Event] = None

    async def _record(self, *call) -> None:
        self.calls.append(call)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

    async def list_people(self):
        return list(self.people)

    async def list_projects(self, *, include_completed: bool = False):
        return list(self.projects.values())

    async def list_tasks(self, project_id: int):
        return [t for t in self.tasks.values() if t.project_id == project_id]

    async def update_project_priority(self, project_id, priority):
        await self._record("update_project_priority", project_id, priority)
        p = self.projects[project_id]
        self.projects[project_id] = replace(p, priority=priority)

    async def update_task_status(self, task_id, status):
        await self._record("update_task_status", task_id, status)
        t = self.tasks[task_id]
        self.tasks[task_id] = replace(t, status=status)

    async def replace_project_members(self, project_id, person_id):
        await self._record("replace_project_members", project_id, person_id)
        p = self.projects[project_id]
        members = (person_id,) if person_id is not None else ()
        self.projects[project_id] = replace(p, members=members)

    async def upsert_project_member(self, project_id, person_id):
        await self._record("upsert_project_member", project_id, person_id)
        p = self.projects[project_id]
        if person_id not in p.members:
            self.projects[project_id] = replace(p, members=p.members + (person_id,))

    async def upsert_task_assignment(self, task_id, person_id):
        await self._record("upsert_task_assignment", task_id, person_id)
        t = self.tasks[task_id]
        if person_id not in t.assignees:
            self.tasks[task_id] = replace(t, assignees=t.assignees + (person_id,))

    def writes(self) -> List[Tuple]:
        return list(self.calls)


@pytest.fixture()
def people() -> List[Person]:
    return [
        Person(1, "Ana Torres", default_role="director"),
        Person(2, "Bruno Diaz", default_role="editor"),
        Person(3, "Carla Ruiz", default_role="productor"),
        Person(4, "Dario Vega"),
        Person(5, "Elena Mora"),
    ]


@pytest.fixture()
def stub_store(people) -> StubStore:
    stub = StubStore()
    stub.people = list(people)
    for p in (
        Project(10, "Spring campaign", deadline=days(2), priority="low", status="active", members=(1, 2)),
        Project(11, "Brand film", deadline=days(12), priority="auto", members=(3,)),
        Project(12, "Annual report", deadline=days(45), priority="auto"),
    ):
        stub.projects[p.id] = p
    for t in (
        Task(20, 10, "Storyboard", status="review"),
        Task(21, 10, "Shoot day", priority="critical", status="in_progress", assignees=(5,)),
    ):
        stub.tasks[t.id] = t
    return stub


@pytest.fixture()
def projects_state(stub_store: StubStore) -> OptimisticViewState:
    return OptimisticViewState(
        list(stub_store.projects.values()),
        loader=stub_store.list_projects,
        name="projects",
    )


@pytest.fixture()
def tasks_state(stub_store: StubStore) -> OptimisticViewState:
    return OptimisticViewState(
        [t for t in stub_store.tasks.values() if t.project_id == 10],
        loader=lambda: stub_store.list_tasks(10),
        name="tasks",
    )


@pytest.fixture()
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture()
def notifications(notifier: Notifier) -> List[Tuple[str, str]]:
    seen: List[Tuple[str, str]] = []
    notifier.notified.connect(lambda msg, level, _ms: seen.append((level, msg)))
    return seen


@pytest.fixture()
def resolver(stub_store, notifier, projects_state, tasks_state) -> ReassignmentResolver:
    return ReassignmentResolver(stub_store, notifier, projects=projects_state, tasks=tasks_state, timeout_s=1.0)


@pytest.fixture()
def session(resolver: ReassignmentResolver) -> DragSession:
    return DragSession(resolver.resolve)
