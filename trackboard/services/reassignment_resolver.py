# Rev 0.2.0

"""Reassignment resolver (Rev 0.2.0)
Turns a completed drop into store calls plus an optimistic patch.

    project -> priority   set manual priority
    project -> person     replace membership with that person (or nobody)
    task    -> status     move task to the column
    person  -> project    add member (upsert)
    person  -> task       add assignee (upsert)

Project drops on the roster replace membership; person drops only add.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Awaitable, Callable, Dict, Optional, Set, Tuple

from trackboard.models.drag import DragPayload, DropTarget
from trackboard.models.types import PROJECT_PRIORITIES, TASK_STATUSES
from trackboard.repositories.assignment_store import AssignmentStore, StoreError
from trackboard.services.notifier import Notifier
from trackboard.services.priority_service import priority_info
from trackboard.viewmodels.optimistic_state import OptimisticViewState, Patch, Snapshot

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 15.0


@dataclass
class Reassignment:
    """One planned operation: what to patch locally and what to ask the store."""
    action: str
    call: Callable[[], Awaitable[None]]
    failure_message: str
    state: Optional[OptimisticViewState] = None
    patch: Optional[Patch] = None
    success_message: Optional[str] = None
    reconcile: Tuple[OptimisticViewState, ...] = field(default_factory=tuple)


def _patch_entity(entity_id: int, **changes) -> Patch:
    def patch(items):
        return tuple(replace(e, **changes) if e.id == entity_id else e for e in items)
    return patch


def _add_person(entity_id: int, attr: str, person_id: int) -> Patch:
    def patch(items):
        out = []
        for e in items:
            current = getattr(e, attr)
            if e.id == entity_id and person_id not in current:
                e = replace(e, **{attr: current + (person_id,)})
            out.append(e)
        return tuple(out)
    return patch


class ReassignmentResolver:
    def __init__(self, store: AssignmentStore, notifier: Notifier, *,
                 projects: Optional[OptimisticViewState] = None,
                 tasks: Optional[OptimisticViewState] = None,
                 timeout_s: float = DEFAULT_TIMEOUT_S):
        self._store = store
        self._notifier = notifier
        self._projects = projects
        self._tasks = tasks
        self._timeout_s = timeout_s
        self._in_flight: Set[asyncio.Task] = set()
        self._handlers: Dict[Tuple[str, str], Callable[[DragPayload, DropTarget], Optional[Reassignment]]] = {
            ("project", "priority"): self._project_to_priority,
            ("project", "person"): self._project_to_person,
            ("task", "status"): self._task_to_status,
            ("person", "project"): self._person_to_project,
            ("person", "task"): self._person_to_task,
        }

    # ---- wiring
    def bind_tasks(self, state: Optional[OptimisticViewState]) -> None:
        self._tasks = state

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def supports(self, payload_kind: str, target_kind: str) -> bool:
        return (payload_kind, target_kind) in self._handlers

    # ---- entry points
    def plan(self, payload: DragPayload, target: DropTarget) -> Optional[Reassignment]:
        """Pick the operation for a drop; None when it is unsupported or a no-op."""
        handler = self._handlers.get((payload.kind, target.kind))
        if handler is None:
            log.debug("No reassignment for %s -> %s; treated as cancel", payload.kind, target.kind)
            return None
        return handler(payload, target)

    def resolve(self, payload: DragPayload, target: DropTarget) -> Optional[asyncio.Task]:
        """Apply the optimistic patch now and schedule the store call.

        Returns the commit task, or None when nothing is written. Without a
        running event loop the drop fails up front: the view is left untouched
        and one error is notified.
        """
        op = self.plan(payload, target)
        if op is None:
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.error("%s not scheduled: no running event loop", op.action)
            self._notifier.error(op.failure_message)
            return None
        token = op.state.apply(op.patch) if op.state is not None and op.patch is not None else None
        task = loop.create_task(self._commit(op, token))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def drain(self) -> None:
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    # ---- commit
    async def _commit(self, op: Reassignment, token: Optional[Snapshot]) -> bool:
        try:
            await asyncio.wait_for(op.call(), timeout=self._timeout_s)
        except asyncio.CancelledError:
            self._rollback(op, token)
            raise
        except StoreError as exc:
            self._fail(op, token, exc)
            return False
        except asyncio.TimeoutError:
            self._fail(op, token, f"no answer after {self._timeout_s:g}s")
            return False
        except Exception as exc:
            log.exception("Unexpected store failure during %s", op.action)
            self._fail(op, token, exc)
            return False

        if token is not None:
            op.state.confirm(token)
        log.info("%s: done", op.action)
        if op.success_message:
            self._notifier.success(op.success_message)
        await self._reconcile(op)
        return True

    def _rollback(self, op: Reassignment, token: Optional[Snapshot]) -> None:
        if token is not None:
            op.state.rollback(token)

    def _fail(self, op: Reassignment, token: Optional[Snapshot], reason) -> None:
        self._rollback(op, token)
        log.warning("%s failed: %s", op.action, reason)
        self._notifier.error(op.failure_message)

    async def _reconcile(self, op: Reassignment) -> None:
        for state in op.reconcile:
            try:
                await state.refresh()
            except Exception:
                # the write already landed; a stale view is fixed by the next refresh
                log.exception("Refresh after %s failed", op.action)

    # ---- helpers
    def _current(self, state: Optional[OptimisticViewState], entity):
        if state is None:
            return entity
        return state.find(entity.id) or entity

    def _states(self, *states: Optional[OptimisticViewState]) -> Tuple[OptimisticViewState, ...]:
        return tuple(s for s in states if s is not None)

    def _name_of(self, state: Optional[OptimisticViewState], entity_id: int, attr: str, fallback: str) -> str:
        found = state.find(entity_id) if state is not None else None
        return getattr(found, attr, None) or fallback

    # ---- handlers
    def _project_to_priority(self, payload: DragPayload, target: DropTarget) -> Optional[Reassignment]:
        value = target.value
        if value not in PROJECT_PRIORITIES:
            log.warning("Ignoring drop on unknown priority bucket %r", value)
            return None
        project = self._current(self._projects, payload.entity)
        if project.priority == value:
            return None
        label = priority_info(value)["label"] if value != "auto" else "Auto"
        return Reassignment(
            action=f"set priority of project {project.id} to {value}",
            call=lambda: self._store.update_project_priority(project.id, value),
            state=self._projects,
            patch=_patch_entity(project.id, priority=value),
            success_message=f'Priority changed to "{label}"',
            failure_message="Could not change priority",
            reconcile=self._states(self._projects),
        )

    def _project_to_person(self, payload: DragPayload, target: DropTarget) -> Optional[Reassignment]:
        person_id = target.value
        project = self._current(self._projects, payload.entity)
        members = (person_id,) if person_id is not None else ()
        if tuple(project.members) == members:
            return None
        return Reassignment(
            action=f"reassign project {project.id} to {person_id if person_id is not None else 'nobody'}",
            call=lambda: self._store.replace_project_members(project.id, person_id),
            state=self._projects,
            patch=_patch_entity(project.id, members=members),
            success_message="Project reassigned" if person_id is not None else "Project moved to Unassigned",
            failure_message="Could not reassign project",
            reconcile=self._states(self._projects),
        )

    def _task_to_status(self, payload: DragPayload, target: DropTarget) -> Optional[Reassignment]:
        status = target.value
        if status not in TASK_STATUSES:
            log.warning("Ignoring drop on unknown status column %r", status)
            return None
        task = self._current(self._tasks, payload.entity)
        if task.status == status:
            return None
        return Reassignment(
            action=f"move task {task.id} to {status}",
            call=lambda: self._store.update_task_status(task.id, status),
            state=self._tasks,
            patch=_patch_entity(task.id, status=status),
            failure_message="Could not move task",
            # project progress is computed from task statuses
            reconcile=self._states(self._tasks, self._projects),
        )

    def _person_to_project(self, payload: DragPayload, target: DropTarget) -> Optional[Reassignment]:
        person = payload.entity
        project_id = target.value
        project = self._projects.find(project_id) if self._projects is not None else None
        if project is not None and person.id in project.members:
            return None
        who = person.full_name or "User"
        title = self._name_of(self._projects, project_id, "name", "the project")
        return Reassignment(
            action=f"add person {person.id} to project {project_id}",
            call=lambda: self._store.upsert_project_member(project_id, person.id),
            state=self._projects if project is not None else None,
            patch=_add_person(project_id, "members", person.id),
            success_message=f'{who} added to the team of "{title}"',
            failure_message=f"Could not add {who} to the team",
            reconcile=self._states(self._projects),
        )

    def _person_to_task(self, payload: DragPayload, target: DropTarget) -> Optional[Reassignment]:
        person = payload.entity
        task_id = target.value
        task = self._tasks.find(task_id) if self._tasks is not None else None
        if task is not None and person.id in task.assignees:
            return None
        who = person.full_name or "User"
        return Reassignment(
            action=f"assign person {person.id} to task {task_id}",
            call=lambda: self._store.upsert_task_assignment(task_id, person.id),
            state=self._tasks if task is not None else None,
            patch=_add_person(task_id, "assignees", person.id),
            failure_message=f"Could not assign {who} to the task",
            reconcile=self._states(self._tasks),
        )
