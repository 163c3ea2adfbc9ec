# Rev 0.2.0
"""Immutable entities mirrored by the dashboard views.

Patches never mutate in place; they build new instances with
``dataclasses.replace`` so that snapshots taken before a patch stay valid.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple

from .types import (
    PROJECT_PRIORITIES,
    PROJECT_STATUSES,
    TASK_PRIORITIES,
    TASK_STATUSES,
)


def _check(value: str, allowed: Tuple[str, ...], what: str) -> None:
    if value not in allowed:
        raise ValueError(f"invalid {what} {value!r}; expected one of {', '.join(allowed)}")


@dataclass(frozen=True)
class Person:
    id: int
    full_name: str
    avatar_url: Optional[str] = None
    default_role: Optional[str] = None


@dataclass(frozen=True)
class Project:
    id: int
    name: str
    client: Optional[str] = None
    deadline: Optional[date] = None
    priority: str = "auto"
    status: str = "pending"
    quick_note: Optional[str] = None
    members: Tuple[int, ...] = ()          # person ids (project_members rows)
    total_tasks: int = 0
    completed_tasks: int = 0

    def __post_init__(self) -> None:
        _check(self.priority, PROJECT_PRIORITIES, "project priority")
        _check(self.status, PROJECT_STATUSES, "project status")

    @property
    def progress(self) -> int:
        """Percent of tasks approved or delivered; computed by the store."""
        if self.total_tasks <= 0:
            return 0
        return round(self.completed_tasks * 100 / self.total_tasks)


@dataclass(frozen=True)
class Task:
    id: int
    project_id: int
    title: str
    description: Optional[str] = None
    deadline: Optional[date] = None
    priority: str = "medium"
    status: str = "pending"
    assignees: Tuple[int, ...] = ()        # person ids (task_assignments rows)

    def __post_init__(self) -> None:
        _check(self.priority, TASK_PRIORITIES, "task priority")
        _check(self.status, TASK_STATUSES, "task status")


@dataclass(frozen=True)
class PersonWorkload:
    """A person's bucket in the roster view."""
    person: Person
    projects: Tuple[Project, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return len(self.projects)

    @property
    def level(self) -> str:
        if self.count > 5:
            return "overloaded"
        if self.count > 2:
            return "busy"
        return "normal"
