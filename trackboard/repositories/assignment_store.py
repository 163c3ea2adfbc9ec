# Rev 0.2.0

"""AssignmentStore contract (Rev 0.2.0)
The only surface the drag engine needs from persistence. Every call is a
coroutine that either completes or raises StoreError.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional

from trackboard.models.entities import Person, Project, Task


class StoreError(Exception):
    """Any failure of a store call: I/O, constraint, missing row."""


class NotFoundError(StoreError):
    pass


class ConstraintError(StoreError):
    pass


class AssignmentStore(ABC):

    # ---- reads
    @abstractmethod
    async def list_people(self) -> List[Person]: ...

    @abstractmethod
    async def list_projects(self, *, include_completed: bool = False) -> List[Project]: ...

    @abstractmethod
    async def list_tasks(self, project_id: int) -> List[Task]: ...

    # ---- writes
    @abstractmethod
    async def update_project_priority(self, project_id: int, priority: str) -> None: ...

    @abstractmethod
    async def update_task_status(self, task_id: int, status: str) -> None: ...

    @abstractmethod
    async def replace_project_members(self, project_id: int, person_id: Optional[int]) -> None:
        """Delete every member edge of the project, then add one iff person_id is set."""

    @abstractmethod
    async def upsert_project_member(self, project_id: int, person_id: int) -> None: ...

    @abstractmethod
    async def upsert_task_assignment(self, task_id: int, person_id: int) -> None: ...
