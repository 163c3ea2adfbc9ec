# Rev 0.2.0
from __future__ import annotations

import logging
from datetime import date
from typing import Any, List, Optional, Sequence

from trackboard.models.drag import DropTarget, unassigned_target
from trackboard.models.entities import Person, PersonWorkload
from trackboard.repositories.assignment_store import AssignmentStore, StoreError
from trackboard.services.drag_session import DragSession
from trackboard.services.priority_service import sort_by_priority
from trackboard.viewmodels.board_base import BoardViewModel, Bucket
from trackboard.viewmodels.optimistic_state import OptimisticViewState

log = logging.getLogger(__name__)


class PeopleViewModel(BoardViewModel):
    """
    Roster view: one bucket per person plus "Unassigned".
    A project shows under every member; dropping a project on a person makes
    that person its only member.
    """

    card_target_kind = "project"

    # until load_people() runs, the roster only has the Unassigned bucket
    _people: Sequence[Person] = ()
    _search = ""

    def __init__(self, state: OptimisticViewState, session: DragSession, store: AssignmentStore, *,
                 today: Optional[date] = None):
        super().__init__(state, session, today=today)
        self._store = store

    # ---- people
    async def load_people(self) -> bool:
        try:
            self._people = list(await self._store.list_people())
        except StoreError:
            log.exception("Could not load people")
            return False
        self.regroup()
        return True

    def set_people(self, people: Sequence[Person]) -> None:
        self._people = list(people)
        self.regroup()

    def set_search(self, term: Optional[str]) -> None:
        self._search = (term or "").strip().lower()
        self.regroup()

    # ---- grouping
    def group(self, items: Sequence[Any]) -> List[Bucket]:
        by_person = {p.id: [] for p in self._people}
        unassigned = []
        for project in items:
            known = [pid for pid in project.members if pid in by_person]
            if not known:
                # no member on the roster: show it where it can still be dragged
                unassigned.append(project)
                continue
            for person_id in known:
                by_person[person_id].append(project)

        buckets = [Bucket(unassigned_target(), tuple(sort_by_priority(unassigned, self._today)))]
        for person in self._people:
            projects = by_person[person.id]
            if self._search:
                if not self._matches(person, projects):
                    continue
                if self._search not in (person.full_name or "").lower():
                    projects = [p for p in projects if self._search in p.name.lower()]
            projects = tuple(sort_by_priority(projects, self._today))
            buckets.append(Bucket(
                DropTarget("person", person.id, person.full_name),
                projects,
                PersonWorkload(person, projects),
            ))
        return buckets

    def _matches(self, person: Person, projects: Sequence[Any]) -> bool:
        if self._search in (person.full_name or "").lower():
            return True
        return any(self._search in p.name.lower() for p in projects)

    def workloads(self) -> List[PersonWorkload]:
        return [b.meta for b in self._buckets if b.meta is not None]
