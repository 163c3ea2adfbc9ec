# Rev 0.2.0
from __future__ import annotations

import logging
from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from trackboard.models.drag import DragPayload
from trackboard.models.entities import Person
from trackboard.repositories.assignment_store import AssignmentStore, StoreError
from trackboard.services.drag_session import DragSession

log = logging.getLogger(__name__)

ROLE_LABELS = {
    "editor": "Editor",
    "postproduccion": "Post-production",
    "director": "Director",
    "productor": "Producer",
    "camarografo": "Camera operator",
    "sonidista": "Sound engineer",
    "miembro": "Member",
}


def role_label(role: Optional[str]) -> str:
    return ROLE_LABELS.get(role or "", "Member")


class TeamPanelViewModel(QObject):
    """
    Draggable person chips. Dropping a chip on a project or task adds that person.
    Emits:
      - peopleLoaded(people: list[Person])
      - dragSourcesEnabled(enabled: bool)
    """

    peopleLoaded = Signal(list)
    dragSourcesEnabled = Signal(bool)

    def __init__(self, store: AssignmentStore, session: DragSession):
        super().__init__()
        self._store = store
        self._session = session
        self._people: List[Person] = []
        self._session.stateChanged.connect(lambda s: self.dragSourcesEnabled.emit(s == "idle"))

    async def reload(self) -> bool:
        try:
            self._people = list(await self._store.list_people())
        except StoreError:
            log.exception("Could not load team")
            return False
        self.peopleLoaded.emit(list(self._people))
        return True

    @property
    def people(self) -> List[Person]:
        return list(self._people)

    def chip(self, person: Person) -> dict:
        return {
            "id": person.id,
            "name": person.full_name or "Unnamed",
            "role": role_label(person.default_role),
            "initial": (person.full_name or "?")[:1].upper(),
            "avatar_url": person.avatar_url,
        }

    def press(self, person: Person, x: float, y: float) -> bool:
        return self._session.pointer_down(DragPayload.of(person), x, y)
