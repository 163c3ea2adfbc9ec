# Rev 0.2.0
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional, Sequence, Tuple

from PySide6.QtCore import QObject, Signal

from trackboard.models.drag import DragPayload, DropTarget
from trackboard.services.drag_session import DragSession
from trackboard.viewmodels.optimistic_state import OptimisticViewState


@dataclass(frozen=True)
class Bucket:
    """A group of cards that is also a drop zone."""
    target: DropTarget
    items: Tuple[Any, ...] = ()
    meta: Any = None

    @property
    def key(self) -> Any:
        return self.target.value

    @property
    def label(self) -> str:
        return self.target.label or str(self.target.value)

    @property
    def count(self) -> int:
        return len(self.items)


class BoardViewModel(QObject):
    """
    Base for views that group one collection into drop-zone buckets.
    Emits:
      - bucketsChanged(buckets: list[Bucket])
      - dragSourcesEnabled(enabled: bool)
    """

    bucketsChanged = Signal(list)
    dragSourcesEnabled = Signal(bool)

    # kind of target each card exposes for person chips ("project"/"task"), if any
    card_target_kind: Optional[str] = None

    def __init__(self, state: OptimisticViewState, session: DragSession, *, today: Optional[date] = None):
        super().__init__()
        self._state = state
        self._session = session
        self._today = today
        self._buckets: List[Bucket] = []
        self._state.changed.connect(self._on_state_changed)
        self._session.stateChanged.connect(self._on_session_state)
        self.regroup()

    # ---- grouping
    def group(self, items: Sequence[Any]) -> List[Bucket]:
        raise NotImplementedError

    def regroup(self) -> None:
        self._buckets = self.group(self._state.items)
        self.bucketsChanged.emit(list(self._buckets))

    def buckets(self) -> List[Bucket]:
        return list(self._buckets)

    def bucket(self, key: Any) -> Optional[Bucket]:
        for b in self._buckets:
            if b.key == key:
                return b
        return None

    # ---- drop-zone contract
    def card_targets(self) -> List[DropTarget]:
        if self.card_target_kind is None:
            return []
        label_attr = "name" if self.card_target_kind == "project" else "title"
        return [DropTarget(self.card_target_kind, e.id, getattr(e, label_attr, None)) for e in self._state.items]

    def drop_zones(self) -> List[DropTarget]:
        return [b.target for b in self._buckets] + self.card_targets()

    def zone(self, zone_id: str) -> Optional[DropTarget]:
        for target in self.drop_zones():
            if target.zone_id == zone_id:
                return target
        return None

    # ---- drag sources
    @property
    def drag_enabled(self) -> bool:
        return self._session.sources_enabled

    def press(self, entity: Any, x: float, y: float) -> bool:
        return self._session.pointer_down(DragPayload.of(entity), x, y)

    # ---- slots
    def _on_state_changed(self, _items: list) -> None:
        self.regroup()

    def _on_session_state(self, state: str) -> None:
        self.dragSourcesEnabled.emit(state == "idle")
