# Rev 0.2.0
from __future__ import annotations

from datetime import date
from typing import Any, List, Sequence

from PySide6.QtCore import Signal

from trackboard.services.priority_service import priority_of, priority_rank
from trackboard.viewmodels.board_base import BoardViewModel, Bucket


class ProjectListViewModel(BoardViewModel):
    """Flat list; rows only accept person chips (no bucket zones)."""

    rowsChanged = Signal(list)
    card_target_kind = "project"

    def group(self, items: Sequence[Any]) -> List[Bucket]:
        return []

    def regroup(self) -> None:
        super().regroup()
        self.rowsChanged.emit(self.rows())

    def rows(self) -> List[Any]:
        def key(p):
            return (priority_rank(priority_of(p, self._today)), p.deadline is None, p.deadline or date.max)
        return sorted(self._state.items, key=key)
