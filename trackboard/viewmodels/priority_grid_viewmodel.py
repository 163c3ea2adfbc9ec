# Rev 0.2.0
# Projects grouped by effective priority; dropping a card on a section sets its manual priority.
from __future__ import annotations

from typing import Any, Dict, List, Sequence

from trackboard.models.drag import DropTarget
from trackboard.models.types import EFFECTIVE_PRIORITIES
from trackboard.services.priority_service import group_by_priority, priority_info, sort_by_priority
from trackboard.viewmodels.board_base import BoardViewModel, Bucket


class PriorityGridViewModel(BoardViewModel):
    card_target_kind = "project"

    def group(self, items: Sequence[Any]) -> List[Bucket]:
        groups = group_by_priority(sort_by_priority(items, self._today), self._today)
        return [
            Bucket(DropTarget("priority", p, priority_info(p)["label"]), tuple(groups[p]))
            for p in EFFECTIVE_PRIORITIES
        ]

    def stats(self) -> Dict[str, int]:
        return {b.key: b.count for b in self._buckets}
