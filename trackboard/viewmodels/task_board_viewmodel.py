# Rev 0.2.0
# Kanban board for one project's tasks: a column per status.
from __future__ import annotations

from typing import Any, Dict, List, Sequence

from trackboard.models.drag import DropTarget
from trackboard.models.types import TASK_STATUSES
from trackboard.viewmodels.board_base import BoardViewModel, Bucket

COLUMN_LABELS: Dict[str, str] = {
    "pending": "Pending",
    "in_progress": "In progress",
    "review": "Review",
    "approved": "Approved",
    "delivered": "Delivered",
}


class TaskBoardViewModel(BoardViewModel):
    card_target_kind = "task"

    def group(self, items: Sequence[Any]) -> List[Bucket]:
        return [
            Bucket(
                DropTarget("status", status, COLUMN_LABELS[status]),
                tuple(t for t in items if t.status == status),
            )
            for status in TASK_STATUSES
        ]
