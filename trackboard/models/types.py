# trackboard type definitions
# Rev 0.2.0

from __future__ import annotations
from typing import Literal, Tuple

EffectivePriority = Literal["low", "medium", "high"]
ProjectPriority = Literal["low", "medium", "high", "auto"]
TaskPriority = Literal["low", "medium", "high", "critical"]
ProjectStatus = Literal["pending", "active", "completed", "on_hold", "archived"]
TaskStatus = Literal["pending", "in_progress", "review", "approved", "delivered"]

# Drag payloads: what is being carried
PayloadKind = Literal["project", "task", "person"]
# Drop zones: what a region does with a payload
TargetKind = Literal["priority", "status", "person", "project", "task"]

EFFECTIVE_PRIORITIES: Tuple[str, ...] = ("high", "medium", "low")  # display order
PROJECT_PRIORITIES: Tuple[str, ...] = ("low", "medium", "high", "auto")
TASK_PRIORITIES: Tuple[str, ...] = ("low", "medium", "high", "critical")
PROJECT_STATUSES: Tuple[str, ...] = ("pending", "active", "completed", "on_hold", "archived")
TASK_STATUSES: Tuple[str, ...] = ("pending", "in_progress", "review", "approved", "delivered")
DONE_TASK_STATUSES: Tuple[str, ...] = ("approved", "delivered")

PAYLOAD_KINDS: Tuple[str, ...] = ("project", "task", "person")
TARGET_KINDS: Tuple[str, ...] = ("priority", "status", "person", "project", "task")
