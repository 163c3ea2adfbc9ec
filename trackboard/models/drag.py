# Rev 0.2.0
"""Drag payloads and drop targets exchanged between views, session and resolver."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional, Union

from .entities import Person, Project, Task
from .types import PAYLOAD_KINDS, TARGET_KINDS

Entity = Union[Project, Task, Person]

_KIND_BY_TYPE = {Project: "project", Task: "task", Person: "person"}


@dataclass(frozen=True)
class DragPayload:
    kind: str
    entity: Entity

    def __post_init__(self) -> None:
        if self.kind not in PAYLOAD_KINDS:
            raise ValueError(f"unknown payload kind {self.kind!r}")
        if _KIND_BY_TYPE.get(type(self.entity)) != self.kind:
            raise ValueError(f"payload kind {self.kind!r} does not match {type(self.entity).__name__}")

    @classmethod
    def of(cls, entity: Entity) -> "DragPayload":
        try:
            return cls(_KIND_BY_TYPE[type(entity)], entity)
        except KeyError:
            raise ValueError(f"{type(entity).__name__} is not draggable") from None


@dataclass(frozen=True)
class DropTarget:
    """A registered region; `value` is the bucket key or the target entity id.

    The roster's "unassigned" bucket is a person target whose value is None.
    """
    kind: str
    value: Any
    label: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind not in TARGET_KINDS:
            raise ValueError(f"unknown target kind {self.kind!r}")

    @property
    def zone_id(self) -> str:
        if self.kind == "person" and self.value is None:
            return "unassigned"
        return f"{self.kind}-{self.value}"


def unassigned_target() -> DropTarget:
    return DropTarget("person", None, "Unassigned")


def parse_zone_id(zone_id: str) -> DropTarget:
    """Inverse of DropTarget.zone_id: 'unassigned', 'priority-high', 'person-4', ..."""
    if zone_id == "unassigned":
        return unassigned_target()
    kind, sep, value = zone_id.partition("-")
    if not sep or not value:
        raise ValueError(f"malformed drop zone id {zone_id!r}")
    if kind in ("person", "project", "task"):
        return DropTarget(kind, int(value))
    return DropTarget(kind, value)
