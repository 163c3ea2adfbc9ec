# Rev 0.2.0

"""Effective priority rules (Rev 0.2.0)
Derive the priority used for grouping, sorting and badges from a manual
setting and deadline proximity. Nothing here is persisted.
"""
from __future__ import annotations
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, TypeVar, Union

from trackboard.models.types import EFFECTIVE_PRIORITIES

DateLike = Union[date, datetime, str, None]
T = TypeVar("T")

ESCALATION_DAYS = 3     # imminent or overdue work is always high
HIGH_WITHIN_DAYS = 7
MEDIUM_WITHIN_DAYS = 30

PRIORITY_ORDER: Dict[str, int] = {p: i for i, p in enumerate(EFFECTIVE_PRIORITIES)}

_PRIORITY_INFO = {
    "high": {"label": "Urgent", "color": "red"},
    "medium": {"label": "In progress", "color": "orange"},
    "low": {"label": "Normal", "color": "green"},
}


def to_date(value: DateLike) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _local(value).date()
    if isinstance(value, date):
        return value
    text = str(value)
    if len(text) == 10:
        return date.fromisoformat(text)
    return _local(datetime.fromisoformat(text.replace("Z", "+00:00"))).date()


def _local(value: datetime) -> datetime:
    # aware timestamps are read on the local calendar; naive ones already are
    return value.astimezone() if value.tzinfo is not None else value


def days_until(deadline: DateLike, today: Optional[date] = None) -> Optional[int]:
    """Whole days from today to the deadline; negative when overdue."""
    d = to_date(deadline)
    if d is None:
        return None
    return (d - (today or date.today())).days


def effective_priority(deadline: DateLike, manual_priority: Optional[str] = None,
                       today: Optional[date] = None) -> str:
    days = days_until(deadline, today)

    if days is not None and days <= ESCALATION_DAYS:
        return "high"

    if manual_priority and manual_priority != "auto":
        # tasks carry "critical"; it sorts and groups with high
        return "high" if manual_priority == "critical" else manual_priority

    if days is None:
        return "low"
    if days <= HIGH_WITHIN_DAYS:
        return "high"
    if days <= MEDIUM_WITHIN_DAYS:
        return "medium"
    return "low"


def priority_of(entity, today: Optional[date] = None) -> str:
    return effective_priority(getattr(entity, "deadline", None), getattr(entity, "priority", None), today)


def priority_rank(priority: str) -> int:
    return PRIORITY_ORDER.get(priority, len(PRIORITY_ORDER))


def sort_by_priority(items: Iterable[T], today: Optional[date] = None) -> List[T]:
    return sorted(items, key=lambda e: priority_rank(priority_of(e, today)))


def group_by_priority(items: Iterable[T], today: Optional[date] = None) -> Dict[str, List[T]]:
    groups: Dict[str, List[T]] = {p: [] for p in EFFECTIVE_PRIORITIES}
    for item in items:
        groups[priority_of(item, today)].append(item)
    return groups


def priority_info(priority: str) -> Dict[str, str]:
    return dict(_PRIORITY_INFO.get(priority, _PRIORITY_INFO["low"]))


def format_deadline(deadline: DateLike, today: Optional[date] = None) -> Optional[str]:
    days = days_until(deadline, today)
    if days is None:
        return None
    if days < 0:
        n = abs(days)
        return f"Overdue by {n} day{'s' if n != 1 else ''}"
    if days == 0:
        return "Due today"
    if days == 1:
        return "Due tomorrow"
    if days <= HIGH_WITHIN_DAYS:
        return f"Due in {days} days"
    return to_date(deadline).strftime("%d %b %Y")
