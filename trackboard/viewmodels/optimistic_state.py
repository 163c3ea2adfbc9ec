# Rev 0.2.0
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from PySide6.QtCore import QObject, Signal

log = logging.getLogger(__name__)

Patch = Callable[[Tuple[Any, ...]], Sequence[Any]]
Loader = Callable[[], Awaitable[Sequence[Any]]]

_tokens = itertools.count(1)


@dataclass(frozen=True)
class Snapshot:
    """Rollback token: the collection as it was before one patch."""
    token_id: int
    items: Tuple[Any, ...] = field(repr=False)


class OptimisticViewState(QObject):
    """
    In-memory mirror of the collection a view renders (projects or tasks).

    Patches are applied immediately. Each one stays pending until it is
    confirmed or rolled back; rolling back replays the other pending patches
    on the pre-patch base so an unrelated in-flight change survives.

    Emits:
      - changed(items: list)
    """

    changed = Signal(list)

    def __init__(self, items: Sequence[Any] = (), *, loader: Optional[Loader] = None, name: str = "view"):
        super().__init__()
        self._name = name
        self._loader = loader
        self._base: Tuple[Any, ...] = tuple(items)
        self._items: Tuple[Any, ...] = self._base
        # token_id -> [patch, confirmed]
        self._pending: Dict[int, List[Any]] = {}

    # ---- queries
    @property
    def items(self) -> List[Any]:
        return list(self._items)

    @property
    def pending_count(self) -> int:
        return sum(1 for _, confirmed in self._pending.values() if not confirmed)

    def find(self, entity_id: int) -> Optional[Any]:
        for item in self._items:
            if getattr(item, "id", None) == entity_id:
                return item
        return None

    def __len__(self) -> int:
        return len(self._items)

    # ---- mutation
    def apply(self, patch: Patch) -> Snapshot:
        before = self._items
        if not self._pending:
            self._base = before
        snap = Snapshot(next(_tokens), before)
        self._pending[snap.token_id] = [patch, False]
        self._set(tuple(patch(before)))
        log.debug("%s: applied patch %s (%d pending)", self._name, snap.token_id, self.pending_count)
        return snap

    def rollback(self, token: Snapshot) -> None:
        if self._pending.pop(token.token_id, None) is None:
            log.warning("%s: rollback of unknown token %s ignored", self._name, token.token_id)
            return
        # token.items may still hold an earlier patch that was rolled back already
        self._set(self._replay(self._base))
        if all(confirmed for _, confirmed in self._pending.values()):
            self._base = self._items
            self._pending.clear()
        log.info("%s: rolled back patch %s", self._name, token.token_id)

    def confirm(self, token: Snapshot) -> None:
        entry = self._pending.get(token.token_id)
        if entry is None:
            return
        entry[1] = True
        if all(confirmed for _, confirmed in self._pending.values()):
            self._base = self._items
            self._pending.clear()

    def reset(self, items: Sequence[Any]) -> None:
        """Install a freshly fetched collection; still-pending patches are replayed on it."""
        self._pending = {k: v for k, v in self._pending.items() if not v[1]}
        self._base = tuple(items)
        self._set(self._replay(self._base))

    async def refresh(self) -> bool:
        if self._loader is None:
            return False
        self.reset(await self._loader())
        return True

    # ---- internals
    def _replay(self, base: Tuple[Any, ...]) -> Tuple[Any, ...]:
        items = base
        for patch, _ in self._pending.values():
            items = tuple(patch(items))
        return items

    def _set(self, items: Tuple[Any, ...]) -> None:
        if items == self._items:
            self._items = items
            return
        self._items = items
        self.changed.emit(list(items))
