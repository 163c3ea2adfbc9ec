# Rev 0.2.0

"""Pointer-drag session (Rev 0.2.0)
One owned session per dashboard. Gesture handling is synchronous; the drop
handler only schedules store work, so the session is Idle again as soon as
pointer_up returns.
"""
from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Callable, Optional, Tuple

from PySide6.QtCore import QObject, Signal

from trackboard.models.drag import DragPayload, DropTarget

log = logging.getLogger(__name__)

DropHandler = Callable[[DragPayload, DropTarget], object]

DEFAULT_ACTIVATION_DISTANCE = 8


class DragState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    RESOLVING = "resolving"


class DragSession(QObject):
    """
    Emits:
      - stateChanged(state: str)
      - hoverChanged(target: DropTarget | None)
      - dropped(payload: DragPayload, target: DropTarget)
      - cancelled()
    """

    stateChanged = Signal(str)
    hoverChanged = Signal(object)
    dropped = Signal(object, object)
    cancelled = Signal()

    def __init__(self, on_drop: Optional[DropHandler] = None, *,
                 activation_distance: float = DEFAULT_ACTIVATION_DISTANCE):
        super().__init__()
        self._on_drop = on_drop
        self._activation_distance = activation_distance
        self._state = DragState.IDLE
        self._payload: Optional[DragPayload] = None
        self._hover: Optional[DropTarget] = None
        self._press: Optional[Tuple[DragPayload, float, float]] = None

    # ---- observation
    @property
    def state(self) -> DragState:
        return self._state

    @property
    def payload(self) -> Optional[DragPayload]:
        return self._payload

    @property
    def hovered(self) -> Optional[DropTarget]:
        return self._hover

    @property
    def sources_enabled(self) -> bool:
        """Drag sources accept presses only while no session is in flight."""
        return self._state is DragState.IDLE

    # ---- gestures
    def pointer_down(self, payload: DragPayload, x: float, y: float) -> bool:
        if not self.sources_enabled:
            log.warning("pointer_down on %s ignored: session is %s", payload.kind, self._state.value)
            return False
        self._press = (payload, x, y)
        return True

    def pointer_move(self, x: float, y: float, over: Optional[DropTarget] = None) -> None:
        if self._state is DragState.IDLE and self._press is not None:
            payload, x0, y0 = self._press
            if math.hypot(x - x0, y - y0) < self._activation_distance:
                return
            self._press = None
            self.start(payload)
        if self._state is DragState.ACTIVE:
            self.hover(over)

    def start(self, payload: DragPayload) -> bool:
        if self._state is not DragState.IDLE:
            log.warning("Drag of %s rejected: another drag is %s", payload.kind, self._state.value)
            return False
        self._press = None
        self._payload = payload
        self._hover = None
        self._set_state(DragState.ACTIVE)
        log.debug("Drag started: %s %s", payload.kind, getattr(payload.entity, "id", None))
        return True

    def hover(self, target: Optional[DropTarget]) -> None:
        if self._state is not DragState.ACTIVE or target == self._hover:
            return
        self._hover = target
        self.hoverChanged.emit(target)

    def pointer_up(self, over: Optional[DropTarget] = None) -> bool:
        """Release the pointer. Returns True when the drop was dispatched."""
        if self._state is DragState.IDLE:
            # a press that never travelled far enough is a click
            self._press = None
            return False
        if self._state is not DragState.ACTIVE:
            return False
        if over is not None:
            self.hover(over)
        target = self._hover
        if target is None:
            self.cancel()
            return False

        payload = self._payload
        self._set_state(DragState.RESOLVING)
        try:
            log.debug("Drop: %s -> %s", payload.kind, target.zone_id)
            self.dropped.emit(payload, target)
            if self._on_drop is not None:
                self._on_drop(payload, target)
        finally:
            self._clear()
        return True

    def cancel(self) -> None:
        self._press = None
        if self._state is not DragState.ACTIVE:
            return
        log.debug("Drag cancelled: %s", self._payload.kind if self._payload else None)
        self._clear()
        self.cancelled.emit()

    # ---- internals
    def _clear(self) -> None:
        self._payload = None
        self._hover = None
        self._set_state(DragState.IDLE)

    def _set_state(self, state: DragState) -> None:
        if state is self._state:
            return
        self._state = state
        self.stateChanged.emit(state.value)
