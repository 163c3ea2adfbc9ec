# Rev 0.2.0
from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Signal

log = logging.getLogger(__name__)

_LOG_LEVELS = {"info": logging.INFO, "success": logging.INFO, "error": logging.WARNING}


class Notifier(QObject):
    """Transient user-facing messages (toasts). Views decide how to show them."""

    notified = Signal(str, str, int)  # message, level, timeout_ms

    def __init__(self, timeout_ms: int = 4000):
        super().__init__()
        self._timeout_ms = timeout_ms

    def notify(self, message: str, level: str = "info") -> None:
        log.log(_LOG_LEVELS.get(level, logging.INFO), "[toast:%s] %s", level, message)
        self.notified.emit(message, level, self._timeout_ms)

    def success(self, message: str) -> None:
        self.notify(message, "success")

    def error(self, message: str) -> None:
        self.notify(message, "error")
