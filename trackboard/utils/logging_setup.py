# Rev 0.2.0

# trackboard – logging setup (Rev 0.2.0)
# Rotating file under the XDG state dir plus stderr (stdout belongs to the CLI output).
from __future__ import annotations
import asyncio
import logging, os, sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

from .paths import APP_NAME, logs_dir

FMT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"
LEVEL_ENV = "TRACKBOARD_LOG_LEVEL"

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}

# handlers added by setup_logging(), so a second call replaces instead of stacking
_installed: list[logging.Handler] = []


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _qt_handler(msg_type, context, message):
    logging.getLogger("qt").log(_QT_LEVELS.get(msg_type, logging.INFO), message)


def _asyncio_handler(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
    exc = context.get("exception")
    logging.getLogger("asyncio.unhandled").error(
        context.get("message", "Unhandled error in event loop"),
        exc_info=(type(exc), exc, exc.__traceback__) if exc is not None else None,
    )


def log_loop_errors(loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
    """Send exceptions nobody awaited (e.g. a dropped commit task) to the log."""
    (loop or asyncio.get_running_loop()).set_exception_handler(_asyncio_handler)


def setup_logging(app_name: str = APP_NAME, log_dir: Path | None = None, *, console: bool = True) -> Path:
    level_name = os.environ.get(LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    log_dir = log_dir or logs_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / f"{app_name}.log"

    root = logging.getLogger()
    root.setLevel(level)
    for h in _installed:
        root.removeHandler(h)
        h.close()
    _installed.clear()

    # File: rotate at 5MB, keep 7 backups
    fh = RotatingFileHandler(logfile, maxBytes=5_000_000, backupCount=7, encoding="utf-8")
    _installed.append(fh)
    if console:
        _installed.append(logging.StreamHandler(sys.stderr))
    for h in _installed:
        h.setFormatter(logging.Formatter(FMT, DATEFMT))
        h.setLevel(level)
        root.addHandler(h)
    logging.captureWarnings(True)

    def _excepthook(exctype, value, tb):
        logging.getLogger("unhandled").error("Uncaught exception", exc_info=(exctype, value, tb))
        sys.__excepthook__(exctype, value, tb)
    sys.excepthook = _excepthook

    qInstallMessageHandler(_qt_handler)

    logging.getLogger(__name__).info("Logging initialized at %s; file: %s", level_name, logfile)
    return logfile
