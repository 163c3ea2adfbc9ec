# trackboard/utils/config.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from .paths import config_dir

log = logging.getLogger(__name__)

VIEW_MODES = ("grid", "people", "list")

_DEFAULTS: Dict[str, Any] = {
    "dashboard": {
        "view_mode": "grid",
        "include_completed": False,
    },
    "drag": {
        # pointer travel before a press becomes a drag
        "activation_distance_px": 8,
    },
    "notifications": {
        "timeout_ms": 4000,
    },
    "store": {
        "timeout_s": 15.0,
    },
}


def settings_file() -> Path:
    return config_dir() / "settings.json"


def _merged(loaded: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for section, defaults in _DEFAULTS.items():
        value = loaded.get(section)
        out[section] = {**defaults, **value} if isinstance(value, dict) else dict(defaults)
    for key, value in loaded.items():
        out.setdefault(key, value)
    if out["dashboard"]["view_mode"] not in VIEW_MODES:
        out["dashboard"]["view_mode"] = _DEFAULTS["dashboard"]["view_mode"]
    return out


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or settings_file()
    if path.exists():
        try:
            return _merged(json.loads(path.read_text()))
        except (OSError, ValueError):
            log.warning("Unreadable settings at %s; using defaults", path)
    return _merged({})


def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or settings_file()
    path.write_text(json.dumps(data, indent=2))
