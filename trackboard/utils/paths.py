# Rev 0.2.0

"""Where trackboard keeps things (Rev 0.2.0)
- logs and settings follow XDG (state / config homes), resolved at call time
- schema migrations and the demo seed ship in ./data next to the package
- the dashboard DB defaults to ./data/trackboard.db; TRACKBOARD_DB overrides it
"""
from __future__ import annotations
import os
from pathlib import Path


APP_NAME = "trackboard"
DB_ENV = "TRACKBOARD_DB"

RUNTIME_ROOT = Path(__file__).resolve().parents[2]
PROJECT_DATA_DIR = RUNTIME_ROOT / "data"
MIGRATIONS_DIR = PROJECT_DATA_DIR / "migrations"
SEED_FILE = PROJECT_DATA_DIR / "seed.sql"


def _xdg(var: str, fallback: Path) -> Path:
    value = os.environ.get(var)
    return Path(value) if value else fallback


def db_path() -> Path:
    return Path(os.environ.get(DB_ENV) or PROJECT_DATA_DIR / f"{APP_NAME}.db")


def logs_dir() -> Path:
    return _xdg("XDG_STATE_HOME", Path.home() / ".local" / "state") / APP_NAME / "logs"


def config_dir() -> Path:
    path = _xdg("XDG_CONFIG_HOME", Path.home() / ".config") / APP_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path


# argparse defaults and Database() read this once at import
DB_PATH = db_path()
