# Rev 0.2.0

"""SQLite connection & migration runner (Rev 0.2.0)
- WAL mode, foreign_keys=ON
- Applies SQL files in data/migrations in lexical order
- Tracks applied files in schema_migrations(filename, sha256, applied_at_utc)
"""
from __future__ import annotations
import hashlib
import logging
import sqlite3
from pathlib import Path
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional
from contextlib import contextmanager


from trackboard.utils.paths import DB_PATH, MIGRATIONS_DIR, SEED_FILE

log = logging.getLogger(__name__)


class Database:
    def __init__(self, path: Path | str = DB_PATH) -> None:
        self.path = Path(path)
        if str(self.path) != ":memory:":
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.path), isolation_level=None, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL;")
        self.conn.execute("PRAGMA foreign_keys=ON;")
        self.conn.execute("PRAGMA busy_timeout=5000;")
        self.conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_migrations ("
            " filename TEXT PRIMARY KEY, sha256 TEXT NOT NULL, applied_at_utc TEXT NOT NULL)"
        )


    def close(self) -> None:
        self.conn.close()


    def applied(self) -> Dict[str, str]:
        rows = self.conn.execute("SELECT filename, sha256 FROM schema_migrations").fetchall()
        return {r[0]: r[1] for r in rows}


    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        self.conn.execute("BEGIN;")
        try:
            yield self.conn
        except BaseException:
            self.conn.execute("ROLLBACK;")
            raise
        else:
            self.conn.execute("COMMIT;")


    def apply_sql(self, sql: str) -> None:
        # executescript commits on its own; keep it out of transaction()
        self.conn.executescript(f"BEGIN;\n{sql}\nCOMMIT;")


    def run_migrations(self, migrations_dir: Path = MIGRATIONS_DIR) -> List[str]:
        applied = self.applied()
        done: List[str] = []
        for p in sorted(migrations_dir.glob("*.sql")):
            sql = p.read_text(encoding="utf-8")
            digest = hashlib.sha256(sql.encode("utf-8")).hexdigest()
            if p.name in applied:
                if applied[p.name] != digest:
                    log.warning("Migration %s changed after it was applied", p.name)
                continue
            log.info("Applying migration %s", p.name)
            self.apply_sql(sql)
            self.conn.execute(
                "INSERT INTO schema_migrations(filename, sha256, applied_at_utc) VALUES(?, ?, ?)",
                (p.name, digest, datetime.now(timezone.utc).isoformat(timespec="seconds")),
            )
            done.append(p.name)
        return done


    def seed(self, seed_file: Path = SEED_FILE) -> Optional[Path]:
        if not seed_file.exists():
            return None
        log.info("Seeding from %s", seed_file)
        self.apply_sql(seed_file.read_text(encoding="utf-8"))
        return seed_file
