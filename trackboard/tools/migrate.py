# File: trackboard/tools/migrate.py
# Usage examples:
#   python -m trackboard.tools.migrate up
#   python -m trackboard.tools.migrate status
#   python -m trackboard.tools.migrate rebuild --seed
#   python -m trackboard.tools.migrate up --db /path/to/trackboard.db
#
# Notes:
# - DB path defaults to env TRACKBOARD_DB or data/trackboard.db
# - Applies data/migrations/*.sql in lexicographic order
# - Records applied migrations (name + sha256) in schema_migrations
# - Seeds from data/seed.sql when --seed is given

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from trackboard.repositories.db import Database
from trackboard.utils.paths import DB_PATH, MIGRATIONS_DIR

REQUIRED_TABLES = ("people", "projects", "tasks", "project_members", "task_assignments", "schema_migrations")
EXPECTED_TRIGGERS = ("trg_projects_touch_updated_at", "trg_tasks_touch_updated_at")


def cmd_status(db: Path, migrations_dir: Path) -> int:
    database = Database(db)
    try:
        applied = database.applied()
        print(f"DB: {db}")
        print(f"Migrations dir: {migrations_dir}")
        print(f"Applied count: {len(applied)}")
        for name in sorted(applied):
            print(f"  ✔ {name}")
        pending = [p.name for p in sorted(migrations_dir.glob("*.sql")) if p.name not in applied]
        print(f"Pending count: {len(pending)}")
        for name in pending:
            print(f"  ⧗ {name}")
        return 0
    finally:
        database.close()


def cmd_up(db: Path, migrations_dir: Path, seed: bool) -> int:
    database = Database(db)
    try:
        done = database.run_migrations(migrations_dir)
        for name in done:
            print(f"→ Applied migration: {name}")
        print("✓ Database is up to date." if done else "✓ No changes. Database already up to date.")
        if seed and database.seed() is None:
            print("ℹ️  Seed requested but no seed.sql found.")
        return 0
    finally:
        database.close()


def cmd_rebuild(db: Path, migrations_dir: Path, seed: bool) -> int:
    if db.exists():
        print(f"⟲ Rebuilding: removing existing DB {db}")
        db.unlink()
    return cmd_up(db, migrations_dir, seed)


def cmd_verify(db: Path) -> int:
    database = Database(db)
    try:
        conn = database.conn
        names = {r[0] for r in conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%';"
        )}
        missing = [t for t in REQUIRED_TABLES if t not in names]
        if missing:
            print("❌ Missing tables:", ", ".join(missing))
            return 2

        trig = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='trigger';")}
        trig_missing = [t for t in EXPECTED_TRIGGERS if t not in trig]
        if trig_missing:
            print("❌ Missing triggers:", ", ".join(trig_missing))
            return 3

        (mode,) = conn.execute("PRAGMA journal_mode;").fetchone()
        if str(mode).lower() != "wal":
            print(f"❌ journal_mode is not WAL (got {mode})")
            return 4

        print("✓ Verification passed.")
        return 0
    finally:
        database.close()


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="trackboard-migrate", description="SQLite migration runner for trackboard")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(sp: argparse.ArgumentParser):
        sp.add_argument("--db", type=Path, default=DB_PATH, help=f"Path to SQLite DB (default: {DB_PATH})")
        sp.add_argument("--migrations-dir", type=Path, default=MIGRATIONS_DIR, help=f"Migrations directory (default: {MIGRATIONS_DIR})")

    s_up = sub.add_parser("up", help="Run pending migrations")
    add_common(s_up)
    s_up.add_argument("--seed", action="store_true", help="Seed after applying")

    s_rebuild = sub.add_parser("rebuild", help="Drop and recreate DB from migrations")
    add_common(s_rebuild)
    s_rebuild.add_argument("--seed", action="store_true", help="Seed after rebuild")

    s_status = sub.add_parser("status", help="Show applied and pending migrations")
    add_common(s_status)

    s_verify = sub.add_parser("verify", help="Lightweight structural verification")
    s_verify.add_argument("--db", type=Path, default=DB_PATH, help=f"Path to SQLite DB (default: {DB_PATH})")

    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    if ns.cmd == "status":
        return cmd_status(ns.db, ns.migrations_dir)
    if ns.cmd == "up":
        return cmd_up(ns.db, ns.migrations_dir, ns.seed)
    if ns.cmd == "rebuild":
        return cmd_rebuild(ns.db, ns.migrations_dir, ns.seed)
    if ns.cmd == "verify":
        return cmd_verify(ns.db)
    raise SystemExit(1)


if __name__ == "__main__":
    raise SystemExit(main())
