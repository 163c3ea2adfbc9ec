# trackboard application context
# Rev 0.2.0

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .utils.config import load_settings
from .utils.logging_setup import get_logger
from .utils.paths import DB_PATH
from .repositories.db import Database
from .repositories.sqlite_assignment_store import SQLiteAssignmentStore
from .services.drag_session import DragSession
from .services.notifier import Notifier
from .services.reassignment_resolver import ReassignmentResolver
from .viewmodels.optimistic_state import OptimisticViewState


@dataclass
class AppContext:
    """Central container for shared app resources. Owns the one drag session."""
    db: Database
    store: SQLiteAssignmentStore
    notifier: Notifier
    session: DragSession
    resolver: ReassignmentResolver
    projects: OptimisticViewState
    settings: Dict[str, Any] = field(default_factory=dict)
    tasks: Optional[OptimisticViewState] = None

    @classmethod
    def create(cls, db_path: Path | str = DB_PATH, settings: Optional[Dict[str, Any]] = None) -> "AppContext":
        """Initialize DB, store, session and resolver."""
        log = get_logger("AppContext")
        settings = settings or load_settings()
        db = Database(db_path)
        db.run_migrations()
        store = SQLiteAssignmentStore(db)
        include_completed = bool(settings["dashboard"]["include_completed"])
        projects = OptimisticViewState(
            loader=lambda: store.list_projects(include_completed=include_completed),
            name="projects",
        )
        notifier = Notifier(timeout_ms=int(settings["notifications"]["timeout_ms"]))
        resolver = ReassignmentResolver(
            store, notifier, projects=projects, timeout_s=float(settings["store"]["timeout_s"])
        )
        session = DragSession(
            resolver.resolve, activation_distance=float(settings["drag"]["activation_distance_px"])
        )
        log.info("AppContext initialized with DB=%s", db.path)
        return cls(db=db, store=store, notifier=notifier, session=session, resolver=resolver,
                   projects=projects, settings=settings)

    def open_project(self, project_id: int) -> OptimisticViewState:
        """Tasks view state for a project's board; replaces any previous one."""
        self.tasks = OptimisticViewState(loader=lambda: self.store.list_tasks(project_id), name=f"tasks:{project_id}")
        self.resolver.bind_tasks(self.tasks)
        return self.tasks

    def close(self) -> None:
        self.session.cancel()
        self.store.close()
        self.db.close()
