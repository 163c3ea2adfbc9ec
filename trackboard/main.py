# Rev 0.2.0

# trackboard/main.py  (Rev 0.2.0)
# Headless dashboard: print the views and perform drags through the engine.
#   python -m trackboard.main board
#   python -m trackboard.main view people
#   python -m trackboard.main tasks --project 1
#   python -m trackboard.main drag project 3 --to person-2
#   python -m trackboard.main drag person 2 --to task-5 --project 1
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from trackboard.app_context import AppContext
from trackboard.models.drag import DragPayload, parse_zone_id
from trackboard.services.priority_service import format_deadline, priority_of
from trackboard.utils.config import VIEW_MODES, save_settings
from trackboard.utils.logging_setup import log_loop_errors, setup_logging
from trackboard.utils.paths import DB_PATH
from trackboard.viewmodels.board_base import BoardViewModel
from trackboard.viewmodels.people_viewmodel import PeopleViewModel
from trackboard.viewmodels.priority_grid_viewmodel import PriorityGridViewModel
from trackboard.viewmodels.project_list_viewmodel import ProjectListViewModel
from trackboard.viewmodels.task_board_viewmodel import TaskBoardViewModel


def _project_line(p, people_by_id) -> str:
    who = ", ".join(people_by_id.get(pid, f"#{pid}") for pid in p.members) or "unassigned"
    due = format_deadline(p.deadline) or "no deadline"
    return f"  [{p.id}] {p.name} · {priority_of(p)} · {due} · {p.progress}% · {who}"


def _print_buckets(vm: BoardViewModel, line) -> None:
    for b in vm.buckets():
        print(f"== {b.label} ({b.count})  <{b.target.zone_id}>")
        for item in b.items:
            print(line(item))


async def _people_by_id(ctx: AppContext):
    return {p.id: p.full_name for p in await ctx.store.list_people()}


async def _show_view(ctx: AppContext, mode: str) -> None:
    names = await _people_by_id(ctx)
    line = lambda p: _project_line(p, names)  # noqa: E731
    if mode == "grid":
        _print_buckets(PriorityGridViewModel(ctx.projects, ctx.session), line)
    elif mode == "people":
        vm = PeopleViewModel(ctx.projects, ctx.session, ctx.store)
        await vm.load_people()
        _print_buckets(vm, line)
    else:
        for p in ProjectListViewModel(ctx.projects, ctx.session).rows():
            print(line(p))


async def _show_tasks(ctx: AppContext, project_id: int) -> None:
    names = await _people_by_id(ctx)
    tasks = ctx.open_project(project_id)
    await tasks.refresh()
    _print_buckets(
        TaskBoardViewModel(tasks, ctx.session),
        lambda t: f"  [{t.id}] {t.title} · {t.priority} · "
                  f"{', '.join(names.get(i, f'#{i}') for i in t.assignees) or 'unassigned'}",
    )


async def _drag(ctx: AppContext, kind: str, entity_id: int, zone_id: str, project_id: Optional[int]) -> int:
    if project_id is not None:
        await ctx.open_project(project_id).refresh()

    if kind == "project":
        entity = ctx.projects.find(entity_id)
    elif kind == "task":
        entity = ctx.tasks.find(entity_id) if ctx.tasks is not None else None
    else:
        entity = next((p for p in await ctx.store.list_people() if p.id == entity_id), None)
    if entity is None:
        print(f"error: no {kind} with id {entity_id}", file=sys.stderr)
        return 2

    target = parse_zone_id(zone_id)
    if target.kind in ("status", "task"):
        if ctx.tasks is None:
            print("error: --project is required for task boards", file=sys.stderr)
            return 2
        vm: BoardViewModel = TaskBoardViewModel(ctx.tasks, ctx.session)
    elif target.kind == "person":
        vm = PeopleViewModel(ctx.projects, ctx.session, ctx.store)
        await vm.load_people()
    else:
        vm = PriorityGridViewModel(ctx.projects, ctx.session)
    if vm.zone(target.zone_id) is None:
        print(f"error: unknown drop zone {zone_id!r}", file=sys.stderr)
        return 2

    ctx.notifier.notified.connect(lambda msg, level, _ms: print(f"[{level}] {msg}"))
    ctx.session.start(DragPayload.of(entity))
    ctx.session.pointer_up(vm.zone(target.zone_id))
    # no-ops and unsupported pairs never schedule a commit
    if ctx.resolver.in_flight == 0:
        print("nothing to do")
    await ctx.resolver.drain()
    return 0


async def _run(ns: argparse.Namespace) -> int:
    log_loop_errors()
    ctx = AppContext.create(ns.db)
    try:
        await ctx.projects.refresh()
        if ns.cmd == "board":
            await _show_view(ctx, ctx.settings["dashboard"]["view_mode"])
        elif ns.cmd == "view":
            ctx.settings["dashboard"]["view_mode"] = ns.mode
            save_settings(ctx.settings)
            await _show_view(ctx, ns.mode)
        elif ns.cmd == "tasks":
            await _show_tasks(ctx, ns.project)
        elif ns.cmd == "drag":
            return await _drag(ctx, ns.kind, ns.id, ns.to, ns.project)
        return 0
    finally:
        ctx.close()


def parse_args(argv: List[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="trackboard", description="Project/task dashboard (headless)")
    p.add_argument("--db", type=Path, default=DB_PATH, help=f"Path to SQLite DB (default: {DB_PATH})")
    p.add_argument("-v", "--verbose", action="store_true", help="Also print log lines to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("board", help="Show the dashboard in the saved view mode")

    s_view = sub.add_parser("view", help="Switch view mode and show it")
    s_view.add_argument("mode", choices=VIEW_MODES)

    s_tasks = sub.add_parser("tasks", help="Show a project's task board")
    s_tasks.add_argument("--project", type=int, required=True)

    s_drag = sub.add_parser("drag", help="Drag a card or person chip onto a drop zone")
    s_drag.add_argument("kind", choices=("project", "task", "person"))
    s_drag.add_argument("id", type=int)
    s_drag.add_argument("--to", required=True, help="Drop zone id, e.g. priority-high, person-2, unassigned, status-review, task-5")
    s_drag.add_argument("--project", type=int, help="Project whose task board is open")

    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging(console=ns.verbose)
    return asyncio.run(_run(ns))


if __name__ == "__main__":
    sys.exit(main())
