# tests/test_view_adapters.py
from __future__ import annotations

from dataclasses import replace

import pytest

from trackboard.models.drag import DropTarget, parse_zone_id
from trackboard.repositories.assignment_store import StoreError
from trackboard.services.drag_session import DragSession, DragState
from trackboard.viewmodels.people_viewmodel import PeopleViewModel
from trackboard.viewmodels.priority_grid_viewmodel import PriorityGridViewModel
from trackboard.viewmodels.project_list_viewmodel import ProjectListViewModel
from trackboard.viewmodels.task_board_viewmodel import TaskBoardViewModel
from trackboard.viewmodels.team_panel_viewmodel import TeamPanelViewModel, role_label


@pytest.fixture()
def drag() -> DragSession:
    return DragSession()


def _ids(bucket):
    return [e.id for e in bucket.items]


# ---- priority grid

def test_grid_groups_by_effective_priority(projects_state, drag, today):
    vm = PriorityGridViewModel(projects_state, drag, today=today)
    assert [b.key for b in vm.buckets()] == ["high", "medium", "low"]
    assert _ids(vm.bucket("high")) == [10]    # manual low, due in 2 days
    assert _ids(vm.bucket("medium")) == [11]
    assert _ids(vm.bucket("low")) == [12]
    assert vm.stats() == {"high": 1, "medium": 1, "low": 1}
    assert vm.bucket("high").label == "Urgent"


def test_grid_zone_ids(projects_state, drag, today):
    vm = PriorityGridViewModel(projects_state, drag, today=today)
    zones = {z.zone_id for z in vm.drop_zones()}
    assert {"priority-high", "priority-medium", "priority-low"} <= zones
    assert {"project-10", "project-11", "project-12"} <= zones
    assert vm.zone("priority-low") == DropTarget("priority", "low", "Normal")
    assert vm.zone("priority-auto") is None


def test_grid_regroups_on_state_change(projects_state, drag, today):
    vm = PriorityGridViewModel(projects_state, drag, today=today)
    emitted = []
    vm.bucketsChanged.connect(emitted.append)
    token = projects_state.apply(lambda items: tuple(
        replace(p, priority="high") if p.id == 12 else p for p in items
    ))
    assert _ids(vm.bucket("high")) == [10, 12]
    assert len(emitted) == 1
    projects_state.rollback(token)
    assert _ids(vm.bucket("low")) == [12]
    assert len(emitted) == 2


# ---- people

def test_people_buckets(projects_state, drag, stub_store, people, today):
    vm = PeopleViewModel(projects_state, drag, stub_store, today=today)
    assert [b.target.zone_id for b in vm.buckets()] == ["unassigned"]
    vm.set_people(people)
    keys = [b.target.zone_id for b in vm.buckets()]
    assert keys == ["unassigned", "person-1", "person-2", "person-3", "person-4", "person-5"]
    assert _ids(vm.bucket(None)) == [12]
    assert _ids(vm.bucket(1)) == [10]
    assert _ids(vm.bucket(2)) == [10]    # shared projects appear under every member
    assert _ids(vm.bucket(3)) == [11]
    assert vm.bucket(4).count == 0
    assert vm.bucket(1).meta.level == "normal"


def test_people_with_unknown_members_fall_back_to_unassigned(projects_state, drag, stub_store, people, today):
    vm = PeopleViewModel(projects_state, drag, stub_store, today=today)
    # roster not loaded yet: every project is still reachable
    assert sorted(_ids(vm.bucket(None))) == [10, 11, 12]

    vm.set_people([p for p in people if p.id != 3])
    assert sorted(_ids(vm.bucket(None))) == [11, 12]
    assert _ids(vm.bucket(1)) == [10]
    assert vm.bucket(3) is None


@pytest.mark.asyncio
async def test_people_load_from_store(projects_state, drag, stub_store, today):
    vm = PeopleViewModel(projects_state, drag, stub_store, today=today)
    assert await vm.load_people() is True
    assert len(vm.workloads()) == 5


@pytest.mark.asyncio
async def test_people_load_failure_keeps_roster(projects_state, drag, stub_store, monkeypatch):
    async def boom():
        raise StoreError("offline")

    monkeypatch.setattr(stub_store, "list_people", boom)
    vm = PeopleViewModel(projects_state, drag, stub_store)
    assert await vm.load_people() is False
    assert [b.target.zone_id for b in vm.buckets()] == ["unassigned"]


def test_people_search(projects_state, drag, stub_store, people, today):
    vm = PeopleViewModel(projects_state, drag, stub_store, today=today)
    vm.set_people(people)

    vm.set_search("carla")
    assert [b.key for b in vm.buckets()] == [None, 3]

    vm.set_search("  SPRING ")
    assert [b.key for b in vm.buckets()] == [None, 1, 2]

    vm.set_search(None)
    assert len(vm.buckets()) == 6


def test_workload_levels(projects_state, drag, stub_store, people, today):
    many = [replace(stub_store.projects[12], id=100 + i, members=(4,)) for i in range(6)]
    projects_state.reset(list(projects_state.items) + many[:3])
    vm = PeopleViewModel(projects_state, drag, stub_store, today=today)
    vm.set_people(people)
    assert vm.bucket(4).meta.level == "busy"
    projects_state.reset(list(projects_state.items) + many[3:])
    assert vm.bucket(4).meta.level == "overloaded"


# ---- task board

def test_task_board_columns(tasks_state, drag):
    vm = TaskBoardViewModel(tasks_state, drag)
    assert [b.target.zone_id for b in vm.buckets()] == [
        "status-pending", "status-in_progress", "status-review", "status-approved", "status-delivered",
    ]
    assert _ids(vm.bucket("review")) == [20]
    assert _ids(vm.bucket("in_progress")) == [21]
    assert vm.bucket("in_progress").label == "In progress"
    assert vm.zone("task-21") == DropTarget("task", 21, "Shoot day")


# ---- flat list

def test_list_rows_sorted_by_priority_then_deadline(projects_state, drag, today):
    vm = ProjectListViewModel(projects_state, drag, today=today)
    rows = []
    vm.rowsChanged.connect(rows.append)
    assert [p.id for p in vm.rows()] == [10, 11, 12]
    assert vm.buckets() == []
    assert {z.zone_id for z in vm.drop_zones()} == {"project-10", "project-11", "project-12"}
    projects_state.reset([replace(p, deadline=None) for p in projects_state.items])
    assert [p.id for p in rows[-1]] == [10, 11, 12]


# ---- drag sources follow the session

def test_drag_sources_disabled_while_session_active(projects_state, drag, today):
    vm = PriorityGridViewModel(projects_state, drag, today=today)
    flags = []
    vm.dragSourcesEnabled.connect(flags.append)
    assert vm.press(projects_state.find(10), 0, 0)
    drag.pointer_move(0, 20)
    assert drag.state is DragState.ACTIVE
    assert vm.drag_enabled is False
    assert vm.press(projects_state.find(11), 5, 5) is False
    drag.cancel()
    assert flags == [False, True]
    assert vm.drag_enabled is True


# ---- team panel

@pytest.mark.asyncio
async def test_team_panel_chips(stub_store, drag, people):
    panel = TeamPanelViewModel(stub_store, drag)
    loaded = []
    panel.peopleLoaded.connect(loaded.append)
    assert await panel.reload() is True
    assert len(loaded[0]) == 5
    chip = panel.chip(panel.people[2])
    assert chip == {"id": 3, "name": "Carla Ruiz", "role": "Producer", "initial": "C", "avatar_url": None}
    assert panel.chip(people[3])["role"] == "Member"
    assert panel.press(people[0], 0, 0) is True
    drag.pointer_move(10, 0)
    assert drag.payload.kind == "person"


def test_role_label_fallback():
    assert role_label("editor") == "Editor"
    assert role_label(None) == "Member"
    assert role_label("unknown") == "Member"


# ---- zone ids

@pytest.mark.parametrize(
    "zone_id,kind,value",
    [
        ("priority-high", "priority", "high"),
        ("status-in_progress", "status", "in_progress"),
        ("person-4", "person", 4),
        ("unassigned", "person", None),
        ("project-3", "project", 3),
        ("task-7", "task", 7),
    ],
)
def test_parse_zone_id(zone_id, kind, value):
    target = parse_zone_id(zone_id)
    assert (target.kind, target.value) == (kind, value)
    assert target.zone_id == zone_id


@pytest.mark.parametrize("bad", ["", "priority", "person-", "bucket-1", "person-x"])
def test_parse_zone_id_rejects_garbage(bad):
    with pytest.raises(ValueError):
        parse_zone_id(bad)
