# tests/test_config.py
from __future__ import annotations

import json

from trackboard.utils.config import load_settings, save_settings


def test_missing_file_gives_defaults(tmp_path):
    s = load_settings(tmp_path / "nope.json")
    assert s["dashboard"] == {"view_mode": "grid", "include_completed": False}
    assert s["drag"]["activation_distance_px"] == 8
    assert s["store"]["timeout_s"] == 15.0


def test_partial_sections_are_merged(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"dashboard": {"view_mode": "people"}, "extra": 1}))
    s = load_settings(path)
    assert s["dashboard"] == {"view_mode": "people", "include_completed": False}
    assert s["notifications"]["timeout_ms"] == 4000
    assert s["extra"] == 1


def test_unknown_view_mode_falls_back(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"dashboard": {"view_mode": "kanban"}}))
    assert load_settings(path)["dashboard"]["view_mode"] == "grid"


def test_corrupt_file_gives_defaults(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    assert load_settings(path)["dashboard"]["view_mode"] == "grid"
    assert "Unreadable settings" in caplog.text


def test_save_then_load(tmp_path):
    path = tmp_path / "settings.json"
    s = load_settings(path)
    s["dashboard"]["view_mode"] = "list"
    save_settings(s, path)
    assert load_settings(path)["dashboard"]["view_mode"] == "list"
