from __future__ import annotations

import json
from pathlib import Path

from orbitfx.config import (
    DEFAULTS,
    load_settings,
    sanitize_settings,
    save_settings,
    settings_path,
    toggle_theme,
)


def test_sanitize_settings_defaults() -> None:
    assert sanitize_settings(None) == DEFAULTS
    assert sanitize_settings({"unknown": 1}) == DEFAULTS
    assert DEFAULTS["theme"] == "dark"


def test_sanitize_settings_rejects_bad_values() -> None:
    clean = sanitize_settings(
        {
            "theme": "purple",
            "backend": "vulkan",
            "frameIntervalMs": 0,
            "pauseWhenHidden": "no",
            "transparent": 1,
            "seed": True,
        }
    )

    assert clean["theme"] == "dark"
    assert clean["backend"] == "auto"
    assert clean["frameIntervalMs"] == 1
    assert clean["pauseWhenHidden"] is True
    assert clean["transparent"] is False
    assert clean["seed"] is None


def test_sanitize_settings_keeps_valid_values() -> None:
    clean = sanitize_settings(
        {"theme": " Light ", "backend": "RASTER", "frameIntervalMs": 5000.0, "pauseWhenHidden": False, "seed": 9}
    )

    assert clean["theme"] == "light"
    assert clean["backend"] == "raster"
    assert clean["frameIntervalMs"] == 1000
    assert clean["pauseWhenHidden"] is False
    assert clean["seed"] == 9


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"

    assert save_settings({"theme": "light", "seed": 4}, path) == path
    assert load_settings(path)["theme"] == "light"
    assert json.loads(path.read_text(encoding="utf-8"))["seed"] == 4


def test_load_settings_tolerates_missing_and_malformed_files(tmp_path: Path, capsys) -> None:
    assert load_settings(tmp_path / "missing.json") == DEFAULTS

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert load_settings(broken) == DEFAULTS
    assert "[Orbit][WARN]" in capsys.readouterr().err

    listed = tmp_path / "list.json"
    listed.write_text("[1, 2]", encoding="utf-8")
    assert load_settings(listed) == DEFAULTS


def test_save_settings_reports_failure(tmp_path: Path, capsys) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")

    assert save_settings({"theme": "light"}, blocker / "settings.json") is None
    assert "Unable to save settings" in capsys.readouterr().err


def test_settings_path_env_override(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ORBITFX_SETTINGS", str(tmp_path / "custom.json"))
    assert settings_path() == tmp_path / "custom.json"

    monkeypatch.delenv("ORBITFX_SETTINGS")
    assert settings_path().name == "settings.json"
    assert settings_path().parent.name == ".orbitfx"


def test_toggle_theme() -> None:
    assert toggle_theme("dark") == "light"
    assert toggle_theme("light") == "dark"
