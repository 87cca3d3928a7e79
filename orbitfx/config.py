"""Constants and persisted settings shared by the view, the window and the tools."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Mapping, Optional

PARTICLE_COUNT = 160
MAX_FRAME_DT_MS = 40.0
SCALE_DIVISOR = 2.6
ANGLE_RATE = 0.6
ELLIPSE_SQUASH = 0.6
TIME_SCALE = 0.0001
DEFAULT_FRAME_INTERVAL_MS = 16

BACKENDS = ("auto", "opengl", "raster")

DEFAULTS = dict(
    theme="dark",
    backend="auto",
    frameIntervalMs=DEFAULT_FRAME_INTERVAL_MS,
    pauseWhenHidden=True,
    transparent=False,
    seed=None,
)

THEMES = {
    "dark": dict(background="#0f1117", label="Switch to light mode"),
    "light": dict(background="#f5f6fa", label="Switch to dark mode"),
}


def default_state_dir() -> Path:
    return Path.home() / ".orbitfx"


def settings_path() -> Path:
    override = os.environ.get("ORBITFX_SETTINGS", "").strip()
    if override:
        return Path(override).expanduser()
    return default_state_dir() / "settings.json"


def toggle_theme(theme: str) -> str:
    return "light" if theme == "dark" else "dark"


def sanitize_settings(payload: Optional[Mapping[str, object]]) -> dict:
    """Return a complete settings dict built from a user-provided payload."""
    base = dict(DEFAULTS)
    if not isinstance(payload, Mapping):
        return base

    theme = payload.get("theme")
    if isinstance(theme, str) and theme.strip().lower() in THEMES:
        base["theme"] = theme.strip().lower()

    backend = payload.get("backend")
    if isinstance(backend, str) and backend.strip().lower() in BACKENDS:
        base["backend"] = backend.strip().lower()

    interval = payload.get("frameIntervalMs")
    if isinstance(interval, (int, float)) and not isinstance(interval, bool):
        base["frameIntervalMs"] = max(1, min(1000, int(interval)))

    for key in ("pauseWhenHidden", "transparent"):
        value = payload.get(key)
        if isinstance(value, bool):
            base[key] = value

    seed = payload.get("seed")
    if isinstance(seed, int) and not isinstance(seed, bool):
        base["seed"] = seed

    return base


def load_settings(path: Optional[Path] = None) -> dict:
    target = Path(path) if path is not None else settings_path()
    try:
        raw = json.loads(target.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return sanitize_settings(None)
    except (OSError, ValueError) as exc:
        print(f"[Orbit][WARN] Ignoring unreadable settings {target}: {exc}", file=sys.stderr)
        return sanitize_settings(None)
    return sanitize_settings(raw if isinstance(raw, dict) else None)


def save_settings(settings: Mapping[str, object], path: Optional[Path] = None) -> Optional[Path]:
    """Write sanitized settings to disk; returns the path or ``None`` on failure."""
    target = Path(path) if path is not None else settings_path()
    clean = sanitize_settings(settings)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(target.name + ".tmp")
        tmp.write_text(json.dumps(clean, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(target)
    except OSError as exc:
        print(f"[Orbit][WARN] Unable to save settings to {target}: {exc}", file=sys.stderr)
        return None
    return target


__all__ = [
    "ANGLE_RATE",
    "BACKENDS",
    "DEFAULTS",
    "DEFAULT_FRAME_INTERVAL_MS",
    "ELLIPSE_SQUASH",
    "MAX_FRAME_DT_MS",
    "PARTICLE_COUNT",
    "SCALE_DIVISOR",
    "THEMES",
    "TIME_SCALE",
    "default_state_dir",
    "load_settings",
    "sanitize_settings",
    "save_settings",
    "settings_path",
    "toggle_theme",
]
