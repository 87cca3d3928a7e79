# -*- coding: utf-8 -*-
import argparse
import random
import sys
import traceback
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence


def _handle_qt_import_error(exc: ImportError) -> NoReturn:
    """Exit with a helpful message when the Qt bindings cannot be imported."""

    details = str(exc)
    message_lines = [
        "Unable to start orbitfx: importing PyQt5 failed.",
        "Check that PyQt5 is installed and that the required OpenGL libraries are available.",
    ]
    if "libGL.so.1" in details:
        message_lines.append(
            "Hint: the system library libGL.so.1 is missing. Install the Mesa/OpenGL packages for your platform."
        )
    message_lines.append(f"Original error: {details}")
    raise SystemExit("\n".join(message_lines)) from exc


try:
    from PyQt5 import QtCore, QtGui, QtWidgets
    from PyQt5.QtCore import Qt
except ImportError as exc:  # pragma: no cover - environment dependent
    _handle_qt_import_error(exc)

from .config import BACKENDS, THEMES, default_state_dir, load_settings, save_settings, toggle_theme
from .engine import OrbitEngine, set_debug
from .view import OrbitViewWidget


class OrbitWindow(QtWidgets.QMainWindow):
    themeChanged = QtCore.pyqtSignal(str)

    def __init__(
        self,
        settings: dict,
        *,
        engine: Optional[OrbitEngine] = None,
        settings_file: Optional[Path] = None,
    ):
        super().__init__(None)
        self.setWindowTitle("orbitfx")
        self._settings = dict(settings)
        self._settings_file = settings_file
        self._pause_when_hidden = bool(self._settings.get("pauseWhenHidden", True))
        self.view = OrbitViewWidget(
            self,
            engine=engine,
            force_backend=str(self._settings.get("backend", "auto")),
            interval_ms=int(self._settings.get("frameIntervalMs", 16)),
            pause_when_hidden=self._pause_when_hidden,
        )

        w = QtWidgets.QWidget()
        w.setAttribute(Qt.WA_NoSystemBackground, True)
        w.setAutoFillBackground(False)
        lay = QtWidgets.QVBoxLayout(w)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addWidget(self.view)
        self.setCentralWidget(w)

        QtWidgets.QShortcut(Qt.Key_Escape, self, activated=self.close)
        QtWidgets.QShortcut(Qt.Key_T, self, activated=self.toggle_theme)
        self._transparent = bool(self._settings.get("transparent", False))
        if self._transparent:
            self.setAttribute(Qt.WA_TranslucentBackground, True)
            self.setStyleSheet("background: transparent;")
        self.apply_theme(str(self._settings.get("theme", "dark")))
        self.resize(960, 640)

    @property
    def theme(self) -> str:
        return str(self._settings.get("theme", "dark"))

    def apply_theme(self, theme: str) -> None:
        if theme not in THEMES:
            theme = "dark"
        self._settings["theme"] = theme
        palette = THEMES[theme]
        self.view.set_background(None if self._transparent else palette["background"])
        self.setToolTip(f"{palette['label']} (T)")

    def toggle_theme(self) -> str:
        new_theme = toggle_theme(self.theme)
        self.apply_theme(new_theme)
        stored = load_settings(self._settings_file)
        stored["theme"] = new_theme
        save_settings(stored, self._settings_file)
        self.themeChanged.emit(new_theme)
        return new_theme

    def changeEvent(self, event: QtCore.QEvent) -> None:  # type: ignore[override]
        if event.type() == QtCore.QEvent.WindowStateChange and self._pause_when_hidden:
            if self.isMinimized():
                self.view.pause()
            elif self.view.isVisible():
                self.view.resume()
        super().changeEvent(event)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.view.stop()
        super().closeEvent(event)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="orbitfx", description="Animated orbiting particles.")
    parser.add_argument("--backend", choices=BACKENDS, help="Renderer backend (default: settings or auto).")
    parser.add_argument("--seed", type=int, help="Seed for a reproducible particle set.")
    parser.add_argument("--theme", choices=sorted(THEMES), help="Start with this theme.")
    parser.add_argument("--interval", type=int, help="Milliseconds between frame requests.")
    parser.add_argument("--transparent", action="store_true", help="Draw on a transparent window.")
    parser.add_argument(
        "--no-pause-hidden",
        dest="pause_hidden",
        action="store_false",
        help="Keep animating while the window is hidden or minimised.",
    )
    parser.add_argument("--debug", action="store_true", help="Show [Orbit][DEBUG] diagnostics.")
    parser.add_argument("--settings", type=Path, help="Settings file (default: ~/.orbitfx/settings.json).")
    return parser


def resolve_settings(args: argparse.Namespace) -> dict:
    """Merge the stored settings with command-line overrides."""

    settings = load_settings(args.settings)
    if args.backend:
        settings["backend"] = args.backend
    if args.seed is not None:
        settings["seed"] = args.seed
    if args.theme:
        settings["theme"] = args.theme
    if args.interval is not None:
        if args.interval <= 0:
            raise SystemExit("--interval must be a positive number of milliseconds")
        settings["frameIntervalMs"] = min(1000, args.interval)
    if args.transparent:
        settings["transparent"] = True
    if not args.pause_hidden:
        settings["pauseWhenHidden"] = False
    return settings


def _install_crash_hook(state_dir: Path) -> None:
    """Write unhandled exceptions to ``<state_dir>/crash.txt`` before the default hook runs."""

    def _write_unhandled(exc_type, exc_value, exc_tb):
        try:
            state_dir.mkdir(parents=True, exist_ok=True)
            with (state_dir / "crash.txt").open("w", encoding="utf-8") as f:
                traceback.print_exception(exc_type, exc_value, exc_tb, file=f)
        except OSError:
            pass
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _write_unhandled


def main(argv: Optional[Sequence[str]] = None, headless: bool = False) -> int:
    """Start the application and return the exit code.

    With ``headless`` the arguments and settings are resolved and validated
    but no Qt objects are created.
    """
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    settings = resolve_settings(args)
    if headless:
        return 0

    if args.debug:
        set_debug(True)
    _install_crash_hook(default_state_dir())

    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_EnableHighDpiScaling, True)
    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_UseHighDpiPixmaps, True)
    app_args: List[str] = [sys.argv[0]] if sys.argv else ["orbitfx"]
    app = QtWidgets.QApplication(app_args)

    seed = settings.get("seed")
    engine = OrbitEngine(rng=random.Random(seed)) if seed is not None else OrbitEngine()
    window = OrbitWindow(settings, engine=engine, settings_file=args.settings)
    window.show()
    return app.exec_()


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
