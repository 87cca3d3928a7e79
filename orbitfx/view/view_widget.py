"""Qt widgets drawing the orbit field.

The widget keeps a backing ``QImage`` sized in device pixels (logical size
times ``devicePixelRatioF()``) with its device pixel ratio set, so every
drawing command below is expressed in logical pixels and still comes out
crisp on high-density screens. A :class:`FrameScheduler` steps the engine,
the frame is painted into the backing image, and ``paintEvent``/``paintGL``
only blit that image.

Two backends share the same behaviour through :class:`_ViewWidgetBase`:

* ``_OpenGLViewWidget`` built on ``QOpenGLWidget``;
* ``_RasterViewWidget`` built on a plain ``QWidget``.

:func:`OrbitViewWidget` picks one of them.
"""

from __future__ import annotations

import math
import os
import sys
from typing import Optional, Tuple, Union

from PyQt5 import QtCore, QtGui, QtWidgets

from ..config import DEFAULT_FRAME_INTERVAL_MS
from ..engine import Frame, OrbitEngine
from ..scheduler import FrameScheduler, SchedulerState
from ..surface import SurfaceState

__all__ = [
    "OrbitViewWidget",
    "allocate_backing",
    "hsla_color",
    "paint_backing",
    "render_frame",
    "render_to_image",
]

ColorLike = Union[QtGui.QColor, str, None]


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _to_color(value: ColorLike) -> Optional[QtGui.QColor]:
    if value is None:
        return None
    color = QtGui.QColor(value)
    if not color.isValid():
        return None
    return color


def hsla_color(hue: float, saturation: float, lightness: float, alpha: float) -> QtGui.QColor:
    """Build a colour from CSS-style ``hsla()`` components (degrees and percents)."""

    return QtGui.QColor.fromHslF(
        (hue % 360.0) / 360.0,
        clamp01(saturation / 100.0),
        clamp01(lightness / 100.0),
        clamp01(alpha),
    )


# ---------------------------------------------------------------------------
# Rendering helpers


def allocate_backing(state: SurfaceState) -> QtGui.QImage:
    """Return a transparent backing image for ``state``; null when it has no area."""

    if state.is_empty or state.backing_width <= 0 or state.backing_height <= 0:
        return QtGui.QImage()
    image = QtGui.QImage(state.backing_width, state.backing_height, QtGui.QImage.Format_ARGB32_Premultiplied)
    image.setDevicePixelRatio(state.device_ratio)
    image.fill(QtCore.Qt.transparent)
    return image


def render_frame(painter: QtGui.QPainter, frame: Frame) -> None:
    surface = frame.surface
    painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
    painter.setPen(QtCore.Qt.NoPen)
    painter.save()
    try:
        painter.translate(surface.center_x, surface.center_y)
        painter.rotate(math.degrees(frame.rotation))
        for item in frame.items:
            painter.setBrush(hsla_color(item.hue, item.saturation, item.lightness, item.alpha))
            painter.drawEllipse(QtCore.QPointF(item.x, item.y), item.size, item.size)
    finally:
        painter.restore()


def paint_backing(image: QtGui.QImage, frame: Frame, background: ColorLike = None) -> bool:
    """Clear ``image`` and draw ``frame`` into it. Returns ``False`` if nothing could be painted."""

    if image.isNull():
        return False
    color = _to_color(background)
    image.fill(color if color is not None else QtGui.QColor(QtCore.Qt.transparent))
    painter = QtGui.QPainter()
    if not painter.begin(image):
        return False
    try:
        render_frame(painter, frame)
    finally:
        painter.end()
    return True


def render_to_image(
    engine: OrbitEngine,
    now_ms: float,
    dt: float = 0.0,
    background: ColorLike = None,
) -> QtGui.QImage:
    """Step ``engine`` once and return the frame drawn on a fresh backing image."""

    frame = engine.step(now_ms, dt)
    image = allocate_backing(engine.state)
    paint_backing(image, frame, background)
    return image


# ---------------------------------------------------------------------------
# OpenGL helpers


def _create_opengl_functions() -> Tuple[Optional[object], Optional[BaseException]]:
    """Safely instantiate ``QOpenGLFunctions`` when available.

    Returns ``(functions, error)``; ``functions`` is ``None`` when the binding
    is missing or cannot be initialised, in which case ``error`` says why.
    """

    factory = getattr(QtGui, "QOpenGLFunctions", None)
    if factory is None:
        return None, AttributeError("PyQt5.QtGui has no attribute 'QOpenGLFunctions'")
    try:
        functions = factory()
        functions.initializeOpenGLFunctions()
    except Exception as exc:  # pragma: no cover - depends on runtime GL state
        return None, exc
    return functions, None


# ---------------------------------------------------------------------------
# Widgets


class _ViewWidgetBase:
    """Common behaviour shared by both the OpenGL and raster backends."""

    def _init_view_widget(
        self,
        engine: Optional[OrbitEngine],
        interval_ms: int,
        pause_when_hidden: bool,
        autostart: bool,
    ) -> None:
        self.setAttribute(QtCore.Qt.WA_NoSystemBackground, True)
        self.setAttribute(QtCore.Qt.WA_TranslucentBackground, True)
        self.setAttribute(QtCore.Qt.WA_OpaquePaintEvent, False)
        self.setAutoFillBackground(False)
        self.engine = engine if engine is not None else OrbitEngine()
        self._background: Optional[QtGui.QColor] = None
        self._backing = QtGui.QImage()
        self._last_now_ms: Optional[float] = None
        self._pause_when_hidden = bool(pause_when_hidden)
        self._autostart = bool(autostart)
        self._started = False
        self.scheduler = FrameScheduler(self._advance, interval_ms=interval_ms, parent=self)

    # ------------------------------------------------------------------ surface
    def _device_ratio(self) -> float:
        try:
            return float(self.devicePixelRatioF())
        except (AttributeError, RuntimeError):
            return 1.0

    def _sync_surface(self) -> SurfaceState:
        state = self.engine.resize(self.width(), self.height(), self._device_ratio())
        self._backing = allocate_backing(state)
        if self._last_now_ms is not None:
            paint_backing(self._backing, self.engine.project(self._last_now_ms), self._background)
        return state

    @property
    def backing_image(self) -> QtGui.QImage:
        return self._backing

    # ------------------------------------------------------------------ lifecycle
    def start(self) -> bool:
        """Start the frame loop; refuses silently when there is nothing to draw on."""

        state = self._sync_surface()
        if state.is_empty or self._backing.isNull():
            self.engine._debug(f"not starting: empty surface {state.width}x{state.height}")
            return False
        painter = QtGui.QPainter()
        if not painter.begin(self._backing):
            self.engine._debug("not starting: backing image cannot be painted")
            return False
        painter.end()
        self._started = True
        self.scheduler.start()
        return True

    def stop(self) -> None:
        self._started = False
        self.scheduler.stop()

    def pause(self) -> None:
        self.scheduler.pause()

    def resume(self) -> None:
        self.scheduler.resume()

    def _maybe_autostart(self) -> None:
        if self._autostart and not self._started and self.isVisible():
            self.start()

    def _handle_show(self) -> None:
        if self.scheduler.state is SchedulerState.PAUSED and self._pause_when_hidden:
            self.resume()
        self._maybe_autostart()

    def _handle_hide(self) -> None:
        if self._pause_when_hidden:
            self.pause()

    def _handle_close(self) -> None:
        self.stop()

    def _handle_resize(self) -> None:
        self._sync_surface()
        self._maybe_autostart()
        self.update()

    def _advance(self, now_ms: float, dt: float) -> None:
        frame = self.engine.step(now_ms, dt)
        self._last_now_ms = now_ms
        paint_backing(self._backing, frame, self._background)
        self.update()

    # ------------------------------------------------------------------ API
    def set_background(self, color: ColorLike) -> None:
        """Use ``color`` behind the particles; ``None`` keeps the surface transparent."""

        self._background = _to_color(color)
        if self._last_now_ms is not None:
            paint_backing(self._backing, self.engine.project(self._last_now_ms), self._background)
        self.update()

    def set_frame_interval(self, interval_ms: int) -> None:
        self.scheduler.set_interval(interval_ms)

    def set_pause_when_hidden(self, enabled: bool) -> None:
        self._pause_when_hidden = bool(enabled)
        if not enabled and self.scheduler.state is SchedulerState.PAUSED:
            self.resume()

    def _blit(self, painter: QtGui.QPainter) -> None:
        if self._background is None:
            painter.setCompositionMode(QtGui.QPainter.CompositionMode_Source)
            painter.fillRect(self.rect(), QtCore.Qt.transparent)
            painter.setCompositionMode(QtGui.QPainter.CompositionMode_SourceOver)
        else:
            painter.fillRect(self.rect(), self._background)
        if not self._backing.isNull():
            painter.drawImage(QtCore.QPointF(0.0, 0.0), self._backing)


class _OpenGLViewWidget(QtWidgets.QOpenGLWidget, _ViewWidgetBase):
    """OpenGL-backed renderer when the system can create a GL context."""

    def __init__(
        self,
        parent: Optional[QtWidgets.QWidget] = None,
        *,
        engine: Optional[OrbitEngine] = None,
        interval_ms: int = DEFAULT_FRAME_INTERVAL_MS,
        pause_when_hidden: bool = True,
        autostart: bool = True,
    ) -> None:
        QtWidgets.QOpenGLWidget.__init__(self, parent)
        self._gl: Optional[object] = None
        self._init_view_widget(engine, interval_ms, pause_when_hidden, autostart)

    def initializeGL(self) -> None:  # pragma: no cover - requires GUI context
        self._gl, error = _create_opengl_functions()
        if error is not None:
            print(
                f"[Orbit][WARN] OpenGL initialisation failed: {error}. Falling back to painter clears.",
                file=sys.stderr,
            )
        self._apply_clear_color()

    def _apply_clear_color(self) -> None:
        if self._gl is None:
            return
        alpha = 0.0 if self._background is None else 1.0
        self._gl.glClearColor(0.0, 0.0, 0.0, alpha)

    def set_background(self, color: ColorLike) -> None:
        super().set_background(color)
        self._apply_clear_color()

    def paintGL(self) -> None:  # pragma: no cover - requires GUI context
        if self._gl is not None:
            # GL_COLOR_BUFFER_BIT
            self._gl.glClear(0x00004000)
        painter = QtGui.QPainter(self)
        try:
            self._blit(painter)
        finally:
            painter.end()

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._handle_resize()

    def showEvent(self, event: QtGui.QShowEvent) -> None:  # type: ignore[override]
        super().showEvent(event)
        self._handle_show()

    def hideEvent(self, event: QtGui.QHideEvent) -> None:  # type: ignore[override]
        super().hideEvent(event)
        self._handle_hide()

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self._handle_close()
        super().closeEvent(event)


class _RasterViewWidget(QtWidgets.QWidget, _ViewWidgetBase):
    """Fallback renderer using the traditional raster ``QWidget`` backend."""

    def __init__(
        self,
        parent: Optional[QtWidgets.QWidget] = None,
        *,
        engine: Optional[OrbitEngine] = None,
        interval_ms: int = DEFAULT_FRAME_INTERVAL_MS,
        pause_when_hidden: bool = True,
        autostart: bool = True,
    ) -> None:
        QtWidgets.QWidget.__init__(self, parent)
        self._init_view_widget(engine, interval_ms, pause_when_hidden, autostart)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # type: ignore[override]
        del event
        painter = QtGui.QPainter(self)
        try:
            self._blit(painter)
        finally:
            painter.end()

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._handle_resize()

    def showEvent(self, event: QtGui.QShowEvent) -> None:  # type: ignore[override]
        super().showEvent(event)
        self._handle_show()

    def hideEvent(self, event: QtGui.QHideEvent) -> None:  # type: ignore[override]
        super().hideEvent(event)
        self._handle_hide()

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self._handle_close()
        super().closeEvent(event)


def _should_use_opengl(force_backend: Optional[str]) -> bool:
    backend = (force_backend or "").strip().lower()
    if backend in {"", "auto"}:
        backend = os.environ.get("ORBITFX_FORCE_BACKEND", "").strip().lower()
    if backend == "raster":
        return False
    if backend == "opengl":
        return True
    return hasattr(QtWidgets, "QOpenGLWidget")


def OrbitViewWidget(
    parent: Optional[QtWidgets.QWidget] = None,
    *,
    engine: Optional[OrbitEngine] = None,
    force_backend: Optional[str] = None,
    interval_ms: int = DEFAULT_FRAME_INTERVAL_MS,
    pause_when_hidden: bool = True,
    autostart: bool = True,
) -> QtWidgets.QWidget:
    """Factory returning the best available renderer widget.

    Parameters
    ----------
    parent:
        Parent widget used by Qt for ownership.
    engine:
        Engine to animate; a freshly seeded one is created when omitted.
    force_backend:
        ``"opengl"``, ``"raster"`` or ``"auto"``. ``auto`` defers to the
        ``ORBITFX_FORCE_BACKEND`` environment variable, then to whether
        ``QOpenGLWidget`` is available.
    autostart:
        Start the frame loop the first time the widget is shown with a
        non-empty size.

    Returns
    -------
    QtWidgets.QWidget
        A widget exposing the same public API regardless of the backend choice.
    """

    options = dict(
        engine=engine,
        interval_ms=interval_ms,
        pause_when_hidden=pause_when_hidden,
        autostart=autostart,
    )
    if _should_use_opengl(force_backend):
        try:
            widget = _OpenGLViewWidget(parent, **options)
            setattr(widget, "backend_name", "opengl")
            return widget
        except Exception as exc:
            print(
                f"[Orbit][WARN] Unable to initialise OpenGL backend ({exc!r}). Using raster widget instead.",
                file=sys.stderr,
            )
    widget = _RasterViewWidget(parent, **options)
    setattr(widget, "backend_name", "raster")
    return widget
