from __future__ import annotations

import random

import pytest
from PyQt5 import QtCore, QtGui

from orbitfx.engine import OrbitEngine
from orbitfx.scheduler import SchedulerState
from orbitfx.surface import SurfaceManager
from orbitfx.view import OrbitViewWidget, allocate_backing, hsla_color, render_to_image
from orbitfx.view.view_widget import _should_use_opengl


def test_backing_image_matches_device_pixels(qapp) -> None:
    image = allocate_backing(SurfaceManager().resize(400, 300, 2))

    assert (image.width(), image.height()) == (800, 600)
    assert image.devicePixelRatio() == pytest.approx(2.0)
    assert image.pixelColor(0, 0).alpha() == 0


def test_empty_surface_has_no_backing(qapp) -> None:
    assert allocate_backing(SurfaceManager().resize(0, 300, 2)).isNull()
    assert allocate_backing(SurfaceManager().resize(1, 1, 0.5)).isNull()


def test_render_to_image_paints_particles(qapp) -> None:
    engine = OrbitEngine(rng=random.Random(8))
    engine.resize(400, 300, 2)

    image = render_to_image(engine, 500.0, 0.016)

    assert (image.width(), image.height()) == (800, 600)
    assert image != allocate_backing(engine.state)


def test_render_to_image_fills_background(qapp) -> None:
    engine = OrbitEngine(rng=random.Random(8))
    engine.resize(400, 300, 1)

    image = render_to_image(engine, 0.0, 0.0, "#0f1117")

    # particles never reach the corners: the widest orbit is min(w, h) / 2.6
    assert image.pixelColor(0, 0).name() == "#0f1117"
    assert image.pixelColor(399, 299).alpha() == 255


def test_render_to_image_on_empty_surface_is_null(qapp) -> None:
    engine = OrbitEngine(rng=random.Random(8))
    engine.resize(0, 0, 1)

    assert render_to_image(engine, 0.0).isNull()


def test_hsla_color_maps_css_components(qapp) -> None:
    color = hsla_color(220, 80, 60, 0.5)

    assert abs(color.hslHue() - 220) <= 1
    assert color.hslSaturationF() == pytest.approx(0.8, abs=0.01)
    assert color.lightnessF() == pytest.approx(0.6, abs=0.01)
    assert color.alphaF() == pytest.approx(0.5, abs=0.01)
    assert hsla_color(220, 80, 60, 1.7).alphaF() == pytest.approx(1.0)


def test_backend_selection(monkeypatch) -> None:
    monkeypatch.setenv("ORBITFX_FORCE_BACKEND", "opengl")
    assert _should_use_opengl(None) is True
    assert _should_use_opengl("raster") is False
    monkeypatch.setenv("ORBITFX_FORCE_BACKEND", "raster")
    assert _should_use_opengl("auto") is False
    assert _should_use_opengl("opengl") is True


def test_widget_refuses_to_start_on_empty_surface(qapp) -> None:
    widget = OrbitViewWidget(force_backend="raster", autostart=False)
    widget.resize(0, 0)

    assert widget.start() is False
    assert widget.scheduler.state is SchedulerState.STOPPED
    assert widget.backing_image.isNull()
    widget.deleteLater()


def test_widget_start_step_and_stop(qapp) -> None:
    engine = OrbitEngine(rng=random.Random(3))
    widget = OrbitViewWidget(force_backend="raster", engine=engine, autostart=False)
    widget.resize(400, 300)

    assert widget.backend_name == "raster"
    assert widget.start() is True
    assert widget.scheduler.is_running
    assert engine.state.width == 400 and engine.state.height == 300

    widget.scheduler.tick()

    assert widget.scheduler.frame_count == 1
    assert len(engine.last_frame.items) == 160
    assert widget.backing_image != allocate_backing(engine.state)

    widget.stop()
    assert widget.scheduler.state is SchedulerState.STOPPED
    widget.deleteLater()


def test_widget_resize_keeps_particles(qapp) -> None:
    engine = OrbitEngine(rng=random.Random(4))
    widget = OrbitViewWidget(force_backend="raster", engine=engine, autostart=False)
    widget.resize(400, 300)
    widget.start()
    before = engine.particles.snapshot()

    widget.resize(200, 520)
    widget._sync_surface()

    assert engine.state.scale == pytest.approx(200 / 2.6)
    assert engine.particles.snapshot() == before
    widget.stop()
    widget.deleteLater()


def test_widget_pauses_while_hidden(qapp) -> None:
    widget = OrbitViewWidget(force_backend="raster", engine=OrbitEngine(rng=random.Random(5)))
    widget.resize(240, 180)
    widget.show()
    qapp.processEvents()

    assert widget.scheduler.is_running

    widget.hide()
    assert widget.scheduler.state is SchedulerState.PAUSED

    widget.show()
    assert widget.scheduler.is_running

    widget.stop()
    widget.close()
    widget.deleteLater()


def test_background_colour_is_applied(qapp) -> None:
    widget = OrbitViewWidget(force_backend="raster", engine=OrbitEngine(rng=random.Random(6)), autostart=False)
    widget.resize(100, 100)
    widget.start()
    widget.set_background("#f5f6fa")
    widget.scheduler.tick()

    assert widget.backing_image.pixelColor(0, 0) == QtGui.QColor("#f5f6fa")

    widget.set_background(None)
    widget.scheduler.tick()
    assert widget.backing_image.pixelColor(0, 0) == QtGui.QColor(QtCore.Qt.transparent)
    widget.stop()
    widget.deleteLater()


def test_closing_a_standalone_widget_stops_the_loop(qapp) -> None:
    widget = OrbitViewWidget(
        force_backend="raster",
        engine=OrbitEngine(rng=random.Random(9)),
        pause_when_hidden=False,
    )
    widget.resize(240, 180)
    widget.show()
    qapp.processEvents()
    assert widget.scheduler.is_running

    widget.close()
    qapp.processEvents()

    assert widget.scheduler.state is SchedulerState.STOPPED
    frames = widget.scheduler.frame_count
    widget.scheduler.tick()
    assert widget.scheduler.frame_count == frames
    widget.deleteLater()
