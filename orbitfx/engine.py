"""Animation state for the orbiting particle field.

The engine owns the particle set and the surface geometry. It knows nothing
about Qt: every step turns the elapsed time into a :class:`Frame`, a list of
points expressed relative to the surface centre, which the view then draws
after rotating its coordinate frame by ``Frame.rotation``.

Two clocks drive a step:

* ``dt`` (seconds, already clamped by the scheduler) advances each particle's
  phase, so replaying the same ``dt`` sequence reproduces the same angles.
* ``now_ms`` (wall-clock milliseconds) drives the global rotation and the
  radius pulse, which never feed back into the stored angles.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .config import ANGLE_RATE, ELLIPSE_SQUASH, PARTICLE_COUNT, TIME_SCALE
from .particles import Particle, ParticleSet
from .surface import SurfaceManager, SurfaceState

__all__ = ["Frame", "OrbitEngine", "RenderItem", "alpha_for", "pulse_radius", "set_debug"]

TWO_PI = math.pi * 2.0

_DEBUG = os.environ.get("ORBITFX_DEBUG", "").strip().lower() in {"1", "true", "yes"}


def set_debug(enabled: bool) -> None:
    """Turn the ``[Orbit][DEBUG]`` diagnostics on or off for every engine."""

    global _DEBUG
    _DEBUG = bool(enabled)


@dataclass
class RenderItem:
    """A particle positioned for drawing, relative to the surface centre."""

    x: float
    y: float
    radius: float
    size: float
    hue: int
    saturation: float
    lightness: float
    alpha: float


@dataclass
class Frame:
    surface: SurfaceState
    rotation: float = 0.0
    time: float = 0.0
    items: List[RenderItem] = field(default_factory=list)


def pulse_radius(orbit_factor: float, scale: float, t: float) -> float:
    return orbit_factor * scale * (0.8 + 0.2 * math.sin(t * 2.0 + orbit_factor * 5.0))


def alpha_for(angle: float, depth: float) -> float:
    return 0.6 + 0.4 * math.sin(angle + depth * 6.0)


class OrbitEngine:
    """Small helper responsible for animating the orbit field."""

    def __init__(
        self,
        particles: Optional[Sequence[Particle]] = None,
        *,
        count: int = PARTICLE_COUNT,
        rng=None,
    ) -> None:
        self.particles = ParticleSet(particles, count=count, rng=rng)
        self.surface = SurfaceManager()
        self.last_frame: Optional[Frame] = None

    # ------------------------------------------------------------------ helpers
    def _debug(self, message: str) -> None:
        if not _DEBUG:
            return
        print(f"[Orbit][DEBUG] {message}", flush=True)

    @property
    def state(self) -> SurfaceState:
        return self.surface.state

    def resize(self, width: float, height: float, device_ratio: float = 1.0) -> SurfaceState:
        state = self.surface.resize(width, height, device_ratio)
        self._debug(
            f"resize {state.width}x{state.height} @{state.device_ratio:g} "
            f"-> backing {state.backing_width}x{state.backing_height}, scale={state.scale:.2f}"
        )
        return state

    # ------------------------------------------------------------------ animation
    def advance(self, dt: float) -> None:
        for p in self.particles:
            p.angle += p.angular_speed * dt * ANGLE_RATE

    def project(self, now_ms: float) -> Frame:
        state = self.surface.state
        t = now_ms * TIME_SCALE
        frame = Frame(surface=state, rotation=t % TWO_PI, time=t)
        if state.is_empty:
            return frame
        scale = state.scale
        for p in self.particles:
            r = pulse_radius(p.orbit_factor, scale, t)
            frame.items.append(
                RenderItem(
                    x=math.cos(p.angle) * r,
                    y=math.sin(p.angle) * r * ELLIPSE_SQUASH,
                    radius=r,
                    size=p.size,
                    hue=p.hue,
                    saturation=p.saturation,
                    lightness=p.lightness,
                    alpha=alpha_for(p.angle, p.depth),
                )
            )
        return frame

    def step(self, now_ms: float, dt: float) -> Frame:
        """Advance every phase by ``dt`` seconds and project the frame at ``now_ms``."""

        self.advance(dt)
        self.last_frame = self.project(now_ms)
        return self.last_frame
