"""Particle records and the fixed-size particle set animated by the engine."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from .config import PARTICLE_COUNT

__all__ = ["Particle", "ParticleSet", "generate_particles"]

TWO_PI = math.pi * 2.0


@dataclass
class Particle:
    """One orbiting point. Only ``angle`` changes after creation."""

    orbit_factor: float
    angular_speed: float
    angle: float
    size: float
    hue: int
    saturation: float
    lightness: float
    depth: float

    def parameters(self) -> Tuple[float, float, float, int, float, float, float]:
        return (
            self.orbit_factor,
            self.angular_speed,
            self.size,
            self.hue,
            self.saturation,
            self.lightness,
            self.depth,
        )


def _make_particle(rng) -> Particle:
    orbit = 0.3 + rng.random() * 0.7
    speed = (0.4 + rng.random() * 0.8) * (-1.0 if rng.random() < 0.5 else 1.0)
    angle = rng.random() * TWO_PI
    size = 1.2 + rng.random() * 2.4
    hue = int(math.floor(200 + rng.random() * 140))
    sat = 70 + rng.random() * 30
    light = 55 + rng.random() * 20
    return Particle(
        orbit_factor=orbit,
        angular_speed=speed,
        angle=angle,
        size=size,
        hue=hue,
        saturation=sat,
        lightness=light,
        depth=rng.random(),
    )


def generate_particles(count: int = PARTICLE_COUNT, rng=None) -> List[Particle]:
    """Draw ``count`` independent particles.

    ``rng`` is any object exposing ``random()`` (``random.Random`` works); the
    module-level generator is used when omitted.
    """

    source = rng if rng is not None else random
    return [_make_particle(source) for _ in range(max(0, int(count)))]


class ParticleSet:
    """Fixed collection of particles; nothing is added or removed after init."""

    def __init__(self, particles: Optional[Sequence[Particle]] = None, *, count: int = PARTICLE_COUNT, rng=None) -> None:
        if particles is None:
            particles = generate_particles(count, rng)
        self._particles: Tuple[Particle, ...] = tuple(particles)

    def __len__(self) -> int:
        return len(self._particles)

    def __iter__(self) -> Iterator[Particle]:
        return iter(self._particles)

    def __getitem__(self, index: int) -> Particle:
        return self._particles[index]

    def angles(self) -> List[float]:
        return [p.angle for p in self._particles]

    def snapshot(self) -> List[Tuple[float, float, float, int, float, float, float]]:
        return [p.parameters() for p in self._particles]
