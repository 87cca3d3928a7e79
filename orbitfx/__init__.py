"""Decorative orbiting-particle animation rendered with PyQt5."""

from .engine import Frame, OrbitEngine, RenderItem
from .particles import Particle, ParticleSet, generate_particles
from .surface import SurfaceManager, SurfaceState

__version__ = "0.1.0"

__all__ = [
    "Frame",
    "OrbitEngine",
    "Particle",
    "ParticleSet",
    "RenderItem",
    "SurfaceManager",
    "SurfaceState",
    "generate_particles",
]
