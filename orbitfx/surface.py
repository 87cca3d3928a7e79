"""Logical and device-pixel geometry of the drawing surface."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .config import SCALE_DIVISOR

__all__ = ["SurfaceManager", "SurfaceState"]


@dataclass(frozen=True)
class SurfaceState:
    width: int = 0
    height: int = 0
    device_ratio: float = 1.0
    backing_width: int = 0
    backing_height: int = 0
    center_x: float = 0.0
    center_y: float = 0.0
    scale: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


def _coerce_ratio(value: object) -> float:
    try:
        ratio = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 1.0
    if not math.isfinite(ratio) or ratio <= 0.0:
        return 1.0
    return ratio


class SurfaceManager:
    """Owns the surface dimensions, recomputed from scratch on each resize."""

    def __init__(self) -> None:
        self._state = SurfaceState()

    @property
    def state(self) -> SurfaceState:
        return self._state

    @property
    def scale(self) -> float:
        return self._state.scale

    def resize(self, width: float, height: float, device_ratio: float = 1.0) -> SurfaceState:
        """Apply a new on-screen box and return the resulting state.

        ``width`` and ``height`` are logical pixels; the backing store is sized
        ``logical * device_ratio`` so drawing stays crisp on dense screens
        while callers keep issuing commands in logical coordinates.
        """

        w = max(0, int(math.floor(width)))
        h = max(0, int(math.floor(height)))
        ratio = _coerce_ratio(device_ratio)
        self._state = SurfaceState(
            width=w,
            height=h,
            device_ratio=ratio,
            backing_width=int(math.floor(w * ratio)),
            backing_height=int(math.floor(h * ratio)),
            center_x=w / 2.0,
            center_y=h / 2.0,
            scale=min(w, h) / SCALE_DIVISOR,
        )
        return self._state
