#!/usr/bin/env python3
"""Render orbit frames offscreen and write them as numbered PNG files.

The Qt platform is forced to ``offscreen`` so no window is opened. Frames are
stepped with a simulated clock advancing ``1000 / fps`` milliseconds per frame,
so a seeded run always produces the same images.

Usage:
  python tools/capture_frames.py --frames 60 --width 400 --height 300 --dpr 2 --seed 7
"""
from __future__ import annotations

import argparse
import os
import random
import sys
from pathlib import Path
from typing import List, Optional, Sequence

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from PyQt5 import QtWidgets  # noqa: E402

from orbitfx.config import THEMES  # noqa: E402
from orbitfx.engine import OrbitEngine  # noqa: E402
from orbitfx.scheduler import clamp_frame_delta  # noqa: E402
from orbitfx.view import render_to_image  # noqa: E402


def _ensure_app() -> QtWidgets.QApplication:
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([sys.argv[0] if sys.argv else "capture_frames"])
    return app


def capture(
    out_dir: Path,
    *,
    frames: int = 60,
    width: int = 400,
    height: int = 300,
    device_ratio: float = 1.0,
    fps: float = 60.0,
    seed: Optional[int] = None,
    theme: Optional[str] = None,
) -> List[Path]:
    """Render ``frames`` frames into ``out_dir`` and return the written paths."""

    if frames <= 0:
        raise SystemExit("--frames must be positive")
    if width <= 0 or height <= 0:
        raise SystemExit("--width and --height must be positive")
    if fps <= 0:
        raise SystemExit("--fps must be positive")

    _ensure_app()
    engine = OrbitEngine(rng=random.Random(seed)) if seed is not None else OrbitEngine()
    engine.resize(width, height, device_ratio)
    background = THEMES[theme]["background"] if theme in THEMES else None

    out_dir.mkdir(parents=True, exist_ok=True)
    step_ms = 1000.0 / fps
    dt = clamp_frame_delta(step_ms)
    written: List[Path] = []
    for index in range(frames):
        image = render_to_image(engine, index * step_ms, dt if index else 0.0, background)
        path = out_dir / f"frame_{index:04d}.png"
        if not image.save(str(path), "PNG"):
            raise SystemExit(f"failed to write {path}")
        written.append(path)
    return written


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--frames", type=int, default=60, help="Number of frames to render.")
    parser.add_argument("--width", type=int, default=400, help="Logical width in pixels.")
    parser.add_argument("--height", type=int, default=300, help="Logical height in pixels.")
    parser.add_argument("--dpr", type=float, default=1.0, help="Device pixel ratio of the backing store.")
    parser.add_argument("--fps", type=float, default=60.0, help="Simulated frames per second.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the particle set.")
    parser.add_argument("--theme", choices=sorted(THEMES), default=None, help="Opaque theme background.")
    parser.add_argument(
        "--out",
        type=Path,
        default=ROOT / "artifacts" / "frames",
        help="Directory where the PNG files will be written.",
    )
    args = parser.parse_args(argv)

    paths = capture(
        args.out,
        frames=args.frames,
        width=args.width,
        height=args.height,
        device_ratio=args.dpr,
        fps=args.fps,
        seed=args.seed,
        theme=args.theme,
    )
    print(f"wrote {len(paths)} frames to {args.out}")


if __name__ == "__main__":
    main()
