from __future__ import annotations

import argparse
import logging
from pathlib import Path
import time
from typing import Sequence

from PIL import Image

from candlechart.input import BUTTON_MIDDLE

from .app_runtime import AppRuntime
from .hdi import HDIEvent, ScriptedHDISource
from .window_matrix import WindowMatrix

LOGGER = logging.getLogger(__name__)


def build_zoom_gesture(lines: float, *, button: int = BUTTON_MIDDLE, window_id: str = "headless") -> list[HDIEvent]:
    """Press the zoom button, scroll by `lines` wheel notches, release."""
    ts = time.time_ns()
    return [
        HDIEvent(1, ts, window_id, "mouse", "click", "OK", {"button": button, "phase": "down"}),
        HDIEvent(2, ts + 1, window_id, "mouse", "scroll", "OK", {"delta_x": 0.0, "delta_y": float(lines), "delta_mode": "lines"}),
        HDIEvent(3, ts + 2, window_id, "mouse", "click", "OK", {"button": button, "phase": "up"}),
    ]


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="candlechart")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run-app", help="Run an app protocol folder (app.toml + entrypoint) headless.")
    run.add_argument("app_dir", type=Path)
    run.add_argument("--ticks", type=int, default=3, help="Max app-loop ticks.")
    run.add_argument("--fps", type=int, default=60)
    run.add_argument("--width", type=int, default=960)
    run.add_argument("--height", type=int, default=540)
    run.add_argument(
        "--zoom-lines",
        type=float,
        default=None,
        help="Script a middle-button wheel zoom of this many lines before the first tick.",
    )
    run.add_argument("--out", type=Path, default=None, help="Write the final frame to this PNG path.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "run-app":
        if args.width <= 0 or args.height <= 0:
            parser.error("width/height must be > 0")
        matrix = WindowMatrix(height=args.height, width=args.width)
        events = build_zoom_gesture(args.zoom_lines) if args.zoom_lines is not None else []
        runtime = AppRuntime(matrix=matrix, hdi=ScriptedHDISource(events))
        manifest = runtime.run(args.app_dir, max_ticks=args.ticks, target_fps=args.fps)
        if args.out is not None:
            args.out.parent.mkdir(parents=True, exist_ok=True)
            Image.fromarray(matrix.read_snapshot().numpy()).save(args.out)
            LOGGER.info("wrote %s", args.out)
        print(
            f"run complete: app={manifest.app_id} ticks={args.ticks} frames={runtime.frames_presented} "
            f"revision={matrix.revision}"
        )
        return 0

    parser.error(f"unsupported command: {args.command}")
    return 2
