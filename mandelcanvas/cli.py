from __future__ import annotations

import argparse
import json
import os
from typing import Any, Dict, Optional

from mandelcanvas.color import POLICIES
from mandelcanvas.config import load_config, normalise_config
from mandelcanvas.errors import RenderError
from mandelcanvas.pipeline import render_to_file, request_from_config
from mandelcanvas.util.logging_setup import configure_logging, create_log_queue, get_logger, level_from_name, start_queue_listener
from mandelcanvas.util.manifest import build_manifest, git_commit, write_manifest
from mandelcanvas.viewport import REFERENCES

# CLI flag dest -> config key, applied only when the flag is given.
OVERRIDES = {
    "width": "width",
    "height": "height",
    "offset_x": "offset_x",
    "offset_y": "offset_y",
    "scale": "scale",
    "reference": "reference",
    "max_iterations": "max_iterations",
    "bailout": "bailout_radius",
    "policy": "color_policy",
    "workers": "workers",
    "band_height": "band_height",
    "output": "output",
}

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mandelcanvas", description="Smooth escape-time Mandelbrot renderer producing RGBA frames.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. If omitted, built-in defaults are used.")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default="render.log", help="Log file path (rotating). Set empty to disable file logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Render one frame to a PNG file.")
    r.add_argument("--width", type=int, default=None, help="Image width in pixels.")
    r.add_argument("--height", type=int, default=None, help="Image height in pixels.")
    r.add_argument("--offset-x", type=float, default=None, help="Pixel column of the plane origin.")
    r.add_argument("--offset-y", type=float, default=None, help="Pixel row of the plane origin.")
    r.add_argument("--scale", type=float, default=None, help="Zoom factor (> 0). Defaults to 1, or 0.4 with --centered.")
    r.add_argument("--reference", type=str, default=None, choices=list(REFERENCES), help="Unit of the viewport: fixed base scale or image height.")
    r.add_argument("--centered", action="store_true", help="Frame the whole set relative to the image height (ignores offsets).")
    r.add_argument("--max-iterations", type=int, default=None, help="Iteration budget per pixel.")
    r.add_argument("--bailout", type=float, default=None, help="Bailout radius (> 1).")
    r.add_argument("--policy", type=str, default=None, choices=sorted(POLICIES), help="Color intensity policy.")
    r.add_argument("--workers", type=int, default=None, help="Worker processes; 1 renders in-process.")
    r.add_argument("--band-height", type=int, default=None, help="Rows per worker task.")
    r.add_argument("--output", type=str, default=None, help="Output PNG path.")
    r.add_argument("--manifest", type=str, default=os.path.join("artifacts", "run.json"), help="Run manifest path. Set empty to skip.")
    r.add_argument("--progress", action="store_true", help="Show a progress bar over rendered bands.")

    sub.add_parser("info", help="Log the resolved configuration and exit.")

    return p

def apply_overrides(cfg: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    out = dict(cfg)
    for dest, key in OVERRIDES.items():
        value = getattr(args, dest, None)
        if value is not None:
            out[key] = value
    if getattr(args, "centered", False):
        out["centered"] = True
    return out

def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    log_level = level_from_name(args.log_level)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None
    listener_logger = configure_logging(level=log_level, console=True, log_file=log_file)

    queue = create_log_queue()
    listener = start_queue_listener(queue, listener_logger)

    logger = get_logger()

    try:
        cfg = normalise_config(apply_overrides(load_config(args.config), args))

        if args.cmd == "info":
            request = request_from_config(cfg)
            logger.info("Resolved config %s", json.dumps(cfg, sort_keys=True))
            logger.info("Transform %s", request.transform)
            logger.info("Render config %s", request.config)
            return 0

        if args.cmd == "render":
            result = render_to_file(cfg=cfg, log_queue=queue, log_level=log_level, progress=args.progress)
            if args.manifest:
                manifest = build_manifest(config=cfg, result=result, commit=git_commit())
                write_manifest(args.manifest, manifest)
                logger.info("Run manifest written: %s", args.manifest)
            return 0

        raise RuntimeError("Unknown command.")
    except RenderError as e:
        logger.error("Invalid render input: %s", e)
        return 2
    finally:
        listener.stop()
