from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from mandelcanvas.config import RenderRequest, render_config_from_config, transform_from_config
from mandelcanvas.frame import render
from mandelcanvas.image import save_png
from mandelcanvas.renderers.bands import render_parallel
from mandelcanvas.util.logging_setup import get_logger

def render_request(
    request: RenderRequest,
    *,
    workers: int = 1,
    band_height: int = 32,
    log_queue=None,
    log_level: int = logging.INFO,
    progress: bool = False,
) -> bytes:
    """Serve one request, in-process for a single worker and on a pool otherwise."""
    if workers <= 1:
        return render(request.width, request.height, request.transform, config=request.config)
    return render_parallel(
        request.width, request.height, request.transform, request.config,
        workers=workers, band_height=band_height,
        log_queue=log_queue, log_level=log_level, progress=progress,
    )

def request_from_config(cfg: Dict[str, Any]) -> RenderRequest:
    return RenderRequest(
        width=cfg["width"],
        height=cfg["height"],
        transform=transform_from_config(cfg),
        config=render_config_from_config(cfg),
    )

def render_to_file(
    *,
    cfg: Dict[str, Any],
    log_queue=None,
    log_level: int = logging.INFO,
    progress: bool = False,
    output: Optional[str] = None,
) -> Dict[str, Any]:
    logger = get_logger()
    request = request_from_config(cfg)
    output = output or cfg["output"]

    logger.info("Render start size=%sx%s transform=%s iter=%s policy=%s workers=%s",
                request.width, request.height, request.transform,
                request.config.max_iterations, type(request.config.color_policy).__name__, cfg["workers"])
    start = time.time()
    buf = render_request(
        request, workers=cfg["workers"], band_height=cfg["band_height"],
        log_queue=log_queue, log_level=log_level, progress=progress,
    )
    elapsed = time.time() - start
    path = save_png(buf, request.width, request.height, output)
    logger.info("Saved frame -> %s (%.2fs)", path, elapsed)
    return {"output": path, "width": request.width, "height": request.height, "seconds": elapsed, "bytes": len(buf)}
