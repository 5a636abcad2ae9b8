"""Band-parallel frame rendering on a process pool.

The frame is cut into contiguous row bands. Each worker renders whole bands
from the shared, read-only frame parameters installed by the pool
initializer; the parent copies every band into its own slice of the output,
so no two workers ever touch the same bytes.
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from typing import Dict, List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from mandelcanvas.config import RenderConfig, check_dimensions
from mandelcanvas.errors import InvalidConfig
from mandelcanvas.frame import CHANNELS, render_rows
from mandelcanvas.util.logging_setup import get_logger, logging_initialiser
from mandelcanvas.viewport import ViewportTransform

_G: Dict[str, object] = {}

def _init_worker(width, height, transform, config, log_queue, log_level):
    _G["width"] = width
    _G["height"] = height
    _G["transform"] = transform
    _G["config"] = config
    logging_initialiser(log_queue, log_level)

def _render_band(y0_y1: Tuple[int, int]) -> Tuple[int, np.ndarray]:
    y0, y1 = y0_y1
    band = render_rows(y0, y1, _G["width"], _G["height"], _G["transform"], _G["config"])
    get_logger().debug("Rendered rows %s..%s/%s", y0, y1, _G["height"])
    return y0, band

def split_bands(height: int, band_height: int) -> List[Tuple[int, int]]:
    if band_height < 1:
        raise InvalidConfig(f"band_height must be >= 1, got {band_height!r}")
    bands: List[Tuple[int, int]] = []
    y = 0
    while y < height:
        y1 = min(height, y + band_height)
        bands.append((y, y1))
        y = y1
    return bands

def render_parallel(
    width: int,
    height: int,
    transform: ViewportTransform,
    config: RenderConfig,
    *,
    workers: Optional[int] = None,
    band_height: int = 32,
    log_queue=None,
    log_level: int = logging.INFO,
    progress: bool = False,
) -> bytes:
    """Render a frame across ``workers`` processes; the bytes match ``frame.render``."""
    check_dimensions(width, height)
    transform.validate()
    if workers is not None and workers < 1:
        raise InvalidConfig(f"workers must be >= 1, got {workers!r}")
    bands = split_bands(height, band_height)

    logger = get_logger()
    logger.info("Parallel render start size=%sx%s bands=%s workers=%s", width, height, len(bands), workers or "auto")

    buf = np.zeros(width * height * CHANNELS, dtype=np.uint8)
    row_bytes = width * CHANNELS

    with ProcessPoolExecutor(
        max_workers=workers,
        initializer=_init_worker,
        initargs=(width, height, transform, config, log_queue, log_level),
    ) as pool:
        results = pool.map(_render_band, bands)
        if progress:
            results = tqdm(results, total=len(bands), desc="bands", unit="band")
        for y0, band in results:
            start = y0 * row_bytes
            buf[start:start + band.shape[0]] = band

    logger.info("Parallel render done size=%sx%s", width, height)
    return buf.tobytes()
