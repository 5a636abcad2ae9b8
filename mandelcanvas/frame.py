from __future__ import annotations

from dataclasses import replace
from typing import Optional

import numpy as np

from mandelcanvas.color import Color, color_of
from mandelcanvas.config import RenderConfig, check_dimensions
from mandelcanvas.escape import escape
from mandelcanvas.util.logging_setup import get_logger
from mandelcanvas.viewport import ViewportTransform, map_pixel

CHANNELS = 4

def pixel_color(x: int, y: int, width: int, height: int, transform: ViewportTransform, config: RenderConfig) -> Color:
    c = map_pixel(x, y, width, height, transform, config.base_scale)
    measure = escape(c, config.max_iterations, config.bailout_radius)
    return color_of(measure, config.color_policy)

def render_rows(
    y0: int,
    y1: int,
    width: int,
    height: int,
    transform: ViewportTransform,
    config: RenderConfig,
) -> np.ndarray:
    """Render rows ``[y0, y1)`` into a flat RGBA array of ``(y1 - y0) * width * 4`` bytes."""
    if not (0 <= y0 <= y1 <= height):
        raise ValueError(f"row band [{y0}, {y1}) outside 0..{height}")
    band = np.zeros((y1 - y0) * width * CHANNELS, dtype=np.uint8)
    for y in range(y0, y1):
        row_offset = (y - y0) * width
        for x in range(width):
            i = (row_offset + x) * CHANNELS
            band[i:i + CHANNELS] = pixel_color(x, y, width, height, transform, config)
    return band

def render(
    width: int,
    height: int,
    transform: ViewportTransform = ViewportTransform(),
    max_iterations: Optional[int] = None,
    config: Optional[RenderConfig] = None,
) -> bytes:
    """Render a full frame and return its row-major RGBA bytes.

    Inputs are validated before the buffer is allocated. ``max_iterations``
    overrides ``config.max_iterations`` when given.
    """
    check_dimensions(width, height)
    transform.validate()
    config = config or RenderConfig()
    if max_iterations is not None and max_iterations != config.max_iterations:
        config = replace(config, max_iterations=max_iterations)

    logger = get_logger()
    logger.debug("Frame render start size=%sx%s transform=%s iter=%s", width, height, transform, config.max_iterations)
    buf = render_rows(0, height, width, height, transform, config)
    logger.debug("Frame render done size=%sx%s", width, height)
    return buf.tobytes()
