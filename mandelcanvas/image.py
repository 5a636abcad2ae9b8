from __future__ import annotations

import os

from PIL import Image

from mandelcanvas.errors import InvalidDimensions
from mandelcanvas.frame import CHANNELS

def to_image(buffer: bytes, width: int, height: int) -> Image.Image:
    if len(buffer) != width * height * CHANNELS:
        raise InvalidDimensions(f"buffer holds {len(buffer)} bytes, expected {width * height * CHANNELS} for {width}x{height}")
    return Image.frombytes("RGBA", (width, height), bytes(buffer))

def save_png(buffer: bytes, width: int, height: int, path: str) -> str:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    to_image(buffer, width, height).save(path, format="PNG", optimize=True)
    return path
