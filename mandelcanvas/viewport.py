from __future__ import annotations

import math
from dataclasses import dataclass

from mandelcanvas.errors import InvalidScale

REFERENCES = ("fixed", "height")
CENTERED_SCALE = 0.4

@dataclass(frozen=True)
class ViewportTransform:
    """Pan/zoom mapping from pixel space to the complex plane.

    With ``reference="fixed"`` one plane unit spans ``base_scale * scale``
    pixels. With ``reference="height"`` it spans ``height * scale`` pixels,
    so the framing follows the image height instead of a constant.
    """

    offset_x: float = 0.0
    offset_y: float = 0.0
    scale: float = 1.0
    reference: str = "fixed"

    def __post_init__(self) -> None:
        if self.reference not in REFERENCES:
            raise ValueError(f"reference must be one of: {', '.join(REFERENCES)}")

    @classmethod
    def centered(cls, width: int, height: int, scale: float = CENTERED_SCALE) -> "ViewportTransform":
        # Set sits two thirds across and half way down, sized to the height.
        return cls(offset_x=2 * width / 3, offset_y=height / 2, scale=scale, reference="height")

    def validate(self) -> None:
        if not math.isfinite(self.scale) or self.scale <= 0:
            raise InvalidScale(f"scale must be a finite value > 0, got {self.scale!r}")

    def unit(self, height: int, base_scale: float) -> float:
        if self.reference == "height":
            return height * self.scale
        return base_scale * self.scale

def map_pixel(x: int, y: int, width: int, height: int, transform: ViewportTransform, base_scale: float = 256.0) -> complex:
    if not (0 <= x < width and 0 <= y < height):
        raise ValueError(f"pixel ({x}, {y}) outside {width}x{height}")
    unit = transform.unit(height, base_scale)
    return complex((x - transform.offset_x) / unit, (y - transform.offset_y) / unit)
