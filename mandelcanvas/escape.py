"""Escape-time iteration of z -> z**2 + c with a smoothed iteration count."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

LOG2 = math.log(2.0)

class Bounded:
    """The point did not escape within the iteration budget."""

    _instance = None

    def __new__(cls) -> "Bounded":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "BOUNDED"

    def __reduce__(self):
        return (Bounded, ())

BOUNDED = Bounded()

@dataclass(frozen=True)
class Escaped:
    """Smoothed iteration count at which |z| passed the bailout radius."""

    value: float

DivergenceMeasure = Union[Bounded, Escaped]

def smooth_count(n: int, dist: float, bailout_radius: float) -> float:
    if dist <= 1.0:
        return float(n)
    ratio = math.log(dist) / math.log(bailout_radius)
    if not ratio > 0.0:
        return float(n)
    return n - math.log(ratio) / LOG2

def escape(point: complex, max_iterations: int = 1000, bailout_radius: float = 256.0) -> DivergenceMeasure:
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be >= 1, got {max_iterations!r}")
    if not bailout_radius > 1.0:
        raise ValueError(f"bailout_radius must be > 1, got {bailout_radius!r}")

    cr, ci = point.real, point.imag
    threshold = bailout_radius * bailout_radius
    a = 0.0
    b = 0.0
    for n in range(max_iterations):
        a, b = a * a - b * b + cr, 2.0 * a * b + ci
        mag2 = a * a + b * b
        if mag2 > threshold:
            return Escaped(smooth_count(n, math.sqrt(mag2), bailout_radius))
    return BOUNDED
