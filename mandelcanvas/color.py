"""Blue-to-white coloring of escape-time results.

Both policies map a smoothed iteration count to an intensity in [0, 3]:
blue rises over [0, 1], green over [1, 2] and red over [2, 3], giving a
dark blue -> blue -> white ramp. Points inside the set are white.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple, Union

from mandelcanvas.errors import InvalidConfig
from mandelcanvas.escape import Bounded, DivergenceMeasure

Color = Tuple[int, int, int, int]

WHITE: Color = (255, 255, 255, 255)
SATURATED = 3.0

@dataclass(frozen=True)
class ExponentialGrowth:
    """``growth ** (n - target)`` with ``growth = 255 ** (1 / steps)``.

    ``target`` is the count that maps to full blue; ``steps`` is how many
    counts below it the blue fades to black.
    """

    target: float = 20.0
    steps: float = 25.0

    def __post_init__(self) -> None:
        if not self.steps > 0:
            raise InvalidConfig(f"steps must be > 0, got {self.steps!r}")

    @property
    def growth(self) -> float:
        return 255.0 ** (1.0 / self.steps)

    def intensity(self, n: float) -> float:
        exponent = (n - self.target) * math.log(self.growth)
        # Every channel is saturated at 3, avoid overflowing exp() past it.
        if exponent >= math.log(SATURATED):
            return SATURATED
        return math.exp(exponent)

@dataclass(frozen=True)
class ExponentialSaturation:
    """``ceiling * (1 - exp(-n / rate))``."""

    rate: float = 128.0
    ceiling: float = 3.0

    def __post_init__(self) -> None:
        if not self.rate > 0:
            raise InvalidConfig(f"rate must be > 0, got {self.rate!r}")

    def intensity(self, n: float) -> float:
        return self.ceiling * (1.0 - math.exp(-n / self.rate))

ColorPolicy = Union[ExponentialGrowth, ExponentialSaturation]

POLICIES = {
    "growth": ExponentialGrowth,
    "saturation": ExponentialSaturation,
}

def policy_from_name(name: str, **params: float) -> ColorPolicy:
    try:
        cls = POLICIES[name]
    except KeyError:
        raise InvalidConfig(f"color policy must be one of: {', '.join(POLICIES)}") from None
    try:
        return cls(**{k: float(v) for k, v in params.items()})
    except (TypeError, ValueError) as e:
        raise InvalidConfig(f"bad parameters for {name!r} policy: {e}") from e

def policy_name(policy: ColorPolicy) -> str:
    for name, cls in POLICIES.items():
        if isinstance(policy, cls):
            return name
    raise InvalidConfig(f"unknown color policy {policy!r}")

def clamp_channel(value: float) -> int:
    if math.isnan(value):
        return 0
    if value <= 0:
        return 0
    if value >= 255:
        return 255
    return int(round(value))

def color_of(measure: DivergenceMeasure, policy: ColorPolicy = ExponentialGrowth()) -> Color:
    if isinstance(measure, Bounded) or not math.isfinite(measure.value):
        return WHITE
    i = policy.intensity(measure.value)
    return (
        clamp_channel((i - 2.0) * 255.0),
        clamp_channel((i - 1.0) * 255.0),
        clamp_channel(i * 255.0),
        255,
    )
