"""Color mapping of divergence measures."""

import math

import numpy as np
import pytest

from mandelcanvas.color import (
    WHITE,
    ExponentialGrowth,
    ExponentialSaturation,
    clamp_channel,
    color_of,
    policy_from_name,
    policy_name,
)
from mandelcanvas.errors import InvalidConfig
from mandelcanvas.escape import BOUNDED, Escaped


def test_bounded_is_opaque_white():
    assert color_of(BOUNDED) == (255, 255, 255, 255)
    assert color_of(BOUNDED, ExponentialSaturation()) == WHITE


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_non_finite_measure_is_treated_as_bounded(value):
    assert color_of(Escaped(value)) == WHITE


def test_growth_target_is_full_blue():
    assert color_of(Escaped(20.0)) == (0, 0, 255, 255)


def test_growth_fades_to_black_over_steps():
    # growth ** -25 == 1 / 255
    assert color_of(Escaped(-5.0)) == (0, 0, 1, 255)
    assert color_of(Escaped(-100.0)) == (0, 0, 0, 255)


def test_growth_saturates_to_white_without_overflow():
    assert color_of(Escaped(1000.0)) == WHITE
    assert color_of(Escaped(1e12)) == WHITE


def test_growth_constants():
    policy = ExponentialGrowth()
    assert policy.growth == pytest.approx(255.0 ** (1 / 25))
    assert policy.intensity(21.0) == pytest.approx(policy.growth)


def test_saturation_policy():
    policy = ExponentialSaturation()
    assert color_of(Escaped(0.0), policy) == (0, 0, 0, 255)
    assert policy.intensity(128.0) == pytest.approx(3 * (1 - math.exp(-1)))
    assert color_of(Escaped(1e6), policy) == WHITE


@pytest.mark.parametrize("policy", [ExponentialGrowth(), ExponentialSaturation()])
def test_continuous_in_n(policy):
    previous = None
    for n in np.arange(0.0, 60.0, 0.01):
        color = np.array(color_of(Escaped(float(n)), policy), dtype=int)
        if previous is not None:
            assert np.max(np.abs(color - previous)) <= 3
        previous = color


@pytest.mark.parametrize("policy", [ExponentialGrowth(), ExponentialSaturation()])
def test_alpha_always_opaque(policy):
    for n in (-10.0, 0.0, 3.7, 20.0, 45.0, 500.0):
        assert color_of(Escaped(n), policy)[3] == 255


def test_clamp_channel():
    assert clamp_channel(-3.0) == 0
    assert clamp_channel(300.0) == 255
    assert clamp_channel(254.6) == 255
    assert clamp_channel(12.2) == 12
    assert clamp_channel(math.nan) == 0


def test_policy_lookup():
    assert policy_from_name("growth") == ExponentialGrowth()
    assert policy_from_name("saturation", rate=64) == ExponentialSaturation(rate=64.0)
    assert policy_name(ExponentialSaturation()) == "saturation"
    with pytest.raises(InvalidConfig):
        policy_from_name("rainbow")
    with pytest.raises(InvalidConfig):
        policy_from_name("growth", steps=0)
    with pytest.raises(InvalidConfig):
        policy_from_name("growth", hue=1)
