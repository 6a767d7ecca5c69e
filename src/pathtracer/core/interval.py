"""Real-valued intervals for ray parameter bounds and color clamping.

An Interval is used in two places: restricting which ray parameters count as
valid hits (with the exclusive ``interval_surrounds`` test, so a hit exactly
on either bound is rejected) and clamping color channels before quantization.

``min <= max`` is assumed, not enforced. The default interval is the
unbounded one.

Example:
    >>> ray_t = Interval(min=0.001, max=INFINITY)
    >>> # Inside a Taichi function:
    >>> # if interval_surrounds(ray_t, t): ...
"""

import taichi as ti

# Effectively unbounded for 32-bit ray parameters and colors
INFINITY = 1.0e30

UNIVERSE_BOUNDS = (-INFINITY, INFINITY)
EMPTY_BOUNDS = (INFINITY, -INFINITY)


@ti.dataclass
class Interval:
    """A closed range [min, max] of real values.

    Attributes:
        min: The lower bound.
        max: The upper bound.
    """

    min: ti.f32
    max: ti.f32


def make_interval(
    lower: float = UNIVERSE_BOUNDS[0],
    upper: float = UNIVERSE_BOUNDS[1],
) -> Interval:
    """Create an Interval from Python scope, unbounded by default."""
    return Interval(min=lower, max=upper)


@ti.func
def interval_size(interval: Interval) -> ti.f32:
    """Return max - min."""
    return interval.max - interval.min


@ti.func
def interval_contains(interval: Interval, x: ti.f32) -> ti.i32:
    """Inclusive containment test: min <= x <= max."""
    result = 0
    if interval.min <= x and x <= interval.max:
        result = 1
    return result


@ti.func
def interval_surrounds(interval: Interval, x: ti.f32) -> ti.i32:
    """Exclusive containment test: min < x < max."""
    result = 0
    if interval.min < x and x < interval.max:
        result = 1
    return result


@ti.func
def interval_clamp(interval: Interval, x: ti.f32) -> ti.f32:
    """Saturate x to [min, max]."""
    return ti.min(ti.max(x, interval.min), interval.max)
