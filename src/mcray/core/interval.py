"""Closed numeric ranges used to bound valid hit distances.

An Interval narrows the search window during nearest-hit resolution. The
empty interval has min > max and contains nothing; every helper below treats
that case accordingly without special-casing it.

Example:
    >>> @ti.kernel
    ... def k():
    ...     ray_t = make_interval(0.001, tm.inf)
    ...     assert interval_surrounds(ray_t, 1.0)
"""

import taichi as ti
import taichi.math as tm

# Clamp range applied to gamma-corrected intensities before quantizing
INTENSITY = (0.000, 0.999)


@ti.dataclass
class Interval:
    """A range [min, max] on the real line.

    Attributes:
        min: Lower bound.
        max: Upper bound. May be below min, in which case the interval is empty.
    """

    min: ti.f32
    max: ti.f32


@ti.func
def make_interval(lo: ti.f32, hi: ti.f32) -> Interval:
    return Interval(min=lo, max=hi)


@ti.func
def empty_interval() -> Interval:
    """The canonical empty interval (+inf, -inf)."""
    return Interval(min=tm.inf, max=-tm.inf)


@ti.func
def universe_interval() -> Interval:
    """The interval spanning the whole real line."""
    return Interval(min=-tm.inf, max=tm.inf)


@ti.func
def interval_size(ray_t: Interval) -> ti.f32:
    return ray_t.max - ray_t.min


@ti.func
def interval_contains(ray_t: Interval, x: ti.f32) -> ti.i32:
    """Closed membership test: min <= x <= max."""
    return ray_t.min <= x and x <= ray_t.max


@ti.func
def interval_surrounds(ray_t: Interval, x: ti.f32) -> ti.i32:
    """Open membership test: min < x < max.

    Hits exactly on a boundary are rejected so a ray leaving a surface does
    not immediately hit it again.
    """
    return ray_t.min < x and x < ray_t.max


@ti.func
def interval_clamp(ray_t: Interval, x: ti.f32) -> ti.f32:
    result = x
    if x < ray_t.min:
        result = ray_t.min
    elif x > ray_t.max:
        result = ray_t.max
    return result
