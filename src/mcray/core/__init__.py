"""Core rendering module.

Components:
    ray: Ray data structure, vector math and random sampling
    interval: Closed real intervals used as ray parameter windows
    integrator: Radiance estimator and scanline render loop
    progress: Scanline progress reporting

All compute-intensive operations use Taichi kernels.
"""

from .interval import (
    INTENSITY,
    Interval,
    empty_interval,
    interval_clamp,
    interval_contains,
    interval_size,
    interval_surrounds,
    make_interval,
    universe_interval,
)
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_range,
    random_unit_vector,
    random_vec3,
    random_vec3_range,
    ray_at,
    reflect,
    refract,
    sample_unit_square,
    schlick_reflectance,
    vec3,
)

# Note: integrator is NOT imported here to avoid circular imports.
# Import directly from mcray.core.integrator when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_range",
    "random_vec3",
    "random_vec3_range",
    "random_unit_vector",
    "random_in_unit_disk",
    "sample_unit_square",
    "Interval",
    "INTENSITY",
    "make_interval",
    "empty_interval",
    "universe_interval",
    "interval_size",
    "interval_contains",
    "interval_surrounds",
    "interval_clamp",
]
