"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    ray: Ray data structure and vector algebra helpers
    interval: Closed/open parameter ranges used to bound hit distances
    sampling: Explicit, seedable random streams and sampling helpers
    integrator: Iterative ray_color and the per-row render kernel
    renderer: Host-side render loop streaming rows to an output sink

The integrator estimates each pixel by averaging samples_per_pixel paths,
each bouncing at most max_depth times before it is cut off.
"""

from .interval import (
    EMPTY_BOUNDS,
    INFINITY,
    UNIVERSE_BOUNDS,
    Interval,
    interval_clamp,
    interval_contains,
    interval_size,
    interval_surrounds,
    make_interval,
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
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# Note: sampling, integrator and renderer declare Taichi fields and are NOT
# imported here, so that importing the package does not require ti.init().
# Import them directly, e.g. from pathtracer.core.renderer import Renderer.

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
    "Interval",
    "make_interval",
    "interval_size",
    "interval_contains",
    "interval_surrounds",
    "interval_clamp",
    "INFINITY",
    "UNIVERSE_BOUNDS",
    "EMPTY_BOUNDS",
]
