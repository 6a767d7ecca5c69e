"""Path tracing integrator for Monte Carlo light transport.

This module implements the path evaluator and the per-pixel estimator.

A path starts at the camera and bounces off surfaces according to their
material until it escapes to the sky, is absorbed, or runs out of bounces.
The light it carries is the sky color at the escape point multiplied by the
attenuation of every surface along the way. A path that is absorbed or still
bouncing after max_depth steps contributes black.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Iterative evaluation with a bounded loop (no recursion)
    - Sky gradient background (white at the horizon, blue overhead)
    - Gamma-2 transform and 8-bit quantization of averaged samples
    - Row-batch rendering with one seeded random stream per pixel

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.integrator import trace_ray
    >>> from pathtracer.scene.manager import Scene
    >>>
    >>> Scene().upload()
    >>> trace_ray((0, 0, 0), (0, 1, 0), depth=10)  # Pure sky blue
    (0.5, 0.7..., 1.0)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.camera.thin_lens import (
    MAX_IMAGE_WIDTH,
    get_image_width,
    get_max_depth,
    get_pixel_samples_scale,
    get_ray,
    get_samples_per_pixel,
)
from pathtracer.core.interval import INFINITY, Interval, interval_clamp
from pathtracer.core.ray import normalize
from pathtracer.core.sampling import MAX_STREAMS, normalize_seed, seed_stream
from pathtracer.materials.base import MaterialKind, Scatter
from pathtracer.materials.dielectric import scatter_dielectric
from pathtracer.materials.lambertian import scatter_lambertian
from pathtracer.materials.metal import scatter_metal
from pathtracer.scene.intersection import SceneHitRecord, intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Lower bound of accepted hit distances, avoids re-hitting the surface a
# scattered ray starts on ("shadow acne")
T_MIN = 0.001

# Sky gradient end points
HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
ZENITH_COLOR = vec3(0.5, 0.7, 1.0)

# Byte quantization keeps channels below 1.0 so 256 * c never reaches 256
BYTE_INTENSITY_MIN = 0.0
BYTE_INTENSITY_MAX = 0.999

# Rows rendered per kernel launch
MAX_ROWS_PER_BATCH = MAX_STREAMS // MAX_IMAGE_WIDTH

# Output bytes for one batch of rows: [row, column] -> (r, g, b)
_row_buffer = ti.Vector.field(3, dtype=ti.i32, shape=(MAX_ROWS_PER_BATCH, MAX_IMAGE_WIDTH))

# Result of the last trace_ray call
_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Background and Pixel Transform
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky color seen along ``direction``.

    Linearly blends white and sky blue by a = 0.5 * (unit_direction.y + 1),
    so straight down is pure white and straight up is pure sky blue.
    """
    unit_direction = normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * HORIZON_COLOR + a * ZENITH_COLOR


@ti.func
def linear_to_gamma(linear_component: ti.f32) -> ti.f32:
    """Apply the gamma-2 transform: sqrt for positive values, 0 otherwise."""
    result = 0.0
    if linear_component > 0.0:
        result = ti.sqrt(linear_component)
    return result


@ti.func
def to_byte(component: ti.f32) -> ti.i32:
    """Quantize a display-space channel to an integer in [0, 255]."""
    intensity = Interval(min=BYTE_INTENSITY_MIN, max=BYTE_INTENSITY_MAX)
    return ti.cast(256.0 * interval_clamp(intensity, component), ti.i32)


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    rec: SceneHitRecord,
    incident_direction: vec3,
    stream: ti.i32,
) -> Scatter:
    """Dispatch to the scatter function of the hit sphere's material.

    Args:
        rec: The scene hit record, carrying the material of the hit sphere.
        incident_direction: The incoming ray direction.
        stream: Random stream index.

    Returns:
        The Scatter produced by the material. An unknown material tag
        absorbs the ray.
    """
    result = Scatter(
        did_scatter=0,
        origin=rec.point,
        direction=vec3(0.0, 0.0, 0.0),
        attenuation=vec3(0.0, 0.0, 0.0),
    )

    if rec.material_kind == int(MaterialKind.LAMBERTIAN):
        result = scatter_lambertian(rec.albedo, rec.point, rec.normal, stream)

    elif rec.material_kind == int(MaterialKind.METAL):
        result = scatter_metal(
            rec.albedo, rec.material_param, incident_direction, rec.point, rec.normal, stream
        )

    elif rec.material_kind == int(MaterialKind.DIELECTRIC):
        result = scatter_dielectric(
            rec.albedo,
            rec.material_param,
            incident_direction,
            rec.point,
            rec.normal,
            rec.front_face,
            stream,
        )

    return result


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(ray_origin: vec3, ray_direction: vec3, depth: ti.i32, stream: ti.i32) -> vec3:
    """Estimate the light arriving along a ray.

    Evaluates the path iteratively: each step intersects the current ray with
    the scene, then either finishes (escape to the sky, absorption) or
    multiplies the running attenuation by the material's and continues with
    the scattered ray. The result equals the recursive formulation
    attenuation_1 * ... * attenuation_k * background.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (any length).
        depth: Remaining bounce budget. depth <= 0 yields black.
        stream: Random stream index.

    Returns:
        The estimated linear RGB color.
    """
    color = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(1.0, 1.0, 1.0)

    origin = ray_origin
    direction = ray_direction

    # Active flag for path continuation (Taichi doesn't support break in ti.func loops)
    active = 1

    for _ in range(depth):
        if active == 1:
            rec = intersect_scene(origin, direction, Interval(min=T_MIN, max=INFINITY))

            if rec.hit == 0:
                # Ray escaped to the sky
                color = attenuation * background_color(direction)
                active = 0
            else:
                scatter = _scatter_material(rec, direction, stream)

                if scatter.did_scatter == 0:
                    # Absorbed
                    active = 0
                else:
                    attenuation *= scatter.attenuation
                    origin = scatter.origin
                    direction = scatter.direction

    return color


@ti.func
def sample_pixel(pixel_i: ti.i32, pixel_j: ti.i32, stream: ti.i32) -> tm.ivec3:
    """Estimate pixel (i, j) and convert it to display bytes.

    Averages samples_per_pixel jittered paths, applies the gamma-2 transform
    and quantizes each channel to [0, 255].

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        stream: Random stream index, already seeded.

    Returns:
        The pixel's (r, g, b) bytes.
    """
    pixel_color = vec3(0.0, 0.0, 0.0)
    max_depth = get_max_depth()

    for _ in range(get_samples_per_pixel()):
        ray = get_ray(pixel_i, pixel_j, stream)
        pixel_color += ray_color(ray.origin, ray.direction, max_depth, stream)

    pixel_color *= get_pixel_samples_scale()

    return tm.ivec3(
        to_byte(linear_to_gamma(pixel_color.x)),
        to_byte(linear_to_gamma(pixel_color.y)),
        to_byte(linear_to_gamma(pixel_color.z)),
    )


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def render_rows(row_start: ti.i32, row_count: ti.i32, seed: ti.i32):
    """Render ``row_count`` image rows starting at ``row_start``.

    Every pixel seeds its own random stream from (seed, pixel index), so a
    pixel's value does not depend on the batch size, the order pixels run in,
    or the backend's thread scheduling.

    Args:
        row_start: First image row to render (0 = top).
        row_count: Number of rows to render, at most MAX_ROWS_PER_BATCH.
        seed: Render seed.
    """
    width = get_image_width()
    for r, i in ti.ndrange(row_count, width):
        j = row_start + r
        stream = r * width + i
        seed_stream(stream, seed, j * width + i)
        _row_buffer[r, i] = sample_pixel(i, j, stream)


@ti.kernel
def _trace_ray_kernel(origin: vec3, direction: vec3, depth: ti.i32, seed: ti.i32):
    # Single-iteration outer loop keeps the bounce loop serial
    for _ in range(1):
        seed_stream(0, seed, 0)
        _trace_result[None] = ray_color(origin, direction, depth, 0)


# =============================================================================
# Public Helpers
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Evaluate a single path against the uploaded scene.

    This is a Python-callable function for testing and debugging. For
    rendering images, use pathtracer.core.renderer.

    Args:
        origin: Ray origin.
        direction: Ray direction.
        depth: Bounce budget.
        seed: Seed for the path's random stream.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    _trace_ray_kernel(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        depth,
        normalize_seed(seed),
    )
    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def get_row_buffer(row_count: int, width: int) -> np.ndarray:
    """Copy the rendered bytes of the last batch to a NumPy array.

    Args:
        row_count: Number of rows rendered in the batch.
        width: Image width in pixels.

    Returns:
        An int32 array of shape (row_count, width, 3).
    """
    return _row_buffer.to_numpy()[:row_count, :width]
