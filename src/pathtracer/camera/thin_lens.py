"""Thin-lens camera model for primary ray generation with depth of field.

This module implements a positionable camera that generates primary rays for
rendering. The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view specification
- Arbitrary aspect ratios
- Jittered sampling for anti-aliasing
- Defocus blur through a finite circular aperture

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits at focus_dist along -w. Objects on that plane are in
perfect focus; with a nonzero defocus_angle, ray origins are spread over a
disk of radius focus_dist * tan(defocus_angle / 2) around the camera center,
blurring everything off the focus plane.

Pixel (0, 0) is the top-left pixel: i counts columns left to right and j
counts rows top to bottom.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.thin_lens import Camera, setup_camera, get_ray
    >>>
    >>> camera = Camera(
    ...     aspect_ratio=16.0 / 9.0,
    ...     image_width=400,
    ...     vfov=20.0,
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     defocus_angle=0.6,
    ...     focus_dist=10.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(200, 112, 0)  # Ray through the image center
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtracer.core.ray import Ray, make_ray, vec3
from pathtracer.core.sampling import random_in_unit_disk, sample_square

# Widest image the row buffers can hold
MAX_IMAGE_WIDTH = 2048

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class Camera:
    """Configuration for a thin-lens (perspective) camera.

    Attributes:
        aspect_ratio: Ideal ratio of image width over height.
        image_width: Rendered image width in pixels.
        samples_per_pixel: Number of random samples averaged per pixel.
        max_depth: Maximum number of ray bounces into the scene.
        vfov: Vertical field of view in degrees.
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Camera-relative up direction (typically (0, 1, 0)).
        defocus_angle: Variation angle of rays through each pixel, in
            degrees. 0 gives a pinhole camera with everything in focus.
        focus_dist: Distance from lookfrom to the plane of perfect focus.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10
    max_depth: int = 10
    vfov: float = 90.0
    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    defocus_angle: float = 0.0
    focus_dist: float = 10.0

    @property
    def image_height(self) -> int:
        """Image height in pixels, at least 1."""
        return max(1, int(self.image_width / self.aspect_ratio))

    @property
    def pixel_samples_scale(self) -> float:
        """Color scale factor for a sum of pixel samples."""
        return 1.0 / self.samples_per_pixel

    def validate(self) -> None:
        """Check that the configuration describes a usable camera.

        Raises:
            ValueError: If any parameter is out of range or the view is
                degenerate (lookfrom == lookat, or vup parallel to the view
                direction).
        """
        if not math.isfinite(self.aspect_ratio) or self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if self.image_width <= 0:
            raise ValueError(f"image_width = {self.image_width} must be positive")
        if self.image_width > MAX_IMAGE_WIDTH:
            raise ValueError(
                f"image_width = {self.image_width} exceeds the maximum of {MAX_IMAGE_WIDTH}"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel = {self.samples_per_pixel} must be positive")
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must not be negative")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov = {self.vfov} must be in (0, 180) degrees")
        if not math.isfinite(self.focus_dist) or self.focus_dist <= 0.0:
            raise ValueError(f"focus_dist = {self.focus_dist} must be positive")
        if not math.isfinite(self.defocus_angle) or self.defocus_angle < 0.0:
            raise ValueError(f"defocus_angle = {self.defocus_angle} must not be negative")

        view = np.array(self.lookfrom, dtype=np.float64) - np.array(self.lookat, dtype=np.float64)
        if not np.all(np.isfinite(view)) or np.linalg.norm(view) == 0.0:
            raise ValueError("lookfrom and lookat must be distinct finite points")
        side = np.cross(np.array(self.vup, dtype=np.float64), view)
        if np.linalg.norm(side) < 1e-12:
            raise ValueError("vup must not be parallel to the view direction")


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

# Camera center (lookfrom)
_camera_center = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Viewport geometry for ray computation
_pixel00_loc = ti.Vector.field(3, dtype=ti.f32, shape=())  # Center of pixel (0, 0)
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Offset to pixel to the right
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Offset to pixel below

# Defocus disk
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_angle = ti.field(dtype=ti.f32, shape=())

# Image and sampling parameters
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())
_samples_per_pixel = ti.field(dtype=ti.i32, shape=())
_max_depth = ti.field(dtype=ti.i32, shape=())
_pixel_samples_scale = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: Camera) -> None:
    """Initialize camera state from configuration.

    Validates the camera, derives its basis and viewport geometry, and writes
    them to Taichi fields. Must be called before rendering.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the camera configuration is invalid.
    """
    camera.validate()

    image_width = camera.image_width
    image_height = camera.image_height

    # Viewport dimensions at the focus plane
    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h * camera.focus_dist
    viewport_width = viewport_height * (image_width / image_height)

    # Build orthonormal basis using NumPy (Python-side computation)
    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w = w / np.linalg.norm(w)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)
    v = np.cross(w, u)

    # Vectors across the horizontal and down the vertical viewport edges
    viewport_u = viewport_width * u
    viewport_v = viewport_height * -v

    pixel_delta_u = viewport_u / image_width
    pixel_delta_v = viewport_v / image_height

    viewport_upper_left = lookfrom - camera.focus_dist * w - viewport_u / 2.0 - viewport_v / 2.0
    pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    defocus_radius = camera.focus_dist * math.tan(math.radians(camera.defocus_angle / 2.0))

    _camera_center[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _pixel00_loc[None] = pixel00_loc.tolist()
    _pixel_delta_u[None] = pixel_delta_u.tolist()
    _pixel_delta_v[None] = pixel_delta_v.tolist()
    _defocus_disk_u[None] = (u * defocus_radius).tolist()
    _defocus_disk_v[None] = (v * defocus_radius).tolist()
    _defocus_angle[None] = camera.defocus_angle

    _image_width[None] = image_width
    _image_height[None] = image_height
    _samples_per_pixel[None] = camera.samples_per_pixel
    _max_depth[None] = camera.max_depth
    _pixel_samples_scale[None] = camera.pixel_samples_scale


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def defocus_disk_sample(stream: ti.i32) -> vec3:
    """Return a random point on the camera's defocus disk."""
    p = random_in_unit_disk(stream)
    return _camera_center[None] + p[0] * _defocus_disk_u[None] + p[1] * _defocus_disk_v[None]


@ti.func
def get_ray(pixel_i: ti.i32, pixel_j: ti.i32, stream: ti.i32) -> Ray:
    """Generate a jittered camera ray for pixel (i, j).

    The target is a random point inside the pixel's square on the viewport.
    The origin is the camera center, or a random point on the defocus disk
    when defocus_angle > 0.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        stream: Random stream index.

    Returns:
        A Ray whose direction is target - origin (not normalized).
    """
    offset = sample_square(stream)
    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(pixel_i, ti.f32) + offset[0]) * _pixel_delta_u[None]
        + (ti.cast(pixel_j, ti.f32) + offset[1]) * _pixel_delta_v[None]
    )

    ray_origin = _camera_center[None]
    if _defocus_angle[None] > 0.0:
        ray_origin = defocus_disk_sample(stream)

    return make_ray(ray_origin, pixel_sample - ray_origin)


@ti.func
def get_samples_per_pixel() -> ti.i32:
    return _samples_per_pixel[None]


@ti.func
def get_max_depth() -> ti.i32:
    return _max_depth[None]


@ti.func
def get_pixel_samples_scale() -> ti.f32:
    return _pixel_samples_scale[None]


@ti.func
def get_image_width() -> ti.i32:
    return _image_width[None]


# =============================================================================
# Utility Functions
# =============================================================================


def _as_tuple(vec) -> tuple[float, float, float]:
    return (float(vec[0]), float(vec[1]), float(vec[2]))


def get_camera_info() -> dict:
    """Get current camera state for debugging.

    Returns a dictionary with the derived camera geometry that can be
    inspected from Python. Useful for verifying camera setup.

    Returns:
        Dictionary with center, u, v, w, pixel00_loc, pixel_delta_u,
        pixel_delta_v, defocus_disk_u, defocus_disk_v (3-tuples) and
        image_width, image_height, samples_per_pixel, max_depth,
        defocus_angle.

    Raises:
        RuntimeError: If setup_camera has not been called yet.
    """
    if _image_width[None] == 0:
        raise RuntimeError("Camera has not been set up; call setup_camera() first")

    return {
        "center": _as_tuple(_camera_center[None]),
        "u": _as_tuple(_camera_u[None]),
        "v": _as_tuple(_camera_v[None]),
        "w": _as_tuple(_camera_w[None]),
        "pixel00_loc": _as_tuple(_pixel00_loc[None]),
        "pixel_delta_u": _as_tuple(_pixel_delta_u[None]),
        "pixel_delta_v": _as_tuple(_pixel_delta_v[None]),
        "defocus_disk_u": _as_tuple(_defocus_disk_u[None]),
        "defocus_disk_v": _as_tuple(_defocus_disk_v[None]),
        "defocus_angle": float(_defocus_angle[None]),
        "image_width": int(_image_width[None]),
        "image_height": int(_image_height[None]),
        "samples_per_pixel": int(_samples_per_pixel[None]),
        "max_depth": int(_max_depth[None]),
    }
