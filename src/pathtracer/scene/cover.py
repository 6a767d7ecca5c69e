"""Ready-made scenes.

This module provides factory functions for the two classic sphere scenes:

- The cover scene: a large grey ground sphere, a 22x22 grid of small
  randomly-placed spheres with random materials, and three large spheres
  (glass, matte brown, polished metal) in the middle.
- The material showcase: a small row of spheres demonstrating each material,
  including a hollow glass sphere (a glass sphere with an air bubble inside).

Each factory returns a (Scene, Camera) pair ready to pass to render().

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.cover import create_cover_scene
    >>> from pathtracer.core.renderer import render
    >>>
    >>> scene, camera = create_cover_scene(seed=7)
    >>> with open("image.ppm", "wb") as f:
    ...     render(scene, camera, f)
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from pathtracer.camera.thin_lens import Camera
from pathtracer.materials import Dielectric, Lambertian, Metal
from pathtracer.scene.manager import Scene

logger = logging.getLogger(__name__)

# =============================================================================
# Cover Scene Parameters
# =============================================================================


@dataclass(frozen=True)
class CoverSceneParams:
    """Parameters for configuring the cover scene.

    All parameters have defaults matching the classic cover image.

    Attributes:
        grid_extent: Small spheres are placed for a, b in [-extent, extent).
        small_radius: Radius of the small spheres.
        jitter: Maximum random offset of a small sphere within its grid cell.
        clearance: Small spheres closer than this to (4, 0.2, 0) are skipped.
        diffuse_probability: Draws below this give a Lambertian sphere.
        metal_probability: Draws below this (and above diffuse_probability)
            give a Metal sphere; the rest are glass.
        image_width: Image width of the returned camera.
        samples_per_pixel: Samples per pixel of the returned camera.
        max_depth: Bounce limit of the returned camera.

    Example:
        >>> params = CoverSceneParams(image_width=1200, samples_per_pixel=500)
        >>> scene, camera = create_cover_scene(seed=0, params=params)
    """

    grid_extent: int = 11
    small_radius: float = 0.2
    jitter: float = 0.9
    clearance: float = 0.9
    diffuse_probability: float = 0.8
    metal_probability: float = 0.95
    image_width: int = 400
    samples_per_pixel: int = 100
    max_depth: int = 50


# =============================================================================
# Scene Constants
# =============================================================================

GROUND_ALBEDO = (0.5, 0.5, 0.5)
GLASS_INDEX = 1.5

# Large spheres of the cover image
LARGE_GLASS_CENTER = (0.0, 1.0, 0.0)
LARGE_MATTE_CENTER = (-4.0, 1.0, 0.0)
LARGE_MATTE_ALBEDO = (0.4, 0.2, 0.1)
LARGE_METAL_CENTER = (4.0, 1.0, 0.0)
LARGE_METAL_ALBEDO = (0.7, 0.6, 0.5)

# Small spheres keep clear of the large metal sphere
CLEARANCE_POINT = (4.0, 0.2, 0.0)


# =============================================================================
# Scene Factories
# =============================================================================


def _random_material(rng: np.random.Generator, params: CoverSceneParams):
    choose_mat = rng.random()
    if choose_mat < params.diffuse_probability:
        albedo = rng.random(3) * rng.random(3)
        return Lambertian(albedo=tuple(float(c) for c in albedo))
    if choose_mat < params.metal_probability:
        albedo = rng.uniform(0.5, 1.0, 3)
        fuzz = rng.uniform(0.5, 1.0)
        return Metal(albedo=tuple(float(c) for c in albedo), fuzz=float(fuzz))
    return Dielectric(albedo=(1.0, 1.0, 1.0), refractive_index=GLASS_INDEX)


def create_cover_scene(
    seed: int = 0,
    params: CoverSceneParams = CoverSceneParams(),
) -> tuple[Scene, Camera]:
    """Create the cover scene with its camera.

    The random placement and materials of the small spheres come from a NumPy
    Generator seeded with ``seed``, so the same seed always builds the same
    scene.

    Args:
        seed: Seed for the scene's random layout.
        params: Tunable scene and camera parameters.

    Returns:
        Tuple of (scene, camera).
    """
    rng = np.random.default_rng(seed)
    scene = Scene()

    scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, Lambertian(albedo=GROUND_ALBEDO))

    extent = params.grid_extent
    for a in range(-extent, extent):
        for b in range(-extent, extent):
            material = _random_material(rng, params)
            center = (
                a + params.jitter * float(rng.random()),
                params.small_radius,
                b + params.jitter * float(rng.random()),
            )
            if math.dist(center, CLEARANCE_POINT) > params.clearance:
                scene.add_sphere(center, params.small_radius, material)

    scene.add_sphere(LARGE_GLASS_CENTER, 1.0, Dielectric(refractive_index=GLASS_INDEX))
    scene.add_sphere(LARGE_MATTE_CENTER, 1.0, Lambertian(albedo=LARGE_MATTE_ALBEDO))
    scene.add_sphere(LARGE_METAL_CENTER, 1.0, Metal(albedo=LARGE_METAL_ALBEDO, fuzz=0.0))

    camera = Camera(
        aspect_ratio=16.0 / 9.0,
        image_width=params.image_width,
        samples_per_pixel=params.samples_per_pixel,
        max_depth=params.max_depth,
        vfov=20.0,
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        defocus_angle=0.6,
        focus_dist=10.0,
    )

    logger.info("Created cover scene with %d spheres (seed=%d)", len(scene), seed)
    return scene, camera


def create_material_showcase_scene(
    image_width: int = 400,
    samples_per_pixel: int = 100,
    max_depth: int = 50,
) -> tuple[Scene, Camera]:
    """Create a small scene showing every material side by side.

    Contains a yellow-green ground, a matte blue center sphere, a hollow
    glass sphere on the left and a fuzzy gold metal sphere on the right.

    Args:
        image_width: Image width of the returned camera.
        samples_per_pixel: Samples per pixel of the returned camera.
        max_depth: Bounce limit of the returned camera.

    Returns:
        Tuple of (scene, camera).
    """
    scene = Scene()
    scene.add_sphere((0.0, -100.5, -1.0), 100.0, Lambertian(albedo=(0.8, 0.8, 0.0)))
    scene.add_sphere((0.0, 0.0, -1.2), 0.5, Lambertian(albedo=(0.1, 0.2, 0.5)))
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, Dielectric(refractive_index=GLASS_INDEX))
    scene.add_sphere((-1.0, 0.0, -1.0), 0.4, Dielectric(refractive_index=1.0 / GLASS_INDEX))
    scene.add_sphere((1.0, 0.0, -1.0), 0.5, Metal(albedo=(0.8, 0.6, 0.2), fuzz=1.0))

    camera = Camera(
        aspect_ratio=16.0 / 9.0,
        image_width=image_width,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        vfov=90.0,
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
    )

    logger.info("Created material showcase scene with %d spheres", len(scene))
    return scene, camera
