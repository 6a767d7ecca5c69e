"""Host-side scene container.

This module provides the Scene class, an ordered collection of spheres that
each carry their own material. Building a scene is pure Python; nothing is
written to Taichi fields until upload() is called, which the renderer does
before each render. The device scene is read-only while a render runs.

The Scene validates every primitive as it is added:
- Sphere centers must be finite and radii finite and strictly positive
- Materials must pass their own validate() (albedo in [0, 1], fuzz in [0, 1],
  positive refractive index)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials import Dielectric, Lambertian, Metal
    >>> from pathtracer.scene.manager import Scene
    >>> scene = Scene()
    >>> scene.add_sphere((0, -100.5, -1), 100, Lambertian(albedo=(0.8, 0.8, 0.0)))
    >>> scene.add_sphere((0, 0, -1), 0.5, Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3))
    >>> scene.add_sphere((1, 0, -1), 0.5, Dielectric(refractive_index=1.5))
    >>> scene.upload()
"""

import logging
import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from pathtracer.materials import Dielectric, Lambertian, Material, Metal
from pathtracer.scene.intersection import MAX_SPHERES, add_sphere, clear_scene

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SphereInfo:
    """A sphere in the scene together with its material.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere.
        material: The material owned by this sphere.
    """

    center: tuple[float, float, float]
    radius: float
    material: Material

    def to_dict(self) -> dict[str, Any]:
        return {
            "center": list(self.center),
            "radius": self.radius,
            "material": self.material.to_dict(),
        }


def _validate_center(center: Sequence[float]) -> tuple[float, float, float]:
    if len(center) != 3:
        raise ValueError(f"Sphere center must have 3 components, got {len(center)}")
    values = tuple(float(c) for c in center)
    if not all(math.isfinite(c) for c in values):
        raise ValueError(f"Sphere center {values} must be finite")
    return values


class Scene:
    """Ordered collection of spheres, each owning its material.

    Primitives are identified by their position in the collection; the same
    index is used on the device once the scene is uploaded.

    Example:
        >>> scene = Scene()
        >>> idx = scene.add_sphere((0, 0, -1), 0.5, Lambertian(albedo=(0.1, 0.2, 0.5)))
        >>> len(scene)
        1
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self._spheres: list[SphereInfo] = []

    def __len__(self) -> int:
        return len(self._spheres)

    def __iter__(self) -> Iterator[SphereInfo]:
        return iter(self._spheres)

    @property
    def spheres(self) -> tuple[SphereInfo, ...]:
        """The spheres in insertion order."""
        return tuple(self._spheres)

    def add_sphere(
        self,
        center: Sequence[float],
        radius: float,
        material: Material,
    ) -> int:
        """Add a sphere with its material to the scene.

        Args:
            center: The center of the sphere as (x, y, z).
            radius: The radius of the sphere. Must be finite and > 0.
            material: A Lambertian, Metal or Dielectric instance.

        Returns:
            The index of the new sphere.

        Raises:
            ValueError: If the center is not three finite numbers.
            ValueError: If the radius is not a positive finite number.
            ValueError: If the material is of an unknown type or invalid.
            RuntimeError: If the scene already holds MAX_SPHERES spheres.
        """
        center_values = _validate_center(center)

        radius = float(radius)
        if not math.isfinite(radius) or radius <= 0.0:
            raise ValueError(f"Sphere radius = {radius} must be a positive finite number")

        if not isinstance(material, (Lambertian, Metal, Dielectric)):
            raise ValueError(f"Unsupported material type: {type(material).__name__}")
        material.validate()

        if len(self._spheres) >= MAX_SPHERES:
            raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

        self._spheres.append(SphereInfo(center=center_values, radius=radius, material=material))
        index = len(self._spheres) - 1
        logger.debug(
            "Added sphere %d at %s r=%g (%s)",
            index,
            center_values,
            radius,
            type(material).__name__,
        )
        return index

    def clear(self) -> None:
        """Remove every sphere from the scene.

        The device fields are left untouched until the next upload().
        """
        self._spheres.clear()

    def upload(self) -> int:
        """Copy the scene into the device fields used by intersect_scene.

        Returns:
            The number of spheres uploaded.
        """
        clear_scene()
        for sphere in self._spheres:
            add_sphere(sphere.center, sphere.radius, sphere.material)
        logger.info("Uploaded scene with %d spheres", len(self._spheres))
        return len(self._spheres)

    def to_dict(self) -> dict[str, Any]:
        """Describe the scene as plain Python data.

        Returns:
            Dictionary with a "spheres" list, one entry per sphere.
        """
        return {"spheres": [sphere.to_dict() for sphere in self._spheres]}
