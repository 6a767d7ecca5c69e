"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters incoming light around the surface normal. The
scattered direction is the normal plus a random unit vector, which yields a
cosine-weighted distribution over the hemisphere. Attenuation is the albedo,
independent of the incident angle.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.lambertian import Lambertian, scatter_lambertian
    >>> matte = Lambertian(albedo=(0.5, 0.5, 0.5))
    >>> # Use within a Taichi kernel:
    >>> # scatter = scatter_lambertian(albedo, point, normal, stream)
"""

from dataclasses import dataclass
from typing import Any

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import near_zero
from pathtracer.core.sampling import random_unit_vector
from pathtracer.materials.base import MaterialKind, Scatter, validate_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Lambertian:
    """Lambertian (ideal diffuse) material properties.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: tuple[float, float, float]

    kind = MaterialKind.LAMBERTIAN

    @property
    def param(self) -> float:
        """Lambertian surfaces carry no variant parameter."""
        return 0.0

    def validate(self) -> None:
        """Raise ValueError if any albedo component is outside [0, 1]."""
        validate_albedo(self.albedo)

    def to_dict(self) -> dict[str, Any]:
        return {"type": "lambertian", "albedo": list(self.albedo)}


@ti.func
def scatter_lambertian(albedo: vec3, point: vec3, normal: vec3, stream: ti.i32) -> Scatter:
    """Scatter a ray off a Lambertian surface.

    The new direction is normal + random_unit_vector. When the two nearly
    cancel, the normal itself is used so the scattered ray never has a
    zero-length direction. Lambertian surfaces always scatter.

    Args:
        albedo: The diffuse reflectance color (RGB).
        point: The hit point, used as the scattered ray's origin.
        normal: The unit surface normal facing the incoming ray.
        stream: Random stream index.

    Returns:
        A Scatter with did_scatter == 1 and attenuation == albedo.
    """
    scatter_direction = normal + random_unit_vector(stream)

    # Catch the normal and the random vector cancelling out
    if near_zero(scatter_direction):
        scatter_direction = normal

    return Scatter(
        did_scatter=1,
        origin=point,
        direction=scatter_direction,
        attenuation=albedo,
    )
