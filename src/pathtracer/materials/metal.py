"""Metal (specular reflective) material implementation.

This module implements metal scattering: mirror reflection of the incoming
direction about the surface normal, perturbed by a random unit vector scaled
by the fuzz parameter to model surface roughness.

The reflection formula is:
    R = I - 2(I . N)N

where I is the incident direction and N is the surface normal.

A perturbed direction that ends up below the surface is absorbed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.metal import Metal, scatter_metal
    >>> gold = Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
    >>> # Use within a Taichi kernel:
    >>> # scatter = scatter_metal(albedo, fuzz, incident_dir, point, normal, stream)
"""

import math
from dataclasses import dataclass
from typing import Any

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import dot, reflect
from pathtracer.core.sampling import random_unit_vector
from pathtracer.materials.base import MaterialKind, Scatter, validate_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Metal:
    """Metal (specular reflective) material properties.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
            Represents the color tint of reflected light.
        fuzz: The surface roughness in [0, 1].
            0 = perfect mirror, 1 = maximum fuzz.
    """

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    kind = MaterialKind.METAL

    @property
    def param(self) -> float:
        return float(self.fuzz)

    def validate(self) -> None:
        """Check albedo and fuzz.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
            ValueError: If fuzz is outside [0, 1].
        """
        validate_albedo(self.albedo)

        if not math.isfinite(self.fuzz) or self.fuzz < 0.0 or self.fuzz > 1.0:
            raise ValueError(
                f"Fuzz = {self.fuzz} is outside [0, 1]. "
                "Fuzz must be between 0 (perfect mirror) and 1 (maximum fuzz)."
            )

    def to_dict(self) -> dict[str, Any]:
        return {"type": "metal", "albedo": list(self.albedo), "fuzz": self.fuzz}


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    point: vec3,
    normal: vec3,
    stream: ti.i32,
) -> Scatter:
    """Compute the scattered ray for a metal surface.

    Reflects the incident direction about the normal, then adds
    fuzz * random_unit_vector. The ray scatters only if the result still
    points away from the surface (dot(direction, normal) > 0); otherwise it
    is absorbed.

    Args:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: The surface roughness in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction.
        point: The hit point, used as the scattered ray's origin.
        normal: The unit surface normal facing the incoming ray.
        stream: Random stream index.

    Returns:
        A Scatter whose did_scatter is 0 when the ray was absorbed.
        Attenuation is the albedo either way.
    """
    reflected = reflect(incident_direction, normal)
    scattered_direction = reflected + fuzz * random_unit_vector(stream)

    did_scatter = 0
    if dot(scattered_direction, normal) > 0.0:
        did_scatter = 1

    return Scatter(
        did_scatter=did_scatter,
        origin=point,
        direction=scattered_direction,
        attenuation=albedo,
    )
