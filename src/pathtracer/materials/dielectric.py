"""Dielectric (glass/water) material implementation.

This module implements transparent materials that both reflect and refract.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when ratio * sin(theta) > 1

The material randomly chooses between reflection and refraction based on
the Fresnel reflectance probability, which increases at grazing angles.
The albedo tints transmitted and reflected light; use white for clear glass.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.dielectric import Dielectric
    >>> glass = Dielectric(albedo=(1.0, 1.0, 1.0), refractive_index=1.5)
    >>> bubble = Dielectric(albedo=(1.0, 1.0, 1.0), refractive_index=1.0 / 1.5)
"""

import math
from dataclasses import dataclass
from typing import Any

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import dot, normalize, reflect, refract, schlick_reflectance
from pathtracer.core.sampling import random_float
from pathtracer.materials.base import MaterialKind, Scatter, validate_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Dielectric:
    """Dielectric (glass/water) material properties.

    Attributes:
        albedo: Tint of reflected and refracted light (RGB in [0, 1]).
        refractive_index: Index of refraction relative to the surrounding
            medium. Common values:
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
            Values below 1 model a less dense pocket (an air bubble in glass
            is 1 / 1.5).
    """

    albedo: tuple[float, float, float] = (1.0, 1.0, 1.0)
    refractive_index: float = 1.5

    kind = MaterialKind.DIELECTRIC

    @property
    def param(self) -> float:
        return float(self.refractive_index)

    def validate(self) -> None:
        """Check albedo and refractive index.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
            ValueError: If the refractive index is not a positive finite number.
        """
        validate_albedo(self.albedo)

        if not math.isfinite(self.refractive_index) or self.refractive_index <= 0.0:
            raise ValueError(
                f"Refractive index = {self.refractive_index} must be a positive "
                "finite number."
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "dielectric",
            "albedo": list(self.albedo),
            "refractive_index": self.refractive_index,
        }


@ti.func
def refraction_ratio_for(refractive_index: ti.f32, front_face: ti.i32) -> ti.f32:
    """Return n_incident / n_transmitted for a hit.

    Entering the medium (front face) gives 1 / index; leaving it gives index.
    """
    ratio = refractive_index
    if front_face == 1:
        ratio = 1.0 / refractive_index
    return ratio


@ti.func
def cannot_refract(refraction_ratio: ti.f32, cos_theta: ti.f32) -> ti.i32:
    """Return 1 when Snell's law has no solution (total internal reflection)."""
    sin_theta = ti.sqrt(ti.max(1.0 - cos_theta * cos_theta, 0.0))
    result = 0
    if refraction_ratio * sin_theta > 1.0:
        result = 1
    return result


@ti.func
def scatter_dielectric(
    albedo: vec3,
    refractive_index: ti.f32,
    incident_direction: vec3,
    point: vec3,
    normal: vec3,
    front_face: ti.i32,
    stream: ti.i32,
) -> Scatter:
    """Compute the scattered ray for a dielectric surface.

    Args:
        albedo: Tint of the scattered light (RGB).
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        point: The hit point, used as the scattered ray's origin.
        normal: The unit surface normal facing the incoming ray.
        front_face: 1 if the ray is entering the material, 0 if leaving it.
        stream: Random stream index.

    Returns:
        A Scatter with did_scatter == 1 (dielectrics never absorb) whose
        direction is either the reflection or the refraction of the unit
        incident direction.
    """
    ratio = refraction_ratio_for(refractive_index, front_face)

    unit_direction = normalize(incident_direction)
    cos_theta = ti.min(dot(-unit_direction, normal), 1.0)

    # Total internal reflection must reflect; otherwise reflect with probability R(theta)
    must_reflect = cannot_refract(ratio, cos_theta)
    if must_reflect == 0:
        if random_float(stream) < schlick_reflectance(cos_theta, ratio):
            must_reflect = 1

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if must_reflect == 1:
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, ratio)

    return Scatter(
        did_scatter=1,
        origin=point,
        direction=scattered_direction,
        attenuation=albedo,
    )
