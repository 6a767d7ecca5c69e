"""Shared material types: the material variant tag and scatter results.

Materials form a closed set of variants. On the device a material is a
SurfaceMaterial struct carrying its MaterialKind tag plus the parameters of
every variant packed into ``albedo`` and ``param``; dispatch is a branch on the
tag. On the host each variant is a frozen dataclass (see lambertian, metal,
dielectric) that validates its parameters and packs itself into this layout.
"""

import math
from collections.abc import Sequence
from enum import IntEnum

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialKind(IntEnum):
    """Enumeration of supported material variants.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


@ti.dataclass
class SurfaceMaterial:
    """Device-side material of a primitive, stored by value.

    Attributes:
        kind: The MaterialKind of the material.
        albedo: Per-channel attenuation (RGB, each component in [0, 1]).
        param: Variant parameter: fuzz for metals, refractive index for
            dielectrics, unused (0) for Lambertian surfaces.
    """

    kind: ti.i32
    albedo: vec3
    param: ti.f32


@ti.dataclass
class Scatter:
    """Outcome of one scattering event.

    Attributes:
        did_scatter: 1 if the path continues, 0 if the light was absorbed.
        origin: Origin of the scattered ray (the hit point).
        direction: Direction of the scattered ray (not necessarily unit length).
        attenuation: Color factor applied to light arriving along the
            scattered ray.
    """

    did_scatter: ti.i32
    origin: vec3
    direction: vec3
    attenuation: vec3


def validate_albedo(albedo: Sequence[float]) -> tuple[float, float, float]:
    """Check an RGB albedo and return it as a tuple of floats.

    Args:
        albedo: The reflectance color as (R, G, B).

    Returns:
        The albedo as a tuple of three floats.

    Raises:
        ValueError: If the albedo does not have three components, or any
            component is not finite or is outside [0, 1].
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")

    for i, component in enumerate(albedo):
        if not math.isfinite(component):
            raise ValueError(f"Albedo component {i} = {component} is not finite")
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    return (float(albedo[0]), float(albedo[1]), float(albedo[2]))
