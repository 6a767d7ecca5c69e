"""Materials module for surface scattering models.

This module implements the material variants a primitive can carry:

Components:
    base: MaterialKind tag, device-side SurfaceMaterial and Scatter structs
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like materials with refraction (Schlick reflectance)

Each material provides:
    - A frozen host-side dataclass with validate() and to_dict()
    - A Taichi scatter function returning a Scatter for (incoming ray, hit)

Importing this package declares the random stream field, so Taichi must be
initialized first.
"""

from typing import Union

from .base import MaterialKind, Scatter, SurfaceMaterial, validate_albedo
from .dielectric import Dielectric, cannot_refract, refraction_ratio_for, scatter_dielectric
from .lambertian import Lambertian, scatter_lambertian
from .metal import Metal, scatter_metal

# Any host-side material variant
Material = Union[Lambertian, Metal, Dielectric]

__all__ = [
    "Material",
    "MaterialKind",
    "Scatter",
    "SurfaceMaterial",
    "validate_albedo",
    # Lambertian
    "Lambertian",
    "scatter_lambertian",
    # Metal
    "Metal",
    "scatter_metal",
    # Dielectric
    "Dielectric",
    "scatter_dielectric",
    "refraction_ratio_for",
    "cannot_refract",
]
