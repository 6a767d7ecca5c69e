"""Scene-level primitive storage and closest-hit intersection.

The scene is a flat array of spheres in Taichi fields (structure of arrays),
indexed by position. Each sphere owns its material by value: the material
tag, albedo and variant parameter sit next to its geometry.

Intersecting the scene scans every sphere linearly and keeps the closest hit.
The upper bound of the validity interval is tightened to the closest hit
found so far, so a later sphere only replaces the current hit if it is
strictly closer; exact ties keep the earlier sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.intersection import add_sphere, clear_scene
    >>> from pathtracer.materials import Lambertian
    >>> clear_scene()
    >>> add_sphere((0, 0, -1), 0.5, Lambertian(albedo=(0.5, 0.5, 0.5)))
    >>> # Use intersect_scene within a Taichi kernel
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from pathtracer.core.interval import Interval
from pathtracer.geometry.sphere import Sphere, hit_sphere
from pathtracer.materials.base import SurfaceMaterial

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Extends the primitive HitRecord with the index of the primitive that was
    hit and a copy of its material, so shading needs no further lookups.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: The ray parameter of the closest intersection.
        point: The 3D point where the ray met the surface.
        normal: The unit surface normal, oriented against the incoming ray.
        front_face: Whether the ray hit the front face (1) or back face (0).
        primitive: Index of the hit sphere, -1 on a miss.
        material_kind: MaterialKind tag of the hit sphere.
        albedo: Albedo of the hit sphere's material.
        material_param: Fuzz (Metal) or refractive index (Dielectric).
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    primitive: ti.i32
    material_kind: ti.i32
    albedo: vec3
    material_param: ti.f32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_kinds = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
sphere_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_params = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all primitives from the device scene.

    Resets the primitive count to zero. Field data is overwritten when new
    primitives are added.
    """
    num_spheres[None] = 0


def add_sphere(center: Sequence[float], radius: float, material) -> int:
    """Append a sphere and its material to the device scene.

    No validation happens here; pathtracer.scene.manager.Scene validates
    before uploading.

    Args:
        center: The center point of the sphere as (x, y, z).
        radius: The radius of the sphere.
        material: A host material (Lambertian, Metal or Dielectric).

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = vec3(center[0], center[1], center[2])
    sphere_radii[idx] = radius
    sphere_material_kinds[idx] = int(material.kind)
    sphere_albedos[idx] = vec3(material.albedo[0], material.albedo[1], material.albedo[2])
    sphere_material_params[idx] = material.param
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the device scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere_material(index: ti.i32) -> SurfaceMaterial:
    """Read the material of the sphere at ``index``."""
    return SurfaceMaterial(
        kind=sphere_material_kinds[index],
        albedo=sphere_albedos[index],
        param=sphere_material_params[index],
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        primitive=-1,
        material_kind=0,
        albedo=vec3(0.0, 0.0, 0.0),
        material_param=0.0,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    ray_t: Interval,
) -> SceneHitRecord:
    """Test a ray against every sphere and return the closest hit.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        ray_t: Open interval of acceptable ray parameters.

    Returns:
        A SceneHitRecord for the closest intersection strictly inside ray_t,
        or a miss record if nothing qualifies.
    """
    closest_t = ray_t.max
    result = _make_miss_record()

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, Interval(min=ray_t.min, max=closest_t))
        if rec.hit == 1:
            closest_t = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                front_face=rec.front_face,
                primitive=i,
                material_kind=sphere_material_kinds[i],
                albedo=sphere_albedos[i],
                material_param=sphere_material_params[i],
            )

    return result
