"""Sphere primitive with analytic ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the
intersection routine every primitive follows: given a ray and an interval of
valid ray parameters, return the nearest hit strictly inside the interval, or
the miss sentinel (hit == 0) when there is none.

The normal stored in a HitRecord always faces against the incoming ray;
``front_face`` records whether that required flipping the outward normal.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.interval import Interval, interval_surrounds
from pathtracer.core.ray import dot, length_squared

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
            The other fields are only meaningful when hit == 1.
        t: The ray parameter of the intersection.
        point: The 3D point where the ray met the surface.
        normal: The unit surface normal, oriented against the incoming ray.
        front_face: 1 if the ray arrived from outside the surface, 0 if from
            inside.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create the all-zero HitRecord used to signal a miss."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
    )


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a unit outward normal against the incoming ray.

    Args:
        ray_direction: Direction of the incoming ray.
        outward_normal: Unit normal pointing out of the surface.

    Returns:
        A tuple (front_face, normal). front_face is 1 when the ray and the
        outward normal point in opposite directions; the normal is flipped
        otherwise so it always faces the ray.
    """
    front_face = 0
    normal = -outward_normal
    if dot(ray_direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return front_face, normal


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    ray_t: Interval,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Substituting the ray into |P - C|^2 = r^2 gives a quadratic in t. With
    the half-b simplification (b = -2h):

        a = |d|^2
        h = d . (C - O)
        c = |C - O|^2 - r^2
        discriminant = h^2 - a*c

    The nearer root (h - sqrt(discriminant)) / a is tried first; the farther
    root is used only when the nearer one lies outside the open interval.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        ray_t: Open interval of acceptable ray parameters.

    Returns:
        A HitRecord for the nearest root inside ray_t, or a miss record.
    """
    oc = sphere.center - ray_origin
    a = length_squared(ray_direction)
    h = dot(ray_direction, oc)
    c = length_squared(oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (h - sqrt_d) / a
        valid = interval_surrounds(ray_t, root)
        if valid == 0:
            root = (h + sqrt_d) / a
            valid = interval_surrounds(ray_t, root)

        if valid == 1:
            point = ray_origin + root * ray_direction
            outward_normal = (point - sphere.center) / sphere.radius
            front_face, normal = set_face_normal(ray_direction, outward_normal)
            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
