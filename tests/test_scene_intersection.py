"""Unit tests for scene-level intersection.

Tests cover:
- Primitive storage, counts and clearing
- Closest hit selection across multiple spheres
- Material data carried by the scene hit record
- Tie-breaking between coincident spheres
- Capacity limit
"""

import pytest
import taichi as ti


def _intersect(origin, direction):
    """Intersect one ray with the device scene and return the record fields."""
    from pathtracer.core.interval import INFINITY, Interval
    from pathtracer.scene.intersection import intersect_scene, vec3

    ints = ti.field(dtype=ti.i32, shape=3)
    t_val = ti.field(dtype=ti.f32, shape=())
    albedo = ti.Vector.field(3, dtype=ti.f32, shape=())
    param = ti.field(dtype=ti.f32, shape=())
    ox, oy, oz = origin
    dx, dy, dz = direction

    @ti.kernel
    def test_kernel():
        # Keep the sphere loop inside intersect_scene serial
        for _ in range(1):
            rec = intersect_scene(
                vec3(ox, oy, oz),
                vec3(dx, dy, dz),
                Interval(min=0.001, max=INFINITY),
            )
            ints[0] = rec.hit
            ints[1] = rec.primitive
            ints[2] = rec.material_kind
            t_val[None] = rec.t
            albedo[None] = rec.albedo
            param[None] = rec.material_param

    test_kernel()
    return {
        "hit": int(ints[0]),
        "primitive": int(ints[1]),
        "kind": int(ints[2]),
        "t": float(t_val[None]),
        "albedo": tuple(float(c) for c in albedo[None]),
        "param": float(param[None]),
    }


class TestScenePrimitiveStorage:
    """Tests for scene primitive storage and management."""

    def test_add_sphere(self):
        from pathtracer.materials import Lambertian
        from pathtracer.scene.intersection import add_sphere, get_sphere_count

        assert get_sphere_count() == 0
        idx = add_sphere((1.0, 2.0, 3.0), 0.5, Lambertian(albedo=(0.5, 0.5, 0.5)))
        assert idx == 0
        assert get_sphere_count() == 1

    def test_clear_scene(self):
        from pathtracer.materials import Lambertian
        from pathtracer.scene.intersection import add_sphere, clear_scene, get_sphere_count

        add_sphere((0.0, 0.0, -1.0), 0.5, Lambertian(albedo=(0.5, 0.5, 0.5)))
        add_sphere((0.0, 0.0, -3.0), 0.5, Lambertian(albedo=(0.5, 0.5, 0.5)))
        assert get_sphere_count() == 2
        clear_scene()
        assert get_sphere_count() == 0

    def test_capacity_exceeded(self):
        from pathtracer.materials import Lambertian
        from pathtracer.scene.intersection import MAX_SPHERES, add_sphere, num_spheres

        # Pretend the scene is full rather than adding every sphere
        num_spheres[None] = MAX_SPHERES
        with pytest.raises(RuntimeError):
            add_sphere((0.0, 0.0, 0.0), 1.0, Lambertian(albedo=(0.5, 0.5, 0.5)))

    def test_get_sphere_material(self):
        from pathtracer.materials import MaterialKind, Metal
        from pathtracer.scene.intersection import add_sphere, get_sphere_material

        add_sphere((0.0, 0.0, -1.0), 0.5, Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3))

        kind = ti.field(dtype=ti.i32, shape=())
        param = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            material = get_sphere_material(0)
            kind[None] = material.kind
            param[None] = material.param

        test_kernel()
        assert kind[None] == int(MaterialKind.METAL)
        assert abs(param[None] - 0.3) < 1e-6


class TestSceneIntersection:
    """Tests for closest-hit queries."""

    def test_empty_scene_misses(self):
        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 0
        assert rec["primitive"] == -1

    def test_single_sphere(self):
        from pathtracer.materials import Lambertian
        from pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.5, Lambertian(albedo=(0.5, 0.5, 0.5)))
        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert rec["hit"] == 1
        assert rec["primitive"] == 0
        assert abs(rec["t"] - 0.5) < 1e-6

    @pytest.mark.parametrize("near_first", [True, False])
    def test_closest_hit_independent_of_order(self, near_first):
        from pathtracer.materials import Lambertian
        from pathtracer.scene.intersection import add_sphere

        near = ((0.0, 0.0, -2.0), 0.5, Lambertian(albedo=(0.9, 0.1, 0.1)))
        far = ((0.0, 0.0, -5.0), 0.5, Lambertian(albedo=(0.1, 0.1, 0.9)))
        spheres = [near, far] if near_first else [far, near]
        for sphere in spheres:
            add_sphere(*sphere)

        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert rec["hit"] == 1
        assert abs(rec["t"] - 1.5) < 1e-5
        assert rec["primitive"] == (0 if near_first else 1)
        assert abs(rec["albedo"][0] - 0.9) < 1e-6

    def test_record_carries_material(self):
        from pathtracer.materials import Dielectric, MaterialKind
        from pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.5, Dielectric(albedo=(1.0, 0.9, 0.8), refractive_index=1.33))
        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert rec["kind"] == int(MaterialKind.DIELECTRIC)
        assert abs(rec["param"] - 1.33) < 1e-6
        assert abs(rec["albedo"][1] - 0.9) < 1e-6

    def test_coincident_spheres_keep_first(self):
        """An exact tie keeps the earlier sphere."""
        from pathtracer.materials import Lambertian, Metal
        from pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.5, Lambertian(albedo=(0.5, 0.5, 0.5)))
        add_sphere((0.0, 0.0, -1.0), 0.5, Metal(albedo=(0.5, 0.5, 0.5)))
        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert rec["primitive"] == 0

    def test_t_min_excludes_surface_at_origin(self):
        """A ray starting on a surface does not re-hit it at t ~ 0."""
        from pathtracer.materials import Lambertian
        from pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.5, Lambertian(albedo=(0.5, 0.5, 0.5)))
        # Start on the front surface, heading away from the sphere
        rec = _intersect((0.0, 0.0, -0.5), (0.0, 0.0, 1.0))

        assert rec["hit"] == 0
