"""Unit tests for the Ray dataclass and vector helpers.

Tests cover:
- ray_at evaluation
- length, normalize, dot, cross
- near_zero detection
- reflect, refract and Schlick reflectance
"""

import math

import taichi as ti


class TestRay:
    """Tests for Ray construction and evaluation."""

    def test_ray_at(self):
        """Test ray_at returns origin + t * direction."""
        from pathtracer.core.ray import make_ray, ray_at, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 0.0, -2.0))
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        p = result[None]
        assert abs(p[0] - 1.0) < 1e-6
        assert abs(p[1] - 2.0) < 1e-6
        assert abs(p[2] - (-2.0)) < 1e-6

    def test_ray_at_zero_is_origin(self):
        from pathtracer.core.ray import Ray, ray_at, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(4.0, -1.0, 0.5), direction=vec3(1.0, 1.0, 1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        p = result[None]
        assert abs(p[0] - 4.0) < 1e-6
        assert abs(p[1] + 1.0) < 1e-6
        assert abs(p[2] - 0.5) < 1e-6


class TestVectorAlgebra:
    """Tests for length, normalize, dot and cross."""

    def test_length_and_length_squared(self):
        from pathtracer.core.ray import length, length_squared, vec3

        results = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            v = vec3(3.0, 4.0, 12.0)
            results[0] = length(v)
            results[1] = length_squared(v)

        test_kernel()
        assert abs(results[0] - 13.0) < 1e-5
        assert abs(results[1] - 169.0) < 1e-4

    def test_normalize_unit_length(self):
        from pathtracer.core.ray import length, normalize, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())
        result_len = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            u = normalize(vec3(0.0, 3.0, 4.0))
            result[None] = u
            result_len[None] = length(u)

        test_kernel()
        u = result[None]
        assert abs(u[0]) < 1e-6
        assert abs(u[1] - 0.6) < 1e-6
        assert abs(u[2] - 0.8) < 1e-6
        assert abs(result_len[None] - 1.0) < 1e-6

    def test_dot_and_cross(self):
        from pathtracer.core.ray import cross, dot, vec3

        result_dot = ti.field(dtype=ti.f32, shape=())
        result_cross = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            a = vec3(1.0, 0.0, 0.0)
            b = vec3(0.0, 1.0, 0.0)
            result_dot[None] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0))
            result_cross[None] = cross(a, b)

        test_kernel()
        assert abs(result_dot[None] - 12.0) < 1e-6
        c = result_cross[None]
        assert abs(c[0]) < 1e-6
        assert abs(c[1]) < 1e-6
        assert abs(c[2] - 1.0) < 1e-6

    def test_near_zero(self):
        from pathtracer.core.ray import near_zero, vec3

        results = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            results[0] = near_zero(vec3(1e-9, -1e-9, 0.0))
            results[1] = near_zero(vec3(1e-9, 1e-3, 0.0))
            results[2] = near_zero(vec3(0.0, 0.0, 0.0))

        test_kernel()
        assert results[0] == 1
        assert results[1] == 0
        assert results[2] == 1


class TestReflectRefract:
    """Tests for reflection, refraction and Fresnel reflectance."""

    def test_reflect_45_degrees(self):
        """Test reflection of a 45-degree ray off a horizontal surface."""
        from pathtracer.core.ray import reflect, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_refract_normal_incidence_passes_straight(self):
        """A ray hitting the surface head-on is not bent."""
        from pathtracer.core.ray import refract, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = refract(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1.0 / 1.5)

        test_kernel()
        r = result[None]
        assert abs(r[0]) < 1e-6
        assert abs(r[1] + 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_refract_obeys_snell(self):
        """sin(theta_t) = eta * sin(theta_i) for a unit incident vector."""
        from pathtracer.core.ray import normalize, refract, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())
        eta = 1.0 / 1.5

        @ti.kernel
        def test_kernel():
            incident = normalize(vec3(1.0, -1.0, 0.0))
            result[None] = refract(incident, vec3(0.0, 1.0, 0.0), eta)

        test_kernel()
        r = result[None]
        sin_t = abs(r[0]) / math.sqrt(r[0] ** 2 + r[1] ** 2 + r[2] ** 2)
        assert abs(sin_t - eta * math.sqrt(0.5)) < 1e-5
        assert r[1] < 0.0

    def test_schlick_at_normal_incidence_is_r0(self):
        from pathtracer.core.ray import schlick_reflectance

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = schlick_reflectance(1.0, 1.5)

        test_kernel()
        r0 = ((1.0 - 1.5) / (1.0 + 1.5)) ** 2
        assert abs(result[None] - r0) < 1e-6

    def test_schlick_monotonic_toward_grazing(self):
        """Reflectance never decreases as cos(theta) goes from 1 to 0."""
        from pathtracer.core.ray import schlick_reflectance

        n = 21
        results = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for k in range(n):
                cosine = 1.0 - ti.cast(k, ti.f32) / (n - 1)
                results[k] = schlick_reflectance(cosine, 1.0 / 1.5)

        test_kernel()
        values = results.to_numpy()
        assert all(values[k + 1] >= values[k] - 1e-7 for k in range(n - 1))
        assert abs(values[-1] - 1.0) < 1e-6
