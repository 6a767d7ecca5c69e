"""Unit tests for the Lambertian material.

Tests cover:
- Host dataclass validation and serialization
- Scattering always succeeds with attenuation equal to albedo
- Scattered directions lie in the hemisphere around the normal
- Fallback to the normal when the scatter direction cancels out
"""

import math

import pytest
import taichi as ti


class TestLambertianMaterial:
    """Tests for the Lambertian host dataclass."""

    def test_valid_albedo(self):
        from pathtracer.materials import Lambertian, MaterialKind

        mat = Lambertian(albedo=(0.8, 0.3, 0.3))
        mat.validate()
        assert mat.kind == MaterialKind.LAMBERTIAN
        assert mat.param == 0.0

    @pytest.mark.parametrize(
        "albedo",
        [(1.1, 0.5, 0.5), (0.5, -0.1, 0.5), (0.5, 0.5, math.nan), (0.5, 0.5)],
    )
    def test_invalid_albedo(self, albedo):
        from pathtracer.materials import Lambertian

        with pytest.raises(ValueError):
            Lambertian(albedo=albedo).validate()

    def test_to_dict(self):
        from pathtracer.materials import Lambertian

        assert Lambertian(albedo=(0.1, 0.2, 0.3)).to_dict() == {
            "type": "lambertian",
            "albedo": [0.1, 0.2, 0.3],
        }


class TestLambertianScatter:
    """Tests for scatter_lambertian."""

    def test_always_scatters_with_albedo(self):
        from pathtracer.core.sampling import seed_host_stream
        from pathtracer.materials.lambertian import scatter_lambertian, vec3

        n = 200
        did_scatter = ti.field(dtype=ti.i32, shape=n)
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=n)
        origin = ti.Vector.field(3, dtype=ti.f32, shape=n)
        cosine = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            point = vec3(1.0, 2.0, 3.0)
            for _ in range(1):
                for k in range(n):
                    s = scatter_lambertian(vec3(0.5, 0.25, 0.125), point, normal, 0)
                    did_scatter[k] = s.did_scatter
                    attenuation[k] = s.attenuation
                    origin[k] = s.origin
                    cosine[k] = s.direction.dot(normal)

        seed_host_stream(0, seed=21)
        test_kernel()

        assert did_scatter.to_numpy().min() == 1
        att = attenuation.to_numpy()
        assert abs(att[:, 0] - 0.5).max() < 1e-7
        assert abs(att[:, 1] - 0.25).max() < 1e-7
        assert abs(att[:, 2] - 0.125).max() < 1e-7
        assert abs(origin.to_numpy() - [1.0, 2.0, 3.0]).max() < 1e-6
        # normal + unit vector never points below the surface
        assert cosine.to_numpy().min() >= -1e-6

    def test_cancelling_direction_falls_back_to_normal(self):
        """When the random unit vector is exactly -normal, the normal is used."""
        from pathtracer.core.sampling import random_unit_vector, seed_host_stream
        from pathtracer.materials.lambertian import scatter_lambertian, vec3

        drawn = ti.Vector.field(3, dtype=ti.f32, shape=())
        direction = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def draw_kernel():
            drawn[None] = random_unit_vector(0)

        @ti.kernel
        def scatter_kernel():
            s = scatter_lambertian(vec3(0.5, 0.5, 0.5), vec3(0.0, 0.0, 0.0), -drawn[None], 0)
            direction[None] = s.direction

        seed_host_stream(0, seed=5)
        draw_kernel()
        # Same draw again, so normal + random_unit_vector is exactly zero
        seed_host_stream(0, seed=5)
        scatter_kernel()

        u = drawn[None]
        d = direction[None]
        for axis in range(3):
            assert abs(d[axis] + u[axis]) < 1e-7
        assert abs(math.sqrt(d[0] ** 2 + d[1] ** 2 + d[2] ** 2) - 1.0) < 1e-5
