"""Unit tests for seeded random streams and sampling helpers.

Tests cover:
- Reproducibility of a stream for a fixed (seed, key)
- Independence of streams with different keys
- Ranges of the uniform and geometric samplers
"""

import pytest
import taichi as ti


def _draw_floats(stream, n):
    from pathtracer.core.sampling import random_float

    results = ti.field(dtype=ti.f32, shape=n)

    @ti.kernel
    def test_kernel():
        for _ in range(1):
            for k in range(n):
                results[k] = random_float(stream)

    test_kernel()
    return results.to_numpy()


class TestStreamSeeding:
    """Tests for stream seeding and reproducibility."""

    def test_same_seed_same_sequence(self):
        from pathtracer.core.sampling import seed_host_stream

        seed_host_stream(0, seed=1234, key=7)
        first = _draw_floats(0, 16)
        seed_host_stream(0, seed=1234, key=7)
        second = _draw_floats(0, 16)

        assert first.tolist() == second.tolist()

    def test_different_keys_differ(self):
        from pathtracer.core.sampling import seed_host_stream

        seed_host_stream(0, seed=1234, key=0)
        seed_host_stream(1, seed=1234, key=1)
        a = _draw_floats(0, 8)
        b = _draw_floats(1, 8)

        assert a.tolist() != b.tolist()

    def test_different_seeds_differ(self):
        from pathtracer.core.sampling import seed_host_stream

        seed_host_stream(0, seed=1, key=0)
        a = _draw_floats(0, 8)
        seed_host_stream(0, seed=2, key=0)
        b = _draw_floats(0, 8)

        assert a.tolist() != b.tolist()

    def test_state_is_never_zero(self):
        from pathtracer.core.sampling import get_stream_state, seed_host_stream

        for key in range(64):
            seed_host_stream(3, seed=0, key=key)
            assert get_stream_state(3) != 0

    def test_seed_streams_keys_each_stream_by_index(self):
        from pathtracer.core.sampling import (
            MAX_STREAMS,
            get_stream_state,
            seed_host_stream,
            seed_streams,
        )

        seed_streams(77)
        bulk = {s: get_stream_state(s) for s in (0, 1, 42, MAX_STREAMS - 1)}

        for stream, state in bulk.items():
            seed_host_stream(stream, seed=77, key=stream)
            assert get_stream_state(stream) == state
        # Neighbouring streams are decorrelated
        assert bulk[0] != bulk[1]

    def test_negative_and_large_seeds_are_accepted(self):
        from pathtracer.core.sampling import normalize_seed, seed_host_stream

        seed_host_stream(0, seed=-5)
        seed_host_stream(0, seed=2**40 + 3)
        assert 0 <= normalize_seed(-5) < 2**31
        assert normalize_seed(2**40 + 3) == 3

    def test_stream_index_out_of_range(self):
        from pathtracer.core.sampling import MAX_STREAMS, seed_host_stream

        with pytest.raises(ValueError):
            seed_host_stream(MAX_STREAMS, seed=0)
        with pytest.raises(ValueError):
            seed_host_stream(-1, seed=0)


class TestUniformDraws:
    """Tests for random_float and friends."""

    def test_random_float_in_unit_range(self):
        from pathtracer.core.sampling import seed_host_stream

        seed_host_stream(0, seed=99)
        values = _draw_floats(0, 2000)

        assert values.min() >= 0.0
        assert values.max() < 1.0
        # Roughly uniform
        assert abs(values.mean() - 0.5) < 0.05

    def test_random_in_range(self):
        from pathtracer.core.sampling import random_in_range, seed_host_stream

        n = 500
        results = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                for k in range(n):
                    results[k] = random_in_range(0, 0.5, 1.0)

        seed_host_stream(0, seed=5)
        test_kernel()
        values = results.to_numpy()
        assert values.min() >= 0.5
        assert values.max() < 1.0

    def test_sample_square(self):
        from pathtracer.core.sampling import sample_square, seed_host_stream

        n = 500
        results = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                for k in range(n):
                    results[k] = sample_square(0)

        seed_host_stream(0, seed=11)
        test_kernel()
        values = results.to_numpy()
        assert values[:, :2].min() >= -0.5
        assert values[:, :2].max() < 0.5
        assert abs(values[:, 2]).max() == 0.0


class TestGeometricSampling:
    """Tests for sphere, hemisphere and disk sampling."""

    def test_random_unit_vector_has_unit_length(self):
        from pathtracer.core.ray import length
        from pathtracer.core.sampling import random_unit_vector, seed_host_stream

        n = 500
        results = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                for k in range(n):
                    results[k] = length(random_unit_vector(0))

        seed_host_stream(0, seed=3)
        test_kernel()
        lengths = results.to_numpy()
        assert abs(lengths - 1.0).max() < 1e-5

    def test_random_in_unit_sphere_is_inside(self):
        from pathtracer.core.ray import length_squared
        from pathtracer.core.sampling import random_in_unit_sphere, seed_host_stream

        n = 500
        results = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                for k in range(n):
                    results[k] = length_squared(random_in_unit_sphere(0))

        seed_host_stream(0, seed=4)
        test_kernel()
        assert results.to_numpy().max() < 1.0

    def test_random_on_hemisphere(self):
        from pathtracer.core.ray import dot, vec3
        from pathtracer.core.sampling import random_on_hemisphere, seed_host_stream

        n = 500
        results = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 0.0, 1.0)
            for _ in range(1):
                for k in range(n):
                    results[k] = dot(random_on_hemisphere(0, normal), normal)

        seed_host_stream(0, seed=6)
        test_kernel()
        assert results.to_numpy().min() >= 0.0

    def test_random_in_unit_disk(self):
        from pathtracer.core.sampling import random_in_unit_disk, seed_host_stream

        n = 500
        results = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                for k in range(n):
                    results[k] = random_in_unit_disk(0)

        seed_host_stream(0, seed=8)
        test_kernel()
        values = results.to_numpy()
        assert (values[:, 0] ** 2 + values[:, 1] ** 2).max() < 1.0
        assert abs(values[:, 2]).max() == 0.0
