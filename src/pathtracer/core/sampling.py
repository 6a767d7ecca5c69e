"""Seeded random streams and Monte Carlo sampling helpers.

Every random draw in the renderer goes through an explicit stream: an index
into a bank of 32-bit xorshift states held in a Taichi field. A stream is
owned by exactly one unit of work at a time (one pixel while rendering), so
parallel kernels never share generator state, and a fixed seed reproduces
the same image on every run.

Streams are seeded from a (seed, key) pair through an integer hash, so
neighbouring pixels get decorrelated sequences and the state is never zero
(zero is a fixed point of xorshift).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.sampling import seed_host_stream, random_unit_vector
    >>> seed_host_stream(0, seed=42, key=0)
    >>> @ti.kernel
    ... def draw() -> ti.math.vec3:
    ...     return random_unit_vector(0)
"""

import taichi as ti

from pathtracer.core.ray import dot, length_squared, vec3

# Number of independent streams. One per pixel of a render batch
# (MAX_ROWS_PER_BATCH rows of at most MAX_IMAGE_WIDTH pixels).
MAX_STREAMS = 16 * 2048

# Scale mapping the top 24 bits of a state onto [0, 1)
_FLOAT_SCALE = 1.0 / 16777216.0

_rng_states = ti.field(dtype=ti.u32, shape=MAX_STREAMS)


# =============================================================================
# Stream State
# =============================================================================


@ti.func
def _wang_hash(value: ti.u32) -> ti.u32:
    """Thomas Wang's 32-bit integer hash."""
    x = (value ^ ti.u32(61)) ^ ti.bit_shr(value, ti.u32(16))
    x = x * ti.u32(9)
    x = x ^ ti.bit_shr(x, ti.u32(4))
    x = x * ti.u32(668265261)
    x = x ^ ti.bit_shr(x, ti.u32(15))
    return x


@ti.func
def seed_stream(stream: ti.i32, seed: ti.i32, key: ti.i32):
    """Reset a stream to the state derived from (seed, key).

    Args:
        stream: The stream index to reset.
        seed: The global seed of the render.
        key: A per-task key (the pixel index while rendering).
    """
    state = _wang_hash(ti.cast(seed, ti.u32) ^ _wang_hash(ti.cast(key, ti.u32) + ti.u32(1)))
    if state == ti.u32(0):
        state = ti.u32(1)
    _rng_states[stream] = state


@ti.kernel
def _seed_one(stream: ti.i32, seed: ti.i32, key: ti.i32):
    seed_stream(stream, seed, key)


@ti.kernel
def _seed_all(seed: ti.i32):
    for s in range(MAX_STREAMS):
        seed_stream(s, seed, s)


def _check_stream(stream: int) -> None:
    if stream < 0 or stream >= MAX_STREAMS:
        raise ValueError(f"Stream index {stream} is outside [0, {MAX_STREAMS})")


def normalize_seed(seed: int) -> int:
    """Fold an arbitrary Python integer into a non-negative 31-bit kernel seed."""
    return int(seed) & 0x7FFFFFFF


def seed_host_stream(stream: int, seed: int, key: int = 0) -> None:
    """Seed a single stream from Python scope.

    Args:
        stream: The stream index in [0, MAX_STREAMS).
        seed: Any integer; folded to 31 bits.
        key: Per-task key distinguishing streams that share a seed.

    Raises:
        ValueError: If the stream index is out of range.
    """
    _check_stream(stream)
    _seed_one(stream, normalize_seed(seed), normalize_seed(key))


def seed_streams(seed: int) -> None:
    """Seed every stream from one seed, using the stream index as key."""
    _seed_all(normalize_seed(seed))


def get_stream_state(stream: int) -> int:
    """Read the raw state of a stream (for tests and debugging)."""
    _check_stream(stream)
    return int(_rng_states[stream])


# =============================================================================
# Uniform Draws
# =============================================================================


@ti.func
def random_float(stream: ti.i32) -> ti.f32:
    """Advance a stream and return a uniform value in [0, 1)."""
    x = _rng_states[stream]
    x = x ^ (x << ti.u32(13))
    x = x ^ ti.bit_shr(x, ti.u32(17))
    x = x ^ (x << ti.u32(5))
    _rng_states[stream] = x
    return ti.cast(ti.bit_shr(x, ti.u32(8)), ti.f32) * _FLOAT_SCALE


@ti.func
def random_in_range(stream: ti.i32, lo: ti.f32, hi: ti.f32) -> ti.f32:
    """Return a uniform value in [lo, hi)."""
    return lo + (hi - lo) * random_float(stream)


@ti.func
def random_vector(stream: ti.i32) -> vec3:
    """Return a vector uniformly distributed in [0, 1)^3."""
    x = random_float(stream)
    y = random_float(stream)
    z = random_float(stream)
    return vec3(x, y, z)


@ti.func
def random_vector_in_range(stream: ti.i32, lo: ti.f32, hi: ti.f32) -> vec3:
    """Return a vector uniformly distributed in [lo, hi)^3."""
    x = random_in_range(stream, lo, hi)
    y = random_in_range(stream, lo, hi)
    z = random_in_range(stream, lo, hi)
    return vec3(x, y, z)


@ti.func
def sample_square(stream: ti.i32) -> vec3:
    """Return a random offset (x, y, 0) in the unit square [-0.5, 0.5)^2."""
    x = random_float(stream) - 0.5
    y = random_float(stream) - 0.5
    return vec3(x, y, 0.0)


# =============================================================================
# Geometric Sampling
# =============================================================================


@ti.func
def random_in_unit_sphere(stream: ti.i32) -> vec3:
    """Generate a random point strictly inside the unit ball.

    Rejection sampling over the bounding cube; about 52% of candidates are
    accepted, so the expected number of iterations is below two.
    """
    p = vec3(1.0, 1.0, 1.0)
    while length_squared(p) >= 1.0:
        p = random_vector_in_range(stream, -1.0, 1.0)
    return p


@ti.func
def random_unit_vector(stream: ti.i32) -> vec3:
    """Generate a unit vector uniformly distributed on the sphere.

    Normalizes a unit-ball sample. Samples too close to the center to
    normalize reliably are redrawn.
    """
    p = random_in_unit_sphere(stream)
    lensq = length_squared(p)
    while lensq < 1e-12:
        p = random_in_unit_sphere(stream)
        lensq = length_squared(p)
    return p / ti.sqrt(lensq)


@ti.func
def random_on_hemisphere(stream: ti.i32, normal: vec3) -> vec3:
    """Generate a unit vector in the hemisphere around a normal.

    A unit-sphere sample is flipped when it points against the normal.
    """
    on_sphere = random_unit_vector(stream)
    result = on_sphere
    if dot(on_sphere, normal) < 0.0:
        result = -on_sphere
    return result


@ti.func
def random_in_unit_disk(stream: ti.i32) -> vec3:
    """Generate a random point (x, y, 0) strictly inside the unit disk.

    Used for lens sampling in the thin-lens camera.
    """
    p = vec3(1.0, 1.0, 0.0)
    while p.x * p.x + p.y * p.y >= 1.0:
        p = vec3(
            random_in_range(stream, -1.0, 1.0),
            random_in_range(stream, -1.0, 1.0),
            0.0,
        )
    return p
