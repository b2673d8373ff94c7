"""Deterministic per-pixel random number streams for Monte Carlo sampling.

Taichi's built-in ``ti.random`` draws from per-thread states whose
assignment to pixels depends on scheduling, so images would differ between
runs. Instead every pixel owns one 32-bit xorshift stream in ``_rng_state``,
seeded from its tile and its index inside the tile:

    state = wang_hash(wang_hash(seed ^ tile) + index_in_tile)

The rendered image is therefore a deterministic function of the seed,
independent of how tiles are distributed across threads.

All sampling functions take the ``slot`` (stream index) they draw from.
A stream must be seeded with ``seed_stream`` before use.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lumen.core.sampler import seed_streams, random_float
    >>> seed_streams(1234, 1)
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     return random_float(0)
"""

import taichi as ti
import taichi.math as tm

from lumen.core.ray import build_onb_from_normal, length_squared, local_to_world

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# One stream per pixel of the largest supported render target
MAX_STREAMS = 2048 * 2048

# Number of attempts for rejection sampling before giving up
_MAX_REJECTION_ATTEMPTS = 100

_rng_state = ti.field(dtype=ti.u32, shape=MAX_STREAMS)


# =============================================================================
# Stream Seeding
# =============================================================================


@ti.func
def wang_hash(seed: ti.u32) -> ti.u32:
    """Thomas Wang's 32-bit integer hash, used to decorrelate seeds."""
    s = seed
    s = (s ^ ti.u32(61)) ^ (s >> ti.u32(16))
    s = s * ti.u32(9)
    s = s ^ (s >> ti.u32(4))
    s = s * ti.u32(0x27D4EB2D)
    s = s ^ (s >> ti.u32(15))
    return s


@ti.func
def seed_stream(slot: ti.i32, seed: ti.u32, tile: ti.i32, index: ti.i32):
    """Seed stream ``slot`` from the base seed, a tile index and an index inside the tile."""
    s = wang_hash(seed ^ ti.cast(tile, ti.u32))
    s = wang_hash(s + ti.cast(index, ti.u32))
    # xorshift has a fixed point at zero
    if s == ti.u32(0):
        s = ti.u32(1)
    _rng_state[slot] = s


@ti.kernel
def _seed_streams(seed: ti.u32, count: ti.i32):
    for i in range(count):
        seed_stream(i, seed, 0, i)


def seed_streams(seed: int, count: int) -> None:
    """Seed the first ``count`` streams as if they were one tile.

    Intended for kernels that sample outside of a render pass, such as
    tests of individual materials.

    Raises:
        ValueError: If count exceeds MAX_STREAMS.
    """
    if count > MAX_STREAMS:
        raise ValueError(f"Cannot seed {count} streams (maximum {MAX_STREAMS})")
    _seed_streams(seed & 0xFFFFFFFF, count)


# =============================================================================
# Uniform Variates
# =============================================================================


@ti.func
def next_u32(slot: ti.i32) -> ti.u32:
    """Advance stream ``slot`` with xorshift32 (13, 17, 5) and return the new state."""
    x = _rng_state[slot]
    x = x ^ (x << ti.u32(13))
    x = x ^ (x >> ti.u32(17))
    x = x ^ (x << ti.u32(5))
    _rng_state[slot] = x
    return x


@ti.func
def random_float(slot: ti.i32) -> ti.f32:
    """Uniform float in [0, 1) built from the top 24 bits of the stream."""
    return ti.cast(next_u32(slot) >> ti.u32(8), ti.f32) * (1.0 / 16777216.0)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_sphere(slot: ti.i32) -> vec3:
    """Uniform point inside the unit sphere by rejection sampling.

    Returns the origin if every attempt is rejected, which is vanishingly
    unlikely.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(_MAX_REJECTION_ATTEMPTS):
        if not found:
            candidate = vec3(
                random_float(slot) * 2.0 - 1.0,
                random_float(slot) * 2.0 - 1.0,
                random_float(slot) * 2.0 - 1.0,
            )
            if length_squared(candidate) < 1.0:
                p = candidate
                found = True
    return p


@ti.func
def random_cosine_direction(slot: ti.i32) -> vec3:
    """Cosine-weighted direction in a local z-up frame (pdf = cos(theta) / pi)."""
    r1 = random_float(slot)
    r2 = random_float(slot)
    phi = 2.0 * tm.pi * r1
    sqrt_r2 = ti.sqrt(r2)
    x = ti.cos(phi) * sqrt_r2
    y = ti.sin(phi) * sqrt_r2
    z = ti.sqrt(ti.max(0.0, 1.0 - r2))
    return vec3(x, y, z)


@ti.func
def sample_cosine_hemisphere(normal: vec3, slot: ti.i32):
    """Cosine-weighted hemisphere sampling around ``normal``.

    Args:
        normal: The surface normal defining the hemisphere (normalized).
        slot: The random stream to draw from.

    Returns:
        A tuple of (direction, pdf) with pdf = cos(theta) / pi.
    """
    local_dir = random_cosine_direction(slot)
    tangent, bitangent, n = build_onb_from_normal(normal)
    world_dir = local_to_world(local_dir, tangent, bitangent, n)
    pdf = tm.dot(world_dir, normal) / tm.pi
    return world_dir, pdf
