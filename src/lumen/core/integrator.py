"""Path tracing integrator for Monte Carlo light transport.

This module implements the per-sample radiance estimator of the path
tracer. A path starts at a camera ray and, at every surface it reaches,
picks up the surface emission and continues along a direction sampled from
the material, until it escapes (picking up the background), is absorbed,
is terminated by Russian roulette or reaches the maximum depth.

Key features:
    - Material dispatch (Lambertian, metal, glass, generic) through bsdf
    - Russian roulette from depth 3 with p = clamp(max(throughput), 0.05, 1)
    - Self-intersection avoidance with a ray offset
    - Deterministic per-pixel random streams

Example:
    >>> # Within a render kernel, after seed_stream(slot, ...):
    >>> # radiance = trace_path(origin, direction, max_depth, slot)
"""

import taichi as ti
import taichi.math as tm

from lumen.core.sampler import random_float
from lumen.materials.bsdf import emitted, load_material, sample_scatter, surface_albedo
from lumen.scene.intersection import intersect_scene
from lumen.scene.storage import background_color

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Depth from which Russian roulette can terminate paths
MIN_BOUNCES_BEFORE_RR = 3

# Russian roulette survival probability floor
MIN_RR_PROBABILITY = 0.05

# Ray offset to avoid self-intersection (float32 kernels)
RAY_EPSILON = 1e-3

T_MAX = 1e10


@ti.func
def _offset_ray_origin(point: vec3, normal: vec3, direction: vec3) -> vec3:
    """Offset ray origin to avoid self-intersection.

    Pushes the point slightly along the normal on the side the new ray
    leaves from (above the surface for reflection, below for refraction).
    """
    offset_dir = normal
    if tm.dot(direction, normal) < 0.0:
        offset_dir = -normal
    return point + RAY_EPSILON * offset_dir


@ti.func
def trace_path(origin: vec3, direction: vec3, max_depth: ti.i32, slot: ti.i32) -> vec3:
    """Trace a single path from the camera through the scene.

    Args:
        origin: Camera ray origin.
        direction: Camera ray direction (normalized).
        max_depth: Maximum number of surface interactions.
        slot: The random stream of the pixel being rendered.

    Returns:
        The estimated radiance (RGB) for this path sample.
    """
    ray_origin = origin
    ray_direction = direction
    t_min = 0.0

    # Accumulated radiance for this path
    radiance = vec3(0.0, 0.0, 0.0)

    # Throughput (product of all attenuations along the path)
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag for path continuation (Taichi doesn't support break in ti.func loops)
    active = 1

    for depth in range(max_depth):
        if active == 1:
            hit_record = intersect_scene(ray_origin, ray_direction, t_min, T_MAX)

            if hit_record.hit == 0:
                # Ray escaped
                radiance += throughput * background_color[None]
                active = 0
            else:
                mat = load_material(hit_record.object_id)
                radiance += throughput * emitted(mat)

                albedo = surface_albedo(mat, hit_record.u, hit_record.v)
                scattered_direction, attenuation, _, did_scatter = sample_scatter(
                    mat,
                    albedo,
                    hit_record.normal,
                    ray_direction,
                    hit_record.front_face,
                    slot,
                )

                if did_scatter == 0:
                    # Absorbed, or an emitter
                    active = 0
                else:
                    throughput *= attenuation

                    if depth >= MIN_BOUNCES_BEFORE_RR:
                        peak = ti.max(throughput.x, ti.max(throughput.y, throughput.z))
                        rr_prob = tm.clamp(peak, MIN_RR_PROBABILITY, 1.0)

                        if random_float(slot) > rr_prob:
                            active = 0
                        else:
                            # Compensate for termination probability
                            throughput /= rr_prob

                    if active == 1:
                        ray_origin = _offset_ray_origin(hit_record.point, hit_record.normal, scattered_direction)
                        ray_direction = scattered_direction
                        t_min = RAY_EPSILON

    return radiance
