"""Metal (specular reflective) material implementation.

This module implements the metal BSDF, which models specular reflection with
optional roughness (fuzziness). Perfect metals (roughness=0) produce mirror-like
reflections, while rougher metals scatter reflected rays within a cone.

The reflection formula is:
    R = I - 2(I . N)N

For rough metals, the reflected direction is perturbed by a random offset scaled
by the roughness parameter, modeling microfacet scattering.
"""

import taichi as ti
import taichi.math as tm

from lumen.core.ray import reflect, safe_normalize
from lumen.core.sampler import random_in_unit_sphere

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def shade_metal(albedo: vec3, normal: vec3, light_direction: vec3) -> vec3:
    """Direct response to a unit directional light: albedo * max(0, N . L)."""
    return albedo * ti.max(0.0, tm.dot(normal, light_direction))


@ti.func
def scatter_metal(
    albedo: vec3,
    roughness: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    slot: ti.i32,
):
    """Compute scattered ray direction for metal material.

    Reflects the incident ray about the surface normal, then perturbs the
    reflected direction by ``roughness * random_in_unit_sphere()``. The ray is
    absorbed if the scattered direction ends up at or below the surface.

    Args:
        albedo: The reflective color (RGB, each component in [0, 1]).
        roughness: The surface roughness in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (normalized).
        normal: The surface normal facing the incident ray (normalized).
        slot: The random stream to draw from.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is 0 when the ray was absorbed.
    """
    reflected = reflect(incident_direction, normal)

    fuzz_offset = roughness * random_in_unit_sphere(slot)
    scattered_direction = safe_normalize(reflected + fuzz_offset)

    did_scatter = 1
    if tm.dot(scattered_direction, normal) <= 0.0:
        did_scatter = 0
        scattered_direction = vec3(0.0, 0.0, 0.0)

    attenuation = albedo

    return scattered_direction, attenuation, did_scatter
