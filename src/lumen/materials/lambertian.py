"""Lambertian (ideal diffuse) material implementation.

This module implements the Lambertian BRDF, which models ideal diffuse reflection
where incident light is scattered uniformly in all directions weighted by the
cosine of the angle from the surface normal.

The Lambertian BRDF is:
    f_r(wi, wo) = albedo / pi

The probability density function for cosine-weighted hemisphere sampling is:
    pdf(wi) = cos(theta) / pi

Example:
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, pdf = scatter_lambertian(albedo, normal, slot)
    >>> # color = shade_lambertian(albedo, normal, light_dir)
"""

import taichi as ti
import taichi.math as tm

from lumen.core.ray import near_zero
from lumen.core.sampler import sample_cosine_hemisphere

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def eval_lambertian(albedo: vec3) -> vec3:
    """Evaluate the Lambertian BRDF, albedo / pi (cosine term excluded)."""
    return albedo / tm.pi


@ti.func
def shade_lambertian(albedo: vec3, normal: vec3, light_direction: vec3) -> vec3:
    """Direct response to a unit directional light: albedo * max(0, N . L) / pi.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The surface normal facing the viewer (normalized).
        light_direction: Unit direction toward the light.

    Returns:
        The reflected radiance.
    """
    return eval_lambertian(albedo) * ti.max(0.0, tm.dot(normal, light_direction))


@ti.func
def scatter_lambertian(
    albedo: vec3,
    normal: vec3,
    slot: ti.i32,
):
    """Sample a scattered ray direction for Lambertian material.

    Uses cosine-weighted hemisphere sampling, under which the attenuation
    (BRDF * cos_theta) / pdf reduces to the albedo.

    Args:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
        normal: The surface normal facing the incident ray (normalized).
        slot: The random stream to draw from.

    Returns:
        A tuple of (scattered_direction, attenuation, pdf).
    """
    scattered_direction, pdf = sample_cosine_hemisphere(normal, slot)

    # Degenerate sample from floating point rounding
    if near_zero(scattered_direction):
        scattered_direction = normal

    attenuation = albedo

    return scattered_direction, attenuation, pdf
