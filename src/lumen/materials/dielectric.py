"""Dielectric (glass) material implementation.

This module implements the dielectric BSDF, which models transparent materials
with refraction and Fresnel reflectance.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when sin(theta_t) > 1

The material randomly chooses between reflection and refraction based on
the Fresnel reflectance probability, which increases at grazing angles.
Light is tinted by lerp(white, tint, transparency), and a non-zero
roughness fuzzes the chosen direction as long as the fuzzed direction stays
on the same side of the surface.
"""

import taichi as ti
import taichi.math as tm

from lumen.core.ray import reflect, refract, safe_normalize, schlick_fresnel
from lumen.core.sampler import random_float, random_in_unit_sphere

# Type alias for 3D vectors
vec3 = tm.vec3

# Index of refraction of every glass material (air is 1.0)
GLASS_IOR = 1.5


@ti.func
def refraction_ratio(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """n_incident / n_transmitted: 1/ior entering the material, ior leaving it."""
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def will_reflect(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """1 if total internal reflection occurs (no refraction possible), else 0."""
    ratio = refraction_ratio(ior, front_face)
    cos_theta = tm.min(-tm.dot(incident_direction, normal), 1.0)
    sin_theta = tm.sqrt(ti.max(0.0, 1.0 - cos_theta * cos_theta))
    result = 0
    if ratio * sin_theta > 1.0:
        result = 1
    return result


@ti.func
def fresnel_reflectance(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Fresnel reflectance by Schlick's approximation, in [0, 1]."""
    ratio = refraction_ratio(ior, front_face)
    cos_theta = tm.min(-tm.dot(incident_direction, normal), 1.0)
    return schlick_fresnel(cos_theta, ratio)


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    tint: vec3,
    transparency: ti.f32,
    roughness: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    slot: ti.i32,
):
    """Compute scattered ray direction for dielectric material.

    Reflects under total internal reflection or with probability equal to the
    Schlick reflectance; refracts otherwise.

    Args:
        ior: Index of refraction of the material.
        tint: Color the light is tinted toward (the material albedo).
        transparency: Weight of the tint in [0, 1].
        roughness: Fuzz radius applied to the chosen direction, in [0, 1].
        incident_direction: The incoming ray direction (normalized).
        normal: The surface normal facing the incident ray (normalized).
        front_face: 1 if the ray hits the outside of the surface,
            0 if it travels inside the material.
        slot: The random stream to draw from.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter); dielectrics
        always scatter.
    """
    attenuation = vec3(1.0, 1.0, 1.0) * (1.0 - transparency) + tint * transparency

    cannot_refract = will_reflect(ior, incident_direction, normal, front_face)
    reflectance = fresnel_reflectance(ior, incident_direction, normal, front_face)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract == 1 or random_float(slot) < reflectance:
        scattered_direction = reflect(incident_direction, normal)
    else:
        scattered_direction = refract(incident_direction, normal, refraction_ratio(ior, front_face))
    scattered_direction = safe_normalize(scattered_direction)

    if roughness > 0.0:
        fuzzed = safe_normalize(scattered_direction + roughness * random_in_unit_sphere(slot))
        side = tm.dot(scattered_direction, normal)
        fuzzed_side = tm.dot(fuzzed, normal)
        if side * fuzzed_side > 0.0:
            scattered_direction = fuzzed

    did_scatter = 1

    return scattered_direction, attenuation, did_scatter
