"""Kernel-side material model: the four queries both renderers use.

Every material answers:

- ``emitted``: radiance * emission_power for emissive materials, else zero;
- ``surface_albedo``: the checkerboard color at (u, v) if one is attached,
  else the constant albedo;
- ``direct_shade``: response to a single unit directional light (simple
  ray tracer);
- ``sample_scatter``: a continuation direction and attenuation (path
  tracer), or no scatter for absorbed rays and emitters.

Material parameters are read from the per-object slots filled by
``lumen.scene.storage.upload_objects``.
"""

import taichi as ti
import taichi.math as tm

from lumen.core.sampler import random_float
from lumen.materials.dielectric import GLASS_IOR, scatter_dielectric
from lumen.materials.lambertian import scatter_lambertian, shade_lambertian
from lumen.materials.material import MaterialKind
from lumen.materials.metal import scatter_metal, shade_metal
from lumen.scene.storage import (
    material_albedo,
    material_checker_a,
    material_checker_b,
    material_emission_power,
    material_kind,
    material_radiance,
    material_roughness,
    material_textured,
    material_tiles,
    material_transparency,
)

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class MaterialRecord:
    """Material parameters of one object, as seen by kernels.

    Attributes:
        kind: A MaterialKind value.
        albedo: Constant base color.
        roughness: Fuzz for metal and glass, diffuse probability for generic.
        transparency: Tint weight for glass, glass probability for generic.
        radiance: Emitted color.
        emission_power: Scale applied to radiance.
        textured: 1 when the albedo comes from the checkerboard fields.
        checker_a: Even-cell checker color.
        checker_b: Odd-cell checker color.
        tiles: Checker cells along (u, v).
    """

    kind: ti.i32
    albedo: vec3
    roughness: ti.f32
    transparency: ti.f32
    radiance: vec3
    emission_power: ti.f32
    textured: ti.i32
    checker_a: vec3
    checker_b: vec3
    tiles: tm.vec2


@ti.func
def load_material(index: ti.i32) -> MaterialRecord:
    """Read the material slot of object ``index``."""
    return MaterialRecord(
        kind=material_kind[index],
        albedo=material_albedo[index],
        roughness=material_roughness[index],
        transparency=material_transparency[index],
        radiance=material_radiance[index],
        emission_power=material_emission_power[index],
        textured=material_textured[index],
        checker_a=material_checker_a[index],
        checker_b=material_checker_b[index],
        tiles=material_tiles[index],
    )


@ti.func
def emitted(mat: MaterialRecord) -> vec3:
    """Emitted radiance; zero unless the material is emissive."""
    result = vec3(0.0, 0.0, 0.0)
    if mat.kind == int(MaterialKind.EMISSIVE):
        result = mat.radiance * mat.emission_power
    return result


@ti.func
def surface_albedo(mat: MaterialRecord, u: ti.f32, v: ti.f32) -> vec3:
    """Albedo at surface parameters (u, v)."""
    result = mat.albedo
    if mat.textured == 1:
        iu = ti.cast(ti.floor(u * mat.tiles.x), ti.i32)
        iv = ti.cast(ti.floor(v * mat.tiles.y), ti.i32)
        if ((iu ^ iv) & 1) == 0:
            result = mat.checker_a
        else:
            result = mat.checker_b
    return result


@ti.func
def direct_shade(mat: MaterialRecord, albedo: vec3, normal: vec3, light_direction: vec3) -> vec3:
    """Response to a unit white directional light arriving from ``light_direction``.

    Lambertian and metal follow their shade functions, glass and emitters
    contribute nothing, and generic materials shade as Lambertian weighted
    by their opacity.
    """
    result = vec3(0.0, 0.0, 0.0)
    if mat.kind == int(MaterialKind.LAMBERTIAN):
        result = shade_lambertian(albedo, normal, light_direction)
    elif mat.kind == int(MaterialKind.METAL):
        result = shade_metal(albedo, normal, light_direction)
    elif mat.kind == int(MaterialKind.GENERIC):
        result = shade_lambertian(albedo, normal, light_direction) * (1.0 - mat.transparency)
    return result


@ti.func
def sample_scatter(
    mat: MaterialRecord,
    albedo: vec3,
    normal: vec3,
    incident_direction: vec3,
    front_face: ti.i32,
    slot: ti.i32,
):
    """Sample a continuation ray for the path tracer.

    Args:
        mat: The material at the hit.
        albedo: ``surface_albedo`` at the hit.
        normal: Unit normal facing the incident ray.
        incident_direction: Incoming ray direction (normalized).
        front_face: 1 if the ray hit the outward side.
        slot: The random stream to draw from.

    Returns:
        A tuple of (direction, attenuation, specular, did_scatter). When
        did_scatter is 0 the path terminates (absorbed or emissive).
    """
    direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    specular = 0
    did_scatter = 0

    # Generic materials pick one of the three lobes per sample
    lobe = mat.kind
    if lobe == int(MaterialKind.GENERIC):
        if random_float(slot) < mat.transparency:
            lobe = int(MaterialKind.GLASS)
        elif random_float(slot) < mat.roughness:
            lobe = int(MaterialKind.LAMBERTIAN)
        else:
            lobe = int(MaterialKind.METAL)

    if lobe == int(MaterialKind.LAMBERTIAN):
        direction, attenuation, _ = scatter_lambertian(albedo, normal, slot)
        did_scatter = 1
    elif lobe == int(MaterialKind.METAL):
        direction, attenuation, did_scatter = scatter_metal(albedo, mat.roughness, incident_direction, normal, slot)
        specular = 1
    elif lobe == int(MaterialKind.GLASS):
        direction, attenuation, did_scatter = scatter_dielectric(
            GLASS_IOR,
            albedo,
            mat.transparency,
            mat.roughness,
            incident_direction,
            normal,
            front_face,
            slot,
        )
        specular = 1

    return direction, attenuation, specular, did_scatter
