"""Direct-illumination shading for the simple ray tracer.

One ray per pixel, one bounce, no shadow rays: a primary ray that misses
returns the background, a ray that hits an emitter returns its emission,
and any other surface is shaded against a single unit white directional
light arriving from normalize(1, 1, 1).
"""

import math

import taichi as ti
import taichi.math as tm

from lumen.materials.bsdf import direct_shade, emitted, load_material, surface_albedo
from lumen.materials.material import MaterialKind
from lumen.scene.intersection import intersect_scene
from lumen.scene.storage import background_color

# Type alias for 3D vectors
vec3 = tm.vec3

# Far end of every ray interval
T_MAX = 1e10

# Unit direction toward the implicit light, normalize(1, 1, 1)
_LIGHT_COMPONENT = 1.0 / math.sqrt(3.0)


@ti.func
def light_direction() -> vec3:
    return vec3(_LIGHT_COMPONENT, _LIGHT_COMPONENT, _LIGHT_COMPONENT)


@ti.func
def shade_direct(origin: vec3, direction: vec3) -> vec3:
    """Radiance along a primary ray under direct illumination.

    Args:
        origin: Ray origin (the camera eye).
        direction: Ray direction.

    Returns:
        The shaded color, clamped to be non-negative.
    """
    color = background_color[None]

    rec = intersect_scene(origin, direction, 0.0, T_MAX)
    if rec.hit == 1:
        mat = load_material(rec.object_id)
        if mat.kind == int(MaterialKind.EMISSIVE):
            color = emitted(mat)
        else:
            albedo = surface_albedo(mat, rec.u, rec.v)
            color = direct_shade(mat, albedo, rec.normal, light_direction())

    return tm.max(color, vec3(0.0, 0.0, 0.0))
