"""Materials module for surface scattering models.

Components:
    material: MaterialKind, Material and the albedo properties
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with roughness
    dielectric: Glass with Fresnel reflection and refraction
    bsdf: Kernel-side material records and dispatch

Only the host-side material records are imported here. The kernel modules
read scene storage fields and must be imported after ``ti.init()``.
"""

from .material import Checkerboard, Material, MaterialKind, MaterialProperty, SolidColor

__all__ = [
    "Checkerboard",
    "Material",
    "MaterialKind",
    "MaterialProperty",
    "SolidColor",
]
