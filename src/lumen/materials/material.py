"""Material records and albedo properties.

A ``Material`` is a tagged record: the ``kind`` selects which scattering
model the renderers dispatch to, and the remaining fields parameterize it.
Construct materials through the named constructors, which clamp roughness
and transparency to [0, 1]:

    >>> from lumen.materials.material import Material
    >>> red = Material.lambertian((0.9, 0.1, 0.1))
    >>> mirror = Material.metal((0.8, 0.8, 0.8), roughness=0.0)
    >>> lamp = Material.emissive((1.0, 0.9, 0.8), power=4.0)

The kernel side of the model lives in ``lumen.materials.bsdf``; the host
queries here (``emitted_radiance`` and ``evaluate_albedo``) mirror it for
Python callers.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np


class MaterialKind(IntEnum):
    """Enumeration of supported scattering models.

    Used for material dispatch in the renderers.
    """

    LAMBERTIAN = 0
    METAL = 1
    GLASS = 2
    EMISSIVE = 3
    GENERIC = 4


def _clamp01(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


def _color(value: Sequence[float]) -> tuple[float, float, float]:
    r, g, b = (float(c) for c in value)
    return (r, g, b)


class MaterialProperty:
    """An albedo evaluator (u, v, point) -> RGB.

    Only the subclasses defined in this module can be uploaded to render
    kernels.
    """

    def evaluate(self, u: float, v: float, point: Sequence[float]) -> np.ndarray:
        raise NotImplementedError


@dataclass(frozen=True)
class SolidColor(MaterialProperty):
    """A constant color regardless of surface position."""

    color: tuple[float, float, float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", _color(self.color))

    def evaluate(self, u: float, v: float, point: Sequence[float]) -> np.ndarray:
        return np.array(self.color)


@dataclass(frozen=True)
class Checkerboard(MaterialProperty):
    """A checker pattern over (u, v) in [0, 1]^2.

    The cell at (floor(u * tiles_u), floor(v * tiles_v)) takes ``color_a``
    when the XOR of the two cell indices is even and ``color_b`` otherwise.

    Attributes:
        color_a: Color of the even cells.
        color_b: Color of the odd cells.
        tiles_u: Number of cells along u.
        tiles_v: Number of cells along v.
    """

    color_a: tuple[float, float, float]
    color_b: tuple[float, float, float]
    tiles_u: int = 8
    tiles_v: int = 8

    def __post_init__(self) -> None:
        object.__setattr__(self, "color_a", _color(self.color_a))
        object.__setattr__(self, "color_b", _color(self.color_b))

    def evaluate(self, u: float, v: float, point: Sequence[float]) -> np.ndarray:
        iu = int(math.floor(u * self.tiles_u))
        iv = int(math.floor(v * self.tiles_v))
        return np.array(self.color_a if (iu ^ iv) & 1 == 0 else self.color_b)


@dataclass(frozen=True)
class Material:
    """Surface description shared by the ray tracer and the path tracer.

    The default material is black, opaque and GENERIC with roughness 1, i.e.
    a black diffuse surface.

    Attributes:
        albedo: Base reflectance color (RGB).
        roughness: 0 for a perfect mirror, 1 for fully rough; in [0, 1].
        transparency: Fraction of light transmitted; in [0, 1]. For glass it
            also weights the tint (0 is clear, 1 is fully tinted by albedo).
        radiance: Emitted color, used when kind is EMISSIVE.
        emission_power: Scale applied to radiance.
        kind: Which scattering model to use.
        albedo_property: Optional texture-like albedo overriding ``albedo``.
            Excluded from equality.
    """

    albedo: tuple[float, float, float] = (0.0, 0.0, 0.0)
    roughness: float = 1.0
    transparency: float = 0.0
    radiance: tuple[float, float, float] = (0.0, 0.0, 0.0)
    emission_power: float = 1.0
    kind: MaterialKind = MaterialKind.GENERIC
    albedo_property: MaterialProperty | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", _color(self.albedo))
        object.__setattr__(self, "radiance", _color(self.radiance))
        object.__setattr__(self, "roughness", _clamp01(self.roughness))
        object.__setattr__(self, "transparency", _clamp01(self.transparency))
        object.__setattr__(self, "emission_power", float(self.emission_power))
        object.__setattr__(self, "kind", MaterialKind(self.kind))

    # =========================================================================
    # Constructors
    # =========================================================================

    @classmethod
    def lambertian(
        cls,
        albedo: Sequence[float],
        albedo_property: MaterialProperty | None = None,
    ) -> Material:
        """Ideal diffuse reflector."""
        return cls(albedo=albedo, roughness=1.0, kind=MaterialKind.LAMBERTIAN, albedo_property=albedo_property)

    @classmethod
    def metal(cls, albedo: Sequence[float], roughness: float = 0.0) -> Material:
        """Specular reflector; roughness fuzzes the reflection and is clamped to [0, 1]."""
        return cls(albedo=albedo, roughness=roughness, kind=MaterialKind.METAL)

    @classmethod
    def glass(cls, tint: Sequence[float], roughness: float = 0.0, transparency: float = 0.0) -> Material:
        """Dielectric with index of refraction 1.5.

        Args:
            tint: Color the transmitted and reflected light is tinted toward.
            roughness: Fuzz applied to the chosen direction, clamped to [0, 1].
            transparency: Tint weight, clamped to [0, 1]; attenuation is
                lerp(white, tint, transparency).
        """
        return cls(albedo=tint, roughness=roughness, transparency=transparency, kind=MaterialKind.GLASS)

    @classmethod
    def emissive(cls, radiance: Sequence[float], power: float = 1.0) -> Material:
        """Light source emitting ``radiance * power``; terminates paths."""
        return cls(radiance=radiance, emission_power=power, kind=MaterialKind.EMISSIVE)

    @classmethod
    def from_params(
        cls,
        albedo: Sequence[float],
        roughness: float,
        transparency: float,
        radiance: Sequence[float],
        emission_power: float = 1.0,
    ) -> Material:
        """GENERIC material blending glass, diffuse and metal by its parameters."""
        return cls(
            albedo=albedo,
            roughness=roughness,
            transparency=transparency,
            radiance=radiance,
            emission_power=emission_power,
            kind=MaterialKind.GENERIC,
        )

    # =========================================================================
    # Host Queries
    # =========================================================================

    def emitted_radiance(self) -> np.ndarray:
        """``radiance * emission_power`` for EMISSIVE materials, else black."""
        if self.kind != MaterialKind.EMISSIVE:
            return np.zeros(3)
        return np.array(self.radiance) * self.emission_power

    def evaluate_albedo(self, u: float = 0.0, v: float = 0.0, point: Sequence[float] = (0.0, 0.0, 0.0)) -> np.ndarray:
        """Albedo at a surface position, from the property when one is attached."""
        if self.albedo_property is not None:
            return np.asarray(self.albedo_property.evaluate(u, v, point), dtype=np.float64)
        return np.array(self.albedo)
