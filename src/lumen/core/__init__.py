"""Core rendering module.

Components:
    ray: Host Ray and kernel vector utilities
    sampler: Deterministic per-pixel random streams and sampling
    direct: Direct-illumination shading for the simple ray tracer
    integrator: Monte Carlo path tracing estimator
    renderer: Render target, tile kernels and the Renderer classes

Note: only ``ray`` is imported here. The other modules declare Taichi fields
and must be imported directly once ``ti.init()`` has run, e.g.:

    from lumen.core.renderer import PathTracer
"""

from .ray import Ray, make_ray

__all__ = [
    "Ray",
    "make_ray",
]
