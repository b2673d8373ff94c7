"""Offline CPU renderer built on Taichi.

This package synthesizes images of 3D scenes by casting rays and simulating
light transport, with support for:
- A direct-illumination ray tracer (one bounce, implicit directional light)
- A Monte Carlo path tracer with Russian roulette termination
- Spheres, planes and triangle meshes placed by affine transforms
- Lambertian, metal, glass, emissive and generic materials

Subpackages:
    linalg: Host-side vectors, matrices, quaternions, transforms and colors
    geometry: Shape primitives, bounding boxes and intersection routines
    materials: Material records and BSDF sampling/evaluation
    camera: Look-at perspective camera and primary ray generation
    scene: Scene objects, scene storage and ray traversal
    core: Rays, random streams, integrators and the renderers
    io: Image buffer, PPM codec and OBJ loader

Modules that declare Taichi fields (scene storage, render target, random
streams) must be imported after ``ti.init()`` has been called.
"""

__version__ = "0.1.0"
