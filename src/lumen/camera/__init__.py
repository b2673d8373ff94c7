"""Camera module for primary ray generation.

Components:
    pinhole: Perspective pinhole camera and its kernel-side ray generator

``lumen.camera.pinhole`` declares Taichi fields; import it after
``ti.init()``.
"""
