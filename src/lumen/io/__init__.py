"""Image and mesh file I/O.

Components:
    image: The RGB Image buffer renderers write into
    ppm: Binary PPM reading and writing (Pillow)
    obj: Wavefront OBJ mesh loading
"""

from .image import Image
from .obj import load_obj, parse_obj
from .ppm import load_ppm, save_ppm

__all__ = [
    "Image",
    "load_obj",
    "load_ppm",
    "parse_obj",
    "save_ppm",
]
