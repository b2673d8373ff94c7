"""Binary PPM (P6) reading and writing through Pillow.

Files are written as ``P6\\n<width> <height>\\n255\\n`` followed by 8-bit
RGB triples; channel values are mapped with ``clamp(round(c * 255), 0, 255)``.
Failures are logged and reported through the return value, never raised.
"""

from __future__ import annotations

import logging
from os import PathLike

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from lumen.io.image import Image

logger = logging.getLogger(__name__)


def image_to_uint8(pixels: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Quantize linear [0, 1] values to 8 bits, clamping out-of-range values."""
    return np.clip(np.rint(np.asarray(pixels, dtype=np.float64) * 255.0), 0, 255).astype(np.uint8)


def save_ppm(image: Image, path: str | PathLike[str]) -> bool:
    """Write ``image`` as a binary PPM.

    Args:
        image: The image to write.
        path: Output file path.

    Returns:
        True on success, False if the file could not be written.
    """
    try:
        pil_image = PILImage.fromarray(image_to_uint8(image.pixels))
        pil_image.save(path, format="PPM")
    except (OSError, ValueError) as exc:
        logger.warning("Failed to write PPM %s: %s", path, exc)
        return False
    logger.debug("Wrote %dx%d PPM to %s", image.width, image.height, path)
    return True


def _read_header(path: str | PathLike[str]) -> list[bytes] | None:
    """The first four header tokens (magic, width, height, maxval), skipping ``#`` comments.

    Returns None if the file ends before four tokens have been read.
    """
    tokens: list[bytes] = []
    with open(path, "rb") as f:
        for line in f:
            tokens.extend(line.split(b"#", 1)[0].split())
            if len(tokens) >= 4:
                return tokens[:4]
    return None


def load_ppm(path: str | PathLike[str]) -> Image | None:
    """Read a binary PPM with a maximum value of 255.

    Returns:
        The image with values in [0, 1], or None if the file is missing,
        is not a P6 file, or has a maximum value other than 255.
    """
    try:
        header = _read_header(path)
    except OSError as exc:
        logger.warning("Failed to read PPM %s: %s", path, exc)
        return None
    if header is None or header[0] != b"P6":
        logger.warning("%s is not a binary PPM file", path)
        return None
    if header[3] != b"255":
        logger.warning("%s has maximum value %s, expected 255", path, header[3].decode("ascii", "replace"))
        return None

    try:
        with PILImage.open(path) as pil_image:
            if pil_image.format != "PPM" or pil_image.mode != "RGB":
                logger.warning("%s is not an 8-bit RGB PPM (mode %s)", path, pil_image.mode)
                return None
            data = np.asarray(pil_image, dtype=np.float64)
    except OSError as exc:
        logger.warning("Failed to read PPM %s: %s", path, exc)
        return None
    return Image.from_array(data / 255.0)
