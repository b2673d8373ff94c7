"""RGB image buffer written by the renderers.

Pixels are stored row-major in a float64 NumPy array of shape
(height, width, 3); (x, y) = (0, 0) is the top-left pixel.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

Color = Sequence[float] | npt.NDArray[np.float64]


class Image:
    """A width x height RGB image of linear float values.

    Attributes:
        pixels: The (height, width, 3) float64 array backing the image.
    """

    def __init__(self, width: int, height: int, fill: Color = (0.0, 0.0, 0.0)) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Image dimensions must be non-negative, got {width}x{height}")
        self.pixels = np.empty((height, width, 3), dtype=np.float64)
        self.pixels[...] = np.asarray(fill, dtype=np.float64)

    @classmethod
    def from_array(cls, pixels: npt.ArrayLike) -> Image:
        """Wrap a copy of an (H, W, 3) array."""
        data = np.array(pixels, dtype=np.float64)
        if data.ndim != 3 or data.shape[2] != 3:
            raise ValueError(f"Expected an (H, W, 3) array, got shape {data.shape}")
        image = cls(0, 0)
        image.pixels = data
        return image

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        """(width, height)."""
        return self.width, self.height

    def __repr__(self) -> str:
        return f"Image({self.width}x{self.height})"

    def clear(self, color: Color = (0.0, 0.0, 0.0)) -> None:
        """Set every pixel to ``color``."""
        self.pixels[...] = np.asarray(color, dtype=np.float64)

    def resize(self, width: int, height: int, color: Color = (0.0, 0.0, 0.0)) -> None:
        """Change the dimensions; every pixel of the new buffer is ``color``."""
        if width < 0 or height < 0:
            raise ValueError(f"Image dimensions must be non-negative, got {width}x{height}")
        self.pixels = np.empty((height, width, 3), dtype=np.float64)
        self.clear(color)

    def at(self, x: int, y: int) -> np.ndarray:
        """Bounds-checked copy of pixel (x, y).

        Raises:
            IndexError: If (x, y) is outside the image.
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) out of range for {self.width}x{self.height} image")
        return self.pixels[y, x].copy()

    def __getitem__(self, xy: tuple[int, int]) -> np.ndarray:
        x, y = xy
        return self.pixels[y, x]

    def __setitem__(self, xy: tuple[int, int], color: Color) -> None:
        x, y = xy
        self.pixels[y, x] = color
