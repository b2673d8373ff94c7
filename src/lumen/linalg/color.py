"""Color-space utilities.

Colors are NumPy arrays whose last axis holds the channels: 3 for RGB,
4 for RGBA. Every function here works elementwise, so the same call
converts a single color or a whole ``(H, W, 3)`` image.

The sRGB transfer functions follow IEC 61966-2-1 (linear segment below
0.0031308 / 0.04045). Luminance uses the Rec. 709 primaries.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

Color = npt.NDArray[np.float64]

REC709_WEIGHTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)


def _as_color(c: npt.ArrayLike) -> Color:
    return np.asarray(c, dtype=np.float64)


def clamp(c: npt.ArrayLike, lo: float, hi: float) -> Color:
    return np.clip(_as_color(c), lo, hi)


def saturate(c: npt.ArrayLike) -> Color:
    """Clamp every channel to [0, 1]."""
    return clamp(c, 0.0, 1.0)


def linear_to_srgb(c: npt.ArrayLike) -> Color:
    """Encode linear values with the sRGB transfer curve (input saturated first)."""
    x = saturate(c)
    return np.where(x <= 0.0031308, 12.92 * x, 1.055 * np.power(x, 1.0 / 2.4) - 0.055)


def srgb_to_linear(c: npt.ArrayLike) -> Color:
    """Decode sRGB-encoded values back to linear (input saturated first)."""
    x = saturate(c)
    return np.where(x <= 0.04045, x / 12.92, np.power((x + 0.055) / 1.055, 2.4))


def luminance(c: npt.ArrayLike) -> Color | float:
    """Relative luminance of linear RGB; the last axis must have 3 channels."""
    result = _as_color(c)[..., :3] @ REC709_WEIGHTS
    if np.ndim(result) == 0:
        return float(result)
    return result


def with_alpha(c: npt.ArrayLike, alpha: float = 1.0) -> Color:
    """Append an alpha channel to RGB."""
    rgb = _as_color(c)
    a = np.full(rgb.shape[:-1] + (1,), alpha, dtype=np.float64)
    return np.concatenate([rgb, a], axis=-1)


def premultiply(c: npt.ArrayLike) -> Color:
    """Scale RGB by alpha."""
    rgba = _as_color(c)
    result = rgba.copy()
    result[..., :3] *= rgba[..., 3:4]
    return result


def unpremultiply(c: npt.ArrayLike) -> Color:
    """Divide RGB by alpha; fully transparent pixels become (0, 0, 0, 0)."""
    rgba = _as_color(c)
    alpha = rgba[..., 3:4]
    safe = np.where(alpha == 0.0, 1.0, alpha)
    result = rgba.copy()
    result[..., :3] = np.where(alpha == 0.0, 0.0, rgba[..., :3] / safe)
    return result


def over(src: npt.ArrayLike, dst: npt.ArrayLike) -> Color:
    """Porter-Duff "source over destination" on premultiplied RGBA."""
    s = _as_color(src)
    d = _as_color(dst)
    return s + d * (1.0 - s[..., 3:4])
