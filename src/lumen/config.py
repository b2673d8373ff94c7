"""Render settings and environment configuration for lumen.

Defaults can be overridden through ``LUMEN_*`` environment variables:

- ``LUMEN_SAMPLES``: samples per pixel of the path tracer (default 32)
- ``LUMEN_MAX_DEPTH``: maximum path length (default 8)
- ``LUMEN_SEED``: base seed of the per-pixel random streams (default 0)
- ``LUMEN_LOG_LEVEL``: logging level used by the CLI (default INFO)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

# Logging settings
LOG_LEVEL = os.getenv("LUMEN_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

DEFAULT_SAMPLES_PER_PIXEL = 32
DEFAULT_MAX_DEPTH = 8
DEFAULT_SEED = 0


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class RenderSettings:
    """Parameters of a path-traced render.

    The rendered image is a deterministic function of these settings, the
    scene and the image size.

    Attributes:
        samples_per_pixel: Independent paths averaged per pixel.
        max_depth: Maximum number of surface interactions per path.
        seed: Base seed of the per-pixel random streams.
    """

    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_depth: int = DEFAULT_MAX_DEPTH
    seed: int = DEFAULT_SEED

    def __post_init__(self) -> None:
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth <= 0:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RenderSettings:
        """Build settings from ``LUMEN_*`` variables, falling back to the defaults.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Raises:
            ValueError: If a variable is not an integer or is out of range.
        """
        if environ is None:
            environ = os.environ
        return cls(
            samples_per_pixel=_env_int(environ, "LUMEN_SAMPLES", DEFAULT_SAMPLES_PER_PIXEL),
            max_depth=_env_int(environ, "LUMEN_MAX_DEPTH", DEFAULT_MAX_DEPTH),
            seed=_env_int(environ, "LUMEN_SEED", DEFAULT_SEED),
        )
