"""Render the demo scene to a PPM file.

Usage:
    lumen-render [options]

Options:
    --width WIDTH          Image width in pixels (default: 1920)
    --height HEIGHT        Image height in pixels (default: 1080)
    --output OUTPUT        Output file path (default: render.ppm)
    --renderer {simple,path}
                           Rendering strategy (default: simple)
    --samples SAMPLES      Path tracer samples per pixel (default: LUMEN_SAMPLES or 32)
    --max-depth DEPTH      Path tracer maximum depth (default: LUMEN_MAX_DEPTH or 8)
    --seed SEED            Path tracer seed (default: LUMEN_SEED or 0)
    --srgb                 Encode the output with the sRGB transfer function
    --log-level LEVEL      Logging level (default: LUMEN_LOG_LEVEL or INFO)
    --log-file PATH        Also log to a rotating file

Example:
    lumen-render --width 320 --height 240 --renderer path --samples 64 --output demo.ppm
"""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import taichi as ti

from lumen.config import DEFAULT_MAX_DEPTH, DEFAULT_SAMPLES_PER_PIXEL, DEFAULT_SEED, LOG_LEVEL, RenderSettings
from lumen.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Render settings left unset stay None; see ``settings_from_args``.
    """
    parser = argparse.ArgumentParser(
        prog="lumen-render",
        description="Render the two-sphere demo scene to a binary PPM file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1920,
        help="Image width in pixels (default: 1920)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=1080,
        help="Image height in pixels (default: 1080)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="render.ppm",
        help="Output file path (default: render.ppm)",
    )
    parser.add_argument(
        "--renderer",
        choices=("simple", "path"),
        default="simple",
        help="Rendering strategy (default: simple)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=None,
        help=f"Path tracer samples per pixel (default: LUMEN_SAMPLES or {DEFAULT_SAMPLES_PER_PIXEL})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help=f"Path tracer maximum depth (default: LUMEN_MAX_DEPTH or {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help=f"Path tracer seed (default: LUMEN_SEED or {DEFAULT_SEED})",
    )
    parser.add_argument(
        "--srgb",
        action="store_true",
        help="Encode the output with the sRGB transfer function",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=LOG_LEVEL,
        help=f"Logging level (default: {LOG_LEVEL})",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this rotating file",
    )
    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> RenderSettings:
    """Render settings from the command line, falling back to ``LUMEN_*`` variables.

    Raises:
        ValueError: If a variable is not an integer or a value is out of range.
    """
    env = RenderSettings.from_env()
    return RenderSettings(
        samples_per_pixel=env.samples_per_pixel if args.samples is None else args.samples,
        max_depth=env.max_depth if args.max_depth is None else args.max_depth,
        seed=env.seed if args.seed is None else args.seed,
    )


def render_demo(
    width: int = 1920,
    height: int = 1080,
    output_path: str = "render.ppm",
    renderer_name: str = "simple",
    settings: RenderSettings | None = None,
    srgb: bool = False,
) -> bool:
    """Render the demo scene and save it as a PPM.

    Requires ``ti.init()`` to have been called.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        output_path: Output file path.
        renderer_name: "simple" or "path".
        settings: Path tracer settings. Uses defaults if None.
        srgb: Apply the sRGB transfer function before quantizing.

    Returns:
        True if the image was written.
    """
    # Lazy imports to allow Taichi initialization first
    from lumen.core.renderer import PathTracer, SimpleRayTracer
    from lumen.io.image import Image
    from lumen.io.ppm import save_ppm
    from lumen.linalg.color import linear_to_srgb
    from lumen.scene.demo import create_demo_scene

    if settings is None:
        settings = RenderSettings()

    scene = create_demo_scene(width, height)
    if renderer_name == "path":
        renderer = PathTracer.from_settings(settings)
    else:
        renderer = SimpleRayTracer()

    image = Image(width, height)
    renderer.render(scene, image, width, height)

    if srgb:
        image.pixels[...] = linear_to_srgb(image.pixels)

    if not save_ppm(image, output_path):
        logger.error("Failed to write PPM image to %s", output_path)
        return False
    logger.info("Wrote PPM image to %s (%dx%d)", output_path, width, height)
    return True


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        settings = settings_from_args(args)
    except ValueError as e:
        logger.error("%s", e)
        return 2

    ti.init(arch=ti.cpu)

    try:
        ok = render_demo(
            width=args.width,
            height=args.height,
            output_path=args.output,
            renderer_name=args.renderer,
            settings=settings,
            srgb=args.srgb,
        )
    except (ValueError, RuntimeError) as e:
        logger.error("Render failed: %s", e)
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
