"""Command-line entry point.

Usage:
    weekend-tracer [options]
    python -m weekend_tracer [options]

Options:
    --width WIDTH           Image width in pixels (default: 400)
    --aspect-ratio RATIO    Width / height (default: 16/9)
    --samples SAMPLES       Samples per pixel (default: 100)
    --max-depth DEPTH       Maximum scatter events per path (default: 50)
    --scene NAME            single, showcase or random (default: showcase)
    --output OUTPUT         Output file, .ppm or .png (default: image.ppm)
    --seed SEED             Seed for reproducible renders
    --arch {cpu,gpu}        Taichi backend (default: cpu)
    --batch-size SIZE       Samples per progress update (default: 10)
    --log-level LEVEL       Logging level (default: INFO)
    --quiet                 Only log warnings and errors

Example:
    weekend-tracer --scene random --aspect-ratio 1.5 --width 1200 --samples 500 --output cover.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path

import taichi as ti

from weekend_tracer.config import ARCHES, RenderConfig
from weekend_tracer.logging_config import setup_logging

logger = logging.getLogger(__name__)

SCENE_NAMES = ("single", "showcase", "random")


def parse_args(
    argv: Sequence[str] | None = None,
    defaults: RenderConfig | None = None,
) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Arguments to parse; defaults to sys.argv[1:].
        defaults: Config supplying the default values; defaults to
            RenderConfig.from_env().
    """
    if defaults is None:
        defaults = RenderConfig.from_env()

    parser = argparse.ArgumentParser(
        prog="weekend-tracer",
        description="Render a scene with the Monte Carlo path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=defaults.image_width,
        help=f"Image width in pixels (default: {defaults.image_width})",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=defaults.aspect_ratio,
        help="Image width divided by height (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=defaults.samples_per_pixel,
        help=f"Number of samples per pixel (default: {defaults.samples_per_pixel})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=defaults.max_depth,
        help=f"Maximum scatter events per path (default: {defaults.max_depth})",
    )
    parser.add_argument(
        "--scene",
        choices=SCENE_NAMES,
        default=defaults.scene,
        help=f"Scene to render (default: {defaults.scene})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=defaults.output,
        help=f"Output file path, .ppm or .png (default: {defaults.output})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=defaults.seed,
        help="Random seed for reproducible renders",
    )
    parser.add_argument(
        "--arch",
        choices=ARCHES,
        default=defaults.arch,
        help=f"Taichi backend (default: {defaults.arch})",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=defaults.batch_size,
        help=f"Samples per progress update (default: {defaults.batch_size})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=defaults.log_level,
        help=f"Logging level (default: {defaults.log_level})",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> RenderConfig:
    """Build and validate a RenderConfig from parsed arguments.

    Raises:
        ValueError: If the resulting configuration is invalid.
    """
    config = RenderConfig(
        image_width=args.width,
        aspect_ratio=args.aspect_ratio,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        scene=args.scene,
        output=args.output,
        seed=args.seed,
        arch=args.arch,
        batch_size=args.batch_size,
        log_level="WARNING" if args.quiet else args.log_level,
    )
    config.validate()
    return config


def init_taichi(arch: str, seed: int | None = None) -> None:
    """Initialize Taichi, falling back to the CPU if no GPU is usable."""
    kwargs = {} if seed is None else {"random_seed": seed}
    if arch == "gpu":
        try:
            ti.init(arch=ti.gpu, **kwargs)
            logger.info("Using GPU backend")
            return
        except Exception:
            logger.warning("GPU backend unavailable, falling back to CPU", exc_info=True)
    ti.init(arch=ti.cpu, **kwargs)
    logger.info("Using CPU backend")


def render(config: RenderConfig) -> Path:
    """Render the configured scene and save it.

    Taichi must already be initialized.

    Returns:
        Path to the saved image file.
    """
    # Field-declaring modules are imported after Taichi is initialized
    from weekend_tracer.camera.thin_lens import setup_camera
    from weekend_tracer.core.progressive import ProgressiveRenderer
    from weekend_tracer.scene.presets import create_scene

    width, height = config.image_width, config.image_height
    logger.info("Creating %r scene (%dx%d)", config.scene, width, height)

    scene, camera = create_scene(config.scene, aspect_ratio=config.aspect_ratio, seed=config.seed)
    setup_camera(camera)

    renderer = ProgressiveRenderer(width, height, max_depth=config.max_depth)

    logger.info(
        "Rendering %d samples per pixel (max depth %d)",
        config.samples_per_pixel,
        config.max_depth,
    )
    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        elapsed = time.time() - start_time
        samples_per_sec = current / elapsed if elapsed > 0 else 0.0
        logger.info(
            "Progress: %d/%d samples (%.1f%%) - %.1f spp/s",
            current,
            target,
            100.0 * current / target,
            samples_per_sec,
        )

    renderer.render(
        num_samples=config.samples_per_pixel,
        batch_size=config.batch_size,
        callback=progress_callback,
    )

    output_file = Path(config.output)
    renderer.save_image(output_file)

    logger.info("Saved to %s in %.2fs", output_file.absolute(), time.time() - start_time)
    return output_file


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    try:
        args = parse_args(argv)
        config = config_from_args(args)
    except ValueError as e:
        setup_logging("ERROR")
        logger.error("Invalid configuration: %s", e)
        return 1

    setup_logging(config.log_level)

    try:
        init_taichi(config.arch, config.seed)
        render(config)
        return 0
    except Exception:
        logger.exception("Render failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
