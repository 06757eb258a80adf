"""Render configuration.

``RenderConfig`` gathers the knobs of a single render run: image size,
sampling, scene choice, output path and Taichi backend. Defaults can be
overridden from the environment with ``RenderConfig.from_env``:

    WEEKEND_TRACER_SAMPLES    samples per pixel
    WEEKEND_TRACER_MAX_DEPTH  maximum scatter events per path
    WEEKEND_TRACER_ARCH       "cpu" or "gpu"
    WEEKEND_TRACER_LOG_LEVEL  logging level name
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

ENV_PREFIX = "WEEKEND_TRACER_"

# Matches the preallocated render target in core.integrator
MAX_IMAGE_SIZE = 2048

ARCHES = ("cpu", "gpu")


@dataclass
class RenderConfig:
    """Settings for one render.

    Attributes:
        image_width: Output width in pixels.
        aspect_ratio: Width divided by height.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of scatter events per path.
        scene: Name of a preset scene.
        output: Output image path (.ppm or .png).
        seed: Seed for Taichi's generator and randomised scenes.
        arch: Taichi backend, "cpu" or "gpu".
        batch_size: Samples per pixel between progress reports.
        log_level: Logging level name.
    """

    image_width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 100
    max_depth: int = 50
    scene: str = "showcase"
    output: str = "image.ppm"
    seed: int | None = None
    arch: str = "cpu"
    batch_size: int = 10
    log_level: str = "INFO"

    @property
    def image_height(self) -> int:
        """Output height in pixels, truncated from width / aspect_ratio."""
        return int(self.image_width / self.aspect_ratio)

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ValueError: If any setting is out of range.
        """
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if self.image_width < 1:
            raise ValueError(f"image_width = {self.image_width} must be positive")
        if self.image_height < 1:
            raise ValueError(
                f"image_height = {self.image_height} must be positive; "
                "increase the width or lower the aspect ratio"
            )
        if self.image_width > MAX_IMAGE_SIZE or self.image_height > MAX_IMAGE_SIZE:
            raise ValueError(
                f"Image size {self.image_width}x{self.image_height} exceeds "
                f"{MAX_IMAGE_SIZE}x{MAX_IMAGE_SIZE}"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel = {self.samples_per_pixel} must be positive")
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must be non-negative")
        if self.batch_size < 1:
            raise ValueError(f"batch_size = {self.batch_size} must be positive")
        if self.arch not in ARCHES:
            raise ValueError(f"arch = {self.arch!r} must be one of {ARCHES}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RenderConfig":
        """Build a config from defaults overridden by environment variables.

        Raises:
            ValueError: If a numeric variable is not an integer.
        """
        env = os.environ if environ is None else environ
        config = cls()

        samples = env.get(ENV_PREFIX + "SAMPLES")
        if samples:
            config.samples_per_pixel = int(samples)
        max_depth = env.get(ENV_PREFIX + "MAX_DEPTH")
        if max_depth:
            config.max_depth = int(max_depth)
        arch = env.get(ENV_PREFIX + "ARCH")
        if arch:
            config.arch = arch.lower()
        log_level = env.get(ENV_PREFIX + "LOG_LEVEL")
        if log_level:
            config.log_level = log_level.upper()

        return config
