"""Image export utilities for rendered images.

The render target stores per-pixel color SUMS. Turning them into bytes takes
three steps per channel:

    1. divide by the number of samples,
    2. gamma-correct with gamma 2 (square root),
    3. clamp to [0, 0.999] and scale by 256, truncating to an integer.

Supported formats:
    - PPM (plain-text P3)
    - PNG (8-bit via Pillow)

Example:
    >>> from weekend_tracer.output.export import image_to_uint8, save_image
    >>> from weekend_tracer.core.integrator import get_summed_image_numpy
    >>>
    >>> image = image_to_uint8(get_summed_image_numpy(), samples_per_pixel=100)
    >>> save_image("output.png", image)
"""

from __future__ import annotations

import logging
import math
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Largest channel value before scaling; keeps int(256 * c) <= 255
CLAMP_MAX = 0.999


def _check_samples(samples_per_pixel: int) -> None:
    if samples_per_pixel < 1:
        raise ValueError(f"samples_per_pixel = {samples_per_pixel} must be at least 1")


def write_color(
    summed_color: tuple[float, float, float],
    samples_per_pixel: int,
) -> tuple[int, int, int]:
    """Convert one summed pixel color to 8-bit channel values.

    Args:
        summed_color: Sum of all sample colors for the pixel.
        samples_per_pixel: Number of samples that went into the sum.

    Returns:
        Tuple of (R, G, B) integers in [0, 255].

    Raises:
        ValueError: If samples_per_pixel is less than 1.
    """
    _check_samples(samples_per_pixel)

    scale = 1.0 / samples_per_pixel
    channels = []
    for value in summed_color:
        c = value * scale
        c = math.sqrt(c) if math.isfinite(c) and c > 0.0 else 0.0
        c = min(max(c, 0.0), CLAMP_MAX)
        channels.append(int(256 * c))
    return (channels[0], channels[1], channels[2])


def image_to_uint8(
    summed_image: npt.NDArray[np.floating[npt.NBitBase]],
    samples_per_pixel: int,
) -> npt.NDArray[np.uint8]:
    """Convert a summed image to uint8 for display/export.

    Vectorised version of ``write_color``.

    Args:
        summed_image: Summed color image of shape (H, W, 3).
        samples_per_pixel: Number of samples per pixel.

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If samples_per_pixel is less than 1.
    """
    _check_samples(samples_per_pixel)

    image = np.asarray(summed_image, dtype=np.float64) / samples_per_pixel
    image = np.nan_to_num(image, nan=0.0, posinf=0.0, neginf=0.0)
    image = np.sqrt(np.maximum(image, 0.0))
    image = np.clip(image, 0.0, CLAMP_MAX)
    return (256 * image).astype(np.uint8)


def format_ppm(image: npt.NDArray[np.uint8]) -> str:
    """Serialise an 8-bit image as plain-text PPM (P3).

    Args:
        image: Image of shape (H, W, 3), top row first.

    Returns:
        The PPM document, one pixel per line.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    height, width, _ = image.shape
    lines = ["P3", f"{width} {height}", "255"]
    for row in image:
        for r, g, b in row:
            lines.append(f"{int(r)} {int(g)} {int(b)}")
    return "\n".join(lines) + "\n"


def save_ppm(filepath: str | Path, image: npt.NDArray[np.uint8]) -> None:
    """Save an 8-bit image as a plain-text PPM file."""
    Path(filepath).write_text(format_ppm(image), encoding="ascii")


def save_png(filepath: str | Path, image: npt.NDArray[np.uint8]) -> None:
    """Save an 8-bit image as a PNG file."""
    pil_image = PILImage.fromarray(np.ascontiguousarray(image, dtype=np.uint8))
    pil_image.save(filepath)


def save_image(filepath: str | Path, image: npt.NDArray[np.uint8]) -> None:
    """Save an 8-bit image, choosing the format from the file suffix.

    Raises:
        ValueError: If the suffix is not .ppm or .png.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix == ".ppm":
        save_ppm(filepath, image)
    elif suffix == ".png":
        save_png(filepath, image)
    else:
        raise ValueError(f"Unsupported image format {suffix!r}; use .ppm or .png")
    logger.info("Wrote %dx%d image to %s", image.shape[1], image.shape[0], filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
