"""Output module: color quantisation and image files."""

from .export import (
    compute_rmse,
    format_ppm,
    image_to_uint8,
    save_image,
    save_png,
    save_ppm,
    write_color,
)

__all__ = [
    "compute_rmse",
    "format_ppm",
    "image_to_uint8",
    "save_image",
    "save_png",
    "save_ppm",
    "write_color",
]
