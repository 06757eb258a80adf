"""Sample accumulation on top of the integrator.

`ProgressiveRenderer` owns the image size and depth limit and adds:
- Batches of several samples per pixel per kernel launch
- Progress callbacks or a generator for driving loops
- Reset, resize and saving of the accumulated image

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_tracer.core.progressive import ProgressiveRenderer
    >>> from weekend_tracer.scene.presets import create_material_showcase_scene
    >>> from weekend_tracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_material_showcase_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(400, 225, max_depth=50)
    >>> renderer.render(100, batch_size=10)
    >>> renderer.save_image("showcase.png")
"""

import logging
from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from weekend_tracer.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_summed_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from weekend_tracer.output.export import image_to_uint8, save_image

logger = logging.getLogger(__name__)

# Called with (samples_so_far, samples_requested_in_total)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """Accumulates jittered samples into the global render target.

    The renderer keeps its own width/height/max_depth and delegates to the
    global integrator buffers (which are Taichi fields), so only one
    renderer is meaningful at a time.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum number of scatter events per path.
    """

    def __init__(self, width: int, height: int, max_depth: int = MAX_DEPTH) -> None:
        """Set up the render target for a width x height image.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).
            max_depth: Maximum number of scatter events per path.

        Raises:
            ValueError: If dimensions are invalid or max_depth is negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth = {max_depth} must be non-negative")
        self._width = width
        self._height = height
        self.max_depth = max_depth
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Image width in pixels."""
        return self._width

    @property
    def height(self) -> int:
        """Image height in pixels."""
        return self._height

    @property
    def sample_count(self) -> int:
        """Samples per pixel accumulated since the last reset."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulated samples without changing the image size."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset the accumulator.

        Raises:
            ValueError: If dimensions are invalid.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Add num_samples samples, yielding after every batch.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is not positive.
        """
        if num_samples <= 0:
            return
        if batch_size < 1:
            raise ValueError(f"batch_size = {batch_size} must be at least 1")

        target_samples = self.sample_count + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self.max_depth)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples with an optional progress callback.

        Accumulates the samples into the existing buffer; can be called
        multiple times to keep refining the image.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each callback.
            callback: Optional function called after each batch with
                (current_total_samples, target_total_samples).
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            logger.debug("Rendered %d/%d samples per pixel", current, target)
            if callback is not None:
                callback(current, target)

    def get_summed_image(self) -> npt.NDArray[np.float32]:
        """Get the summed color buffer, shape (height, width, 3), top row first."""
        return get_summed_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the averaged, gamma-corrected image as 8-bit values.

        Raises:
            RuntimeError: If no samples have been rendered yet.
        """
        samples = self.sample_count
        if samples == 0:
            raise RuntimeError("No samples rendered yet. Call render() first.")
        return image_to_uint8(self.get_summed_image(), samples)

    def save_image(self, filepath: str | Path) -> None:
        """Save the rendered image (.ppm or .png).

        Raises:
            RuntimeError: If no samples have been rendered yet.
            ValueError: If the file suffix is not supported.
        """
        save_image(filepath, self.get_image_uint8())

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"max_depth={self.max_depth}, samples={self.sample_count})"
        )
