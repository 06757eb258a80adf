"""Path tracing integrator for Monte Carlo light transport.

This module implements the radiance estimate along a ray and the rendering
kernels that accumulate it per pixel.

``ray_color`` chains scene intersection and material scattering: every
bounce multiplies the path throughput by the material attenuation, and the
path ends when

    - it escapes the scene, contributing throughput * background gradient,
    - a material absorbs it, contributing black,
    - max_depth bounces are used up, contributing black.

This is the iterative form of the recursion
``attenuation * ray_color(scattered, depth - 1)``; both give identical
results.

The render target keeps the SUM of samples per pixel together with the
sample count. Averaging, gamma correction and quantisation happen at output
time (see ``weekend_tracer.output.export``).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_tracer.core.integrator import render_image, setup_render_target
    >>> from weekend_tracer.scene.presets import create_material_showcase_scene
    >>> from weekend_tracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_material_showcase_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_image(num_samples=100, max_depth=50)
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from weekend_tracer.camera.thin_lens import get_ray_jittered
from weekend_tracer.core.ray import SKY_BLUE, WHITE, Ray, unit_vector
from weekend_tracer.materials.material import scatter
from weekend_tracer.scene.intersection import intersect_scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum ray bounces (path length)
MAX_DEPTH = 50

# t_min and t_max for ray intersection. t_min > 0 avoids shadow acne from
# scattered rays re-hitting the surface they start on.
T_MIN = 0.001
T_MAX = 1e10


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def background_color(ray: Ray) -> vec3:
    """Sky gradient seen by rays that escape the scene.

    Blends white at the bottom into sky blue at the top according to
    t = 0.5 * (unit(direction).y + 1).
    """
    unit_direction = unit_vector(ray.direction)
    t = 0.5 * (unit_direction.y + 1.0)
    white = vec3(WHITE[0], WHITE[1], WHITE[2])
    sky_blue = vec3(SKY_BLUE[0], SKY_BLUE[1], SKY_BLUE[2])
    return (1.0 - t) * white + t * sky_blue


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace.
        max_depth: Maximum number of scatter events. Zero or less yields black.

    Returns:
        The estimated radiance (RGB) for this path sample.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray

    remaining = max_depth
    while remaining > 0:
        rec = intersect_scene(current, T_MIN, T_MAX)

        if rec.hit == 0:
            # Ray escaped
            color = throughput * background_color(current)
            remaining = 0
        else:
            scattered, attenuation, did_scatter = scatter(current, rec)
            if did_scatter == 0:
                # Absorbed
                remaining = 0
            else:
                throughput *= attenuation
                current = scattered
                remaining -= 1

    return color


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Summed color per pixel (preallocated to max size)
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sample count per pixel (preallocated to max size)
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()
    logger.debug("Render target set up at %dx%d", width, height)


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def reset_render_target() -> None:
    """Clear the buffers and mark the render target as not set up."""
    clear_render_target()
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.func
def _sanitize(color: vec3) -> vec3:
    """Replace NaN/Inf components with zero."""
    for c in ti.static(range(3)):
        if tm.isnan(color[c]) or tm.isinf(color[c]):
            color[c] = 0.0
    return color


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Trace one sample through every pixel and add it to the running sum."""
    for i, j in ti.ndrange(width, height):
        ray = get_ray_jittered(i, j, width, height)
        color = _sanitize(ray_color(ray, max_depth))
        _color_buffer[i, j] += color
        _sample_count[i, j] += 1


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32, max_depth: ti.i32
) -> vec3:
    """Trace one sample for a specific pixel without accumulating it."""
    ray = get_ray_jittered(pixel_i, pixel_j, width, height)
    return _sanitize(ray_color(ray, max_depth))


@ti.kernel
def _trace_ray(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    """Trace one explicit ray through the scene."""
    return ray_color(Ray(origin=origin, direction=direction), max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Estimate the radiance along a single ray.

    Python-callable wrapper around ``ray_color`` for testing and probing.

    Args:
        origin: Ray origin.
        direction: Ray direction (need not be normalized, must be non-zero).
        max_depth: Maximum number of scatter events.

    Returns:
        Tuple of (R, G, B) radiance values.
    """
    color = _trace_ray(vec3(*origin), vec3(*direction), max_depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def render_sample(pixel_i: int, pixel_j: int, max_depth: int = MAX_DEPTH) -> tuple[float, float, float]:
    """Render a single sample for a specific pixel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        max_depth: Maximum number of scatter events.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height, max_depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1, max_depth: int = MAX_DEPTH) -> None:
    """Add samples to every pixel of the render target.

    Can be called repeatedly; samples keep accumulating.

    Args:
        num_samples: Number of samples to render per pixel.
        max_depth: Maximum number of scatter events per path.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If max_depth is negative.
    """
    _check_render_target_initialized()
    if max_depth < 0:
        raise ValueError(f"max_depth = {max_depth} must be non-negative")

    width, height = get_image_dimensions()
    for _ in range(num_samples):
        _render_one_spp(width, height, max_depth)


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return int(_sample_count[0, 0])


def get_summed_image_numpy() -> npt.NDArray[np.float32]:
    """Get the summed color buffer as a NumPy array.

    The array shape is (height, width, 3) with the top image row first.
    Values are sums over all samples, not averages.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()

    # Extract active region
    image = full_image[:width, :height, :]

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(image, (1, 0, 2))

    # Buffer row 0 is the bottom of the image
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)
