"""Metal (specular reflective) material implementation.

Perfect metals (fuzz = 0) produce mirror reflections:

    R = I - 2(I . N)N

Rough metals perturb the reflected direction by a random point in the unit
ball scaled by the fuzz factor, simulating microscopically rough surfaces.
A perturbation that pushes the ray back into the surface absorbs it; this is
the only case in which a material absorbs light.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_tracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # scattered, attenuation, did_scatter = scatter_metal(albedo, fuzz, ray_in, rec)
"""

import taichi as ti
import taichi.math as tm

from weekend_tracer.core.ray import (
    Ray,
    dot,
    random_in_unit_sphere,
    reflect,
    unit_vector,
)
from weekend_tracer.geometry.sphere import HitRecord
from weekend_tracer.materials.lambertian import validate_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(albedo: vec3, fuzz: ti.f32, ray_in: Ray, rec: HitRecord):
    """Reflect a ray off a metal surface.

    Args:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: The reflection perturbation radius, already clamped to [0, 1].
        ray_in: The incoming ray.
        rec: The hit record of the surface being shaded.

    Returns:
        A tuple of (scattered, attenuation, did_scatter) where:
        - scattered: The outgoing Ray leaving the hit point.
        - attenuation: The albedo.
        - did_scatter: 1 if the ray leaves above the surface, 0 if absorbed.
    """
    reflected = reflect(unit_vector(ray_in.direction), rec.normal)
    scattered = Ray(
        origin=rec.point,
        direction=reflected + fuzz * random_in_unit_sphere(),
    )

    did_scatter = 1
    if dot(scattered.direction, rec.normal) <= 0.0:
        did_scatter = 0

    return scattered, albedo, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 512

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clamp_fuzz(fuzz: float) -> float:
    """Clamp a fuzz factor to [0, 1]."""
    return min(max(fuzz, 0.0), 1.0)


def clear_metal_materials() -> None:
    """Clear all metal materials."""
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
        fuzz: The reflection perturbation radius. Default is 0 (perfect
            mirror). Values outside [0, 1] are clamped.

    Returns:
        The type-local index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    validate_albedo(albedo)

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    metal_fuzzes[idx] = clamp_fuzz(fuzz)
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by type-local index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    """Get the clamped fuzz factor for a metal material by type-local index."""
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord):
    """Scatter off a registered metal material.

    Looks up the albedo and fuzz from the registry and calls scatter_metal.
    """
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, ray_in, rec)
