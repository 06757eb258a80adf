"""Lambertian (ideal diffuse) material implementation.

The scattered direction is the hit normal plus a random unit vector, which
yields a cosine-weighted distribution over the hemisphere around the normal.
When the random vector nearly cancels the normal, the bare normal is used to
avoid a degenerate zero-length direction.

The attenuation is the albedo: with cosine-weighted sampling the BRDF
(albedo / pi), the cosine term and the pdf (cos / pi) cancel out.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_tracer.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # scattered, attenuation, did_scatter = scatter_lambertian(albedo, rec)
"""

import taichi as ti
import taichi.math as tm

from weekend_tracer.core.ray import Ray, near_zero, random_unit_vector
from weekend_tracer.geometry.sphere import HitRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_lambertian(albedo: vec3, rec: HitRecord):
    """Scatter a ray off a Lambertian surface.

    Diffuse surfaces always scatter; the incoming direction is irrelevant.

    Args:
        albedo: The diffuse reflectance color (RGB).
        rec: The hit record of the surface being shaded.

    Returns:
        A tuple of (scattered, attenuation, did_scatter) where:
        - scattered: The outgoing Ray leaving the hit point.
        - attenuation: The albedo.
        - did_scatter: Always 1.
    """
    scatter_direction = rec.normal + random_unit_vector()

    # Random vector opposite the normal cancels it out
    if near_zero(scatter_direction):
        scatter_direction = rec.normal

    scattered = Ray(origin=rec.point, direction=scatter_direction)
    did_scatter = 1
    return scattered, albedo, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 512

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def validate_albedo(albedo: tuple[float, float, float]) -> None:
    """Check that every albedo component lies in [0, 1].

    Raises:
        ValueError: If the albedo does not have three components or any
            component lies outside [0, 1].
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}.")
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "A material must not amplify light."
            )


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials."""
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.

    Returns:
        The type-local index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    validate_albedo(albedo)

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by type-local index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, rec: HitRecord):
    """Scatter off a registered Lambertian material.

    Looks up the albedo from the registry and calls scatter_lambertian.
    """
    return scatter_lambertian(get_lambertian_albedo(material_idx), rec)
