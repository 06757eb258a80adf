"""Dielectric (glass/water) material implementation.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when refraction_ratio * sin(theta) > 1

Dielectrics never absorb: the attenuation is always white. Each scatter
randomly chooses reflection with probability equal to the Schlick
reflectance, and reflects deterministically under total internal reflection.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_tracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # scattered, attenuation, did_scatter = scatter_dielectric(ior, ray_in, rec)
"""

import taichi as ti
import taichi.math as tm

from weekend_tracer.core.ray import (
    Ray,
    dot,
    random_float,
    reflect,
    reflectance,
    refract,
    unit_vector,
)
from weekend_tracer.geometry.sphere import HitRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def refraction_ratio_for(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio of refractive indices for a ray entering or leaving the medium.

    Entering from outside (front face) the ratio is 1 / ior; leaving the
    medium it is ior.
    """
    ratio = ior
    if front_face == 1:
        ratio = 1.0 / ior
    return ratio


@ti.func
def cannot_refract(ratio: ti.f32, cos_theta: ti.f32) -> ti.i32:
    """Determine whether total internal reflection occurs.

    Args:
        ratio: Refraction ratio eta_in / eta_out.
        cos_theta: Cosine of the angle between the incoming ray and the normal.

    Returns:
        1 if refraction is impossible (ratio * sin(theta) > 1), 0 otherwise.
    """
    sin_theta = ti.sqrt(tm.max(1.0 - cos_theta * cos_theta, 0.0))
    return ti.cast(ratio * sin_theta > 1.0, ti.i32)


@ti.func
def scatter_dielectric(ior: ti.f32, ray_in: Ray, rec: HitRecord):
    """Reflect or refract a ray at a dielectric boundary.

    Args:
        ior: Index of refraction of the material.
        ray_in: The incoming ray.
        rec: The hit record of the surface being shaded.

    Returns:
        A tuple of (scattered, attenuation, did_scatter) where:
        - scattered: The reflected or refracted Ray leaving the hit point.
        - attenuation: White (no absorption).
        - did_scatter: Always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    ratio = refraction_ratio_for(ior, rec.front_face)

    unit_direction = unit_vector(ray_in.direction)
    cos_theta = tm.min(dot(-unit_direction, rec.normal), 1.0)

    direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract(ratio, cos_theta) == 1 or random_float() < reflectance(cos_theta, ratio):
        direction = reflect(unit_direction, rec.normal)
    else:
        direction = refract(unit_direction, rec.normal, ratio)

    scattered = Ray(origin=rec.point, direction=direction)
    did_scatter = 1
    return scattered, attenuation, did_scatter


@ti.func
def fresnel_reflectance(ior: ti.f32, ray_in: Ray, rec: HitRecord) -> ti.f32:
    """Schlick reflectance for a ray striking a dielectric surface."""
    ratio = refraction_ratio_for(ior, rec.front_face)
    cos_theta = tm.min(dot(-unit_vector(ray_in.direction), rec.normal), 1.0)
    return reflectance(cos_theta, ratio)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 512

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).
            Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
            Values below 1.0 are allowed (e.g. an air bubble under water
            modelled relative to its surroundings).

    Returns:
        The type-local index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the index of refraction is not positive.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    """Get the IOR for a dielectric material by type-local index."""
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord):
    """Scatter off a registered dielectric material.

    Looks up the IOR from the registry and calls scatter_dielectric.
    """
    return scatter_dielectric(get_dielectric_ior(material_idx), ray_in, rec)
