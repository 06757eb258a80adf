"""Unified material table and scatter dispatch.

Materials are shared by ID: a sphere stores a unified ``material_id`` that maps
to a ``(MaterialType, type_local_index)`` pair. The type selects the scattering
model and the index selects the parameters inside that model's registry, so
any number of spheres can reference the same material without duplicating it.

The ``scatter`` dispatcher is the polymorphic entry point used by the
integrator; each branch calls the matching model.
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from weekend_tracer.core.ray import Ray
from weekend_tracer.geometry.sphere import HitRecord
from weekend_tracer.materials.dielectric import scatter_dielectric_by_id
from weekend_tracer.materials.lambertian import scatter_lambertian_by_id
from weekend_tracer.materials.metal import scatter_metal_by_id

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 1536  # 512 per type * 3 types

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g. if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_material_table() -> None:
    """Forget every unified material ID."""
    num_materials[None] = 0


def register_material(material_type: MaterialType, type_index: int) -> int:
    """Assign the next unified material ID to a type-local material.

    Args:
        material_type: The scattering model of the material.
        type_index: The index inside that model's registry.

    Returns:
        The unified material ID.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    material_id = num_materials[None]
    if material_id >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_types[material_id] = int(material_type)
    material_type_indices[material_id] = type_index
    num_materials[None] = material_id + 1
    return material_id


def get_material_count() -> int:
    """Get the number of registered materials across all types."""
    return int(num_materials[None])


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a unified material ID.

    Returns:
        The material type as an integer (see MaterialType), or -1 for an
        unknown ID.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a unified material ID, or -1."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@ti.func
def scatter(ray_in: Ray, rec: HitRecord):
    """Scatter a ray according to the material of the hit surface.

    Args:
        ray_in: The incoming ray.
        rec: A hit record produced by this render's intersection pass.

    Returns:
        A tuple of (scattered, attenuation, did_scatter). did_scatter is 0
        when the ray is absorbed; an unknown material ID also absorbs.
    """
    mat_type = get_material_type(rec.material_id)
    type_index = get_material_type_index(rec.material_id)

    scattered = Ray(origin=rec.point, direction=rec.normal)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered, attenuation, did_scatter = scatter_lambertian_by_id(type_index, rec)
    elif mat_type == int(MaterialType.METAL):
        scattered, attenuation, did_scatter = scatter_metal_by_id(type_index, ray_in, rec)
    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered, attenuation, did_scatter = scatter_dielectric_by_id(type_index, ray_in, rec)

    return scattered, attenuation, did_scatter
