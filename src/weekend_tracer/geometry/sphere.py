"""Sphere primitive with ray-sphere intersection.

The ray-sphere intersection solves

    |origin + t * direction - center|^2 = radius^2

which is a quadratic in t. Using the half-b formulation:

    a = dot(direction, direction)
    h = dot(direction, oc)          (half of the traditional b)
    c = dot(oc, oc) - radius^2      with oc = origin - center

the roots are (-h -/+ sqrt(h^2 - a*c)) / a. The nearer root is tried first,
then the farther one; a root is accepted only when it lies strictly inside
the open interval (t_min, t_max).

A negative radius gives the same roots but flips the outward normal, which is
how a hollow glass shell is modelled from the inside.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_tracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from weekend_tracer.core.ray import Ray, dot, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Negative values flip the normal.
        material_id: Unified material ID shared with the material table.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The ray parameter at the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal, always oriented against the incoming ray.
            Only valid if hit == 1.
        front_face: 1 if the ray approached from outside the surface (the
            outward normal already opposed the ray), 0 otherwise.
        material_id: Material of the hit primitive, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def set_face_normal(ray: Ray, outward_normal: vec3):
    """Orient a normal against the ray.

    Args:
        ray: The incoming ray.
        outward_normal: The geometric outward normal (unit length).

    Returns:
        A tuple (front_face, normal).
    """
    front_face = 1
    normal = outward_normal
    if dot(ray.direction, outward_normal) >= 0.0:
        # Ray is leaving the surface: we are inside
        front_face = 0
        normal = -outward_normal
    return front_face, normal


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray: The ray to test.
        sphere: The sphere to test intersection against.
        t_min: Exclusive lower bound on accepted t (avoids self-intersection).
        t_max: Exclusive upper bound on accepted t.

    Returns:
        A HitRecord for the nearest accepted root. Check the hit field to
        determine if intersection occurred.
    """
    oc = ray.origin - sphere.center
    a = dot(ray.direction, ray.direction)
    half_b = dot(ray.direction, oc)
    c = dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    rec = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Nearest root first, then the far one
        root = (-half_b - sqrt_d) / a
        valid = root > t_min and root < t_max
        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = root > t_min and root < t_max

        if valid:
            point = ray_at(ray, root)
            # Dividing by the signed radius flips the normal of hollow shells
            outward_normal = (point - sphere.center) / sphere.radius
            front_face, normal = set_face_normal(ray, outward_normal)
            rec = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return rec


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material_id: ti.i32) -> Sphere:
    """Create a sphere from center, radius and material ID."""
    return Sphere(center=center, radius=radius, material_id=material_id)
