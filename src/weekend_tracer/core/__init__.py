"""Core rendering module.

Components:
    ray: Ray data structure, vector helpers and random sampling
    integrator: Path tracing radiance estimate and render target
    progressive: Batched sample accumulation with progress reporting

Only ``ray`` is re-exported here; ``integrator`` declares Taichi fields and
is imported explicitly once Taichi is initialized.
"""

from .ray import (
    BLACK,
    SKY_BLUE,
    WHITE,
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    reflectance,
    refract,
    unit_vector,
    vec3,
)

__all__ = [
    "BLACK",
    "SKY_BLUE",
    "WHITE",
    "Ray",
    "cross",
    "dot",
    "length",
    "length_squared",
    "make_ray",
    "near_zero",
    "normalize",
    "random_in_unit_disk",
    "random_in_unit_sphere",
    "random_unit_vector",
    "ray_at",
    "reflect",
    "reflectance",
    "refract",
    "unit_vector",
    "vec3",
]
