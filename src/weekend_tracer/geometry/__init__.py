"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, hit record and ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) returning a
HitRecord whose ``hit`` flag tells whether a root was accepted.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record, make_sphere, set_face_normal

__all__ = [
    "HitRecord",
    "Sphere",
    "hit_sphere",
    "make_miss_record",
    "make_sphere",
    "set_face_normal",
]
