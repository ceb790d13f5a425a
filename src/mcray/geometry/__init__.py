"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection and hit records

Intersection routines are Taichi functions (@ti.func) so they can be called
from inside rendering kernels.
"""

from .sphere import (
    HitRecord,
    Sphere,
    hit_sphere,
    make_miss_record,
    make_sphere,
    set_face_normal,
)

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
    "set_face_normal",
]
