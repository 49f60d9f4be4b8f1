"""Geometry module for the sphere primitive and hit records.

Components:
    sphere: Sphere dataclass, closed-form ray-sphere intersection,
        range-checked scene intersection and normal orientation

All intersection routines are Taichi functions (@ti.func). Every routine
that produces a HitRecord orients the normal against the incoming ray with
set_face_normal() before the record reaches a material.
"""

from .sphere import (
    NO_HIT,
    HitRecord,
    Sphere,
    hit_sphere,
    intersect_sphere,
    make_sphere,
    set_face_normal,
)

__all__ = [
    "NO_HIT",
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "intersect_sphere",
    "make_sphere",
    "set_face_normal",
]
