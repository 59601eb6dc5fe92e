"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, the shared HitRecord and ray-sphere intersection
    plane: Infinite plane primitive with ray-plane intersection

All intersection routines are Taichi functions (@ti.func) called from the
scene's nearest-hit scan. They never raise: parallel rays, non-positive
discriminants and out-of-range roots are all plain misses.
"""

from .plane import PARALLEL_EPSILON, Plane, hit_plane, plane_normal
from .sphere import HitRecord, Sphere, hit_sphere, make_miss, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss",
    "Plane",
    "hit_plane",
    "plane_normal",
    "PARALLEL_EPSILON",
]
