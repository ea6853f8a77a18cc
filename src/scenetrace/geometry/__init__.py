"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection
    plane: Infinite plane primitive

All intersection routines are Taichi functions (@ti.func). Each returns a
HitRecord whose normal faces against the incoming ray.
"""

from .plane import Plane, hit_plane
from .sphere import HitRecord, Sphere, face_forward, hit_sphere, make_miss

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_miss",
    "face_forward",
    "Plane",
    "hit_plane",
]
