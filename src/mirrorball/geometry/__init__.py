"""Geometry module for surface primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func). Each primitive offers
a full hit query (point, normal, reflection) and an existence-only query for
shadow rays that runs the same algorithm.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_sphere, sphere_blocks

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "sphere_blocks",
    "make_sphere",
]
