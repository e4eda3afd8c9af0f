"""Ray data structure and vector utilities for the ray caster.

This module provides the Ray dataclass and the small set of vector helpers
the caster needs. Colors reuse the same vec3 type as linear RGB intensity.
All operations are designed to work within Taichi kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> # Inside a kernel: primary ray of the demo camera's center pixel
    >>> # ray = make_ray(vec3(100.0, 0.0, 0.0), vec3(-1.0, 0.0, 0.0))
"""

import taichi as ti
import taichi.math as tm

# Colors and points share the same vector type
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A half-line cast into the scene.

    Attributes:
        origin: Where the ray starts (vec3).
        direction: Where it heads (vec3). Not required to be normalized;
            intersection keeps whatever scale it is given.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Bundle an origin and a direction into a Ray."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Helpers
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared length of v.

    Nearest-hit comparisons use this directly; the square root would not
    change the ordering.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale v to unit length. A zero vector gives NaN components."""
    return tm.normalize(v)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror a direction about a surface normal.

    Args:
        incident: Direction arriving at the surface.
        normal: Unit surface normal.

    Returns:
        incident - 2 * normal * dot(incident, normal). Its length equals the
        length of incident when normal is unit length.
    """
    return incident - 2.0 * normal * tm.dot(incident, normal)
