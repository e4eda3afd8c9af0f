"""Sphere primitive with analytic ray-sphere intersection.

The intersection uses the half-b quadratic form with m = origin - center.
Two properties matter to the caster:

- A ray whose origin is outside the sphere and pointing away from it is
  rejected before any square root is taken.
- The hit distance is clamped at zero, so a ray starting inside the sphere
  reports its own origin as the hit point.

The existence-only query used for shadow tests runs exactly the same
algorithm, so hit and block verdicts always agree.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.mirrorball.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, 0), radius=5.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.mirrorball.core.ray import dot, normalize, reflect

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        point: The 3D point where the ray met the sphere.
            Only valid if hit == 1.
        normal: The outward surface normal at the hit point (unit length).
            Only valid if hit == 1.
        reflection: The incoming direction mirrored about the normal. It has
            the same magnitude as the incoming direction.
            Only valid if hit == 1.
    """

    hit: ti.i32
    point: vec3
    normal: vec3
    reflection: vec3


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> HitRecord:
    """Find where a ray first meets a sphere.

    Solves |origin + t * direction - center|^2 = radius^2 with

        m = origin - center
        b = dot(direction, m)
        c = dot(m, m) - radius^2

    and takes t = max(0, -b - sqrt(b^2 - c)).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test.

    Returns:
        A HitRecord. Check the hit field before reading the others.
    """
    m = ray_origin - sphere.center
    b = dot(ray_direction, m)
    c = dot(m, m) - sphere.radius * sphere.radius

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    hit_reflection = vec3(0.0, 0.0, 0.0)

    # Origin outside the sphere and sphere behind the origin
    if not (c > 0.0 and b > 0.0):
        discriminant = b * b - c
        if discriminant >= 0.0:
            # Starts inside the sphere: the origin itself is the hit
            t = tm.max(0.0, -b - ti.sqrt(discriminant))
            did_hit = 1
            hit_point = ray_origin + ray_direction * t
            hit_normal = normalize(hit_point - sphere.center)
            hit_reflection = reflect(ray_direction, hit_normal)

    return HitRecord(
        hit=did_hit,
        point=hit_point,
        normal=hit_normal,
        reflection=hit_reflection,
    )


@ti.func
def sphere_blocks(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> ti.i32:
    """Existence-only intersection query for shadow rays.

    Returns:
        1 if hit_sphere would report a hit, 0 otherwise.
    """
    return hit_sphere(ray_origin, ray_direction, sphere).hit


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).

    Returns:
        A new Sphere instance.
    """
    return Sphere(center=center, radius=radius)
