"""Scene-level sphere storage and intersection testing.

Spheres are stored in Taichi fields together with their surface color and
mirror fraction. Scene queries take an exclusion mask: a bitset of sphere
indices that must be ignored. The caster grows this mask by one bit per
mirror bounce, so a surface never reflects or shadows itself and the
recursion depth is bounded by the sphere count.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.mirrorball.scene.intersection import add_sphere, clear_scene, vec3
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, 0), 5.0, vec3(1.0, 0.5, 0.5), mirror=0.9)
    0
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.mirrorball.core.ray import length_squared
from src.mirrorball.geometry.sphere import Sphere, hit_sphere, sphere_blocks

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of the nearest ray-scene intersection.

    Attributes:
        hit: Whether the ray met any sphere (1 if hit, 0 if miss).
        sphere_index: Index of the sphere that was hit. -1 on a miss.
        point: The hit point. Only valid if hit == 1.
        normal: The outward unit normal at the hit point.
            Only valid if hit == 1.
        reflection: The mirror-reflected direction. Only valid if hit == 1.
    """

    hit: ti.i32
    sphere_index: ti.i32
    point: vec3
    normal: vec3
    reflection: vec3


# Maximum number of spheres supported in the scene (one bit each in an i64 mask)
MAX_SPHERES = 64

# Larger than any squared hit distance in a sane scene
FAR_DISTANCE_SQUARED = 1e38

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_mirrors = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all spheres from the scene.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, color: vec3, mirror: float = 0.0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.
        color: The surface color (RGB).
        mirror: The fraction of the surface color replaced by the mirrored
            color, in [0, 1].

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If radius is not positive or mirror is outside [0, 1].
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if not radius > 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    if not 0.0 <= mirror <= 1.0:
        raise ValueError(f"Mirror fraction must be in [0, 1], got {mirror}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_colors[idx] = color
    sphere_mirrors[idx] = mirror
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


# =============================================================================
# Exclusion Mask
# =============================================================================


@ti.func
def is_excluded(excluded: ti.i64, index: ti.i32) -> ti.i32:
    """Check whether a sphere index is set in an exclusion mask."""
    return ti.cast((excluded >> ti.cast(index, ti.i64)) & ti.cast(1, ti.i64), ti.i32)


@ti.func
def exclude(excluded: ti.i64, index: ti.i32) -> ti.i64:
    """Return the exclusion mask with one more sphere index set."""
    return excluded | (ti.cast(1, ti.i64) << ti.cast(index, ti.i64))


# =============================================================================
# Scene Queries
# =============================================================================


@ti.func
def get_sphere(index: ti.i32) -> Sphere:
    """Get the geometry of a stored sphere by index."""
    return Sphere(center=sphere_centers[index], radius=sphere_radii[index])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        sphere_index=-1,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        reflection=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3, excluded: ti.i64) -> SceneHitRecord:
    """Find the nearest sphere hit by a ray.

    Every sphere not in the exclusion mask is tested. Among those that report
    a hit, the one whose hit point is closest to the ray origin (by squared
    distance) wins. On equal distances the lowest index wins.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        excluded: Bitset of sphere indices to ignore.

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record.
    """
    closest = FAR_DISTANCE_SQUARED
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        if is_excluded(excluded, i) == 0:
            rec = hit_sphere(ray_origin, ray_direction, get_sphere(i))
            if rec.hit == 1:
                distance_squared = length_squared(rec.point - ray_origin)
                if distance_squared < closest:
                    closest = distance_squared
                    result = SceneHitRecord(
                        hit=1,
                        sphere_index=i,
                        point=rec.point,
                        normal=rec.normal,
                        reflection=rec.reflection,
                    )

    return result


@ti.func
def intersect_scene_any(ray_origin: vec3, ray_direction: vec3, excluded: ti.i64) -> ti.i32:
    """Test if a ray meets any sphere outside the exclusion mask.

    Used for shadow tests: only existence matters, not the hit location.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        excluded: Bitset of sphere indices to ignore.

    Returns:
        1 if any remaining sphere was hit, 0 otherwise.
    """
    hit_any = 0

    # Early exit on first hit
    for i in range(num_spheres[None]):
        if hit_any == 0 and is_excluded(excluded, i) == 0:
            if sphere_blocks(ray_origin, ray_direction, get_sphere(i)) == 1:
                hit_any = 1

    return hit_any


@ti.func
def get_sphere_color(index: ti.i32) -> vec3:
    """Get the surface color of a stored sphere."""
    return sphere_colors[index]


@ti.func
def get_sphere_mirror(index: ti.i32) -> ti.f32:
    """Get the mirror fraction of a stored sphere."""
    return sphere_mirrors[index]
