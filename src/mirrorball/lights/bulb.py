"""Bulb light source with angular falloff.

A bulb sits at a point and tints whatever it reaches with its color. The
power it delivers to a surface point depends only on the angle between the
bulb-to-point direction and the surface normal:

    power = 1 - angle / 90deg    for angle <= 90deg
    power = 0                    otherwise

There is no distance falloff. Shadow tests are done by the caster, not here.

Bulbs are stored in Taichi fields so the caster can iterate them inside
kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.mirrorball.lights.bulb import add_bulb, vec3
    >>> add_bulb(vec3(-20.0, -10.0, 20.0), vec3(0.7, 0.7, 0.7))
    0
"""

import taichi as ti
import taichi.math as tm

from src.mirrorball.core.ray import dot, normalize

# Type alias for 3D vectors
vec3 = tm.vec3

# Falloff reaches zero at a right angle
HALF_PI = tm.pi / 2.0


@ti.dataclass
class Bulb:
    """A bulb light.

    Attributes:
        center: The position of the bulb (vec3).
        color: The emitted color (RGB). Components are usually in [0, 1]
            but this is not enforced.
    """

    center: vec3
    color: vec3


@ti.func
def bulb_power(bulb: Bulb, point: vec3, normal: vec3) -> ti.f32:
    """Compute how strongly a bulb lights a surface point.

    Args:
        bulb: The light.
        point: The surface point being lit.
        normal: The unit surface normal at the point.

    Returns:
        A power in [0, 1]: 1 when the bulb-to-point direction is aligned
        with the normal, falling linearly to 0 at 90 degrees and beyond.
    """
    v1 = normalize(point - bulb.center)
    # Clamp against f32 rounding just outside acos's domain
    cos_angle = tm.clamp(dot(v1, normal), -1.0, 1.0)
    angle = ti.abs(ti.acos(cos_angle))

    power = 1.0 - angle / HALF_PI
    if angle > HALF_PI:
        power = 0.0
    return power


# =============================================================================
# Bulb Storage
# =============================================================================

# Maximum number of bulbs supported in the scene
MAX_BULBS = 64

bulb_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_BULBS)
bulb_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_BULBS)
num_bulbs = ti.field(dtype=ti.i32, shape=())


def add_bulb(center: vec3, color: vec3) -> int:
    """Add a bulb to the scene.

    Args:
        center: The position of the bulb.
        color: The emitted color (RGB).

    Returns:
        The index of the added bulb.

    Raises:
        RuntimeError: If the maximum number of bulbs is exceeded.
    """
    idx = num_bulbs[None]
    if idx >= MAX_BULBS:
        raise RuntimeError(f"Maximum number of bulbs ({MAX_BULBS}) exceeded")
    bulb_centers[idx] = center
    bulb_colors[idx] = color
    num_bulbs[None] = idx + 1
    return idx


def clear_bulbs() -> None:
    """Remove all bulbs from the scene."""
    num_bulbs[None] = 0


def get_bulb_count() -> int:
    """Get the number of bulbs in the scene."""
    return int(num_bulbs[None])


@ti.func
def get_bulb(index: ti.i32) -> Bulb:
    """Get a stored bulb by index (Taichi function)."""
    return Bulb(center=bulb_centers[index], color=bulb_colors[index])
