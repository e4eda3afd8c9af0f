"""Recursive color caster and render target.

This module implements the shading rule of the ray caster. For a ray it:

1. Finds the nearest sphere hit; a miss returns the miss color.
2. Drops the hit sphere from the candidate set for everything that follows.
3. If the sphere is a mirror, casts the reflected ray against the remaining
   spheres and blends:  base = color * (1 - mirror) + mirrored * mirror
4. Builds a light mask starting from the full-shade color and adding
   power * bulb.color for every bulb not blocked by a remaining sphere.
5. Returns base * mask (componentwise).

Taichi functions cannot recurse, so the mirror recursion is unrolled into a
loop carrying an RGB throughput weight. Because the blend is linear the
result is the same as the recursive form. Each bounce adds the hit sphere to
an exclusion mask, so the loop runs at most sphere_count + 1 times.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.mirrorball.core.integrator import cast_ray
    >>> from src.mirrorball.scene.manager import SceneManager
    >>>
    >>> scene = SceneManager()
    >>> scene.add_sphere((0, 0, 0), 5.0, (1.0, 0.5, 0.5))
    >>> scene.add_bulb((20, 0, 0), (1.0, 1.0, 1.0))
    >>> cast_ray((100, 0, 0), (-1, 0, 0), (0, 0, 1), (0.1, 0.1, 0.1))
"""

import taichi as ti
import taichi.math as tm

from src.mirrorball.camera.orthographic import get_ray
from src.mirrorball.core.ray import normalize
from src.mirrorball.lights.bulb import bulb_power, get_bulb, num_bulbs
from src.mirrorball.scene.intersection import (
    exclude,
    get_sphere_color,
    get_sphere_mirror,
    intersect_scene,
    intersect_scene_any,
    num_spheres,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Shading Constants
# =============================================================================

# Defaults used by the demo scene
COLOR_ON_MISS = (0.0, 0.0, 1.0)
COLOR_ON_FULL_SHADE = (0.1, 0.1, 0.1)

# =============================================================================
# Color Caster
# =============================================================================


@ti.func
def _light_mask(point: vec3, normal: vec3, excluded: ti.i64, color_on_full_shade: vec3) -> vec3:
    """Sum the contribution of every unblocked bulb at a surface point.

    Args:
        point: The surface point.
        normal: The unit surface normal at the point.
        excluded: Spheres that may not block the bulbs.
        color_on_full_shade: The mask floor when no bulb reaches the point.

    Returns:
        The color mask used to tint the surface color.
    """
    mask = color_on_full_shade
    for k in range(num_bulbs[None]):
        bulb = get_bulb(k)
        # Shadow ray leaves the point heading away from the bulb
        shadow_direction = normalize(point - bulb.center)
        if intersect_scene_any(point, shadow_direction, excluded) == 0:
            power = bulb_power(bulb, point, normal)
            if power > 0.0:
                mask += power * bulb.color
    return mask


@ti.func
def cast_color(
    ray_origin: vec3,
    ray_direction: vec3,
    color_on_miss: vec3,
    color_on_full_shade: vec3,
) -> vec3:
    """Cast a ray into the scene and return its color.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        color_on_miss: Color returned when the ray meets nothing.
        color_on_full_shade: Light mask floor for points no bulb reaches.

    Returns:
        The linear RGB color seen along the ray. Components are not clamped.
    """
    origin = ray_origin
    direction = ray_direction
    excluded = ti.cast(0, ti.i64)

    color = vec3(0.0, 0.0, 0.0)
    # Product of (mask * mirror) over the bounces taken so far
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag for bounce continuation
    active = 1

    for _ in range(num_spheres[None] + 1):
        if active == 1:
            rec = intersect_scene(origin, direction, excluded)

            if rec.hit == 0:
                color += throughput * color_on_miss
                active = 0
            else:
                excluded = exclude(excluded, rec.sphere_index)
                mask = _light_mask(rec.point, rec.normal, excluded, color_on_full_shade)
                surface_color = get_sphere_color(rec.sphere_index)
                mirror = get_sphere_mirror(rec.sphere_index)

                if mirror > 0.0:
                    color += throughput * mask * surface_color * (1.0 - mirror)
                    throughput *= mask * mirror
                    origin = rec.point
                    direction = rec.reflection
                else:
                    color += throughput * mask * surface_color
                    active = 0

    return color


# =============================================================================
# Single Ray Queries
# =============================================================================

_query_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_color_on_miss = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_color_on_full_shade = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _cast_single_ray():
    """Cast the ray stored in the query fields and store its color."""
    # Single iteration keeps the scene loops nested (serial) inside cast_color
    for _ in range(1):
        _query_result[None] = cast_color(
            _query_origin[None],
            _query_direction[None],
            _query_color_on_miss[None],
            _query_color_on_full_shade[None],
        )


def cast_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    color_on_miss: tuple[float, float, float] = COLOR_ON_MISS,
    color_on_full_shade: tuple[float, float, float] = COLOR_ON_FULL_SHADE,
) -> tuple[float, float, float]:
    """Cast a single ray against the current scene.

    This is a Python-callable entry point. It has no hidden state besides the
    scene itself and can be called repeatedly.

    Args:
        origin: The starting point of the ray.
        direction: The direction vector of the ray.
        color_on_miss: Color returned when the ray meets nothing.
        color_on_full_shade: Light mask floor for points no bulb reaches.

    Returns:
        Tuple of (R, G, B) color values, unclamped.
    """
    _query_origin[None] = list(origin)
    _query_direction[None] = list(direction)
    _query_color_on_miss[None] = list(color_on_miss)
    _query_color_on_full_shade[None] = list(color_on_full_shade)

    _cast_single_ray()

    color = _query_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported pass resolution (preallocated to avoid kernel recompilation)
MAX_RESOLUTION = 2048

_resolution = ti.field(dtype=ti.i32, shape=())
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_RESOLUTION, MAX_RESOLUTION))
_color_on_miss = ti.Vector.field(3, dtype=ti.f32, shape=())
_color_on_full_shade = ti.Vector.field(3, dtype=ti.f32, shape=())

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(
    resolution: int,
    color_on_miss: tuple[float, float, float] = COLOR_ON_MISS,
    color_on_full_shade: tuple[float, float, float] = COLOR_ON_FULL_SHADE,
) -> None:
    """Initialize the render target for a square pass.

    Args:
        resolution: Side length of the pass in pixels (max MAX_RESOLUTION).
        color_on_miss: Color for rays that meet nothing.
        color_on_full_shade: Light mask floor for unlit points.

    Raises:
        ValueError: If the resolution is not positive or exceeds the maximum.
    """
    if resolution <= 0 or resolution > MAX_RESOLUTION:
        raise ValueError(
            f"Resolution {resolution} outside supported range (1..{MAX_RESOLUTION})"
        )

    _resolution[None] = resolution
    _color_on_miss[None] = list(color_on_miss)
    _color_on_full_shade[None] = list(color_on_full_shade)
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the color buffer to zero."""
    _color_buffer.fill(0.0)


def get_resolution() -> int:
    """Get the current pass resolution."""
    return int(_resolution[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


@ti.kernel
def _render_pass(resolution: ti.i32):
    """Cast one ray per pixel into the color buffer.

    Args:
        resolution: Side length of the pass in pixels.
    """
    ti.loop_config(serialize=True)
    for x, y in ti.ndrange(resolution, resolution):
        ray = get_ray(x, y, resolution)
        color = cast_color(ray.origin, ray.direction, _color_on_miss[None], _color_on_full_shade[None])

        # Degenerate geometry encodes as black
        for c in ti.static(range(3)):
            if tm.isnan(color[c]):
                color[c] = 0.0

        _color_buffer[x, y] = color


def render_pass() -> None:
    """Render the whole raster at the current resolution.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    _render_pass(get_resolution())


def get_image_numpy():
    """Get the rendered pass as a NumPy array.

    Values are linear and unclamped. The array is indexed [row, column].

    Returns:
        NumPy array of shape (resolution, resolution, 3) with dtype float32.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    import numpy as np

    _check_render_target_initialized()

    resolution = get_resolution()

    # Buffer is indexed [x, y]; images are [row, column]
    image = _color_buffer.to_numpy()[:resolution, :resolution, :]
    image = np.transpose(image, (1, 0, 2))

    return np.ascontiguousarray(image, dtype=np.float32)
