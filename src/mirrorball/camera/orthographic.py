"""Orthographic camera model for parallel-projection ray generation.

Every pixel casts a ray with the same direction; only the ray origin moves
across a square image plane. The plane is centered on the camera origin and
spanned by two axes:
- right: moves the origin as the pixel column grows
- down: moves the origin as the pixel row grows

For pixel (x, y) of an n x n image and a plane of side `size`:

    origin = camera.origin
             + right * (-size / 2 + x * size / n)
             + down  * (-size / 2 + y * size / n)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.mirrorball.camera.orthographic import OrthographicCamera, setup_camera
    >>> setup_camera(OrthographicCamera(origin=(100.0, 0.0, 0.0), size=30.0))
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.mirrorball.core.ray import Ray, make_ray

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class OrthographicCamera:
    """Configuration for an orthographic camera.

    Attributes:
        origin: Center of the image plane in world space (x, y, z).
        direction: Direction shared by all primary rays. Used as given,
            not normalized.
        size: Side length of the square image plane in world units.
        right: World-space axis followed by increasing pixel columns.
        down: World-space axis followed by increasing pixel rows.
    """

    origin: tuple[float, float, float] = (100.0, 0.0, 0.0)
    direction: tuple[float, float, float] = (-1.0, 0.0, 0.0)
    size: float = 30.0
    right: tuple[float, float, float] = (0.0, 1.0, 0.0)
    down: tuple[float, float, float] = (0.0, 0.0, 1.0)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_down = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_size = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: OrthographicCamera) -> None:
    """Initialize camera state from configuration.

    Must be called before rendering.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the image plane size is not positive.
    """
    if not camera.size > 0.0:
        raise ValueError(f"Camera size must be positive, got {camera.size}")

    _camera_origin[None] = list(camera.origin)
    _camera_direction[None] = list(camera.direction)
    _camera_right[None] = list(camera.right)
    _camera_down[None] = list(camera.down)
    _camera_size[None] = camera.size


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(pixel_x: ti.i32, pixel_y: ti.i32, resolution: ti.i32) -> Ray:
    """Generate the primary ray for a pixel.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        resolution: Side length of the square image in pixels.

    Returns:
        A Ray starting on the image plane and pointing along the camera
        direction.
    """
    size = _camera_size[None]
    pixels_per_unit = ti.cast(resolution, ti.f32) / size
    offset_x = -size * 0.5 + ti.cast(pixel_x, ti.f32) / pixels_per_unit
    offset_y = -size * 0.5 + ti.cast(pixel_y, ti.f32) / pixels_per_unit

    origin = _camera_origin[None] + _camera_right[None] * offset_x + _camera_down[None] * offset_y
    return make_ray(origin, _camera_direction[None])


def get_camera_info() -> dict[str, object]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, direction, right, down and size.
    """
    origin_vec = _camera_origin[None]
    direction_vec = _camera_direction[None]
    right_vec = _camera_right[None]
    down_vec = _camera_down[None]

    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "direction": (float(direction_vec[0]), float(direction_vec[1]), float(direction_vec[2])),
        "right": (float(right_vec[0]), float(right_vec[1]), float(right_vec[2])),
        "down": (float(down_vec[0]), float(down_vec[1]), float(down_vec[2])),
        "size": float(_camera_size[None]),
    }
