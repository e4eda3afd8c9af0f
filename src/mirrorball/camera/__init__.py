"""Camera module for primary ray generation.

Components:
    orthographic: Parallel-projection camera over a square image plane

Pixel coordinates:
    x in [0, n): left to right across the image
    y in [0, n): top to bottom across the image
"""

from .orthographic import (
    OrthographicCamera,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "OrthographicCamera",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
