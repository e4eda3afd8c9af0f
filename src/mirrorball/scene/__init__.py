"""Scene module for sphere and light storage.

Components:
    intersection: Sphere storage in Taichi fields and nearest/any-hit queries
    manager: SceneManager, scene building and JSON serialization
    mirror_spheres: The demo scene

Scene queries take an exclusion mask (one bit per sphere) so the caster can
drop surfaces it has already hit.
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
    intersect_scene_any,
)
from .manager import (
    BulbInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
    build_scene,
    load_scene,
    save_scene,
)
from .mirror_spheres import create_mirror_spheres_scene

__all__ = [
    # Intersection
    "MAX_SPHERES",
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "intersect_scene_any",
    # Scene manager
    "SceneManager",
    "SceneConfig",
    "SphereInfo",
    "BulbInfo",
    "build_scene",
    "load_scene",
    "save_scene",
    # Demo scene
    "create_mirror_spheres_scene",
]
