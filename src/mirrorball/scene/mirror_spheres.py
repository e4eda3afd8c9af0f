"""Demo scene: seven reflective spheres under two bulbs.

The scene is viewed by an orthographic camera at x = 100 looking down the
-x axis. It contains:
- A large pink mirror sphere at the origin and a green mirror sphere below it
- Three smaller spheres (white half-mirror, blue and olive matte)
- Two huge spheres at x = -100 acting as gray and white backdrops
- Two close white bulbs giving a doubled hard shadow

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.mirrorball.scene.mirror_spheres import create_mirror_spheres_scene
    >>> from src.mirrorball.camera.orthographic import setup_camera
    >>>
    >>> scene, camera = create_mirror_spheres_scene()
    >>> setup_camera(camera)
"""

from src.mirrorball.camera.orthographic import OrthographicCamera
from src.mirrorball.scene.manager import BulbInfo, SceneManager, SphereInfo, build_scene

# =============================================================================
# Scene Contents
# =============================================================================

MIRROR_SPHERES = (
    SphereInfo(center=(0.0, 0.0, 0.0), radius=5.0, color=(1.0, 0.5, 0.5), mirror=0.9),
    SphereInfo(center=(0.0, -12.0, 0.0), radius=4.0, color=(0.5, 1.0, 0.5), mirror=0.9),
    SphereInfo(center=(5.0, 8.0, 7.0), radius=3.0, color=(1.0, 1.0, 1.0), mirror=0.5),
    SphereInfo(center=(7.0, 5.0, 5.0), radius=2.0, color=(0.5, 0.5, 1.0), mirror=0.0),
    SphereInfo(center=(12.0, 4.0, 5.0), radius=1.0, color=(0.5, 0.5, 0.2), mirror=0.0),
    SphereInfo(center=(-100.0, 0.0, -50.0), radius=100.0, color=(0.5, 0.5, 0.5), mirror=0.4),
    SphereInfo(center=(-100.0, 0.0, 50.0), radius=100.0, color=(1.0, 1.0, 1.0), mirror=0.4),
)

BULB_INTENSITY = 0.7

MIRROR_BULBS = (
    BulbInfo(center=(-20.0, -10.0, 20.0), color=(BULB_INTENSITY,) * 3),
    BulbInfo(center=(-20.0, -12.0, 22.0), color=(BULB_INTENSITY,) * 3),
)

# Camera looking along -x at a 30 x 30 window
CAMERA = OrthographicCamera(
    origin=(100.0, 0.0, 0.0),
    direction=(-1.0, 0.0, 0.0),
    size=30.0,
)


def create_mirror_spheres_scene() -> tuple[SceneManager, OrthographicCamera]:
    """Create the demo scene and its camera.

    Returns:
        A tuple of (SceneManager, OrthographicCamera).

    Example:
        >>> scene, camera = create_mirror_spheres_scene()
        >>> scene.get_sphere_count(), scene.get_bulb_count()
        (7, 2)
    """
    scene = build_scene(MIRROR_SPHERES, MIRROR_BULBS)
    camera = OrthographicCamera(
        origin=CAMERA.origin,
        direction=CAMERA.direction,
        size=CAMERA.size,
        right=CAMERA.right,
        down=CAMERA.down,
    )
    return scene, camera
