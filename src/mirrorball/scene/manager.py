"""Scene manager for building and serializing sphere scenes.

This module provides the high-level scene API on top of the Taichi field
storage in intersection.py and bulb.py. The SceneManager:
- Adds spheres (with surface color and mirror fraction) and bulb lights
- Keeps a Python-side record of everything added, for serialization
- Round-trips scenes through dictionaries and JSON files
- Casts single rays against the scene it holds

Scene storage is global (Taichi fields), so only one scene is held by the
fields at a time. Each manager is stamped with the generation it loaded;
a manager whose scene was replaced by another uploads its own spheres and
bulbs again before it is queried or extended.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.mirrorball.scene.manager import BulbInfo, SphereInfo, build_scene
    >>> scene = build_scene(
    ...     [SphereInfo(center=(0, 0, 0), radius=5.0, color=(1.0, 0.5, 0.5), mirror=0.9)],
    ...     [BulbInfo(center=(-20, -10, 20), color=(0.7, 0.7, 0.7))],
    ... )
    >>> scene.cast_ray((100, 0, 0), (-1, 0, 0))
"""

import json
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import taichi.math as tm

from src.mirrorball.lights.bulb import MAX_BULBS, add_bulb, clear_bulbs, get_bulb_count
from src.mirrorball.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere (positive).
        color: The surface color (RGB).
        mirror: Mirror fraction in [0, 1]. 0 is matte, 1 is a perfect mirror.
    """

    center: tuple[float, float, float]
    radius: float
    color: tuple[float, float, float] = (1.0, 0.0, 0.0)
    mirror: float = 0.0


@dataclass
class BulbInfo:
    """Information about a bulb light in the scene.

    Attributes:
        center: The position of the bulb.
        color: The emitted color (RGB).
    """

    center: tuple[float, float, float]
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        spheres: List of sphere configurations.
        lights: List of bulb configurations.
    """

    spheres: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Iterable[float]) -> tuple[float, float, float]:
    """Convert a 3-element sequence into a float tuple."""
    items = [float(v) for v in values]
    if len(items) != 3:
        raise ValueError(f"Expected 3 components, got {len(items)}")
    return (items[0], items[1], items[2])


_SPHERE_KEYS = frozenset(f.name for f in fields(SphereInfo))
_BULB_KEYS = frozenset(f.name for f in fields(BulbInfo))


def _check_keys(config: Mapping[str, Any], allowed: frozenset[str], kind: str) -> None:
    """Reject configuration keys that do not name a field."""
    unknown = set(config) - allowed
    if unknown:
        raise ValueError(f"{kind} has unknown keys {sorted(unknown)}: {dict(config)}")


# Generation of the scene currently held in the Taichi fields
_loaded_generation = 0


def _next_generation() -> int:
    """Advance and return the loaded-scene generation."""
    global _loaded_generation
    _loaded_generation += 1
    return _loaded_generation


class SceneManager:
    """Scene manager coordinating sphere and bulb storage.

    Attributes:
        spheres: List of SphereInfo for all spheres in the scene.
        lights: List of BulbInfo for all bulbs in the scene.

    Example:
        >>> scene = SceneManager()
        >>> scene.add_sphere((0, 0, 0), 5.0, (1.0, 0.5, 0.5), mirror=0.9)
        0
        >>> scene.add_bulb((-20, -10, 20), (0.7, 0.7, 0.7))
        0
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.spheres: list[SphereInfo] = []
        self.lights: list[BulbInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_bulbs()
        self.spheres.clear()
        self.lights.clear()
        self._generation = _next_generation()

    @property
    def is_loaded(self) -> bool:
        """Whether the Taichi fields currently hold this scene."""
        return self._generation == _loaded_generation

    def load(self) -> None:
        """Upload this scene into the Taichi fields if another scene replaced it.

        Rendering reads the fields directly, so call this before rendering a
        scene that is not the most recently built one.
        """
        if self.is_loaded:
            return

        clear_scene()
        clear_bulbs()
        for sphere in self.spheres:
            add_sphere(vec3(*sphere.center), sphere.radius, vec3(*sphere.color), sphere.mirror)
        for bulb in self.lights:
            add_bulb(vec3(*bulb.center), vec3(*bulb.color))
        self._generation = _next_generation()

    def clear(self) -> None:
        """Clear the entire scene (spheres and bulbs)."""
        self._clear_all()

    # =========================================================================
    # Scene Building
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        color: tuple[float, float, float] = (1.0, 0.0, 0.0),
        mirror: float = 0.0,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            color: The surface color as (R, G, B).
            mirror: Mirror fraction in [0, 1].

        Returns:
            The index of the added sphere.

        Raises:
            ValueError: If radius is not positive or mirror is outside [0, 1].
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        center = _as_triple(center)
        color = _as_triple(color)
        self.load()
        sphere_index = add_sphere(vec3(*center), float(radius), vec3(*color), float(mirror))

        self.spheres.append(
            SphereInfo(center=center, radius=float(radius), color=color, mirror=float(mirror))
        )
        return sphere_index

    def add_bulb(
        self,
        center: tuple[float, float, float],
        color: tuple[float, float, float] = (1.0, 1.0, 1.0),
    ) -> int:
        """Add a bulb light to the scene.

        Args:
            center: The position of the bulb as (x, y, z).
            color: The emitted color as (R, G, B).

        Returns:
            The index of the added bulb.

        Raises:
            RuntimeError: If the maximum number of bulbs is exceeded.
        """
        center = _as_triple(center)
        color = _as_triple(color)
        self.load()
        bulb_index = add_bulb(vec3(*center), vec3(*color))

        self.lights.append(BulbInfo(center=center, color=color))
        return bulb_index

    # =========================================================================
    # Ray Casting
    # =========================================================================

    def cast_ray(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        color_on_miss: tuple[float, float, float] | None = None,
        color_on_full_shade: tuple[float, float, float] | None = None,
    ) -> tuple[float, float, float]:
        """Cast a single ray against this scene.

        Args:
            origin: The starting point of the ray.
            direction: The direction vector of the ray.
            color_on_miss: Color returned when the ray meets nothing.
                Defaults to the integrator's COLOR_ON_MISS.
            color_on_full_shade: Light mask floor for points no bulb reaches.
                Defaults to the integrator's COLOR_ON_FULL_SHADE.

        Returns:
            Tuple of (R, G, B) color values, unclamped.
        """
        # Import here to avoid circular imports (the integrator reads scene fields)
        from src.mirrorball.core.integrator import COLOR_ON_FULL_SHADE, COLOR_ON_MISS, cast_ray

        self.load()
        if color_on_miss is None:
            color_on_miss = COLOR_ON_MISS
        if color_on_full_shade is None:
            color_on_full_shade = COLOR_ON_FULL_SHADE
        return cast_ray(origin, direction, color_on_miss, color_on_full_shade)

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        self.load()
        return get_sphere_count()

    def get_bulb_count(self) -> int:
        """Get the number of bulbs in the scene."""
        self.load()
        return get_bulb_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing all spheres and bulbs.
        """
        config = SceneConfig()

        for sphere in self.spheres:
            sphere_config = asdict(sphere)
            sphere_config["center"] = list(sphere.center)
            sphere_config["color"] = list(sphere.color)
            config.spheres.append(sphere_config)

        for bulb in self.lights:
            config.lights.append({"center": list(bulb.center), "color": list(bulb.color)})

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for sphere_config in config.spheres:
            _check_keys(sphere_config, _SPHERE_KEYS, "Sphere")
            if "center" not in sphere_config or "radius" not in sphere_config:
                raise ValueError(f"Sphere needs 'center' and 'radius': {sphere_config}")
            self.add_sphere(
                center=sphere_config["center"],
                radius=sphere_config["radius"],
                color=sphere_config.get("color", (1.0, 0.0, 0.0)),
                mirror=sphere_config.get("mirror", 0.0),
            )

        for bulb_config in config.lights:
            _check_keys(bulb_config, _BULB_KEYS, "Bulb")
            if "center" not in bulb_config:
                raise ValueError(f"Bulb needs 'center': {bulb_config}")
            self.add_bulb(
                center=bulb_config["center"],
                color=bulb_config.get("color", (1.0, 1.0, 1.0)),
            )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            A dictionary with 'spheres' and 'lights' keys.
        """
        config = self.to_config()
        return {
            "spheres": config.spheres,
            "lights": config.lights,
        }

    def from_dict(self, data: Mapping[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'spheres' and 'lights' keys.
        """
        config = SceneConfig(
            spheres=list(data.get("spheres", [])),
            lights=list(data.get("lights", [])),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_bulbs() -> int:
        """Get the maximum number of bulbs supported."""
        return MAX_BULBS


def build_scene(
    spheres: Iterable[SphereInfo | Mapping[str, Any]],
    lights: Iterable[BulbInfo | Mapping[str, Any]],
) -> SceneManager:
    """Build a scene from ordered sphere and bulb descriptions.

    Args:
        spheres: SphereInfo values or dicts with the same keys.
        lights: BulbInfo values or dicts with the same keys.

    Returns:
        A SceneManager holding the new scene.

    Raises:
        ValueError: If a sphere has a non-positive radius or an invalid
            mirror fraction.
    """
    config = SceneConfig(
        spheres=[asdict(s) if isinstance(s, SphereInfo) else dict(s) for s in spheres],
        lights=[asdict(b) if isinstance(b, BulbInfo) else dict(b) for b in lights],
    )
    scene = SceneManager()
    scene.from_config(config)
    return scene


def load_scene(filepath: str | Path) -> tuple[SceneManager, dict[str, Any]]:
    """Load a scene from a JSON file.

    The file holds 'spheres' and 'lights' lists and may carry extra top-level
    sections (such as 'camera' or 'shading') that are returned untouched.

    Args:
        filepath: Path to the JSON scene file.

    Returns:
        Tuple of (SceneManager, full parsed document).

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or describes an invalid scene.
    """
    with open(filepath, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Scene file must contain a JSON object: {filepath}")

    scene = SceneManager()
    scene.from_dict(data)
    return scene, data


def save_scene(
    scene: SceneManager,
    filepath: str | Path,
    extra: Mapping[str, Any] | None = None,
) -> None:
    """Save a scene to a JSON file.

    Args:
        scene: The scene to save.
        filepath: Output path.
        extra: Optional additional top-level sections (e.g. 'camera').
    """
    data = dict(extra or {})
    data.update(scene.to_dict())
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
