"""Tests for the scene manager.

This module tests the SceneManager class and its helpers including:
- Adding spheres and bulbs
- Parameter validation
- Dictionary and JSON round trips
- Casting rays through the manager

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import json

import pytest


class TestSceneManagerBuilding:
    """Test adding objects to a scene."""

    def test_new_manager_is_empty(self):
        """Test a new manager clears any previous scene."""
        from src.mirrorball.scene.intersection import add_sphere, vec3
        from src.mirrorball.scene.manager import SceneManager

        add_sphere(vec3(0, 0, 0), 1.0, vec3(1, 1, 1))
        scene = SceneManager()

        assert scene.get_sphere_count() == 0
        assert scene.get_bulb_count() == 0

    def test_add_sphere_and_bulb(self):
        """Test objects are recorded and stored."""
        from src.mirrorball.scene.manager import BulbInfo, SceneManager, SphereInfo

        scene = SceneManager()
        assert scene.add_sphere((0, 0, 0), 5.0, (1.0, 0.5, 0.5), mirror=0.9) == 0
        assert scene.add_bulb((-20, -10, 20), (0.7, 0.7, 0.7)) == 0

        assert scene.get_sphere_count() == 1
        assert scene.get_bulb_count() == 1
        assert scene.spheres == [
            SphereInfo(center=(0.0, 0.0, 0.0), radius=5.0, color=(1.0, 0.5, 0.5), mirror=0.9)
        ]
        assert scene.lights == [BulbInfo(center=(-20.0, -10.0, 20.0), color=(0.7, 0.7, 0.7))]

    def test_defaults(self):
        """Test default sphere and bulb colors."""
        from src.mirrorball.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((0, 0, 0), 1.0)
        scene.add_bulb((1, 2, 3))

        assert scene.spheres[0].color == (1.0, 0.0, 0.0)
        assert scene.spheres[0].mirror == 0.0
        assert scene.lights[0].color == (1.0, 1.0, 1.0)

    def test_invalid_sphere_not_recorded(self):
        """Test a rejected sphere leaves the scene unchanged."""
        from src.mirrorball.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError):
            scene.add_sphere((0, 0, 0), -1.0)
        with pytest.raises(ValueError):
            scene.add_sphere((0, 0, 0), 1.0, mirror=2.0)

        assert scene.spheres == []
        assert scene.get_sphere_count() == 0

    def test_bad_vector_length(self):
        """Test vectors must have three components."""
        from src.mirrorball.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="3 components"):
            scene.add_sphere((0, 0), 1.0)

    def test_clear(self):
        """Test clearing removes everything."""
        from src.mirrorball.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((0, 0, 0), 1.0)
        scene.add_bulb((0, 0, 10))
        scene.clear()

        assert scene.get_sphere_count() == 0
        assert scene.get_bulb_count() == 0
        assert scene.to_dict() == {"spheres": [], "lights": []}

    def test_capacity(self):
        """Test the capacity helpers."""
        from src.mirrorball.scene.manager import SceneManager

        assert SceneManager.get_max_spheres() == 64
        assert SceneManager.get_max_bulbs() == 64

    def test_cast_ray(self):
        """Test casting through the manager uses its scene."""
        from src.mirrorball.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((0, 0, 0), 5.0, (1.0, 0.5, 0.25))

        color = scene.cast_ray((100, 0, 0), (-1, 0, 0), color_on_full_shade=(0.5, 0.5, 0.5))
        assert color == pytest.approx((0.5, 0.25, 0.125))
        assert scene.cast_ray((100, 50, 0), (-1, 0, 0)) == pytest.approx((0.0, 0.0, 1.0))


class TestSceneReloading:
    """Test managers whose scene was replaced by a newer one."""

    def test_cast_through_replaced_scene(self):
        """Test an older manager still casts against its own spheres."""
        from src.mirrorball.scene.manager import SphereInfo, build_scene

        red = build_scene([SphereInfo(center=(0, 0, 0), radius=5.0, color=(1.0, 0.0, 0.0))], [])
        before = red.cast_ray((100, 0, 0), (-1, 0, 0), color_on_full_shade=(1.0, 1.0, 1.0))

        empty = build_scene([], [])
        assert not red.is_loaded
        assert empty.cast_ray((100, 0, 0), (-1, 0, 0)) == pytest.approx((0.0, 0.0, 1.0))

        after = red.cast_ray((100, 0, 0), (-1, 0, 0), color_on_full_shade=(1.0, 1.0, 1.0))
        assert before == pytest.approx((1.0, 0.0, 0.0))
        assert after == before
        assert red.is_loaded
        assert not empty.is_loaded

    def test_counts_follow_the_manager(self):
        """Test counts describe the queried manager, not the last one built."""
        from src.mirrorball.scene.manager import BulbInfo, SphereInfo, build_scene

        first = build_scene(
            [SphereInfo(center=(0, 0, 0), radius=1.0), SphereInfo(center=(5, 0, 0), radius=1.0)],
            [BulbInfo(center=(0, 0, 10))],
        )
        second = build_scene([SphereInfo(center=(0, 0, 0), radius=2.0)], [])

        assert first.get_sphere_count() == 2
        assert first.get_bulb_count() == 1
        assert second.get_sphere_count() == 1
        assert second.get_bulb_count() == 0

    def test_add_to_replaced_scene(self):
        """Test adding to an older manager keeps its earlier spheres."""
        from src.mirrorball.scene.manager import SceneManager

        first = SceneManager()
        first.add_sphere((0, 0, 0), 1.0)
        second = SceneManager()
        second.add_sphere((0, 0, 0), 2.0)

        assert first.add_sphere((10, 0, 0), 1.0) == 1
        assert first.get_sphere_count() == 2
        assert len(first.spheres) == 2


class TestSceneSerialization:
    """Test round trips through dictionaries and files."""

    def test_dict_round_trip(self):
        """Test to_dict and from_dict preserve the scene."""
        from src.mirrorball.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((0, 0, 0), 5.0, (1.0, 0.5, 0.5), mirror=0.9)
        scene.add_sphere((0, -12, 0), 4.0, (0.5, 1.0, 0.5), mirror=0.9)
        scene.add_bulb((-20, -10, 20), (0.7, 0.7, 0.7))
        data = scene.to_dict()

        restored = SceneManager()
        restored.from_dict(data)

        assert restored.to_dict() == data
        assert restored.get_sphere_count() == 2
        assert data["spheres"][1]["center"] == [0.0, -12.0, 0.0]

    def test_from_dict_fills_defaults(self):
        """Test optional keys fall back to their defaults."""
        from src.mirrorball.scene.manager import SceneManager

        scene = SceneManager()
        scene.from_dict({"spheres": [{"center": [1, 2, 3], "radius": 2}], "lights": [{"center": [0, 0, 0]}]})

        assert scene.spheres[0].color == (1.0, 0.0, 0.0)
        assert scene.spheres[0].mirror == 0.0
        assert scene.lights[0].color == (1.0, 1.0, 1.0)

    @pytest.mark.parametrize(
        "data",
        [
            {"spheres": [{"center": [0, 0, 0]}]},
            {"spheres": [{"radius": 1.0}]},
            {"lights": [{"color": [1, 1, 1]}]},
            {"spheres": [{"center": [0, 0, 0], "radius": 1.0, "reflect": 0.5}]},
            {"lights": [{"center": [0, 0, 0], "power": 2.0}]},
        ],
    )
    def test_from_dict_invalid_keys(self, data):
        """Test required keys are enforced and unknown keys rejected."""
        from src.mirrorball.scene.manager import SceneManager

        with pytest.raises(ValueError):
            SceneManager().from_dict(data)

    def test_build_scene_accepts_dataclasses_and_dicts(self):
        """Test build_scene keeps the given order for mixed inputs."""
        from src.mirrorball.scene.manager import BulbInfo, SphereInfo, build_scene

        scene = build_scene(
            [
                SphereInfo(center=(0, 0, 0), radius=5.0),
                {"center": (10, 0, 0), "radius": 1.0, "mirror": 0.5},
            ],
            [BulbInfo(center=(0, 0, 20))],
        )

        assert scene.get_sphere_count() == 2
        assert scene.get_bulb_count() == 1
        assert scene.spheres[1].mirror == 0.5

    def test_save_and_load_json(self, tmp_path):
        """Test a scene survives a JSON file round trip with extra sections."""
        from src.mirrorball.scene.manager import SceneManager, load_scene, save_scene

        scene = SceneManager()
        scene.add_sphere((0, 0, 0), 5.0, (1.0, 0.5, 0.5), mirror=0.9)
        scene.add_bulb((-20, -10, 20), (0.7, 0.7, 0.7))
        expected = scene.to_dict()

        filepath = tmp_path / "scene.json"
        save_scene(scene, filepath, extra={"camera": {"size": 20.0}})

        loaded, data = load_scene(filepath)
        assert loaded.to_dict() == expected
        assert data["camera"] == {"size": 20.0}

    def test_load_rejects_non_object(self, tmp_path):
        """Test a JSON file that is not an object is rejected."""
        from src.mirrorball.scene.manager import load_scene

        filepath = tmp_path / "scene.json"
        filepath.write_text(json.dumps([1, 2, 3]), encoding="utf-8")

        with pytest.raises(ValueError, match="JSON object"):
            load_scene(filepath)

    def test_load_rejects_invalid_json(self, tmp_path):
        """Test malformed JSON raises ValueError."""
        from src.mirrorball.scene.manager import load_scene

        filepath = tmp_path / "scene.json"
        filepath.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError):
            load_scene(filepath)
