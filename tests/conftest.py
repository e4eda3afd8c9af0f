"""Pytest configuration for ray caster tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f32)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here to ensure Taichi is initialized first
    from src.mirrorball.lights.bulb import clear_bulbs
    from src.mirrorball.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_bulbs()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def demo_camera():
    """Set up the demo scene's orthographic camera."""
    from src.mirrorball.camera.orthographic import OrthographicCamera, setup_camera

    camera = OrthographicCamera()
    setup_camera(camera)
    return camera
