"""Mirrorball: a Taichi ray caster for reflective spheres and bulb lights.

This package renders still images of sphere scenes using recursive ray
casting with mirror reflection and hard shadows:
- Analytic ray-sphere intersection with mirror reflection directions
- Bulb lights with angular falloff and binary shadow tests
- Multi-resolution render passes with downscaled supersampling
- Linear PNG export

Subpackages:
    core: Vector utilities, the color caster, and the multi-pass renderer
    geometry: Sphere primitive and intersection
    lights: Bulb light storage and power evaluation
    scene: Scene storage, scene manager, and the demo scene
    camera: Orthographic camera ray generation
    preview: PNG export and Matplotlib preview
"""

__version__ = "0.1.0"
