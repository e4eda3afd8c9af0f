"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    integrator: The recursive color caster and the render target
    progressive: Multi-resolution passes with downscaled supersampling

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    dot,
    length_squared,
    make_ray,
    normalize,
    reflect,
    vec3,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from src.mirrorball.core.integrator or src.mirrorball.core.progressive.

__all__ = [
    "Ray",
    "make_ray",
    "vec3",
    "dot",
    "length_squared",
    "normalize",
    "reflect",
]
