"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, point evaluation and vector utilities
    sampling: Random direction sampling behind a swappable capability
    integrator: Depth-limited color recursion, sky shading and the
        image render target

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    ray_at,
    reflect,
    unit_vector,
    vec3,
)

# Note: sampling and integrator are NOT imported here. Both declare Taichi
# fields at import time, which must happen after ti.init().
# Import directly from raykernel.core.sampling or raykernel.core.integrator.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "dot",
    "length",
    "length_squared",
    "unit_vector",
    "near_zero",
    "reflect",
]
