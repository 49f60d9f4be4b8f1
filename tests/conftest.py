"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate the fields declared at module import time.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Reset scene, materials, sampler and render target around each test."""
    # Import here so Taichi is initialized before any field is declared
    from raykernel.core.integrator import reset_render_target
    from raykernel.core.sampling import use_random_samples
    from raykernel.materials.lambertian import clear_lambertian_materials
    from raykernel.materials.metal import clear_metal_materials
    from raykernel.scene.intersection import clear_scene
    from raykernel.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        _clear_material_tracking()
        use_random_samples()
        reset_render_target()

    _clear_all()

    yield

    _clear_all()
