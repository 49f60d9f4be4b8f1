"""Scene module for sphere storage, nearest-hit queries and configuration.

Components:
    intersection: Sphere storage in Taichi fields and find_nearest_hit()
    manager: SceneManager with unified material IDs and JSON configuration
    demo: Ready-made scene of three spheres on a ground sphere

Scene data is stored as Structure-of-Arrays Taichi fields and is read-only
while rendering.
"""

from .demo import DemoSceneParams, create_demo_scene
from .intersection import (
    MAX_SPHERES,
    NO_MATERIAL,
    add_sphere,
    clear_scene,
    find_nearest_hit,
    get_sphere_count,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)

__all__ = [
    # Intersection
    "MAX_SPHERES",
    "NO_MATERIAL",
    "add_sphere",
    "clear_scene",
    "find_nearest_hit",
    "get_sphere_count",
    # Manager
    "MAX_MATERIALS",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "SceneManager",
    "get_material_type",
    "get_material_type_index",
    # Demo scene
    "DemoSceneParams",
    "create_demo_scene",
]
