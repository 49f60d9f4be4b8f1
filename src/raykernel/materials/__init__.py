"""Materials module for scattering models.

Components:
    lambertian: Ideal diffuse reflection, always scatters
    metal: Mirror reflection with optional fuzz, may absorb

Each material exposes the same capability: given the incoming ray and a hit
record with an oriented normal, produce (scattered_ray, valid). A material
added to the renderer must provide this scatter function, a registry for its
parameters and a MaterialType tag in raykernel.scene.manager.

All scattering computations are Taichi functions for GPU execution.
"""

from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Lambertian
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
]
