"""Lambertian (ideal diffuse) material implementation.

A diffuse bounce leaves the hit point toward a random target inside the unit
ball that sits on the surface, centered at point + normal:

    target = point + normal + sample_in_hemisphere(normal)
    scattered = Ray(point, target - point)

The offset is drawn from the hemisphere around the oriented normal, which
biases outgoing directions toward the normal. This approximates cosine
weighting without importance sampling, and the Monte Carlo estimator simply
multiplies by the albedo. A Lambertian scatter always succeeds.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raykernel.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # scattered, valid = scatter_lambertian(ray_in, rec)
"""

import taichi as ti
import taichi.math as tm

from raykernel.core.ray import Ray, make_ray
from raykernel.core.sampling import sample_in_hemisphere
from raykernel.geometry.sphere import HitRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_lambertian(ray_in: Ray, rec: HitRecord):
    """Scatter a ray off a diffuse surface.

    Args:
        ray_in: The incoming ray (unused; diffuse scattering ignores it).
        rec: The hit record with an oriented normal.

    Returns:
        A tuple (scattered, valid) where scattered starts at rec.point and
        valid is always 1.
    """
    target = rec.point + rec.normal + sample_in_hemisphere(rec.normal)
    scattered = make_ray(rec.point, target - rec.point)
    return scattered, 1


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord):
    """Scatter off a registered Lambertian material.

    Args:
        material_idx: The index of the material in the registry.
        ray_in: The incoming ray.
        rec: The hit record with an oriented normal.

    Returns:
        A tuple (scattered, valid, attenuation).
    """
    scattered, valid = scatter_lambertian(ray_in, rec)
    return scattered, valid, get_lambertian_albedo(material_idx)
