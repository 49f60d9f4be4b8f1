"""Metal (specular reflective) material implementation.

The incoming direction is normalized and mirrored about the oriented normal:

    R = d - 2(d . N)N

A fuzz term perturbs the mirror direction by a random unit vector scaled by
the material's fuzz, which blurs reflections on rough metal:

    scattered = Ray(point, R + fuzz * sample_unit_vector())

The scatter counts as valid when the unperturbed reflection R leaves the
surface (R . N > 0). The fuzzed direction is not checked, so a rough
reflection near grazing angles may point slightly into the surface and still
be followed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raykernel.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # scattered, valid = scatter_metal(ray_in, rec, fuzz)
"""

import taichi as ti
import taichi.math as tm

from raykernel.core.ray import Ray, make_ray, reflect, unit_vector
from raykernel.core.sampling import sample_unit_vector
from raykernel.geometry.sphere import HitRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(ray_in: Ray, rec: HitRecord, fuzz: ti.f32):
    """Reflect a ray off a metal surface.

    Args:
        ray_in: The incoming ray. Its direction need not be unit length.
        rec: The hit record with an oriented normal.
        fuzz: The perturbation radius applied to the mirror direction.

    Returns:
        A tuple (scattered, valid) where scattered starts at rec.point and
        valid is 1 iff dot(reflected, rec.normal) > 0 for the unfuzzed
        reflection.
    """
    reflected = reflect(unit_vector(ray_in.direction), rec.normal)
    scattered = make_ray(rec.point, reflected + fuzz * sample_unit_vector())

    valid = 0
    if tm.dot(reflected, rec.normal) > 0.0:
        valid = 1

    return scattered, valid


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
            Each component should be in [0, 1].
        fuzz: The reflection perturbation in [0, 1]. Default is 0
            (perfect mirror).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
        ValueError: If fuzz is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    if fuzz < 0.0 or fuzz > 1.0:
        raise ValueError(
            f"Fuzz = {fuzz} is outside [0, 1]. "
            "Fuzz must be between 0 (perfect mirror) and 1 (maximum fuzz)."
        )

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    metal_fuzzes[idx] = fuzz
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    """Get the fuzz for a metal material by index."""
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord):
    """Scatter off a registered metal material.

    Looks up fuzz and albedo from the registry and calls scatter_metal.

    Args:
        material_idx: The index of the material in the registry.
        ray_in: The incoming ray.
        rec: The hit record with an oriented normal.

    Returns:
        A tuple (scattered, valid, attenuation).
    """
    scattered, valid = scatter_metal(ray_in, rec, get_metal_fuzz(material_idx))
    return scattered, valid, get_metal_albedo(material_idx)
