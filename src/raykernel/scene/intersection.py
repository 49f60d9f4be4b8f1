"""Scene-level nearest-hit queries.

Spheres are stored in Taichi fields (Structure of Arrays) together with the
material ID used for scattering dispatch. find_nearest_hit() tests the ray
against every sphere and keeps the closest intersection in (t_min, t_max).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raykernel.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=0)
    >>> # Use find_nearest_hit within a Taichi kernel:
    >>> # rec, material_id = find_nearest_hit(ray, 0.001, 1e10)
"""

import taichi as ti
import taichi.math as tm

from raykernel.core.ray import Ray
from raykernel.geometry.sphere import HitRecord, intersect_sphere, make_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Material ID reported for rays that hit nothing
NO_MATERIAL = -1

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout for GPU efficiency
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all spheres from the scene.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
    )


@ti.func
def find_nearest_hit(ray: Ray, t_min: ti.f32, t_max: ti.f32):
    """Find the closest sphere hit by the ray in (t_min, t_max).

    Each test narrows the upper bound to the closest hit so far, so the
    record returned belongs to the nearest sphere along the ray.

    Args:
        ray: The ray to trace.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A tuple (record, material_id). On a miss record.hit is 0 and
        material_id is NO_MATERIAL.
    """
    closest_t = t_max
    result = _make_miss_record()
    material_id = NO_MATERIAL

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        sphere = make_sphere(sphere_centers[i], sphere_radii[i])
        rec = intersect_sphere(ray, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = rec
            material_id = sphere_material_ids[i]

    return result, material_id
