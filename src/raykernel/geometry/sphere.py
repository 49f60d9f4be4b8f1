"""Sphere primitive, hit records and surface-normal orientation.

Two intersection routines live here:

- hit_sphere() is the closed-form test: it solves
  |origin + t * direction - center|^2 = radius^2 with the half-b form of the
  quadratic and returns the nearer root, or -1.0 when the ray misses. The
  farther root is never returned and roots behind the origin are not
  filtered; callers compare against their own minimum distance.
- intersect_sphere() is what the scene query uses. It accepts the nearer
  root if it lies in (t_min, t_max), otherwise the farther one, and fills a
  HitRecord whose normal has been oriented against the ray.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raykernel.geometry.sphere import Sphere, intersect_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use intersect_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from raykernel.core.ray import Ray, length_squared, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Returned by hit_sphere() when the ray misses
NO_HIT = -1.0


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: 1 if the ray intersected the sphere, 0 on a miss.
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The surface normal at the intersection, always facing
            against the incoming ray. Only valid if hit == 1.
        front_face: 1 if the geometric outward normal already opposed the
            ray (ray arrived from outside), 0 if it had to be flipped.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a geometric normal against the incoming ray.

    The normal is only flipped, never rescaled.

    Args:
        ray_direction: Direction of the incoming ray.
        outward_normal: Normal pointing away from the primitive's interior.

    Returns:
        A tuple (front_face, normal) where front_face is 1 when
        dot(ray_direction, outward_normal) < 0 and normal is outward_normal
        in that case, -outward_normal otherwise.
    """
    front_face = 0
    normal = -outward_normal
    if tm.dot(ray_direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return front_face, normal


@ti.func
def hit_sphere(center: vec3, radius: ti.f32, ray: Ray) -> ti.f32:
    """Closed-form ray-sphere intersection returning the nearer root.

    With oc = origin - center:
        a = |direction|^2
        half_b = dot(oc, direction)
        c = |oc|^2 - radius^2
        discriminant = half_b^2 - a*c

    Args:
        center: The sphere center.
        radius: The sphere radius.
        ray: The ray to test. Its direction must be non-zero.

    Returns:
        (-half_b - sqrt(discriminant)) / a, or NO_HIT (-1.0) when the
        discriminant is negative.
    """
    oc = ray.origin - center
    a = length_squared(ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = length_squared(oc) - radius * radius
    discriminant = half_b * half_b - a * c

    result = NO_HIT
    if discriminant >= 0.0:
        result = (-half_b - ti.sqrt(discriminant)) / a
    return result


@ti.func
def intersect_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Find the closest intersection of a ray with a sphere in (t_min, t_max).

    Args:
        ray: The ray to test.
        sphere: The sphere to test against.
        t_min: Lower bound (exclusive), guards against self-intersection.
        t_max: Upper bound (exclusive), usually the closest hit so far.

    Returns:
        A HitRecord. Check the hit field to determine if intersection
        occurred.
    """
    oc = ray.origin - sphere.center
    a = length_squared(ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = length_squared(oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (-half_b - sqrt_d) / a
        valid = (root > t_min) and (root < t_max)
        if not valid:
            # Ray starts inside the sphere or the near root is too close
            root = (-half_b + sqrt_d) / a
            valid = (root > t_min) and (root < t_max)

        if valid:
            did_hit = 1
            hit_t = root
            hit_point = ray_at(ray, root)
            outward_normal = (hit_point - sphere.center) / sphere.radius
            is_front_face, hit_normal = set_face_normal(ray.direction, outward_normal)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
