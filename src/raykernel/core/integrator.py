"""Color recursion engine and image render target.

ray_color() computes the radiance arriving along a ray:

1. With no bounces left the ray carries no light (black).
2. Otherwise the nearest sphere hit in (T_MIN, T_MAX) is looked up. T_MIN
   keeps a scattered ray from hitting the surface it just left.
3. On a hit the sphere's material scatters the ray. A valid scatter
   continues with the scattered ray and one bounce fewer, and whatever it
   returns is multiplied channel-wise by the material's albedo.
4. A miss, an invalid scatter or an unrecognized material tag ends the
   chain with the sky gradient of the current ray.

Taichi functions cannot recurse, so the chain is unrolled into a loop that
carries the product of the albedos seen so far and multiplies the terminal
color by it at the end. Because attenuation is a channel-wise product this
is the same value the recursive formulation returns while unwinding.

Python entry points evaluate single rays (compute_ray_color), batches of
independent rays (compute_ray_colors) or whole images through the pinhole
camera (render_image).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raykernel.core.integrator import compute_ray_color
    >>> from raykernel.scene.demo import create_demo_scene
    >>>
    >>> scene, camera = create_demo_scene()
    >>> color = compute_ray_color((0, 0, 0), (0, 0, -1), max_depth=10)
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raykernel.camera.pinhole import get_ray_jittered
from raykernel.core.ray import Ray, make_ray, unit_vector
from raykernel.geometry.sphere import HitRecord
from raykernel.materials.lambertian import scatter_lambertian_by_id
from raykernel.materials.metal import scatter_metal_by_id
from raykernel.scene.intersection import find_nearest_hit
from raykernel.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default bounce budget for a primary ray
MAX_DEPTH = 50

# Intersection range; T_MIN avoids shadow acne from self-intersection
T_MIN = 0.001
T_MAX = float("inf")

# Sky gradient endpoints (bottom and top of the vertical blend)
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)


# =============================================================================
# Background
# =============================================================================


@ti.func
def sky_color(ray: Ray) -> vec3:
    """Shade a ray that escaped the scene.

    Maps the vertical component of the unit direction from [-1, 1] to
    t in [0, 1] and blends white into sky blue:
        (1 - t) * (1, 1, 1) + t * (0.5, 0.7, 1.0)

    Args:
        ray: The escaping ray. Its direction must be non-zero.

    Returns:
        The background color for the ray.
    """
    unit_direction = unit_vector(ray.direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(material_id: ti.i32, ray_in: Ray, rec: HitRecord):
    """Dispatch to the scattering model selected by the material tag.

    Args:
        material_id: The unified material ID of the hit sphere.
        ray_in: The incoming ray.
        rec: The hit record with an oriented normal.

    Returns:
        A tuple (scattered, valid, attenuation). Unrecognized tags act as
        opaque surfaces: valid is 0 and the ray is shaded with the sky.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered = ray_in
    valid = 0
    attenuation = vec3(0.0, 0.0, 0.0)

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered, valid, attenuation = scatter_lambertian_by_id(type_index, ray_in, rec)
    elif mat_type == int(MaterialType.METAL):
        scattered, valid, attenuation = scatter_metal_by_id(type_index, ray_in, rec)

    return scattered, valid, attenuation


# =============================================================================
# Color Recursion
# =============================================================================


@ti.func
def ray_color(ray: Ray, depth: ti.i32) -> vec3:
    """Compute the color seen along a ray with at most depth bounces.

    Args:
        ray: The ray to trace.
        depth: Remaining bounce budget. Values <= 0 yield black.

    Returns:
        The radiance (RGB) carried back along the ray.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    color = vec3(0.0, 0.0, 0.0)
    current = ray
    remaining = depth
    active = 1

    while active == 1:
        if remaining <= 0:
            color = vec3(0.0, 0.0, 0.0)
            active = 0
        else:
            rec, material_id = find_nearest_hit(current, T_MIN, T_MAX)

            scattered = current
            valid = 0
            albedo = vec3(0.0, 0.0, 0.0)
            if rec.hit == 1:
                scattered, valid, albedo = _scatter_material(material_id, current, rec)

            if valid == 1:
                attenuation *= albedo
                current = scattered
                remaining -= 1
            else:
                color = sky_color(current)
                active = 0

    return attenuation * color


@ti.kernel
def _ray_color_kernel(
    origins: ti.types.ndarray(),
    directions: ti.types.ndarray(),
    colors: ti.types.ndarray(),
    max_depth: ti.i32,
):
    """Evaluate independent rays in parallel, one per row of the inputs."""
    for i in range(origins.shape[0]):
        ray = make_ray(
            vec3(origins[i, 0], origins[i, 1], origins[i, 2]),
            vec3(directions[i, 0], directions[i, 1], directions[i, 2]),
        )
        color = ray_color(ray, max_depth)
        for c in ti.static(range(3)):
            colors[i, c] = color[c]


def compute_ray_colors(
    origins: npt.ArrayLike,
    directions: npt.ArrayLike,
    max_depth: int = MAX_DEPTH,
) -> npt.NDArray[np.float32]:
    """Compute the color of a batch of rays.

    Rays are independent of each other and evaluated in parallel against the
    current scene.

    Args:
        origins: Ray origins, shape (N, 3).
        directions: Ray directions, shape (N, 3). Need not be unit length
            but must be non-zero.
        max_depth: Bounce budget per ray. Values <= 0 yield black.

    Returns:
        Colors as a float32 array of shape (N, 3).

    Raises:
        ValueError: If the arrays are not (N, 3) with matching N, or if a
            direction has zero length.
    """
    origins_arr = np.ascontiguousarray(origins, dtype=np.float32)
    directions_arr = np.ascontiguousarray(directions, dtype=np.float32)

    if origins_arr.ndim != 2 or origins_arr.shape[1] != 3:
        raise ValueError(f"origins must have shape (N, 3), got {origins_arr.shape}")
    if directions_arr.shape != origins_arr.shape:
        raise ValueError(
            f"directions shape {directions_arr.shape} does not match "
            f"origins shape {origins_arr.shape}"
        )
    if np.any(np.all(directions_arr == 0.0, axis=1)):
        raise ValueError("Ray directions must be non-zero")

    colors = np.zeros_like(origins_arr)
    if origins_arr.shape[0] > 0:
        _ray_color_kernel(origins_arr, directions_arr, colors, max_depth)
    return colors


def compute_ray_color(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Compute the color seen along a single ray.

    Deterministic for a fixed random seed or with fixed samples (see
    raykernel.core.sampling), otherwise stochastic.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z), non-zero.
        max_depth: Bounce budget. Values <= 0 yield black.

    Returns:
        Tuple of (R, G, B) color values.
    """
    color = compute_ray_colors([origin], [direction], max_depth)[0]
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Running-average color buffer and per-pixel sample counts
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def reset_render_target() -> None:
    """Clear the buffers and mark the render target as not set up."""
    clear_render_target()
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Trace one jittered camera ray per pixel and fold it into the average."""
    for i, j in ti.ndrange(width, height):
        ray = get_ray_jittered(i, j, width, height)
        color = ray_color(ray, max_depth)

        _sample_count[i, j] += 1
        n = _sample_count[i, j]

        # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
        _color_buffer[i, j] += (color - _color_buffer[i, j]) / ti.cast(n, ti.f32)


def render_image(num_samples: int = 1, max_depth: int = MAX_DEPTH) -> None:
    """Render samples for every pixel through the configured camera.

    Can be called repeatedly; samples keep accumulating until the render
    target is cleared.

    Args:
        num_samples: Number of samples to add per pixel.
        max_depth: Bounce budget per camera ray.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If num_samples is negative.
    """
    _check_render_target_initialized()
    if num_samples < 0:
        raise ValueError(f"num_samples must be non-negative, got {num_samples}")

    width, height = get_image_dimensions()
    logger.debug("Rendering %d spp at %dx%d, max depth %d", num_samples, width, height, max_depth)

    for _ in range(num_samples):
        _render_one_spp(width, height, max_depth)


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return int(_sample_count[0, 0])


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the accumulated linear image.

    Returns:
        Array of shape (height, width, 3), row 0 at the top, values
        clamped to [0, 1].

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    image = _color_buffer.to_numpy()[:width, :height, :]

    # (width, height, 3) -> (height, width, 3), then flip so the top row is first
    image = np.flipud(np.transpose(image, (1, 0, 2)))

    return np.clip(image, 0.0, 1.0).astype(np.float32)
