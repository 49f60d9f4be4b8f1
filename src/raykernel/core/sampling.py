"""Random direction sampling for Monte Carlo scattering.

Materials never call the random number generator directly. They ask this
module for one of two samples:

    sample_unit_vector()          -- a direction on the unit sphere (metal fuzz)
    sample_in_hemisphere(normal)  -- a point in the unit ball, flipped into the
                                     hemisphere around normal (diffuse bounce)

By default both draw from Taichi's per-thread generator, which is seeded
through ``ti.init(random_seed=...)`` and safe to use from parallel loops.
Calling set_fixed_samples() switches the sampler to constant vectors so that
scattering and the color recursion become fully deterministic, which is how
the tests pin down exact colors. use_random_samples() switches back.

Example:
    >>> from raykernel.core.sampling import set_fixed_samples, use_random_samples
    >>> set_fixed_samples(unit_vector=(0.0, 1.0, 0.0), hemisphere=(0.0, 0.0, 0.0))
    >>> # ... render deterministically ...
    >>> use_random_samples()
"""

import taichi as ti
import taichi.math as tm

from raykernel.core.ray import length_squared, near_zero, unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3

SAMPLING_RANDOM = 0
SAMPLING_FIXED = 1

# Sampler state (read by kernels, written from Python)
_sampling_mode = ti.field(dtype=ti.i32, shape=())
_fixed_unit_vector = ti.Vector.field(3, dtype=ti.f32, shape=())
_fixed_hemisphere = ti.Vector.field(3, dtype=ti.f32, shape=())


def use_random_samples() -> None:
    """Draw samples from Taichi's random number generator (the default)."""
    _sampling_mode[None] = SAMPLING_RANDOM


def set_fixed_samples(
    unit_vector: tuple[float, float, float] = (0.0, 0.0, 0.0),
    hemisphere: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> None:
    """Replace random samples with constant vectors.

    Args:
        unit_vector: Returned by every sample_unit_vector() call.
        hemisphere: Returned by every sample_in_hemisphere() call, negated
            when it points away from the requested normal.
    """
    _fixed_unit_vector[None] = [unit_vector[0], unit_vector[1], unit_vector[2]]
    _fixed_hemisphere[None] = [hemisphere[0], hemisphere[1], hemisphere[2]]
    _sampling_mode[None] = SAMPLING_FIXED


def is_sampling_fixed() -> bool:
    """Check whether the sampler is returning fixed vectors."""
    return bool(_sampling_mode[None] == SAMPLING_FIXED)


# =============================================================================
# Random Sampling
# =============================================================================


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point strictly inside the unit sphere.

    Uses rejection sampling on the [-1, 1]^3 cube.

    Returns:
        A random point with 0 < length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    while True:
        candidate = vec3(
            ti.random(ti.f32) * 2.0 - 1.0,
            ti.random(ti.f32) * 2.0 - 1.0,
            ti.random(ti.f32) * 2.0 - 1.0,
        )
        lensq = length_squared(candidate)
        # Points at the origin cannot be normalized
        if lensq < 1.0 and near_zero(candidate) == 0:
            p = candidate
            break
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere."""
    return unit_vector(random_in_unit_sphere())


@ti.func
def _flip_into_hemisphere(v: vec3, normal: vec3) -> vec3:
    result = v
    if tm.dot(v, normal) < 0.0:
        result = -v
    return result


@ti.func
def random_in_hemisphere(normal: vec3) -> vec3:
    """Generate a random point in the unit ball on the side of normal.

    Args:
        normal: The surface normal defining the hemisphere orientation.

    Returns:
        A random vector v with |v| < 1 and dot(v, normal) >= 0.
    """
    return _flip_into_hemisphere(random_in_unit_sphere(), normal)


# =============================================================================
# Sampling Capability (used by materials)
# =============================================================================


@ti.func
def sample_unit_vector() -> vec3:
    """Sample a unit direction, or the fixed vector when sampling is fixed."""
    result = vec3(0.0, 0.0, 0.0)
    if _sampling_mode[None] == SAMPLING_FIXED:
        result = _fixed_unit_vector[None]
    else:
        result = random_unit_vector()
    return result


@ti.func
def sample_in_hemisphere(normal: vec3) -> vec3:
    """Sample a diffuse offset in the hemisphere around normal.

    Args:
        normal: The oriented surface normal.

    Returns:
        A vector in the same hemisphere as normal.
    """
    result = vec3(0.0, 0.0, 0.0)
    if _sampling_mode[None] == SAMPLING_FIXED:
        result = _flip_into_hemisphere(_fixed_hemisphere[None], normal)
    else:
        result = random_in_hemisphere(normal)
    return result
