"""Image export utilities for rendered images.

This module converts the linear float image produced by the render target
into an 8-bit PNG.

The classic diffuse/metal renderer encodes its output with gamma 2
(a square root per channel), which is the default here.

Example:
    >>> from raykernel.core.integrator import render_image, setup_render_target
    >>> from raykernel.preview.export import save_render
    >>>
    >>> setup_render_target(400, 225)
    >>> render_image(num_samples=100)
    >>> save_render("output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

DEFAULT_GAMMA = 2.0


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float32]:
    """Apply gamma encoding to a linear image.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value. 1.0 leaves the values unchanged.

    Returns:
        Gamma encoded image clamped to [0, 1].

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")

    # Clamp first so negative values cannot produce NaN
    result = np.clip(image, 0.0, 1.0)

    if gamma != 1.0:
        result = np.power(result, 1.0 / gamma)

    return result.astype(np.float32)


def to_uint8(
    image: npt.NDArray[np.float32],
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to 8-bit values.

    Each channel is gamma encoded and scaled by 256, then clamped to 255,
    so the full [0, 1] range maps evenly onto [0, 255].

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value used for encoding.

    Returns:
        Image array of shape (H, W, 3) with dtype uint8.
    """
    encoded = apply_gamma(image, gamma)
    return np.clip(encoded * 256.0, 0.0, 255.0).astype(np.uint8)


def save_png(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    gamma: float = DEFAULT_GAMMA,
) -> None:
    """Save a linear float image as a PNG file.

    Args:
        image: Linear image array of shape (H, W, 3), row 0 at the top.
        filepath: Output file path (should end in .png).
        gamma: Gamma value used for encoding.

    Raises:
        ValueError: If the image is not of shape (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"image must have shape (H, W, 3), got {image.shape}")

    image_uint8 = to_uint8(image, gamma)

    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)
    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], filepath)


def save_render(filepath: str | Path, gamma: float = DEFAULT_GAMMA) -> None:
    """Save the current contents of the render target as a PNG file.

    Args:
        filepath: Output file path (should end in .png).
        gamma: Gamma value used for encoding.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    from raykernel.core.integrator import get_image_numpy

    save_png(get_image_numpy(), filepath, gamma)
