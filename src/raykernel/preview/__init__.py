"""Preview module for image output.

Components:
    export: Gamma encoding and PNG export via Pillow

Example:
    >>> from raykernel.preview import save_png
    >>> save_png(image, "output.png", gamma=2.0)
"""

from .export import DEFAULT_GAMMA, apply_gamma, save_png, save_render, to_uint8

__all__ = [
    "DEFAULT_GAMMA",
    "apply_gamma",
    "to_uint8",
    "save_png",
    "save_render",
]
