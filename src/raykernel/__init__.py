"""Recursive Monte Carlo ray tracing kernel built on Taichi.

This package computes the radiance seen along camera rays through a scene of
spheres, simulating diffuse and metallic scattering with depth-limited
bounce chains and a vertical sky gradient as the background.

Subpackages:
    core: Ray type, vector helpers, sampling and the color recursion engine
    geometry: Sphere primitive, hit records and normal orientation
    materials: Lambertian and metal scattering models
    scene: Scene storage, nearest-hit queries and scene configuration
    camera: Pinhole camera ray generation
    preview: Gamma correction and PNG export
"""

__version__ = "0.1.0"
