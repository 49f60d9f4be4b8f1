"""Demo scene: three spheres resting on a large ground sphere.

The layout is the classic one for a diffuse/metal ray tracer:
- a huge yellow-green Lambertian sphere acting as the ground
- a Lambertian sphere in the center
- a polished metal sphere on the left
- a fuzzy gold metal sphere on the right

The camera sits at the origin looking down -z, so the sky gradient fills the
upper half of the frame.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raykernel.scene.demo import create_demo_scene
    >>> from raykernel.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_demo_scene(aspect_ratio=16.0 / 9.0)
    >>> setup_camera(camera)
"""

from dataclasses import dataclass

from raykernel.camera.pinhole import PinholeCamera
from raykernel.scene.manager import SceneManager


@dataclass
class DemoSceneParams:
    """Material parameters of the demo scene.

    Attributes:
        ground_color: Albedo of the ground sphere.
        center_color: Albedo of the diffuse center sphere.
        left_metal_color: Albedo of the left metal sphere.
        left_metal_fuzz: Fuzz of the left metal sphere.
        right_metal_color: Albedo of the right metal sphere.
        right_metal_fuzz: Fuzz of the right metal sphere.
    """

    ground_color: tuple[float, float, float] = (0.8, 0.8, 0.0)
    center_color: tuple[float, float, float] = (0.7, 0.3, 0.3)
    left_metal_color: tuple[float, float, float] = (0.8, 0.8, 0.8)
    left_metal_fuzz: float = 0.3
    right_metal_color: tuple[float, float, float] = (0.8, 0.6, 0.2)
    right_metal_fuzz: float = 1.0


def create_demo_scene(
    params: DemoSceneParams | None = None,
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, PinholeCamera]:
    """Create the demo scene and a matching camera.

    Args:
        params: Material parameters. Defaults to DemoSceneParams().
        aspect_ratio: Width / height of the image to be rendered.

    Returns:
        A tuple of (scene, camera). The scene is already loaded into the
        Taichi fields; the camera still has to be passed to setup_camera().
    """
    if params is None:
        params = DemoSceneParams()

    scene = SceneManager()

    scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, params.ground_color)
    scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, params.center_color)
    scene.add_metal_sphere(
        (-1.0, 0.0, -1.0), 0.5, params.left_metal_color, params.left_metal_fuzz
    )
    scene.add_metal_sphere(
        (1.0, 0.0, -1.0), 0.5, params.right_metal_color, params.right_metal_fuzz
    )

    camera = PinholeCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
    )

    return scene, camera
