"""Ready-made scenes.

Each factory clears the global scene, fills it through a ``SceneManager`` and
returns the manager together with a matching ``ThinLensCamera``. The camera is
not uploaded; call ``setup_camera`` before rendering.

Available scenes:
    single:   one white diffuse sphere under the sky
    showcase: ground, diffuse, hollow glass and fuzzy metal spheres
    random:   the large random field of small spheres with depth of field

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_tracer.scene.presets import create_scene
    >>> from weekend_tracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_scene("random", aspect_ratio=3.0 / 2.0, seed=7)
    >>> setup_camera(camera)
"""

import logging
import math
from collections.abc import Callable

import numpy as np

from weekend_tracer.camera.thin_lens import ThinLensCamera
from weekend_tracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

DEFAULT_ASPECT_RATIO = 16.0 / 9.0

SceneFactory = Callable[..., tuple[SceneManager, ThinLensCamera]]


def create_single_sphere_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create a single white diffuse sphere of radius 0.5 at (0, 0, -1).

    The camera sits at the origin looking down -z with a 90 degree vertical
    field of view and no depth of field.
    """
    scene = SceneManager()
    white = scene.add_lambertian_material(albedo=(1.0, 1.0, 1.0))
    scene.add_sphere(center=(0.0, 0.0, -1.0), radius=0.5, material_id=white)

    camera = ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=1.0,
    )
    return scene, camera


def create_material_showcase_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create three spheres, one per material kind, resting on a ground sphere.

    Layout:
        - ground: yellowish diffuse sphere of radius 100 below the scene
        - center: blue diffuse sphere
        - left: hollow glass sphere (outer radius 0.5, inner radius -0.4)
        - right: fuzzy gold metal sphere
    """
    scene = SceneManager()

    ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
    center = scene.add_lambertian_material(albedo=(0.1, 0.2, 0.5))
    glass = scene.add_dielectric_material(ior=1.5)
    gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)

    scene.add_sphere(center=(0.0, -100.5, -1.0), radius=100.0, material_id=ground)
    scene.add_sphere(center=(0.0, 0.0, -1.0), radius=0.5, material_id=center)
    # Same glass on both shells; the negative radius flips the inner normal
    scene.add_sphere(center=(-1.0, 0.0, -1.0), radius=0.5, material_id=glass)
    scene.add_sphere(center=(-1.0, 0.0, -1.0), radius=-0.4, material_id=glass)
    scene.add_sphere(center=(1.0, 0.0, -1.0), radius=0.5, material_id=gold)

    lookfrom = (3.0, 3.0, 2.0)
    lookat = (0.0, 0.0, -1.0)
    camera = ThinLensCamera(
        lookfrom=lookfrom,
        lookat=lookat,
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=math.dist(lookfrom, lookat),
    )
    return scene, camera


def create_random_scene(
    aspect_ratio: float = 3.0 / 2.0,
    seed: int | None = None,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the random sphere field.

    A 22x22 grid of small spheres (radius 0.2) is scattered over a huge
    ground sphere. Each small sphere is diffuse with probability 0.8, metal
    with probability 0.15 and glass otherwise. Spheres that would overlap
    the big metal sphere at (4, 1, 0) are skipped. Three large feature
    spheres (glass, diffuse, metal) sit in the middle.

    Args:
        aspect_ratio: Image aspect ratio for the camera.
        seed: Seed for the layout; None draws a fresh layout.
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    ground = scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
    scene.add_sphere(center=(0.0, -1000.0, 0.0), radius=1000.0, material_id=ground)

    glass = scene.add_dielectric_material(ior=1.5)
    keep_clear = np.array([4.0, 0.2, 0.0])

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random()])
            if np.linalg.norm(center - keep_clear) <= 0.9:
                continue

            if choose_mat < 0.8:
                albedo = rng.random(3) * rng.random(3)
                material = scene.add_lambertian_material(albedo=tuple(albedo.tolist()))
            elif choose_mat < 0.95:
                albedo = rng.uniform(0.5, 1.0, 3)
                fuzz = rng.uniform(0.0, 0.5)
                material = scene.add_metal_material(albedo=tuple(albedo.tolist()), fuzz=fuzz)
            else:
                material = glass

            scene.add_sphere(center=tuple(center.tolist()), radius=0.2, material_id=material)

    brown = scene.add_lambertian_material(albedo=(0.4, 0.2, 0.1))
    steel = scene.add_metal_material(albedo=(0.7, 0.6, 0.5), fuzz=0.0)

    scene.add_sphere(center=(0.0, 1.0, 0.0), radius=1.0, material_id=glass)
    scene.add_sphere(center=(-4.0, 1.0, 0.0), radius=1.0, material_id=brown)
    scene.add_sphere(center=(4.0, 1.0, 0.0), radius=1.0, material_id=steel)

    camera = ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )
    logger.debug("Random scene (seed=%s): %r", seed, scene)
    return scene, camera


SCENES: dict[str, SceneFactory] = {
    "single": create_single_sphere_scene,
    "showcase": create_material_showcase_scene,
    "random": create_random_scene,
}

# Scenes whose layout depends on a seed
SEEDED_SCENES = frozenset({"random"})


def create_scene(
    name: str,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    seed: int | None = None,
) -> tuple[SceneManager, ThinLensCamera]:
    """Build a named scene.

    Args:
        name: One of the keys of SCENES.
        aspect_ratio: Image aspect ratio for the camera.
        seed: Layout seed, used by randomised scenes only.

    Raises:
        ValueError: If the scene name is unknown.
    """
    factory = SCENES.get(name)
    if factory is None:
        raise ValueError(f"Unknown scene {name!r}; choose from {', '.join(sorted(SCENES))}")

    if name in SEEDED_SCENES:
        scene, camera = factory(aspect_ratio=aspect_ratio, seed=seed)
    else:
        scene, camera = factory(aspect_ratio=aspect_ratio)

    logger.info("Built %r scene: %d spheres, %d materials", name, scene.num_spheres, scene.num_materials)
    return scene, camera
