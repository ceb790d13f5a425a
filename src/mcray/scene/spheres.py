"""Random spheres demo scene.

A large ground sphere carries three big feature spheres (glass, diffuse and
metal) surrounded by a grid of small spheres with randomly chosen materials.
The camera looks at the origin from a low angle with a slight defocus blur.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, random_seed=42)
    >>> from mcray.scene.spheres import create_spheres_scene
    >>>
    >>> scene, camera = create_spheres_scene(seed=42)
    >>> image = camera.render(scene)
"""

import numpy as np

from mcray.camera.thin_lens import Camera
from mcray.scene.manager import SceneManager

GROUND_ALBEDO = (0.2, 0.2, 0.2)

# (center, radius) of the three feature spheres
GLASS_SPHERE = ((0.0, 1.0, 0.0), 1.0)
DIFFUSE_SPHERE = ((-4.0, 1.0, 0.0), 1.0)
METAL_SPHERE = ((4.0, 1.0, 0.0), 1.0)

SMALL_RADIUS = 0.2

# Small spheres closer than this to a feature sphere center are skipped
MIN_FEATURE_DISTANCE = 1.2


def create_spheres_camera() -> Camera:
    """Camera framing the random spheres scene."""
    return Camera(
        aspect_ratio=16.0 / 9.0,
        image_width=720,
        samples_per_pixel=10,
        max_depth=25,
        vfov=20.0,
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        aperture=0.2,
        focus_dist=10.0,
    )


def create_spheres_scene(seed: int | None = None, grid: int = 11) -> tuple[SceneManager, Camera]:
    """Build the random spheres scene.

    Small spheres sit at (a + 0.9*r1, 0.2, b + 0.9*r2) for a and b in
    [-grid, grid). Each gets a Lambertian material with probability 0.3
    (albedo = random * random), a metal with probability 0.3 (albedo in
    [0.5, 1), fuzz in [0, 0.5)), and glass otherwise.

    Args:
        seed: Seed for the scene layout. None draws a fresh layout.
        grid: Half-width of the small sphere grid.

    Returns:
        Tuple of (scene, camera).
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere((0.0, -1000.0, 0.0), 1000.0, GROUND_ALBEDO)

    glass_id = scene.add_dielectric_material(1.5)
    features = [center for center, _ in (GLASS_SPHERE, DIFFUSE_SPHERE, METAL_SPHERE)]

    for a in range(-grid, grid):
        for b in range(-grid, grid):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), SMALL_RADIUS, b + 0.9 * rng.random()])

            if any(
                np.linalg.norm(center - np.array(feature)) < MIN_FEATURE_DISTANCE
                for feature in features
            ):
                continue

            position = (float(center[0]), float(center[1]), float(center[2]))
            if choose_mat < 0.3:
                albedo = tuple(float(x) for x in rng.random(3) * rng.random(3))
                scene.add_lambertian_sphere(position, SMALL_RADIUS, albedo)
            elif choose_mat < 0.6:
                albedo = tuple(float(x) for x in rng.uniform(0.5, 1.0, 3))
                fuzz = float(rng.uniform(0.0, 0.5))
                scene.add_metal_sphere(position, SMALL_RADIUS, albedo, fuzz)
            else:
                scene.add_sphere(position, SMALL_RADIUS, glass_id)

    scene.add_sphere(GLASS_SPHERE[0], GLASS_SPHERE[1], glass_id)
    scene.add_lambertian_sphere(DIFFUSE_SPHERE[0], DIFFUSE_SPHERE[1], (0.4, 0.2, 0.1))
    scene.add_metal_sphere(METAL_SPHERE[0], METAL_SPHERE[1], (0.7, 0.6, 0.5), 0.0)

    return scene, create_spheres_camera()
