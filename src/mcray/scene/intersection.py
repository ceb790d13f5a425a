"""Scene-level primitive intersection testing.

This module stores the scene's spheres in Taichi fields and provides the
aggregate intersection query: a linear scan over every member that keeps
the closest hit.

Each primitive carries a material ID; several primitives may share one.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.scene.intersection import add_sphere, clear_scene, intersect_scene
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from mcray.core.interval import Interval, make_interval
from mcray.core.ray import Ray
from mcray.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive count to zero. The field data is overwritten when
    new primitives are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere. Negative values are clamped to
            zero, which leaves a sphere that is never hit.
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
    sphere_radii[idx] = max(0.0, radius)
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(i: ti.i32) -> Sphere:
    return Sphere(
        center=sphere_centers[i],
        radius=sphere_radii[i],
        material_id=sphere_material_ids[i],
    )


@ti.func
def intersect_scene(ray: Ray, ray_t: Interval) -> HitRecord:
    """Test ray against all primitives in the scene.

    Each accepted hit shrinks the upper bound of the search window, so a
    later primitive only replaces the result when it is strictly closer.
    Equal distances keep the earlier primitive.

    Args:
        ray: The ray to test.
        ray_t: Open interval of acceptable t values.

    Returns:
        The closest HitRecord, or a miss record if nothing was hit.
    """
    closest_so_far = ray_t.max
    result = make_miss_record()

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        rec = hit_sphere(ray, get_sphere(i), make_interval(ray_t.min, closest_so_far))
        if rec.hit == 1:
            closest_so_far = rec.t
            result = rec

    return result


@ti.func
def intersect_scene_any(ray: Ray, ray_t: Interval) -> ti.i32:
    """Test if the ray hits any primitive in the scene.

    Args:
        ray: The ray to test.
        ray_t: Open interval of acceptable t values.

    Returns:
        1 if any primitive was hit, 0 otherwise.
    """
    hit_any = 0

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        if hit_any == 0:
            rec = hit_sphere(ray, get_sphere(i), ray_t)
            if rec.hit == 1:
                hit_any = 1

    return hit_any
