"""Lambertian (ideal diffuse) material implementation.

The scattered direction is the surface normal plus a uniformly sampled unit
vector. The resulting distribution is proportional to cos(theta) over the
hemisphere around the normal, so the attenuation is simply the albedo and the
material never absorbs a ray.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_lambertian(albedo, normal)
"""

import taichi as ti
import taichi.math as tm

from mcray.core.ray import near_zero, random_unit_vector
from mcray.materials.registry import check_albedo, claim_slot

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class LambertianMaterial:
    """Lambertian (ideal diffuse) material properties.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: vec3


@ti.func
def lambertian_direction(normal: vec3, offset: vec3) -> vec3:
    """Diffuse bounce direction for a given random unit offset.

    When the offset is almost exactly opposite the normal the sum collapses
    to zero; the normal itself is used instead so the outgoing ray never has
    a zero-length direction.
    """
    direction = normal + offset
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3):
    """Sample a scattered ray direction for a Lambertian surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The unit surface normal at the hit point, facing the ray.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is always 1.
    """
    scattered_direction = lambertian_direction(normal, random_unit_vector())
    did_scatter = 1
    return scattered_direction, albedo, did_scatter


# Per-type parameter storage, indexed by the type-local material index
MAX_LAMBERTIAN_MATERIALS = 512

lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Register a diffuse albedo and return its type-local index.

    Raises:
        ValueError: If a channel lies outside [0, 1].
        RuntimeError: If the registry is full.
    """
    rgb = check_albedo(albedo)
    idx = claim_slot(num_lambertian_materials, MAX_LAMBERTIAN_MATERIALS, "Lambertian")
    lambertian_albedos[idx] = vec3(*rgb)
    return idx


def get_lambertian_material_count() -> int:
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, normal: vec3):
    """Scatter off the registered Lambertian material at material_idx."""
    return scatter_lambertian(get_lambertian_albedo(material_idx), normal)
