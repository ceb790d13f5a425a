"""Metal (specular reflective) material implementation.

Perfect metals (fuzz=0) produce mirror reflections. Rough metals perturb the
mirror direction by a random offset scaled by the fuzz factor, modelling
micro-roughness. The reflection formula is:

    R = I - 2(I . N)N

A perturbed ray that ends up pointing into the surface is absorbed, which is
how grazing rays get swallowed by a rough surface.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from mcray.core.ray import random_unit_vector, reflect
from mcray.materials.registry import check_albedo, claim_slot

# Type alias for 3D vectors
vec3 = tm.vec3

# Fuzz values above this are clamped
MAX_FUZZ = 1.0


@ti.dataclass
class MetalMaterial:
    """Metal (specular reflective) material properties.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: The surface roughness in [0, 1]. 0 = perfect mirror.
    """

    albedo: vec3
    fuzz: ti.f32


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Compute the scattered ray direction for a metal surface.

    The incoming direction does not have to be unit length; the mirror
    direction is normalized before the fuzz offset is added so the offset
    is relative to a unit vector.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The surface roughness in [0, 1].
        incident_direction: The incoming ray direction.
        normal: The unit surface normal, facing the ray.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). The
        direction is returned even when the ray is absorbed; did_scatter is
        1 only if it points away from the surface.
    """
    reflected = tm.normalize(reflect(incident_direction, normal))
    scattered_direction = reflected + fuzz * random_unit_vector()

    did_scatter = 0
    if tm.dot(scattered_direction, normal) > 0.0:
        did_scatter = 1

    return scattered_direction, albedo, did_scatter


# Per-type parameter storage, indexed by the type-local material index
MAX_METAL_MATERIALS = 512

metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    num_metal_materials[None] = 0


def clamp_fuzz(fuzz: float) -> float:
    """Clamp fuzz to at most MAX_FUZZ.

    Raises:
        ValueError: If fuzz is negative.
    """
    if fuzz < 0.0:
        raise ValueError(f"Metal fuzz must not be negative, got {fuzz}")
    return min(float(fuzz), MAX_FUZZ)


def add_metal_material(albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
    """Register a metal and return its type-local index.

    Args:
        albedo: Reflective color, each channel in [0, 1].
        fuzz: Roughness; 0 is a perfect mirror and values above 1 are
            stored as 1.

    Raises:
        ValueError: If a channel lies outside [0, 1] or fuzz is negative.
        RuntimeError: If the registry is full.
    """
    rgb = check_albedo(albedo)
    fuzz = clamp_fuzz(fuzz)
    idx = claim_slot(num_metal_materials, MAX_METAL_MATERIALS, "Metal")
    metal_albedos[idx] = vec3(*rgb)
    metal_fuzzes[idx] = fuzz
    return idx


def get_metal_material_count() -> int:
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, incident_direction: vec3, normal: vec3):
    """Scatter off the registered metal material at material_idx."""
    return scatter_metal(
        get_metal_albedo(material_idx),
        get_metal_fuzz(material_idx),
        incident_direction,
        normal,
    )
