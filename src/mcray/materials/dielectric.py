"""Dielectric (glass/water) material implementation.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when ratio * sin(theta) > 1

The material randomly chooses between reflection and refraction based on the
Fresnel reflectance probability, which increases at grazing angles. It is
colorless and never absorbs.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from mcray.core.ray import reflect, refract, schlick_reflectance
from mcray.materials.registry import claim_slot

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class DielectricMaterial:
    """Dielectric material properties.

    Attributes:
        ior: Index of refraction relative to the surrounding medium. Common
            values: water 1.33, glass 1.5, diamond 2.4. Values below 1
            model a bubble of a less dense medium.
    """

    ior: ti.f32


@ti.func
def refraction_ratio(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """eta_incident / eta_transmitted for a ray entering (front) or leaving."""
    ratio = ior
    if front_face == 1:
        ratio = 1.0 / ior
    return ratio


@ti.func
def _incident_cosines(unit_direction: vec3, normal: vec3):
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(tm.max(1.0 - cos_theta * cos_theta, 0.0))
    return cos_theta, sin_theta


@ti.func
def cannot_refract(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """1 if Snell's law has no solution (total internal reflection)."""
    ratio = refraction_ratio(ior, front_face)
    _, sin_theta = _incident_cosines(tm.normalize(incident_direction), normal)
    return 1 if ratio * sin_theta > 1.0 else 0


@ti.func
def dielectric_reflectance(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Schlick reflectance for this incidence angle and side of the surface."""
    ratio = refraction_ratio(ior, front_face)
    cos_theta, _ = _incident_cosines(tm.normalize(incident_direction), normal)
    return schlick_reflectance(cos_theta, ratio)


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Compute the scattered ray direction for a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incident ray.
        front_face: 1 if the ray arrives from outside the material,
            0 if it is leaving the material.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        attenuation is white and did_scatter is always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    ratio = refraction_ratio(ior, front_face)
    unit_direction = tm.normalize(incident_direction)
    cos_theta, sin_theta = _incident_cosines(unit_direction, normal)

    total_internal = ratio * sin_theta > 1.0

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if total_internal or schlick_reflectance(cos_theta, ratio) > ti.random(ti.f32):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, ratio)

    # Dielectrics always scatter (no absorption)
    did_scatter = 1
    return scattered_direction, attenuation, did_scatter


# Per-type parameter storage, indexed by the type-local material index
MAX_DIELECTRIC_MATERIALS = 512

dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Register a dielectric and return its type-local index.

    Raises:
        ValueError: If ior is not positive.
        RuntimeError: If the registry is full.
    """
    if not ior > 0.0:
        raise ValueError(f"Index of refraction must be positive, got {ior}")
    idx = claim_slot(num_dielectric_materials, MAX_DIELECTRIC_MATERIALS, "Dielectric")
    dielectric_iors[idx] = float(ior)
    return idx


def get_dielectric_material_count() -> int:
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Scatter off the registered dielectric material at material_idx."""
    ior = get_dielectric_ior(material_idx)
    return scatter_dielectric(ior, incident_direction, normal, front_face)
