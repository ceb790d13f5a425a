"""Scene module for scene storage and management.

Components:
    intersection: Sphere storage in Taichi fields and closest-hit queries
    manager: Scene manager coordinating spheres and the material arena
    spheres: Random spheres demo scene

Scene data uses a Structure-of-Arrays layout in Taichi fields, and every
primitive refers to its material by unified material ID.
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
    intersect_scene_any,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
    load_scene_config,
    save_scene_config,
)
from .spheres import create_spheres_camera, create_spheres_scene

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "intersect_scene_any",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "load_scene_config",
    "save_scene_config",
    # Demo scene
    "create_spheres_scene",
    "create_spheres_camera",
]
