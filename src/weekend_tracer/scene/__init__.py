"""Scene module: sphere storage, scene building and presets."""

from .intersection import MAX_SPHERES, add_sphere, clear_scene, get_sphere_count, intersect_scene
from .manager import MaterialInfo, SceneConfig, SceneManager, SphereInfo

__all__ = [
    "MAX_SPHERES",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MaterialInfo",
    "SceneConfig",
    "SceneManager",
    "SphereInfo",
]
