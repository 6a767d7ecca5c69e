"""Scene module for scene management and hit records.

This module handles scene representation and ray-scene queries:

Components:
    intersection: Device-side sphere storage and closest-hit search
    manager: Host-side Scene container with validation and upload
    cover: Factories for the cover scene and the material showcase

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for geometric data
    - Each sphere's material stored alongside its geometry, by index
"""

from .cover import (
    CoverSceneParams,
    create_cover_scene,
    create_material_showcase_scene,
)
from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    get_sphere_material,
    intersect_scene,
)
from .manager import Scene, SphereInfo

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "get_sphere_material",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "Scene",
    "SphereInfo",
    # Scene factories
    "CoverSceneParams",
    "create_cover_scene",
    "create_material_showcase_scene",
]
