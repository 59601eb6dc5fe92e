"""Scene module for the world registry and scene queries.

Components:
    intersection: Device-side primitive storage and the nearest-hit scan
    world: Named material/primitive registry, validation and upload
    random_spheres: Random spheres demo scene

Primitive and material data live in Taichi fields, so this package must be
imported after ``stochray.init()``.
"""

from .intersection import (
    MAX_PLANES,
    MAX_SPHERES,
    CollisionRecord,
    add_plane,
    add_sphere,
    clear_scene,
    get_plane_count,
    get_sphere_count,
    nearest_hit,
)
from .random_spheres import (
    RandomSpheresParams,
    create_random_spheres_scene,
    create_random_spheres_world,
)
from .world import (
    MAX_MATERIALS,
    Collision,
    MaterialType,
    PlaneInfo,
    SceneConfig,
    SceneConfigurationError,
    SphereInfo,
    UnboundPrimitiveError,
    UnresolvedMaterialError,
    World,
    get_material_type,
    get_material_type_index,
    reset_device_scene,
)

__all__ = [
    # Intersection module
    "CollisionRecord",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "get_sphere_count",
    "get_plane_count",
    "nearest_hit",
    "MAX_SPHERES",
    "MAX_PLANES",
    # World module
    "World",
    "MaterialType",
    "SphereInfo",
    "PlaneInfo",
    "Collision",
    "SceneConfig",
    "SceneConfigurationError",
    "UnresolvedMaterialError",
    "UnboundPrimitiveError",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "reset_device_scene",
    # Random spheres scene
    "RandomSpheresParams",
    "create_random_spheres_scene",
    "create_random_spheres_world",
]
