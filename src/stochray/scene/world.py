"""Scene registry coordinating named materials and named primitives.

A World owns two insertion-ordered mappings: material name -> material and
primitive name -> primitive descriptor. Primitives only name their material,
so one material can be shared by any number of primitives.

Kernels cannot look names up, so ``World.build()`` turns the registry into
device data before every render:

1. Validate: every primitive must be bound (``UnboundPrimitiveError``) to a
   registered material (``UnresolvedMaterialError``).
2. Resolve: each material gets a unified material id (its registration
   order); each primitive stores the id of its material.
3. Upload: materials go to their per-type registries, with
   ``material_types`` / ``material_type_indices`` mapping the unified id to
   (MaterialType, type-local index); primitives go to the scene fields.

A build whose world and revision are already resident on the device is a
no-op, so repeated renders of an unchanged scene skip the upload.

Example:
    >>> world = World()
    >>> world.add_material("ground", Lambertian(albedo=(0.5, 0.5, 0.5)))
    >>> world.add_sphere("floor", center=(0, -1000, 0), radius=1000, material_name="ground")
    >>> world.build()
"""

import itertools
import logging
import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Union

import taichi as ti

from stochray.core.ray import DEFAULT_T_MIN, Ray
from stochray.core.vector import real, vec3
from stochray.geometry.plane import plane_normal
from stochray.materials.dielectric import (
    MAX_DIELECTRIC_MATERIALS,
    Dielectric,
    add_dielectric_material,
    clear_dielectric_materials,
)
from stochray.materials.lambertian import (
    MAX_LAMBERTIAN_MATERIALS,
    Lambertian,
    add_lambertian_material,
    clear_lambertian_materials,
)
from stochray.materials.metal import (
    MAX_METAL_MATERIALS,
    Metal,
    add_metal_material,
    clear_metal_materials,
)
from stochray.scene.intersection import (
    MAX_PLANES,
    MAX_SPHERES,
    add_plane,
    add_sphere,
    clear_scene,
    get_plane_count,
    get_sphere_count,
    nearest_hit,
)

logger = logging.getLogger(__name__)


class SceneConfigurationError(ValueError):
    """Base class for scene wiring defects detected before rendering."""


class UnresolvedMaterialError(SceneConfigurationError):
    """A primitive names a material that is not registered."""

    def __init__(self, primitive_name: str, material_name: str) -> None:
        super().__init__(
            f"Primitive '{primitive_name}' is bound to unknown material '{material_name}'"
        )
        self.primitive_name = primitive_name
        self.material_name = material_name


class UnboundPrimitiveError(SceneConfigurationError):
    """A primitive was never bound to a material."""

    def __init__(self, primitive_name: str) -> None:
        super().__init__(f"Primitive '{primitive_name}' has no bound material")
        self.primitive_name = primitive_name


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the render kernel to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


Material = Union[Lambertian, Metal, Dielectric]

_MATERIAL_TYPES: dict[type, MaterialType] = {
    Lambertian: MaterialType.LAMBERTIAN,
    Metal: MaterialType.METAL,
    Dielectric: MaterialType.DIELECTRIC,
}

# Registry capacity for each material type
_MATERIAL_LIMITS: dict[MaterialType, int] = {
    MaterialType.LAMBERTIAN: MAX_LAMBERTIAN_MATERIALS,
    MaterialType.METAL: MAX_METAL_MATERIALS,
    MaterialType.DIELECTRIC: MAX_DIELECTRIC_MATERIALS,
}

# Maximum number of materials across all types
MAX_MATERIALS = sum(_MATERIAL_LIMITS.values())

# material_types[i] stores the MaterialType for material id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material id i
# (e.g. if material id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())

# Result fields for Python-side nearest-hit queries
_query_origin = ti.Vector.field(3, dtype=real, shape=())
_query_direction = ti.Vector.field(3, dtype=real, shape=())
_query_hit = ti.field(dtype=ti.i32, shape=())
_query_distance = ti.field(dtype=real, shape=())
_query_point = ti.Vector.field(3, dtype=real, shape=())
_query_normal = ti.Vector.field(3, dtype=real, shape=())
_query_material_id = ti.field(dtype=ti.i32, shape=())

_world_tokens = itertools.count()

# (world token, revision) currently uploaded to the device, if any
_resident: tuple[int, int] | None = None


def reset_device_scene() -> None:
    """Clear every device-side primitive and material registry."""
    global _resident
    clear_scene()
    clear_lambertian_materials()
    clear_metal_materials()
    clear_dielectric_materials()
    num_materials[None] = 0
    _resident = None


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the MaterialType of a material id, -1 for invalid ids."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local registry index of a material id.

    Args:
        material_id: The unified material id.

    Returns:
        The index into the type-specific material fields (e.g.
        ``lambertian_albedos[type_index]``), -1 for invalid ids.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


def _as_point(values: Any) -> tuple[float, float, float]:
    components = tuple(float(c) for c in values)
    if len(components) != 3:
        raise ValueError(f"Expected 3 components, got {len(components)}")
    return components  # type: ignore[return-value]


@dataclass(frozen=True)
class SphereInfo:
    """A sphere primitive.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere (positive).
        material_name: Name of the bound material, None if unbound.
    """

    center: tuple[float, float, float]
    radius: float
    material_name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", _as_point(self.center))
        object.__setattr__(self, "radius", float(self.radius))
        if self.radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")

    def with_material(self, material_name: str) -> "SphereInfo":
        return SphereInfo(self.center, self.radius, material_name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "sphere",
            "center": list(self.center),
            "radius": self.radius,
            "material": self.material_name,
        }


@dataclass(frozen=True)
class PlaneInfo:
    """An infinite plane primitive.

    Attributes:
        point: A point on the plane.
        normal: The plane normal, normalized on construction.
        material_name: Name of the bound material, None if unbound.
    """

    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    material_name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "point", _as_point(self.point))
        object.__setattr__(self, "normal", plane_normal(_as_point(self.normal)))

    def with_material(self, material_name: str) -> "PlaneInfo":
        return PlaneInfo(self.point, self.normal, material_name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "plane",
            "point": list(self.point),
            "normal": list(self.normal),
            "material": self.material_name,
        }


Primitive = Union[SphereInfo, PlaneInfo]


@dataclass(frozen=True)
class Collision:
    """Result of a Python-side nearest-hit query.

    Attributes:
        distance: Ray parameter of the hit.
        point: The hit point.
        normal: The primitive's unit surface normal at the point.
        material_name: Name of the material bound to the hit primitive.
        material: The material itself.
    """

    distance: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    material_name: str
    material: Material


@dataclass
class SceneConfig:
    """Serializable scene description.

    Attributes:
        materials: Material name -> material configuration.
        primitives: Primitive name -> primitive configuration.
    """

    materials: dict[str, dict[str, Any]] = field(default_factory=dict)
    primitives: dict[str, dict[str, Any]] = field(default_factory=dict)


def material_from_dict(data: dict[str, Any]) -> Material:
    """Create a material from its configuration dictionary.

    Raises:
        ValueError: If the material type is unknown.
    """
    kind = data.get("type")
    if kind == "lambertian":
        return Lambertian(albedo=tuple(data["albedo"]))
    if kind == "metal":
        return Metal(albedo=tuple(data["albedo"]), fuzz=data.get("fuzz", 0.0))
    if kind == "dielectric":
        return Dielectric(refraction_index=data.get("refraction_index", 1.5))
    raise ValueError(f"Unknown material type: {kind!r}")


def primitive_from_dict(data: dict[str, Any]) -> Primitive:
    """Create a primitive from its configuration dictionary.

    Raises:
        ValueError: If the primitive type is unknown.
    """
    kind = data.get("type")
    if kind == "sphere":
        return SphereInfo(data["center"], data["radius"], data.get("material"))
    if kind == "plane":
        return PlaneInfo(data["point"], data["normal"], data.get("material"))
    raise ValueError(f"Unknown primitive type: {kind!r}")


@ti.kernel
def _query_kernel(t_min: real, t_max: real):
    ray = Ray(origin=_query_origin[None], direction=_query_direction[None])
    rec = nearest_hit(ray, t_min, t_max)
    _query_hit[None] = rec.hit
    _query_distance[None] = rec.distance
    _query_point[None] = rec.point
    _query_normal[None] = rec.normal
    _query_material_id[None] = rec.material_id


class World:
    """Registry of named materials and named primitives.

    The World is mutable while a scene is being assembled and read-only
    during a render: ``build()`` snapshots it to the device and kernels only
    read the device copy.

    Example:
        >>> world = World()
        >>> world.add_material("glass", Dielectric(1.5))
        >>> world.add_material("steel", Metal((0.7, 0.7, 0.7), fuzz=0.1))
        >>> world.add_sphere("a", (0, 1, 0), 1.0, "glass")
        >>> world.add_plane("ground", (0, 0, 0), (0, 1, 0))
        >>> world.bind_material("ground", "steel")
        >>> world.material_names()
        ['glass', 'steel']
    """

    def __init__(self) -> None:
        """Initialize an empty world."""
        self._materials: dict[str, Material] = {}
        self._primitives: dict[str, Primitive] = {}
        self._token = next(_world_tokens)
        self._revision = 0

    def __repr__(self) -> str:
        return (
            f"World(materials={len(self._materials)}, "
            f"primitives={len(self._primitives)})"
        )

    def _touch(self) -> None:
        self._revision += 1

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(self, name: str, material: Material) -> None:
        """Register a named material.

        Args:
            name: Unique material name.
            material: A Lambertian, Metal or Dielectric instance.

        Raises:
            TypeError: If ``material`` is not a supported material.
            ValueError: If the name is already registered.
            RuntimeError: If the registry for the material's type is full.
        """
        if type(material) not in _MATERIAL_TYPES:
            raise TypeError(f"Unsupported material: {material!r}")
        if name in self._materials:
            raise ValueError(f"Material '{name}' is already registered")
        material_type = _MATERIAL_TYPES[type(material)]
        limit = _MATERIAL_LIMITS[material_type]
        same_type = sum(1 for m in self._materials.values() if type(m) is type(material))
        if same_type >= limit:
            raise RuntimeError(
                f"Maximum number of {material_type.name.lower()} materials ({limit}) exceeded"
            )
        self._materials[name] = material
        self._touch()

    def material_names(self) -> list[str]:
        """Names of all registered materials, in registration order."""
        return list(self._materials)

    def get_material(self, name: str) -> Material:
        """Look up a material by name.

        Raises:
            KeyError: If no material has that name.
        """
        return self._materials[name]

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_primitive(self, name: str, primitive: Primitive) -> None:
        """Register a named primitive.

        The primitive's material name is not checked here; materials may be
        registered after the primitives that use them. ``build()`` validates
        all bindings.

        Raises:
            TypeError: If ``primitive`` is not a SphereInfo or PlaneInfo.
            ValueError: If the name is already registered.
            RuntimeError: If the maximum number of spheres or planes is exceeded.
        """
        if not isinstance(primitive, (SphereInfo, PlaneInfo)):
            raise TypeError(f"Unsupported primitive: {primitive!r}")
        if name in self._primitives:
            raise ValueError(f"Primitive '{name}' is already registered")

        same_kind = sum(1 for p in self._primitives.values() if type(p) is type(primitive))
        limit = MAX_SPHERES if isinstance(primitive, SphereInfo) else MAX_PLANES
        if same_kind >= limit:
            raise RuntimeError(
                f"Maximum number of {type(primitive).__name__} primitives ({limit}) exceeded"
            )

        self._primitives[name] = primitive
        self._touch()

    def add_sphere(
        self,
        name: str,
        center: tuple[float, float, float],
        radius: float,
        material_name: str | None = None,
    ) -> SphereInfo:
        """Register a sphere and return its descriptor."""
        sphere = SphereInfo(center, radius, material_name)
        self.add_primitive(name, sphere)
        return sphere

    def add_plane(
        self,
        name: str,
        point: tuple[float, float, float],
        normal: tuple[float, float, float],
        material_name: str | None = None,
    ) -> PlaneInfo:
        """Register an infinite plane and return its descriptor."""
        plane = PlaneInfo(point, normal, material_name)
        self.add_primitive(name, plane)
        return plane

    def bind_material(self, primitive_name: str, material_name: str) -> None:
        """Bind (or rebind) a primitive to a material name.

        Raises:
            KeyError: If no primitive has that name.
        """
        primitive = self._primitives[primitive_name]
        self._primitives[primitive_name] = primitive.with_material(material_name)
        self._touch()

    def primitive_names(self) -> list[str]:
        """Names of all registered primitives, in registration order."""
        return list(self._primitives)

    def get_primitive(self, name: str) -> Primitive:
        """Look up a primitive by name.

        Raises:
            KeyError: If no primitive has that name.
        """
        return self._primitives[name]

    # =========================================================================
    # Build
    # =========================================================================

    def validate(self) -> None:
        """Check that every primitive resolves to a registered material.

        Raises:
            UnboundPrimitiveError: If a primitive has no material name.
            UnresolvedMaterialError: If a material name is not registered.
        """
        for name, primitive in self._primitives.items():
            if primitive.material_name is None:
                raise UnboundPrimitiveError(name)
            if primitive.material_name not in self._materials:
                raise UnresolvedMaterialError(name, primitive.material_name)

    def material_ids(self) -> dict[str, int]:
        """Unified material id of every material name (registration order)."""
        return {name: i for i, name in enumerate(self._materials)}

    def build(self) -> None:
        """Validate the scene and upload it to the device fields.

        Raises:
            SceneConfigurationError: If a primitive is unbound or bound to
                an unknown material. Nothing is uploaded in that case.
            RuntimeError: If a per-type material registry overflows.
        """
        global _resident

        self.validate()

        key = (self._token, self._revision)
        if _resident == key:
            logger.debug("Scene already resident, skipping upload")
            return

        reset_device_scene()
        ids = self.material_ids()

        for material_id, material in enumerate(self._materials.values()):
            material_type = _MATERIAL_TYPES[type(material)]
            if material_type == MaterialType.LAMBERTIAN:
                type_index = add_lambertian_material(material.albedo)
            elif material_type == MaterialType.METAL:
                type_index = add_metal_material(material.albedo, material.fuzz)
            else:
                type_index = add_dielectric_material(material.refraction_index)
            material_types[material_id] = int(material_type)
            material_type_indices[material_id] = type_index
        num_materials[None] = len(self._materials)

        for primitive in self._primitives.values():
            material_id = ids[primitive.material_name]
            if isinstance(primitive, SphereInfo):
                add_sphere(primitive.center, primitive.radius, material_id)
            else:
                add_plane(primitive.point, primitive.normal, material_id)

        _resident = key
        logger.debug(
            "Uploaded scene: %d materials, %d spheres, %d planes",
            len(self._materials),
            get_sphere_count(),
            get_plane_count(),
        )

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def nearest_hit(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        t_min: float = DEFAULT_T_MIN,
        t_max: float = math.inf,
    ) -> Collision | None:
        """Find the closest primitive hit by a ray.

        Builds the world first, so wiring defects raise here just as they
        would at render time.

        Args:
            origin: Ray origin.
            direction: Ray direction (any non-zero length).
            t_min: Exclusive lower bound on the hit distance.
            t_max: Exclusive upper bound on the hit distance.

        Returns:
            The nearest Collision, or None if the ray hits nothing.
        """
        self.build()

        _query_origin[None] = vec3(*_as_point(origin))
        _query_direction[None] = vec3(*_as_point(direction))
        _query_kernel(t_min, t_max)

        if _query_hit[None] == 0:
            return None

        material_name = list(self._materials)[_query_material_id[None]]
        return Collision(
            distance=float(_query_distance[None]),
            point=tuple(float(c) for c in _query_point[None].to_numpy()),
            normal=tuple(float(c) for c in _query_normal[None].to_numpy()),
            material_name=material_name,
            material=self._materials[material_name],
        )

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        return SceneConfig(
            materials={name: m.to_dict() for name, m in self._materials.items()},
            primitives={name: p.to_dict() for name, p in self._primitives.items()},
        )

    @classmethod
    def from_config(cls, config: SceneConfig) -> "World":
        """Create a world from a configuration object."""
        world = cls()
        for name, data in config.materials.items():
            world.add_material(name, material_from_dict(data))
        for name, data in config.primitives.items():
            world.add_primitive(name, primitive_from_dict(data))
        return world

    def to_dict(self) -> dict[str, Any]:
        """Export the scene as a JSON-friendly dictionary.

        Returns:
            ``{"materials": {name: {...}}, "primitives": {name: {...}}}``
        """
        config = self.to_config()
        return {"materials": config.materials, "primitives": config.primitives}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "World":
        """Create a world from a dictionary produced by ``to_dict``."""
        config = SceneConfig(
            materials=data.get("materials", {}),
            primitives=data.get("primitives", {}),
        )
        return cls.from_config(config)
