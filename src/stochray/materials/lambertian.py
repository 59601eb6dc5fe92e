"""Lambertian (ideal diffuse) material implementation.

The scattered direction is the surface normal plus a uniformly distributed
point inside the unit sphere, which approximates cosine-weighted diffuse
reflection. A Lambertian surface always scatters; the attenuation is its
albedo.

Example:
    >>> red = Lambertian(albedo=(0.8, 0.1, 0.1))
    >>> # Inside a kernel:
    >>> # scattered, attenuation, did_scatter = scatter_lambertian(
    >>> #     albedo, hit_point, normal
    >>> # )
"""

from dataclasses import dataclass
from typing import Any

import taichi as ti

from stochray.core.ray import Ray
from stochray.core.vector import near_zero, random_in_unit_sphere, real, vec3


def validate_albedo(albedo: Any) -> tuple[float, float, float]:
    """Check an albedo color and return it as a float triple.

    Args:
        albedo: (R, G, B) sequence.

    Returns:
        The albedo as a tuple of three floats.

    Raises:
        ValueError: If the albedo does not have three components or any
            component is outside [0, 1].
    """
    components = tuple(float(c) for c in albedo)
    if len(components) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(components)}")
    for i, component in enumerate(components):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    return components  # type: ignore[return-value]


@dataclass(frozen=True)
class Lambertian:
    """Lambertian (ideal diffuse) material.

    Attributes:
        albedo: The diffuse reflectance color (R, G, B), each in [0, 1].
    """

    albedo: tuple[float, float, float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_albedo(self.albedo))

    def to_dict(self) -> dict[str, Any]:
        return {"type": "lambertian", "albedo": list(self.albedo)}


@ti.func
def scatter_lambertian(albedo: vec3, hit_point: vec3, normal: vec3):
    """Scatter a ray off a Lambertian surface.

    Args:
        albedo: The diffuse reflectance color.
        hit_point: The intersection point (origin of the scattered ray).
        normal: The unit surface normal at the hit point.

    Returns:
        A tuple of (scattered_ray, attenuation, did_scatter). did_scatter is
        always 1.
    """
    direction = normal + random_in_unit_sphere()

    # The random point can cancel the normal almost exactly
    if near_zero(direction):
        direction = normal

    scattered = Ray(origin=hit_point, direction=direction)
    return scattered, albedo, 1


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

lambertian_albedos = ti.Vector.field(3, dtype=real, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B).

    Returns:
        The index of the added material within the Lambertian registry.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    albedo = validate_albedo(albedo)

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by registry index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, hit_point: vec3, normal: vec3):
    """Scatter off the Lambertian material stored at ``material_idx``.

    Returns:
        A tuple of (scattered_ray, attenuation, did_scatter).
    """
    albedo = get_lambertian_albedo(material_idx)
    return scatter_lambertian(albedo, hit_point, normal)
