"""Metal (specular reflective) material implementation.

The incoming direction is normalized and mirrored about the surface normal:

    R = d - 2(d . n)n

then perturbed by ``fuzz`` times a random point in the unit sphere. The fuzz
offset can push the scattered direction below the surface; such rays are
absorbed (did_scatter == 0). The attenuation is the metal's albedo.

Example:
    >>> gold = Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
    >>> Metal(albedo=(0.7, 0.7, 0.7), fuzz=4.0).fuzz
    1.0
"""

from dataclasses import dataclass
from typing import Any

import taichi as ti

from stochray.core.ray import Ray
from stochray.core.vector import dot, normalize, random_in_unit_sphere, real, reflect, vec3

from .lambertian import validate_albedo


def clamp_fuzz(fuzz: float) -> float:
    """Clamp a fuzz factor to [0, 1]."""
    return min(max(float(fuzz), 0.0), 1.0)


@dataclass(frozen=True)
class Metal:
    """Metal material with optional fuzzy reflection.

    Attributes:
        albedo: The reflective color (R, G, B), each in [0, 1].
        fuzz: Reflection perturbation radius. Values outside [0, 1] are
            clamped; 0 is a perfect mirror.
    """

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_albedo(self.albedo))
        object.__setattr__(self, "fuzz", clamp_fuzz(self.fuzz))

    def to_dict(self) -> dict[str, Any]:
        return {"type": "metal", "albedo": list(self.albedo), "fuzz": self.fuzz}


@ti.func
def scatter_metal(albedo: vec3, fuzz: real, ray: Ray, hit_point: vec3, normal: vec3):
    """Reflect a ray off a metal surface.

    Args:
        albedo: The reflective color.
        fuzz: Perturbation radius in [0, 1].
        ray: The incoming ray (any direction length).
        hit_point: The intersection point (origin of the scattered ray).
        normal: The unit surface normal at the hit point.

    Returns:
        A tuple of (scattered_ray, attenuation, did_scatter). did_scatter is
        0 when the perturbed direction points into the surface.
    """
    reflected = reflect(normalize(ray.direction), normal)
    direction = reflected + fuzz * random_in_unit_sphere()

    did_scatter = 0
    if dot(direction, normal) > 0.0:
        did_scatter = 1

    scattered = Ray(origin=hit_point, direction=direction)
    return scattered, albedo, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

metal_albedos = ti.Vector.field(3, dtype=real, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=real, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials."""
    num_metal_materials[None] = 0


def add_metal_material(albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B).
        fuzz: Reflection perturbation, clamped to [0, 1].

    Returns:
        The index of the added material within the metal registry.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    albedo = validate_albedo(albedo)

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    metal_fuzzes[idx] = clamp_fuzz(fuzz)
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by registry index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> real:
    """Get the fuzz factor for a metal material by registry index."""
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, ray: Ray, hit_point: vec3, normal: vec3):
    """Scatter off the metal material stored at ``material_idx``.

    Returns:
        A tuple of (scattered_ray, attenuation, did_scatter).
    """
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, ray, hit_point, normal)
