"""Materials module for the scattering policies.

Components:
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like materials with refraction (Schlick reflectance)

Each module provides a frozen Python dataclass describing the material, a
scatter Taichi function returning (scattered_ray, attenuation, did_scatter),
and a per-type registry of Taichi fields filled by ``World.build()``.

The registries are Taichi fields, so this package must be imported after
``stochray.init()``.
"""

from .dielectric import (
    MAX_DIELECTRIC_MATERIALS,
    TIR_EPSILON,
    Dielectric,
    add_dielectric_material,
    clear_dielectric_materials,
    get_dielectric_ior,
    get_dielectric_material_count,
    refract,
    refraction_discriminant,
    scatter_dielectric,
    scatter_dielectric_by_id,
    schlick,
    schlick_reflectance,
)
from .lambertian import (
    MAX_LAMBERTIAN_MATERIALS,
    Lambertian,
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
    validate_albedo,
)
from .metal import (
    MAX_METAL_MATERIALS,
    Metal,
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Lambertian
    "Lambertian",
    "MAX_LAMBERTIAN_MATERIALS",
    "validate_albedo",
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "Metal",
    "MAX_METAL_MATERIALS",
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "Dielectric",
    "MAX_DIELECTRIC_MATERIALS",
    "TIR_EPSILON",
    "schlick",
    "schlick_reflectance",
    "refract",
    "refraction_discriminant",
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ior",
]
