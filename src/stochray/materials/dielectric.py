"""Dielectric (glass/water) material implementation.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when the Snell discriminant is not positive

Which side the ray arrives from is read from the sign of d . n, since the
collision normal always faces outward from the primitive:

    d . n > 0 (exiting):  outward = -n, eta = ior,     cos = ior * (d . n) / |d|
    otherwise (entering): outward =  n, eta = 1 / ior, cos = -(d . n) / |d|

With uv = unit(d) and dt = uv . outward, the refraction discriminant is
1 - eta^2 (1 - dt^2). At or below TIR_EPSILON the ray is totally internally
reflected; this includes the critical angle itself, where the discriminant
is zero up to rounding. Otherwise the ray refracts when a uniform draw
exceeds the Schlick reflectance and reflects when it does not. Glass never
tints: the attenuation is always (1, 1, 1).

Example:
    >>> glass = Dielectric(refraction_index=1.5)
    >>> round(schlick_reflectance(1.0, 1.0 / 1.5), 4)  # normal incidence
    0.04
"""

from dataclasses import dataclass
from typing import Any

import taichi as ti

from stochray.core.ray import Ray
from stochray.core.vector import dot, normalize, ones, real, reflect, vec3

# Refraction discriminants at or below this value are total internal reflection
TIR_EPSILON = 1e-9


def validate_refraction_index(refraction_index: float) -> float:
    """Check a refraction index and return it as a float.

    Raises:
        ValueError: If the index is below 1.0.
    """
    refraction_index = float(refraction_index)
    if refraction_index < 1.0:
        raise ValueError(
            f"Index of refraction = {refraction_index} is less than 1.0. "
            "IOR must be >= 1.0 for physically meaningful materials."
        )
    return refraction_index


def schlick_reflectance(cosine: float, eta: float) -> float:
    """Schlick's approximation of the Fresnel reflectance (Python side).

    Args:
        cosine: Cosine of the incident angle.
        eta: Relative refraction index.

    Returns:
        r0 + (1 - r0)(1 - cosine)^5 with r0 = ((1 - eta) / (1 + eta))^2.
    """
    r0 = ((1.0 - eta) / (1.0 + eta)) ** 2
    return r0 + (1.0 - r0) * (1.0 - cosine) ** 5


@dataclass(frozen=True)
class Dielectric:
    """Clear dielectric material.

    Attributes:
        refraction_index: Index of refraction, >= 1. Common values:
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    refraction_index: float = 1.5

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "refraction_index", validate_refraction_index(self.refraction_index)
        )

    def to_dict(self) -> dict[str, Any]:
        return {"type": "dielectric", "refraction_index": self.refraction_index}


@ti.func
def schlick(cosine: real, eta: real) -> real:
    """Schlick's approximation of the Fresnel reflectance."""
    r0 = (1.0 - eta) / (1.0 + eta)
    r0 = r0 * r0
    x = 1.0 - cosine
    x2 = x * x
    return r0 + (1.0 - r0) * x2 * x2 * x


@ti.func
def refraction_discriminant(direction: vec3, outward_normal: vec3, eta: real) -> real:
    """Snell discriminant 1 - eta^2 (1 - cos^2); not positive means TIR."""
    dt = dot(normalize(direction), outward_normal)
    return 1.0 - eta * eta * (1.0 - dt * dt)


@ti.func
def refract(direction: vec3, outward_normal: vec3, eta: real, discriminant: real) -> vec3:
    """Refract a direction through a surface.

    Args:
        direction: Incident direction (any length).
        outward_normal: Unit normal on the incident side of the surface.
        eta: Ratio of the incident to the transmitted refraction index.
        discriminant: Positive value from ``refraction_discriminant``.

    Returns:
        The refracted direction (unit length).
    """
    uv = normalize(direction)
    dt = dot(uv, outward_normal)
    return (uv - outward_normal * dt) * eta - outward_normal * ti.sqrt(discriminant)


@ti.func
def scatter_dielectric(refraction_index: real, ray: Ray, hit_point: vec3, normal: vec3):
    """Reflect or refract a ray at a dielectric surface.

    Args:
        refraction_index: Index of refraction of the material.
        ray: The incoming ray (any direction length).
        hit_point: The intersection point (origin of the scattered ray).
        normal: The outward unit normal of the primitive at the hit point.

    Returns:
        A tuple of (scattered_ray, attenuation, did_scatter). Dielectrics
        always scatter and never tint.
    """
    d = ray.direction
    d_dot_n = dot(d, normal)
    d_length = ti.sqrt(dot(d, d))

    outward_normal = normal
    eta = 1.0 / refraction_index
    cosine = -d_dot_n / d_length
    if d_dot_n > 0.0:
        outward_normal = -normal
        eta = refraction_index
        cosine = refraction_index * d_dot_n / d_length

    direction = reflect(d, normal)
    discriminant = refraction_discriminant(d, outward_normal, eta)
    if discriminant > TIR_EPSILON:
        if ti.random(real) > schlick(cosine, eta):
            direction = refract(d, outward_normal, eta, discriminant)

    scattered = Ray(origin=hit_point, direction=direction)
    return scattered, ones(), 1


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

dielectric_iors = ti.field(dtype=real, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(refraction_index: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        refraction_index: Index of refraction. Default is 1.5 (typical glass).

    Returns:
        The index of the added material within the dielectric registry.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the index of refraction is less than 1.0.
    """
    refraction_index = validate_refraction_index(refraction_index)

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = refraction_index
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> real:
    """Get the index of refraction for a dielectric material by registry index."""
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(material_idx: ti.i32, ray: Ray, hit_point: vec3, normal: vec3):
    """Scatter off the dielectric material stored at ``material_idx``.

    Returns:
        A tuple of (scattered_ray, attenuation, did_scatter).
    """
    refraction_index = get_dielectric_ior(material_idx)
    return scatter_dielectric(refraction_index, ray, hit_point, normal)
