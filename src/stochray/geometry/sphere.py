"""Sphere primitive with ray-sphere intersection.

The intersection solves |O + tD - C|^2 = r^2 for t using the half-b form of
the quadratic:

    oc = O - C
    a = D . D
    b = oc . D
    c = oc . oc - r^2
    disc = b^2 - a*c

A non-positive discriminant is a miss (a tangent ray grazes without a hit).
Otherwise the near root (-b - sqrt(disc)) / a is tried first and the far root
(-b + sqrt(disc)) / a second; the first one strictly inside (t_min, t_max)
wins. The returned normal always points away from the center, including for
rays that start inside the sphere (dielectrics read the side from the sign
of d . n).

Example:
    >>> sphere = Sphere(center=vec3(0.0, 0.0, -1.0), radius=0.5)
    >>> # Inside a kernel:
    >>> # rec = hit_sphere(ray, sphere, 0.001, 1e30)
"""

import taichi as ti

from stochray.core.ray import Ray, point_at_distance
from stochray.core.vector import dot, real, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive).
    """

    center: vec3
    radius: real


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss.
        distance: Ray parameter t of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal at the point. Only valid if hit == 1.
    """

    hit: ti.i32
    distance: real
    point: vec3
    normal: vec3


@ti.func
def make_miss() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        distance=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: real, t_max: real) -> HitRecord:
    """Test a ray against a sphere.

    Args:
        ray: The ray to test. Its direction need not be normalized.
        sphere: The sphere to test against.
        t_min: Exclusive lower bound on the hit distance (self-intersection
            epsilon supplied by the caller).
        t_max: Exclusive upper bound on the hit distance.

    Returns:
        A HitRecord for the nearest root inside (t_min, t_max), or a miss.
    """
    oc = ray.origin - sphere.center
    a = dot(ray.direction, ray.direction)
    b = dot(oc, ray.direction)
    c = dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - a * c

    result = make_miss()

    if discriminant > 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (-b - sqrt_d) / a
        valid = t > t_min and t < t_max
        if not valid:
            t = (-b + sqrt_d) / a
            valid = t > t_min and t < t_max

        if valid:
            point = point_at_distance(ray, t)
            result = HitRecord(
                hit=1,
                distance=t,
                point=point,
                normal=(point - sphere.center) / sphere.radius,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: real) -> Sphere:
    """Create a sphere inside a kernel."""
    return Sphere(center=center, radius=radius)
