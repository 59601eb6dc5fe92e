"""Infinite plane primitive with ray-plane intersection.

A plane is defined by a point Q on it and a unit normal N. For a ray (O, D):

    denom = N . D
    t = ((Q - O) . N) / denom

A ray with |denom| at or below PARALLEL_EPSILON runs parallel to the plane
and misses. The reported normal is always the configured N, regardless of
which side the ray arrives from; which way a plane faces is up to whoever
builds the scene (a ground plane uses N = (0, 1, 0)).

Example:
    >>> ground = Plane(point=vec3(0.0, 0.0, 0.0), normal=vec3(0.0, 1.0, 0.0))
    >>> # Inside a kernel:
    >>> # rec = hit_plane(ray, ground, 0.001, 1e30)
"""

import taichi as ti

from stochray.core.ray import Ray, point_at_distance
from stochray.core.vector import dot, real, vec3

from .sphere import HitRecord, make_miss

# Denominators at or below this magnitude are treated as parallel rays
PARALLEL_EPSILON = 1e-8


@ti.dataclass
class Plane:
    """An infinite plane through a point with a fixed normal.

    Attributes:
        point: Any point on the plane (vec3).
        normal: Unit normal of the plane (vec3), normalized when the plane
            is registered with a World.
    """

    point: vec3
    normal: vec3


@ti.func
def hit_plane(ray: Ray, plane: Plane, t_min: real, t_max: real) -> HitRecord:
    """Test a ray against an infinite plane.

    Args:
        ray: The ray to test.
        plane: The plane to test against.
        t_min: Exclusive lower bound on the hit distance.
        t_max: Exclusive upper bound on the hit distance.

    Returns:
        A HitRecord carrying the plane's configured normal, or a miss for
        parallel rays and distances outside (t_min, t_max).
    """
    result = make_miss()
    denom = dot(plane.normal, ray.direction)

    if ti.abs(denom) > PARALLEL_EPSILON:
        t = dot(plane.point - ray.origin, plane.normal) / denom
        if t > t_min and t < t_max:
            result = HitRecord(
                hit=1,
                distance=t,
                point=point_at_distance(ray, t),
                normal=plane.normal,
            )

    return result


def plane_normal(normal) -> tuple[float, float, float]:
    """Normalize a plane normal on the Python side.

    Args:
        normal: Any (x, y, z) sequence.

    Returns:
        The unit-length normal as a tuple of floats.

    Raises:
        ValueError: If the normal has zero length.
    """
    x, y, z = (float(c) for c in normal)
    norm = (x * x + y * y + z * z) ** 0.5
    if norm == 0.0:
        raise ValueError("Plane normal must be non-zero")
    return (x / norm, y / norm, z / norm)
