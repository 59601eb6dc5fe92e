"""Ray data structure for the ray tracer kernels.

A ray is the half-line origin + t * direction. The direction is not required
to be unit length; intersection routines account for its magnitude.

Example:
    >>> @ti.kernel
    ... def k():
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    ...     p = point_at_distance(ray, 5.0)  # (0, 0, -5)
"""

import taichi as ti

from stochray.core.vector import real, vec3

# Default bounce limit for a traced path
DEFAULT_MAX_DEPTH = 50

# Default self-intersection epsilon for ray queries
DEFAULT_T_MIN = 0.001


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3), any non-zero length.
    """

    origin: vec3
    direction: vec3


@ti.func
def point_at_distance(ray: Ray, t: real) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + ray.direction * t.
    """
    return ray.origin + ray.direction * t


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)
