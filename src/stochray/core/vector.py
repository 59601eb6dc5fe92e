"""Vector algebra for the ray tracer kernels.

All vectors are double-precision Taichi vectors. The functions in this module
are Taichi functions (@ti.func) meant to be called from inside kernels.

Note that ``normalize`` divides by the vector length and so yields NaN
components for the zero vector; callers that can produce a zero vector guard
with ``near_zero`` first.

Example:
    >>> @ti.kernel
    ... def k() -> ti.f64:
    ...     return length(normalize(vec3(3.0, 4.0, 0.0)))
"""

import taichi as ti

# Scalar type used by every field and kernel in the package
real = ti.f64

# 3D vector type (positions, directions and linear RGB colors)
vec3 = ti.types.vector(3, real)


@ti.func
def ones() -> vec3:
    """Return the all-ones vector (1, 1, 1).

    This is the identity for component-wise multiplication (a white
    attenuation), not a normalized vector.
    """
    return vec3(1.0, 1.0, 1.0)


@ti.func
def dot(a: vec3, b: vec3) -> real:
    """Compute the dot product a . b."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the right-handed cross product a x b.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        (a.y*b.z - a.z*b.y, -(a.x*b.z - a.z*b.x), a.x*b.y - a.y*b.x)
    """
    return vec3(
        a.y * b.z - a.z * b.y,
        -(a.x * b.z - a.z * b.x),
        a.x * b.y - a.y * b.x,
    )


@ti.func
def length_squared(v: vec3) -> real:
    """Compute the squared length of a vector (no square root)."""
    return dot(v, v)


@ti.func
def length(v: vec3) -> real:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Args:
        v: The input vector.

    Returns:
        v / length(v). Undefined (NaN components) when v is zero-length.
    """
    return v / length(v)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect a direction about a unit normal: d - 2(d . n)n."""
    return incident - 2.0 * dot(incident, normal) * normal


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if all components of a vector are within 1e-8 of zero."""
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def random_in_unit_sphere() -> vec3:
    """Draw a uniformly distributed point inside the unit sphere.

    Uses rejection sampling on the enclosing cube with a bounded number of
    attempts.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(100):  # Max iterations to avoid infinite loops
        if not found:
            p = vec3(
                ti.random(real) * 2.0 - 1.0,
                ti.random(real) * 2.0 - 1.0,
                ti.random(real) * 2.0 - 1.0,
            )
            if length_squared(p) < 1.0:
                found = True
    if not found:
        p = vec3(0.0, 0.0, 0.0)
    return p


@ti.func
def random_in_unit_disk() -> vec3:
    """Draw a uniformly distributed point (x, y, 0) inside the unit disk.

    Used for thin-lens defocus jitter.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(100):
        if not found:
            p = vec3(
                ti.random(real) * 2.0 - 1.0,
                ti.random(real) * 2.0 - 1.0,
                0.0,
            )
            if p.x * p.x + p.y * p.y < 1.0:
                found = True
    if not found:
        p = vec3(0.0, 0.0, 0.0)
    return p


