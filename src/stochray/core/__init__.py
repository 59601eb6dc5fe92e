"""Core rendering module.

Components:
    vector: Double-precision vector algebra and random sampling helpers
    ray: Ray data structure
    color: Linear RGB operations, gamma encoding and the sky background
    integrator: Render settings and the parallel radiance kernel

vector, ray and color declare no Taichi fields and can be imported at any
time. The integrator allocates its pixel buffer at import, so import it
directly (``from stochray.core.integrator import ...``) after
``stochray.init()``.
"""

from .color import (
    BLACK,
    SKY_BLUE,
    WHITE,
    average_samples,
    background,
    black,
    gamma_encode,
    gamma_encode_array,
)
from .ray import Ray, make_ray, point_at_distance
from .vector import (
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    normalize,
    ones,
    random_in_unit_disk,
    random_in_unit_sphere,
    real,
    reflect,
    vec3,
)

__all__ = [
    "real",
    "vec3",
    "ones",
    "dot",
    "cross",
    "length",
    "length_squared",
    "normalize",
    "reflect",
    "near_zero",
    "random_in_unit_sphere",
    "random_in_unit_disk",
    "Ray",
    "make_ray",
    "point_at_distance",
    "BLACK",
    "WHITE",
    "SKY_BLUE",
    "black",
    "average_samples",
    "gamma_encode",
    "gamma_encode_array",
    "background",
]
