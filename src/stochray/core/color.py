"""Linear RGB color operations.

Colors share the vec3 type with positions and directions. Radiance is carried
and averaged in linear space; ``gamma_encode`` (per-channel square root,
gamma 2.0) is applied once, to the per-pixel mean, and never before
averaging.

The module also provides the sky background gradient used for rays that
escape the scene.
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from stochray.core.vector import normalize, real, vec3

# Color constants (RGB in linear space)
BLACK = (0.0, 0.0, 0.0)
WHITE = (1.0, 1.0, 1.0)
SKY_BLUE = (0.5, 0.7, 1.0)


@ti.func
def black() -> vec3:
    """Return black (no radiance)."""
    return vec3(0.0, 0.0, 0.0)


@ti.func
def average_samples(total: vec3, count: ti.i32) -> vec3:
    """Turn a sum of ``count`` radiance samples into their mean.

    Args:
        total: Sum of the linear-space samples.
        count: Number of samples in the sum.

    Returns:
        Per-channel arithmetic mean.
    """
    return total / ti.cast(count, real)


@ti.func
def gamma_encode(color: vec3) -> vec3:
    """Gamma-encode a linear color with gamma 2.0 (per-channel sqrt)."""
    return tm.sqrt(tm.max(color, vec3(0.0, 0.0, 0.0)))


@ti.func
def background(direction: vec3) -> vec3:
    """Sky gradient for a ray that hit nothing.

    Blends linearly from white (straight down) to sky blue (straight up)
    using t = 0.5 * (unit_direction.y + 1).

    Args:
        direction: Ray direction (any non-zero length).

    Returns:
        The background radiance.
    """
    unit_direction = normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    white = vec3(1.0, 1.0, 1.0)
    sky = vec3(0.5, 0.7, 1.0)  # SKY_BLUE
    return (1.0 - t) * white + t * sky


def gamma_encode_array(colors: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Gamma-encode an array of linear colors (NumPy counterpart).

    Args:
        colors: Array of linear colors with RGB in the last axis.

    Returns:
        Per-channel square root, negative inputs clamped to zero.
    """
    return np.sqrt(np.maximum(np.asarray(colors, dtype=np.float64), 0.0))

