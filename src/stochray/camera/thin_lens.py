"""Thin-lens camera model for ray generation and rendering.

The camera builds an orthonormal basis (u, v, w) from the view parameters:

- w = normalize(eye - target): points backward, away from the view direction
- u = normalize(up x w): points right in the image plane
- v = w x u: points up in the image plane

The image plane sits at the focus distance |eye - target| in front of the
eye. Its half-height is tan(vfov / 2) * focus_distance and its half-width is
aspect_ratio times that. With a non-zero aperture, ray origins are jittered
over a disk of radius aperture / 2 in the (u, v) plane while still aiming at
the same image-plane point, which keeps the target plane sharp and blurs
everything else (thin-lens defocus).

The basis is derived once, on the Python side with NumPy, when the Camera is
created. Collaborators that move the camera between frames create a new one
with ``with_eye``.

Example:
    >>> camera = Camera(eye=(0.0, 0.0, 0.0), target=(0.0, 0.0, -1.0), vfov=90.0)
    >>> pixels = camera.render(world, width=400, height=300, samples_per_pixel=16)
    >>> pixels.shape
    (120000, 3)
"""

import dataclasses
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti

from stochray.core.ray import DEFAULT_MAX_DEPTH, DEFAULT_T_MIN, Ray, make_ray
from stochray.core.vector import random_in_unit_disk, real, vec3

if TYPE_CHECKING:
    from stochray.scene.world import World


def _unit(v: np.ndarray) -> np.ndarray:
    return v / np.linalg.norm(v)


@dataclass(frozen=True)
class Camera:
    """Configuration for a thin-lens (perspective) camera.

    Attributes:
        eye: Camera position in world space (x, y, z).
        target: Point the camera looks at; also the focus plane.
        up: Up direction for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the image plane.
        aperture: Lens diameter. 0 is a pinhole (everything in focus).
    """

    eye: tuple[float, float, float] = (0.0, 0.0, 0.0)
    target: tuple[float, float, float] = (0.0, 0.0, -1.0)
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 4.0 / 3.0
    aperture: float = 0.0

    # Derived in __post_init__
    u: np.ndarray = field(init=False, repr=False, compare=False)
    v: np.ndarray = field(init=False, repr=False, compare=False)
    w: np.ndarray = field(init=False, repr=False, compare=False)
    focus_distance: float = field(init=False, repr=False, compare=False)
    horizontal: np.ndarray = field(init=False, repr=False, compare=False)
    vertical: np.ndarray = field(init=False, repr=False, compare=False)
    lower_left: np.ndarray = field(init=False, repr=False, compare=False)
    lens_radius: float = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for name in ("eye", "target", "up"):
            object.__setattr__(self, name, tuple(float(c) for c in getattr(self, name)))
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.aperture < 0.0:
            raise ValueError(f"aperture must be non-negative, got {self.aperture}")

        eye = np.array(self.eye, dtype=np.float64)
        target = np.array(self.target, dtype=np.float64)
        up = np.array(self.up, dtype=np.float64)

        focus_distance = float(np.linalg.norm(eye - target))
        if focus_distance == 0.0:
            raise ValueError("Camera eye and target must differ")

        w = (eye - target) / focus_distance
        right = np.cross(up, w)
        if np.linalg.norm(right) < 1e-12:
            raise ValueError("Camera up vector must not be parallel to the view direction")
        u = _unit(right)
        v = np.cross(w, u)

        half_height = math.tan(math.radians(self.vfov) / 2.0) * focus_distance
        half_width = self.aspect_ratio * half_height

        derived = {
            "u": u,
            "v": v,
            "w": w,
            "focus_distance": focus_distance,
            "horizontal": 2.0 * half_width * u,
            "vertical": 2.0 * half_height * v,
            "lower_left": eye - half_width * u - half_height * v - focus_distance * w,
            "lens_radius": self.aperture / 2.0,
        }
        for name, value in derived.items():
            object.__setattr__(self, name, value)

    def with_eye(self, eye: tuple[float, float, float]) -> "Camera":
        """Return a copy of this camera moved to a new eye position."""
        return dataclasses.replace(self, eye=tuple(float(c) for c in eye))

    def image_height(self, width: int) -> int:
        """Pixel height matching this camera's aspect ratio for ``width``."""
        return max(1, round(width / self.aspect_ratio))

    def upload(self) -> None:
        """Write the derived camera state to the device fields used by get_ray."""
        _camera_origin[None] = vec3(*self.eye)
        _camera_u[None] = vec3(*self.u)
        _camera_v[None] = vec3(*self.v)
        _horizontal[None] = vec3(*self.horizontal)
        _vertical[None] = vec3(*self.vertical)
        _lower_left[None] = vec3(*self.lower_left)
        _lens_radius[None] = self.lens_radius

    def info(self) -> dict[str, tuple[float, ...]]:
        """Derived camera vectors as plain tuples, for inspection."""
        return {
            "origin": tuple(float(c) for c in self.eye),
            "u": tuple(float(c) for c in self.u),
            "v": tuple(float(c) for c in self.v),
            "w": tuple(float(c) for c in self.w),
            "horizontal": tuple(float(c) for c in self.horizontal),
            "vertical": tuple(float(c) for c in self.vertical),
            "lower_left": tuple(float(c) for c in self.lower_left),
        }

    def render(
        self,
        world: "World",
        width: int,
        height: int,
        samples_per_pixel: int,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        t_min: float = DEFAULT_T_MIN,
    ) -> npt.NDArray[np.float64]:
        """Render the world as seen through this camera.

        Args:
            world: The scene to render. It is validated and uploaded first.
            width: Image width in pixels.
            height: Image height in pixels.
            samples_per_pixel: Independent jittered samples per pixel.
            max_depth: Bounce limit; hits at this depth contribute black.
            t_min: Self-intersection epsilon for every ray query.

        Returns:
            Gamma-encoded colors of shape (width * height, 3), row-major with
            the top row first.

        Raises:
            SceneConfigurationError: If the world has unbound or unresolved
                material references. No pixels are rendered.
            RuntimeError: If the runtime has not been initialized.
            ValueError: If the render settings are invalid.
        """
        from stochray.core.integrator import RenderSettings, render

        settings = RenderSettings(
            width=width,
            height=height,
            samples_per_pixel=samples_per_pixel,
            max_depth=max_depth,
            t_min=t_min,
        )
        return render(world, self, settings)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=real, shape=())
_camera_u = ti.Vector.field(3, dtype=real, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=real, shape=())  # Up
_horizontal = ti.Vector.field(3, dtype=real, shape=())  # Full image-plane width
_vertical = ti.Vector.field(3, dtype=real, shape=())  # Full image-plane height
_lower_left = ti.Vector.field(3, dtype=real, shape=())
_lens_radius = ti.field(dtype=real, shape=())


@ti.func
def get_ray(s: real, t: real) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    Args:
        s: Horizontal coordinate in [0, 1] (left to right).
        t: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray from the (lens-jittered) eye toward the image-plane point.
        The direction is not normalized.
    """
    offset = vec3(0.0, 0.0, 0.0)
    if _lens_radius[None] > 0.0:
        disk = random_in_unit_disk() * _lens_radius[None]
        offset = _camera_u[None] * disk.x + _camera_v[None] * disk.y

    origin = _camera_origin[None] + offset
    direction = _lower_left[None] + s * _horizontal[None] + t * _vertical[None] - origin
    return make_ray(origin, direction)
