"""Monte Carlo render integrator.

For every pixel the render kernel draws ``samples_per_pixel`` jittered camera
rays, evaluates the radiance along each one and stores the gamma-encoded mean
of the samples.

Radiance evaluation is the bounded recursion

    color(ray, depth) = background(ray)                      no hit
                      = black                                hit, depth >= max_depth
                      = black                                hit, absorbed
                      = attenuation * color(scattered, depth + 1)  hit, scattered

written as a loop that carries the product of attenuations (throughput)
along the path. The outermost loop of the kernel runs over all pixels and is
parallelized by Taichi; each parallel thread draws from its own random
generator state.

Example:
    >>> import stochray
    >>> stochray.init(seed=7)
    >>> from stochray.camera.thin_lens import Camera
    >>> from stochray.core.integrator import RenderSettings, render
    >>> pixels = render(world, Camera(), RenderSettings(400, 300, 16))
"""

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
import numpy.typing as npt
import taichi as ti

from stochray.camera.thin_lens import get_ray
from stochray.core.color import average_samples, background, gamma_encode
from stochray.core.ray import DEFAULT_MAX_DEPTH, DEFAULT_T_MIN, Ray
from stochray.core.vector import ones, real, vec3
from stochray.materials.dielectric import get_dielectric_ior, scatter_dielectric
from stochray.materials.lambertian import get_lambertian_albedo, scatter_lambertian
from stochray.materials.metal import get_metal_albedo, get_metal_fuzz, scatter_metal
from stochray.runtime import require_initialized
from stochray.scene.intersection import nearest_hit
from stochray.scene.world import MaterialType, get_material_type, get_material_type_index

if TYPE_CHECKING:
    from stochray.camera.thin_lens import Camera
    from stochray.scene.world import World

logger = logging.getLogger(__name__)

# =============================================================================
# Rendering Constants
# =============================================================================

# Upper bound of every ray query
T_MAX = 1e10


@dataclass(frozen=True)
class RenderSettings:
    """Per-render configuration.

    Attributes:
        width: Image width in pixels (>= 1).
        height: Image height in pixels (>= 1).
        samples_per_pixel: Independent jittered samples per pixel (>= 1).
        max_depth: Bounce limit (>= 0). A hit at this depth contributes black.
        t_min: Lower bound of every ray query (> 0).
    """

    width: int
    height: int
    samples_per_pixel: int
    max_depth: int = DEFAULT_MAX_DEPTH
    t_min: float = DEFAULT_T_MIN

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be >= 1, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.t_min <= 0.0:
            raise ValueError(f"t_min must be positive, got {self.t_min}")

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


# Output buffers keyed by (height, width), indexed [row, col] with row 0 at the top
_pixel_buffers: dict[tuple[int, int], Any] = {}


def _pixel_buffer(height: int, width: int) -> Any:
    """Get the output field for an image size, allocating it on first use."""
    key = (height, width)
    if key not in _pixel_buffers:
        logger.debug("Allocating %dx%d pixel buffer", width, height)
        _pixel_buffers[key] = ti.Vector.field(3, dtype=real, shape=key)
    return _pixel_buffers[key]


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter(material_id: ti.i32, ray: Ray, hit_point: vec3, normal: vec3):
    """Dispatch to the scatter function of the hit material.

    Returns:
        A tuple of (scattered_ray, attenuation, did_scatter). Unknown
        material ids absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered = Ray(origin=hit_point, direction=normal)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        scattered, attenuation, did_scatter = scatter_lambertian(albedo, hit_point, normal)

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered, attenuation, did_scatter = scatter_metal(albedo, fuzz, ray, hit_point, normal)

    elif mat_type == int(MaterialType.DIELECTRIC):
        ior = get_dielectric_ior(type_index)
        scattered, attenuation, did_scatter = scatter_dielectric(ior, ray, hit_point, normal)

    return scattered, attenuation, did_scatter


# =============================================================================
# Radiance Evaluation
# =============================================================================


@ti.func
def trace_radiance(ray: Ray, max_depth: ti.i32, t_min: real) -> vec3:
    """Evaluate the linear radiance arriving along a ray.

    Args:
        ray: The primary ray.
        max_depth: Bounce limit.
        t_min: Lower bound of every ray query.

    Returns:
        The radiance estimate for this path.
    """
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = ones()
    current = Ray(origin=ray.origin, direction=ray.direction)

    # Loops in ti.func cannot break, so finished paths clear this flag
    active = 1

    for depth in range(max_depth + 1):
        if active == 1:
            rec = nearest_hit(current, t_min, T_MAX)

            if rec.hit == 0:
                radiance += throughput * background(current.direction)
                active = 0
            elif depth >= max_depth:
                active = 0
            else:
                scattered, attenuation, did_scatter = _scatter(
                    rec.material_id, current, rec.point, rec.normal
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    current = scattered

    return radiance


# =============================================================================
# Rendering Kernel
# =============================================================================


@ti.kernel
def _render_kernel(
    pixels: ti.template(),
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    t_min: real,
):
    for row, col in ti.ndrange(height, width):
        total = vec3(0.0, 0.0, 0.0)
        for sample in range(samples_per_pixel):
            s = (ti.cast(col, real) + ti.random(real)) / ti.cast(width, real)
            t = (ti.cast(height - 1 - row, real) + ti.random(real)) / ti.cast(height, real)
            total += trace_radiance(get_ray(s, t), max_depth, t_min)
        pixels[row, col] = gamma_encode(average_samples(total, samples_per_pixel))


def render_pixels(settings: RenderSettings) -> npt.NDArray[np.float64]:
    """Run the render kernel against the scene and camera already on the device.

    Args:
        settings: Image size, sample count and bounce limit.

    Returns:
        Array of shape (width * height, 3), row-major, top row first.

    Raises:
        RuntimeError: If the runtime has not been initialized.
    """
    require_initialized()

    logger.debug(
        "Launching render kernel: %dx%d, %d spp, max_depth=%d",
        settings.width,
        settings.height,
        settings.samples_per_pixel,
        settings.max_depth,
    )
    pixels = _pixel_buffer(settings.height, settings.width)
    _render_kernel(
        pixels,
        settings.width,
        settings.height,
        settings.samples_per_pixel,
        settings.max_depth,
        settings.t_min,
    )

    return pixels.to_numpy().reshape(settings.pixel_count, 3).astype(np.float64)


def render(world: "World", camera: "Camera", settings: RenderSettings) -> npt.NDArray[np.float64]:
    """Render a world through a camera.

    The world is validated and uploaded before any kernel runs, so a scene
    wiring defect raises without producing pixel data.

    Args:
        world: The scene to render.
        camera: The camera to render through.
        settings: Image size, sample count and bounce limit.

    Returns:
        Gamma-encoded colors of shape (width * height, 3), row-major, top row
        first.

    Raises:
        SceneConfigurationError: If the world has unbound or unresolved
            material references.
        RuntimeError: If the runtime has not been initialized.
    """
    require_initialized()
    world.build()
    camera.upload()

    logger.info(
        "Rendering %dx%d at %d spp",
        settings.width,
        settings.height,
        settings.samples_per_pixel,
    )
    start = time.perf_counter()
    pixels = render_pixels(settings)
    logger.info("Render finished in %.2fs", time.perf_counter() - start)
    return pixels
