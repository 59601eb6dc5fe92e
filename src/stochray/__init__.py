"""Stochastic (Monte Carlo) ray tracer built on Taichi.

Given a scene of primitives bound to scattering materials and a camera, the
renderer produces a buffer of gamma-encoded pixel colors by tracing randomly
sampled rays through the scene in parallel Taichi kernels.

Subpackages:
    core: Vector algebra, rays, colors and the render integrator
    geometry: Sphere and plane primitives with intersection tests
    materials: Lambertian, metal and dielectric scattering
    scene: World registry, nearest-hit query and scene builders
    camera: Thin-lens camera with ray generation and the render entry point
    preview: Image export and display front ends

Modules that declare Taichi fields must be imported after
``stochray.runtime.init()`` has run.
"""

from .runtime import init, is_initialized, require_initialized

__version__ = "0.1.0"

__all__ = ["init", "is_initialized", "require_initialized", "__version__"]
