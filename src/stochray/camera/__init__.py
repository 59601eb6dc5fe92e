"""Camera module.

Components:
    thin_lens: Thin-lens camera with ray generation and the render entry point

The camera state used by kernels lives in Taichi fields, so this package
must be imported after ``stochray.init()``.
"""

from .thin_lens import Camera, get_ray

__all__ = ["Camera", "get_ray"]
