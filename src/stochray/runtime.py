"""Taichi runtime initialization.

Every kernel in the package works in double precision, so the runtime is
initialized with ``default_fp=ti.f64``. Taichi keeps an independent random
generator state per parallel thread, seeded from ``random_seed``; this is the
random source used by all sampling code.

Example:
    >>> import stochray
    >>> stochray.init(seed=7)
    >>> from stochray.scene.world import World  # field modules after init
"""

from __future__ import annotations

import logging
from typing import Any

import taichi as ti
from taichi.lang.impl import current_cfg

logger = logging.getLogger(__name__)

_initialized = False

# Backends whose kernels can use 64-bit floats
_F64_ARCHS = (ti.x64, ti.arm64, ti.cuda, ti.amdgpu)


def current_arch() -> Any:
    """The backend the Taichi runtime is currently initialized on."""
    return current_cfg().arch


def supports_f64(arch: Any) -> bool:
    """Whether kernels on ``arch`` can compute in double precision."""
    return arch in _F64_ARCHS


def init(arch: Any = None, *, seed: int = 0, debug: bool = False) -> None:
    """Initialize the Taichi runtime for rendering.

    Args:
        arch: Taichi backend (e.g. ``ti.cpu``). ``None`` tries the GPU
            first and falls back to the CPU when it is unavailable or lacks
            f64 support.
        seed: Seed for the per-thread random generators.
        debug: Enable Taichi debug mode (bounds checks in kernels).

    Raises:
        RuntimeError: If no backend could be initialized, or the requested
            backend lacks f64 support.
    """
    global _initialized

    if arch is None:
        try:
            ti.init(arch=ti.gpu, default_fp=ti.f64, random_seed=seed, debug=debug)
        except Exception:
            logger.info("GPU backend unavailable, falling back to CPU")
            arch = ti.cpu
        else:
            if not supports_f64(current_arch()):
                logger.info("%s backend lacks f64 support, falling back to CPU", current_arch())
                ti.reset()
                arch = ti.cpu

    if arch is not None:
        try:
            ti.init(arch=arch, default_fp=ti.f64, random_seed=seed, debug=debug)
        except Exception as e:
            _initialized = False
            raise RuntimeError(f"Failed to initialize Taichi runtime: {e}") from e
        if not supports_f64(current_arch()):
            backend = current_arch()
            ti.reset()
            _initialized = False
            raise RuntimeError(f"Backend {backend} does not support f64 kernels")

    _initialized = True
    logger.debug("Taichi runtime initialized on %s (seed=%d)", current_arch(), seed)


def is_initialized() -> bool:
    """Return True once init() has completed successfully."""
    return _initialized


def require_initialized() -> None:
    """Raise if the runtime (and with it the random source) is not ready.

    Raises:
        RuntimeError: If init() has not been called.
    """
    if not _initialized:
        raise RuntimeError(
            "Taichi runtime not initialized. Call stochray.init() before rendering."
        )
