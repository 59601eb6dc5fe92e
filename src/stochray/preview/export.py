"""Image export utilities for rendered pixel buffers.

The renderer returns gamma-encoded colors as a flat (width * height, 3)
array, row-major with the top row first. This module reshapes such buffers
into images, quantizes them to 8 bits per channel and writes them with
Pillow.

Quantization follows the ``channel * 255.99`` truncation convention: 1.0
maps to 255 and the 256 output levels get equal-width input bins. Values
outside [0, 1] are clipped.

Example:
    >>> pixels = camera.render(world, 400, 300, 16)
    >>> save_image(pixels, 400, 300, "spheres.png")
"""

from __future__ import annotations

import os

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def quantize(pixels: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Convert gamma-encoded colors to 8-bit channel values.

    Args:
        pixels: Array of colors with channel values nominally in [0, 1].

    Returns:
        uint8 array of the same shape, ``trunc(channel * 255.99)`` after
        clipping the channels to [0, 1].
    """
    values = np.clip(np.asarray(pixels, dtype=np.float64), 0.0, 1.0)
    return (values * 255.99).astype(np.uint8)


def pixels_to_image(
    pixels: npt.ArrayLike,
    width: int,
    height: int,
) -> npt.NDArray[np.float64]:
    """Reshape a flat pixel buffer into an image array.

    Args:
        pixels: Array of shape (width * height, 3), row-major, top row first.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        Array of shape (height, width, 3).

    Raises:
        ValueError: If the buffer size does not match width * height.
    """
    array = np.asarray(pixels, dtype=np.float64)
    if array.shape != (width * height, 3):
        raise ValueError(
            f"Pixel buffer shape {array.shape} doesn't match {width}x{height} image"
        )
    return array.reshape(height, width, 3)


def image_to_uint8(
    pixels: npt.ArrayLike,
    width: int,
    height: int,
) -> npt.NDArray[np.uint8]:
    """Reshape and quantize a flat pixel buffer to an 8-bit (H, W, 3) image."""
    return quantize(pixels_to_image(pixels, width, height))


def save_image(
    pixels: npt.ArrayLike,
    width: int,
    height: int,
    filepath: str | os.PathLike[str],
) -> None:
    """Save a rendered pixel buffer as an 8-bit RGB image file.

    The format is chosen by Pillow from the file extension (PNG, PPM, ...).

    Args:
        pixels: Array of shape (width * height, 3), row-major, top row first.
        width: Image width in pixels.
        height: Image height in pixels.
        filepath: Output file path.
    """
    image_uint8 = image_to_uint8(pixels, width, height)
    pil_image = PILImage.fromarray(image_uint8, mode="RGB")
    pil_image.save(filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
