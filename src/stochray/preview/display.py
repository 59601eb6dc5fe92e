"""Matplotlib preview of rendered pixel buffers.

Example:
    >>> pixels = camera.render(world, 200, 150, 16)
    >>> show_pixels(pixels, 200, 150, title="Random spheres")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .export import pixels_to_image

if TYPE_CHECKING:
    import numpy.typing as npt


def show_pixels(
    pixels: npt.ArrayLike,
    width: int,
    height: int,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display a rendered pixel buffer as a Matplotlib figure.

    The buffer is already gamma encoded, so it is shown as is after clipping
    to [0, 1].

    Args:
        pixels: Array of shape (width * height, 3), row-major, top row first.
        width: Image width in pixels.
        height: Image height in pixels.
        title: Figure title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.

    Raises:
        ValueError: If the buffer size does not match width * height.
    """
    import matplotlib.pyplot as plt

    image = pixels_to_image(pixels, width, height).clip(0.0, 1.0)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(image)
    ax.axis("off")
    ax.set_title(title if title is not None else f"Render Preview - {width}x{height}")

    plt.tight_layout()
    plt.show(block=block)
