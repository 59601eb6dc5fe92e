"""Preview module for output and visualization.

Components:
    export: Pillow-based 8-bit image export and image comparison
    display: Matplotlib-based static preview
    interactive: Taichi GGUI fly-through window

``interactive`` allocates Taichi fields when a preview is constructed, so
only construct one after ``stochray.init()``.

Example:
    >>> from stochray.preview import save_image, show_pixels
    >>> pixels = camera.render(world, 400, 300, 16)
    >>> save_image(pixels, 400, 300, "output.png")
    >>> show_pixels(pixels, 400, 300)
"""

from stochray.preview.display import show_pixels
from stochray.preview.export import (
    compute_rmse,
    image_to_uint8,
    pixels_to_image,
    quantize,
    save_image,
)
from stochray.preview.interactive import FlythroughPreview, eye_for_frame, to_canvas_array

__all__ = [
    # Display
    "show_pixels",
    # Export
    "compute_rmse",
    "image_to_uint8",
    "pixels_to_image",
    "quantize",
    "save_image",
    # Interactive
    "FlythroughPreview",
    "eye_for_frame",
    "to_canvas_array",
]
