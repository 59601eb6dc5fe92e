"""Fly-through preview window using Taichi GGUI.

Each frame moves the camera eye along -z, re-renders the world at a low
sample count and presents the result. The eye for frame ``k`` is

    (x0, y0, z0 - k * step)

starting from (8, 2, 10) by default, while the camera keeps looking at the
same target.

Example:
    >>> import stochray
    >>> stochray.init()
    >>> from stochray.preview.interactive import FlythroughPreview
    >>> from stochray.scene.random_spheres import create_random_spheres_scene
    >>> world, camera = create_random_spheres_scene(n=10, seed=1)
    >>> preview = FlythroughPreview(world, camera, 320, 240, samples_per_pixel=4)
    >>> preview.run(frames=100)
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from stochray.core.ray import DEFAULT_MAX_DEPTH

if TYPE_CHECKING:
    import numpy.typing as npt

    from stochray.camera.thin_lens import Camera
    from stochray.scene.world import World

logger = logging.getLogger(__name__)

DEFAULT_START_EYE = (8.0, 2.0, 10.0)
DEFAULT_STEP = 0.2


def eye_for_frame(
    start: tuple[float, float, float],
    frame: int,
    step: float = DEFAULT_STEP,
) -> tuple[float, float, float]:
    """Camera eye position for a given frame of the fly-through."""
    return (float(start[0]), float(start[1]), float(start[2]) - frame * step)


def to_canvas_array(
    pixels: npt.ArrayLike,
    width: int,
    height: int,
) -> npt.NDArray[np.float32]:
    """Convert a flat pixel buffer to the (width, height, 3) canvas layout.

    Taichi canvases index pixels as (x, y) with the origin at the bottom-left,
    while rendered buffers are row-major with the top row first.
    """
    image = np.asarray(pixels, dtype=np.float32)
    if image.shape != (width * height, 3):
        raise ValueError(
            f"Pixel buffer shape {image.shape} doesn't match {width}x{height} image"
        )
    image = image.reshape(height, width, 3)
    return np.ascontiguousarray(np.transpose(np.flipud(image), (1, 0, 2)))


class FlythroughPreview:
    """Interactive window that re-renders a world while moving the camera.

    Attributes:
        world: The scene being rendered.
        camera: Camera for the current frame.
        width: Window width in pixels.
        height: Window height in pixels.
        samples_per_pixel: Samples per pixel for each frame.
        frame: Index of the next frame to render.
    """

    def __init__(
        self,
        world: World,
        camera: Camera,
        width: int,
        height: int,
        samples_per_pixel: int = 4,
        *,
        start_eye: tuple[float, float, float] = DEFAULT_START_EYE,
        step: float = DEFAULT_STEP,
        max_depth: int = DEFAULT_MAX_DEPTH,
        title: str = "stochray",
    ) -> None:
        self.world = world
        self.width = width
        self.height = height
        self.samples_per_pixel = samples_per_pixel
        self.max_depth = max_depth
        self.start_eye = tuple(float(c) for c in start_eye)
        self.step = step
        self.frame = 0
        self.camera = camera.with_eye(self.start_eye)
        self._title = title

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        # Shape is (width, height) to match canvas (x, y) indexing
        self.display_image = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))

    def _initialize_window(self) -> None:
        if self._window is not None:
            return
        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        """Get the canvas for rendering."""
        self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    def render_frame(self) -> npt.NDArray[np.float64]:
        """Render the current frame into the display buffer and advance.

        This does not touch the window, so it can run headless.

        Returns:
            The rendered pixels, shape (width * height, 3).
        """
        self.camera = self.camera.with_eye(eye_for_frame(self.start_eye, self.frame, self.step))
        pixels = self.camera.render(
            self.world,
            self.width,
            self.height,
            self.samples_per_pixel,
            max_depth=self.max_depth,
        )
        self.display_image.from_numpy(to_canvas_array(pixels, self.width, self.height))
        logger.debug("Frame %d rendered with eye %s", self.frame, self.camera.eye)
        self.frame += 1
        return pixels

    def is_running(self) -> bool:
        """Check if the window is still open."""
        return self.window.running

    def show_frame(self) -> None:
        """Present the display buffer."""
        self.canvas.set_image(self.display_image)
        self.window.show()

    def run(self, frames: int | None = None) -> None:
        """Render and present frames until the window closes.

        Args:
            frames: Stop after this many frames (None runs until closed).
        """
        self._initialize_window()
        logger.info("Starting fly-through at eye %s", self.start_eye)

        while self.is_running() and (frames is None or self.frame < frames):
            self.render_frame()
            self.show_frame()

    def close(self) -> None:
        """Close the preview window."""
        if self._window is not None:
            self._window.running = False

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering."""
        if os.name == "nt":
            return True
        if os.uname().sysname == "Darwin":
            return not (os.environ.get("SSH_CONNECTION") and not os.environ.get("DISPLAY"))
        return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))

