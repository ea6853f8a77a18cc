"""Single-frame renderer wrapping the tracer kernels.

``Renderer`` ties a parsed Scene to the tracer's global state: constructing
it uploads the scene and sizes the render target, ``render()`` traces every
pixel once, and the accessors read the image back as NumPy arrays.

Example:
    >>> from scenetrace.config import init_backend
    >>> init_backend()
    >>> from scenetrace.core.renderer import Renderer
    >>> from scenetrace.scene.parser import parse_scene_file
    >>> renderer = Renderer(parse_scene_file("examples/three_spheres.scene"))
    >>> image = renderer.render()
    >>> image.shape
    (240, 320, 3)
"""

from __future__ import annotations

import logging
import time

import numpy as np
import numpy.typing as npt

from scenetrace.core.tracer import (
    get_normalized_image_numpy,
    get_raw_image_numpy,
    render_image,
    render_pixel,
    setup_render_target,
)
from scenetrace.preview.export import apply_gamma, image_to_uint8
from scenetrace.scene.manager import SceneManager
from scenetrace.scene.model import Scene

logger = logging.getLogger(__name__)


class Renderer:
    """Renders one Scene into the tracer's color buffer.

    The tracer state is process-global, so creating a second Renderer
    replaces the scene of the first. The first renderer uploads its scene
    again on its next ``render()`` or ``trace_pixel()``.

    Attributes:
        scene: The scene being rendered.
    """

    def __init__(self, scene: Scene) -> None:
        """Upload the scene and size the render target.

        Raises:
            ValidationError: If the scene or its resolution does not fit the
                preallocated tracer fields.
        """
        self.scene = scene
        self._manager = SceneManager()
        self._rendered = False
        self._upload()

    @property
    def width(self) -> int:
        return self.scene.resolution.width

    @property
    def height(self) -> int:
        return self.scene.resolution.height

    def _upload(self) -> None:
        setup_render_target(self.width, self.height)
        self._manager.load(self.scene)

    def _ensure_resident(self) -> None:
        if self._manager.scene is not self.scene:
            self._upload()

    def render(self) -> npt.NDArray[np.float32]:
        """Trace every pixel and return the clamped (H, W, 3) image."""
        start = time.perf_counter()
        self._ensure_resident()
        render_image()
        self._rendered = True
        logger.info(
            "Rendered %dx%d in %.3fs",
            self.width,
            self.height,
            time.perf_counter() - start,
        )
        return get_normalized_image_numpy()

    def trace_pixel(self, x: int, y: int) -> tuple[float, float, float]:
        """Unclamped color of pixel (x, y), with y = 0 the top row.

        Raises:
            IndexError: If (x, y) lies outside the image.
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")
        self._ensure_resident()
        return render_pixel(x, self.height - 1 - y)

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """The rendered image clamped to [0, 1], optionally gamma encoded.

        Raises:
            RuntimeError: If ``render()`` has not been called.
        """
        self._check_rendered()
        return apply_gamma(get_normalized_image_numpy(), gamma)

    def get_raw_image_numpy(self) -> npt.NDArray[np.float32]:
        """The rendered image before clamping."""
        self._check_rendered()
        return get_raw_image_numpy()

    def get_image_uint8(self, gamma: float = 1.0) -> npt.NDArray[np.uint8]:
        self._check_rendered()
        return image_to_uint8(get_normalized_image_numpy(), gamma=gamma)

    def _check_rendered(self) -> None:
        if not self._rendered:
            raise RuntimeError("Nothing rendered yet. Call render() first.")

    def __repr__(self) -> str:
        return f"Renderer(width={self.width}, height={self.height}, rendered={self._rendered})"
