"""String-in, string-out entry points.

``render_scene`` is the primary entry point: it takes scene description text
and returns a base64-encoded PNG suitable for a ``data:`` URI. The scene
text is parsed and validated completely before anything is rendered, so a
malformed scene raises ``ParseError`` or ``ValidationError`` and no image is
produced.

Taichi is initialized on first use (see ``scenetrace.config``). Modules that
declare Taichi fields are imported only after that, inside the functions.

The tracer keeps its scene in process-global fields, so renders from
several threads are serialized: each call uploads, traces and reads back its
own image while holding a module lock.

Example:
    >>> from scenetrace.api import render_scene, to_data_uri
    >>> b64 = render_scene('''
    ... camera 0 0 5  0 0 0  0 1 0  45
    ... resolution 32 24
    ... background 0.2 0.3 0.4
    ... ''')
    >>> to_data_uri(b64)[:22]
    'data:image/png;base64,'
"""

from __future__ import annotations

import logging
import threading

import numpy as np
import numpy.typing as npt

from scenetrace.config import RenderConfig, init_backend
from scenetrace.preview.export import encode_png, encode_png_base64
from scenetrace.scene.model import Scene
from scenetrace.scene.parser import parse_scene

logger = logging.getLogger(__name__)

DATA_URI_PREFIX = "data:image/png;base64,"

# Held from scene upload through image readout; the tracer fields are global
_render_lock = threading.Lock()


def _render(scene: Scene, config: RenderConfig) -> npt.NDArray[np.float32]:
    with _render_lock:
        init_backend(config)

        # Field-declaring modules must be imported after the backend is up
        from scenetrace.core.renderer import Renderer

        renderer = Renderer(scene)
        return renderer.render()


def render_scene_to_array(text: str, config: RenderConfig | None = None) -> npt.NDArray[np.float32]:
    """Render scene text to an (H, W, 3) float32 image in [0, 1], top row first.

    Raises:
        ParseError: If the scene text is malformed.
        ValidationError: If the scene is invalid or does not fit the tracer.
    """
    config = config or RenderConfig()
    scene = parse_scene(text)
    return _render(scene, config)


def render_scene_to_png(text: str, config: RenderConfig | None = None) -> bytes:
    """Render scene text to PNG bytes.

    Raises:
        ParseError: If the scene text is malformed.
        ValidationError: If the scene is invalid or does not fit the tracer.
    """
    config = config or RenderConfig()
    scene = parse_scene(text)
    image = _render(scene, config)
    return encode_png(image, scene.resolution.width, scene.resolution.height, gamma=config.gamma)


def render_scene(text: str, config: RenderConfig | None = None) -> str:
    """Render scene text to a base64-encoded PNG.

    Args:
        text: Scene description (see ``scenetrace.scene.parser``).
        config: Optional render configuration.

    Returns:
        Standard base64 text of the PNG image.

    Raises:
        ParseError: If the scene text is malformed.
        ValidationError: If the scene is invalid or does not fit the tracer.
    """
    config = config or RenderConfig()
    scene = parse_scene(text)
    image = _render(scene, config)
    encoded = encode_png_base64(image, scene.resolution.width, scene.resolution.height, gamma=config.gamma)
    logger.debug("Encoded %d base64 characters", len(encoded))
    return encoded


def to_data_uri(encoded_png: str) -> str:
    """Wrap base64 PNG text in a ``data:`` URI."""
    return DATA_URI_PREFIX + encoded_png
