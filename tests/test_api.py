"""Tests for the string-in, string-out entry points.

Tests cover:
- Base64 PNG output of a full render
- Array and PNG-bytes variants
- Errors raised before any rendering
- Data URI wrapping
- Concurrent calls from several threads
"""

import base64
import io
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
from PIL import Image as PILImage

from scenetrace.api import (
    DATA_URI_PREFIX,
    render_scene,
    render_scene_to_array,
    render_scene_to_png,
    to_data_uri,
)
from scenetrace.config import RenderConfig
from scenetrace.errors import ParseError, ValidationError

SCENE = """
camera 0 0 5  0 0 0  0 1 0  45
resolution 16 10
background 0.2 0.4 0.6
ambient_light 0.2 0.2 0.2
point_light 3 3 5  1 1 1
material 0.5 0.5 0.5  0.8 0.2 0.2  0.5 0.5 0.5  16  0 0 0  1
sphere 0 0 0 1
"""


class TestRenderScene:
    """Tests for render_scene."""

    def test_returns_base64_png(self):
        """Test that the result decodes to a PNG of the scene resolution."""
        encoded = render_scene(SCENE)

        assert isinstance(encoded, str)
        data = base64.b64decode(encoded, validate=True)
        with PILImage.open(io.BytesIO(data)) as image:
            assert image.format == "PNG"
            assert image.size == (16, 10)
            corner = image.convert("RGB").getpixel((0, 0))

        # 0.2, 0.4, 0.6 quantized
        assert corner == (51, 102, 153)

    def test_repeated_calls_are_identical(self):
        assert render_scene(SCENE) == render_scene(SCENE)

    def test_missing_camera(self):
        """Test that a scene without a camera produces no image."""
        with pytest.raises(ParseError):
            render_scene("resolution 8 8\nbackground 1 1 1\n")

    def test_unknown_directive(self):
        with pytest.raises(ParseError):
            render_scene(SCENE + "torus 0 0 0 1 0.5\n")

    def test_validation_error(self):
        with pytest.raises(ValidationError):
            render_scene(SCENE + "sphere 0 0 0 -2\n")

    def test_resolution_too_large(self):
        with pytest.raises(ValidationError):
            render_scene(SCENE.replace("resolution 16 10", "resolution 4000 10"))

    def test_gamma_config(self):
        """Test that the configured gamma is applied during encoding."""
        linear = render_scene_to_png(SCENE)
        encoded = render_scene_to_png(SCENE, RenderConfig(gamma=2.2))

        with PILImage.open(io.BytesIO(linear)) as a, PILImage.open(io.BytesIO(encoded)) as b:
            assert b.getpixel((0, 0))[0] > a.getpixel((0, 0))[0]


class TestVariants:
    """Tests for array and bytes entry points."""

    def test_render_scene_to_array(self):
        image = render_scene_to_array(SCENE)

        assert image.shape == (10, 16, 3)
        assert np.allclose(image[0, 0], [0.2, 0.4, 0.6], atol=1e-6)
        # The sphere is lit: center differs from the background
        assert not np.allclose(image[5, 8], [0.2, 0.4, 0.6], atol=1e-3)

    def test_render_scene_to_png(self):
        data = render_scene_to_png(SCENE)
        assert data[:8] == b"\x89PNG\r\n\x1a\n"

    def test_to_data_uri(self):
        assert to_data_uri("abcd") == DATA_URI_PREFIX + "abcd"
        assert to_data_uri("abcd").startswith("data:image/png;base64,")


class TestConcurrentCalls:
    """Tests for render calls made from several threads at once."""

    def test_threads_get_their_own_images(self):
        """Test that concurrent renders of different scenes do not mix."""
        red_sphere = (
            "camera 0 0 5  0 0 0  0 1 0  45\nresolution 12 9\nambient_light 1 1 1\n"
            "material 1 0 0  0 0 0  0 0 0  1  0 0 0  1\nsphere 0 0 0 1.5\n"
        )
        empty_blue = "camera 0 0 5  0 0 0  0 1 0  45\nresolution 7 5\nbackground 0 0 1\n"
        scenes = [red_sphere, empty_blue] * 10

        expected = {text: render_scene_to_array(text) for text in (red_sphere, empty_blue)}

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(render_scene_to_array, scenes))

        for text, image in zip(scenes, results):
            assert np.array_equal(image, expected[text])
