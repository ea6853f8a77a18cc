"""Tests for the Renderer class and the scene manager.

Tests cover:
- Uploading scenes into the tracer fields
- Capacity checks
- Renderer accessors and single-pixel tracing
- Switching between renderers sharing the global fields
"""

import logging

import numpy as np
import pytest

from scenetrace.errors import ValidationError
from scenetrace.scene.parser import parse_scene

SCENE = """
camera 0 0 5  0 0 0  0 1 0  45
resolution 12 8
background 0.1 0.2 0.3
ambient_light 0.5 0.5 0.5
point_light 2 2 5  1 1 1
directional_light 0 -1 0  0.2 0.2 0.2
material 0.2 0.2 0.2  0.7 0.3 0.3  0.5 0.5 0.5  16  0 0 0  1
sphere 0 0 0 1
plane 0 -1 0  0 1 0
max_depth 3
"""


@pytest.fixture
def scene():
    return parse_scene(SCENE)


class TestSceneManager:
    """Tests for uploading scenes."""

    def test_load_counts(self, scene):
        from scenetrace.materials.phong import get_material_count
        from scenetrace.scene.manager import SceneManager

        manager = SceneManager()
        manager.load(scene)

        assert manager.scene is scene
        assert manager.summary() == {"spheres": 1, "planes": 1, "lights": 2, "max_depth": 3}
        assert get_material_count() == 1

    def test_load_replaces_previous_scene(self, scene):
        from scenetrace.scene.manager import SceneManager

        manager = SceneManager()
        manager.load(scene)
        manager.load(parse_scene("camera 0 0 5 0 0 0 0 1 0 45\nresolution 4 4\n"))

        assert manager.summary()["spheres"] == 0
        assert manager.summary()["lights"] == 0

    def test_clear(self, scene):
        from scenetrace.scene.manager import SceneManager

        manager = SceneManager()
        manager.load(scene)
        manager.clear()

        assert manager.scene is None
        assert manager.summary()["spheres"] == 0

    def test_capacity_check(self, scene):
        """Test that a scene larger than the fields is rejected up front."""
        from scenetrace.scene.manager import SceneCapacity, check_capacity

        check_capacity(scene)
        with pytest.raises(ValidationError, match="spheres"):
            check_capacity(scene, SceneCapacity(spheres=0))

    def test_uploaded_globals(self, scene):
        from scenetrace.core.tracer import _background, _max_depth
        from scenetrace.scene.lights import ambient_light
        from scenetrace.scene.manager import SceneManager

        SceneManager().load(scene)

        assert tuple(_background.to_numpy()) == pytest.approx((0.1, 0.2, 0.3))
        assert tuple(ambient_light.to_numpy()) == pytest.approx((0.5, 0.5, 0.5))
        assert _max_depth[None] == 3


class TestRenderTarget:
    """Tests for render target sizing."""

    def test_oversized_resolution(self):
        from scenetrace.core.tracer import MAX_IMAGE_WIDTH, setup_render_target

        with pytest.raises(ValidationError):
            setup_render_target(MAX_IMAGE_WIDTH + 1, 10)

    def test_oversized_scene_rejected_by_renderer(self):
        from scenetrace.core.renderer import Renderer

        with pytest.raises(ValidationError):
            Renderer(parse_scene("camera 0 0 5 0 0 0 0 1 0 45\nresolution 4096 16\n"))

    def test_negative_max_depth_rejected(self):
        from scenetrace.core.tracer import set_max_depth

        with pytest.raises(ValidationError):
            set_max_depth(-1)

    def test_deep_max_depth_clamped(self, caplog):
        """Test that a depth beyond the ray stack is clamped with a warning."""
        from scenetrace.core.tracer import _max_depth, set_max_depth
        from scenetrace.scene.model import MAX_TRACE_DEPTH

        with caplog.at_level(logging.WARNING, logger="scenetrace.core.tracer"):
            set_max_depth(MAX_TRACE_DEPTH + 36)

        assert _max_depth[None] == MAX_TRACE_DEPTH
        assert "clamping" in caplog.text

        set_max_depth(12)
        assert _max_depth[None] == 12


class TestRenderer:
    """Tests for the Renderer class."""

    def test_render_shape_and_range(self, scene):
        from scenetrace.core.renderer import Renderer

        renderer = Renderer(scene)
        image = renderer.render()

        assert image.shape == (8, 12, 3)
        assert image.dtype == np.float32
        assert image.min() >= 0.0
        assert image.max() <= 1.0
        assert not np.any(np.isnan(image))

    def test_accessors_require_render(self, scene):
        from scenetrace.core.renderer import Renderer

        renderer = Renderer(scene)
        with pytest.raises(RuntimeError):
            renderer.get_image_numpy()

    def test_trace_pixel_matches_image(self, scene):
        """Test that trace_pixel uses the same top-row-first convention."""
        from scenetrace.core.renderer import Renderer

        renderer = Renderer(scene)
        renderer.render()
        raw = renderer.get_raw_image_numpy()

        for x, y in ((0, 0), (6, 4), (11, 7), (3, 6)):
            assert renderer.trace_pixel(x, y) == pytest.approx(tuple(raw[y, x]), abs=1e-5)

    def test_uint8_and_gamma(self, scene):
        from scenetrace.core.renderer import Renderer

        renderer = Renderer(scene)
        renderer.render()

        linear = renderer.get_image_uint8()
        encoded = renderer.get_image_uint8(gamma=2.2)

        assert linear.dtype == np.uint8
        assert linear.shape == (8, 12, 3)
        # Gamma encoding brightens mid-tones
        assert encoded.astype(int).sum() >= linear.astype(int).sum()

    def test_second_renderer_does_not_leak_into_first(self):
        """Test that a renderer re-uploads its scene after another one ran."""
        from scenetrace.core.renderer import Renderer

        red = Renderer(parse_scene("camera 0 0 5 0 0 0 0 1 0 45\nresolution 4 4\nbackground 1 0 0\n"))
        blue = Renderer(parse_scene("camera 0 0 5 0 0 0 0 1 0 45\nresolution 6 2\nbackground 0 0 1\n"))

        assert np.allclose(blue.render(), [0.0, 0.0, 1.0])
        image = red.render()
        assert image.shape == (4, 4, 3)
        assert np.allclose(image, [1.0, 0.0, 0.0])

    def test_trace_pixel_out_of_range(self, scene):
        from scenetrace.core.renderer import Renderer

        renderer = Renderer(scene)
        for x, y in ((-1, 0), (12, 0), (0, -1), (0, 8)):
            with pytest.raises(IndexError):
                renderer.trace_pixel(x, y)

    def test_repr(self, scene):
        from scenetrace.core.renderer import Renderer

        assert repr(Renderer(scene)) == "Renderer(width=12, height=8, rendered=False)"
