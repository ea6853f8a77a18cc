"""Unit tests for light storage, light sampling and local shading.

Tests cover:
- Point light attenuation
- Directional lights
- Spot light cone falloff
- Phong specular term
"""

import math

import pytest
import taichi as ti

from scenetrace.scene.model import DirectionalLight, PointLight, SpotLight


def _sample(light_index, point):
    from scenetrace.scene.lights import sample_light, vec3

    to_light = ti.Vector.field(3, dtype=ti.f32, shape=())
    distance = ti.field(dtype=ti.f32, shape=())
    intensity = ti.Vector.field(3, dtype=ti.f32, shape=())
    px, py, pz = point

    @ti.kernel
    def test_kernel():
        d, dist, i = sample_light(light_index, vec3(px, py, pz))
        to_light[None] = d
        distance[None] = dist
        intensity[None] = i

    test_kernel()
    return to_light.to_numpy(), float(distance[None]), intensity.to_numpy()


class TestLightStorage:
    """Tests for adding and clearing lights."""

    def test_add_and_clear(self):
        from scenetrace.scene.lights import add_light, clear_lights, get_light_count

        assert add_light(PointLight(position=(0, 0, 0), color=(1, 1, 1))) == 0
        assert add_light(DirectionalLight(direction=(0, -1, 0), color=(1, 1, 1))) == 1
        assert get_light_count() == 2

        clear_lights()
        assert get_light_count() == 0

    def test_capacity(self):
        from scenetrace.errors import ValidationError
        from scenetrace.scene.lights import MAX_LIGHTS, add_light, num_lights

        num_lights[None] = MAX_LIGHTS
        with pytest.raises(ValidationError):
            add_light(PointLight(position=(0, 0, 0), color=(1, 1, 1)))


class TestPointLight:
    """Tests for point light sampling."""

    def test_unattenuated(self):
        """Test that the default attenuation leaves the color unchanged."""
        from scenetrace.scene.lights import add_light

        add_light(PointLight(position=(0.0, 4.0, 0.0), color=(2.0, 1.0, 0.5)))
        to_light, distance, intensity = _sample(0, (0.0, 0.0, 0.0))

        assert to_light == pytest.approx([0.0, 1.0, 0.0], abs=1e-6)
        assert distance == pytest.approx(4.0, abs=1e-5)
        assert intensity == pytest.approx([2.0, 1.0, 0.5], abs=1e-6)

    def test_inverse_square(self):
        """Test intensity = color / (kc + kl*d + kq*d^2)."""
        from scenetrace.scene.lights import add_light

        add_light(PointLight(position=(0.0, 0.0, 3.0), color=(1.0, 1.0, 1.0), attenuation=(1.0, 0.5, 0.25)))
        _, _, intensity = _sample(0, (0.0, 0.0, 0.0))

        expected = 1.0 / (1.0 + 0.5 * 3.0 + 0.25 * 9.0)
        assert intensity == pytest.approx([expected] * 3, abs=1e-6)


class TestDirectionalLight:
    """Tests for directional light sampling."""

    def test_direction_and_distance(self):
        """Test that to_light opposes the travel direction at infinite distance."""
        from scenetrace.scene.lights import INFINITE_DISTANCE, add_light

        add_light(DirectionalLight(direction=(0.0, -2.0, 0.0), color=(0.5, 0.5, 0.5)))
        to_light, distance, intensity = _sample(0, (10.0, 0.0, -3.0))

        assert to_light == pytest.approx([0.0, 1.0, 0.0], abs=1e-6)
        assert distance == pytest.approx(INFINITE_DISTANCE, rel=1e-5)
        assert intensity == pytest.approx([0.5, 0.5, 0.5], abs=1e-6)


class TestSpotLight:
    """Tests for spot light cone falloff."""

    def _add_spot(self):
        from scenetrace.scene.lights import add_light

        add_light(
            SpotLight(
                position=(0.0, 0.0, 0.0),
                direction=(0.0, -1.0, 0.0),
                color=(1.0, 1.0, 1.0),
                inner=10.0,
                outer=30.0,
            )
        )

    @staticmethod
    def _point_at_angle(degrees):
        a = math.radians(degrees)
        return (math.sin(a), -math.cos(a), 0.0)

    def test_inside_inner_cone(self):
        self._add_spot()
        _, _, intensity = _sample(0, self._point_at_angle(5.0))
        assert intensity == pytest.approx([1.0, 1.0, 1.0], abs=1e-5)

    def test_outside_outer_cone(self):
        self._add_spot()
        _, _, intensity = _sample(0, self._point_at_angle(45.0))
        assert intensity == pytest.approx([0.0, 0.0, 0.0], abs=1e-6)

    def test_linear_falloff(self):
        """Test that halfway between the cones gives half intensity."""
        self._add_spot()
        _, _, intensity = _sample(0, self._point_at_angle(20.0))
        assert intensity == pytest.approx([0.5, 0.5, 0.5], abs=1e-3)


class TestPhongSpecular:
    """Tests for the specular term."""

    def _specular(self, to_light, normal, view, shininess):
        from scenetrace.core.shading import phong_specular, vec3

        result = ti.field(dtype=ti.f32, shape=())
        lx, ly, lz = to_light
        nx, ny, nz = normal
        vx, vy, vz = view

        @ti.kernel
        def test_kernel():
            result[None] = phong_specular(vec3(lx, ly, lz), vec3(nx, ny, nz), vec3(vx, vy, vz), shininess)

        test_kernel()
        return float(result[None])

    def test_mirror_direction_is_full(self):
        """Test R.V = 1 when viewing along the mirrored light direction."""
        assert self._specular((0.0, 0.0, 1.0), (0.0, 0.0, 1.0), (0.0, 0.0, 1.0), 50.0) == pytest.approx(1.0)

    def test_exponent(self):
        """Test max(0, R.V)^n with R.V = cos(60 degrees)."""
        view = (math.sin(math.radians(60.0)), 0.0, math.cos(math.radians(60.0)))
        result = self._specular((0.0, 0.0, 1.0), (0.0, 0.0, 1.0), view, 2.0)
        assert result == pytest.approx(0.25, abs=1e-5)

    def test_facing_away_is_zero(self):
        """Test that R.V <= 0 gives no highlight."""
        assert self._specular((0.0, 0.0, 1.0), (0.0, 0.0, 1.0), (0.0, 0.0, -1.0), 8.0) == 0.0
