"""Light storage and per-light illumination queries.

Point, directional and spot lights share one Structure-of-Arrays layout; the
``light_types`` field selects how the remaining fields are interpreted.

Light color is an unbounded RGB intensity. Point and spot lights are scaled by
``1 / (kc + kl*d + kq*d^2)``; the default coefficients (1, 0, 0) leave the
color unattenuated. Directional lights are never attenuated.
"""

import math
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from scenetrace.errors import ValidationError
from scenetrace.scene.model import DirectionalLight, Light, PointLight, SpotLight

vec3 = tm.vec3


class LightType(IntEnum):
    POINT = 0
    DIRECTIONAL = 1
    SPOT = 2


MAX_LIGHTS = 64

# Shadow rays toward directional lights are unbounded
INFINITE_DISTANCE = 1e10

light_types = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_directions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)  # Unit, direction light travels
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_attenuations = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_cone_angles = ti.Vector.field(2, dtype=ti.f32, shape=MAX_LIGHTS)  # (inner, outer) radians
num_lights = ti.field(dtype=ti.i32, shape=())

# Scene-wide ambient light
ambient_light = ti.Vector.field(3, dtype=ti.f32, shape=())


def clear_lights() -> None:
    """Remove all lights and reset the ambient light to black."""
    num_lights[None] = 0
    ambient_light[None] = (0.0, 0.0, 0.0)


def set_ambient_light(color: tuple[float, float, float]) -> None:
    ambient_light[None] = color


def _unit(v: tuple[float, float, float]) -> list[float]:
    length = math.sqrt(sum(c * c for c in v))
    return [c / length for c in v]


def add_light(light: Light) -> int:
    """Store a light from the scene model and return its index.

    Raises:
        ValidationError: If MAX_LIGHTS lights are already stored.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise ValidationError(f"too many lights (maximum {MAX_LIGHTS})")

    position = (0.0, 0.0, 0.0)
    direction = [0.0, 0.0, -1.0]
    attenuation = (1.0, 0.0, 0.0)
    cone = (math.pi, math.pi)

    if isinstance(light, PointLight):
        light_type = LightType.POINT
        position = light.position
        attenuation = light.attenuation
    elif isinstance(light, DirectionalLight):
        light_type = LightType.DIRECTIONAL
        direction = _unit(light.direction)
    elif isinstance(light, SpotLight):
        light_type = LightType.SPOT
        position = light.position
        direction = _unit(light.direction)
        attenuation = light.attenuation
        cone = (math.radians(light.inner), math.radians(light.outer))
    else:
        raise TypeError(f"Unsupported light type: {type(light).__name__}")

    light_types[idx] = int(light_type)
    light_positions[idx] = position
    light_directions[idx] = direction
    light_colors[idx] = light.color
    light_attenuations[idx] = attenuation
    light_cone_angles[idx] = cone
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    return int(num_lights[None])


@ti.func
def _spot_falloff(cos_angle: ti.f32, inner: ti.f32, outer: ti.f32) -> ti.f32:
    """1 inside the inner cone, 0 outside the outer cone, linear in between."""
    angle = tm.acos(tm.clamp(cos_angle, -1.0, 1.0))
    factor = 1.0
    if angle > inner:
        if angle >= outer:
            factor = 0.0
        else:
            factor = 1.0 - (angle - inner) / (outer - inner)
    return factor


@ti.func
def sample_light(light_index: ti.i32, point: vec3):
    """Illumination arriving at ``point`` from one light, ignoring occlusion.

    Returns:
        A tuple ``(to_light, distance, intensity)``: the unit direction from
        the point toward the light, the distance to the light
        (INFINITE_DISTANCE for directional lights) and the RGB intensity
        after attenuation and spot falloff.
    """
    light_type = light_types[light_index]
    color = light_colors[light_index]

    to_light = -light_directions[light_index]
    distance = INFINITE_DISTANCE
    intensity = color

    if light_type != int(LightType.DIRECTIONAL):
        offset = light_positions[light_index] - point
        distance = tm.length(offset)
        to_light = offset / tm.max(distance, 1e-12)

        k = light_attenuations[light_index]
        intensity = color / (k.x + k.y * distance + k.z * distance * distance)

        if light_type == int(LightType.SPOT):
            cone = light_cone_angles[light_index]
            cos_angle = tm.dot(-to_light, light_directions[light_index])
            intensity *= _spot_falloff(cos_angle, cone.x, cone.y)

    return to_light, distance, intensity
