"""Parser for the line-oriented scene description format.

Each non-blank line starts with a directive keyword followed by
whitespace-separated numeric fields. ``#`` starts a comment that runs to the
end of the line.

Directives (field counts in parentheses):
    camera         eye(3) target(3) up(3) fov(1)
    resolution     width height                         (integers)
    material       ambient(3) diffuse(3) specular(3) shininess(1)
                   reflect(3) ior(1) [transmission(3)]
    sphere         center(3) radius(1)
    plane          point(3) normal(3)
    point_light    position(3) color(3) [attenuation(3)]
    directional_light  direction(3) color(3)
    spot_light     position(3) direction(3) color(3) inner(1) outer(1)
                   [attenuation(3)]
    ambient_light  color(3)
    background     color(3)
    max_depth      n                                    (integer)

``material`` sets the current material, which every later ``sphere`` and
``plane`` uses until the next ``material`` line. Only the optional
transmission color makes a material refract: a 14-field ``material`` is
opaque whatever its ``ior``. ``camera`` and ``resolution`` must appear
exactly once; the other singletons are last-writer-wins.

Example:
    >>> from scenetrace.scene.parser import parse_scene
    >>> scene = parse_scene('''
    ... camera 0 0 5  0 0 0  0 1 0  45
    ... resolution 64 48
    ... ''')
    >>> scene.resolution.width
    64
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field

from scenetrace.errors import ParseError, ValidationError
from scenetrace.scene.model import (
    BLACK,
    Camera,
    Color,
    DirectionalLight,
    Light,
    Material,
    Plane,
    PointLight,
    Primitive,
    RenderSettings,
    Resolution,
    Scene,
    Sphere,
    SpotLight,
    Vec3,
)

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"


@dataclass
class _SceneBuilder:
    """Accumulator threaded through a single parse pass."""

    camera: Camera | None = None
    resolution: Resolution | None = None
    materials: list[Material] = field(default_factory=list)
    primitives: list[Primitive] = field(default_factory=list)
    lights: list[Light] = field(default_factory=list)
    ambient: Color = BLACK
    background: Color = BLACK
    settings: RenderSettings = field(default_factory=RenderSettings)

    @property
    def current_material_id(self) -> int | None:
        return len(self.materials) - 1 if self.materials else None


def _vec(values: list[float], start: int) -> Vec3:
    return (values[start], values[start + 1], values[start + 2])


def _parse_float(token: str) -> float:
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(token)
    return value


def _parse_floats(tokens: list[str], counts: tuple[int, ...], directive: str, line_number: int) -> list[float]:
    if len(tokens) not in counts:
        expected = " or ".join(str(c) for c in counts)
        raise ParseError(
            f"expected {expected} fields, got {len(tokens)}",
            line_number=line_number,
            directive=directive,
        )
    values = []
    for token in tokens:
        try:
            values.append(_parse_float(token))
        except ValueError:
            raise ParseError(
                f"non-numeric field {token!r}",
                line_number=line_number,
                directive=directive,
            ) from None
    return values


def _parse_ints(tokens: list[str], count: int, directive: str, line_number: int) -> list[int]:
    if len(tokens) != count:
        raise ParseError(
            f"expected {count} fields, got {len(tokens)}",
            line_number=line_number,
            directive=directive,
        )
    values = []
    for token in tokens:
        try:
            values.append(int(token))
        except ValueError:
            raise ParseError(
                f"expected an integer, got {token!r}",
                line_number=line_number,
                directive=directive,
            ) from None
    return values


# =============================================================================
# Directive Handlers
# =============================================================================


def _camera(builder: _SceneBuilder, tokens: list[str], line_number: int) -> None:
    if builder.camera is not None:
        raise ParseError("camera declared more than once", line_number=line_number, directive="camera")
    v = _parse_floats(tokens, (10,), "camera", line_number)
    builder.camera = Camera(eye=_vec(v, 0), target=_vec(v, 3), up=_vec(v, 6), fov=v[9])


def _resolution(builder: _SceneBuilder, tokens: list[str], line_number: int) -> None:
    if builder.resolution is not None:
        raise ParseError(
            "resolution declared more than once",
            line_number=line_number,
            directive="resolution",
        )
    width, height = _parse_ints(tokens, 2, "resolution", line_number)
    builder.resolution = Resolution(width, height)


def _material(builder: _SceneBuilder, tokens: list[str], line_number: int) -> None:
    v = _parse_floats(tokens, (14, 17), "material", line_number)
    builder.materials.append(
        Material(
            ambient=_vec(v, 0),
            diffuse=_vec(v, 3),
            specular=_vec(v, 6),
            shininess=v[9],
            reflect=_vec(v, 10),
            ior=v[13],
            transmission=_vec(v, 14) if len(v) == 17 else BLACK,
        )
    )


def _require_material(builder: _SceneBuilder, directive: str, line_number: int) -> int:
    material_id = builder.current_material_id
    if material_id is None:
        raise ValidationError(
            "no material declared before this primitive",
            line_number=line_number,
            directive=directive,
        )
    return material_id


def _sphere(builder: _SceneBuilder, tokens: list[str], line_number: int) -> None:
    v = _parse_floats(tokens, (4,), "sphere", line_number)
    material_id = _require_material(builder, "sphere", line_number)
    builder.primitives.append(Sphere(center=_vec(v, 0), radius=v[3], material_id=material_id))


def _plane(builder: _SceneBuilder, tokens: list[str], line_number: int) -> None:
    v = _parse_floats(tokens, (6,), "plane", line_number)
    material_id = _require_material(builder, "plane", line_number)
    builder.primitives.append(Plane(point=_vec(v, 0), normal=_vec(v, 3), material_id=material_id))


def _point_light(builder: _SceneBuilder, tokens: list[str], line_number: int) -> None:
    v = _parse_floats(tokens, (6, 9), "point_light", line_number)
    attenuation = _vec(v, 6) if len(v) == 9 else (1.0, 0.0, 0.0)
    builder.lights.append(PointLight(position=_vec(v, 0), color=_vec(v, 3), attenuation=attenuation))


def _directional_light(builder: _SceneBuilder, tokens: list[str], line_number: int) -> None:
    v = _parse_floats(tokens, (6,), "directional_light", line_number)
    builder.lights.append(DirectionalLight(direction=_vec(v, 0), color=_vec(v, 3)))


def _spot_light(builder: _SceneBuilder, tokens: list[str], line_number: int) -> None:
    v = _parse_floats(tokens, (11, 14), "spot_light", line_number)
    attenuation = _vec(v, 11) if len(v) == 14 else (1.0, 0.0, 0.0)
    builder.lights.append(
        SpotLight(
            position=_vec(v, 0),
            direction=_vec(v, 3),
            color=_vec(v, 6),
            inner=v[9],
            outer=v[10],
            attenuation=attenuation,
        )
    )


def _ambient_light(builder: _SceneBuilder, tokens: list[str], line_number: int) -> None:
    builder.ambient = _vec(_parse_floats(tokens, (3,), "ambient_light", line_number), 0)


def _background(builder: _SceneBuilder, tokens: list[str], line_number: int) -> None:
    builder.background = _vec(_parse_floats(tokens, (3,), "background", line_number), 0)


def _max_depth(builder: _SceneBuilder, tokens: list[str], line_number: int) -> None:
    (depth,) = _parse_ints(tokens, 1, "max_depth", line_number)
    builder.settings = RenderSettings(max_depth=depth)


DirectiveHandler = Callable[[_SceneBuilder, list[str], int], None]

DIRECTIVES: dict[str, DirectiveHandler] = {
    "camera": _camera,
    "resolution": _resolution,
    "material": _material,
    "sphere": _sphere,
    "plane": _plane,
    "point_light": _point_light,
    "directional_light": _directional_light,
    "spot_light": _spot_light,
    "ambient_light": _ambient_light,
    "background": _background,
    "max_depth": _max_depth,
}


# =============================================================================
# Public API
# =============================================================================


def parse_scene(text: str) -> Scene:
    """Parse scene description text into a validated Scene.

    A ``material`` line without the trailing transmission triple gets black
    transmission, so its ``ior`` never takes effect and the material is
    opaque.

    Args:
        text: The scene description.

    Returns:
        The parsed scene.

    Raises:
        ParseError: On unknown directives, wrong field counts, non-numeric
            fields, duplicate camera/resolution, or a missing camera or
            resolution.
        ValidationError: On values outside their valid range, or a primitive
            declared before any material.
    """
    builder = _SceneBuilder()

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.split(COMMENT_PREFIX, 1)[0].strip()
        if not line:
            continue

        keyword, *tokens = line.split()
        handler = DIRECTIVES.get(keyword)
        if handler is None:
            raise ParseError(f"unknown directive {keyword!r}", line_number=line_number, directive=keyword)

        try:
            handler(builder, tokens, line_number)
        except ValidationError as e:
            if e.line_number is not None:
                raise
            raise ValidationError(e.message, line_number=line_number, directive=keyword) from None

    if builder.camera is None:
        raise ParseError("missing required directive", directive="camera")
    if builder.resolution is None:
        raise ParseError("missing required directive", directive="resolution")

    scene = Scene(
        camera=builder.camera,
        resolution=builder.resolution,
        materials=tuple(builder.materials),
        primitives=tuple(builder.primitives),
        lights=tuple(builder.lights),
        ambient=builder.ambient,
        background=builder.background,
        settings=builder.settings,
    )
    logger.debug(
        "Parsed scene: %dx%d, %d primitives, %d lights, %d materials",
        scene.resolution.width,
        scene.resolution.height,
        len(scene.primitives),
        len(scene.lights),
        len(scene.materials),
    )
    return scene


def parse_scene_file(path: str) -> Scene:
    """Read a UTF-8 scene file and parse it."""
    with open(path, encoding="utf-8") as f:
        return parse_scene(f.read())
