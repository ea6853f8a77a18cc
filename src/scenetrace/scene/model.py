"""Immutable scene model produced by the parser and consumed by the tracer.

All records are frozen dataclasses holding plain Python tuples, so a Scene can
be shared freely between renders and never aliases caller memory. Primitives
reference their material by index into ``Scene.materials``.

Each record validates itself on construction and raises ``ValidationError``
for values the tracer cannot handle (non-positive radius, fov outside
(0, 180), up vector parallel to the view direction, ...).

Example:
    >>> from scenetrace.scene.model import Camera, Resolution, Scene
    >>> scene = Scene(
    ...     camera=Camera(eye=(0, 0, 5), target=(0, 0, 0), up=(0, 1, 0), fov=45.0),
    ...     resolution=Resolution(64, 48),
    ... )
    >>> scene.background
    (0.0, 0.0, 0.0)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Union

import numpy as np

from scenetrace.config import DEFAULT_MAX_DEPTH
from scenetrace.errors import ValidationError

Vec3 = tuple[float, float, float]
Color = tuple[float, float, float]

BLACK: Color = (0.0, 0.0, 0.0)

# Deepest bounce the tracer follows; sizes its explicit ray stack
MAX_TRACE_DEPTH = 64


def _length(v: Vec3) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


@dataclass(frozen=True)
class Camera:
    """Look-at pinhole camera.

    Attributes:
        eye: Camera position in world space.
        target: Point the camera looks at.
        up: Approximate up direction; must not be parallel to target - eye.
        fov: Vertical field of view in degrees, in (0, 180).
    """

    eye: Vec3
    target: Vec3
    up: Vec3
    fov: float

    def __post_init__(self) -> None:
        if not 0.0 < self.fov < 180.0:
            raise ValidationError(f"fov must be in (0, 180), got {self.fov}", directive="camera")

        forward = np.subtract(self.target, self.eye)
        if np.linalg.norm(forward) < 1e-9:
            raise ValidationError("eye and target must differ", directive="camera")
        if np.linalg.norm(self.up) < 1e-9:
            raise ValidationError("up vector must be non-zero", directive="camera")

        side = np.cross(forward / np.linalg.norm(forward), np.asarray(self.up) / np.linalg.norm(self.up))
        if np.linalg.norm(side) < 1e-6:
            raise ValidationError(
                "up vector must not be parallel to the view direction",
                directive="camera",
            )

    @property
    def half_height(self) -> float:
        """Half-height of the image plane at unit distance."""
        return math.tan(math.radians(self.fov) / 2.0)


@dataclass(frozen=True)
class Resolution:
    """Output image size in pixels."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValidationError(
                f"resolution must be positive, got {self.width}x{self.height}",
                directive="resolution",
            )

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class Material:
    """Phong material with mirror reflection and refraction weights.

    Attributes:
        ambient: Response to the scene ambient light.
        diffuse: Lambertian response to direct light.
        specular: Phong highlight color.
        shininess: Phong exponent (>= 0).
        reflect: Weight of the mirrored ray's color.
        ior: Index of refraction inside the object (>= 1).
        transmission: Weight of the refracted ray's color. Black is opaque.
    """

    ambient: Color = BLACK
    diffuse: Color = (1.0, 1.0, 1.0)
    specular: Color = BLACK
    shininess: float = 5.0
    reflect: Color = BLACK
    ior: float = 1.0
    transmission: Color = BLACK

    def __post_init__(self) -> None:
        if self.shininess < 0.0:
            raise ValidationError(f"shininess must be >= 0, got {self.shininess}", directive="material")
        if self.ior < 1.0:
            raise ValidationError(f"ior must be >= 1, got {self.ior}", directive="material")

    @property
    def is_reflective(self) -> bool:
        return any(c != 0.0 for c in self.reflect)

    @property
    def is_transmissive(self) -> bool:
        return any(c != 0.0 for c in self.transmission)


@dataclass(frozen=True)
class Sphere:
    center: Vec3
    radius: float
    material_id: int

    def __post_init__(self) -> None:
        if self.radius <= 0.0:
            raise ValidationError(f"radius must be > 0, got {self.radius}", directive="sphere")


@dataclass(frozen=True)
class Plane:
    """Infinite plane through ``point`` with the given (unnormalized) normal."""

    point: Vec3
    normal: Vec3
    material_id: int

    def __post_init__(self) -> None:
        if _length(self.normal) < 1e-9:
            raise ValidationError("plane normal must be non-zero", directive="plane")


Primitive = Union[Sphere, Plane]


@dataclass(frozen=True)
class PointLight:
    """Omnidirectional light.

    Intensity at distance d is ``color / (kc + kl*d + kq*d^2)``; the default
    attenuation (1, 0, 0) leaves the color unattenuated.
    """

    position: Vec3
    color: Color
    attenuation: Vec3 = (1.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        _check_attenuation(self.attenuation, "point_light")


@dataclass(frozen=True)
class DirectionalLight:
    """Light arriving from infinitely far away, travelling along ``direction``."""

    direction: Vec3
    color: Color

    def __post_init__(self) -> None:
        if _length(self.direction) < 1e-9:
            raise ValidationError("light direction must be non-zero", directive="directional_light")


@dataclass(frozen=True)
class SpotLight:
    """Point light restricted to a cone around ``direction``.

    Full intensity within ``inner`` degrees of the axis, fading linearly to
    zero at ``outer`` degrees.
    """

    position: Vec3
    direction: Vec3
    color: Color
    inner: float
    outer: float
    attenuation: Vec3 = (1.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        if _length(self.direction) < 1e-9:
            raise ValidationError("light direction must be non-zero", directive="spot_light")
        if not 0.0 <= self.inner <= self.outer <= 180.0:
            raise ValidationError(
                f"spot angles must satisfy 0 <= inner <= outer <= 180, got {self.inner}, {self.outer}",
                directive="spot_light",
            )
        _check_attenuation(self.attenuation, "spot_light")


Light = Union[PointLight, DirectionalLight, SpotLight]


def _check_attenuation(attenuation: Vec3, directive: str) -> None:
    if any(k < 0.0 for k in attenuation) or sum(attenuation) <= 0.0:
        raise ValidationError(
            "attenuation coefficients must be >= 0 with a positive sum",
            directive=directive,
        )


@dataclass(frozen=True)
class RenderSettings:
    """Global tracing settings.

    Attributes:
        max_depth: Maximum number of reflection/refraction bounces. 0 disables
            secondary rays entirely.
    """

    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValidationError(
                f"max_depth must be >= 0, got {self.max_depth}",
                directive="max_depth",
            )


@dataclass(frozen=True)
class Scene:
    """A complete, validated scene.

    Primitives and lights keep their declaration order. A scene with no
    primitives is legal and renders as the background color.
    """

    camera: Camera
    resolution: Resolution
    materials: tuple[Material, ...] = ()
    primitives: tuple[Primitive, ...] = ()
    lights: tuple[Light, ...] = ()
    ambient: Color = BLACK
    background: Color = BLACK
    settings: RenderSettings = field(default_factory=RenderSettings)

    def __post_init__(self) -> None:
        for primitive in self.primitives:
            if not 0 <= primitive.material_id < len(self.materials):
                raise ValidationError(
                    f"material {primitive.material_id} referenced before it was declared"
                )

    @property
    def spheres(self) -> tuple[Sphere, ...]:
        return tuple(p for p in self.primitives if isinstance(p, Sphere))

    @property
    def planes(self) -> tuple[Plane, ...]:
        return tuple(p for p in self.primitives if isinstance(p, Plane))

    @property
    def max_depth(self) -> int:
        return self.settings.max_depth

    def material_of(self, primitive: Primitive) -> Material:
        """Return the material attached to a primitive of this scene."""
        return self.materials[primitive.material_id]
