"""Pinhole camera model for primary ray generation.

The camera builds an orthonormal basis (u, v, w) from the scene's camera
record:
    - w: points from the target toward the eye (opposite view direction)
    - u: points right in the image plane
    - v: points up in the image plane

The image plane sits at unit distance in front of the eye. Its half-height is
tan(fov / 2) and its half-width is that times the image aspect ratio, so
pixels are square in world space and a sphere on the view axis projects to a
circle at any resolution.

Pixel (i, j) maps to normalized coordinates u = (i + 0.5) / width and
v = (j + 0.5) / height with j = 0 at the bottom row; the tracer flips rows
when reading the image out.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from scenetrace.camera.pinhole import setup_camera
    >>> from scenetrace.scene.model import Camera, Resolution
    >>> setup_camera(
    ...     Camera(eye=(0, 0, 3), target=(0, 0, 0), up=(0, 1, 0), fov=60.0),
    ...     Resolution(320, 240),
    ... )
"""

import numpy as np
import taichi as ti

from scenetrace.core.ray import Ray, make_ray, vec3
from scenetrace.scene.model import Camera, Resolution

# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward

_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python scope)
# =============================================================================


def compute_camera_basis(camera: Camera) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return the (u, v, w) basis for a camera as float64 arrays."""
    eye = np.asarray(camera.eye, dtype=np.float64)
    target = np.asarray(camera.target, dtype=np.float64)
    up = np.asarray(camera.up, dtype=np.float64)

    w = eye - target
    w /= np.linalg.norm(w)

    u = np.cross(up, w)
    u /= np.linalg.norm(u)

    v = np.cross(w, u)
    return u, v, w


def setup_camera(camera: Camera, resolution: Resolution) -> None:
    """Upload camera state for the given output resolution.

    Must be called from Python scope before rendering.
    """
    viewport_height = 2.0 * camera.half_height
    viewport_width = resolution.aspect_ratio * viewport_height

    eye = np.asarray(camera.eye, dtype=np.float64)
    u, v, w = compute_camera_basis(camera)

    horizontal = viewport_width * u
    vertical = viewport_height * v
    lower_left = eye - w - horizontal / 2.0 - vertical / 2.0

    _camera_origin[None] = eye.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Ray from the eye through normalized image coordinates (u, v).

    u runs 0..1 left to right, v runs 0..1 bottom to top.
    """
    point_on_viewport = (
        _lower_left_corner[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]
    )
    return make_ray(_camera_origin[None], point_on_viewport - _camera_origin[None])


@ti.func
def get_pixel_ray(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Ray through the center of pixel (i, j), j = 0 being the bottom row."""
    u = (ti.cast(pixel_i, ti.f32) + 0.5) / ti.cast(width, ti.f32)
    v = (ti.cast(pixel_j, ti.f32) + 0.5) / ti.cast(height, ti.f32)
    return get_ray(u, v)


@ti.func
def get_camera_origin() -> vec3:
    return _camera_origin[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Current camera state as plain tuples, for debugging and tests."""
    fields = {
        "origin": _camera_origin,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "horizontal": _viewport_horizontal,
        "vertical": _viewport_vertical,
        "lower_left": _lower_left_corner,
    }
    info = {}
    for name, f in fields.items():
        value = f[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info

