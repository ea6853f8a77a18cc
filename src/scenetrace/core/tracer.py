"""Whitted-style recursive ray tracer.

This module implements the main rendering kernel: one camera ray per pixel
center, closest-hit intersection, local Phong shading with hard shadows, and
mirror reflection plus Snell refraction up to the scene's ``max_depth``.

Taichi functions cannot recurse, so secondary rays are kept on an explicit
per-pixel stack. Each stacked entry carries its own origin, direction,
accumulated path weight and bounce depth:

    - a ray that escapes adds ``weight * background``
    - a ray that hits adds ``weight * local_shading`` and, while
      ``depth < max_depth``, pushes a reflected ray weighted by the
      material's reflectivity and a refracted ray weighted by its
      transmission (mirrored instead on total internal reflection)

Depth grows by one per push, so a stack of ``MAX_TRACE_DEPTH + 1`` entries is
always enough. Deeper limits are clamped to ``MAX_TRACE_DEPTH``. Colors
accumulate unclamped; clamping happens only when the image is read out.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from scenetrace.core.tracer import setup_render_target, render_image
    >>> setup_render_target(64, 48)
    >>> render_image()
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from scenetrace.camera.pinhole import get_pixel_ray
from scenetrace.config import DEFAULT_MAX_DEPTH
from scenetrace.core.ray import length_squared, offset_origin, reflect, refract
from scenetrace.core.shading import shade_local
from scenetrace.errors import ValidationError
from scenetrace.materials.phong import get_material
from scenetrace.scene.intersection import intersect_scene
from scenetrace.scene.model import MAX_TRACE_DEPTH

logger = logging.getLogger(__name__)

vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Offset of secondary ray origins along the surface normal
RAY_EPSILON = 1e-4

# Valid hit interval for camera and secondary rays
T_MIN = 1e-4
T_MAX = 1e10

STACK_SIZE = MAX_TRACE_DEPTH + 1

# =============================================================================
# Scene Globals
# =============================================================================

_background = ti.Vector.field(3, dtype=ti.f32, shape=())
_max_depth = ti.field(dtype=ti.i32, shape=())


def set_background(color: tuple[float, float, float]) -> None:
    _background[None] = color


def set_max_depth(depth: int) -> None:
    """Set the bounce limit for secondary rays.

    Depths beyond MAX_TRACE_DEPTH are clamped to it.

    Raises:
        ValidationError: If depth is negative.
    """
    if depth < 0:
        raise ValidationError(f"max_depth must be >= 0, got {depth}", directive="max_depth")
    if depth > MAX_TRACE_DEPTH:
        logger.warning("max_depth %d exceeds the tracer limit, clamping to %d", depth, MAX_TRACE_DEPTH)
        depth = MAX_TRACE_DEPTH
    _max_depth[None] = depth


def reset_globals() -> None:
    """Restore black background and the default bounce limit."""
    _background[None] = (0.0, 0.0, 0.0)
    _max_depth[None] = DEFAULT_MAX_DEPTH


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Preallocated so that kernels never recompile for a new resolution
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Unclamped linear color per pixel, indexed [i, j] with j = 0 the bottom row
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the color buffer.

    Raises:
        ValidationError: If the size is not positive or exceeds the
            preallocated buffer.
    """
    if width <= 0 or height <= 0:
        raise ValidationError(f"resolution must be positive, got {width}x{height}", directive="resolution")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValidationError(
            f"resolution {width}x{height} exceeds maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})",
            directive="resolution",
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Return the active (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Tracing Core
# =============================================================================


@ti.func
def _secondary_rays(rec, material, direction: vec3):
    """Directions of the reflected and refracted rays leaving a hit.

    Returns:
        A tuple ``(reflected, transmitted)`` of unit directions. On total
        internal reflection ``transmitted`` equals ``reflected``.
    """
    reflected = tm.normalize(reflect(direction, rec.normal))

    # The normal faces the incoming ray, so front-face hits enter the object
    eta = material.ior
    if rec.front_face == 1:
        eta = 1.0 / material.ior

    transmitted, did_refract = refract(direction, rec.normal, eta)
    if did_refract == 0:
        transmitted = reflected

    return reflected, transmitted


@ti.func
def trace_ray(ray_origin: vec3, ray_direction: vec3) -> vec3:
    """Trace a camera ray and all its secondary rays.

    Args:
        ray_origin: Camera ray origin.
        ray_direction: Unit camera ray direction.

    Returns:
        The unclamped color seen along the ray.
    """
    radiance = vec3(0.0, 0.0, 0.0)
    background = _background[None]
    max_depth = _max_depth[None]

    # Stack of pending rays, one vector per scalar component
    s_ox = ti.Vector.zero(ti.f32, STACK_SIZE)
    s_oy = ti.Vector.zero(ti.f32, STACK_SIZE)
    s_oz = ti.Vector.zero(ti.f32, STACK_SIZE)
    s_dx = ti.Vector.zero(ti.f32, STACK_SIZE)
    s_dy = ti.Vector.zero(ti.f32, STACK_SIZE)
    s_dz = ti.Vector.zero(ti.f32, STACK_SIZE)
    s_wr = ti.Vector.zero(ti.f32, STACK_SIZE)
    s_wg = ti.Vector.zero(ti.f32, STACK_SIZE)
    s_wb = ti.Vector.zero(ti.f32, STACK_SIZE)
    s_depth = ti.Vector.zero(ti.i32, STACK_SIZE)

    s_ox[0] = ray_origin.x
    s_oy[0] = ray_origin.y
    s_oz[0] = ray_origin.z
    s_dx[0] = ray_direction.x
    s_dy[0] = ray_direction.y
    s_dz[0] = ray_direction.z
    s_wr[0] = 1.0
    s_wg[0] = 1.0
    s_wb[0] = 1.0
    sp = 1

    while sp > 0:
        sp -= 1

        # Pop (stack slots are only addressed with compile-time indices)
        origin = vec3(0.0, 0.0, 0.0)
        direction = vec3(0.0, 0.0, 0.0)
        weight = vec3(0.0, 0.0, 0.0)
        depth = 0
        for k in ti.static(range(STACK_SIZE)):
            if k == sp:
                origin = vec3(s_ox[k], s_oy[k], s_oz[k])
                direction = vec3(s_dx[k], s_dy[k], s_dz[k])
                weight = vec3(s_wr[k], s_wg[k], s_wb[k])
                depth = s_depth[k]

        rec = intersect_scene(origin, direction, T_MIN, T_MAX)

        if rec.hit == 0:
            radiance += weight * background
        else:
            material = get_material(rec.material_id)
            radiance += weight * shade_local(rec, material, direction, RAY_EPSILON)

            if depth < max_depth:
                reflected, transmitted = _secondary_rays(rec, material, direction)

                for n in ti.static(range(2)):
                    child_direction = reflected
                    child_weight = weight * material.reflect
                    if ti.static(n == 1):
                        child_direction = transmitted
                        child_weight = weight * material.transmission

                    if length_squared(child_weight) > 0.0:
                        child_origin = offset_origin(rec.point, rec.normal, child_direction, RAY_EPSILON)
                        for k in ti.static(range(STACK_SIZE)):
                            if k == sp:
                                s_ox[k] = child_origin.x
                                s_oy[k] = child_origin.y
                                s_oz[k] = child_origin.z
                                s_dx[k] = child_direction.x
                                s_dy[k] = child_direction.y
                                s_dz[k] = child_direction.z
                                s_wr[k] = child_weight.x
                                s_wg[k] = child_weight.y
                                s_wb[k] = child_weight.z
                                s_depth[k] = depth + 1
                        sp += 1

    return radiance


@ti.func
def render_pixel_impl(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> vec3:
    ray = get_pixel_ray(pixel_i, pixel_j, width, height)
    return trace_ray(ray.origin, ray.direction)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_all_pixels(width: ti.i32, height: ti.i32):
    """Trace every pixel; each pixel writes only its own buffer cell."""
    for i, j in ti.ndrange(width, height):
        _color_buffer[i, j] = render_pixel_impl(i, j, width, height)


@ti.kernel
def _render_single_pixel(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> vec3:
    return render_pixel_impl(pixel_i, pixel_j, width, height)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image() -> None:
    """Render the full active image into the color buffer.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    _render_all_pixels(width, height)


def render_pixel(pixel_i: int, pixel_j: int) -> tuple[float, float, float]:
    """Trace one pixel and return its unclamped color.

    Pixel coordinates use j = 0 for the bottom row, like the color buffer.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height)
    return (float(color[0]), float(color[1]), float(color[2]))


def get_raw_image_numpy() -> npt.NDArray[np.float32]:
    """Return the unclamped image as an (height, width, 3) array, top row first."""
    _check_render_target_initialized()
    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # (width, height, 3) -> (height, width, 3), then bottom-up -> top-down
    image = np.transpose(image, (1, 0, 2))
    image = np.flipud(image)
    return np.ascontiguousarray(image, dtype=np.float32)


def get_normalized_image_numpy() -> npt.NDArray[np.float32]:
    """Return the image clamped to [0, 1] as an (height, width, 3) array."""
    return np.clip(get_raw_image_numpy(), 0.0, 1.0).astype(np.float32)
