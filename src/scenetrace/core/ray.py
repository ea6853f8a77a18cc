"""Ray data structure and vector utilities for the Taichi tracing kernels.

All functions here are Taichi functions (``@ti.func``) and may only be called
from inside kernels or other Taichi functions.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from scenetrace.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def point() -> vec3:
    ...     ray = Ray(origin=vec3(0.0), direction=vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Camera and secondary rays
            are always normalized before tracing.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point ``origin + t * direction``."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray, normalizing the direction."""
    return Ray(origin=origin, direction=tm.normalize(direction))


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    return tm.dot(v, v)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror an incident direction about a unit normal.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The unit surface normal.

    Returns:
        The reflected direction, same length as ``incident``.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f32):
    """Refract a unit direction through a surface using Snell's law.

    Args:
        incident: The incoming unit direction.
        normal: The unit surface normal, facing against ``incident``.
        eta: Ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        A tuple ``(direction, refracted)``. ``refracted`` is 0 on total
        internal reflection, in which case ``direction`` is the zero vector.
    """
    cos_i = -tm.dot(incident, normal)
    sin2_t = eta * eta * (1.0 - cos_i * cos_i)
    direction = vec3(0.0, 0.0, 0.0)
    refracted = 0
    if sin2_t <= 1.0:
        cos_t = ti.sqrt(1.0 - sin2_t)
        direction = tm.normalize(eta * incident + (eta * cos_i - cos_t) * normal)
        refracted = 1
    return direction, refracted


@ti.func
def offset_origin(point: vec3, normal: vec3, direction: vec3, epsilon: ti.f32) -> vec3:
    """Push a surface point off the surface on the side ``direction`` leaves by.

    Reflected and shadow rays start above the surface; refracted rays start
    below it. Prevents a secondary ray from re-hitting its own surface.
    """
    offset_dir = normal
    if tm.dot(direction, normal) < 0.0:
        offset_dir = -normal
    return point + epsilon * offset_dir
