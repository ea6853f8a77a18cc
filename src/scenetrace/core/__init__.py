"""Core rendering module.

Components:
    ray: Ray data structure and vector helpers (reflect, refract)
    shading: Local Phong illumination with shadow rays
    tracer: Iterative Whitted tracer and the render target
    renderer: Renderer class tying a Scene to the tracer kernels

``tracer`` and ``renderer`` declare Taichi fields and are NOT imported here.
Import them directly after ``scenetrace.config.init_backend()``:

    >>> from scenetrace.core.renderer import Renderer
"""

from .ray import (
    Ray,
    length_squared,
    make_ray,
    offset_origin,
    ray_at,
    reflect,
    refract,
    vec3,
)

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length_squared",
    "reflect",
    "refract",
    "offset_origin",
]
