"""Infinite plane primitive.

A plane is stored as a point on the plane and a unit normal. The ray-plane
test solves n.(o + t*d - p) = 0 for t; rays parallel to the plane miss.
"""

import taichi as ti
import taichi.math as tm

from .sphere import HitRecord, face_forward, make_miss

vec3 = tm.vec3

# Rays whose direction is this close to perpendicular to the normal miss
PARALLEL_EPSILON = 1e-8


@ti.dataclass
class Plane:
    """An infinite plane.

    Attributes:
        point: Any point on the plane.
        normal: Unit normal of the plane.
    """

    point: vec3
    normal: vec3


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: Plane,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Intersect a ray with a plane.

    Both sides of a plane are visible; the returned normal faces the ray.
    """
    result = make_miss()
    denom = tm.dot(plane.normal, ray_direction)

    if ti.abs(denom) > PARALLEL_EPSILON:
        t = tm.dot(plane.point - ray_origin, plane.normal) / denom
        if (t > t_min) and (t < t_max):
            point = ray_origin + t * ray_direction
            normal, front_face = face_forward(ray_direction, plane.normal)
            result = HitRecord(hit=1, t=t, point=point, normal=normal, front_face=front_face)

    return result
