"""Sphere primitive and ray-sphere intersection.

The intersection solves

    |o + t*d - c|^2 = r^2   =>   a*t^2 + 2*h*t + k = 0

with a = d.d, h = d.(o - c), k = |o - c|^2 - r^2, using the cancellation-free
form of the quadratic formula (q = -(h + sign(h)*sqrt(h^2 - a*k)),
roots q/a and k/q). The nearer root inside (t_min, t_max) wins; if the ray
starts inside the sphere that is the far root and the record is flagged as a
back-face hit.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class Sphere:
    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Result of intersecting a ray with a single primitive.

    Attributes:
        hit: 1 if the ray hit within the requested interval, else 0.
        t: Distance along the (unit) ray direction to the hit.
        point: World-space hit point.
        normal: Unit normal facing against the ray direction.
        front_face: 1 if the ray arrived from outside the surface.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def make_miss() -> HitRecord:
    return HitRecord(hit=0, t=0.0, point=vec3(0.0, 0.0, 0.0), normal=vec3(0.0, 0.0, 0.0), front_face=0)


@ti.func
def face_forward(ray_direction: vec3, outward_normal: vec3):
    """Orient a normal against the ray.

    Returns:
        A tuple ``(normal, front_face)``.
    """
    normal = outward_normal
    front_face = 1
    if tm.dot(ray_direction, outward_normal) > 0.0:
        normal = -outward_normal
        front_face = 0
    return normal, front_face


@ti.func
def sphere_roots(ray_origin: vec3, ray_direction: vec3, center: vec3, radius: ti.f32):
    """Solve the ray-sphere quadratic.

    Returns:
        A tuple ``(real, t0, t1)`` with ``t0 <= t1``. ``real`` is 0 when the
        ray misses the sphere's supporting quadric entirely.
    """
    oc = ray_origin - center
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    k = tm.dot(oc, oc) - radius * radius
    discriminant = h * h - a * k

    real = 0
    t0 = 0.0
    t1 = 0.0
    if discriminant >= 0.0:
        real = 1
        sqrt_d = ti.sqrt(discriminant)
        q = -(h + ti.select(h < 0.0, -1.0, 1.0) * sqrt_d)
        if ti.abs(q) < 1e-12:
            # q vanishes only when h and the discriminant are both ~0
            t0 = (-h - sqrt_d) / a
            t1 = (-h + sqrt_d) / a
        else:
            t0 = q / a
            t1 = k / q
        if t0 > t1:
            tmp = t0
            t0 = t1
            t1 = tmp
    return real, t0, t1


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Intersect a ray with a sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction.
        sphere: The sphere to test.
        t_min: Hits at or below this distance are ignored (self-intersection).
        t_max: Hits at or beyond this distance are ignored.

    Returns:
        The nearest hit inside (t_min, t_max), or a miss record.
    """
    result = make_miss()
    real, t0, t1 = sphere_roots(ray_origin, ray_direction, sphere.center, sphere.radius)

    if real == 1:
        t = t0
        if not ((t > t_min) and (t < t_max)):
            t = t1
        if (t > t_min) and (t < t_max):
            point = ray_origin + t * ray_direction
            normal, front_face = face_forward(ray_direction, (point - sphere.center) / sphere.radius)
            result = HitRecord(hit=1, t=t, point=point, normal=normal, front_face=front_face)

    return result
