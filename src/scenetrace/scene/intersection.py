"""Scene-level ray queries over all stored primitives.

Primitives are stored in Taichi fields (Structure-of-Arrays) together with the
material id of each primitive. Two queries are provided:

    - ``intersect_scene``: closest hit with its material id (camera,
      reflected and refracted rays)
    - ``shadow_transmittance``: how much light survives along a shadow ray,
      taking the transmission color of every primitive it passes through

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from scenetrace.scene.intersection import add_sphere, add_plane, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    0
    >>> add_plane((0.0, -0.5, 0.0), (0.0, 1.0, 0.0), material_id=1)
    0
"""

import math

import taichi as ti
import taichi.math as tm

from scenetrace.errors import ValidationError
from scenetrace.geometry.plane import Plane, hit_plane
from scenetrace.geometry.sphere import HitRecord, Sphere, hit_sphere
from scenetrace.materials.phong import get_transmission

vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Closest hit of a ray against the whole scene.

    Attributes:
        hit: 1 if anything was hit, else 0.
        t: Distance along the ray to the hit.
        point: World-space hit point.
        normal: Unit normal facing against the ray.
        front_face: 1 if the ray arrived from outside the surface.
        material_id: Material of the hit primitive, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


MAX_SPHERES = 1024
MAX_PLANES = 64

sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

plane_points = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_material_ids = ti.field(dtype=ti.i32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all primitives."""
    num_spheres[None] = 0
    num_planes[None] = 0


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Add a sphere and return its index.

    Raises:
        ValidationError: If MAX_SPHERES spheres are already stored.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise ValidationError(f"too many spheres (maximum {MAX_SPHERES})", directive="sphere")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def add_plane(
    point: tuple[float, float, float],
    normal: tuple[float, float, float],
    material_id: int = 0,
) -> int:
    """Add a plane and return its index. The normal is normalized here.

    Raises:
        ValidationError: If MAX_PLANES planes are already stored.
    """
    idx = num_planes[None]
    if idx >= MAX_PLANES:
        raise ValidationError(f"too many planes (maximum {MAX_PLANES})", directive="plane")
    length = math.sqrt(sum(c * c for c in normal))
    plane_points[idx] = point
    plane_normals[idx] = [c / length for c in normal]
    plane_material_ids[idx] = material_id
    num_planes[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    return int(num_spheres[None])


def get_plane_count() -> int:
    return int(num_planes[None])


@ti.func
def _to_scene_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the closest hit among all primitives.

    Each primitive is tested against the closest distance found so far, so
    the smallest t in (t_min, t_max) wins. On equal t the primitive declared
    first is kept.
    """
    closest_t = t_max
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _to_scene_record(rec, sphere_material_ids[i])

    for i in range(num_planes[None]):
        plane = Plane(point=plane_points[i], normal=plane_normals[i])
        rec = hit_plane(ray_origin, ray_direction, plane, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _to_scene_record(rec, plane_material_ids[i])

    return result


@ti.func
def shadow_transmittance(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> vec3:
    """Fraction of light surviving along a shadow ray.

    Every primitive hit inside (t_min, t_max) multiplies the result by its
    material's transmission color, so any opaque blocker yields exactly zero.

    Returns:
        Per-channel transmittance in [0, 1] for physically sensible materials.
    """
    transmittance = vec3(1.0, 1.0, 1.0)

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max)
        if rec.hit == 1:
            transmittance *= get_transmission(sphere_material_ids[i])

    for i in range(num_planes[None]):
        plane = Plane(point=plane_points[i], normal=plane_normals[i])
        rec = hit_plane(ray_origin, ray_direction, plane, t_min, t_max)
        if rec.hit == 1:
            transmittance *= get_transmission(plane_material_ids[i])

    return transmittance
