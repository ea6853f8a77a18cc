"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Sphere behind the ray origin
- Interval limits (t_min, t_max)
- Numerical stability for distant spheres
"""

import taichi as ti


def _intersect(origin, direction, center, radius, t_min=1e-4, t_max=1e10):
    """Run hit_sphere in a kernel and return the record as Python values."""
    from scenetrace.geometry.sphere import Sphere, hit_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.Vector.field(3, dtype=ti.f32, shape=())
    normal = ti.Vector.field(3, dtype=ti.f32, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())
    ox, oy, oz = origin
    dx, dy, dz = direction
    cx, cy, cz = center

    @ti.kernel
    def test_kernel():
        sphere = Sphere(center=vec3(cx, cy, cz), radius=radius)
        record = hit_sphere(
            vec3(ox, oy, oz),
            vec3(dx, dy, dz),
            sphere,
            t_min,
            t_max,
        )
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face

    test_kernel()
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": point.to_numpy(),
        "normal": normal.to_numpy(),
        "front_face": front_face[None],
    }


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit_from_outside(self):
        """Test ray hitting sphere head-on from outside."""
        rec = _intersect((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 4.0) < 1e-5
        assert abs(rec["point"][2] - 1.0) < 1e-5
        assert abs(rec["normal"][2] - 1.0) < 1e-5
        assert rec["front_face"] == 1

    def test_miss(self):
        """Test ray passing beside the sphere."""
        rec = _intersect((2.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_inside_sphere_hits_back_face(self):
        """Test ray starting at the center; normal faces against the ray."""
        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 1.0) < 1e-5
        assert abs(rec["normal"][2] + 1.0) < 1e-5
        assert rec["front_face"] == 0

    def test_sphere_behind_ray(self):
        """Test that hits with negative t are ignored."""
        rec = _intersect((0.0, 0.0, 5.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_t_max_excludes_far_hit(self):
        """Test that hits beyond t_max are ignored."""
        rec = _intersect((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_max=3.0)
        assert rec["hit"] == 0

    def test_t_min_skips_near_root(self):
        """Test that the far root is used when the near one is below t_min."""
        rec = _intersect((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_min=4.5)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 6.0) < 1e-5
        assert rec["front_face"] == 0

    def test_off_center_hit_normal_is_unit(self):
        """Test the normal of an oblique hit."""
        rec = _intersect((0.5, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 1
        n = rec["normal"]
        assert abs(n[0] ** 2 + n[1] ** 2 + n[2] ** 2 - 1.0) < 1e-5
        assert abs(n[0] - 0.5) < 1e-5

    def test_distant_small_sphere(self):
        """Test numerical stability for a small sphere far from the origin."""
        rec = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -1000.0), 0.5)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 999.5) < 1e-2
