"""Unit tests for plane intersection."""

import pytest
import taichi as ti


def _trace(origin, direction, point=(0.0, 0.0, 0.0), normal=(0.0, 1.0, 0.0)):
    """Run hit_plane once and return (hit, distance, point, normal)."""
    from stochray.core.ray import Ray
    from stochray.core.vector import real, vec3
    from stochray.geometry.plane import Plane, hit_plane

    hit = ti.field(dtype=ti.i32, shape=())
    distance = ti.field(dtype=real, shape=())
    hit_point = ti.Vector.field(3, dtype=real, shape=())
    hit_normal = ti.Vector.field(3, dtype=real, shape=())

    @ti.kernel
    def test_kernel(
        ox: real, oy: real, oz: real,
        dx: real, dy: real, dz: real,
        px: real, py: real, pz: real,
        nx: real, ny: real, nz: real,
    ):
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        plane = Plane(point=vec3(px, py, pz), normal=vec3(nx, ny, nz))
        rec = hit_plane(ray, plane, 0.001, 1e10)
        hit[None] = rec.hit
        distance[None] = rec.distance
        hit_point[None] = rec.point
        hit_normal[None] = rec.normal

    test_kernel(*origin, *direction, *point, *normal)
    return hit[None], distance[None], hit_point[None], hit_normal[None]


class TestPlaneIntersection:
    """Tests for ray-plane intersection."""

    def test_hit_from_above(self):
        hit, t, p, n = _trace((1.0, 2.0, 3.0), (0.0, -1.0, 0.0))
        assert hit == 1
        assert abs(t - 2.0) < 1e-12
        assert abs(p[0] - 1.0) < 1e-12
        assert abs(p[1]) < 1e-12
        assert abs(p[2] - 3.0) < 1e-12
        assert n[1] == 1.0

    def test_hit_from_below_keeps_configured_normal(self):
        """The normal is not flipped toward the incoming ray."""
        hit, t, _, n = _trace((0.0, -3.0, 0.0), (0.0, 1.0, 0.0))
        assert hit == 1
        assert abs(t - 3.0) < 1e-12
        assert n[1] == 1.0

    def test_oblique_hit(self):
        hit, t, p, _ = _trace((0.0, 1.0, 0.0), (1.0, -1.0, 0.0))
        assert hit == 1
        assert abs(t - 1.0) < 1e-12
        assert abs(p[0] - 1.0) < 1e-12

    def test_parallel_ray_misses(self):
        hit, _, _, _ = _trace((0.0, 1.0, 0.0), (1.0, 0.0, 0.0))
        assert hit == 0

    def test_ray_pointing_away_misses(self):
        hit, _, _, _ = _trace((0.0, 1.0, 0.0), (0.0, 1.0, 0.0))
        assert hit == 0

    def test_offset_plane(self):
        hit, t, _, _ = _trace(
            (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), point=(0.0, 0.0, -5.0), normal=(0.0, 0.0, 1.0)
        )
        assert hit == 1
        assert abs(t - 5.0) < 1e-12


class TestPlaneNormal:
    """Tests for Python-side normal normalization."""

    def test_normalizes(self):
        from stochray.geometry.plane import plane_normal

        n = plane_normal((0.0, 2.0, 0.0))
        assert n == (0.0, 1.0, 0.0)

    def test_zero_normal_rejected(self):
        from stochray.geometry.plane import plane_normal

        with pytest.raises(ValueError, match="non-zero"):
            plane_normal((0.0, 0.0, 0.0))
