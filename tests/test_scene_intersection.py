"""Unit tests for device-side primitive storage and the nearest-hit scan."""

import pytest
import taichi as ti


def _query(origin, direction, t_min=0.001, t_max=1e10):
    """Run nearest_hit once and return (hit, distance, material_id)."""
    from stochray.core.ray import Ray
    from stochray.core.vector import real, vec3
    from stochray.scene.intersection import nearest_hit

    hit = ti.field(dtype=ti.i32, shape=())
    distance = ti.field(dtype=real, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(
        ox: real, oy: real, oz: real, dx: real, dy: real, dz: real, lo: real, hi: real
    ):
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        rec = nearest_hit(ray, lo, hi)
        hit[None] = rec.hit
        distance[None] = rec.distance
        material_id[None] = rec.material_id

    test_kernel(*origin, *direction, t_min, t_max)
    return hit[None], distance[None], material_id[None]


class TestSceneStorage:
    """Tests for adding and clearing primitives."""

    def test_add_and_count(self):
        from stochray.scene.intersection import (
            add_plane,
            add_sphere,
            get_plane_count,
            get_sphere_count,
        )

        assert add_sphere((0.0, 0.0, -1.0), 0.5, 0) == 0
        assert add_sphere((0.0, 0.0, -3.0), 0.5, 1) == 1
        assert add_plane((0.0, -1.0, 0.0), (0.0, 1.0, 0.0), 0) == 0
        assert get_sphere_count() == 2
        assert get_plane_count() == 1

    def test_clear_scene(self):
        from stochray.scene.intersection import add_sphere, clear_scene, get_sphere_count

        add_sphere((0.0, 0.0, -1.0), 0.5, 0)
        clear_scene()
        assert get_sphere_count() == 0

    def test_plane_capacity(self):
        from stochray.scene.intersection import MAX_PLANES, add_plane

        for _ in range(MAX_PLANES):
            add_plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0)
        with pytest.raises(RuntimeError, match="Maximum number of planes"):
            add_plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0)


class TestNearestHit:
    """Tests for the nearest-hit scan."""

    def test_empty_scene_misses(self):
        hit, _, material_id = _query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0
        assert material_id == -1

    def test_closest_sphere_wins_regardless_of_order(self):
        from stochray.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0, 7)
        add_sphere((0.0, 0.0, -2.0), 0.5, 3)
        hit, distance, material_id = _query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(distance - 1.5) < 1e-9
        assert material_id == 3

    def test_plane_behind_sphere_ignored(self):
        from stochray.scene.intersection import add_plane, add_sphere

        add_sphere((0.0, 0.0, -2.0), 0.5, 1)
        add_plane((0.0, 0.0, -10.0), (0.0, 0.0, 1.0), 2)
        _, distance, material_id = _query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert material_id == 1
        assert abs(distance - 1.5) < 1e-9

    def test_t_min_excludes_self_hit(self):
        from stochray.scene.intersection import add_plane

        add_plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0)
        hit, _, _ = _query((0.0, 0.0, 0.0), (0.0, -1.0, 0.0))
        assert hit == 0
