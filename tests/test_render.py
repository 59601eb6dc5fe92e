"""End-to-end tests for the render integrator.

Tests cover:
- Output layout (width * height rows, top row first)
- Sky-only and ground-sphere scenes with known color bounds
- Bounce limit: hits at max_depth contribute black
- Wiring defects raising before any pixels are produced
- Noise decreasing with the sample count
"""

import math

import numpy as np
import pytest


def _ground_world():
    """A giant diffuse sphere whose top touches the origin."""
    from stochray.materials.lambertian import Lambertian
    from stochray.scene.world import World

    world = World()
    world.add_material("ground", Lambertian((0.5, 0.5, 0.5)))
    world.add_sphere("ground", (0.0, -1000.0, 0.0), 1000.0, "ground")
    return world


class TestRenderSettings:
    """Tests for render settings validation."""

    def test_pixel_count(self):
        from stochray.core.integrator import RenderSettings

        assert RenderSettings(4, 3, 1).pixel_count == 12

    def test_large_image_accepted(self):
        from stochray.core.integrator import RenderSettings

        assert RenderSettings(1280, 720, 1).pixel_count == 1280 * 720

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0, "height": 3, "samples_per_pixel": 1},
            {"width": 4, "height": -3, "samples_per_pixel": 1},
            {"width": 4, "height": 3, "samples_per_pixel": 0},
            {"width": 4, "height": 3, "samples_per_pixel": 1, "max_depth": -1},
            {"width": 4, "height": 3, "samples_per_pixel": 1, "t_min": 0.0},
        ],
    )
    def test_invalid(self, kwargs):
        from stochray.core.integrator import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(**kwargs)


class TestRender:
    """End-to-end rendering tests."""

    def test_output_shape(self):
        from stochray.camera.thin_lens import Camera
        from stochray.scene.world import World

        pixels = Camera().render(World(), 5, 2, 1)
        assert pixels.shape == (10, 3)
        assert pixels.dtype == np.float64

    def test_wide_image_after_small_one(self):
        """Each image size gets its own output buffer, wider than 1024 included."""
        from stochray.camera.thin_lens import Camera
        from stochray.scene.world import World

        camera = Camera(aspect_ratio=16.0 / 9.0)
        small = camera.render(World(), 3, 2, 1)
        wide = camera.render(World(), 1100, 2, 1)
        assert small.shape == (6, 3)
        assert wide.shape == (2200, 3)
        np.testing.assert_allclose(wide[:, 2], 1.0, atol=1e-9)

    def test_empty_world_is_sky(self):
        """Every ray misses; blue is 1 at both ends of the gradient."""
        from stochray.camera.thin_lens import Camera
        from stochray.scene.world import World

        pixels = Camera().render(World(), 4, 3, 8)
        np.testing.assert_allclose(pixels[:, 2], 1.0, atol=1e-9)
        assert np.all(pixels[:, 1] >= math.sqrt(0.7) - 1e-9)
        assert np.all(pixels[:, 1] <= 1.0 + 1e-9)

    def test_top_row_first(self):
        """Upper pixels look further up the gradient, so they are bluer."""
        from stochray.camera.thin_lens import Camera
        from stochray.scene.world import World

        pixels = Camera().render(World(), 1, 8, 16)
        red = pixels[:, 0]
        assert red[0] < red[-1]

    def test_ground_sphere(self):
        from stochray.camera.thin_lens import Camera

        pixels = Camera().render(_ground_world(), 4, 3, 16)
        assert pixels.shape == (12, 3)

        top, bottom = pixels[:4], pixels[8:]
        # The top row only sees sky
        np.testing.assert_allclose(top[:, 2], 1.0, atol=1e-9)
        # The bottom row sees the ground, which reflects at most half the sky
        assert np.all(bottom > 0.0)
        assert np.all(bottom <= math.sqrt(0.5) + 1e-9)

    def test_zero_depth_ground_is_black(self):
        """With max_depth = 0 any hit contributes black."""
        from stochray.camera.thin_lens import Camera

        pixels = Camera().render(_ground_world(), 4, 3, 4, max_depth=0)
        np.testing.assert_array_equal(pixels[8:], 0.0)
        np.testing.assert_allclose(pixels[:4, 2], 1.0, atol=1e-9)

    def test_unresolved_material_raises_before_rendering(self, monkeypatch):
        from stochray.camera.thin_lens import Camera
        from stochray.core import integrator
        from stochray.scene.world import UnresolvedMaterialError

        def fail(settings):
            raise AssertionError("render kernel must not run")

        monkeypatch.setattr(integrator, "render_pixels", fail)

        world = _ground_world()
        world.add_sphere("ball", (0.0, 1.0, -2.0), 0.5, "X")
        with pytest.raises(UnresolvedMaterialError):
            Camera().render(world, 4, 3, 1)

    def test_unbound_primitive_raises(self):
        from stochray.camera.thin_lens import Camera
        from stochray.scene.world import UnboundPrimitiveError

        world = _ground_world()
        world.add_sphere("ball", (0.0, 1.0, -2.0), 0.5)
        with pytest.raises(UnboundPrimitiveError):
            Camera().render(world, 4, 3, 1)

    def test_requires_initialized_runtime(self, monkeypatch):
        from stochray import runtime
        from stochray.camera.thin_lens import Camera
        from stochray.scene.world import World

        monkeypatch.setattr(runtime, "_initialized", False)
        with pytest.raises(RuntimeError, match="not initialized"):
            Camera().render(World(), 4, 3, 1)

    def test_noise_decreases_with_samples(self):
        """RMSE against a high-sample reference drops as samples increase."""
        from stochray.camera.thin_lens import Camera
        from stochray.materials.metal import Metal
        from stochray.preview.export import compute_rmse

        world = _ground_world()
        world.add_material("steel", Metal((0.8, 0.8, 0.8), fuzz=0.5))
        world.add_sphere("ball", (0.0, 0.5, -2.0), 0.5, "steel")
        camera = Camera(eye=(0.0, 0.5, 0.5), target=(0.0, 0.5, -2.0), vfov=60.0)

        reference = camera.render(world, 8, 6, 512)
        coarse = camera.render(world, 8, 6, 4)
        fine = camera.render(world, 8, 6, 64)

        assert compute_rmse(fine, reference) < compute_rmse(coarse, reference)

    def test_repeat_render_reuses_upload(self, caplog):
        import logging

        from stochray.camera.thin_lens import Camera

        world = _ground_world()
        camera = Camera()
        camera.render(world, 2, 2, 1)
        with caplog.at_level(logging.DEBUG, logger="stochray.scene.world"):
            camera.render(world, 2, 2, 1)
        assert "already resident" in caplog.text


class TestRandomSpheres:
    """Tests for the random spheres scene builder."""

    def test_scene_contents(self):
        from stochray.scene.random_spheres import (
            NUM_RANDOM_DIELECTRIC,
            NUM_RANDOM_LAMBERTIAN,
            NUM_RANDOM_METAL,
            create_random_spheres_world,
        )

        world = create_random_spheres_world(n=4, seed=3)
        names = world.material_names()
        assert len(names) == 4 + NUM_RANDOM_LAMBERTIAN + NUM_RANDOM_METAL + NUM_RANDOM_DIELECTRIC
        # ground + 3 hero spheres + 16 grid spheres
        assert len(world.primitive_names()) == 4 + 16
        assert world.get_primitive("ground").normal == (0.0, 1.0, 0.0)
        world.validate()

    def test_grid_truncated_to_material_count(self):
        from stochray.scene.random_spheres import create_random_spheres_world

        world = create_random_spheres_world(n=10, seed=1)
        assert len(world.primitive_names()) == 4 + len(world.material_names())

    def test_seed_is_reproducible(self):
        from stochray.scene.random_spheres import create_random_spheres_world

        a = create_random_spheres_world(n=3, seed=7).to_dict()
        b = create_random_spheres_world(n=3, seed=7).to_dict()
        assert a == b

    def test_negative_grid_rejected(self):
        from stochray.scene.random_spheres import create_random_spheres_world

        with pytest.raises(ValueError):
            create_random_spheres_world(n=-1)

    def test_scene_renders(self):
        from stochray.scene.random_spheres import create_random_spheres_scene

        world, camera = create_random_spheres_scene(n=2, seed=5)
        height = camera.image_height(8)
        pixels = camera.render(world, 8, height, 2, max_depth=5)
        assert pixels.shape == (8 * height, 3)
        assert np.all(np.isfinite(pixels))
        assert np.all(pixels >= 0.0)
