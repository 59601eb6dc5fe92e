"""Unit tests for the dielectric material.

Tests cover:
- Refraction obeying Snell's law
- Total internal reflection past the critical angle
- Schlick reflectance
- Reflect/refract probabilities at normal incidence
"""

import math

import pytest
import taichi as ti


class TestDielectricConfig:
    """Tests for the Dielectric dataclass."""

    def test_default_is_glass(self):
        from stochray.materials.dielectric import Dielectric

        assert Dielectric().refraction_index == 1.5

    def test_index_below_one_rejected(self):
        from stochray.materials.dielectric import Dielectric

        with pytest.raises(ValueError, match="less than 1.0"):
            Dielectric(0.9)

    def test_to_dict(self):
        from stochray.materials.dielectric import Dielectric

        assert Dielectric(2.4).to_dict() == {"type": "dielectric", "refraction_index": 2.4}


class TestSchlick:
    """Tests for Schlick's Fresnel approximation."""

    def test_normal_incidence(self):
        from stochray.materials.dielectric import schlick_reflectance

        assert abs(schlick_reflectance(1.0, 1.0 / 1.5) - 0.04) < 1e-12

    def test_grazing_incidence(self):
        from stochray.materials.dielectric import schlick_reflectance

        assert abs(schlick_reflectance(0.0, 1.5) - 1.0) < 1e-12

    def test_kernel_matches_python(self):
        from stochray.core.vector import real
        from stochray.materials.dielectric import schlick, schlick_reflectance

        result = ti.field(dtype=real, shape=())

        @ti.kernel
        def test_kernel(cosine: real, eta: real):
            result[None] = schlick(cosine, eta)

        test_kernel(0.3, 1.5)
        assert abs(result[None] - schlick_reflectance(0.3, 1.5)) < 1e-12


class TestRefraction:
    """Tests for refract."""

    def test_snells_law_air_to_glass(self):
        """At 45 degrees into glass, sin(theta_t) = sin(45) / 1.5."""
        from stochray.core.vector import real, vec3
        from stochray.materials.dielectric import refract, refraction_discriminant

        result = ti.Vector.field(3, dtype=real, shape=())

        @ti.kernel
        def test_kernel():
            d = vec3(1.0, -1.0, 0.0)
            n = vec3(0.0, 1.0, 0.0)
            eta = 1.0 / 1.5
            disc = refraction_discriminant(d, n, eta)
            result[None] = refract(d, n, eta, disc)

        test_kernel()
        r = result[None]
        sin_t = math.sin(math.pi / 4.0) / 1.5
        assert abs(r[0] - sin_t) < 1e-12
        assert abs(r[1] + math.sqrt(1.0 - sin_t * sin_t)) < 1e-12
        assert abs(r[2]) < 1e-12

    def test_discriminant_negative_past_critical_angle(self):
        from stochray.core.vector import real, vec3
        from stochray.materials.dielectric import refraction_discriminant

        result = ti.field(dtype=real, shape=())

        @ti.kernel
        def test_kernel():
            # Leaving glass at ~71.6 degrees, critical angle is ~41.8 degrees
            result[None] = refraction_discriminant(
                vec3(0.9, 0.3, 0.0), vec3(0.0, -1.0, 0.0), 1.5
            )

        test_kernel()
        assert result[None] < 0.0


class TestDielectricScatter:
    """Tests for scatter_dielectric."""

    def test_total_internal_reflection_always_reflects(self):
        """Past the critical angle every sample reflects back into the glass."""
        from stochray.core.ray import Ray
        from stochray.core.vector import real, vec3
        from stochray.materials.dielectric import scatter_dielectric

        max_y = ti.field(dtype=real, shape=())

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            ray = Ray(origin=vec3(0.0, -1.0, 0.0), direction=vec3(0.9, 0.3, 0.0))
            for trial in range(1000):
                scattered, atten, did = scatter_dielectric(1.5, ray, vec3(0.0, 0.0, 0.0), normal)
                ti.atomic_max(max_y[None], scattered.direction.y)

        max_y[None] = -10.0
        test_kernel()
        assert max_y[None] < 0.0

    def test_critical_angle_always_reflects(self):
        """Leaving glass at exactly the critical angle never refracts."""
        from stochray.core.ray import Ray
        from stochray.core.vector import vec3
        from stochray.materials.dielectric import scatter_dielectric

        refracted = ti.field(dtype=ti.i32, shape=())
        trials = 2000

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            direction = vec3(1.0 / 1.5, ti.sqrt(1.0 - 1.0 / 2.25), 0.0)
            ray = Ray(origin=vec3(0.0, -1.0, 0.0), direction=direction)
            for trial in range(trials):
                scattered, atten, did = scatter_dielectric(1.5, ray, vec3(0.0, 0.0, 0.0), normal)
                if scattered.direction.y > 0.0:
                    ti.atomic_add(refracted[None], 1)

        refracted[None] = 0
        test_kernel()
        assert refracted[None] == 0

    def test_normal_incidence_mostly_refracts(self):
        """Straight into glass about 4% of samples reflect."""
        from stochray.core.ray import Ray
        from stochray.core.vector import real, vec3
        from stochray.materials.dielectric import scatter_dielectric

        reflected = ti.field(dtype=ti.i32, shape=())
        trials = 4000

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            ray = Ray(origin=vec3(0.0, 1.0, 0.0), direction=vec3(0.0, -1.0, 0.0))
            for trial in range(trials):
                scattered, atten, did = scatter_dielectric(1.5, ray, vec3(0.0, 0.0, 0.0), normal)
                if scattered.direction.y > 0.0:
                    ti.atomic_add(reflected[None], 1)

        reflected[None] = 0
        test_kernel()
        fraction = reflected[None] / trials
        assert 0.02 < fraction < 0.06

    def test_attenuation_is_white_and_always_scatters(self):
        from stochray.core.ray import Ray
        from stochray.core.vector import real, vec3
        from stochray.materials.dielectric import scatter_dielectric

        attenuation = ti.Vector.field(3, dtype=real, shape=())
        flag = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 1.0, 0.0), direction=vec3(0.3, -1.0, 0.2))
            scattered, atten, did_scatter = scatter_dielectric(
                1.5, ray, vec3(0.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            attenuation[None] = atten
            flag[None] = did_scatter

        test_kernel()
        assert tuple(attenuation[None].to_numpy()) == (1.0, 1.0, 1.0)
        assert flag[None] == 1


class TestDielectricRegistry:
    """Tests for the dielectric material registry."""

    def test_add_and_count(self):
        from stochray.materials.dielectric import (
            add_dielectric_material,
            dielectric_iors,
            get_dielectric_material_count,
        )

        assert add_dielectric_material(1.33) == 0
        assert add_dielectric_material() == 1
        assert get_dielectric_material_count() == 2
        assert dielectric_iors[0] == 1.33

    def test_add_invalid_rejected(self):
        from stochray.materials.dielectric import (
            add_dielectric_material,
            get_dielectric_material_count,
        )

        with pytest.raises(ValueError):
            add_dielectric_material(0.5)
        assert get_dielectric_material_count() == 0
