"""Unit tests for the radiance estimator.

Tests cover:
- Escaping rays pick up the sky gradient
- A zero bounce budget contributes black
- Budget exhaustion on surfaces that always scatter
- Deterministic single-bounce paths (mirror, diffuse)
- Diffuse surfaces appear darker than the sky behind them
"""

import numpy as np
import pytest
import taichi as ti


def _scene_with_ground(material):
    from skylight.scene import Scene, SphereShape

    scene = Scene()
    scene.insert(SphereShape((0.0, -1000.0, 0.0), 1000.0, material))
    return scene


class TestSky:
    """Tests for rays that hit nothing."""

    def test_straight_up_is_sky_blue(self):
        """Test an empty scene looking up returns (0.5, 0.7, 1.0)."""
        from skylight.core.integrator import trace_ray
        from skylight.scene import Scene

        Scene()
        color = trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        assert color == pytest.approx((0.5, 0.7, 1.0), abs=1e-6)

    def test_straight_down_is_white(self):
        """Test an empty scene looking down returns white."""
        from skylight.core.integrator import trace_ray
        from skylight.scene import Scene

        Scene()
        color = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0))
        assert color == pytest.approx((1.0, 1.0, 1.0), abs=1e-6)


class TestBounceBudget:
    """Tests for the max_depth budget."""

    def test_zero_depth_is_black(self):
        """Test max_depth 0 returns black even for an escaping ray."""
        from skylight.core.integrator import trace_ray
        from skylight.scene import Scene

        Scene()
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=0) == (0.0, 0.0, 0.0)

    def test_budget_exhausted_on_surface_is_black(self):
        """Test a path that is still bouncing when the budget runs out is black."""
        from skylight.core.integrator import trace_ray
        from skylight.materials import Diffuse

        _scene_with_ground(Diffuse((0.5, 0.5, 0.5)))
        color = trace_ray((0.0, 1.0, 0.0), (0.0, -1.0, 0.0), max_depth=1)
        assert color == (0.0, 0.0, 0.0)


class TestSingleBounce:
    """Tests for paths that bounce once and escape."""

    def test_mirror_ground_reflects_sky(self):
        """Test a perfect mirror returns its tint times the sky overhead."""
        from skylight.core.integrator import trace_ray
        from skylight.materials import Metal

        _scene_with_ground(Metal((0.8, 0.8, 0.8), fuzz=0.0))
        color = trace_ray((0.0, 1.0, 0.0), (0.0, -1.0, 0.0), max_depth=2)
        assert color == pytest.approx((0.4, 0.56, 0.8), abs=1e-5)

    def test_diffuse_ground_scales_sky(self):
        """Test one diffuse bounce returns albedo times some sky color."""
        from skylight.core.integrator import trace_ray
        from skylight.materials import Diffuse

        _scene_with_ground(Diffuse((0.5, 0.5, 0.5)))
        for _ in range(10):
            r, g, b = trace_ray((0.0, 1.0, 0.0), (0.0, -1.0, 0.0), max_depth=2)
            # Upper hemisphere of the sky: red in [0.5, 0.75], blue always 1
            assert 0.25 - 1e-5 <= r <= 0.375 + 1e-5
            assert b == pytest.approx(0.5, abs=1e-5)

    def test_glass_does_not_tint(self):
        """Test a path through glass keeps the channel ratios of the sky."""
        from skylight.core.integrator import trace_ray
        from skylight.materials import Dielectric
        from skylight.scene import Scene, SphereShape

        scene = Scene()
        scene.insert(SphereShape((0.0, 0.0, -3.0), 1.0, Dielectric(1.5)))
        r, g, b = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        # Every sky color has blue == 1 and white attenuation keeps it
        assert b == pytest.approx(1.0, abs=1e-5)


class TestDiffuseScene:
    """Tests on a diffuse ground seen from above."""

    def test_ground_is_darker_than_background(self):
        """Test the averaged estimate is darker than the sky in the same direction."""
        from skylight.core.integrator import ray_color
        from skylight.core.ray import Ray
        from skylight.core.vector import vec3
        from skylight.materials import Diffuse

        _scene_with_ground(Diffuse((0.5, 0.5, 0.5)))
        n = 4096
        colors = ti.Vector.field(3, dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                ray = Ray(origin=vec3(0.0, 1.0, 0.0), direction=vec3(0.0, -1.0, -1.0))
                colors[i] = ray_color(ray, 50)

        test_kernel()
        mean = colors.to_numpy().mean(axis=0)

        # Sky along (0, -1, -1): t = 0.5 * (1 - 1 / sqrt(2))
        t = 0.5 * (1.0 - 1.0 / np.sqrt(2.0))
        sky = (1.0 - t) * np.ones(3) + t * np.array([0.5, 0.7, 1.0])
        assert np.all(mean < sky)
        assert np.all(mean > 0.0)
