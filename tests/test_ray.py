"""Unit tests for the Ray structure and helpers."""

import numpy as np
import taichi as ti


class TestRay:
    """Tests for ray construction and evaluation."""

    def test_ray_at(self):
        """Test origin + t * direction."""
        from skylight.core.ray import Ray, ray_at
        from skylight.core.vector import vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -2.0))
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        assert np.allclose(result[None].to_numpy(), [1.0, 2.0, -2.0], atol=1e-6)

    def test_ray_at_zero_is_origin(self):
        """Test t = 0 gives the origin."""
        from skylight.core.ray import make_ray, ray_at
        from skylight.core.vector import vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(-1.0, 0.5, 4.0), vec3(3.0, 1.0, 1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        assert np.allclose(result[None].to_numpy(), [-1.0, 0.5, 4.0], atol=1e-6)

    def test_normalized_ray(self):
        """Test normalized_ray keeps the origin and scales the direction."""
        from skylight.core.ray import make_ray, normalized_ray
        from skylight.core.vector import vec3

        origin = ti.Vector.field(3, dtype=ti.f64, shape=())
        direction = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = normalized_ray(make_ray(vec3(1.0, 1.0, 1.0), vec3(0.0, 0.0, -4.0)))
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        assert np.allclose(origin[None].to_numpy(), [1.0, 1.0, 1.0], atol=1e-6)
        assert np.allclose(direction[None].to_numpy(), [0.0, 0.0, -1.0], atol=1e-6)
