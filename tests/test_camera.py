"""Unit tests for the thin-lens camera.

Tests cover:
- Parameter validation
- Orthonormal basis and screen rectangle
- Screen ray generation with and without a lens aperture
"""

import math

import numpy as np
import pytest


def _pinhole(**overrides):
    from skylight.camera import Camera

    params = dict(
        eye=(0.0, 0.0, 0.0),
        look_at=(0.0, 0.0, -1.0),
        up=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=2.0,
    )
    params.update(overrides)
    return Camera(**params)


class TestCameraValidation:
    """Tests for rejected camera parameters."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"vfov": 0.0},
            {"vfov": 180.0},
            {"aspect_ratio": 0.0},
            {"aperture": -0.1},
            {"focus_dist": 0.0},
            {"look_at": (0.0, 0.0, 0.0)},
            {"up": (0.0, 0.0, 1.0)},
        ],
    )
    def test_invalid_parameters(self, overrides):
        """Test degenerate cameras raise ValueError."""
        with pytest.raises(ValueError):
            _pinhole(**overrides)

    def test_looking_from_focuses_on_target(self):
        """Test looking_from sets focus_dist to the eye-target distance."""
        from skylight.camera import Camera

        camera = Camera.looking_from((13.0, 2.0, 3.0), (0.0, 0.0, 0.0), aspect_ratio=16 / 9)
        assert camera.focus_dist == pytest.approx(math.sqrt(13**2 + 2**2 + 3**2))
        assert camera.vfov == 20.0
        assert camera.lens_radius == 0.0


class TestCameraBasis:
    """Tests for the precomputed camera geometry."""

    def test_basis_is_orthonormal(self):
        """Test u, v, w are unit length and mutually perpendicular."""
        camera = _pinhole(eye=(13.0, 2.0, 3.0), look_at=(0.0, 0.0, 0.0), vfov=20.0)
        geometry = camera.basis()
        u, v, w = (np.array(x) for x in (geometry.u, geometry.v, geometry.w))

        for axis in (u, v, w):
            assert np.linalg.norm(axis) == pytest.approx(1.0)
        assert np.dot(u, v) == pytest.approx(0.0, abs=1e-12)
        assert np.dot(u, w) == pytest.approx(0.0, abs=1e-12)
        assert np.dot(v, w) == pytest.approx(0.0, abs=1e-12)
        # w points from the target back toward the eye
        assert np.allclose(w, np.array([13.0, 2.0, 3.0]) / math.sqrt(182.0))

    def test_screen_rectangle(self):
        """Test the 90 degree screen spans [-2, 2] x [-1, 1] at z = -1."""
        geometry = _pinhole().basis()

        assert geometry.origin == pytest.approx((-2.0, -1.0, -1.0))
        assert geometry.horizontal == pytest.approx((4.0, 0.0, 0.0))
        assert geometry.vertical == pytest.approx((0.0, 2.0, 0.0))

    def test_screen_scales_with_focus_distance(self):
        """Test the screen is placed at focus_dist along the view direction."""
        geometry = _pinhole(focus_dist=3.0).basis()

        assert geometry.origin == pytest.approx((-6.0, -3.0, -3.0))
        assert geometry.horizontal == pytest.approx((12.0, 0.0, 0.0))


class TestScreenRays:
    """Tests for ray generation through screen coordinates."""

    def test_center_ray(self):
        """Test (0.5, 0.5) looks straight at the target."""
        from skylight.camera import screen_ray, setup_camera

        setup_camera(_pinhole())
        origin, direction = screen_ray(0.5, 0.5)

        assert origin == pytest.approx((0.0, 0.0, 0.0), abs=1e-6)
        assert direction == pytest.approx((0.0, 0.0, -1.0), abs=1e-6)

    def test_corner_rays(self):
        """Test (0, 0) is lower-left and (1, 1) upper-right, unnormalized."""
        from skylight.camera import screen_ray, setup_camera

        setup_camera(_pinhole())
        _, lower_left = screen_ray(0.0, 0.0)
        _, upper_right = screen_ray(1.0, 1.0)

        assert lower_left == pytest.approx((-2.0, -1.0, -1.0), abs=1e-5)
        assert upper_right == pytest.approx((2.0, 1.0, -1.0), abs=1e-5)

    def test_aperture_jitters_origin_within_lens(self):
        """Test lens rays start within the lens disk and meet at the focus plane."""
        from skylight.camera import screen_ray, setup_camera

        setup_camera(_pinhole(aperture=0.5, focus_dist=2.0))
        for _ in range(20):
            origin, direction = screen_ray(0.5, 0.5)
            assert math.hypot(origin[0], origin[1]) <= 0.25 + 1e-5
            assert origin[2] == pytest.approx(0.0, abs=1e-6)
            # Every lens ray aims at the same in-focus point
            target = np.add(origin, direction)
            assert target == pytest.approx((0.0, 0.0, -2.0), abs=1e-5)

    def test_camera_info(self):
        """Test get_camera_info reports the uploaded state."""
        from skylight.camera import get_camera_info, setup_camera

        setup_camera(_pinhole(aperture=0.2))
        info = get_camera_info()

        assert info["eye"] == pytest.approx((0.0, 0.0, 0.0))
        assert info["w"] == pytest.approx((0.0, 0.0, 1.0))
        assert info["lens_radius"] == pytest.approx((0.1,))
