"""Unit tests for the parallel renderer and RenderResult.

Tests cover:
- Pixel coordinates and the row flip of to_image()
- Mapping behavior of RenderResult
- Zero bounce budget renders black
- A diffuse ground renders darker than the bare sky
- Scene guard held only for the duration of a render
"""

import numpy as np
import pytest


def _camera(aspect_ratio=2.0):
    from skylight.camera import Camera

    return Camera(
        eye=(0.0, 1.0, 0.0),
        look_at=(0.0, 0.0, -1.0),
        up=(0.0, 1.0, 0.0),
        vfov=60.0,
        aspect_ratio=aspect_ratio,
    )


class TestRenderResult:
    """Tests for the mapping returned by render()."""

    def test_dimensions_and_mapping(self):
        """Test the result maps every (x, y) to an RGB triple."""
        from skylight.core.renderer import render
        from skylight.scene import Scene

        result = render(_camera(), Scene(), width=8, height=4, samples_per_pixel=2, max_depth=5)

        assert result.width == 8
        assert result.height == 4
        assert len(result) == 32
        assert set(result) == {(x, y) for x in range(8) for y in range(4)}
        assert len(result[7, 3]) == 3
        with pytest.raises(KeyError):
            result[8, 0]
        with pytest.raises(KeyError):
            result[0, -1]

    def test_pixels_stream(self):
        """Test pixels() yields each coordinate once with its color."""
        from skylight.core.renderer import render
        from skylight.scene import Scene

        result = render(_camera(), Scene(), width=6, height=3, samples_per_pixel=1, max_depth=5)
        triples = list(result.pixels())

        assert len(triples) == 18
        for x, y, color in triples:
            assert result[x, y] == color

    def test_sky_gets_bluer_toward_the_top(self):
        """Test y grows upward: top rows see more of the blue sky."""
        from skylight.core.renderer import render
        from skylight.scene import Scene

        result = render(_camera(), Scene(), width=4, height=16, samples_per_pixel=4, max_depth=5)

        # Red falls as the view direction tilts up
        assert result[2, 15][0] < result[2, 0][0]
        for x, y, (r, g, b) in result.pixels():
            assert b == pytest.approx(1.0, abs=1e-5)
            assert 0.5 - 1e-5 <= r <= 1.0 + 1e-5

    def test_to_image_flips_rows(self):
        """Test to_image puts y = height - 1 in row 0."""
        from skylight.core.renderer import render
        from skylight.scene import Scene

        result = render(_camera(), Scene(), width=5, height=3, samples_per_pixel=1, max_depth=5)
        image = result.to_image()

        assert image.shape == (3, 5, 3)
        for x, y, color in result.pixels():
            assert tuple(image[result.height - 1 - y, x]) == pytest.approx(color)

    def test_to_rgb8(self):
        """Test the 8-bit image has the image layout and uint8 channels."""
        from skylight.core.renderer import render
        from skylight.scene import Scene

        result = render(_camera(), Scene(), width=5, height=3, samples_per_pixel=1, max_depth=5)
        rgb8 = result.to_rgb8()

        assert rgb8.shape == (3, 5, 3)
        assert rgb8.dtype == np.uint8
        # Sky blue channel is exactly 1.0 -> 255
        assert np.all(rgb8[..., 2] == 255)

    def test_colors_are_read_only(self):
        """Test the stored color array cannot be modified."""
        from skylight.core.renderer import render
        from skylight.scene import Scene

        result = render(_camera(), Scene(), width=2, height=2, samples_per_pixel=1, max_depth=1)
        with pytest.raises(ValueError):
            result.colors[0, 0, 0] = 0.0


class TestRender:
    """Tests for rendering scenes."""

    def test_zero_depth_renders_black(self):
        """Test max_depth 0 gives a black image."""
        from skylight.core.renderer import render
        from skylight.scene import Scene

        result = render(_camera(), Scene(), width=4, height=2, samples_per_pixel=3, max_depth=0)
        assert np.all(result.colors == 0.0)

    def test_ground_is_darker_than_sky(self):
        """Test a gray diffuse ground renders darker than the empty view."""
        from skylight.core.renderer import render
        from skylight.materials import Diffuse
        from skylight.scene import Scene, SphereShape

        camera = _camera()
        sky = render(camera, Scene(), width=16, height=8, samples_per_pixel=16, max_depth=10)

        scene = Scene()
        scene.insert(SphereShape((0.0, -1000.0, 0.0), 1000.0, Diffuse((0.5, 0.5, 0.5))))
        ground = render(camera, scene, width=16, height=8, samples_per_pixel=16, max_depth=10)

        assert ground.colors.mean() < sky.colors.mean()
        # Bottom row looks down at the ground
        assert np.mean(ground[8, 0]) < np.mean(sky[8, 0])

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0},
            {"height": -1},
            {"samples_per_pixel": 0},
            {"max_depth": -1},
        ],
    )
    def test_invalid_settings(self, kwargs):
        """Test invalid image parameters raise ValueError."""
        from skylight.core.renderer import render
        from skylight.scene import Scene

        params = {"width": 4, "height": 4, "samples_per_pixel": 1, "max_depth": 1}
        params.update(kwargs)
        with pytest.raises(ValueError):
            render(_camera(), Scene(), **params)

    def test_render_with_settings(self):
        """Test settings objects drive the render."""
        from skylight.config import RenderSettings
        from skylight.core.renderer import render_with_settings
        from skylight.scene import Scene

        settings = RenderSettings(width=6, height=2, samples_per_pixel=1, max_depth=3)
        result = render_with_settings(_camera(3.0), Scene(), settings)

        assert (result.width, result.height) == (6, 2)
        assert result.samples_per_pixel == 1
        assert result.max_depth == 3
        assert result.elapsed >= 0.0

    def test_scene_released_after_render(self):
        """Test the scene accepts non-blocking inserts once a render returns."""
        from skylight.core.renderer import render
        from skylight.materials import Diffuse
        from skylight.scene import Scene, SphereShape

        scene = Scene()
        render(_camera(), scene, width=2, height=2, samples_per_pixel=1, max_depth=1)

        assert scene.guard.readers == 0
        scene.insert(SphereShape((0.0, 0.0, -2.0), 0.5, Diffuse((0.5, 0.5, 0.5))), blocking=False)
