"""Parallel per-pixel sampler and image assembly.

Every pixel is an independent unit of work: draw samples_per_pixel jittered
primary rays through it, estimate each with ray_color, and average. The
render kernel maps over the flattened pixel index space; Taichi spreads the
outermost loop across its worker threads (or GPU threads), and each worker
draws from its own random state.

Results are keyed by explicit (x, y) scene-space coordinates, with y growing
upward, so completion order never matters. RenderResult flips rows when
producing a conventional top-row-first image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from skylight.camera import Camera
    >>> from skylight.core.renderer import render
    >>> from skylight.scene import Scene
    >>>
    >>> scene = Scene()
    >>> camera = Camera.looking_from((0.0, 1.0, 3.0), (0.0, 0.0, 0.0), aspect_ratio=2.0)
    >>> result = render(camera, scene, width=64, height=32, samples_per_pixel=8, max_depth=10)
    >>> r, g, b = result[0, 0]
    >>> rgb8 = result.to_rgb8()  # (32, 64, 3) uint8, row 0 = top
"""

import logging
import time
from collections.abc import Iterator, Mapping
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti

from skylight.camera.thin_lens import Camera, get_screen_ray, setup_camera
from skylight.config import RenderSettings
from skylight.core.color import to_rgb8
from skylight.core.integrator import ray_color
from skylight.core.vector import vec3
from skylight.scene.aggregate import Scene
from skylight.scene.guard import device_lock

logger = logging.getLogger(__name__)

Color = tuple[float, float, float]


@ti.func
def sample_pixel(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32, samples: ti.i32, max_depth: ti.i32) -> vec3:
    """Average samples jittered radiance estimates through pixel (x, y).

    Each sample adds a uniform [0, 1) offset to the pixel's integer
    coordinates and normalizes by the image dimensions.
    """
    total = vec3(0.0, 0.0, 0.0)
    for _sample in range(samples):
        s = (ti.cast(x, ti.f64) + ti.random(ti.f64)) / ti.cast(width, ti.f64)
        t = (ti.cast(y, ti.f64) + ti.random(ti.f64)) / ti.cast(height, ti.f64)
        ray = get_screen_ray(s, t)
        total += ray_color(ray, max_depth)
    return total / ti.cast(samples, ti.f64)


@ti.kernel
def _render_pixels(
    out: ti.types.ndarray(dtype=ti.f64, ndim=2),
    width: ti.i32,
    height: ti.i32,
    samples: ti.i32,
    max_depth: ti.i32,
):
    """Render every pixel into out, one row of out per flattened pixel index.

    Pixel index i covers x = i % width, y = i // width.
    """
    for i in range(width * height):
        x = i % width
        y = i // width
        color = sample_pixel(x, y, width, height, samples, max_depth)
        out[i, 0] = color.x
        out[i, 1] = color.y
        out[i, 2] = color.z


@dataclass(frozen=True, eq=False)
class RenderResult(Mapping):
    """The colors of a finished render, keyed by pixel coordinate.

    A read-only mapping from (x, y) to a linear (r, g, b) color, where x
    grows to the right and y grows upward (scene space).

    Attributes:
        colors: Array of shape (width, height, 3) indexed [x, y].
        samples_per_pixel: Samples averaged per pixel.
        max_depth: Bounce budget used per path.
        elapsed: Wall-clock render time in seconds.
    """

    colors: npt.NDArray[np.float64]
    samples_per_pixel: int
    max_depth: int
    elapsed: float = 0.0

    @property
    def width(self) -> int:
        return int(self.colors.shape[0])

    @property
    def height(self) -> int:
        return int(self.colors.shape[1])

    def __getitem__(self, key: tuple[int, int]) -> Color:
        x, y = key
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise KeyError(key)
        c = self.colors[x, y]
        return float(c[0]), float(c[1]), float(c[2])

    def __iter__(self) -> Iterator[tuple[int, int]]:
        for y in range(self.height):
            for x in range(self.width):
                yield x, y

    def __len__(self) -> int:
        return self.width * self.height

    def pixels(self) -> Iterator[tuple[int, int, Color]]:
        """Iterate over (x, y, color) triples."""
        for x, y in self:
            yield x, y, self[x, y]

    def to_image(self) -> npt.NDArray[np.float64]:
        """Linear image of shape (height, width, 3) with row 0 at the top.

        Pixel (x, y) lands at row height - 1 - y.
        """
        return np.ascontiguousarray(np.flipud(np.transpose(self.colors, (1, 0, 2))))

    def to_rgb8(self) -> npt.NDArray[np.uint8]:
        """8-bit image of shape (height, width, 3), no gamma, no clamping."""
        return to_rgb8(self.to_image())

    def __repr__(self) -> str:
        return (
            f"RenderResult(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.samples_per_pixel}, max_depth={self.max_depth})"
        )


def render_with_settings(camera: Camera, scene: Scene, settings: RenderSettings) -> RenderResult:
    """Render a scene as seen by a camera.

    The scene is held read-only for the whole render; inserts issued
    meanwhile wait (or fail, if non-blocking) until it finishes.

    Args:
        camera: The camera to render from.
        scene: The populated scene.
        settings: Image size, samples per pixel and bounce budget.

    Returns:
        The RenderResult mapping every pixel to its averaged color.

    Raises:
        SceneReplacedError: If a newer Scene has replaced this one.
    """
    width, height = settings.width, settings.height
    logger.info(
        "Rendering %dx%d, %d samples per pixel, max depth %d, %d shapes",
        width,
        height,
        settings.samples_per_pixel,
        settings.max_depth,
        len(scene),
    )

    out = np.zeros((width * height, 3), dtype=np.float64)
    start = time.perf_counter()
    with scene.reading(), device_lock:
        setup_camera(camera)
        _render_pixels(out, width, height, settings.samples_per_pixel, settings.max_depth)
        ti.sync()
    elapsed = time.perf_counter() - start
    logger.info("Raytracer computed in %.2fs", elapsed)

    colors = np.transpose(out.reshape(height, width, 3), (1, 0, 2)).copy()
    colors.setflags(write=False)
    return RenderResult(
        colors=colors,
        samples_per_pixel=settings.samples_per_pixel,
        max_depth=settings.max_depth,
        elapsed=elapsed,
    )


def render(
    camera: Camera,
    scene: Scene,
    width: int,
    height: int,
    samples_per_pixel: int,
    max_depth: int,
) -> RenderResult:
    """Render a scene; see render_with_settings().

    Raises:
        ValueError: If a dimension or the sample count is not positive, or
            max_depth is negative.
    """
    settings = RenderSettings(
        width=width,
        height=height,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
    )
    return render_with_settings(camera, scene, settings)
