"""Linear RGB color constants, the sky background and 8-bit conversion.

Colors are linear-space vec3 values. The background is an analytic sky:
a vertical blend from white (looking straight down) to sky blue (looking
straight up).

Conversion to 8 bits scales by 255.99 and truncates. There is no gamma
correction and no clamping: a channel above 1.0 wraps around modulo 256,
matching unsigned truncation.
"""

import numpy as np
import numpy.typing as npt
import taichi as ti

from skylight.core.vector import normalize, vec3

WHITE = (1.0, 1.0, 1.0)
BLACK = (0.0, 0.0, 0.0)
GRAY = (0.5, 0.5, 0.5)
SKY_BLUE = (0.5, 0.7, 1.0)

# Scale from [0, 1] linear values to [0, 255] integers
RGB8_SCALE = 255.99


@ti.func
def background(direction: vec3) -> vec3:
    """Sky color seen along a direction.

    The direction is normalized and its y component mapped from [-1, 1] to a
    blend factor t in [0, 1], then (1 - t) * white + t * sky blue.
    """
    unit = normalize(direction)
    t = 0.5 * (unit.y + 1.0)
    return (1.0 - t) * vec3(1.0, 1.0, 1.0) + t * vec3(0.5, 0.7, 1.0)


def to_rgb8(colors: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Convert linear colors to 8-bit channels.

    Args:
        colors: Array of linear RGB values, any shape ending in 3.

    Returns:
        uint8 array of the same shape. Values above 1.0 wrap modulo 256.
    """
    scaled = np.asarray(colors, dtype=np.float64) * RGB8_SCALE
    return (scaled.astype(np.int64) % 256).astype(np.uint8)


def color_to_rgb8(color: tuple[float, float, float]) -> tuple[int, int, int]:
    """Convert one linear color to an (r, g, b) tuple of 8-bit ints."""
    r, g, b = to_rgb8(color).tolist()
    return r, g, b
