"""Camera module for view and ray generation.

Components:
    thin_lens: Thin-lens perspective camera with optional depth of field

Ray generation uses normalized screen coordinates:
    s in [0, 1]: left to right across the image
    t in [0, 1]: bottom to top across the image
"""

from .thin_lens import (
    Camera,
    ScreenGeometry,
    get_camera_info,
    get_screen_ray,
    screen_ray,
    setup_camera,
)

__all__ = [
    "Camera",
    "ScreenGeometry",
    "setup_camera",
    "get_screen_ray",
    "screen_ray",
    "get_camera_info",
]
