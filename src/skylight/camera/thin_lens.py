"""Thin-lens camera model for perspective ray generation.

The camera supports:
- Look-at positioning (eye, look_at, up)
- Vertical field of view in degrees
- Arbitrary aspect ratios
- Depth of field through a lens aperture and focus distance

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from look_at toward eye (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The screen is a rectangle at focus_dist in front of the eye. A screen ray
starts at the eye, jittered across a disk of radius aperture / 2 in the
(u, v) plane, and aims at a point on that rectangle. With aperture == 0 this
is a pinhole camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from skylight.camera.thin_lens import Camera, setup_camera, get_screen_ray
    >>>
    >>> camera = Camera(
    ...     eye=(0.0, 0.0, 3.0),
    ...     look_at=(0.0, 0.0, 0.0),
    ...     up=(0.0, 1.0, 0.0),
    ...     vfov=60.0,
    ...     aspect_ratio=16.0 / 9.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_screen_ray(0.5, 0.5)  # Ray through the screen center
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti

from skylight.core.ray import Ray, make_ray
from skylight.core.vector import random_in_unit_disk
from skylight.scene.guard import device_lock

Vector3 = tuple[float, float, float]

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class ScreenGeometry:
    """Precomputed camera basis and screen rectangle.

    Attributes:
        u: Right direction in world space.
        v: Up direction in world space.
        w: Backward direction (opposite the view direction).
        origin: Lower-left corner of the screen rectangle.
        horizontal: Full-width edge vector of the screen.
        vertical: Full-height edge vector of the screen.
    """

    u: Vector3
    v: Vector3
    w: Vector3
    origin: Vector3
    horizontal: Vector3
    vertical: Vector3


@dataclass(frozen=True)
class Camera:
    """Configuration for a thin-lens (perspective) camera.

    Attributes:
        eye: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at in world space (x, y, z).
        up: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter; 0 disables depth of field.
        focus_dist: Distance from the eye to the plane in perfect focus.
    """

    eye: Vector3
    look_at: Vector3
    up: Vector3
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_dist: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.aperture < 0.0:
            raise ValueError(f"aperture must be >= 0, got {self.aperture}")
        if self.focus_dist <= 0.0:
            raise ValueError(f"focus_dist must be positive, got {self.focus_dist}")

        view = np.subtract(self.eye, self.look_at, dtype=np.float64)
        if np.linalg.norm(view) < 1e-8:
            raise ValueError("eye and look_at coincide; the view direction is undefined")
        if np.linalg.norm(np.cross(self.up, view)) < 1e-8:
            raise ValueError("up is parallel to the view direction")

    @classmethod
    def looking_from(
        cls,
        eye: Vector3,
        look_at: Vector3,
        aspect_ratio: float,
        vfov: float = 20.0,
        aperture: float = 0.0,
        up: Vector3 = (0.0, 1.0, 0.0),
    ) -> "Camera":
        """Create a camera focused at the look_at point."""
        focus_dist = math.dist(eye, look_at)
        return cls(
            eye=eye,
            look_at=look_at,
            up=up,
            vfov=vfov,
            aspect_ratio=aspect_ratio,
            aperture=aperture,
            focus_dist=focus_dist,
        )

    @property
    def lens_radius(self) -> float:
        return self.aperture / 2.0

    def basis(self) -> ScreenGeometry:
        """Compute the orthonormal basis and screen rectangle.

        The viewport is 2 * tan(vfov / 2) high at unit distance and is
        scaled out to focus_dist.
        """
        h = math.tan(math.radians(self.vfov) / 2.0)
        viewport_height = 2.0 * h
        viewport_width = self.aspect_ratio * viewport_height

        eye = np.array(self.eye, dtype=np.float64)
        look_at = np.array(self.look_at, dtype=np.float64)
        up = np.array(self.up, dtype=np.float64)

        w = _unit(eye - look_at)
        u = _unit(np.cross(up, w))
        v = np.cross(w, u)

        horizontal = self.focus_dist * viewport_width * u
        vertical = self.focus_dist * viewport_height * v
        origin = eye - horizontal / 2.0 - vertical / 2.0 - self.focus_dist * w

        return ScreenGeometry(
            u=_tuple(u),
            v=_tuple(v),
            w=_tuple(w),
            origin=_tuple(origin),
            horizontal=_tuple(horizontal),
            vertical=_tuple(vertical),
        )


def _unit(x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    return x / np.linalg.norm(x)


def _tuple(x: npt.NDArray[np.float64]) -> Vector3:
    return float(x[0]), float(x[1]), float(x[2])


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_eye = ti.Vector.field(3, dtype=ti.f64, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f64, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f64, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f64, shape=())  # Backward (opposite view)

# Screen rectangle
_screen_origin = ti.Vector.field(3, dtype=ti.f64, shape=())  # Lower-left corner
_screen_horizontal = ti.Vector.field(3, dtype=ti.f64, shape=())  # Full width
_screen_vertical = ti.Vector.field(3, dtype=ti.f64, shape=())  # Full height

_lens_radius = ti.field(dtype=ti.f64, shape=())


def setup_camera(camera: Camera) -> None:
    """Upload a camera's precomputed geometry to device state.

    Must be called before rendering; the last camera set up is the one
    get_screen_ray() uses.
    """
    geometry = camera.basis()

    with device_lock:
        _camera_eye[None] = camera.eye
        _camera_u[None] = geometry.u
        _camera_v[None] = geometry.v
        _camera_w[None] = geometry.w
        _screen_origin[None] = geometry.origin
        _screen_horizontal[None] = geometry.horizontal
        _screen_vertical[None] = geometry.vertical
        _lens_radius[None] = camera.lens_radius


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def get_screen_ray(s: ti.f64, t: ti.f64) -> Ray:
    """Generate a ray through normalized screen coordinates (s, t).

    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    The direction is screen point minus ray origin and is not normalized.

    Args:
        s: Horizontal coordinate in [0, 1].
        t: Vertical coordinate in [0, 1].

    Returns:
        A Ray from the (lens-jittered) eye toward the screen point.
    """
    rd = _lens_radius[None] * random_in_unit_disk()
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y
    origin = _camera_eye[None] + offset
    target = _screen_origin[None] + s * _screen_horizontal[None] + t * _screen_vertical[None]
    return make_ray(origin, target - origin)


@ti.kernel
def _screen_ray_kernel(s: ti.f64, t: ti.f64, out: ti.types.ndarray(dtype=ti.f64, ndim=1)):
    for _ in range(1):
        ray = get_screen_ray(s, t)
        for k in ti.static(range(3)):
            out[k] = ray.origin[k]
            out[3 + k] = ray.direction[k]


def screen_ray(s: float, t: float) -> tuple[Vector3, Vector3]:
    """Generate one screen ray from Python.

    Returns:
        A tuple (origin, direction).
    """
    out = np.zeros(6, dtype=np.float64)
    with device_lock:
        _screen_ray_kernel(s, t, out)
    return (float(out[0]), float(out[1]), float(out[2])), (float(out[3]), float(out[4]), float(out[5]))


def get_camera_info() -> dict[str, tuple[float, ...]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with eye, u, v, w, origin, horizontal, vertical and
        lens_radius (as a 1-tuple).
    """
    fields = {
        "eye": _camera_eye,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "origin": _screen_origin,
        "horizontal": _screen_horizontal,
        "vertical": _screen_vertical,
    }
    info = {}
    for name, f in fields.items():
        vec = f[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    info["lens_radius"] = (float(_lens_radius[None]),)
    return info
