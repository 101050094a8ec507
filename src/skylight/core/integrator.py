"""Radiance estimator for Monte Carlo path tracing.

ray_color follows one light path backward from the camera: at each contact
the surface material scatters the path onward and its attenuation scales
whatever light the rest of the path brings back. A path that escapes the
scene picks up the sky color; a path that is absorbed, or that runs out of
bounces, carries no light.

The estimator is written as a loop over the bounce budget with a running
throughput instead of recursion, which is equivalent:
    ray_color(r, d) = attenuation * ray_color(scattered, d - 1)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from skylight.core.integrator import trace_ray
    >>> color = trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=10)  # sky blue
"""

import numpy as np
import taichi as ti

from skylight.core.color import background
from skylight.core.ray import Ray
from skylight.core.vector import vec3
from skylight.materials.base import scattered_ray
from skylight.materials.registry import scatter
from skylight.scene.aggregate import T_MAX, T_MIN, hit_scene
from skylight.scene.guard import device_lock

# Default bounce budget per path
MAX_DEPTH = 50


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace (direction need not be normalized).
        max_depth: Remaining bounce budget. 0 returns black.

    Returns:
        The linear RGB radiance estimate.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray

    # Taichi has no recursion; active stands in for an early return
    active = 1
    for _bounce in range(max_depth):
        if active == 1:
            contact = hit_scene(current, T_MIN, T_MAX)
            if contact.hit == 0:
                # Escaped to the sky
                color = throughput * background(current.direction)
                active = 0
            else:
                result = scatter(current, contact)
                if result.scattered == 0:
                    # Absorbed
                    active = 0
                else:
                    throughput *= result.attenuation
                    current = scattered_ray(result)

    return color


@ti.kernel
def _trace_kernel(
    ox: ti.f64,
    oy: ti.f64,
    oz: ti.f64,
    dx: ti.f64,
    dy: ti.f64,
    dz: ti.f64,
    max_depth: ti.i32,
    out: ti.types.ndarray(dtype=ti.f64, ndim=1),
):
    # Single-iteration outer loop keeps the bounce loop serial
    for _ in range(1):
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        color = ray_color(ray, max_depth)
        for k in ti.static(range(3)):
            out[k] = color[k]


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Estimate the radiance along one ray from Python.

    Uses the scene currently in device storage.

    Args:
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z).
        max_depth: Bounce budget.

    Returns:
        The (r, g, b) radiance estimate for a single path.
    """
    out = np.zeros(3, dtype=np.float64)
    with device_lock:
        _trace_kernel(
            origin[0], origin[1], origin[2],
            direction[0], direction[1], direction[2],
            max_depth,
            out,
        )
    return float(out[0]), float(out[1]), float(out[2])
