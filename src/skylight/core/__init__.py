"""Core rendering module.

Components:
    vector: Vector utilities and random sampling routines
    ray: Ray data structure
    color: Color constants, the sky background and 8-bit conversion
    integrator: The recursive-depth radiance estimator (ray_color)
    renderer: Parallel per-pixel sampling and image assembly

The radiance estimator is pure unidirectional path tracing: paths bounce off
materials until they escape to the sky, are absorbed, or run out of depth.
"""

from .color import BLACK, GRAY, SKY_BLUE, WHITE, background, color_to_rgb8, to_rgb8
from .ray import Ray, make_ray, normalized_ray, ray_at
from .vector import (
    NEAR_ZERO_EPSILON,
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    normalize,
    random_in_hemisphere,
    random_in_unit_cube,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# Note: integrator and renderer are NOT imported here because they allocate
# Taichi fields. Import them directly once Taichi is initialised.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "normalized_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "near_zero",
    "reflect",
    "refract",
    "schlick_reflectance",
    "random_in_unit_cube",
    "random_unit_vector",
    "random_in_unit_sphere",
    "random_in_hemisphere",
    "random_in_unit_disk",
    "NEAR_ZERO_EPSILON",
    "background",
    "to_rgb8",
    "color_to_rgb8",
    "WHITE",
    "BLACK",
    "GRAY",
    "SKY_BLUE",
]
