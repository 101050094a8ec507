"""Sphere primitive and ray-sphere intersection.

The ray-sphere intersection is found by solving:
    |origin + t * direction - center|^2 = radius^2

Expanding and rearranging gives the quadratic equation:
    a*t^2 + 2*half_b*t + c = 0

where:
    oc = origin - center
    a = dot(direction, direction)
    half_b = dot(oc, direction)
    c = dot(oc, oc) - radius^2

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from skylight.core.vector import vec3
    >>> from skylight.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from skylight.core.ray import Ray, ray_at
from skylight.core.vector import vec3
from skylight.geometry.contact import Contact, make_miss, set_face_normal


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f64


@ti.func
def in_bounds(t: ti.f64, t_min: ti.f64, t_max: ti.f64) -> ti.i32:
    """Check t against the half-open interval [t_min, t_max)."""
    return t_min <= t and t < t_max


@ti.func
def hit_sphere(
    ray: Ray,
    sphere: Sphere,
    material_id: ti.i32,
    t_min: ti.f64,
    t_max: ti.f64,
) -> Contact:
    """Find the nearest intersection of a ray and a sphere within bounds.

    The smaller root is tried first; the larger root is only used when the
    smaller one falls outside [t_min, t_max). A positive t_min keeps rays
    leaving a surface from hitting that same surface again.

    Args:
        ray: The ray to test (direction need not be normalized).
        sphere: The sphere to test against.
        material_id: Material arena index recorded in the contact.
        t_min: Smallest accepted t (inclusive).
        t_max: Largest accepted t (exclusive).

    Returns:
        A Contact; check its hit field.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    result = make_miss()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (-half_b - sqrt_d) / a
        valid = in_bounds(root, t_min, t_max)
        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = in_bounds(root, t_min, t_max)

        if valid:
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius
            normal, front_face = set_face_normal(ray.direction, outward_normal)
            result = Contact(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=material_id,
            )

    return result
