"""Dielectric (glass/water) material implementation.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when sin(theta_t) would exceed 1

The material randomly chooses between reflection and refraction based on
the Fresnel reflectance probability, which increases at grazing angles.
Dielectrics never absorb: the attenuation is always white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from skylight.materials.dielectric import Dielectric
    >>> glass = Dielectric(refraction_index=1.5)
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from skylight.core.ray import Ray
from skylight.core.vector import normalize, reflect, refract, schlick_reflectance, vec3
from skylight.geometry.contact import Contact
from skylight.materials.base import MaterialKind, Scatter


@dataclass(frozen=True)
class Dielectric:
    """Dielectric material parameters.

    Attributes:
        refraction_index: Index of refraction. Common values:
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
            Values below 1.0 model a bubble of air inside a denser medium.
    """

    refraction_index: float = 1.5

    kind: ClassVar[MaterialKind] = MaterialKind.DIELECTRIC

    def __post_init__(self) -> None:
        if self.refraction_index <= 0.0:
            raise ValueError(
                f"Index of refraction = {self.refraction_index} must be positive."
            )
        object.__setattr__(self, "refraction_index", float(self.refraction_index))

    def params(self) -> dict[str, object]:
        return {"refraction_index": self.refraction_index}


@ti.func
def refraction_ratio(refraction_index: ti.f64, front_face: ti.i32) -> ti.f64:
    """Ratio of indices for a ray crossing the surface.

    Entering from outside (front_face == 1): 1 / index (air to material).
    Leaving from inside: index (material to air).
    """
    ratio = refraction_index
    if front_face == 1:
        ratio = 1.0 / refraction_index
    return ratio


@ti.func
def cannot_refract(ratio: ti.f64, cos_theta: ti.f64) -> ti.i32:
    """Check for total internal reflection (ratio * sin(theta) > 1)."""
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    return ratio * sin_theta > 1.0


@ti.func
def scatter_dielectric(refraction_index: ti.f64, ray: Ray, contact: Contact) -> Scatter:
    """Scatter a ray off a dielectric surface.

    Reflects on total internal reflection, or when a uniform draw falls
    below the Schlick reflectance; refracts otherwise.

    Args:
        refraction_index: Index of refraction of the material.
        ray: The incoming ray.
        contact: The surface contact (normal faces against the ray).

    Returns:
        A Scatter with white attenuation, always scattered.
    """
    ratio = refraction_ratio(refraction_index, contact.front_face)
    unit_direction = normalize(ray.direction)
    cos_theta = tm.min(tm.dot(-unit_direction, contact.normal), 1.0)

    direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract(ratio, cos_theta) or ti.random(ti.f64) < schlick_reflectance(
        cos_theta, ratio
    ):
        direction = reflect(unit_direction, contact.normal)
    else:
        direction = refract(unit_direction, contact.normal, ratio)

    return Scatter(
        scattered=1,
        origin=contact.point,
        direction=direction,
        attenuation=vec3(1.0, 1.0, 1.0),
    )
