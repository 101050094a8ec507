"""Diffuse (Lambertian) material implementation.

A diffuse surface always scatters. The outgoing direction is a random unit
vector in the hemisphere around the surface normal, and each bounce
multiplies the carried light by the material color (albedo).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from skylight.materials.diffuse import Diffuse
    >>> clay = Diffuse(color=(0.8, 0.5, 0.2))
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti

from skylight.core.vector import random_in_hemisphere, vec3
from skylight.geometry.contact import Contact
from skylight.materials.base import MaterialKind, Scatter, validate_color


@dataclass(frozen=True)
class Diffuse:
    """Diffuse material parameters.

    Attributes:
        color: The albedo (RGB, each component in [0, 1]).
    """

    color: tuple[float, float, float]

    kind: ClassVar[MaterialKind] = MaterialKind.DIFFUSE

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", validate_color(self.color))

    def params(self) -> dict[str, object]:
        return {"color": list(self.color)}


@ti.func
def scatter_diffuse(color: vec3, contact: Contact) -> Scatter:
    """Scatter a ray off a diffuse surface.

    Args:
        color: The albedo.
        contact: The surface contact (normal faces against the ray).

    Returns:
        A Scatter starting at the contact point, always scattered.
    """
    target = contact.point + random_in_hemisphere(contact.normal)
    return Scatter(
        scattered=1,
        origin=contact.point,
        direction=target - contact.point,
        attenuation=color,
    )
