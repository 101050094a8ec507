"""Metal (specular reflective) material implementation.

The reflection formula is:
    R = I - 2(I . N)N

where I is the normalized incident direction and N is the surface normal.
The reflected direction is then perturbed by fuzz times a random point in
the unit ball. A perturbed direction that points into the surface is
absorbed: fuzz can push reflections below the horizon.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from skylight.materials.metal import Metal
    >>> brushed_steel = Metal(color=(0.8, 0.8, 0.8), fuzz=0.3)
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from skylight.core.ray import Ray
from skylight.core.vector import normalize, random_in_unit_sphere, reflect, vec3
from skylight.geometry.contact import Contact
from skylight.materials.base import MaterialKind, Scatter, make_absorbed, validate_color


@dataclass(frozen=True)
class Metal:
    """Metal material parameters.

    Attributes:
        color: The reflective tint (RGB, each component in [0, 1]).
        fuzz: Perturbation of the reflected direction in [0, 1].
            0 = perfect mirror, 1 = maximum fuzziness.
    """

    color: tuple[float, float, float]
    fuzz: float = 0.0

    kind: ClassVar[MaterialKind] = MaterialKind.METAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", validate_color(self.color))
        if self.fuzz < 0.0 or self.fuzz > 1.0:
            raise ValueError(
                f"Fuzz = {self.fuzz} is outside [0, 1]. "
                "Fuzz must be between 0 (perfect mirror) and 1 (maximum fuzz)."
            )
        object.__setattr__(self, "fuzz", float(self.fuzz))

    def params(self) -> dict[str, object]:
        return {"color": list(self.color), "fuzz": self.fuzz}


@ti.func
def scatter_metal(color: vec3, fuzz: ti.f64, ray: Ray, contact: Contact) -> Scatter:
    """Scatter a ray off a metal surface.

    Args:
        color: The reflective tint.
        fuzz: Reflection perturbation in [0, 1].
        ray: The incoming ray.
        contact: The surface contact (normal faces against the ray).

    Returns:
        A Scatter with the fuzzed reflection, or an absorbed Scatter when
        that direction does not leave the surface.
    """
    reflected = reflect(normalize(ray.direction), contact.normal)
    direction = reflected + fuzz * random_in_unit_sphere()

    result = make_absorbed()
    if tm.dot(direction, contact.normal) > 0.0:
        result = Scatter(
            scattered=1,
            origin=contact.point,
            direction=direction,
            attenuation=color,
        )
    return result
