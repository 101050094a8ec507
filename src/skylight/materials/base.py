"""Shared pieces of the material scattering contract.

Every material answers one question for an incoming ray and a contact:
produce an outgoing ray and an attenuation color, or absorb the ray. On the
device this answer is a Scatter record; materials are told apart by a
MaterialKind tag and dispatched by the registry.
"""

from collections.abc import Sequence
from enum import IntEnum

import taichi as ti

from skylight.core.ray import Ray
from skylight.core.vector import vec3


class MaterialKind(IntEnum):
    """Enumeration of supported material kinds.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    DIFFUSE = 0
    METAL = 1
    DIELECTRIC = 2


@ti.dataclass
class Scatter:
    """Result of one scattering event.

    Attributes:
        scattered: 1 if a new ray was produced, 0 if the ray was absorbed.
            The other fields are only valid when scattered == 1.
        origin: Origin of the outgoing ray (the contact point).
        direction: Direction of the outgoing ray (not normalized).
        attenuation: Per-channel factor applied to the light carried back
            along the outgoing ray.
    """

    scattered: ti.i32
    origin: vec3
    direction: vec3
    attenuation: vec3


@ti.func
def make_absorbed() -> Scatter:
    """Create a Scatter indicating the ray was absorbed."""
    return Scatter(
        scattered=0,
        origin=vec3(0.0, 0.0, 0.0),
        direction=vec3(0.0, 0.0, 0.0),
        attenuation=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def scattered_ray(scatter: Scatter) -> Ray:
    """The outgoing ray of a Scatter."""
    return Ray(origin=scatter.origin, direction=scatter.direction)


def validate_color(color: Sequence[float], name: str = "color") -> tuple[float, float, float]:
    """Check an RGB triple for energy conservation and return it as floats.

    Raises:
        ValueError: If it does not have three components or any component is
            outside [0, 1].
    """
    if len(color) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(color)}")
    for i, component in enumerate(color):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"{name} component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    return float(color[0]), float(color[1]), float(color[2])
