"""Host-side shape descriptions.

A shape couples geometry with the material it is made of. Shapes are
immutable values; inserting one into a Scene hands it over to the scene,
which uploads its parameters to device storage tagged with its ShapeKind.
New primitive kinds (planes, triangles) add a ShapeKind member, a dataclass
here and an intersection routine in skylight.geometry.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, ClassVar

from skylight.materials.dielectric import Dielectric
from skylight.materials.diffuse import Diffuse
from skylight.materials.metal import Metal


class ShapeKind(IntEnum):
    """Enumeration of supported shape kinds, used for intersection dispatch."""

    SPHERE = 0


@dataclass(frozen=True)
class SphereShape:
    """A sphere made of a material.

    Attributes:
        center: The center of the sphere as (x, y, z).
        radius: The radius of the sphere (positive).
        material: The material, shared by reference with other shapes.
    """

    center: tuple[float, float, float]
    radius: float
    material: Diffuse | Metal | Dielectric

    kind: ClassVar[ShapeKind] = ShapeKind.SPHERE

    def __post_init__(self) -> None:
        if len(self.center) != 3:
            raise ValueError(f"center must have 3 components, got {len(self.center)}")
        if self.radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        object.__setattr__(
            self, "center", (float(self.center[0]), float(self.center[1]), float(self.center[2]))
        )
        object.__setattr__(self, "radius", float(self.radius))

    def params(self) -> dict[str, Any]:
        return {"center": list(self.center), "radius": self.radius}
