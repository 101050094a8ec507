"""Ray-shape contact records.

A Contact is what every shape's hit routine returns: either a miss (hit == 0)
or the nearest intersection inside the queried parametric interval. The
material is referenced by its index in the material arena, so any number of
contacts share one immutable material.

ContactInfo is the host-side (Python) copy of a Contact, returned by
Scene.hit() for use outside kernels.
"""

from dataclasses import dataclass

import taichi as ti

from skylight.core.vector import dot, vec3


@ti.dataclass
class Contact:
    """Record of a ray-shape intersection.

    Attributes:
        hit: 1 if the ray intersected the shape inside the bounds, 0 if not.
            The other fields are only valid when hit == 1.
        t: Parametric distance along the ray.
        point: World-space intersection point.
        normal: Unit surface normal, always oriented against the ray.
        front_face: 1 if the ray arrived from outside the shape, 0 if from
            inside.
        material_id: Index of the shape's material in the material arena.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss() -> Contact:
    """Create a Contact indicating no intersection."""
    return Contact(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def set_face_normal(direction: vec3, outward_normal: vec3):
    """Orient a unit outward normal against the incoming direction.

    Returns:
        A tuple (normal, front_face) where front_face is 1 when the outward
        normal already opposed the ray direction.
    """
    front_face = 1
    normal = outward_normal
    if dot(direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal
    return normal, front_face


@dataclass(frozen=True)
class ContactInfo:
    """Host-side copy of a Contact.

    Contacts compare by t only, so min() picks the nearest of several.
    """

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    front_face: bool
    material_id: int

    def __lt__(self, other: "ContactInfo") -> bool:
        return self.t < other.t
