"""Geometry module for contact records and shape intersection.

Components:
    contact: Contact record shared by every shape kind, and its host copy
    sphere: Sphere primitive with ray-sphere intersection

Every intersection routine is a Taichi function with the same contract:
    contact = hit_<shape>(ray, shape, material_id, t_min, t_max)
returning the nearest contact with t in [t_min, t_max), or a miss.
"""

from .contact import Contact, ContactInfo, make_miss, set_face_normal
from .sphere import Sphere, hit_sphere, in_bounds

__all__ = [
    "Contact",
    "ContactInfo",
    "make_miss",
    "set_face_normal",
    "Sphere",
    "hit_sphere",
    "in_bounds",
]
