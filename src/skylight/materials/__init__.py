"""Materials module for light scattering models.

Components:
    base: MaterialKind tags, the Scatter record and parameter validation
    diffuse: Lambertian diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like refraction with Schlick reflectance
    registry: The material arena and scattering dispatch

Each material is an immutable dataclass on the host and a Taichi function
on the device:
    scatter = scatter_<kind>(params..., ray, contact)
which either produces an outgoing ray with an attenuation color or absorbs
the ray (scatter.scattered == 0).
"""

from .base import MaterialKind, Scatter, make_absorbed, scattered_ray, validate_color
from .dielectric import Dielectric, cannot_refract, refraction_ratio, scatter_dielectric
from .diffuse import Diffuse, scatter_diffuse
from .metal import Metal, scatter_metal
from .registry import (
    MAX_MATERIALS,
    Material,
    clear_materials,
    get_material_count,
    get_material_kind,
    register_material,
    scatter,
)

__all__ = [
    "MaterialKind",
    "Scatter",
    "make_absorbed",
    "scattered_ray",
    "validate_color",
    # Diffuse
    "Diffuse",
    "scatter_diffuse",
    # Metal
    "Metal",
    "scatter_metal",
    # Dielectric
    "Dielectric",
    "scatter_dielectric",
    "refraction_ratio",
    "cannot_refract",
    # Arena
    "Material",
    "MAX_MATERIALS",
    "register_material",
    "clear_materials",
    "get_material_count",
    "get_material_kind",
    "scatter",
]
