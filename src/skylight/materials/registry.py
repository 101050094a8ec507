"""Material arena and scattering dispatch.

All materials in a scene live in one structure-of-arrays table indexed by a
material id. Each slot records its MaterialKind tag plus the parameters of
every kind (unused ones stay zero). Contacts carry the material id, so any
number of shapes and contacts share a single immutable slot.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from skylight.materials.registry import register_material
    >>> from skylight.materials.metal import Metal
    >>> mirror_id = register_material(Metal(color=(0.9, 0.9, 0.9)))
"""

import taichi as ti

from skylight.core.ray import Ray
from skylight.geometry.contact import Contact
from skylight.materials.base import MaterialKind, Scatter, make_absorbed
from skylight.materials.dielectric import Dielectric, scatter_dielectric
from skylight.materials.diffuse import Diffuse, scatter_diffuse
from skylight.materials.metal import Metal, scatter_metal

Material = Diffuse | Metal | Dielectric

# Maximum number of materials in the arena
MAX_MATERIALS = 1024

# Storage for material properties
material_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_colors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
material_fuzz = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_refraction_indices = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def register_material(material: Material) -> int:
    """Add a material to the arena.

    Args:
        material: A Diffuse, Metal or Dielectric instance.

    Returns:
        The material id of the new slot.

    Raises:
        TypeError: If the object is not a known material.
        RuntimeError: If the maximum number of materials is exceeded.
    """
    if not isinstance(material, (Diffuse, Metal, Dielectric)):
        raise TypeError(f"Not a material: {material!r}")

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    color = (0.0, 0.0, 0.0)
    fuzz = 0.0
    refraction_index = 0.0
    if isinstance(material, Diffuse):
        color = material.color
    elif isinstance(material, Metal):
        color = material.color
        fuzz = material.fuzz
    else:
        refraction_index = material.refraction_index

    material_kinds[idx] = int(material.kind)
    material_colors[idx] = color
    material_fuzz[idx] = fuzz
    material_refraction_indices[idx] = refraction_index
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the arena."""
    return int(num_materials[None])


@ti.func
def get_material_kind(material_id: ti.i32) -> ti.i32:
    """Get the MaterialKind of a material id, or -1 for an invalid id."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_kinds[material_id]
    return result


@ti.func
def scatter(ray: Ray, contact: Contact) -> Scatter:
    """Dispatch to the scattering function of the contact's material.

    Args:
        ray: The incoming ray.
        contact: A contact with hit == 1.

    Returns:
        The Scatter produced by the material. An unknown material id
        absorbs the ray.
    """
    material_id = contact.material_id
    kind = get_material_kind(material_id)

    result = make_absorbed()
    if kind == int(MaterialKind.DIFFUSE):
        result = scatter_diffuse(material_colors[material_id], contact)
    elif kind == int(MaterialKind.METAL):
        result = scatter_metal(
            material_colors[material_id], material_fuzz[material_id], ray, contact
        )
    elif kind == int(MaterialKind.DIELECTRIC):
        result = scatter_dielectric(material_refraction_indices[material_id], ray, contact)
    return result

