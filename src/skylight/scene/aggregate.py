"""Scene aggregate: shape storage, nearest-hit queries and the Scene API.

Shapes are stored in Taichi fields (structure-of-arrays layout) so every
rendering thread can test rays against them. Each shape slot records its
ShapeKind, its material id and an index into the storage of its kind. The
scene answers the same hit contract as a single shape: the nearest contact
with t in [t_min, t_max), found by a linear scan over all shapes.

The Scene class owns the host-side bookkeeping: the inserted shapes in
insertion order, the material arena (equal materials share one slot) and a
read-write guard that keeps the scene immutable while renders read it.

Device storage is module-global and guarded by one module-level read-write
guard, so only one Scene is live at a time: constructing a Scene resets the
storage and marks every earlier Scene as replaced.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from skylight.materials import Diffuse
    >>> from skylight.scene.aggregate import Scene
    >>> from skylight.scene.shapes import SphereShape
    >>> scene = Scene()
    >>> ground = Diffuse(color=(0.5, 0.5, 0.5))
    >>> scene.insert(SphereShape((0.0, -1000.0, 0.0), 1000.0, ground))
    0
    >>> contact = scene.hit((0.0, 1.0, 0.0), (0.0, -1.0, 0.0))
"""

import logging
import math
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import numpy as np
import taichi as ti

from skylight.core.ray import Ray
from skylight.core.vector import vec3
from skylight.geometry.contact import Contact, ContactInfo, make_miss
from skylight.geometry.sphere import Sphere, hit_sphere
from skylight.materials.dielectric import Dielectric
from skylight.materials.diffuse import Diffuse
from skylight.materials.metal import Metal
from skylight.materials.registry import (
    MAX_MATERIALS,
    Material,
    clear_materials,
    register_material,
)
from skylight.scene.guard import ReadWriteGuard, SceneReplacedError, device_lock
from skylight.scene.shapes import ShapeKind, SphereShape

logger = logging.getLogger(__name__)

# Lower bound of accepted hits; keeps rays leaving a surface off that surface
T_MIN = 0.001
T_MAX = math.inf

# Maximum number of shapes in the scene
MAX_SHAPES = 1024

# Shape table: one slot per inserted shape
shape_kinds = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
shape_material_ids = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
shape_slots = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
num_shapes = ti.field(dtype=ti.i32, shape=())

# Sphere storage
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SHAPES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SHAPES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Guards the module-global storage above for every Scene
_guard = ReadWriteGuard()

# Bumped by each Scene() so older scenes can tell they were replaced
_live_generation = 0

# Host hit query output: hit, t, point xyz, normal xyz, front_face, material_id
_HIT_QUERY_SIZE = 10


def clear_shapes() -> None:
    """Clear all shapes from device storage.

    Resets the counts to zero; stale data is overwritten by later inserts.
    """
    num_shapes[None] = 0
    num_spheres[None] = 0


def get_shape_count() -> int:
    """Get the number of shapes in device storage."""
    return int(num_shapes[None])


def _store_sphere(shape: SphereShape) -> int:
    slot = num_spheres[None]
    sphere_centers[slot] = shape.center
    sphere_radii[slot] = shape.radius
    num_spheres[None] = slot + 1
    return slot


_STORE = {
    ShapeKind.SPHERE: _store_sphere,
}


def store_shape(shape: SphereShape, material_id: int) -> int:
    """Upload a shape to device storage.

    Args:
        shape: The shape to store.
        material_id: The material arena id of the shape's material.

    Returns:
        The index of the stored shape.

    Raises:
        TypeError: If the shape kind has no storage.
        RuntimeError: If the maximum number of shapes is exceeded.
    """
    store = _STORE.get(getattr(shape, "kind", None))
    if store is None:
        raise TypeError(f"Not a shape: {shape!r}")

    idx = num_shapes[None]
    if idx >= MAX_SHAPES:
        raise RuntimeError(f"Maximum number of shapes ({MAX_SHAPES}) exceeded")

    shape_kinds[idx] = int(shape.kind)
    shape_material_ids[idx] = material_id
    shape_slots[idx] = store(shape)
    num_shapes[None] = idx + 1
    return idx


@ti.func
def hit_shape(index: ti.i32, ray: Ray, t_min: ti.f64, t_max: ti.f64) -> Contact:
    """Dispatch a hit test to the stored shape at index by its kind."""
    kind = shape_kinds[index]
    slot = shape_slots[index]
    material_id = shape_material_ids[index]

    result = make_miss()
    if kind == int(ShapeKind.SPHERE):
        sphere = Sphere(center=sphere_centers[slot], radius=sphere_radii[slot])
        result = hit_sphere(ray, sphere, material_id, t_min, t_max)
    return result


@ti.func
def hit_scene(ray: Ray, t_min: ti.f64, t_max: ti.f64) -> Contact:
    """Find the nearest contact among all shapes.

    Every shape is tested with the same bounds and the contact with the
    smallest t wins; on a tie the earlier-inserted shape is kept.

    Args:
        ray: The ray to test.
        t_min: Smallest accepted t (inclusive).
        t_max: Largest accepted t (exclusive).

    Returns:
        The nearest Contact, or a miss if no shape was hit.
    """
    result = make_miss()
    for i in range(num_shapes[None]):
        contact = hit_shape(i, ray, t_min, t_max)
        if contact.hit == 1:
            if result.hit == 0 or contact.t < result.t:
                result = contact
    return result


@ti.kernel
def _hit_scene_kernel(
    ox: ti.f64,
    oy: ti.f64,
    oz: ti.f64,
    dx: ti.f64,
    dy: ti.f64,
    dz: ti.f64,
    t_min: ti.f64,
    t_max: ti.f64,
    out: ti.types.ndarray(dtype=ti.f64, ndim=1),
):
    # Single-iteration outer loop keeps the shape scan serial
    for _ in range(1):
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        contact = hit_scene(ray, t_min, t_max)
        out[0] = ti.cast(contact.hit, ti.f64)
        out[1] = contact.t
        for k in ti.static(range(3)):
            out[2 + k] = contact.point[k]
            out[5 + k] = contact.normal[k]
        out[8] = ti.cast(contact.front_face, ti.f64)
        out[9] = ti.cast(contact.material_id, ti.f64)


class Scene:
    """The scene aggregate: an insertion-ordered collection of shapes.

    Built once by a single writer, then shared read-only by renders. All
    mutation goes through the write side of the guard; renders hold the read
    side via reading().

    Device storage is shared by every Scene, so constructing a new Scene
    replaces the previous one. A replaced scene keeps its host-side shape
    list, but inserting into, querying or rendering it raises
    SceneReplacedError.

    Example:
        >>> scene = Scene()
        >>> glass = Dielectric(refraction_index=1.5)
        >>> scene.insert(SphereShape((0.0, 1.0, 0.0), 1.0, glass))
        0
        >>> with scene.reading():
        ...     pass  # render here
    """

    def __init__(self, blocking: bool = True) -> None:
        """Initialize an empty scene, resetting device storage.

        Args:
            blocking: Wait for renders of the previous scene to finish. When
                False, fail immediately instead.

        Raises:
            SceneBusyError: If blocking is False and a render holds the
                storage.
        """
        global _live_generation

        self._shapes: list[SphereShape] = []
        self._materials: list[Material] = []
        self._material_ids: dict[Material, int] = {}
        with _guard.write(blocking):
            _live_generation += 1
            self._generation = _live_generation
            self._reset_storage()

    @property
    def guard(self) -> ReadWriteGuard:
        """The read-write guard protecting device storage."""
        return _guard

    @property
    def is_live(self) -> bool:
        """Whether this scene still owns device storage."""
        return self._generation == _live_generation

    def _check_live(self) -> None:
        if not self.is_live:
            raise SceneReplacedError("Scene was replaced by a newer Scene; its device storage is gone")

    def _reset_storage(self) -> None:
        with device_lock:
            clear_shapes()
            clear_materials()
        self._shapes.clear()
        self._materials.clear()
        self._material_ids.clear()

    def clear(self, blocking: bool = True) -> None:
        """Remove every shape and material.

        Raises:
            SceneBusyError: If blocking is False and a render holds the scene.
            SceneReplacedError: If a newer Scene has replaced this one.
        """
        with _guard.write(blocking):
            self._check_live()
            self._reset_storage()
        logger.debug("Scene cleared")

    # =========================================================================
    # Construction
    # =========================================================================

    def _material_id(self, material: Material) -> int:
        material_id = self._material_ids.get(material)
        if material_id is None:
            material_id = register_material(material)
            self._material_ids[material] = material_id
            self._materials.append(material)
        return material_id

    def insert(self, shape: SphereShape, blocking: bool = True) -> int:
        """Insert a shape, taking ownership of it.

        The shape's material is added to the arena unless an equal material
        is already there, in which case the slot is shared.

        Args:
            shape: The shape to insert.
            blocking: Wait for running renders to release the scene. When
                False, fail immediately instead.

        Returns:
            The index of the inserted shape.

        Raises:
            TypeError: If the object is not a shape, or its material is not
                a known material.
            RuntimeError: If shape or material capacity is exceeded.
            SceneBusyError: If blocking is False and a render holds the scene.
            SceneReplacedError: If a newer Scene has replaced this one.
        """
        if not isinstance(shape, SphereShape):
            raise TypeError(f"Not a shape: {shape!r}")

        with _guard.write(blocking):
            self._check_live()
            if get_shape_count() >= MAX_SHAPES:
                raise RuntimeError(f"Maximum number of shapes ({MAX_SHAPES}) exceeded")
            with device_lock:
                material_id = self._material_id(shape.material)
                index = store_shape(shape, material_id)
            self._shapes.append(shape)

        logger.debug("Inserted %s #%d with material %d", shape.kind.name.lower(), index, material_id)
        return index

    def extend(self, shapes: list[SphereShape]) -> list[int]:
        """Insert several shapes in order."""
        return [self.insert(shape) for shape in shapes]

    # =========================================================================
    # Queries
    # =========================================================================

    @contextmanager
    def reading(self) -> Iterator["Scene"]:
        """Hold the scene read-only for the duration of the block.

        Raises:
            SceneReplacedError: If a newer Scene has replaced this one.
        """
        with _guard.read():
            self._check_live()
            yield self

    def hit(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        t_min: float = T_MIN,
        t_max: float = T_MAX,
    ) -> ContactInfo | None:
        """Find the nearest contact of a ray with the scene.

        Safe to call from several threads at once; each call gets its own
        result buffer.

        Args:
            origin: Ray origin as (x, y, z).
            direction: Ray direction as (x, y, z); need not be normalized.
            t_min: Smallest accepted t (inclusive).
            t_max: Largest accepted t (exclusive).

        Returns:
            The nearest ContactInfo, or None if the ray hits nothing.

        Raises:
            SceneReplacedError: If a newer Scene has replaced this one.
        """
        out = np.zeros(_HIT_QUERY_SIZE, dtype=np.float64)
        with self.reading():
            with device_lock:
                _hit_scene_kernel(
                    origin[0], origin[1], origin[2],
                    direction[0], direction[1], direction[2],
                    t_min, t_max,
                    out,
                )

        if out[0] == 0.0:
            return None
        return ContactInfo(
            t=float(out[1]),
            point=(float(out[2]), float(out[3]), float(out[4])),
            normal=(float(out[5]), float(out[6]), float(out[7])),
            front_face=bool(out[8]),
            material_id=int(out[9]),
        )

    @property
    def shapes(self) -> tuple[SphereShape, ...]:
        """The inserted shapes, in insertion order."""
        return tuple(self._shapes)

    @property
    def materials(self) -> tuple[Material, ...]:
        """The distinct materials, indexed by material id."""
        return tuple(self._materials)

    def get_material(self, material_id: int) -> Material:
        return self._materials[material_id]

    def __len__(self) -> int:
        return len(self._shapes)

    def __repr__(self) -> str:
        return (
            f"Scene(shapes={len(self._shapes)}, materials={len(self._materials)}, "
            f"live={self.is_live})"
        )

    # =========================================================================
    # Plain-data configuration
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        materials = [
            {"type": material.kind.name.lower(), **material.params()}
            for material in self._materials
        ]
        shapes = [
            {
                "type": shape.kind.name.lower(),
                **shape.params(),
                "material_id": self._material_ids[shape.material],
            }
            for shape in self._shapes
        ]
        return {"materials": materials, "shapes": shapes}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Replace the scene contents with a dictionary from to_dict().

        The data is fully parsed and checked before the current contents are
        dropped, so a failed load leaves the scene unchanged.

        Raises:
            ValueError: If the data names an unknown material or shape type,
                or a shape refers to a missing material.
            RuntimeError: If the data holds more shapes or distinct materials
                than storage allows.
            SceneReplacedError: If a newer Scene has replaced this one.
        """
        materials = [_material_from_dict(entry) for entry in data.get("materials", [])]
        shapes = []
        for entry in data.get("shapes", []):
            shape_type = entry.get("type", "").lower()
            if shape_type != "sphere":
                raise ValueError(f"Unknown shape type: {shape_type}")
            material_id = entry.get("material_id", 0)
            if not 0 <= material_id < len(materials):
                raise ValueError(f"Invalid material_id: {material_id}")
            center = entry.get("center", [0.0, 0.0, 0.0])
            shapes.append(
                SphereShape(
                    center=(center[0], center[1], center[2]),
                    radius=entry.get("radius", 1.0),
                    material=materials[material_id],
                )
            )

        if len(shapes) > MAX_SHAPES:
            raise RuntimeError(f"Maximum number of shapes ({MAX_SHAPES}) exceeded")
        if len(set(materials)) > MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        with _guard.write():
            self._check_live()
            self._reset_storage()
            with device_lock:
                for material in materials:
                    self._material_id(material)
                for shape in shapes:
                    store_shape(shape, self._material_ids[shape.material])
                    self._shapes.append(shape)
        logger.debug("Loaded scene with %d shapes", len(shapes))


def _material_from_dict(entry: dict[str, Any]) -> Material:
    material_type = entry.get("type", "").lower()
    if material_type == "diffuse":
        color = entry.get("color", [0.5, 0.5, 0.5])
        return Diffuse(color=(color[0], color[1], color[2]))
    if material_type == "metal":
        color = entry.get("color", [0.8, 0.8, 0.8])
        return Metal(color=(color[0], color[1], color[2]), fuzz=entry.get("fuzz", 0.0))
    if material_type == "dielectric":
        return Dielectric(refraction_index=entry.get("refraction_index", 1.5))
    raise ValueError(f"Unknown material type: {material_type}")
