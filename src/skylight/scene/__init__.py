"""Scene module for shape descriptions and the scene aggregate.

Components:
    shapes: Immutable shape descriptions (geometry + material)
    guard: Read-write guard keeping the scene immutable during renders
    aggregate: Device shape storage, nearest-hit queries and the Scene API
"""

from .aggregate import (
    MAX_SHAPES,
    T_MAX,
    T_MIN,
    Scene,
    clear_shapes,
    get_shape_count,
    hit_scene,
    hit_shape,
    store_shape,
)
from .guard import ReadWriteGuard, SceneBusyError, SceneReplacedError
from .shapes import ShapeKind, SphereShape

__all__ = [
    "Scene",
    "SphereShape",
    "ShapeKind",
    "ReadWriteGuard",
    "SceneBusyError",
    "SceneReplacedError",
    "hit_scene",
    "hit_shape",
    "store_shape",
    "clear_shapes",
    "get_shape_count",
    "MAX_SHAPES",
    "T_MIN",
    "T_MAX",
]
