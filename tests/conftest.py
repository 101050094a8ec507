"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_scene_storage():
    """Clear shape and material storage around each test.

    This ensures tests are isolated from each other.
    """
    # Import here so fields are allocated after Taichi is initialized
    from skylight.materials.registry import clear_materials
    from skylight.scene.aggregate import clear_shapes

    clear_shapes()
    clear_materials()
    yield
    clear_shapes()
    clear_materials()
