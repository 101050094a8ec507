"""Taichi-based Monte-Carlo path tracer.

This package renders scenes of spheres lit by an analytic sky gradient using
unidirectional path tracing, with support for:
- Diffuse, metal and dielectric (glass) materials
- Thin-lens camera with optional depth of field
- Parallel per-pixel multi-sample estimation

Subpackages:
    core: Vector utilities, rays, colors, the radiance estimator and renderer
    geometry: Contact records and shape intersection routines
    materials: Scattering models and the material arena
    scene: Shape descriptions and the scene aggregate
    camera: Camera model with screen ray generation

Taichi must be initialised (see skylight.config.init_taichi) before importing
modules that allocate device fields (materials, scene, camera, renderer).
"""

__version__ = "0.1.0"
