"""Render configuration and Taichi runtime initialisation.

Example:
    >>> from skylight.config import RenderSettings, init_taichi
    >>> init_taichi(arch="cpu", random_seed=7)
    >>> settings = RenderSettings(width=320, height=180, samples_per_pixel=16)
    >>> settings.aspect_ratio
    1.7777777777777777
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

import taichi as ti

logger = logging.getLogger(__name__)

# Supported backend names for init_taichi()
_ARCHES = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
}


@dataclass(frozen=True)
class RenderSettings:
    """Image and sampling parameters for one render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered primary rays averaged per pixel.
        max_depth: Maximum number of bounces per path. A path that exhausts
            its budget contributes black.
    """

    width: int = 400
    height: int = 225
    samples_per_pixel: int = 50
    max_depth: int = 50

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RenderSettings:
        """Build settings from a plain dictionary, ignoring unknown keys."""
        known = {k: data[k] for k in ("width", "height", "samples_per_pixel", "max_depth") if k in data}
        return cls(**known)


def init_taichi(
    arch: str = "cpu",
    random_seed: int = 0,
    cpu_max_num_threads: int | None = None,
    debug: bool = False,
) -> None:
    """Initialise the Taichi runtime.

    Must be called before importing modules that declare Taichi fields.
    Device arithmetic defaults to 64-bit floats.

    Args:
        arch: Backend name ("cpu", "gpu", "cuda" or "vulkan").
        random_seed: Seed for the per-thread random number generators.
        cpu_max_num_threads: Optional cap on the CPU worker pool size.
        debug: Enable Taichi's debug mode (bounds checks, slower).

    Raises:
        ValueError: If the backend name is unknown.
    """
    if arch not in _ARCHES:
        raise ValueError(f"Unknown Taichi arch '{arch}', expected one of {sorted(_ARCHES)}")

    kwargs: dict[str, Any] = {
        "arch": _ARCHES[arch],
        "default_fp": ti.f64,
        "random_seed": random_seed,
        "debug": debug,
    }
    if cpu_max_num_threads is not None:
        kwargs["cpu_max_num_threads"] = cpu_max_num_threads

    logger.info("Initialising Taichi (arch=%s, seed=%d)", arch, random_seed)
    ti.init(**kwargs)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging for scripts and examples."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
