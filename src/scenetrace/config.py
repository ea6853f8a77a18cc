"""Render configuration and Taichi backend initialization.

Taichi fields are process-global, so the backend is initialized once per
process. Every module that declares fields must be imported after
``init_backend`` has run; the public entry points in ``scenetrace.api`` take
care of that ordering.

Example:
    >>> from scenetrace.config import RenderConfig, init_backend
    >>> init_backend(RenderConfig(arch="cpu", cpu_max_num_threads=1))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

import taichi as ti

logger = logging.getLogger(__name__)

Arch = Literal["cpu", "gpu"]

# Default recursion depth when the scene has no max_depth directive
DEFAULT_MAX_DEPTH = 5


@dataclass(frozen=True)
class RenderConfig:
    """Settings that control how a scene is rendered, not what is rendered.

    Attributes:
        arch: Taichi backend, "cpu" or "gpu". "gpu" falls back to CPU when
            no GPU backend is available.
        cpu_max_num_threads: Worker threads for the CPU backend. None keeps
            Taichi's default; 1 renders serially.
        gamma: Encoding gamma applied before quantization (1.0 = linear).
        offline_cache: Whether Taichi may cache compiled kernels on disk.
    """

    arch: Arch = "cpu"
    cpu_max_num_threads: int | None = None
    gamma: float = 1.0
    offline_cache: bool = True

    def __post_init__(self) -> None:
        if self.arch not in ("cpu", "gpu"):
            raise ValueError(f"Unknown arch: {self.arch!r} (expected 'cpu' or 'gpu')")
        if self.cpu_max_num_threads is not None and self.cpu_max_num_threads < 1:
            raise ValueError("cpu_max_num_threads must be at least 1")
        if self.gamma <= 0.0:
            raise ValueError("gamma must be positive")


_active_config: RenderConfig | None = None


def init_backend(config: RenderConfig | None = None) -> RenderConfig:
    """Initialize Taichi for this process if it has not been initialized yet.

    Args:
        config: Desired configuration. Defaults to ``RenderConfig()``.

    Returns:
        The configuration the backend is actually running with. When the
        backend was already initialized this is the earlier configuration.
    """
    global _active_config

    config = config or RenderConfig()
    if _active_config is not None:
        if _backend_settings(config) != _backend_settings(_active_config):
            logger.warning(
                "Taichi already initialized with %s; ignoring %s",
                _active_config,
                config,
            )
        return _active_config

    kwargs = {"offline_cache": config.offline_cache}
    if config.cpu_max_num_threads is not None:
        kwargs["cpu_max_num_threads"] = config.cpu_max_num_threads

    arch = ti.gpu if config.arch == "gpu" else ti.cpu
    ti.init(arch=arch, default_fp=ti.f32, **kwargs)
    logger.info("Taichi initialized (arch=%s)", config.arch)

    _active_config = config
    return config


def is_backend_initialized() -> bool:
    """Return True once ``init_backend`` has run in this process."""
    return _active_config is not None


def _backend_settings(config: RenderConfig) -> tuple:
    return (config.arch, config.cpu_max_num_threads, config.offline_cache)
