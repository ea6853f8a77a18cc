"""Scene module: the scene model, its text format, and tracer storage.

Components:
    model: Immutable Scene, Camera, Material, primitive and light types
    parser: Line-oriented scene text parser
    intersection: Sphere and plane storage with closest-hit queries
    lights: Light storage and per-light sampling
    manager: Uploads a Scene into the tracer fields

Only ``model`` and ``parser`` are re-exported here. The storage modules
declare Taichi fields and must be imported after
``scenetrace.config.init_backend()``.
"""

from .model import (
    BLACK,
    MAX_TRACE_DEPTH,
    Camera,
    DirectionalLight,
    Material,
    Plane,
    PointLight,
    RenderSettings,
    Resolution,
    Scene,
    Sphere,
    SpotLight,
)
from .parser import parse_scene, parse_scene_file

__all__ = [
    # Model
    "Scene",
    "Camera",
    "Resolution",
    "Material",
    "Sphere",
    "Plane",
    "PointLight",
    "DirectionalLight",
    "SpotLight",
    "RenderSettings",
    "BLACK",
    "MAX_TRACE_DEPTH",
    # Parser
    "parse_scene",
    "parse_scene_file",
]
