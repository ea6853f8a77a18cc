"""Scene manager that uploads a parsed Scene into the tracer's Taichi fields.

The tracing kernels read primitives, materials, lights and scene globals from
module-level Taichi fields. ``SceneManager.load`` replaces all of that state
with the contents of one ``Scene``:

    - materials are stored in declaration order, so ``material_id`` values
      in the scene model index the material fields directly
    - spheres and planes keep their relative declaration order
    - lights, ambient light, background and max_depth are copied verbatim
    - the camera is configured for the scene's resolution

Capacity limits are checked up front, so a scene that does not fit raises
``ValidationError`` without touching the fields.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from scenetrace.scene.manager import SceneManager
    >>> from scenetrace.scene.parser import parse_scene
    >>> manager = SceneManager()
    >>> manager.load(parse_scene(open("examples/three_spheres.scene").read()))
    >>> manager.summary()["spheres"]
    3
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from scenetrace.camera.pinhole import setup_camera
from scenetrace.core.tracer import reset_globals, set_background, set_max_depth
from scenetrace.errors import ValidationError
from scenetrace.materials.phong import MAX_MATERIALS, add_material, clear_materials
from scenetrace.scene.intersection import (
    MAX_PLANES,
    MAX_SPHERES,
    add_plane,
    add_sphere,
    clear_scene,
    get_plane_count,
    get_sphere_count,
)
from scenetrace.scene.lights import (
    MAX_LIGHTS,
    add_light,
    clear_lights,
    get_light_count,
    set_ambient_light,
)
from scenetrace.scene.model import Plane, Scene, Sphere

logger = logging.getLogger(__name__)

# Scene whose data currently lives in the fields, shared by all managers
_resident_scene: Scene | None = None


@dataclass(frozen=True)
class SceneCapacity:
    """Maximum number of each element the Taichi fields can hold."""

    materials: int = MAX_MATERIALS
    spheres: int = MAX_SPHERES
    planes: int = MAX_PLANES
    lights: int = MAX_LIGHTS


def check_capacity(scene: Scene, capacity: SceneCapacity | None = None) -> None:
    """Raise ValidationError if the scene does not fit in the tracer fields."""
    capacity = capacity or SceneCapacity()
    counts = {
        "materials": (len(scene.materials), capacity.materials),
        "spheres": (len(scene.spheres), capacity.spheres),
        "planes": (len(scene.planes), capacity.planes),
        "lights": (len(scene.lights), capacity.lights),
    }
    for name, (count, limit) in counts.items():
        if count > limit:
            raise ValidationError(f"scene has {count} {name}; at most {limit} are supported")


def clear_all() -> None:
    """Reset every piece of tracer scene state."""
    global _resident_scene

    _resident_scene = None
    clear_scene()
    clear_materials()
    clear_lights()
    reset_globals()


class SceneManager:
    """Owns the mapping from a Scene model to the tracer's global fields.

    Only one scene can be resident at a time because the fields are global;
    loading a new scene replaces the previous one.
    """

    @property
    def scene(self) -> Scene | None:
        """The scene resident in the tracer fields, if any."""
        return _resident_scene

    def load(self, scene: Scene) -> None:
        """Replace the resident scene.

        Raises:
            ValidationError: If the scene exceeds field capacity.
        """
        global _resident_scene

        check_capacity(scene)
        clear_all()

        for material in scene.materials:
            add_material(
                ambient=material.ambient,
                diffuse=material.diffuse,
                specular=material.specular,
                shininess=material.shininess,
                reflect=material.reflect,
                ior=material.ior,
                transmission=material.transmission,
            )

        for primitive in scene.primitives:
            if isinstance(primitive, Sphere):
                add_sphere(primitive.center, primitive.radius, material_id=primitive.material_id)
            elif isinstance(primitive, Plane):
                add_plane(primitive.point, primitive.normal, material_id=primitive.material_id)

        for light in scene.lights:
            add_light(light)

        set_ambient_light(scene.ambient)
        set_background(scene.background)
        set_max_depth(scene.max_depth)
        setup_camera(scene.camera, scene.resolution)

        _resident_scene = scene
        logger.debug("Loaded scene into tracer fields: %s", self.summary())

    def clear(self) -> None:
        clear_all()

    def summary(self) -> dict[str, Any]:
        """Counts of what is resident in the tracer fields."""
        return {
            "spheres": get_sphere_count(),
            "planes": get_plane_count(),
            "lights": get_light_count(),
            "max_depth": _resident_scene.max_depth if _resident_scene else None,
        }
