"""Phong material storage for the tracing kernels.

Materials live in Structure-of-Arrays Taichi fields indexed by material id.
The id space matches ``Scene.materials``: the i-th declared material has
id i.

Each material carries:
    - ambient, diffuse, specular colors and a shininess exponent for the
      local Phong model
    - a reflectivity color weighting the mirrored ray
    - a transmission color and index of refraction for the refracted ray

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from scenetrace.materials.phong import add_material, clear_materials
    >>> clear_materials()
    >>> mat_id = add_material(diffuse=(0.8, 0.2, 0.2), specular=(0.5, 0.5, 0.5), shininess=32.0)
"""

import taichi as ti
import taichi.math as tm

from scenetrace.errors import ValidationError

vec3 = tm.vec3

MAX_MATERIALS = 1024

material_ambient = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_diffuse = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_specular = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_shininess = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_reflect = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_transmission = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_ior = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


@ti.dataclass
class PhongMaterial:
    ambient: vec3
    diffuse: vec3
    specular: vec3
    shininess: ti.f32
    reflect: vec3
    transmission: vec3
    ior: ti.f32


def clear_materials() -> None:
    """Forget all materials. Field contents are overwritten on the next add."""
    num_materials[None] = 0


def add_material(
    ambient: tuple[float, float, float] = (0.0, 0.0, 0.0),
    diffuse: tuple[float, float, float] = (1.0, 1.0, 1.0),
    specular: tuple[float, float, float] = (0.0, 0.0, 0.0),
    shininess: float = 5.0,
    reflect: tuple[float, float, float] = (0.0, 0.0, 0.0),
    ior: float = 1.0,
    transmission: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> int:
    """Store a material and return its id.

    Raises:
        ValidationError: If MAX_MATERIALS materials are already stored.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise ValidationError(f"too many materials (maximum {MAX_MATERIALS})", directive="material")
    material_ambient[idx] = ambient
    material_diffuse[idx] = diffuse
    material_specular[idx] = specular
    material_shininess[idx] = shininess
    material_reflect[idx] = reflect
    material_ior[idx] = ior
    material_transmission[idx] = transmission
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    return int(num_materials[None])


@ti.func
def get_material(material_id: ti.i32) -> PhongMaterial:
    """Load a material by id inside a kernel."""
    return PhongMaterial(
        ambient=material_ambient[material_id],
        diffuse=material_diffuse[material_id],
        specular=material_specular[material_id],
        shininess=material_shininess[material_id],
        reflect=material_reflect[material_id],
        transmission=material_transmission[material_id],
        ior=material_ior[material_id],
    )


@ti.func
def get_transmission(material_id: ti.i32) -> vec3:
    return material_transmission[material_id]
