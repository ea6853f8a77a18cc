"""Local illumination at a surface hit.

Implements the Phong model evaluated per light:

    color = ka * ambient
          + sum over lights of  T * (kd * I * max(0, N.L)
                                     + ks * I * max(0, R.V)^shininess)

where I is the light intensity (see ``scene.lights``), T is the shadow-ray
transmittance (0 behind an opaque blocker), R = reflect(-L, N) and V points
back along the incoming ray. Lights below the surface (N.L <= 0) contribute
nothing. Reflection and refraction are handled by the tracer, not here.
"""

import taichi as ti
import taichi.math as tm

from scenetrace.core.ray import length_squared, offset_origin, reflect
from scenetrace.materials.phong import PhongMaterial
from scenetrace.scene.intersection import SceneHitRecord, shadow_transmittance
from scenetrace.scene.lights import ambient_light, num_lights, sample_light

vec3 = tm.vec3


@ti.func
def phong_specular(to_light: vec3, normal: vec3, view: vec3, shininess: ti.f32) -> ti.f32:
    """max(0, R.V)^shininess with R the mirror of -L about N."""
    r = reflect(-to_light, normal)
    r_dot_v = tm.dot(r, view)
    result = 0.0
    if r_dot_v > 0.0:
        result = r_dot_v**shininess
    return result


@ti.func
def shade_local(
    rec: SceneHitRecord,
    material: PhongMaterial,
    ray_direction: vec3,
    epsilon: ti.f32,
) -> vec3:
    """Ambient plus shadowed diffuse and specular terms at a hit.

    Args:
        rec: The hit being shaded.
        material: The material of the hit primitive.
        ray_direction: Unit direction of the ray that produced the hit.
        epsilon: Offset along the normal for shadow ray origins, also the
            gap kept before the light so the light position itself never
            counts as a blocker.

    Returns:
        The unclamped local color.
    """
    color = material.ambient * ambient_light[None]
    view = -ray_direction

    for i in range(num_lights[None]):
        to_light, distance, intensity = sample_light(i, rec.point)
        n_dot_l = tm.dot(rec.normal, to_light)

        if n_dot_l > 0.0 and length_squared(intensity) > 0.0:
            shadow_origin = offset_origin(rec.point, rec.normal, to_light, epsilon)
            visibility = shadow_transmittance(shadow_origin, to_light, epsilon, distance - epsilon)

            if length_squared(visibility) > 0.0:
                diffuse = material.diffuse * intensity * n_dot_l
                specular = material.specular * intensity * phong_specular(
                    to_light, rec.normal, view, material.shininess
                )
                color += visibility * (diffuse + specular)

    return color
