"""Whitted-style ray tracer for plain-text scene descriptions, built on Taichi.

A scene file describes a camera, an image resolution, Phong materials,
spheres and planes, and point, directional and spot lights. The renderer
traces one primary ray per pixel, adding mirror reflection, refraction and
hard shadows, and returns the image as a base64-encoded PNG.

Subpackages:
    core: Ray utilities, local shading, the tracing kernels and the renderer
    geometry: Sphere and plane intersection
    materials: Phong material storage
    scene: Scene model, text parser, light and primitive storage
    camera: Pinhole camera with look-at positioning
    preview: PNG encoding and Matplotlib display

Example:
    >>> from scenetrace.api import render_scene
    >>> encoded = render_scene(open("examples/three_spheres.scene").read())
"""

__version__ = "0.1.0"
