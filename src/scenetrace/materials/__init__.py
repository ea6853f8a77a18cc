"""Materials module.

Components:
    phong: Phong material table (ambient, diffuse, specular, shininess,
        reflectivity, transmission, index of refraction)

``phong`` declares Taichi fields; import it after
``scenetrace.config.init_backend()``.
"""
