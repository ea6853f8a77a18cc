"""Camera module for primary ray generation.

Components:
    pinhole: Look-at pinhole (perspective) camera

The camera maps pixel (i, j) to a ray through the pixel center:
    u = (i + 0.5) / width: left to right across the image
    v = (j + 0.5) / height: bottom to top across the image

``pinhole`` declares Taichi fields, so import it only after
``scenetrace.config.init_backend()`` has run.
"""
