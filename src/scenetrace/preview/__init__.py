"""Preview module for output and visualization.

Components:
    export: PNG and base64 encoding of rendered images
    display: Matplotlib-based display and side-by-side comparison

Example:
    >>> from scenetrace.preview import encode_png_base64, show_image
    >>> show_image(image, title="render")
    >>> encoded = encode_png_base64(image)
"""

from scenetrace.preview.display import prepare_for_display, show_comparison, show_image
from scenetrace.preview.export import (
    apply_gamma,
    compute_rmse,
    decode_png,
    encode_png,
    encode_png_base64,
    image_to_uint8,
    save_png_from_array,
)

__all__ = [
    # Display functions
    "show_image",
    "show_comparison",
    "prepare_for_display",
    # Export functions
    "apply_gamma",
    "encode_png",
    "encode_png_base64",
    "decode_png",
    "image_to_uint8",
    "save_png_from_array",
    "compute_rmse",
]
