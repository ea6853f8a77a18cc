"""Image encoding and export for rendered images.

Turns float RGB buffers into 8-bit PNG data. This module knows nothing about
scenes: it accepts any (H, W, 3) float or uint8 array, or a flat row-major
buffer together with its width and height.

Quantization clamps each channel to [0, 1], applies the optional encoding
gamma, and rounds ``c * 255`` to the nearest integer, so a buffer holding
exact ``k / 255`` values decodes back to exactly ``k``.

Example:
    >>> import numpy as np
    >>> from scenetrace.preview.export import encode_png_base64
    >>> solid = np.full((4, 8, 3), 0.5, dtype=np.float32)
    >>> b64 = encode_png_base64(solid)
"""

from __future__ import annotations

import base64
import io

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from scenetrace.errors import EncodingError

PNG_COMPRESS_LEVEL = 6


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Gamma-encode a linear image: ``out = clamp(in)^(1/gamma)``.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value; 1.0 returns the input unchanged.

    Returns:
        The encoded image.
    """
    if gamma == 1.0:
        return image

    # Clamp first so negative values cannot produce NaN
    image = np.clip(image, 0.0, 1.0)
    return np.power(image, 1.0 / gamma).astype(np.float32)


def as_image_array(
    pixels: npt.ArrayLike,
    width: int | None = None,
    height: int | None = None,
) -> np.ndarray:
    """Coerce a pixel source into an (H, W, 3) array.

    Args:
        pixels: Either an (H, W, 3) array or a flat row-major buffer of
            ``width * height * 3`` values.
        width: Expected width; required for flat buffers.
        height: Expected height; required for flat buffers.

    Raises:
        EncodingError: If the buffer does not match the dimensions.
    """
    array = np.asarray(pixels)

    if array.ndim == 1:
        if width is None or height is None:
            raise EncodingError("flat pixel buffers need an explicit width and height")
        if array.size != width * height * 3:
            raise EncodingError(
                f"buffer holds {array.size} values, expected {width}x{height}x3 = {width * height * 3}"
            )
        array = array.reshape(height, width, 3)

    if array.ndim != 3 or array.shape[2] != 3:
        raise EncodingError(f"expected an (H, W, 3) image, got shape {array.shape}")
    if (width is not None and array.shape[1] != width) or (height is not None and array.shape[0] != height):
        raise EncodingError(f"image is {array.shape[1]}x{array.shape[0]}, expected {width}x{height}")
    if array.shape[0] == 0 or array.shape[1] == 0:
        raise EncodingError("image has no pixels")

    return array


def image_to_uint8(
    image: npt.NDArray[np.floating],
    *,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Quantize a float image to 8 bits per channel.

    Args:
        image: Float image of shape (H, W, 3); values outside [0, 1] are
            clamped.
        gamma: Encoding gamma (default 1.0, linear).

    Returns:
        uint8 array of shape (H, W, 3).
    """
    clamped = np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0)
    encoded = apply_gamma(clamped, gamma)
    return np.rint(np.asarray(encoded, dtype=np.float64) * 255.0).astype(np.uint8)


def encode_png(
    pixels: npt.ArrayLike,
    width: int | None = None,
    height: int | None = None,
    *,
    gamma: float = 1.0,
) -> bytes:
    """Encode a pixel buffer as an 8-bit RGB PNG.

    uint8 input is written as-is; any other dtype is treated as linear float
    color and quantized with ``image_to_uint8``.

    Raises:
        EncodingError: If the buffer does not match the dimensions.
    """
    array = as_image_array(pixels, width, height)
    if array.dtype != np.uint8:
        array = image_to_uint8(array, gamma=gamma)

    buffer = io.BytesIO()
    PILImage.fromarray(np.ascontiguousarray(array)).save(
        buffer, format="PNG", compress_level=PNG_COMPRESS_LEVEL
    )
    return buffer.getvalue()


def encode_png_base64(
    pixels: npt.ArrayLike,
    width: int | None = None,
    height: int | None = None,
    *,
    gamma: float = 1.0,
) -> str:
    """Encode a pixel buffer as PNG and return standard base64 text."""
    return base64.b64encode(encode_png(pixels, width, height, gamma=gamma)).decode("ascii")


def decode_png(data: bytes) -> npt.NDArray[np.uint8]:
    """Decode PNG bytes into an (H, W, 3) uint8 array."""
    with PILImage.open(io.BytesIO(data)) as image:
        return np.asarray(image.convert("RGB"), dtype=np.uint8)


def save_png_from_array(
    image: npt.ArrayLike,
    filepath: str,
    *,
    gamma: float = 1.0,
) -> None:
    """Write an image array to a PNG file."""
    with open(filepath, "wb") as f:
        f.write(encode_png(image, gamma=gamma))


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Root mean squared error between two images of equal shape.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
