"""Matplotlib display of rendered images.

Used by the command line tool's ``--show`` flag. Matplotlib is imported
lazily so that headless rendering never pays for it.

Example:
    >>> from scenetrace.api import render_scene_to_array
    >>> from scenetrace.preview.display import show_image
    >>> image = render_scene_to_array(open("examples/three_spheres.scene").read())
    >>> show_image(image, title="three spheres")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from scenetrace.preview.export import apply_gamma, compute_rmse

if TYPE_CHECKING:
    from matplotlib.figure import Figure


def prepare_for_display(
    image: npt.NDArray[np.floating],
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Clamp to [0, 1] and apply the display gamma."""
    clamped = np.clip(image, 0.0, 1.0).astype(np.float32)
    return np.clip(apply_gamma(clamped, gamma), 0.0, 1.0).astype(np.float32)


def show_image(
    image: npt.NDArray[np.floating],
    *,
    title: str | None = None,
    gamma: float = 1.0,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
    show: bool = True,
) -> Figure:
    """Display a rendered image in a Matplotlib figure.

    Args:
        image: Image array of shape (H, W, 3), top row first.
        title: Figure title (default shows the resolution).
        gamma: Display gamma.
        figsize: Figure size in inches (width, height).
        block: Whether to block until the window is closed.
        show: Set False to build the figure without opening a window.

    Returns:
        The Matplotlib figure.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(prepare_for_display(image, gamma), interpolation="nearest")
    ax.axis("off")

    height, width = image.shape[:2]
    ax.set_title(title if title is not None else f"Render {width}x{height}")

    fig.tight_layout()
    if show:
        plt.show(block=block)
    return fig


def show_comparison(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
    show: bool = True,
) -> float:
    """Display two images side by side with their amplified difference.

    Returns:
        RMSE between the two images after clamping.
    """
    import matplotlib.pyplot as plt

    display_a = prepare_for_display(image_a)
    display_b = prepare_for_display(image_b)
    rmse = compute_rmse(display_a, display_b)

    diff = np.abs(display_a.astype(np.float64) - display_b.astype(np.float64))
    diff_amplified = np.clip(diff * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)
    panels = (
        (display_a, labels[0]),
        (display_b, labels[1]),
        (diff_amplified, f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}"),
    )
    for ax, (panel, label) in zip(axes, panels):
        ax.imshow(panel, interpolation="nearest")
        ax.set_title(label)
        ax.axis("off")

    fig.tight_layout()
    if show:
        plt.show(block=block)
    return rmse
