"""Tests for Matplotlib display helpers.

Uses the non-interactive Agg backend and ``show=False`` so no window opens.
"""

import matplotlib
import numpy as np
import pytest

matplotlib.use("Agg")


@pytest.fixture(autouse=True)
def close_figures():
    import matplotlib.pyplot as plt

    yield
    plt.close("all")


class TestPrepareForDisplay:
    """Tests for display preprocessing."""

    def test_clamps(self):
        from scenetrace.preview.display import prepare_for_display

        image = np.array([[[-1.0, 0.5, 3.0]]], dtype=np.float32)
        result = prepare_for_display(image)

        assert result.dtype == np.float32
        assert result.tolist() == [[[0.0, 0.5, 1.0]]]

    def test_gamma(self):
        from scenetrace.preview.display import prepare_for_display

        image = np.full((1, 1, 3), 0.25, dtype=np.float32)
        assert np.allclose(prepare_for_display(image, gamma=2.0), 0.5)


class TestShowImage:
    """Tests for show_image."""

    def test_builds_figure(self):
        from scenetrace.preview.display import show_image

        image = np.zeros((6, 8, 3), dtype=np.float32)
        fig = show_image(image, show=False)

        ax = fig.axes[0]
        assert ax.get_title() == "Render 8x6"
        assert ax.images[0].get_array().shape == (6, 8, 3)

    def test_custom_title(self):
        from scenetrace.preview.display import show_image

        fig = show_image(np.zeros((2, 2, 3)), title="scene", show=False)
        assert fig.axes[0].get_title() == "scene"


class TestShowComparison:
    """Tests for show_comparison."""

    def test_returns_rmse(self):
        from scenetrace.preview.display import show_comparison

        a = np.zeros((4, 4, 3), dtype=np.float32)
        b = np.full((4, 4, 3), 0.5, dtype=np.float32)

        rmse = show_comparison(a, b, labels=("black", "grey"), show=False)
        assert rmse == pytest.approx(0.5)

    def test_identical_images(self):
        from scenetrace.preview.display import show_comparison

        a = np.random.default_rng(0).random((4, 4, 3)).astype(np.float32)
        assert show_comparison(a, a, show=False) == 0.0
