"""Pytest configuration for scenetrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest

from scenetrace.config import RenderConfig, init_backend


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Every module that declares Taichi fields is imported inside test
    functions, after this fixture has run.
    """
    init_backend(RenderConfig(arch="cpu"))
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear tracer scene state before and after each test."""
    from scenetrace.scene.manager import clear_all

    clear_all()
    yield
    clear_all()


@pytest.fixture
def render():
    """Parse scene text and render it, returning the (H, W, 3) image."""

    def _render(text):
        from scenetrace.core.renderer import Renderer
        from scenetrace.scene.parser import parse_scene

        return Renderer(parse_scene(text)).render()

    return _render
