"""Pytest configuration and shared fixtures."""

import pytest

from boxframe.frame import build_frame
from boxframe.params import FrameConfig


@pytest.fixture
def default_config() -> FrameConfig:
    """Stock parameters: 75 x 120 x 50 mm interior, M3 screws, r = 1.6 mm."""
    return FrameConfig()


@pytest.fixture(scope="session")
def small_config() -> FrameConfig:
    """Small frame (40 x 50 x 40 mm outside) that builds quickly."""
    return FrameConfig(w=20, l=30, h=20)


@pytest.fixture(scope="session")
def frame():
    """Default frame, built once per session."""
    return build_frame(FrameConfig())


@pytest.fixture(scope="session")
def bare_frame():
    """Default frame without panel grooves."""
    return build_frame(FrameConfig(panel=False))
