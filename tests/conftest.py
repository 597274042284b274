"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from crtscope.core.atlas import TERMINAL_SYMBOLS, GlyphAtlas
from crtscope.core.sampler import ImageSampler


def solid_image(width: int, height: int, rgb=(0.5, 0.5, 0.5), alpha: float = 1.0) -> np.ndarray:
    """Float RGBA image of a single color."""
    img = np.empty((height, width, 4), dtype=np.float32)
    img[..., :3] = rgb
    img[..., 3] = alpha
    return img


@pytest.fixture
def gray_image() -> np.ndarray:
    """96x64 mid-gray image."""
    return solid_image(96, 64)


@pytest.fixture
def gradient_image() -> np.ndarray:
    """
    Horizontal luminance ramp from black to white, with a blue tint
    in the lower half so color-mode and grayscale outputs differ.
    """
    width, height = 120, 80
    ramp = np.linspace(0.0, 1.0, width, dtype=np.float32)
    img = np.ones((height, width, 4), dtype=np.float32)
    img[..., 0] = ramp
    img[..., 1] = ramp
    img[..., 2] = ramp
    img[height // 2:, :, 0] *= 0.6
    return img


@pytest.fixture
def gray_sampler(gray_image) -> ImageSampler:
    return ImageSampler(gray_image)


@pytest.fixture(scope="session")
def terminal_atlas() -> GlyphAtlas:
    atlas = GlyphAtlas.build(TERMINAL_SYMBOLS, tile_size=32, font_size=30)
    assert atlas is not None
    return atlas


@pytest.fixture
def make_image():
    """Factory for solid-color float RGBA images."""
    return solid_image
