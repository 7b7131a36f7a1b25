"""
Shared fixtures for PixelSight tests.
"""

import numpy as np
import pytest

from pixelsight.config import get_default_config, update_config_value
from pixelsight.io import codec


@pytest.fixture
def rng():
    return np.random.default_rng(20240917)


@pytest.fixture
def random_image(rng):
    """12x9 RGBA buffer with random, partly transparent pixels."""
    return rng.integers(0, 256, size=(9, 12, 4), dtype=np.uint8)


@pytest.fixture
def opaque_image(rng):
    """16x10 opaque RGBA buffer."""
    image = rng.integers(0, 256, size=(10, 16, 4), dtype=np.uint8)
    image[:, :, 3] = 255
    return image


@pytest.fixture
def config(tmp_path):
    """Default configuration with the macro directory inside tmp_path."""
    cfg = get_default_config()
    update_config_value(cfg, 'macros.directory', str(tmp_path / 'macros'))
    return cfg


@pytest.fixture
def image_file(tmp_path, opaque_image):
    """PNG on disk holding ``opaque_image``."""
    path = tmp_path / 'photo.png'
    codec.encode(opaque_image, path)
    return path
