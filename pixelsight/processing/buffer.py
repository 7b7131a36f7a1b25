"""
Pixel buffer helpers for PixelSight.

A pixel buffer is a numpy array of shape (height, width, 4) and dtype uint8.
Channels follow Pillow's RGBA order; the alpha channel is the last one.
"""

import numpy as np
from typing import Tuple

from ..exceptions import InvalidImageFormatError

CHANNELS = 4
ALPHA = 3
COLOR_CHANNELS = slice(0, 3)


def new_buffer(width: int, height: int,
               color: Tuple[int, int, int, int] = (0, 0, 0, 255)) -> np.ndarray:
    """Create a buffer filled with a single RGBA colour."""
    buffer = np.empty((height, width, CHANNELS), dtype=np.uint8)
    buffer[...] = np.asarray(color, dtype=np.uint8)
    return buffer


def validate_buffer(buffer: np.ndarray) -> np.ndarray:
    """
    Check that an array is a usable pixel buffer.

    Args:
        buffer: Candidate pixel buffer

    Returns:
        The same array

    Raises:
        InvalidImageFormatError: If the array is not (H, W, 4) uint8
    """
    if not isinstance(buffer, np.ndarray):
        raise InvalidImageFormatError(f"Expected numpy array, got {type(buffer).__name__}")
    if buffer.ndim != 3 or buffer.shape[2] != CHANNELS:
        raise InvalidImageFormatError(f"Expected (H, W, 4) pixel buffer, got shape {buffer.shape}")
    if buffer.dtype != np.uint8:
        raise InvalidImageFormatError(f"Expected uint8 pixel buffer, got {buffer.dtype}")
    return buffer


def copy_buffer(buffer: np.ndarray) -> np.ndarray:
    """Return an owned, C-contiguous copy of a buffer."""
    return np.array(buffer, dtype=np.uint8, copy=True, order='C')


def buffer_size(buffer: np.ndarray) -> Tuple[int, int]:
    """Return (width, height) of a buffer."""
    return buffer.shape[1], buffer.shape[0]


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round to the nearest integer with halves going up."""
    return np.floor(values + 0.5)


def to_channel_values(values: np.ndarray) -> np.ndarray:
    """Round float channel values and clamp them into uint8."""
    return np.clip(round_half_up(values), 0, 255).astype(np.uint8)
