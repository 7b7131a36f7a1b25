"""
Pointwise colour adjustments: grayscale conversion and brightness/contrast.

Both work on the colour channels only; alpha is carried through.
"""

import numpy as np
from typing import Optional

from ..buffer import COLOR_CHANNELS, to_channel_values, validate_buffer
from ...selection.region import Region, restrict_to_region

# Tenths, so the weighted sum is rounded exactly in integers
GREY_WEIGHTS = (3, 6, 1)
MID_GREY = 127.5


def apply_grayscale(image: np.ndarray, region: Optional[Region] = None) -> np.ndarray:
    """
    Convert to grey with grey = round(0.3R + 0.6G + 0.1B).

    Args:
        image: Pixel buffer
        region: Optional region to restrict the conversion to

    Returns:
        New buffer with R = G = B = grey
    """
    validate_buffer(image)
    rgb = image[:, :, COLOR_CHANNELS].astype(np.int32)
    weighted = (rgb * np.asarray(GREY_WEIGHTS, dtype=np.int32)).sum(axis=2)
    grey = ((weighted + 5) // 10).astype(np.uint8)

    output = image.copy()
    output[:, :, COLOR_CHANNELS] = grey[:, :, np.newaxis]
    return restrict_to_region(image, output, region)


def brightness_contrast_table(brightness: int, contrast: int) -> np.ndarray:
    """
    Lookup table mapping every channel value through the adjustment.

    out = round(127.5 * (1 + b/100) + (1 + c/100) * (v - 127.5)), clamped.
    """
    values = np.arange(256, dtype=np.float64)
    brightness_constant = (1 + brightness / 100.0) * MID_GREY
    contrast_constant = 1 + contrast / 100.0
    return to_channel_values(brightness_constant + contrast_constant * (values - MID_GREY))


def apply_brightness_contrast(image: np.ndarray, brightness: int = 0, contrast: int = 0,
                              region: Optional[Region] = None) -> np.ndarray:
    """
    Adjust brightness and contrast.

    Args:
        image: Pixel buffer
        brightness: Percentage change, typically -100..100
        contrast: Percentage change, typically -100..100
        region: Optional region to restrict the adjustment to

    Returns:
        Adjusted buffer
    """
    validate_buffer(image)
    table = brightness_contrast_table(brightness, contrast)

    output = image.copy()
    output[:, :, COLOR_CHANNELS] = table[image[:, :, COLOR_CHANNELS]]
    return restrict_to_region(image, output, region)
