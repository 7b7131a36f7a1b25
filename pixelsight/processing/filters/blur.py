"""
Smoothing filters built on the convolution engine: mean (box) and Gaussian.

Both leave the alpha channel untouched.
"""

import math
import logging
from typing import Optional

import numpy as np

from ..convolution import convolve
from ..kernel import Kernel
from ...exceptions import InvalidArgumentError
from ...selection.region import Region

logger = logging.getLogger(__name__)


def _check_radius(radius: int) -> int:
    if int(radius) != radius or radius < 0:
        raise InvalidArgumentError(f"radius must be a non-negative integer, got {radius}")
    return int(radius)


def mean_kernel(radius: int = 1) -> Kernel:
    """Box kernel of size (2r+1)² with every tap equal to 1/n."""
    radius = _check_radius(radius)
    size = 2 * radius + 1
    return Kernel(size, size, np.full(size * size, 1.0 / (size * size)))


def gaussian_kernel(radius: int = 1) -> Kernel:
    """
    Normalised Gaussian kernel of size (2r+1)² with sigma = r / 3.

    Taps follow exp(-(x² + y²) / (2σ²)) / (2πσ²) and are then divided by
    their sum so they add up to 1. Radius 0 gives the 1x1 identity kernel.
    """
    radius = _check_radius(radius)
    if radius == 0:
        return Kernel(1, 1, [1.0])

    sigma = radius / 3.0
    two_sigma_sq = 2.0 * sigma * sigma
    offsets = np.arange(-radius, radius + 1, dtype=np.float64)
    xx, yy = np.meshgrid(offsets, offsets)

    taps = np.exp(-(xx * xx + yy * yy) / two_sigma_sq) / (math.pi * two_sigma_sq)
    taps /= taps.sum()
    return Kernel.from_matrix(taps)


def apply_mean_filter(image: np.ndarray, radius: int = 1,
                      region: Optional[Region] = None) -> np.ndarray:
    """
    Average each pixel with its neighbours.

    Args:
        image: Pixel buffer
        radius: Neighbourhood radius (1 = 3x3)
        region: Optional region to restrict the filter to

    Returns:
        Filtered buffer
    """
    return convolve(image, mean_kernel(radius), include_alpha=False, region=region)


def apply_gaussian_blur(image: np.ndarray, radius: int = 1,
                        region: Optional[Region] = None) -> np.ndarray:
    """
    Blur with a Gaussian kernel.

    A radius of 0 has no effect and returns an unchanged copy.
    """
    if _check_radius(radius) == 0:
        logger.debug("Gaussian blur with radius 0 leaves the image unchanged")
        return image.copy()
    return convolve(image, gaussian_kernel(radius), include_alpha=False, region=region)
