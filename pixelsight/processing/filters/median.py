"""
Median filter (order statistic, not a convolution).

For every pixel the filter gathers the pixels of a (2r+1)² window. Near the
borders the window is truncated, so fewer samples are gathered instead of
substituting edge pixels. Each channel's samples are sorted on their own and
the output channel is the value at the middle index of that channel's list.
The four output channels can therefore come from different source pixels.
"""

import logging
from typing import Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from ..buffer import CHANNELS, validate_buffer
from ...exceptions import InvalidArgumentError
from ...selection.region import Region, restrict_to_region

logger = logging.getLogger(__name__)

# Upper bound on float32 samples sorted at once
MAX_BAND_ELEMENTS = 16_000_000


def apply_median_filter(image: np.ndarray, radius: int = 1,
                        region: Optional[Region] = None,
                        band_rows: int = 64) -> np.ndarray:
    """
    Replace every channel value by the median of its neighbourhood.

    Args:
        image: Pixel buffer
        radius: Window radius (1 = 3x3); 0 returns an unchanged copy
        region: Optional region to restrict the filter to
        band_rows: Maximum number of rows sorted per pass

    Returns:
        Filtered buffer

    Raises:
        InvalidArgumentError: If radius is negative or not an integer
    """
    validate_buffer(image)
    if int(radius) != radius or radius < 0:
        raise InvalidArgumentError(f"radius must be a non-negative integer, got {radius}")
    radius = int(radius)
    if radius == 0:
        return image.copy()

    height, width = image.shape[:2]
    size = 2 * radius + 1
    window_area = size * size

    # NaN marks positions outside the image; np.sort moves them to the end
    padded = np.full((height + 2 * radius, width + 2 * radius, CHANNELS), np.nan, dtype=np.float32)
    padded[radius:radius + height, radius:radius + width] = image
    windows = sliding_window_view(padded, (size, size), axis=(0, 1))

    rows_per_band = max(1, min(int(band_rows), MAX_BAND_ELEMENTS // (width * CHANNELS * window_area)))
    output = np.empty_like(image)

    for start in range(0, height, rows_per_band):
        stop = min(start + rows_per_band, height)
        samples = windows[start:stop].reshape(stop - start, width, CHANNELS, window_area)
        counts = np.count_nonzero(~np.isnan(samples), axis=-1)
        ordered = np.sort(samples, axis=-1)
        middle = np.take_along_axis(ordered, (counts // 2)[..., np.newaxis], axis=-1)
        output[start:stop] = middle[..., 0].astype(np.uint8)

    logger.debug(f"Median filtered {width}x{height} buffer, radius={radius}, band={rows_per_band} rows")
    return restrict_to_region(image, output, region)
