"""
Generic 2D convolution engine for PixelSight.

Each output pixel is the weighted sum of the input pixels under the kernel,
with the kernel centred on the output position:

    out[y, x][c] = round(sum(kernel[ky, kx] * in[y + ky - ry, x + kx - rx][c]))

The kernel is applied as written (no flipping). Samples that fall outside
the buffer are taken from the nearest valid pixel: corner overhangs clamp to
the corner pixel, overhangs past one edge clamp to the same row or column on
that edge. Sums are rounded half-up and clamped to [0, 255].
"""

import logging
from typing import Optional

import numpy as np
from scipy import ndimage

from .buffer import ALPHA, CHANNELS, to_channel_values, validate_buffer
from .kernel import Kernel
from ..selection.region import Region, restrict_to_region

logger = logging.getLogger(__name__)


def convolve_channel(channel: np.ndarray, kernel: Kernel) -> np.ndarray:
    """
    Convolve a single channel with nearest-pixel edge clamping.

    Args:
        channel: 2D array of channel values
        kernel: Kernel to apply

    Returns:
        Unrounded float64 sums, same shape as the channel
    """
    return ndimage.correlate(channel.astype(np.float64), kernel.data, mode='nearest')


def convolve(buffer: np.ndarray, kernel: Kernel, include_alpha: bool = False,
             region: Optional[Region] = None) -> np.ndarray:
    """
    Convolve a pixel buffer with a kernel.

    Args:
        buffer: Source pixel buffer (H, W, 4) uint8; never modified
        kernel: Kernel to apply
        include_alpha: Convolve the alpha channel too; otherwise it is copied
        region: Only pixels inside this region change (samples may still be
                read from outside it)

    Returns:
        New buffer with the same dimensions as the input
    """
    validate_buffer(buffer)

    output = buffer.copy()
    channels = CHANNELS if include_alpha else ALPHA
    for c in range(channels):
        output[:, :, c] = to_channel_values(convolve_channel(buffer[:, :, c], kernel))

    logger.debug(f"Convolved {buffer.shape[1]}x{buffer.shape[0]} buffer with {kernel!r}, "
                 f"alpha={'on' if include_alpha else 'off'}")
    return restrict_to_region(buffer, output, region)
