"""
Filter catalog for PixelSight

Convolution filters (mean, Gaussian, sharpen, Sobel, emboss) and the
order-statistic median filter.
"""

from .blur import mean_kernel, gaussian_kernel, apply_mean_filter, apply_gaussian_blur
from .edges import (
    SobelDirection,
    EmbossDirection,
    sharpen_kernel,
    sobel_kernel,
    emboss_kernel,
    apply_sharpen,
    apply_sobel,
    apply_emboss,
)
from .median import apply_median_filter

__all__ = [
    'mean_kernel',
    'gaussian_kernel',
    'apply_mean_filter',
    'apply_gaussian_blur',
    'SobelDirection',
    'EmbossDirection',
    'sharpen_kernel',
    'sobel_kernel',
    'emboss_kernel',
    'apply_sharpen',
    'apply_sobel',
    'apply_emboss',
    'apply_median_filter',
]
