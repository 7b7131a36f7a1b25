"""Pointwise colour adjustments"""

from .adjustments import apply_grayscale, apply_brightness_contrast, brightness_contrast_table

__all__ = ['apply_grayscale', 'apply_brightness_contrast', 'brightness_contrast_table']
