"""Geometric transforms: flip, rotate, resize and crop"""

from .transforms import (
    FlipAxis,
    apply_flip,
    apply_rotation,
    apply_resize,
    apply_crop,
)

__all__ = ['FlipAxis', 'apply_flip', 'apply_rotation', 'apply_resize', 'apply_crop']
