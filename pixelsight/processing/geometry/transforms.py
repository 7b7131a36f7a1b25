"""
Geometric transforms: flip, quarter-turn rotation, resize and crop.

These remap whole pixels (all four channels) and never use a kernel.
"""

import logging
from enum import Enum
from typing import Union

import cv2
import numpy as np

from ..buffer import validate_buffer
from ...exceptions import EmptySelectionError, InvalidArgumentError
from ...selection.region import Region

logger = logging.getLogger(__name__)


class FlipAxis(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


def flip_axis(value: Union[str, FlipAxis]) -> FlipAxis:
    if isinstance(value, FlipAxis):
        return value
    try:
        return FlipAxis(str(value).lower())
    except ValueError:
        raise InvalidArgumentError(
            f"Unknown flip axis: {value}. Valid axes: horizontal, vertical"
        ) from None


def apply_flip(image: np.ndarray, axis: Union[str, FlipAxis]) -> np.ndarray:
    """
    Mirror the image.

    Horizontal swaps column x with width-1-x, vertical swaps row y with
    height-1-y.
    """
    validate_buffer(image)
    axis = flip_axis(axis)
    output = image.copy()
    if axis is FlipAxis.HORIZONTAL:
        width = image.shape[1]
        for x in range(width // 2):
            mirror = width - 1 - x
            output[:, x] = image[:, mirror]
            output[:, mirror] = image[:, x]
    else:
        height = image.shape[0]
        for y in range(height // 2):
            mirror = height - 1 - y
            output[y] = image[mirror]
            output[mirror] = image[y]
    return output


def normalize_angle(angle: int) -> int:
    """Reduce an angle to 0, 90, 180 or 270 degrees."""
    if int(angle) != angle or int(angle) % 90 != 0:
        raise InvalidArgumentError(f"Rotation must be a multiple of 90 degrees, got {angle}")
    return int(angle) % 360


def rotate_right(image: np.ndarray) -> np.ndarray:
    """Quarter turn clockwise: (x, y) -> (height-1-y, x)."""
    height = image.shape[0]
    output = np.empty((image.shape[1], height, image.shape[2]), dtype=image.dtype)
    for y in range(height):
        output[:, height - 1 - y] = image[y]
    return output


def rotate_left(image: np.ndarray) -> np.ndarray:
    """Quarter turn anticlockwise: (x, y) -> (y, width-1-x)."""
    width = image.shape[1]
    output = np.empty((width, image.shape[0], image.shape[2]), dtype=image.dtype)
    for x in range(width):
        output[width - 1 - x] = image[:, x]
    return output


def rotate_half_turn(image: np.ndarray) -> np.ndarray:
    """
    Point reflection: (x, y) -> (width-1-x, height-1-y).

    Column pairs are swapped with reversed rows; when the width is odd the
    centre column pairs with itself and still has its rows reversed.
    """
    height, width = image.shape[:2]
    output = image.copy()
    for x in range((width + 1) // 2):
        mirror = width - 1 - x
        output[:, x] = image[::-1, mirror]
        output[:, mirror] = image[::-1, x]
    return output


def apply_rotation(image: np.ndarray, angle: int) -> np.ndarray:
    """
    Rotate by a multiple of 90 degrees.

    Positive angles turn clockwise (right), negative ones anticlockwise.
    """
    validate_buffer(image)
    angle = normalize_angle(angle)
    if angle == 90:
        return rotate_right(image)
    if angle == 180:
        return rotate_half_turn(image)
    if angle == 270:
        return rotate_left(image)
    return image.copy()


def scaled_size(width: int, height: int, percent: float):
    factor = percent / 100.0
    return int(width * factor), int(height * factor)


def apply_resize(image: np.ndarray, percent: float) -> np.ndarray:
    """
    Scale both dimensions by percent / 100.

    Raises:
        InvalidArgumentError: If the percent is not positive or the result
                              would have no pixels
    """
    validate_buffer(image)
    if percent <= 0:
        raise InvalidArgumentError(f"Resize percent must be positive, got {percent}")

    height, width = image.shape[:2]
    new_width, new_height = scaled_size(width, height, percent)
    if new_width < 1 or new_height < 1:
        raise InvalidArgumentError(
            f"Resizing {width}x{height} by {percent}% leaves no pixels"
        )
    if (new_width, new_height) == (width, height):
        return image.copy()

    interpolation = cv2.INTER_AREA if percent < 100 else cv2.INTER_CUBIC
    resized = cv2.resize(image, (new_width, new_height), interpolation=interpolation)
    logger.debug(f"Resized {width}x{height} -> {new_width}x{new_height}")
    return np.ascontiguousarray(resized, dtype=np.uint8)


def apply_crop(image: np.ndarray, region: Region) -> np.ndarray:
    """
    Extract the half-open rectangle [x1, x2) x [y1, y2).

    Raises:
        EmptySelectionError: If the region (after clipping) has no area
    """
    validate_buffer(image)
    height, width = image.shape[:2]
    x1, x2 = max(region.x1, 0), min(region.x2, width)
    y1, y2 = max(region.y1, 0), min(region.y2, height)
    if x2 <= x1 or y2 <= y1:
        raise EmptySelectionError(f"Cannot crop to empty selection {region.to_dict()}")
    return image[y1:y2, x1:x2].copy()
