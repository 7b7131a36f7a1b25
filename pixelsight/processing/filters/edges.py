"""
Edge and detail filters: sharpen, Sobel gradients and emboss.

Sobel and emboss kernels sum to zero and are applied to the alpha channel
as well as the colour channels.
"""

from enum import Enum
from typing import Dict, Optional, Union

import numpy as np

from ..convolution import convolve
from ..kernel import Kernel
from ...exceptions import InvalidArgumentError
from ...selection.region import Region


class SobelDirection(Enum):
    """Gradient direction for the Sobel filter."""
    NONE = "none"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class EmbossDirection(Enum):
    """Compass direction of the emboss light."""
    NONE = "none"
    EAST = "east"
    NORTH_EAST = "north_east"
    NORTH = "north"
    NORTH_WEST = "north_west"
    WEST = "west"
    SOUTH_EAST = "south_east"
    SOUTH = "south"
    SOUTH_WEST = "south_west"


SHARPEN_TAPS = [
    [0.0, -0.5, 0.0],
    [-0.5, 3.0, -0.5],
    [0.0, -0.5, 0.0],
]

SOBEL_TAPS: Dict[SobelDirection, list] = {
    SobelDirection.HORIZONTAL: [
        [-0.5, 0.0, 0.5],
        [-1.0, 0.0, 1.0],
        [-0.5, 0.0, 0.5],
    ],
    SobelDirection.VERTICAL: [
        [-0.5, -1.0, -0.5],
        [0.0, 0.0, 0.0],
        [0.5, 1.0, 0.5],
    ],
}

EMBOSS_TAPS: Dict[EmbossDirection, list] = {
    EmbossDirection.EAST: [[0, 0, 0], [-1, 0, 1], [0, 0, 0]],
    EmbossDirection.NORTH_EAST: [[0, 0, 1], [0, 0, 0], [-1, 0, 0]],
    EmbossDirection.NORTH: [[0, 1, 0], [0, 0, 0], [0, -1, 0]],
    EmbossDirection.NORTH_WEST: [[1, 0, 0], [0, 0, 0], [0, 0, -1]],
    EmbossDirection.WEST: [[0, 0, 0], [1, 0, -1], [0, 0, 0]],
    EmbossDirection.SOUTH_EAST: [[-1, 0, 0], [0, 0, 0], [0, 0, 1]],
    EmbossDirection.SOUTH: [[0, -1, 0], [0, 0, 0], [0, 1, 0]],
    EmbossDirection.SOUTH_WEST: [[0, 0, -1], [0, 0, 0], [1, 0, 0]],
}


def _to_enum(enum_type, value):
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).lower())
    except ValueError:
        valid = ", ".join(member.value for member in enum_type)
        raise InvalidArgumentError(f"Unknown {enum_type.__name__}: {value}. Valid values: {valid}") from None


def sobel_direction(value: Union[str, SobelDirection]) -> SobelDirection:
    return _to_enum(SobelDirection, value)


def emboss_direction(value: Union[str, EmbossDirection]) -> EmbossDirection:
    return _to_enum(EmbossDirection, value)


def sharpen_kernel() -> Kernel:
    return Kernel.from_matrix(SHARPEN_TAPS)


def sobel_kernel(direction: Union[str, SobelDirection]) -> Optional[Kernel]:
    """Kernel for a Sobel direction, or None for SobelDirection.NONE."""
    taps = SOBEL_TAPS.get(sobel_direction(direction))
    return Kernel.from_matrix(taps) if taps is not None else None


def emboss_kernel(direction: Union[str, EmbossDirection]) -> Optional[Kernel]:
    """Kernel for an emboss direction, or None for EmbossDirection.NONE."""
    taps = EMBOSS_TAPS.get(emboss_direction(direction))
    return Kernel.from_matrix(taps) if taps is not None else None


def apply_sharpen(image: np.ndarray, region: Optional[Region] = None) -> np.ndarray:
    """Boost each pixel against its four orthogonal neighbours."""
    return convolve(image, sharpen_kernel(), include_alpha=False, region=region)


def apply_sobel(image: np.ndarray, direction: Union[str, SobelDirection],
                region: Optional[Region] = None) -> np.ndarray:
    """Horizontal or vertical gradient; NONE returns an unchanged copy."""
    kernel = sobel_kernel(direction)
    if kernel is None:
        return image.copy()
    return convolve(image, kernel, include_alpha=True, region=region)


def apply_emboss(image: np.ndarray, direction: Union[str, EmbossDirection],
                 region: Optional[Region] = None) -> np.ndarray:
    """Directional difference filter; NONE returns an unchanged copy."""
    kernel = emboss_kernel(direction)
    if kernel is None:
        return image.copy()
    return convolve(image, kernel, include_alpha=True, region=region)
