"""
Rectangular regions that bound where an operation is applied.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np


def scale_point(point: Sequence[float], factor: float) -> Tuple[int, int]:
    """Scale a point and round half up to the nearest pixel."""
    return (int(math.floor(point[0] * factor + 0.5)),
            int(math.floor(point[1] * factor + 0.5)))


@dataclass(frozen=True)
class Region:
    """
    Normalised rectangle in image coordinates.

    (x1, y1) is the top-left corner and (x2, y2) the bottom-right one.
    Masking operations treat both corners as inside the region.
    """
    x1: int
    y1: int
    x2: int
    y2: int

    def __post_init__(self):
        x1, x2 = sorted((int(self.x1), int(self.x2)))
        y1, y2 = sorted((int(self.y1), int(self.y2)))
        object.__setattr__(self, 'x1', x1)
        object.__setattr__(self, 'y1', y1)
        object.__setattr__(self, 'x2', x2)
        object.__setattr__(self, 'y2', y2)

    @classmethod
    def from_points(cls, p1: Sequence[int], p2: Sequence[int]) -> 'Region':
        """Create a region from two arbitrary corner points."""
        return cls(p1[0], p1[1], p2[0], p2[1])

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1

    def is_empty(self) -> bool:
        """True when the rectangle has zero width or height."""
        return self.width == 0 or self.height == 0

    def scaled(self, factor: float) -> 'Region':
        """Scale both corners, e.g. from original to resized coordinates."""
        return Region.from_points(scale_point((self.x1, self.y1), factor),
                                  scale_point((self.x2, self.y2), factor))

    def inclusive_slices(self, width: int, height: int) -> Optional[Tuple[slice, slice]]:
        """
        Row and column slices covering the region, clipped to a buffer.

        Returns:
            (rows, cols) slices, or None when the region lies outside the buffer
        """
        x1, x2 = max(self.x1, 0), min(self.x2, width - 1)
        y1, y2 = max(self.y1, 0), min(self.y2, height - 1)
        if x1 > x2 or y1 > y2:
            return None
        return slice(y1, y2 + 1), slice(x1, x2 + 1)

    def to_dict(self) -> Dict[str, int]:
        return {'x1': self.x1, 'y1': self.y1, 'x2': self.x2, 'y2': self.y2}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['Region']:
        if data is None:
            return None
        return cls(int(data['x1']), int(data['y1']), int(data['x2']), int(data['y2']))


def restrict_to_region(source: np.ndarray, result: np.ndarray,
                       region: Optional[Region]) -> np.ndarray:
    """
    Combine a processed buffer with its source so only the region changes.

    Args:
        source: Buffer the operation read from
        result: Fully processed buffer of the same shape
        region: Region to keep from ``result``; None keeps all of it

    Returns:
        ``result`` when region is None, otherwise a copy of ``source`` with
        the region's pixels taken from ``result``
    """
    if region is None:
        return result

    output = source.copy()
    slices = region.inclusive_slices(source.shape[1], source.shape[0])
    if slices is not None:
        rows, cols = slices
        output[rows, cols] = result[rows, cols]
    return output
