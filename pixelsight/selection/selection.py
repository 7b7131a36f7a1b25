"""
Pointer-driven selection state.

A selection is two corner points recorded in original image coordinates
(before any resize in the history), plus the path of every point visited
while the pointer is down, which the brush tool draws through.
"""

from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .region import Region, scale_point

Point = Tuple[int, int]

EMPTY_POINT: Point = (-2, -2)


class Tool(Enum):
    SELECTION = "selection"
    BRUSH = "brush"
    SHAPE = "shape"


def to_image_point(screen_x: float, screen_y: float, zoom: float = 1.0,
                   offset: Sequence[float] = (0, 0), image_size: Sequence[int] = (1, 1),
                   resize_scale: float = 1.0) -> Point:
    """
    Map a point on the viewer to a pixel of the original image.

    Args:
        screen_x, screen_y: Pointer position in viewer pixels
        zoom: Viewer zoom factor (1.0 = 100%)
        offset: Offset of the image inside the viewer, in image pixels
        image_size: (width, height) of the displayed buffer
        resize_scale: Cumulative resize factor of the edit history

    Returns:
        (x, y) clamped to the displayed buffer, divided by ``resize_scale``
        and rounded to the nearest original pixel
    """
    width, height = image_size
    x = int(screen_x / zoom - offset[0])
    y = int(screen_y / zoom - offset[1])
    x = min(max(x, 0), width - 1)
    y = min(max(y, 0), height - 1)
    return scale_point((x, y), 1.0 / resize_scale)


class Selection:
    """Corners and path of the current pointer gesture."""

    def __init__(self):
        self.p1: Point = EMPTY_POINT
        self.p2: Point = EMPTY_POINT
        self.points: List[Point] = []
        self.active = False
        self.dragged = False

    def reset(self) -> None:
        self.p1 = EMPTY_POINT
        self.p2 = EMPTY_POINT
        self.points = []
        self.active = False
        self.dragged = False

    def begin(self, point: Point) -> None:
        """Start a gesture at ``point``."""
        self.p1 = point
        self.p2 = point
        self.points = [point]
        self.active = True
        self.dragged = False

    def extend(self, point: Point) -> None:
        """Move the second corner and record the point on the path."""
        self.p2 = point
        self.points.append(point)
        self.dragged = True

    @property
    def corners(self) -> Tuple[Point, Point]:
        """(top-left, bottom-right) of the two recorded points."""
        return ((min(self.p1[0], self.p2[0]), min(self.p1[1], self.p2[1])),
                (max(self.p1[0], self.p2[0]), max(self.p1[1], self.p2[1])))

    def is_empty(self, tool: Tool = Tool.SELECTION) -> bool:
        """True when nothing is selected or a drawing tool is active."""
        unset = self.p1 == EMPTY_POINT and self.p2 == EMPTY_POINT
        return unset or tool is not Tool.SELECTION

    def region(self, scale: float = 1.0) -> Optional[Region]:
        """
        Selected rectangle, multiplied by ``scale`` to reach the coordinates
        of the current buffer; None when nothing is selected.
        """
        if self.p1 == EMPTY_POINT and self.p2 == EMPTY_POINT:
            return None
        return Region.from_points(self.p1, self.p2).scaled(scale)
