"""
Annotation drawing: freehand brush strokes and simple shapes.

Colours are RGBA tuples in the buffer's channel order.
"""

from enum import Enum
from typing import Sequence, Tuple, Union

import cv2
import numpy as np

from ..buffer import validate_buffer
from ...exceptions import InvalidArgumentError

Point = Tuple[int, int]
RgbaColor = Tuple[int, int, int, int]


class ShapeKind(Enum):
    LINE = "line"
    RECTANGLE = "rectangle"
    OVAL = "oval"


class FillMode(Enum):
    FILL = "fill"
    BORDER = "border"
    FILL_AND_BORDER = "fill_and_border"


def _to_enum(enum_type, value):
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).lower())
    except ValueError:
        raise InvalidArgumentError(f"Unknown {enum_type.__name__}: {value}") from None


def shape_kind(value: Union[str, ShapeKind]) -> ShapeKind:
    return _to_enum(ShapeKind, value)


def fill_mode(value: Union[str, FillMode]) -> FillMode:
    return _to_enum(FillMode, value)


def _color(color: Sequence[int]) -> Tuple[int, int, int, int]:
    values = tuple(int(c) for c in color)
    if len(values) == 3:
        values = values + (255,)
    if len(values) != 4 or any(c < 0 or c > 255 for c in values):
        raise InvalidArgumentError(f"Colour must be 3 or 4 values in 0-255, got {color}")
    return values


def _stroke(width: int) -> int:
    if width < 1:
        raise InvalidArgumentError(f"Stroke width must be at least 1, got {width}")
    return int(width)


def draw_brush(image: np.ndarray, points: Sequence[Point], color: Sequence[int],
               stroke_width: int = 1) -> np.ndarray:
    """
    Draw a freehand stroke through the given points.

    A single point is drawn as a dot of the stroke width.
    """
    validate_buffer(image)
    if not points:
        raise InvalidArgumentError("Brush stroke needs at least one point")

    output = np.ascontiguousarray(image.copy())
    rgba = _color(color)
    thickness = _stroke(stroke_width)

    if len(points) == 1:
        x, y = points[0]
        cv2.circle(output, (int(x), int(y)), max(thickness // 2, 1), rgba, thickness=-1)
    else:
        path = np.asarray(points, dtype=np.int32).reshape(-1, 1, 2)
        cv2.polylines(output, [path], isClosed=False, color=rgba, thickness=thickness)
    return output


def draw_shape(image: np.ndarray, shape: Union[str, ShapeKind], start: Point, end: Point,
               primary: Sequence[int], secondary: Sequence[int] = (255, 255, 255, 255),
               fill: Union[str, FillMode] = FillMode.BORDER, stroke_width: int = 1) -> np.ndarray:
    """
    Draw a line, rectangle or oval.

    Lines go from ``start`` to ``end`` in the primary colour. Rectangles and
    ovals use ``start``/``end`` as opposite corners of their bounding box;
    with FILL_AND_BORDER the inside takes the secondary colour and the
    border the primary one.
    """
    validate_buffer(image)
    shape = shape_kind(shape)
    fill = fill_mode(fill)
    primary = _color(primary)
    secondary = _color(secondary)
    thickness = _stroke(stroke_width)

    output = np.ascontiguousarray(image.copy())
    p1 = (int(start[0]), int(start[1]))
    p2 = (int(end[0]), int(end[1]))

    if shape is ShapeKind.LINE:
        cv2.line(output, p1, p2, primary, thickness=thickness)
        return output

    x1, x2 = sorted((p1[0], p2[0]))
    y1, y2 = sorted((p1[1], p2[1]))

    def render(color, line_thickness):
        if shape is ShapeKind.RECTANGLE:
            cv2.rectangle(output, (x1, y1), (x2, y2), color, thickness=line_thickness)
        else:
            center = ((x1 + x2) // 2, (y1 + y2) // 2)
            axes = ((x2 - x1) // 2, (y2 - y1) // 2)
            cv2.ellipse(output, center, axes, 0, 0, 360, color, thickness=line_thickness)

    if fill in (FillMode.FILL, FillMode.FILL_AND_BORDER):
        render(secondary if fill is FillMode.FILL_AND_BORDER else primary, -1)
    if fill in (FillMode.BORDER, FillMode.FILL_AND_BORDER):
        render(primary, thickness)
    return output
