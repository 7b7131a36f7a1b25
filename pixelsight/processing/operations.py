"""
Image operations for the PixelSight editing engine.

An operation is a frozen dataclass describing one edit: its parameters are
its fields, and ``apply`` turns a pixel buffer into a new one without
touching the input. Every operation kind is registered under a type tag so
an ordered list of them can be written to disk and replayed later.

Example:
    >>> op = GaussianBlur(radius=2, region=Region(0, 0, 49, 49))
    >>> data = op.to_dict()      # {'type': 'gaussian_blur', 'radius': 2, ...}
    >>> operation_from_dict(data) == op
    True
"""

import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Type

import numpy as np

from .buffer import validate_buffer
from .color.adjustments import apply_brightness_contrast, apply_grayscale
from .convolution import convolve
from .draw.annotations import (
    FillMode,
    ShapeKind,
    draw_brush,
    draw_shape,
    fill_mode,
    shape_kind,
)
from .filters.blur import apply_gaussian_blur, apply_mean_filter
from .filters.edges import (
    EmbossDirection,
    SobelDirection,
    apply_emboss,
    apply_sharpen,
    apply_sobel,
    emboss_direction,
    sobel_direction,
)
from .filters.median import apply_median_filter
from .geometry.transforms import (
    FlipAxis,
    apply_crop,
    apply_flip,
    apply_resize,
    apply_rotation,
    flip_axis,
    normalize_angle,
)
from .kernel import Kernel
from ..exceptions import (
    GenericEditError,
    InvalidArgumentError,
    InvalidImageFormatError,
    PixelSightError,
)
from ..selection.region import Region

logger = logging.getLogger(__name__)

OPERATION_TYPES: Dict[str, Type['ImageOperation']] = {}


def register_operation(type_tag: str):
    """Class decorator that records an operation under its type tag."""
    def decorator(cls):
        if type_tag in OPERATION_TYPES:
            raise ValueError(f"Duplicate operation type: {type_tag}")
        cls.type_tag = type_tag
        OPERATION_TYPES[type_tag] = cls
        return cls
    return decorator


def _encode_value(value: Any) -> Any:
    if isinstance(value, Region):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return [_encode_value(item) for item in value]
    return value


def _set(instance, name: str, value: Any) -> None:
    object.__setattr__(instance, name, value)


def _int_tuple(values) -> Tuple[int, ...]:
    return tuple(int(v) for v in values)


class ImageOperation:
    """
    Base class for all operations.

    Subclasses implement ``_apply``; ``apply`` validates the input and turns
    unexpected failures into the editor's typed errors.
    """
    type_tag: ClassVar[str] = ""

    def apply(self, image: np.ndarray) -> np.ndarray:
        """
        Apply the operation to a buffer.

        Args:
            image: Source pixel buffer, left unmodified

        Returns:
            A new pixel buffer

        Raises:
            PixelSightError: Typed failure (invalid argument, empty selection,
                             invalid image format, generic)
        """
        validate_buffer(image)
        try:
            result = self._apply(image)
        except PixelSightError:
            raise
        except (ValueError, IndexError) as exc:
            raise InvalidImageFormatError(f"{self.describe()} failed: {exc}") from exc
        except Exception as exc:
            raise GenericEditError(f"{self.describe()} failed: {exc}") from exc
        return validate_buffer(result)

    def _apply(self, image: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def describe(self) -> str:
        """Human-readable summary used in history listings and logs."""
        params = ", ".join(
            f"{f.name}={_encode_value(getattr(self, f.name))}"
            for f in fields(self)
            if getattr(self, f.name) is not None
        )
        return f"{self.type_tag}({params})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary tagged with the type."""
        data: Dict[str, Any] = {'type': self.type_tag}
        for f in fields(self):
            data[f.name] = _encode_value(getattr(self, f.name))
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ImageOperation':
        """Create from dictionary; unknown keys are ignored."""
        params = {f.name: data[f.name] for f in fields(cls) if f.name in data}
        if 'region' in params:
            params['region'] = Region.from_dict(params['region'])
        return cls(**params)


def operation_from_dict(data: Dict[str, Any]) -> ImageOperation:
    """
    Rebuild an operation from its tagged dictionary.

    Raises:
        InvalidArgumentError: If the tag is unknown or the parameters invalid
    """
    if not isinstance(data, dict):
        raise InvalidArgumentError(f"Operation entry must be a mapping, got {type(data).__name__}")
    type_tag = data.get('type')
    op_class = OPERATION_TYPES.get(type_tag)
    if op_class is None:
        raise InvalidArgumentError(f"Unknown operation type: {type_tag}")
    try:
        return op_class.from_dict(data)
    except (TypeError, KeyError, ValueError) as exc:
        raise InvalidArgumentError(f"Invalid parameters for {type_tag}: {exc}") from exc


# ============================================================================
# Colour
# ============================================================================

@register_operation("grayscale")
@dataclass(frozen=True)
class Grayscale(ImageOperation):
    region: Optional[Region] = None

    def _apply(self, image):
        return apply_grayscale(image, self.region)


@register_operation("brightness_contrast")
@dataclass(frozen=True)
class BrightnessContrast(ImageOperation):
    brightness: int = 0
    contrast: int = 0
    region: Optional[Region] = None

    def __post_init__(self):
        _set(self, 'brightness', int(self.brightness))
        _set(self, 'contrast', int(self.contrast))

    def _apply(self, image):
        return apply_brightness_contrast(image, self.brightness, self.contrast, self.region)


# ============================================================================
# Convolution filters
# ============================================================================

@register_operation("kernel_filter")
@dataclass(frozen=True)
class KernelFilter(ImageOperation):
    """Convolution with an explicit kernel, given as rows of taps."""
    taps: Tuple[Tuple[float, ...], ...]
    include_alpha: bool = False
    region: Optional[Region] = None

    def __post_init__(self):
        _set(self, 'taps', tuple(tuple(float(t) for t in row) for row in self.taps))
        _set(self, 'include_alpha', bool(self.include_alpha))
        # Raises on even or ragged tap matrices
        Kernel.from_matrix(self.taps)

    @property
    def kernel(self) -> Kernel:
        return Kernel.from_matrix(self.taps)

    def _apply(self, image):
        return convolve(image, self.kernel, self.include_alpha, self.region)


@register_operation("mean_filter")
@dataclass(frozen=True)
class MeanFilter(ImageOperation):
    radius: int = 1
    region: Optional[Region] = None

    def _apply(self, image):
        return apply_mean_filter(image, self.radius, self.region)


@register_operation("gaussian_blur")
@dataclass(frozen=True)
class GaussianBlur(ImageOperation):
    radius: int = 1
    region: Optional[Region] = None

    def _apply(self, image):
        return apply_gaussian_blur(image, self.radius, self.region)


@register_operation("sharpen")
@dataclass(frozen=True)
class Sharpen(ImageOperation):
    region: Optional[Region] = None

    def _apply(self, image):
        return apply_sharpen(image, self.region)


@register_operation("sobel")
@dataclass(frozen=True)
class SobelFilter(ImageOperation):
    direction: SobelDirection = SobelDirection.NONE
    region: Optional[Region] = None

    def __post_init__(self):
        _set(self, 'direction', sobel_direction(self.direction))

    def _apply(self, image):
        return apply_sobel(image, self.direction, self.region)


@register_operation("emboss")
@dataclass(frozen=True)
class EmbossFilter(ImageOperation):
    direction: EmbossDirection = EmbossDirection.NONE
    region: Optional[Region] = None

    def __post_init__(self):
        _set(self, 'direction', emboss_direction(self.direction))

    def _apply(self, image):
        return apply_emboss(image, self.direction, self.region)


@register_operation("median_filter")
@dataclass(frozen=True)
class MedianFilter(ImageOperation):
    radius: int = 1
    region: Optional[Region] = None

    def _apply(self, image):
        return apply_median_filter(image, self.radius, self.region)


# ============================================================================
# Geometry
# ============================================================================

@register_operation("flip")
@dataclass(frozen=True)
class Flip(ImageOperation):
    axis: FlipAxis = FlipAxis.HORIZONTAL

    def __post_init__(self):
        _set(self, 'axis', flip_axis(self.axis))

    def _apply(self, image):
        return apply_flip(image, self.axis)


@register_operation("rotate")
@dataclass(frozen=True)
class Rotate(ImageOperation):
    """Rotation by a multiple of 90 degrees; positive turns right."""
    angle: int = 90

    def __post_init__(self):
        normalize_angle(self.angle)
        _set(self, 'angle', int(self.angle))

    def _apply(self, image):
        return apply_rotation(image, self.angle)


@register_operation("resize")
@dataclass(frozen=True)
class Resize(ImageOperation):
    percent: float = 100

    def __post_init__(self):
        if self.percent <= 0:
            raise InvalidArgumentError(f"Resize percent must be positive, got {self.percent}")

    @property
    def scale(self) -> float:
        return self.percent / 100.0

    def _apply(self, image):
        return apply_resize(image, self.percent)


@register_operation("crop")
@dataclass(frozen=True)
class Crop(ImageOperation):
    x1: int
    y1: int
    x2: int
    y2: int

    @classmethod
    def from_region(cls, region: Region) -> 'Crop':
        return cls(region.x1, region.y1, region.x2, region.y2)

    @property
    def region(self) -> Region:
        return Region(self.x1, self.y1, self.x2, self.y2)

    def _apply(self, image):
        return apply_crop(image, self.region)


# ============================================================================
# Annotations
# ============================================================================

@register_operation("draw_brush")
@dataclass(frozen=True)
class DrawBrush(ImageOperation):
    points: Tuple[Tuple[int, int], ...]
    color: Tuple[int, int, int, int] = (0, 0, 0, 255)
    stroke_width: int = 1

    def __post_init__(self):
        _set(self, 'points', tuple(_int_tuple(p) for p in self.points))
        _set(self, 'color', _int_tuple(self.color))

    def _apply(self, image):
        return draw_brush(image, self.points, self.color, self.stroke_width)


@register_operation("draw_shape")
@dataclass(frozen=True)
class DrawShape(ImageOperation):
    shape: ShapeKind
    start: Tuple[int, int]
    end: Tuple[int, int]
    primary: Tuple[int, int, int, int] = (0, 0, 0, 255)
    secondary: Tuple[int, int, int, int] = (255, 255, 255, 255)
    fill: FillMode = FillMode.BORDER
    stroke_width: int = 1

    def __post_init__(self):
        _set(self, 'shape', shape_kind(self.shape))
        _set(self, 'fill', fill_mode(self.fill))
        _set(self, 'start', _int_tuple(self.start))
        _set(self, 'end', _int_tuple(self.end))
        _set(self, 'primary', _int_tuple(self.primary))
        _set(self, 'secondary', _int_tuple(self.secondary))

    def _apply(self, image):
        return draw_shape(image, self.shape, self.start, self.end, self.primary,
                          self.secondary, self.fill, self.stroke_width)
