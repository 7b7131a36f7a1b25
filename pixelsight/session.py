"""
Editing session: one open image plus the pointer tools acting on it.

The session owns the :class:`EditableImage` a front end is working on and
turns pointer gestures into operations. With the selection tool a drag
highlights a marquee as a preview; with the brush or shape tool a drag
previews the annotation and releasing the pointer commits it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from .config import get_config_value, get_default_config
from .exceptions import InvalidOperationsFileError
from .processing.draw.annotations import FillMode, ShapeKind, fill_mode, shape_kind
from .processing.history import EditableImage
from .processing.operations import BrightnessContrast, DrawBrush, DrawShape, ImageOperation
from .selection.region import Region, scale_point
from .selection.selection import Selection, Tool, to_image_point

logger = logging.getLogger(__name__)


@dataclass
class DrawSettings:
    """Options used by the brush and shape tools."""
    stroke_width: int = 2
    primary: Tuple[int, int, int, int] = (0, 0, 0, 255)
    secondary: Tuple[int, int, int, int] = (0, 0, 0, 255)
    shape: ShapeKind = ShapeKind.RECTANGLE
    fill: FillMode = FillMode.BORDER

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'DrawSettings':
        return cls(
            stroke_width=int(get_config_value(config, 'draw.stroke_width', 2)),
            primary=tuple(get_config_value(config, 'draw.primary', (0, 0, 0, 255))),
            secondary=tuple(get_config_value(config, 'draw.secondary', (0, 0, 0, 255))),
            shape=shape_kind(get_config_value(config, 'draw.shape', 'rectangle')),
            fill=fill_mode(get_config_value(config, 'draw.fill', 'border')),
        )


class EditSession:
    """
    Holds the active image, tool, draw settings and selection.

    Pointer coordinates are viewer pixels; ``zoom`` and ``offset`` describe
    how the image is laid out in the viewer.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 image: Optional[EditableImage] = None):
        self.config = config or get_default_config()
        self.image = image or EditableImage(self.config)
        self.tool = Tool(get_config_value(self.config, 'draw.tool', 'selection'))
        self.settings = DrawSettings.from_config(self.config)
        self.selection = Selection()
        self.highlight_brightness = int(
            get_config_value(self.config, 'selection.highlight_brightness', 25)
        )

    def open(self, path: Union[str, Path]) -> EditableImage:
        """
        Replace the active image with the one at ``path``.

        The current image is kept if loading fails, except when only the
        operation log is damaged: the new image is then active (with an
        empty history) and the error is re-raised.
        """
        image = EditableImage(self.config)
        try:
            image.open(path)
        except InvalidOperationsFileError:
            self._replace_image(image)
            raise
        self._replace_image(image)
        return image

    def _replace_image(self, image: EditableImage) -> None:
        self.image = image
        self.selection.reset()

    def set_tool(self, tool: Union[str, Tool]) -> None:
        """Switch tools, abandoning any gesture or selection in progress."""
        self.tool = tool if isinstance(tool, Tool) else Tool(str(tool).lower())
        self.reset_selection()
        logger.debug(f"Active tool: {self.tool.value}")

    def reset_selection(self) -> None:
        self.selection.reset()
        if self.image.has_image():
            self.image.clear_preview()

    def region(self) -> Optional[Region]:
        """Selected region in current-buffer coordinates, or None."""
        if not self.image.has_image() or self.selection.is_empty(self.tool):
            return None
        return self.selection.region(self.image.resize_scale)

    def _image_point(self, x: float, y: float, zoom: float,
                     offset: Sequence[float]) -> Tuple[int, int]:
        return to_image_point(x, y, zoom, offset, self.image.dimensions,
                              self.image.resize_scale)

    def pending_operation(self) -> Optional[ImageOperation]:
        """The operation the current gesture would produce, if any."""
        selection = self.selection
        if not selection.active:
            return None

        scale = self.image.resize_scale
        if self.tool is Tool.SELECTION:
            return BrightnessContrast(self.highlight_brightness, 0, selection.region(scale))

        if self.tool is Tool.BRUSH:
            return DrawBrush(
                points=tuple(scale_point(p, scale) for p in selection.points),
                color=self.settings.primary,
                stroke_width=self.settings.stroke_width,
            )

        # Lines run between the recorded points, other shapes span the corners
        if self.settings.shape is ShapeKind.LINE:
            start, end = selection.p1, selection.p2
        else:
            start, end = selection.corners
        return DrawShape(
            shape=self.settings.shape,
            start=scale_point(start, scale),
            end=scale_point(end, scale),
            primary=self.settings.primary,
            secondary=self.settings.secondary,
            fill=self.settings.fill,
            stroke_width=self.settings.stroke_width,
        )

    def pointer_pressed(self, x: float, y: float, zoom: float = 1.0,
                        offset: Sequence[float] = (0, 0)) -> None:
        if not self.image.has_image():
            return
        self.selection.begin(self._image_point(x, y, zoom, offset))

    def pointer_dragged(self, x: float, y: float, zoom: float = 1.0,
                        offset: Sequence[float] = (0, 0)) -> None:
        """Extend the gesture and preview its result."""
        if not self.image.has_image() or not self.selection.active:
            return
        self.selection.extend(self._image_point(x, y, zoom, offset))
        self.image.preview_apply(self.pending_operation())

    def pointer_released(self) -> Optional[ImageOperation]:
        """
        Finish the gesture.

        With the selection tool a dragged marquee stays selected and a
        plain click clears the selection. Drawing tools commit their
        annotation.

        Returns:
            The committed operation, or None
        """
        if not self.image.has_image() or not self.selection.active:
            return None

        if self.tool is Tool.SELECTION:
            if self.selection.dragged:
                self.selection.active = False
            else:
                self.reset_selection()
            return None

        op = self.pending_operation()
        try:
            self.image.apply(op)
        finally:
            self.reset_selection()
        return op
