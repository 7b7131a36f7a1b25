"""
Tests for regions, selections and the editing session.
"""

import numpy as np
import pytest

from pixelsight.exceptions import InvalidOperationsFileError, MissingFileError
from pixelsight.processing.buffer import new_buffer
from pixelsight.processing.draw.annotations import FillMode, ShapeKind
from pixelsight.processing.history import sidecar_path
from pixelsight.processing.operations import (
    BrightnessContrast,
    DrawBrush,
    DrawShape,
    Grayscale,
    Resize,
)
from pixelsight.selection.region import Region, restrict_to_region
from pixelsight.selection.selection import EMPTY_POINT, Selection, Tool, to_image_point
from pixelsight.session import DrawSettings, EditSession


class TestRegion:

    def test_corners_normalised(self):
        region = Region(9, 2, 3, 7)
        assert (region.x1, region.y1, region.x2, region.y2) == (3, 2, 9, 7)
        assert Region.from_points((9, 2), (3, 7)) == region

    def test_inclusive_slices_clip(self):
        rows, cols = Region(-5, 1, 3, 99).inclusive_slices(width=10, height=4)
        assert (rows.start, rows.stop) == (1, 4)
        assert (cols.start, cols.stop) == (0, 4)
        assert Region(20, 20, 30, 30).inclusive_slices(10, 10) is None

    def test_empty(self):
        assert Region(4, 4, 4, 9).is_empty()
        assert not Region(0, 0, 1, 1).is_empty()

    def test_scaled(self):
        assert Region(2, 4, 6, 8).scaled(0.5) == Region(1, 2, 3, 4)

    def test_dict_round_trip(self):
        assert Region.from_dict(Region(1, 2, 3, 4).to_dict()) == Region(1, 2, 3, 4)
        assert Region.from_dict(None) is None

    def test_restrict_copies_outside(self):
        source = new_buffer(4, 4, (0, 0, 0, 255))
        result = new_buffer(4, 4, (255, 255, 255, 255))
        combined = restrict_to_region(source, result, Region(1, 1, 2, 2))
        assert combined[1, 1, 0] == 255
        assert combined[0, 0, 0] == 0
        assert combined[3, 3, 0] == 0


class TestSelection:

    def test_starts_empty(self):
        selection = Selection()
        assert selection.p1 == selection.p2 == EMPTY_POINT
        assert selection.is_empty()
        assert selection.region() is None

    def test_corners(self):
        selection = Selection()
        selection.begin((8, 1))
        selection.extend((2, 6))
        assert selection.corners == ((2, 1), (8, 6))
        assert selection.region() == Region(2, 1, 8, 6)
        assert selection.points == [(8, 1), (2, 6)]

    def test_empty_for_drawing_tools(self):
        selection = Selection()
        selection.begin((1, 1))
        assert not selection.is_empty(Tool.SELECTION)
        assert selection.is_empty(Tool.BRUSH)
        assert selection.is_empty(Tool.SHAPE)

    def test_reset(self):
        selection = Selection()
        selection.begin((1, 1))
        selection.reset()
        assert selection.is_empty()
        assert selection.points == []


class TestScreenMapping:

    def test_identity(self):
        assert to_image_point(5, 7, image_size=(10, 10)) == (5, 7)

    def test_zoom_and_offset(self):
        assert to_image_point(40, 30, zoom=2.0, offset=(5, 5), image_size=(100, 100)) == (15, 10)

    def test_clamped_to_buffer(self):
        assert to_image_point(-20, 500, image_size=(10, 8)) == (0, 7)

    def test_resize_scale(self):
        # A click at (10, 4) on an image shown at 200% of its original size
        assert to_image_point(10, 4, image_size=(40, 40), resize_scale=2.0) == (5, 2)

    def test_rounds_to_nearest_original_pixel(self):
        assert to_image_point(2, 1, image_size=(4, 3), resize_scale=0.3) == (7, 3)


@pytest.fixture
def session(config, image_file):
    session = EditSession(config)
    session.open(image_file)
    return session


class TestEditSession:

    def test_defaults_from_config(self, config):
        session = EditSession(config)
        assert session.tool is Tool.SELECTION
        assert session.settings == DrawSettings()
        assert session.highlight_brightness == 25

    def test_selection_drag_previews_highlight(self, session):
        session.pointer_pressed(2, 2)
        session.pointer_dragged(6, 4)

        expected = BrightnessContrast(25, 0, Region(2, 2, 6, 4)).apply(session.image.current)
        np.testing.assert_array_equal(session.image.preview, expected)
        assert session.image.log == []

        assert session.pointer_released() is None
        assert session.region() == Region(2, 2, 6, 4)
        assert session.image.preview is not None

    def test_click_without_drag_clears_selection(self, session):
        session.pointer_pressed(2, 2)
        session.pointer_dragged(6, 4)
        session.pointer_released()
        session.pointer_pressed(3, 3)
        session.pointer_released()
        assert session.region() is None
        assert session.image.preview is None

    def test_region_bounds_a_filter(self, session):
        session.pointer_pressed(0, 0)
        session.pointer_dragged(3, 3)
        session.pointer_released()
        session.image.apply(Grayscale(session.region()))
        assert session.image.log == [Grayscale(Region(0, 0, 3, 3))]
        assert session.image.preview is None

    def test_brush_commits_stroke(self, session):
        session.set_tool(Tool.BRUSH)
        session.settings.primary = (255, 0, 0, 255)
        session.pointer_pressed(1, 1)
        session.pointer_dragged(5, 1)
        assert session.image.log == []
        op = session.pointer_released()

        assert op == DrawBrush(((1, 1), (5, 1)), (255, 0, 0, 255), 2)
        assert session.image.log == [op]
        assert session.region() is None
        assert tuple(session.image.current[1, 3]) == (255, 0, 0, 255)

    def test_brush_click_draws_dot(self, session):
        session.set_tool("brush")
        session.pointer_pressed(4, 4)
        op = session.pointer_released()
        assert op.points == ((4, 4),)

    def test_shape_spans_corners(self, session):
        session.set_tool(Tool.SHAPE)
        session.settings.fill = FillMode.FILL
        session.pointer_pressed(8, 6)
        session.pointer_dragged(2, 1)
        op = session.pointer_released()
        assert op.shape is ShapeKind.RECTANGLE
        assert (op.start, op.end) == ((2, 1), (8, 6))

    def test_line_keeps_point_order(self, session):
        session.set_tool(Tool.SHAPE)
        session.settings.shape = ShapeKind.LINE
        session.pointer_pressed(8, 6)
        session.pointer_dragged(2, 1)
        op = session.pointer_released()
        assert isinstance(op, DrawShape)
        assert (op.start, op.end) == ((8, 6), (2, 1))

    def test_points_follow_resize(self, session):
        session.image.apply(Resize(200))
        session.set_tool(Tool.SELECTION)
        session.pointer_pressed(4, 4)
        session.pointer_dragged(20, 10)
        session.pointer_released()
        # Stored in original coordinates, reported in current ones
        assert session.selection.corners == ((2, 2), (10, 5))
        assert session.region() == Region(4, 4, 20, 10)

    def test_selection_survives_shrinking_resize(self, session):
        session.image.apply(Resize(30))
        session.pointer_pressed(1, 1)
        session.pointer_dragged(2, 2)
        session.pointer_released()
        assert session.region() == Region(1, 1, 2, 2)

    def test_switching_tool_resets(self, session):
        session.pointer_pressed(0, 0)
        session.pointer_dragged(3, 3)
        session.set_tool(Tool.BRUSH)
        assert session.selection.p1 == EMPTY_POINT
        assert session.image.preview is None

    def test_pointer_ignored_without_image(self, config):
        session = EditSession(config)
        session.pointer_pressed(1, 1)
        session.pointer_dragged(2, 2)
        assert session.pointer_released() is None

    def test_open_keeps_image_on_missing_file(self, session, tmp_path):
        image = session.image
        with pytest.raises(MissingFileError):
            session.open(tmp_path / 'missing.png')
        assert session.image is image

    def test_open_with_damaged_history(self, session, image_file):
        sidecar_path(image_file).write_bytes(b"garbage")
        previous = session.image
        with pytest.raises(InvalidOperationsFileError):
            session.open(image_file)
        assert session.image is not previous
        assert session.image.has_image()
