"""
Tests for flip, rotate, resize and crop.
"""

import numpy as np
import pytest

from pixelsight.exceptions import EmptySelectionError, InvalidArgumentError
from pixelsight.processing.geometry import (
    FlipAxis,
    apply_crop,
    apply_flip,
    apply_resize,
    apply_rotation,
)
from pixelsight.selection.region import Region


@pytest.fixture
def labelled():
    """3x2 image whose red channel numbers the pixels row by row."""
    image = np.zeros((2, 3, 4), dtype=np.uint8)
    image[:, :, 0] = np.arange(6).reshape(2, 3)
    image[:, :, 3] = 255
    return image


class TestFlip:

    @pytest.mark.parametrize("axis", ["horizontal", "vertical"])
    def test_flip_twice_is_identity(self, random_image, axis):
        once = apply_flip(random_image, axis)
        assert not np.array_equal(once, random_image)
        np.testing.assert_array_equal(apply_flip(once, axis), random_image)

    def test_horizontal_mirrors_columns(self, labelled):
        result = apply_flip(labelled, FlipAxis.HORIZONTAL)
        np.testing.assert_array_equal(result[:, :, 0], [[2, 1, 0], [5, 4, 3]])

    def test_vertical_mirrors_rows(self, labelled):
        result = apply_flip(labelled, FlipAxis.VERTICAL)
        np.testing.assert_array_equal(result[:, :, 0], [[3, 4, 5], [0, 1, 2]])

    def test_invalid_axis(self, labelled):
        with pytest.raises(InvalidArgumentError):
            apply_flip(labelled, "diagonal")


class TestRotate:

    def test_right_turn_mapping(self, labelled):
        result = apply_rotation(labelled, 90)
        assert result.shape == (3, 2, 4)
        # (x, y) -> (height-1-y, x)
        np.testing.assert_array_equal(result[:, :, 0], [[3, 0], [4, 1], [5, 2]])

    def test_left_turn_mapping(self, labelled):
        result = apply_rotation(labelled, -90)
        # (x, y) -> (y, width-1-x)
        np.testing.assert_array_equal(result[:, :, 0], [[2, 5], [1, 4], [0, 3]])
        np.testing.assert_array_equal(apply_rotation(labelled, 270), result)

    @pytest.mark.parametrize("first,second", [(90, -90), (-90, 90), (270, 90)])
    def test_quarter_turns_round_trip(self, random_image, first, second):
        result = apply_rotation(apply_rotation(random_image, first), second)
        np.testing.assert_array_equal(result, random_image)

    def test_half_turn_with_odd_width(self, labelled):
        result = apply_rotation(labelled, 180)
        np.testing.assert_array_equal(result[:, :, 0], [[5, 4, 3], [2, 1, 0]])

    def test_half_turn_matches_two_quarter_turns(self, random_image):
        twice = apply_rotation(apply_rotation(random_image, 90), 90)
        np.testing.assert_array_equal(apply_rotation(random_image, 180), twice)

    def test_full_turn_copies(self, random_image):
        result = apply_rotation(random_image, 360)
        np.testing.assert_array_equal(result, random_image)
        assert result is not random_image

    @pytest.mark.parametrize("angle", [45, 100, -30])
    def test_invalid_angle(self, labelled, angle):
        with pytest.raises(InvalidArgumentError):
            apply_rotation(labelled, angle)


class TestResize:

    def test_half_size(self, opaque_image):
        result = apply_resize(opaque_image, 50)
        assert result.shape == (5, 8, 4)
        assert result.dtype == np.uint8

    def test_double_size(self, random_image):
        result = apply_resize(random_image, 200)
        assert result.shape == (18, 24, 4)

    def test_uniform_colour_preserved(self):
        image = np.full((8, 8, 4), 90, dtype=np.uint8)
        np.testing.assert_array_equal(apply_resize(image, 150), np.full((12, 12, 4), 90))

    @pytest.mark.parametrize("percent", [0, -50, 1])
    def test_invalid_percent(self, random_image, percent):
        with pytest.raises(InvalidArgumentError):
            apply_resize(random_image, percent)


class TestCrop:

    def test_half_open_rectangle(self, labelled):
        result = apply_crop(labelled, Region(1, 0, 3, 1))
        np.testing.assert_array_equal(result[:, :, 0], [[1, 2]])

    def test_corners_normalised_and_clipped(self, random_image):
        result = apply_crop(random_image, Region(50, 50, 10, 5))
        np.testing.assert_array_equal(result, random_image[5:, 10:])

    def test_empty_selection_rejected(self, random_image):
        with pytest.raises(EmptySelectionError):
            apply_crop(random_image, Region(5, 5, 5, 5))

    def test_selection_outside_image_rejected(self, random_image):
        with pytest.raises(EmptySelectionError):
            apply_crop(random_image, Region(100, 100, 120, 130))
