"""
Tests for grayscale and brightness/contrast.
"""

import numpy as np

from pixelsight.processing.buffer import new_buffer
from pixelsight.processing.color import (
    apply_brightness_contrast,
    apply_grayscale,
    brightness_contrast_table,
)
from pixelsight.selection.region import Region


class TestGrayscale:

    def test_weighted_grey(self):
        image = new_buffer(2, 2, (100, 150, 200, 77))
        result = apply_grayscale(image)
        assert tuple(result[0, 0]) == (140, 140, 140, 77)

    def test_half_way_values_round_up(self):
        image = new_buffer(3, 1, (0, 9, 11, 255))
        image[0, 1] = (0, 0, 5, 255)
        image[0, 2] = (1, 2, 0, 255)
        result = apply_grayscale(image)
        # 6.5 -> 7, 0.5 -> 1, 1.5 -> 2
        assert list(result[0, :, 0]) == [7, 1, 2]

    def test_matches_exact_weighted_sum(self, rng):
        image = rng.integers(0, 256, size=(32, 32, 4), dtype=np.uint8)
        result = apply_grayscale(image)
        r, g, b = (image[:, :, c].astype(np.int64) for c in range(3))
        expected = (3 * r + 6 * g + b + 5) // 10
        np.testing.assert_array_equal(result[:, :, 0], expected)

    def test_white_and_black_preserved(self):
        image = new_buffer(2, 1, (255, 255, 255, 255))
        image[0, 1] = (0, 0, 0, 0)
        result = apply_grayscale(image)
        np.testing.assert_array_equal(result, image)

    def test_region_only(self, opaque_image):
        region = Region(0, 0, 1, 1)
        result = apply_grayscale(opaque_image, region)
        corner = result[0:2, 0:2]
        assert np.all(corner[:, :, 0] == corner[:, :, 1])
        np.testing.assert_array_equal(result[2:], opaque_image[2:])


class TestBrightnessContrast:

    def test_neutral_table_is_identity(self):
        np.testing.assert_array_equal(brightness_contrast_table(0, 0), np.arange(256))

    def test_brightness_shift(self):
        table = brightness_contrast_table(100, 0)
        assert table[0] == 128
        assert table[127] == 255
        assert table[255] == 255

    def test_contrast_stretch(self):
        table = brightness_contrast_table(0, 100)
        assert table[0] == 0
        assert table[100] == 73
        assert table[200] == 255

    def test_alpha_untouched(self, random_image):
        result = apply_brightness_contrast(random_image, 25, -40)
        np.testing.assert_array_equal(result[:, :, 3], random_image[:, :, 3])

    def test_highlight_region(self):
        image = new_buffer(4, 4, (10, 10, 10, 255))
        result = apply_brightness_contrast(image, 25, 0, Region(1, 1, 2, 2))
        # 127.5 * 1.25 + (10 - 127.5) = 41.875
        assert np.all(result[1:3, 1:3, :3] == 42)
        assert np.all(result[0, :, :3] == 10)
        assert np.all(result[3, :, :3] == 10)
