"""
Tests for image operations and the operation log format.
"""

import numpy as np
import pytest

from pixelsight.exceptions import (
    EmptySelectionError,
    GenericEditError,
    InvalidArgumentError,
    InvalidImageFormatError,
    InvalidOperationsFileError,
)
from pixelsight.processing.filters.edges import EmbossDirection, SobelDirection
from pixelsight.processing.geometry.transforms import FlipAxis
from pixelsight.processing.history import replay
from pixelsight.processing.operations import (
    OPERATION_TYPES,
    BrightnessContrast,
    Crop,
    DrawBrush,
    DrawShape,
    EmbossFilter,
    Flip,
    GaussianBlur,
    Grayscale,
    ImageOperation,
    KernelFilter,
    MeanFilter,
    MedianFilter,
    Resize,
    Rotate,
    Sharpen,
    SobelFilter,
    operation_from_dict,
)
from pixelsight.processing.oplog import (
    HEADER_SIZE,
    MAGIC,
    decode_operations,
    encode_operations,
    read_operations,
    write_operations,
)
from pixelsight.selection.region import Region


def mixed_operations():
    return [
        GaussianBlur(2, Region(1, 1, 6, 5)),
        BrightnessContrast(20, -10),
        Flip("vertical"),
        Rotate(90),
        MedianFilter(1),
    ]


def every_operation():
    return [
        Grayscale(Region(0, 0, 3, 3)),
        BrightnessContrast(10, 5),
        KernelFilter(((0, 0, 0), (0, 1, 0), (0, 0, 0)), include_alpha=True),
        MeanFilter(1),
        GaussianBlur(1),
        Sharpen(),
        SobelFilter("horizontal"),
        EmbossFilter(EmbossDirection.SOUTH_WEST, Region(2, 2, 5, 5)),
        MedianFilter(2),
        Flip(FlipAxis.HORIZONTAL),
        Rotate(-90),
        Resize(150),
        Crop(1, 1, 5, 4),
        DrawBrush(((0, 0), (4, 4), (8, 2)), (255, 0, 0, 255), 2),
        DrawShape("oval", (1, 1), (7, 5), fill="fill_and_border"),
    ]


class TestOperations:
    """Test operation behaviour and error conversion."""

    def test_every_type_registered(self):
        tags = {op.type_tag for op in every_operation()}
        assert tags == set(OPERATION_TYPES)

    def test_apply_never_modifies_input(self, random_image):
        before = random_image.copy()
        for op in every_operation():
            result = op.apply(random_image)
            assert result is not random_image
            assert result.dtype == np.uint8
        np.testing.assert_array_equal(random_image, before)

    def test_string_arguments_become_enums(self):
        assert SobelFilter("vertical").direction is SobelDirection.VERTICAL
        assert Flip("horizontal").axis is FlipAxis.HORIZONTAL

    def test_invalid_arguments_rejected_on_construction(self):
        with pytest.raises(InvalidArgumentError):
            Flip("sideways")
        with pytest.raises(InvalidArgumentError):
            Rotate(45)
        with pytest.raises(InvalidArgumentError):
            Resize(0)
        with pytest.raises(InvalidArgumentError):
            KernelFilter(((1, 1), (1, 1)))

    def test_crop_empty_selection(self, random_image):
        with pytest.raises(EmptySelectionError):
            Crop(5, 5, 5, 5).apply(random_image)

    def test_bad_buffer_reported_as_format_error(self):
        with pytest.raises(InvalidImageFormatError):
            Grayscale().apply(np.zeros((4, 4), dtype=np.uint8))

    def test_unexpected_failure_is_generic(self, random_image):
        class Broken(ImageOperation):
            type_tag = "broken"

            def describe(self):
                return "broken"

            def _apply(self, image):
                raise RuntimeError("boom")

        with pytest.raises(GenericEditError, match="boom"):
            Broken().apply(random_image)

    def test_operations_are_values(self):
        assert GaussianBlur(2) == GaussianBlur(2)
        assert GaussianBlur(2) != GaussianBlur(3)
        assert hash(Rotate(90)) == hash(Rotate(90))

    def test_describe(self):
        assert Rotate(180).describe() == "rotate(angle=180)"
        assert "region" not in MeanFilter(1).describe()


class TestSerialization:
    """Test dictionaries and the binary log format."""

    def test_dict_round_trip(self):
        for op in every_operation():
            assert operation_from_dict(op.to_dict()) == op

    def test_dict_is_tagged(self):
        data = EmbossFilter("north", Region(4, 3, 0, 1)).to_dict()
        assert data == {
            'type': 'emboss',
            'direction': 'north',
            'region': {'x1': 0, 'y1': 1, 'x2': 4, 'y2': 3},
        }

    def test_unknown_type_rejected(self):
        with pytest.raises(InvalidArgumentError):
            operation_from_dict({'type': 'posterize'})
        with pytest.raises(InvalidArgumentError):
            operation_from_dict(['rotate'])

    def test_bad_parameters_rejected(self):
        with pytest.raises(InvalidArgumentError):
            operation_from_dict({'type': 'flip', 'axis': 'nowhere'})
        with pytest.raises(InvalidArgumentError):
            operation_from_dict({'type': 'crop', 'x1': 0})

    def test_log_round_trip_replays_identically(self, opaque_image):
        operations = mixed_operations()
        restored = decode_operations(encode_operations(operations))

        assert restored == operations
        np.testing.assert_array_equal(replay(opaque_image, restored),
                                      replay(opaque_image, operations))

    def test_empty_log(self):
        assert decode_operations(encode_operations([])) == []

    def test_header(self):
        data = encode_operations(mixed_operations())
        assert data.startswith(MAGIC)
        assert len(data) > HEADER_SIZE

    def test_every_single_byte_corruption_detected(self):
        data = encode_operations(mixed_operations())
        for index in range(len(data)):
            corrupted = bytearray(data)
            corrupted[index] ^= 0x5A
            with pytest.raises(InvalidOperationsFileError):
                decode_operations(bytes(corrupted))

    def test_truncated_log_rejected(self):
        data = encode_operations(mixed_operations())
        with pytest.raises(InvalidOperationsFileError):
            decode_operations(data[:-3])
        with pytest.raises(InvalidOperationsFileError):
            decode_operations(data[:4])

    def test_file_round_trip(self, tmp_path):
        path = write_operations(tmp_path / 'edits.ops', mixed_operations())
        assert read_operations(path) == mixed_operations()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_operations(tmp_path / 'absent.ops')
