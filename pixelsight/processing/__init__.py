"""
Image processing modules for PixelSight

Pixel buffers, convolution, the filter catalog, geometric and colour
operations, and the operation history that replays them.
"""

from .kernel import Kernel
from .operations import ImageOperation, OPERATION_TYPES, operation_from_dict
from .oplog import encode_operations, decode_operations, read_operations, write_operations
from .history import EditableImage, RecordingSession

__all__ = [
    "Kernel",
    "ImageOperation",
    "OPERATION_TYPES",
    "operation_from_dict",
    "encode_operations",
    "decode_operations",
    "read_operations",
    "write_operations",
    "EditableImage",
    "RecordingSession",
]
