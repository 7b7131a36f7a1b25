"""
Operation log files for PixelSight.

The same format is used for the sidecar written next to each image
(``<image path>.<ops extension>``) and for macro files:

    MAGIC (6 bytes) | format version (uint16) | CRC-32 of body (uint32) | body

All integers are big-endian. The body is zlib-compressed JSON holding the
list of tagged operation dictionaries, oldest first. Any damage to the
header or body makes the file unreadable rather than silently replaying a
different edit history.
"""

import json
import logging
import struct
import zlib
from pathlib import Path
from typing import Iterable, List, Union

from .operations import ImageOperation, operation_from_dict
from ..exceptions import InvalidArgumentError, InvalidOperationsFileError

logger = logging.getLogger(__name__)

MAGIC = b"PXSOPS"
FORMAT_VERSION = 1
HEADER = struct.Struct(">HI")
HEADER_SIZE = len(MAGIC) + HEADER.size


def encode_operations(operations: Iterable[ImageOperation]) -> bytes:
    """
    Serialise an ordered sequence of operations.

    Args:
        operations: Operations, oldest first

    Returns:
        Bytes in the operation log format
    """
    payload = json.dumps(
        [op.to_dict() for op in operations],
        separators=(",", ":"),
        sort_keys=True,
    ).encode("utf-8")
    body = zlib.compress(payload)
    return MAGIC + HEADER.pack(FORMAT_VERSION, zlib.crc32(body)) + body


def decode_operations(data: bytes) -> List[ImageOperation]:
    """
    Parse bytes produced by :func:`encode_operations`.

    Raises:
        InvalidOperationsFileError: If the data is damaged, from a newer
                                    format, or names unknown operations
    """
    if len(data) < HEADER_SIZE or not data.startswith(MAGIC):
        raise InvalidOperationsFileError("Not an operations file")

    version, checksum = HEADER.unpack_from(data, len(MAGIC))
    if version != FORMAT_VERSION:
        raise InvalidOperationsFileError(f"Unsupported operations file version: {version}")

    body = data[HEADER_SIZE:]
    if zlib.crc32(body) != checksum:
        raise InvalidOperationsFileError("Operations file checksum mismatch")

    try:
        entries = json.loads(zlib.decompress(body).decode("utf-8"))
    except (zlib.error, UnicodeDecodeError, ValueError) as exc:
        raise InvalidOperationsFileError(f"Operations file is unreadable: {exc}") from exc

    if not isinstance(entries, list):
        raise InvalidOperationsFileError("Operations file does not contain a list")

    try:
        return [operation_from_dict(entry) for entry in entries]
    except InvalidArgumentError as exc:
        raise InvalidOperationsFileError(str(exc)) from exc


def write_operations(path: Union[str, Path], operations: Iterable[ImageOperation]) -> Path:
    """Write an operations file, replacing any existing one."""
    path = Path(path)
    operations = list(operations)
    path.write_bytes(encode_operations(operations))
    logger.debug(f"Wrote {len(operations)} operations to {path}")
    return path


def read_operations(path: Union[str, Path]) -> List[ImageOperation]:
    """
    Read an operations file.

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidOperationsFileError: If the file is damaged
    """
    path = Path(path)
    operations = decode_operations(path.read_bytes())
    logger.debug(f"Read {len(operations)} operations from {path}")
    return operations
