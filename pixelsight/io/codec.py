"""
Image file decoding and encoding for PixelSight (Pillow backed).
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..exceptions import (
    MissingFileError,
    InvalidArgumentError,
    NonImageFileError,
)
from ..processing.buffer import validate_buffer

logger = logging.getLogger(__name__)

# Pillow format names for extensions whose name differs from the format
FORMAT_BY_EXTENSION = {
    'jpg': 'JPEG',
    'jpeg': 'JPEG',
    'tif': 'TIFF',
    'tiff': 'TIFF',
}

# Formats that cannot store an alpha channel
OPAQUE_FORMATS = {'JPEG', 'BMP'}


def file_extension(path: Union[str, Path]) -> str:
    """Lower-case extension without the dot ('' when there is none)."""
    return Path(path).suffix.lower().lstrip('.')


def format_for(path: Union[str, Path], allowed_extensions: Optional[Iterable[str]] = None) -> str:
    """
    Pillow format name for a path, inferred from its extension.

    Raises:
        InvalidArgumentError: If the extension is missing or not allowed
    """
    extension = file_extension(path)
    if not extension:
        raise InvalidArgumentError(f"Cannot infer image format from {path}")
    if allowed_extensions is not None and extension not in {e.lower() for e in allowed_extensions}:
        raise InvalidArgumentError(f"Unsupported image extension: .{extension}")
    return FORMAT_BY_EXTENSION.get(extension, extension.upper())


def decode(path: Union[str, Path]) -> np.ndarray:
    """
    Read an image file into an RGBA pixel buffer.

    Raises:
        MissingFileError: If the path does not exist
        NonImageFileError: If the file is not a decodable image
    """
    path = Path(path)
    if not path.is_file():
        raise MissingFileError(f"Image file not found: {path}")

    try:
        with Image.open(path) as img:
            buffer = np.array(img.convert('RGBA'), dtype=np.uint8)
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise NonImageFileError(f"Not an image file: {path}") from exc

    logger.debug(f"Decoded {path} ({buffer.shape[1]}x{buffer.shape[0]})")
    return buffer


def flatten(buffer: np.ndarray, background: Sequence[int] = (255, 255, 255)) -> np.ndarray:
    """Composite a buffer onto an opaque background colour, returning RGB."""
    alpha = buffer[:, :, 3:4].astype(np.float64) / 255.0
    rgb = buffer[:, :, :3].astype(np.float64)
    backdrop = np.asarray(background[:3], dtype=np.float64)
    blended = rgb * alpha + backdrop * (1.0 - alpha)
    return np.clip(np.floor(blended + 0.5), 0, 255).astype(np.uint8)


def encode(buffer: np.ndarray, path: Union[str, Path], image_format: Optional[str] = None,
           background: Sequence[int] = (255, 255, 255)) -> Path:
    """
    Write a pixel buffer to an image file.

    Formats without alpha (JPEG, BMP) get the buffer flattened onto
    ``background`` first.

    Args:
        buffer: RGBA pixel buffer
        path: Destination path
        image_format: Pillow format name; inferred from the extension if None
        background: RGB used to flatten transparency

    Returns:
        The written path
    """
    validate_buffer(buffer)
    path = Path(path)
    image_format = image_format or format_for(path)

    if image_format.upper() in OPAQUE_FORMATS:
        img = Image.fromarray(flatten(buffer, background))
    else:
        img = Image.fromarray(np.ascontiguousarray(buffer))

    img.save(path, format=image_format)
    logger.debug(f"Encoded {buffer.shape[1]}x{buffer.shape[0]} buffer to {path} as {image_format}")
    return path
