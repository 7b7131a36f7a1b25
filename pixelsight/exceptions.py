"""
Exception types for PixelSight.

Every failure the editing engine reports to its caller is one of the
classes below, so a front end can map each kind to a user-visible message.
"""


class PixelSightError(Exception):
    """Base exception for editing operations."""
    pass


class NullFileError(PixelSightError):
    """Raised when an edit or save is attempted with no image loaded."""
    pass


class NonImageFileError(PixelSightError):
    """Raised when a file does not decode as a raster image."""
    pass


class InvalidImageFormatError(PixelSightError):
    """Raised when pixel data is not in the expected (H, W, 4) uint8 layout."""
    pass


class InvalidOperationsFileError(PixelSightError):
    """Raised when an operations file cannot be decoded."""
    pass


class MissingFileError(PixelSightError, FileNotFoundError):
    """Raised when an image or operations file does not exist."""
    pass


class EmptyUndoStackError(PixelSightError):
    """Raised when undo is requested with nothing to undo."""
    pass


class EmptyRedoStackError(PixelSightError):
    """Raised when redo is requested with nothing to redo."""
    pass


class EmptySelectionError(PixelSightError):
    """Raised when a zero-area region is given to an operation that needs one."""
    pass


class InvalidArgumentError(PixelSightError, ValueError):
    """Raised for unknown enum values and out-of-range parameters."""
    pass


class GenericEditError(PixelSightError):
    """Fallback for unexpected failures inside an operation."""
    pass
