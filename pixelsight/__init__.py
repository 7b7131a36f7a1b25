"""
PixelSight: non-destructive raster image editing

Images are edited through an ordered log of operations that is replayed
over the untouched original, so every edit can be undone, saved next to
the image, or packaged as a macro and applied elsewhere.
"""

__version__ = "0.1.0"

# Core imports for easy access
from .config import load_config
from .processing.history import EditableImage
from .session import EditSession

__all__ = [
    "load_config",
    "EditableImage",
    "EditSession",
]
