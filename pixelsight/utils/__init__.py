"""
PixelSight utilities module.
"""

from .logging import StructuredLogger, setup_console_logging

__all__ = [
    'StructuredLogger',
    'setup_console_logging',
]
