"""
Command line interface for PixelSight
"""

from .main import main

__all__ = ['main']
