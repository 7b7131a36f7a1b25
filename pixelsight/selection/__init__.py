"""
Selection handling for PixelSight

Regions bound where an operation applies; Selection tracks pointer
gestures that produce them.
"""

from .region import Region, restrict_to_region
from .selection import Selection, Tool, to_image_point

__all__ = ['Region', 'restrict_to_region', 'Selection', 'Tool', 'to_image_point']
