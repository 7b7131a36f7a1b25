"""Annotation drawing"""

from .annotations import ShapeKind, FillMode, draw_brush, draw_shape

__all__ = ['ShapeKind', 'FillMode', 'draw_brush', 'draw_shape']
