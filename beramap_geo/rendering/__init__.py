"""
Rendering: renderer contract, per-kind shapes, registry and map surfaces.
"""

from .base import (
    BuiltShape,
    GeometryRenderer,
    RenderedLayer,
    Renderer,
    RenderMetadata,
    ShapeBuilder,
)
from .circle import CircleShape
from .drawing import DrawingShape
from .frame_surface import FrameSurface
from .line import LineShape
from .point import PointShape
from .polygon import PolygonShape
from .registry import RendererRegistry
from .surface import Drawable, InMemorySurface, MapSurface
from .visualizer import GeometryVisualizer

__all__ = [
    'BuiltShape',
    'GeometryRenderer',
    'RenderedLayer',
    'Renderer',
    'RenderMetadata',
    'ShapeBuilder',
    'CircleShape',
    'DrawingShape',
    'LineShape',
    'PointShape',
    'PolygonShape',
    'RendererRegistry',
    'Drawable',
    'InMemorySurface',
    'MapSurface',
    'FrameSurface',
    'GeometryVisualizer',
]
