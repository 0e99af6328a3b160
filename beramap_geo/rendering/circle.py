"""
Circle -> circle drawable.

The radius (meters) is read from `geometry.properties.radius`, then
`properties.radius`, then the configured default. A non-positive radius
is a render failure.
"""

from typing import Any, Dict

from ..config import RendererConfig
from ..errors import ValidationError
from ..geometry import (
    GeometryKind,
    circle_area,
    circle_circumference,
    extract_radius,
    feature_latlngs,
    point_in_circle,
)
from .base import BuiltShape, RenderedLayer


class CircleShape:
    kind = GeometryKind.CIRCLE

    def build(self, feature: Dict[str, Any], style: Dict[str, Any],
              config: RendererConfig) -> BuiltShape:
        center = feature_latlngs(feature)[0]
        radius = extract_radius(feature, config.default_radius)
        if radius <= 0:
            raise ValidationError(f"Circle radius must be positive, got {radius}")

        circumference = circle_circumference(radius)
        return BuiltShape(
            render_as="circle",
            latlngs=[center],
            style=style,
            radius=radius,
            metrics={
                'radius': radius,
                'area': circle_area(radius),
                'circumference': circumference,
                'perimeter': circumference,
                'is_closed': True,
                'center': center,
            },
        )

    def contains(self, layer: RenderedLayer, lat: float, lng: float) -> bool:
        return point_in_circle(layer.metadata.center, layer.metadata.radius, lat, lng)
