"""Polygon -> polygon drawable from the outer ring (holes ignored)."""

from typing import Any, Dict

from ..config import RendererConfig
from ..geometry import (
    Bounds,
    GeometryKind,
    centroid,
    feature_latlngs,
    point_in_ring,
    ring_area,
    ring_perimeter,
)
from .base import BuiltShape, RenderedLayer


def ring_contains(layer: RenderedLayer, lat: float, lng: float) -> bool:
    """Bounding-box rejection, then ray casting on the ring."""
    bounds = Bounds.from_latlngs(layer.latlngs)
    if bounds is None or not bounds.contains(lat, lng):
        return False
    return point_in_ring(layer.latlngs, lat, lng)


class PolygonShape:
    kind = GeometryKind.POLYGON

    def build(self, feature: Dict[str, Any], style: Dict[str, Any],
              config: RendererConfig) -> BuiltShape:
        ring = feature_latlngs(feature)
        return BuiltShape(
            render_as="polygon",
            latlngs=ring,
            style=style,
            metrics={
                'area': ring_area(ring),
                'perimeter': ring_perimeter(ring),
                'is_closed': True,
                'center': centroid(ring),
            },
        )

    def contains(self, layer: RenderedLayer, lat: float, lng: float) -> bool:
        return ring_contains(layer, lat, lng)
