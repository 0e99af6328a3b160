"""
Drawing -> polygon when closed, polyline when open.

A Drawing is shaped like a LineString; whether it is closed is decided on
every render from the current coordinates, comparing first and last vertex
within `closed_line_threshold` degrees. With `auto_detect_closed` off a
closed drawing still reports is_closed/area/perimeter but is drawn as a
polyline.
"""

from typing import Any, Dict

from ..config import RendererConfig
from ..geometry import (
    GeometryKind,
    centroid,
    feature_latlngs,
    is_closed_ring,
    midpoint,
    path_length,
    ring_area,
    ring_perimeter,
)
from .base import BuiltShape, RenderedLayer
from .polygon import ring_contains

CLOSED_FILL_OPACITY = 0.2


class DrawingShape:
    kind = GeometryKind.DRAWING

    def build(self, feature: Dict[str, Any], style: Dict[str, Any],
              config: RendererConfig) -> BuiltShape:
        latlngs = feature_latlngs(feature)
        closed = is_closed_ring(latlngs, config.closed_line_threshold)
        length = path_length(latlngs)

        if not closed:
            return BuiltShape(
                render_as="polyline",
                latlngs=latlngs,
                style=style,
                metrics={'length': length, 'is_closed': False, 'center': midpoint(latlngs)},
            )

        metrics = {
            'length': length,
            'area': ring_area(latlngs),
            'perimeter': ring_perimeter(latlngs),
            'is_closed': True,
            'center': centroid(latlngs),
        }

        if not config.auto_detect_closed:
            return BuiltShape(render_as="polyline", latlngs=latlngs, style=style, metrics=metrics)

        filled = {
            'fillColor': style.get('color'),
            'fillOpacity': CLOSED_FILL_OPACITY,
            **style,
        }
        return BuiltShape(render_as="polygon", latlngs=latlngs, style=filled, metrics=metrics)

    def contains(self, layer: RenderedLayer, lat: float, lng: float) -> bool:
        if not layer.metadata.is_closed:
            return False
        return ring_contains(layer, lat, lng)
