"""LineString -> polyline, with length and closure flag."""

from typing import Any, Dict

from ..config import RendererConfig
from ..geometry import GeometryKind, feature_latlngs, is_closed_ring, midpoint, path_length
from .base import BuiltShape, RenderedLayer


class LineShape:
    kind = GeometryKind.LINE_STRING

    def build(self, feature: Dict[str, Any], style: Dict[str, Any],
              config: RendererConfig) -> BuiltShape:
        latlngs = feature_latlngs(feature)
        return BuiltShape(
            render_as="polyline",
            latlngs=latlngs,
            style=style,
            metrics={
                'length': path_length(latlngs),
                'is_closed': is_closed_ring(latlngs, config.closed_line_threshold),
                'center': midpoint(latlngs),
            },
        )

    def contains(self, layer: RenderedLayer, lat: float, lng: float) -> bool:
        # Lines have no area
        return False
