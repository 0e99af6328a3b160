"""Point -> marker."""

from typing import Any, Dict

from ..config import RendererConfig
from ..geometry import GeometryKind, feature_latlngs
from .base import BuiltShape, RenderedLayer


class PointShape:
    """
    Markers have no extent: contains() is always False and every metric
    stays at zero. `center` is the marker position.
    """

    kind = GeometryKind.POINT

    def build(self, feature: Dict[str, Any], style: Dict[str, Any],
              config: RendererConfig) -> BuiltShape:
        latlngs = feature_latlngs(feature)
        return BuiltShape(
            render_as="marker",
            latlngs=latlngs,
            style=style,
            metrics={'center': latlngs[0]},
        )

    def contains(self, layer: RenderedLayer, lat: float, lng: float) -> bool:
        return False
