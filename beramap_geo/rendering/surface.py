"""
Map Surface Boundary
====================

Bounded Context: The mapping widget, seen from the renderers.

The engine never manages tiles, zoom or pan. It only needs a surface that
can create a drawable for a point / line / polygon / circle, remove it,
report its bounds and fit the viewport to a box. MapSurface is that
capability; InMemorySurface is the headless implementation used by tests
and by the CLI.

Interaction:
    Every create_* call receives an `on_interaction(interaction, info)`
    callback. A surface calls it with "click", "mouseover" or "mouseout"
    when the user interacts with the drawable.
"""

import itertools
from dataclasses import dataclass, field
from math import cos, radians
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from ..geometry import Bounds
from ..geometry.measure import LatLng

InteractionCallback = Callable[[str, Dict[str, Any]], None]

INTERACTIONS = ("click", "mouseover", "mouseout")

METERS_PER_DEGREE_LAT = 111_320.0

_drawable_ids = itertools.count(1)


class MapSurface(Protocol):
    """What renderers need from a map widget."""

    def create_marker(self, latlng: LatLng, style: Dict[str, Any],
                      on_interaction: Optional[InteractionCallback] = None) -> Any:
        ...

    def create_polyline(self, latlngs: List[LatLng], style: Dict[str, Any],
                        on_interaction: Optional[InteractionCallback] = None) -> Any:
        ...

    def create_polygon(self, latlngs: List[LatLng], style: Dict[str, Any],
                       on_interaction: Optional[InteractionCallback] = None) -> Any:
        ...

    def create_circle(self, latlng: LatLng, radius: float, style: Dict[str, Any],
                      on_interaction: Optional[InteractionCallback] = None) -> Any:
        ...

    def remove(self, handle: Any) -> None:
        ...

    def get_bounds(self, handle: Any) -> Optional[Bounds]:
        ...

    def fit_bounds(self, bounds: Bounds, padding: Tuple[int, int] = (50, 50)) -> None:
        ...


@dataclass
class Drawable:
    """
    Handle produced by InMemorySurface.

    Attributes:
        shape: "marker", "polyline", "polygon" or "circle"
        latlngs: (lat, lng) positions (single pair for marker/circle)
        style: Style the drawable was created with
        radius: Circle radius in meters
    """

    shape: str
    latlngs: List[LatLng]
    style: Dict[str, Any]
    radius: Optional[float] = None
    on_interaction: Optional[InteractionCallback] = None
    id: int = field(default_factory=lambda: next(_drawable_ids))

    def fire(self, interaction: str, **info: Any) -> None:
        """Simulate a user interaction ("click", "mouseover", "mouseout")."""
        if interaction not in INTERACTIONS:
            raise ValueError(f"Unknown interaction {interaction!r}. Must be one of {INTERACTIONS}")
        if self.on_interaction is not None:
            self.on_interaction(interaction, info)

    def bounds(self) -> Optional[Bounds]:
        if self.shape == "circle" and self.radius is not None:
            lat, lng = self.latlngs[0]
            dlat = self.radius / METERS_PER_DEGREE_LAT
            dlng = dlat / max(cos(radians(lat)), 1e-12)
            return Bounds(lat - dlat, lng - dlng, lat + dlat, lng + dlng)
        return Bounds.from_latlngs(self.latlngs)


class InMemorySurface:
    """
    Headless MapSurface.

    Keeps live drawables in creation order and records the last viewport
    handed to fit_bounds().
    """

    def __init__(self):
        self._drawables: Dict[int, Drawable] = {}
        self.viewport: Optional[Bounds] = None
        self.padding: Tuple[int, int] = (0, 0)

    def _add(self, drawable: Drawable) -> Drawable:
        self._drawables[drawable.id] = drawable
        return drawable

    def create_marker(self, latlng, style, on_interaction=None) -> Drawable:
        return self._add(Drawable("marker", [tuple(latlng)], dict(style), on_interaction=on_interaction))

    def create_polyline(self, latlngs, style, on_interaction=None) -> Drawable:
        if len(latlngs) < 2:
            raise ValueError(f"A polyline needs at least 2 positions, got {len(latlngs)}")
        return self._add(Drawable("polyline", [tuple(p) for p in latlngs], dict(style),
                                  on_interaction=on_interaction))

    def create_polygon(self, latlngs, style, on_interaction=None) -> Drawable:
        if len(latlngs) < 3:
            raise ValueError(f"A polygon needs at least 3 positions, got {len(latlngs)}")
        return self._add(Drawable("polygon", [tuple(p) for p in latlngs], dict(style),
                                  on_interaction=on_interaction))

    def create_circle(self, latlng, radius, style, on_interaction=None) -> Drawable:
        if radius <= 0:
            raise ValueError(f"Circle radius must be positive, got {radius}")
        return self._add(Drawable("circle", [tuple(latlng)], dict(style), radius=float(radius),
                                  on_interaction=on_interaction))

    def remove(self, handle: Drawable) -> None:
        """
        Raises:
            KeyError: The handle is not live on this surface
        """
        if handle.id not in self._drawables:
            raise KeyError(f"Drawable {handle.id} is not on this surface")
        del self._drawables[handle.id]

    def get_bounds(self, handle: Drawable) -> Optional[Bounds]:
        return handle.bounds()

    def fit_bounds(self, bounds: Bounds, padding: Tuple[int, int] = (50, 50)) -> None:
        self.viewport = bounds
        self.padding = tuple(padding)

    @property
    def drawables(self) -> List[Drawable]:
        """Live drawables, oldest first."""
        return list(self._drawables.values())

    def is_live(self, handle: Drawable) -> bool:
        return handle.id in self._drawables

    def __len__(self) -> int:
        return len(self._drawables)
