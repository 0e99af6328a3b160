"""
Geometry kinds and bounding boxes.

Pure value types - NO state, NO side effects.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple


class GeometryKind(str, Enum):
    """Closed set of geometry kinds the engine understands."""

    POINT = "Point"
    LINE_STRING = "LineString"
    POLYGON = "Polygon"
    CIRCLE = "Circle"
    DRAWING = "Drawing"

    @classmethod
    def parse(cls, value: Any) -> Optional['GeometryKind']:
        """
        Resolve a GeoJSON `geometry.type` value.

        Returns:
            The matching kind, or None for anything unrecognized
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def is_single_coordinate(self) -> bool:
        """Point and Circle carry one [lng, lat] pair."""
        return self in (GeometryKind.POINT, GeometryKind.CIRCLE)


@dataclass(frozen=True)
class Bounds:
    """
    Immutable latitude/longitude box.

    Attributes:
        min_lat, min_lng: South-west corner
        max_lat, max_lng: North-east corner
    """

    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    def __post_init__(self):
        if self.min_lat > self.max_lat or self.min_lng > self.max_lng:
            raise ValueError(
                f"Inverted bounds: ({self.min_lat}, {self.min_lng}) > "
                f"({self.max_lat}, {self.max_lng})"
            )

    @classmethod
    def from_latlngs(cls, latlngs: Iterable[Tuple[float, float]]) -> Optional['Bounds']:
        """Smallest box holding every (lat, lng) pair, or None when empty."""
        lats, lngs = [], []
        for lat, lng in latlngs:
            lats.append(lat)
            lngs.append(lng)
        if not lats:
            return None
        return cls(min(lats), min(lngs), max(lats), max(lngs))

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng

    def extend(self, lat: float, lng: float) -> 'Bounds':
        return Bounds(
            min(self.min_lat, lat),
            min(self.min_lng, lng),
            max(self.max_lat, lat),
            max(self.max_lng, lng),
        )

    def union(self, other: Optional['Bounds']) -> 'Bounds':
        if other is None:
            return self
        return Bounds(
            min(self.min_lat, other.min_lat),
            min(self.min_lng, other.min_lng),
            max(self.max_lat, other.max_lat),
            max(self.max_lng, other.max_lng),
        )

    @property
    def center(self) -> Tuple[float, float]:
        """(lat, lng) midpoint."""
        return ((self.min_lat + self.max_lat) / 2, (self.min_lng + self.max_lng) / 2)

    def to_dict(self) -> Dict[str, float]:
        return {
            'min_lat': self.min_lat,
            'min_lng': self.min_lng,
            'max_lat': self.max_lat,
            'max_lng': self.max_lng,
        }
