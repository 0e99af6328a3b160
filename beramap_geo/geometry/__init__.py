"""
Geometry primitives: kinds, bounds, feature validation and geodesic math.
"""

from .kinds import Bounds, GeometryKind
from .features import (
    DEFAULT_CIRCLE_RADIUS,
    extract_radius,
    feature_latlngs,
    is_valid_feature,
    normalize_features,
    validate_feature,
)
from .measure import (
    CLOSED_RING_TOLERANCE,
    EARTH_RADIUS_M,
    centroid,
    circle_area,
    circle_circumference,
    format_area,
    format_distance,
    haversine,
    is_closed_ring,
    midpoint,
    path_length,
    point_in_circle,
    point_in_ring,
    ring_area,
    ring_perimeter,
)

__all__ = [
    'Bounds',
    'GeometryKind',
    'DEFAULT_CIRCLE_RADIUS',
    'extract_radius',
    'feature_latlngs',
    'is_valid_feature',
    'normalize_features',
    'validate_feature',
    'CLOSED_RING_TOLERANCE',
    'EARTH_RADIUS_M',
    'centroid',
    'circle_area',
    'circle_circumference',
    'format_area',
    'format_distance',
    'haversine',
    'is_closed_ring',
    'midpoint',
    'path_length',
    'point_in_circle',
    'point_in_ring',
    'ring_area',
    'ring_perimeter',
]
