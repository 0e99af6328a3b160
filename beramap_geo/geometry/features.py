"""
GeoJSON feature handling.

Structural validation, input normalization and coordinate extraction for
the five supported kinds:

    Point / Circle       coordinates = [lng, lat]
    LineString / Drawing coordinates = [[lng, lat], ...]        (>= 2)
    Polygon              coordinates = [[[lng, lat], ...], ...] (outer >= 3)

Holes of a Polygon are carried through untouched but ignored by every
measurement.
"""

from typing import Any, Dict, List, Optional

from ..errors import ValidationError
from .kinds import GeometryKind
from .measure import LatLng

DEFAULT_CIRCLE_RADIUS = 500.0


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_position(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) >= 2
        and _is_number(value[0])
        and _is_number(value[1])
    )


def _is_path(value: Any, min_points: int) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) >= min_points
        and all(_is_position(p) for p in value)
    )


def validate_feature(feature: Any) -> GeometryKind:
    """
    Check that a feature is structurally usable.

    Returns:
        The feature's geometry kind

    Raises:
        ValidationError: Missing geometry, unrecognized kind, missing or
            malformed coordinates, properties that are not a mapping
    """
    if not isinstance(feature, dict):
        raise ValidationError(f"Feature must be a mapping, got {type(feature).__name__}")

    geometry = feature.get('geometry')
    if not isinstance(geometry, dict):
        raise ValidationError("Feature has no geometry")

    kind = GeometryKind.parse(geometry.get('type'))
    if kind is None:
        raise ValidationError(f"Unsupported geometry type: {geometry.get('type')!r}")

    for owner, props in (('feature', feature.get('properties')), ('geometry', geometry.get('properties'))):
        if props is not None and not isinstance(props, dict):
            raise ValidationError(f"{owner} properties must be a mapping, got {type(props).__name__}")

    coordinates = geometry.get('coordinates')
    if coordinates is None:
        raise ValidationError(f"{kind.value} has no coordinates")

    if kind.is_single_coordinate:
        if not _is_position(coordinates):
            raise ValidationError(f"{kind.value} coordinates must be [lng, lat]")
    elif kind in (GeometryKind.LINE_STRING, GeometryKind.DRAWING):
        if not _is_path(coordinates, 2):
            raise ValidationError(f"{kind.value} needs at least 2 [lng, lat] positions")
    elif kind == GeometryKind.POLYGON:
        if not isinstance(coordinates, (list, tuple)) or not coordinates:
            raise ValidationError("Polygon needs an outer ring")
        if not _is_path(coordinates[0], 3):
            raise ValidationError("Polygon outer ring needs at least 3 [lng, lat] positions")

    return kind


def is_valid_feature(feature: Any) -> bool:
    try:
        validate_feature(feature)
    except ValidationError:
        return False
    return True


def normalize_features(geojson: Any) -> List[Dict[str, Any]]:
    """
    Turn engine input into a list of features.

    A Feature becomes a one-element list, a FeatureCollection yields its
    `features`; anything else yields an empty list.
    """
    if not isinstance(geojson, dict):
        return []

    if geojson.get('type') == 'Feature':
        return [geojson]

    if geojson.get('type') == 'FeatureCollection':
        features = geojson.get('features')
        if isinstance(features, (list, tuple)):
            return list(features)

    return []


def _to_latlng(position) -> LatLng:
    return (float(position[1]), float(position[0]))


def feature_latlngs(feature: Dict[str, Any], kind: Optional[GeometryKind] = None) -> List[LatLng]:
    """
    (lat, lng) positions used for drawing and bounds.

    Single pair for Point/Circle, the full path for LineString/Drawing,
    the outer ring only for Polygon.
    """
    kind = kind or validate_feature(feature)
    coordinates = feature['geometry']['coordinates']

    if kind.is_single_coordinate:
        return [_to_latlng(coordinates)]
    if kind == GeometryKind.POLYGON:
        return [_to_latlng(p) for p in coordinates[0]]
    return [_to_latlng(p) for p in coordinates]


def extract_radius(feature: Dict[str, Any], default: float = DEFAULT_CIRCLE_RADIUS) -> float:
    """
    Circle radius in meters.

    Looked up in `geometry.properties.radius`, then `properties.radius`,
    then falls back to `default`.

    Raises:
        ValidationError: Radius present but not a number
    """
    geometry_props = (feature.get('geometry') or {}).get('properties') or {}
    feature_props = feature.get('properties') or {}

    for source in (geometry_props, feature_props):
        if source.get('radius') is not None:
            radius = source['radius']
            if not _is_number(radius):
                raise ValidationError(f"Circle radius must be a number, got {radius!r}")
            return float(radius)

    return float(default)
