"""
Geodesic Measurements
=====================

Pure functions - NO state, NO side effects.

Conventions:
- Positions are (lat, lng) tuples in degrees (map-surface order)
- Distances in meters, areas in square meters
- Sphere of radius EARTH_RADIUS_M

Heuristics:
- Ring closure compares first/last vertex with an angular tolerance
  (CLOSED_RING_TOLERANCE degrees on both axes) instead of exact equality
- Ring area is a small-region spherical approximation; it is only accurate
  while a feature stays small relative to the Earth's radius
"""

from math import asin, cos, pi, radians, sin, sqrt
from typing import Optional, Sequence, Tuple

LatLng = Tuple[float, float]

EARTH_RADIUS_M = 6_371_000.0
CLOSED_RING_TOLERANCE = 1e-5


def haversine(a: LatLng, b: LatLng) -> float:
    """Great-circle distance in meters between two (lat, lng) positions."""
    lat1, lng1 = radians(a[0]), radians(a[1])
    lat2, lng2 = radians(b[0]), radians(b[1])

    dlat = lat2 - lat1
    dlng = lng2 - lng1
    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_M * asin(min(1.0, sqrt(h)))


def is_closed_ring(latlngs: Sequence[LatLng], tolerance: float = CLOSED_RING_TOLERANCE) -> bool:
    """
    Whether first and last vertex coincide within `tolerance` degrees.

    A ring with fewer than three vertices is never closed.
    """
    if len(latlngs) < 3:
        return False

    first, last = latlngs[0], latlngs[-1]
    return abs(first[0] - last[0]) < tolerance and abs(first[1] - last[1]) < tolerance


def path_length(latlngs: Sequence[LatLng]) -> float:
    """Sum of consecutive-vertex distances."""
    return sum(haversine(latlngs[i], latlngs[i + 1]) for i in range(len(latlngs) - 1))


def ring_perimeter(latlngs: Sequence[LatLng]) -> float:
    """Path length plus the segment closing the ring."""
    if len(latlngs) < 2:
        return 0.0
    return path_length(latlngs) + haversine(latlngs[-1], latlngs[0])


def ring_area(latlngs: Sequence[LatLng]) -> float:
    """
    Approximate area of a ring on the sphere, in square meters.

    Sums (lng2 - lng1) * (2 + sin(lat1) + sin(lat2)) over every edge,
    the closing edge included, scaled by R^2 / 2.

    Returns:
        Absolute area (winding order does not matter)
    """
    n = len(latlngs)
    if n < 3:
        return 0.0

    total = 0.0
    for i in range(n):
        lat1, lng1 = latlngs[i]
        lat2, lng2 = latlngs[(i + 1) % n]
        total += radians(lng2 - lng1) * (2 + sin(radians(lat1)) + sin(radians(lat2)))

    return abs(total * EARTH_RADIUS_M * EARTH_RADIUS_M / 2)


def centroid(latlngs: Sequence[LatLng]) -> Optional[LatLng]:
    """Vertex mean; a repeated closing vertex is counted once."""
    points = list(latlngs)
    if len(points) > 1 and tuple(points[0]) == tuple(points[-1]):
        points = points[:-1]
    if not points:
        return None

    lat = sum(p[0] for p in points) / len(points)
    lng = sum(p[1] for p in points) / len(points)
    return (lat, lng)


def midpoint(latlngs: Sequence[LatLng]) -> Optional[LatLng]:
    """Middle vertex of a path (label anchor for lines)."""
    if not latlngs:
        return None
    return tuple(latlngs[len(latlngs) // 2])


def point_in_circle(center: LatLng, radius: float, lat: float, lng: float) -> bool:
    return haversine(center, (lat, lng)) <= radius


def point_in_ring(latlngs: Sequence[LatLng], lat: float, lng: float) -> bool:
    """Ray casting on the (lng, lat) plane."""
    inside = False
    n = len(latlngs)
    j = n - 1
    for i in range(n):
        yi, xi = latlngs[i]
        yj, xj = latlngs[j]
        if (yi > lat) != (yj > lat):
            if lng < (xj - xi) * (lat - yi) / (yj - yi) + xi:
                inside = not inside
        j = i
    return inside


def circle_area(radius: float) -> float:
    return pi * radius * radius


def circle_circumference(radius: float) -> float:
    return 2 * pi * radius


def format_distance(meters: float) -> str:
    """'850.00 m' / '1.25 km'"""
    if meters >= 1000:
        return f"{meters / 1000:.2f} km"
    return f"{meters:.2f} m"


def format_area(square_meters: float) -> str:
    """'500.00 m²' / '2.5000 ha' / '1.0000 km²'"""
    square_km = square_meters / 1_000_000
    if square_km >= 1:
        return f"{square_km:.4f} km²"
    hectares = square_meters / 10_000
    if hectares >= 1:
        return f"{hectares:.4f} ha"
    return f"{square_meters:.2f} m²"
