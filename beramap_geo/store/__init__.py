"""
Geometry storage: records, type index, bounds cache and GeoJSON export.
"""

from .records import GeometryRecord, StoreStats
from .geometry_store import (
    METADATA_BLOB_KEY,
    METADATA_TYPE_KEY,
    METADATA_UUID_KEY,
    GeometryStore,
)

__all__ = [
    'GeometryRecord',
    'StoreStats',
    'GeometryStore',
    'METADATA_UUID_KEY',
    'METADATA_TYPE_KEY',
    'METADATA_BLOB_KEY',
]
