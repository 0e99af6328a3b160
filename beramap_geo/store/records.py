"""
Store records.

GeometryRecord is the unit of storage: one per identity. It is mutable
because update() replaces its feature in place and attach_drawable() sets
the renderer's handle after the fact; callers get the live record and must
go through the store to change it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from beramap_events import iso_now

from ..geometry import GeometryKind


@dataclass
class GeometryRecord:
    """
    One stored geometry.

    Attributes:
        uuid: Identity (unique while the record exists)
        feature: Deep copy of the submitted GeoJSON Feature
        kind: Classification, always matching feature.geometry.type
        style: Per-geometry style overrides
        metadata: Free-form caller metadata
        created_at / updated_at: ISO timestamps
        drawable: Handle owned by the renderer; the store only references it
    """

    uuid: str
    feature: Dict[str, Any]
    kind: GeometryKind
    style: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: str = field(default_factory=iso_now)
    updated_at: str = field(default_factory=iso_now)
    drawable: Optional[Any] = None

    @property
    def properties(self) -> Dict[str, Any]:
        properties = self.feature.get('properties')
        return properties if isinstance(properties, dict) else {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize (without the drawable handle)."""
        return {
            'uuid': self.uuid,
            'kind': self.kind.value,
            'feature': self.feature,
            'style': dict(self.style),
            'metadata': dict(self.metadata),
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'rendered': self.drawable is not None,
        }


@dataclass(frozen=True)
class StoreStats:
    """Snapshot of store counters."""

    total_count: int
    count_by_type: Dict[str, int]
    geometry_types: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_count': self.total_count,
            'count_by_type': dict(self.count_by_type),
            'geometry_types': list(self.geometry_types),
        }
