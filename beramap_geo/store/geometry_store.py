"""
Geometry Store
==============

Bounded Context: Identity-keyed storage of geographic features.

Design:
- One GeometryRecord per identity, insertion ordered
- Type index: one bucket per GeometryKind, plus a counter per kind; both
  move together inside a single call, so `count() == sum(count_by_type())`
  and `count_by_type()[k] == len(get_by_type(k))` hold between calls
- Bounds cache with a dirty flag: every mutating call marks it dirty, the
  next calculate_bounds() recomputes and caches
- Malformed input never raises: the call returns None / False / 0, logs a
  warning and leaves the store untouched

Drawables:
    The store never creates or destroys drawable handles. When a record
    holding one is removed, the `detach` hook (usually the owning
    renderer's remove) runs before the record is purged.

Example:
    >>> store = GeometryStore()
    >>> uuid = store.add({'type': 'Feature',
    ...                   'geometry': {'type': 'Point', 'coordinates': [-63.9, -8.76]},
    ...                   'properties': {'name': 'Porto Velho'}})
    >>> store.count_by_type()['Point']
    1
"""

import copy
import re
import uuid as uuid_lib
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from beramap_events import iso_now
from beramap_events.logging import LogEvent, StructuredLogger, create_logger

from ..errors import NotFoundError, ValidationError
from ..geometry import Bounds, GeometryKind, feature_latlngs, validate_feature
from .records import GeometryRecord, StoreStats

DetachHook = Callable[[GeometryRecord], None]
KindLike = Union[str, GeometryKind]

METADATA_UUID_KEY = '_beramap_uuid'
METADATA_TYPE_KEY = '_beramap_type'
METADATA_BLOB_KEY = '_beramap_metadata'

SORT_FIELDS = {'created_at', 'updated_at', 'uuid'}


class GeometryStore:
    """
    In-memory registry of geometry records.

    Attributes:
        detach: Hook called with a record before it is purged, when the
            record still holds a drawable
    """

    def __init__(
        self,
        detach: Optional[DetachHook] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.detach = detach
        self.logger = logger or create_logger("store")

        self._records: Dict[str, GeometryRecord] = {}
        self._index_by_type: Dict[GeometryKind, List[str]] = {kind: [] for kind in GeometryKind}
        self._count_by_type: Dict[GeometryKind, int] = {kind: 0 for kind in GeometryKind}

        self._bounds_cache: Optional[Bounds] = None
        self._bounds_dirty = True

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(
        self,
        feature: Dict[str, Any],
        *,
        uuid: Optional[str] = None,
        style: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        """
        Store a feature.

        Args:
            feature: GeoJSON Feature
            uuid: Identity to use; a fresh one is generated when omitted.
                An identity already in the store turns the call into update()
            style: Style overrides
            metadata: Free-form metadata

        Returns:
            The identity, or None when the feature is malformed
        """
        kind = self._validate(feature, uuid)
        if kind is None:
            return None

        if uuid is not None and uuid in self._records:
            self.update(uuid, feature, style=style, metadata=metadata)
            return uuid

        uuid = uuid or str(uuid_lib.uuid4())
        now = iso_now()
        record = GeometryRecord(
            uuid=uuid,
            feature=copy.deepcopy(feature),
            kind=kind,
            style=dict(style or {}),
            metadata=dict(metadata or {}),
            created_at=now,
            updated_at=now,
        )

        self._records[uuid] = record
        self._index_by_type[kind].append(uuid)
        self._count_by_type[kind] += 1
        self._bounds_dirty = True

        self.logger.debug(
            event=LogEvent.STORE_GEOMETRY_ADDED,
            message=f"{kind.value} added",
            metadata={'uuid': uuid, 'kind': kind.value}
        )
        return uuid

    def add_batch(self, features: Iterable[Dict[str, Any]], **options: Any) -> List[str]:
        """
        add() every feature; malformed ones are skipped.

        `uuid` is not accepted here (one identity cannot name a batch).
        """
        if features is None or isinstance(features, (str, bytes, dict)):
            return []

        options.pop('uuid', None)
        uuids = []
        for feature in features:
            uuid = self.add(feature, **options)
            if uuid is not None:
                uuids.append(uuid)
        return uuids

    def update(
        self,
        uuid: str,
        feature: Dict[str, Any],
        *,
        style: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Replace a record's feature, moving it between type buckets when the
        kind changes.

        Returns:
            False for an unknown identity or a malformed feature
        """
        record = self._records.get(uuid)
        if record is None:
            return False

        kind = self._validate(feature, uuid)
        if kind is None:
            return False

        if kind != record.kind:
            self._index_by_type[record.kind].remove(uuid)
            self._count_by_type[record.kind] -= 1
            self._index_by_type[kind].append(uuid)
            self._count_by_type[kind] += 1

        previous = record.kind
        record.feature = copy.deepcopy(feature)
        record.kind = kind
        if style is not None:
            record.style = dict(style)
        if metadata is not None:
            record.metadata = dict(metadata)
        record.updated_at = iso_now()
        self._bounds_dirty = True

        self.logger.debug(
            event=LogEvent.STORE_GEOMETRY_UPDATED,
            message=f"{kind.value} updated",
            metadata={'uuid': uuid, 'kind': kind.value, 'previous_kind': previous.value}
        )
        return True

    def remove(self, uuid: str) -> bool:
        """
        Remove one record. Unknown identities are a no-op.

        Returns:
            True when a record was removed
        """
        record = self._records.get(uuid)
        if record is None:
            return False

        self._detach(record)

        del self._records[uuid]
        self._index_by_type[record.kind].remove(uuid)
        self._count_by_type[record.kind] -= 1
        self._bounds_dirty = True

        self.logger.debug(
            event=LogEvent.STORE_GEOMETRY_REMOVED,
            message=f"{record.kind.value} removed",
            metadata={'uuid': uuid, 'kind': record.kind.value}
        )
        return True

    def remove_batch(self, uuids: Iterable[str]) -> int:
        """Returns the number of records actually removed."""
        if uuids is None or isinstance(uuids, (str, bytes)):
            return 0
        return sum(1 for uuid in list(uuids) if self.remove(uuid))

    def clear(self) -> int:
        """
        Remove every record.

        Returns:
            Number of records removed
        """
        removed = len(self._records)

        for record in list(self._records.values()):
            self._detach(record)

        self._records.clear()
        for kind in GeometryKind:
            self._index_by_type[kind] = []
            self._count_by_type[kind] = 0
        self._bounds_dirty = True

        self.logger.info(
            event=LogEvent.STORE_CLEARED,
            message="Store cleared",
            metadata={'removed': removed}
        )
        return removed

    def attach_drawable(self, uuid: str, drawable: Any) -> bool:
        """Reference the renderer's handle (None clears it)."""
        record = self._records.get(uuid)
        if record is None:
            return False
        record.drawable = drawable
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, uuid: str) -> Optional[GeometryRecord]:
        return self._records.get(uuid)

    def require(self, uuid: str) -> GeometryRecord:
        """
        Like get(), for callers that treat a missing identity as a bug.

        Raises:
            NotFoundError: Unknown identity
        """
        record = self._records.get(uuid)
        if record is None:
            raise NotFoundError(uuid)
        return record

    def has(self, uuid: str) -> bool:
        return uuid in self._records

    def get_all(
        self,
        kind: Optional[KindLike] = None,
        sort_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[GeometryRecord]:
        """
        Records in insertion order.

        Args:
            kind: Keep only this kind
            sort_by: 'created_at', 'updated_at' or 'uuid'
            limit: Keep only the first N

        Raises:
            ValueError: Unknown sort_by field
        """
        records = list(self._records.values())

        if kind is not None:
            wanted = GeometryKind.parse(kind)
            records = [r for r in records if r.kind == wanted]

        if sort_by is not None:
            if sort_by not in SORT_FIELDS:
                raise ValueError(f"sort_by must be one of {sorted(SORT_FIELDS)}, got {sort_by!r}")
            records.sort(key=lambda r: getattr(r, sort_by))

        if limit is not None:
            records = records[:max(limit, 0)]

        return records

    def get_by_type(self, kind: KindLike) -> List[GeometryRecord]:
        """Records of one kind, via the type index."""
        parsed = GeometryKind.parse(kind)
        if parsed is None:
            return []
        return [self._records[uuid] for uuid in self._index_by_type[parsed]]

    def uuids(self, kind: Optional[KindLike] = None) -> List[str]:
        if kind is None:
            return list(self._records)
        parsed = GeometryKind.parse(kind)
        return list(self._index_by_type[parsed]) if parsed else []

    def search_by_property(self, key: str, value: Any) -> List[GeometryRecord]:
        """Records whose feature property `key` equals `value`."""
        return [
            r for r in self._records.values()
            if key in r.properties and r.properties[key] == value
        ]

    def search(self, term: str) -> List[GeometryRecord]:
        """
        Case-insensitive regex match against every property value.

        An invalid pattern is matched literally.
        """
        try:
            pattern = re.compile(term, re.IGNORECASE)
        except re.error:
            pattern = re.compile(re.escape(term), re.IGNORECASE)

        return [
            r for r in self._records.values()
            if any(pattern.search(str(v)) for v in r.properties.values())
        ]

    def count(self) -> int:
        return len(self._records)

    def count_by_type(self) -> Dict[str, int]:
        return {kind.value: count for kind, count in self._count_by_type.items()}

    def stats(self) -> StoreStats:
        return StoreStats(
            total_count=len(self._records),
            count_by_type=self.count_by_type(),
            geometry_types=[k.value for k, c in self._count_by_type.items() if c > 0],
        )

    def calculate_bounds(self) -> Optional[Bounds]:
        """
        Box around every stored geometry (None when empty).

        Point/Circle contribute their single pair, LineString/Drawing their
        whole path, Polygon its outer ring.
        """
        if not self._bounds_dirty:
            return self._bounds_cache

        bounds = None
        for record in self._records.values():
            record_bounds = Bounds.from_latlngs(feature_latlngs(record.feature, record.kind))
            bounds = record_bounds.union(bounds) if record_bounds else bounds

        self._bounds_cache = bounds
        self._bounds_dirty = False
        return bounds

    def export_as_collection(
        self,
        kind: Optional[KindLike] = None,
        include_metadata: bool = False,
    ) -> Dict[str, Any]:
        """
        Export as a GeoJSON FeatureCollection.

        With include_metadata, each feature's properties gain
        `_beramap_uuid`, `_beramap_type` and `_beramap_metadata`.
        """
        features = []
        for record in self.get_all(kind=kind):
            feature = copy.deepcopy(record.feature)
            if include_metadata:
                properties = dict(record.properties)
                properties[METADATA_UUID_KEY] = record.uuid
                properties[METADATA_TYPE_KEY] = record.kind.value
                properties[METADATA_BLOB_KEY] = copy.deepcopy(record.metadata)
                feature['properties'] = properties
            features.append(feature)

        return {
            'type': 'FeatureCollection',
            'features': features,
            'metadata': {
                'exported_at': iso_now(),
                'count': len(features),
                'generated_by': 'beramap GeometryStore',
            },
        }

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, uuid: object) -> bool:
        return uuid in self._records

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _validate(self, feature: Any, uuid: Optional[str]) -> Optional[GeometryKind]:
        try:
            return validate_feature(feature)
        except ValidationError as e:
            self.logger.warning(
                event=LogEvent.STORE_GEOMETRY_REJECTED,
                message=f"Feature rejected: {e}",
                metadata={'uuid': uuid}
            )
            return None

    def _detach(self, record: GeometryRecord) -> None:
        if record.drawable is None or self.detach is None:
            return
        try:
            self.detach(record)
        except Exception as e:
            self.logger.error(
                event=LogEvent.RENDER_ERROR,
                message=f"Failed to detach drawable of {record.uuid}",
                metadata={'uuid': record.uuid, 'kind': record.kind.value},
                exc_info=e
            )
        record.drawable = None
