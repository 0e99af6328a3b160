"""
Geometry Engine
===============

Bounded Context: Orchestration of store, renderers and event bus.

Data flow:

    add_geometries(geojson)
        -> normalize_features()          Feature | FeatureCollection -> list
        -> GeometryStore.add()           identity + validation + indices
        -> RendererRegistry.get(kind)    kind without renderer: skip and log
        -> Renderer.render()             metrics + drawable (attached to record)
        -> EventBus                      ONE aggregated event per batch

Design:
- Components are instance fields, built here or injected (no singletons)
- Removal always detaches the drawable through its renderer before the
  record is purged (store `detach` hook)
- A failure on one feature is logged, published as an `error` event and
  does not abort the rest of the batch
- Aggregated lifecycle events are only emitted for non-empty batches;
  `cleared` is always emitted

Example:
    >>> engine = GeometryEngine(InMemorySurface())
    >>> engine.on(GeometryEvent.GEOMETRY_ADDED, lambda e: print(e['count']))
    >>> uuids = engine.add_geometries(feature_collection, fit_bounds=True)
    >>> engine.get_metadata(uuids[0]).area
"""

import copy
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from beramap_events import EventBus, GeometryEvent
from beramap_events.logging import LogEvent, StructuredLogger, create_logger

from .config import EngineConfig
from .geometry import Bounds, GeometryKind, feature_latlngs, normalize_features
from .rendering import GeometryRenderer, InMemorySurface, MapSurface, RendererRegistry, RenderMetadata
from .store import GeometryRecord, GeometryStore

KindLike = Union[str, GeometryKind]


class GeometryEngine:
    """
    Facade over GeometryStore, RendererRegistry and EventBus.

    Attributes:
        config: Engine configuration
        surface: Map surface drawables are created on
        bus: Event bus lifecycle events are published on
        store: Record storage
        registry: Kind -> renderer mapping
    """

    def __init__(
        self,
        surface: Optional[MapSurface] = None,
        config: Optional[EngineConfig] = None,
        bus: Optional[EventBus] = None,
        store: Optional[GeometryStore] = None,
        registry: Optional[RendererRegistry] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.config = config or EngineConfig()
        self.logger = logger or create_logger("engine")
        self.surface = surface if surface is not None else InMemorySurface()

        self.bus = bus if bus is not None else EventBus(
            max_history_size=self.config.max_history_size,
            debug=self.config.debug,
        )

        self.store = store if store is not None else GeometryStore()
        self.store.detach = self._detach

        self.registry = registry if registry is not None else RendererRegistry.default(
            self.surface,
            store=self.store,
            bus=self.bus,
            config=self.config,
        )

        self._selection: List[str] = []

        self.bus.trigger_map_ready(renderers=sorted(self.registry.available_kinds))

    # ------------------------------------------------------------------
    # Batch operations
    # ------------------------------------------------------------------

    def add_geometries(
        self,
        geojson: Any,
        *,
        style: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        fit_bounds: bool = False,
    ) -> List[str]:
        """
        Store and render a Feature or FeatureCollection.

        Args:
            geojson: Feature or FeatureCollection (anything else adds nothing)
            style: Style overrides applied to every feature of the batch
            metadata: Metadata attached to every feature of the batch
            fit_bounds: Fit the surface viewport to the added geometries

        Returns:
            Identities of the stored features, in input order
        """
        features = normalize_features(geojson)
        if not features:
            self.logger.warning(
                event=LogEvent.ENGINE_EMPTY_INPUT,
                message="No features to add"
            )
            return []

        uuids = self._ingest_all(features, style, metadata)

        if uuids:
            self.bus.trigger_geometry_added(uuids)
            if fit_bounds:
                self.fit_bounds(uuids)

        self._log_batch("add", len(features), uuids)
        return uuids

    def update_geometries(
        self,
        geojson: Any,
        *,
        clear_previous: bool = False,
        style: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> List[str]:
        """
        Re-submit features: known identities are updated in place, unknown
        ones are added.

        Args:
            clear_previous: Remove every geometry before applying the batch
        """
        features = normalize_features(geojson)
        if not features:
            self.logger.warning(
                event=LogEvent.ENGINE_EMPTY_INPUT,
                message="No features to update"
            )
            return []

        if clear_previous:
            self.clear_all()

        uuids = self._ingest_all(features, style, metadata)

        if uuids:
            self.bus.trigger_geometry_updated(uuids)

        self._log_batch("update", len(features), uuids)
        return uuids

    def remove_geometries(self, uuids: Union[str, Iterable[str]]) -> List[str]:
        """
        Remove geometries by identity; unknown identities are ignored.

        Returns:
            Identities actually removed
        """
        if isinstance(uuids, str):
            uuids = [uuids]
        uuids = list(uuids or [])

        removed = [uuid for uuid in uuids if self.store.remove(uuid)]

        if removed:
            self._prune_selection(removed)
            self.bus.trigger_geometry_removed(removed)

        self._log_batch("remove", len(uuids), removed)
        return removed

    def clear_all(self) -> int:
        """
        Remove every geometry and drawable.

        Returns:
            Number of records removed
        """
        removed = self.store.clear()

        # Drawables whose record is already gone
        for renderer in self.registry:
            renderer.remove_all()

        self._selection = []
        self.bus.trigger_cleared(count=removed)
        return removed

    # ------------------------------------------------------------------
    # Single-geometry operations
    # ------------------------------------------------------------------

    def update_geometry(
        self,
        uuid: str,
        feature: Dict[str, Any],
        style: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Replace one geometry's feature (kind may change) and re-render it."""
        if not self.store.has(uuid):
            return False

        if self._ingest(feature, style=style, uuid=uuid) is None:
            return False

        self.bus.trigger_geometry_updated([uuid])
        return True

    def update_circle_radius(self, uuid: str, radius: float) -> bool:
        """
        Change a Circle's radius (meters) and re-render it.

        The radius is written where the feature already keeps it
        (`geometry.properties` first), else into `properties`.
        """
        record = self.store.get(uuid)
        if record is None or record.kind != GeometryKind.CIRCLE:
            return False
        if not isinstance(radius, (int, float)) or radius <= 0:
            self.logger.warning(
                event=LogEvent.STORE_GEOMETRY_REJECTED,
                message=f"Invalid circle radius: {radius!r}",
                metadata={'uuid': uuid}
            )
            return False

        feature = copy.deepcopy(record.feature)
        geometry_props = feature['geometry'].get('properties')
        if isinstance(geometry_props, dict) and 'radius' in geometry_props:
            geometry_props['radius'] = radius
        else:
            feature['properties'] = {**record.properties, 'radius': radius}

        return self.update_geometry(uuid, feature)

    # ------------------------------------------------------------------
    # Style
    # ------------------------------------------------------------------

    def set_style(self, kind: KindLike, style: Dict[str, Any]) -> bool:
        """Merge into a kind's default style; emits styleChanged."""
        if not self.registry.is_available(kind):
            self.logger.warning(
                event=LogEvent.ENGINE_KIND_UNSUPPORTED,
                message=f"Unsupported geometry type: {kind}",
            )
            return False

        renderer = self.registry.get(kind)
        renderer.set_default_style(style)
        self.bus.trigger_style_changed(renderer.kind.value, renderer.get_default_style())
        return True

    def get_style(self, kind: KindLike) -> Optional[Dict[str, Any]]:
        renderer = self.registry.get(kind)
        return renderer.get_default_style() if renderer else None

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, uuids: Iterable[str]) -> List[str]:
        """Replace the selection (unknown identities dropped); emits selectionChanged."""
        self._selection = [uuid for uuid in dict.fromkeys(uuids) if self.store.has(uuid)]
        self.bus.trigger_selection_changed(self._selection)
        return list(self._selection)

    def get_selection(self) -> List[str]:
        return list(self._selection)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_geometry(self, uuid: str) -> Optional[GeometryRecord]:
        return self.store.get(uuid)

    def get_all_geometries(self, **filters: Any) -> List[GeometryRecord]:
        return self.store.get_all(**filters)

    def get_geometries_by_type(self, kind: KindLike) -> List[GeometryRecord]:
        return self.store.get_by_type(kind)

    def get_metadata(self, uuid: str) -> Optional[RenderMetadata]:
        """Render-time metrics of a geometry (None when not rendered)."""
        record = self.store.get(uuid)
        if record is None:
            return None
        renderer = self.registry.get(record.kind)
        return renderer.get_metadata(uuid) if renderer else None

    def count(self) -> int:
        return self.store.count()

    def stats(self) -> Dict[str, Any]:
        bounds = self.store.calculate_bounds()
        return {
            **self.store.stats().to_dict(),
            'rendered_by_type': {r.kind.value: r.rendered_count() for r in self.registry},
            'bounds': bounds.to_dict() if bounds else None,
            'events': self.bus.get_event_stats(),
        }

    def calculate_bounds(self) -> Optional[Bounds]:
        return self.store.calculate_bounds()

    def fit_bounds(self, uuids: Optional[Iterable[str]] = None) -> Optional[Bounds]:
        """
        Fit the surface viewport to some geometries (all when omitted).

        Drawable bounds are used where the surface reports them, record
        coordinates otherwise.

        Returns:
            The bounds handed to the surface, or None when nothing to fit
        """
        uuids = list(uuids) if uuids else self.store.uuids()

        bounds = None
        for uuid in uuids:
            record = self.store.get(uuid)
            if record is None:
                continue
            item_bounds = None
            if record.drawable is not None:
                item_bounds = self.surface.get_bounds(record.drawable)
            if item_bounds is None:
                item_bounds = Bounds.from_latlngs(feature_latlngs(record.feature, record.kind))
            if item_bounds is not None:
                bounds = item_bounds.union(bounds)

        if bounds is None:
            self.logger.warning(
                event=LogEvent.ENGINE_EMPTY_INPUT,
                message="No geometries to fit"
            )
            return None

        self.surface.fit_bounds(bounds, self.config.fit_bounds_padding)
        return bounds

    def geometries_at(self, lat: float, lng: float) -> List[str]:
        """Identities whose rendered shape contains (lat, lng)."""
        hits = []
        for record in self.store.get_all():
            renderer = self.registry.get(record.kind)
            if renderer is not None and renderer.contains(record.uuid, lat, lng):
                hits.append(record.uuid)
        return hits

    def export_geojson(
        self,
        include_metadata: bool = False,
        kind: Optional[KindLike] = None,
    ) -> Dict[str, Any]:
        return self.store.export_as_collection(kind=kind, include_metadata=include_metadata)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, name: Union[str, GeometryEvent], callback: Callable) -> Optional[Callable[[], None]]:
        return self.bus.on(name, callback)

    def once(self, name: Union[str, GeometryEvent], callback: Callable) -> Optional[Callable[[], None]]:
        return self.bus.once(name, callback)

    def off(self, name: Union[str, GeometryEvent], callback: Optional[Callable] = None) -> None:
        self.bus.off(name, callback)

    def set_debug(self, enabled: bool) -> None:
        self.bus.set_debug(enabled)
        self.registry.set_debug(enabled)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ingest_all(
        self,
        features: List[Any],
        style: Optional[Dict[str, Any]],
        metadata: Optional[Dict[str, Any]],
    ) -> List[str]:
        uuids = []
        for index, feature in enumerate(features):
            try:
                uuid = self._ingest(feature, style=style, metadata=metadata)
            except Exception as e:
                self.logger.error(
                    event=LogEvent.BATCH_ITEM_ERROR,
                    message=f"Feature {index} failed",
                    metadata={'index': index},
                    exc_info=e
                )
                self.bus.trigger_error(f"Feature {index} failed: {e}", e)
                continue
            if uuid is not None:
                uuids.append(uuid)
        # Repeated feature ids touch one record
        return list(dict.fromkeys(uuids))

    def _ingest(
        self,
        feature: Any,
        style: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        uuid: Optional[str] = None,
    ) -> Optional[str]:
        """Store (add or update) one feature and (re-)render it."""
        uuid = uuid or self._feature_identity(feature)
        previous = self.store.get(uuid) if uuid else None
        previous_kind = previous.kind if previous else None

        uuid = self.store.add(feature, uuid=uuid, style=style, metadata=metadata)
        if uuid is None:
            return None

        record = self.store.get(uuid)
        if previous_kind is not None and previous_kind != record.kind:
            old_renderer = self.registry.get(previous_kind)
            if old_renderer is not None:
                old_renderer.remove(uuid)

        renderer: Optional[GeometryRenderer] = self.registry.get(record.kind)
        if renderer is None:
            self.logger.warning(
                event=LogEvent.ENGINE_KIND_UNSUPPORTED,
                message=f"No renderer for {record.kind.value}, geometry stored unrendered",
                metadata={'uuid': uuid, 'kind': record.kind.value}
            )
            return uuid

        renderer.render(uuid, record.feature, record.style or None)
        return uuid

    def _feature_identity(self, feature: Any) -> Optional[str]:
        if not self.config.use_feature_ids or not isinstance(feature, dict):
            return None
        identity = feature.get('id')
        if isinstance(identity, bool) or not isinstance(identity, (str, int)):
            return None
        return str(identity) or None

    def _detach(self, record: GeometryRecord) -> None:
        for renderer in self.registry:
            renderer.remove(record.uuid)

    def _prune_selection(self, removed: List[str]) -> None:
        if not self._selection:
            return
        gone = set(removed)
        remaining = [uuid for uuid in self._selection if uuid not in gone]
        if len(remaining) != len(self._selection):
            self._selection = remaining
            self.bus.trigger_selection_changed(remaining)

    def _log_batch(self, operation: str, submitted: int, uuids: List[str]) -> None:
        self.logger.info(
            event=LogEvent.ENGINE_BATCH_COMPLETED,
            message=f"{operation} batch completed",
            metadata={'operation': operation, 'submitted': submitted, 'succeeded': len(uuids)}
        )
