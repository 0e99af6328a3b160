"""
Renderer Contract
=================

Bounded Context: Drawable lifecycle for one geometry kind.

Design:
- GeometryRenderer: the protocol the engine talks to
- ShapeBuilder: per-kind strategy (validation, metrics, drawable shape)
- Renderer: the single implementation of GeometryRenderer, composed with
  one ShapeBuilder; there is no renderer class hierarchy

Rules enforced by Renderer for every kind:
- At most one live drawable per identity: rendering an identity that
  already has one removes the old drawable first
- Metrics are recomputed on every render (never cached across feature
  changes)
- Surface failures never propagate: they are logged, surfaced as an
  `error` event on the bus and the call returns None / False

Example:
    >>> renderer = Renderer(PolygonShape(), surface, store=store, bus=bus)
    >>> handle = renderer.render(uuid, feature)
    >>> renderer.get_metadata(uuid).area
    1002342.87
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple, Union

from beramap_events import EventBus
from beramap_events.logging import LogEvent, StructuredLogger, create_logger

from ..config import RendererConfig
from ..errors import RenderError
from ..geometry import GeometryKind
from ..geometry.measure import LatLng
from .surface import MapSurface

RENDER_AS = ("marker", "polyline", "polygon", "circle")

RenderItem = Union[Tuple[str, Dict[str, Any]], Dict[str, Any]]


class GeometryRenderer(Protocol):
    """Drawable lifecycle for one geometry kind."""

    kind: GeometryKind

    def render(self, uuid: str, feature: Dict[str, Any],
               style: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        ...

    def render_batch(self, items: Iterable[RenderItem],
                     style: Optional[Dict[str, Any]] = None) -> List[Any]:
        ...

    def remove(self, uuid: str) -> bool:
        ...

    def remove_all(self) -> int:
        ...

    def update(self, uuid: str, feature: Dict[str, Any],
               style: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        ...

    def set_default_style(self, style: Dict[str, Any]) -> None:
        ...

    def get_default_style(self) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class BuiltShape:
    """
    What a ShapeBuilder decided to draw.

    Attributes:
        render_as: One of RENDER_AS
        latlngs: (lat, lng) positions handed to the surface
        style: Final style for the drawable
        radius: Circle radius in meters
        metrics: Keyword arguments for RenderMetadata
    """

    render_as: str
    latlngs: List[LatLng]
    style: Dict[str, Any]
    radius: Optional[float] = None
    metrics: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.render_as not in RENDER_AS:
            raise ValueError(f"render_as must be one of {RENDER_AS}, got {self.render_as!r}")


@dataclass(frozen=True)
class RenderMetadata:
    """
    Metrics computed at render time, cached until the next render/removal.

    Open shapes report area == 0.0 and perimeter == 0.0.
    """

    uuid: str
    kind: GeometryKind
    style: Dict[str, Any]
    render_as: str
    length: float = 0.0
    area: float = 0.0
    perimeter: float = 0.0
    is_closed: bool = False
    radius: Optional[float] = None
    circumference: Optional[float] = None
    center: Optional[LatLng] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['kind'] = self.kind.value
        return data


@dataclass(frozen=True)
class RenderedLayer:
    """Renderer shadow state for one identity."""

    handle: Any
    metadata: RenderMetadata
    latlngs: List[LatLng]


class ShapeBuilder(Protocol):
    """Per-kind strategy used by Renderer."""

    kind: GeometryKind

    def build(self, feature: Dict[str, Any], style: Dict[str, Any],
              config: RendererConfig) -> BuiltShape:
        """
        Raises:
            ValidationError: Feature unusable for this kind
        """
        ...

    def contains(self, layer: RenderedLayer, lat: float, lng: float) -> bool:
        ...


class Renderer:
    """
    GeometryRenderer implementation for one kind.

    Attributes:
        builder: Kind-specific ShapeBuilder
        surface: Map surface that owns the actual drawables
        store: When given, handles are attached to / cleared from records
        bus: When given, failures and interactions are published on it
    """

    def __init__(
        self,
        builder: ShapeBuilder,
        surface: MapSurface,
        store=None,
        bus: Optional[EventBus] = None,
        config: Optional[RendererConfig] = None,
        default_style: Optional[Dict[str, Any]] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.builder = builder
        self.surface = surface
        self.store = store
        self.bus = bus
        self.config = config or RendererConfig()
        self.logger = logger or create_logger(f"renderer.{builder.kind.value}")
        self.debug = False

        self._default_style: Dict[str, Any] = dict(default_style or {})
        self._layers: Dict[str, RenderedLayer] = {}

        self.set_debug(self.config.debug)

    @property
    def kind(self) -> GeometryKind:
        return self.builder.kind

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def render(self, uuid: str, feature: Dict[str, Any],
               style: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """
        Create the drawable for an identity, replacing any previous one.

        Args:
            uuid: Identity
            feature: GeoJSON Feature of this renderer's kind
            style: Overrides merged over the default style

        Returns:
            The surface handle, or None on failure
        """
        if not uuid or not feature:
            self.logger.warning(
                event=LogEvent.RENDER_SKIPPED,
                message="render() requires uuid and feature",
                metadata={'uuid': uuid, 'kind': self.kind.value}
            )
            return None

        if uuid in self._layers:
            self.remove(uuid)

        final_style = {**self._default_style, **(style or {})}

        try:
            shape = self.builder.build(feature, final_style, self.config)
            handle = self._create(uuid, shape)
        except Exception as e:
            self._fail(RenderError(self.kind.value, uuid, e))
            return None

        metadata = RenderMetadata(
            uuid=uuid,
            kind=self.kind,
            style=shape.style,
            render_as=shape.render_as,
            **shape.metrics
        )
        self._layers[uuid] = RenderedLayer(handle=handle, metadata=metadata, latlngs=shape.latlngs)

        if self.store is not None:
            self.store.attach_drawable(uuid, handle)

        self._log(LogEvent.RENDER_DRAWABLE_CREATED, f"{self.kind.value} rendered as {shape.render_as}", uuid)
        return handle

    def render_batch(self, items: Iterable[RenderItem],
                     style: Optional[Dict[str, Any]] = None) -> List[Any]:
        """
        render() each (uuid, feature) pair; failures are skipped.

        Items may also be {'uuid': ..., 'feature': ...} dicts.
        """
        handles = []
        submitted = 0
        for item in items:
            submitted += 1
            if isinstance(item, dict):
                uuid, feature = item.get('uuid'), item.get('feature')
            else:
                uuid, feature = item
            handle = self.render(uuid, feature, style)
            if handle is not None:
                handles.append(handle)

        self.logger.info(
            event=LogEvent.RENDER_BATCH_COMPLETED,
            message=f"{self.kind.value} batch rendered",
            metadata={'submitted': submitted, 'rendered': len(handles)}
        )
        return handles

    def update(self, uuid: str, feature: Dict[str, Any],
               style: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        self.remove(uuid)
        return self.render(uuid, feature, style)

    def remove(self, uuid: str) -> bool:
        """
        Detach the drawable of an identity.

        Returns:
            False when this renderer holds no drawable for it
        """
        layer = self._layers.pop(uuid, None)
        if layer is None:
            return False

        try:
            self.surface.remove(layer.handle)
        except Exception as e:
            self._fail(RenderError(self.kind.value, uuid, e))

        if self.store is not None:
            record = self.store.get(uuid)
            if record is not None and record.drawable is layer.handle:
                self.store.attach_drawable(uuid, None)

        self._log(LogEvent.RENDER_DRAWABLE_REMOVED, f"{self.kind.value} removed", uuid)
        return True

    def remove_all(self) -> int:
        return sum(1 for uuid in list(self._layers) if self.remove(uuid))

    # ------------------------------------------------------------------
    # Style
    # ------------------------------------------------------------------

    def set_default_style(self, style: Dict[str, Any]) -> None:
        """Merge into the default style."""
        self._default_style = {**self._default_style, **(style or {})}

    def get_default_style(self) -> Dict[str, Any]:
        return dict(self._default_style)

    def set_debug(self, enabled: bool) -> None:
        self.debug = bool(enabled)
        self.logger.set_level(logging.DEBUG if self.debug else logging.INFO)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_layer(self, uuid: str) -> Optional[Any]:
        layer = self._layers.get(uuid)
        return layer.handle if layer else None

    def get_metadata(self, uuid: str) -> Optional[RenderMetadata]:
        layer = self._layers.get(uuid)
        return layer.metadata if layer else None

    def rendered_uuids(self) -> List[str]:
        return list(self._layers)

    def rendered_count(self) -> int:
        return len(self._layers)

    def contains(self, uuid: str, lat: float, lng: float) -> bool:
        """Whether (lat, lng) falls inside the rendered shape."""
        layer = self._layers.get(uuid)
        if layer is None:
            return False
        return self.builder.contains(layer, lat, lng)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _create(self, uuid: str, shape: BuiltShape) -> Any:
        callback = self._interaction_handler(uuid)

        if shape.render_as == "marker":
            return self.surface.create_marker(shape.latlngs[0], shape.style, callback)
        if shape.render_as == "polyline":
            return self.surface.create_polyline(shape.latlngs, shape.style, callback)
        if shape.render_as == "polygon":
            return self.surface.create_polygon(shape.latlngs, shape.style, callback)
        return self.surface.create_circle(shape.latlngs[0], shape.radius, shape.style, callback)

    def _interaction_handler(self, uuid: str):
        def on_interaction(interaction: str, info: Dict[str, Any]) -> None:
            if self.bus is None:
                return
            geometry = self.store.get(uuid) if self.store is not None else None
            if interaction == "click":
                self.bus.trigger_geometry_clicked(uuid, geometry)
            elif interaction == "mouseover":
                self.bus.trigger_geometry_hovered(uuid, geometry)
            elif interaction == "mouseout":
                self.bus.trigger_geometry_unhovered(uuid, geometry)

        return on_interaction

    def _fail(self, error: RenderError) -> None:
        self.logger.error(
            event=LogEvent.RENDER_ERROR,
            message=str(error),
            metadata={'uuid': error.uuid, 'kind': error.kind},
            exc_info=error.cause or error
        )
        if self.bus is not None:
            self.bus.trigger_error(str(error), error)

    def _log(self, event: LogEvent, message: str, uuid: str) -> None:
        if self.debug:
            self.logger.debug(event=event, message=message, metadata={'uuid': uuid, 'kind': self.kind.value})
