"""
RendererRegistry - Explicit kind -> renderer registration

Bounded Context: Dispatch of features to the renderer of their kind
Responsibilities:
  - Register one renderer per GeometryKind
  - Resolve the renderer for a kind (None for kinds without one, so the
    caller can skip-and-log explicitly)
  - Provide introspection (available_kinds, count)

Pattern: Registry with explicit registration
"""

from typing import Dict, Iterator, List, Optional, Set, Union

from beramap_events import EventBus
from beramap_events.logging import StructuredLogger

from ..config import EngineConfig
from ..geometry import GeometryKind
from .base import GeometryRenderer, Renderer
from .circle import CircleShape
from .drawing import DrawingShape
from .line import LineShape
from .point import PointShape
from .polygon import PolygonShape
from .surface import MapSurface

DEFAULT_BUILDERS = (PointShape, LineShape, PolygonShape, CircleShape, DrawingShape)


class RendererRegistry:
    """
    Registry of renderers keyed by geometry kind.

    Example:
        registry = RendererRegistry.default(surface, store=store, bus=bus)

        renderer = registry.get("Polygon")
        if renderer is None:
            ...  # kind has no renderer: skip and log
    """

    def __init__(self):
        self._renderers: Dict[GeometryKind, GeometryRenderer] = {}

    @classmethod
    def default(
        cls,
        surface: MapSurface,
        store=None,
        bus: Optional[EventBus] = None,
        config: Optional[EngineConfig] = None,
        logger: Optional[StructuredLogger] = None,
    ) -> "RendererRegistry":
        """One Renderer per kind, with the configured default styles."""
        config = config or EngineConfig()
        registry = cls()
        for builder_cls in DEFAULT_BUILDERS:
            builder = builder_cls()
            registry.register(Renderer(
                builder,
                surface,
                store=store,
                bus=bus,
                config=config.renderer,
                default_style=config.style_for(builder.kind),
                logger=logger,
            ))
        if config.debug:
            registry.set_debug(True)
        return registry

    def register(self, renderer: GeometryRenderer) -> None:
        """
        Raises:
            ValueError: A renderer for this kind is already registered
        """
        if renderer.kind in self._renderers:
            raise ValueError(f"Renderer for '{renderer.kind.value}' already registered")
        self._renderers[renderer.kind] = renderer

    def replace(self, renderer: GeometryRenderer) -> Optional[GeometryRenderer]:
        """Register, returning the renderer previously bound to the kind."""
        previous = self._renderers.get(renderer.kind)
        self._renderers[renderer.kind] = renderer
        return previous

    def unregister(self, kind: Union[str, GeometryKind]) -> Optional[GeometryRenderer]:
        parsed = GeometryKind.parse(kind)
        return self._renderers.pop(parsed, None) if parsed else None

    def get(self, kind: Union[str, GeometryKind]) -> Optional[GeometryRenderer]:
        parsed = GeometryKind.parse(kind)
        if parsed is None:
            return None
        return self._renderers.get(parsed)

    def is_available(self, kind: Union[str, GeometryKind]) -> bool:
        return self.get(kind) is not None

    @property
    def available_kinds(self) -> Set[str]:
        return {kind.value for kind in self._renderers}

    def renderers(self) -> List[GeometryRenderer]:
        return list(self._renderers.values())

    def set_debug(self, enabled: bool) -> None:
        for renderer in self._renderers.values():
            if hasattr(renderer, 'set_debug'):
                renderer.set_debug(enabled)

    def count(self) -> int:
        return len(self._renderers)

    def __iter__(self) -> Iterator[GeometryRenderer]:
        return iter(list(self._renderers.values()))
