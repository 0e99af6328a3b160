"""
BeraMap Geometry Engine
=======================

Bounded Context: In-memory management of geographic features.

Architecture:

    beramap_geo/
    ├── geometry/          # Pure geometry (kinds, bounds, validation, geodesic math)
    ├── store/             # GeometryStore (records, type index, bounds cache, export)
    ├── rendering/         # Renderer contract, per-kind shapes, registry, map surfaces
    ├── engine.py          # GeometryEngine (orchestration)
    ├── config.py          # EngineConfig / RendererConfig (YAML)
    └── errors.py          # GeometryError taxonomy

Usage:

    from beramap_geo import GeometryEngine, InMemorySurface

    engine = GeometryEngine(InMemorySurface())
    uuids = engine.add_geometries({
        'type': 'FeatureCollection',
        'features': [
            {'type': 'Feature',
             'geometry': {'type': 'Point', 'coordinates': [-63.9039, -8.7619]},
             'properties': {'name': 'Porto Velho'}},
            {'type': 'Feature',
             'geometry': {'type': 'Circle', 'coordinates': [-63.9, -8.76]},
             'properties': {'radius': 500}},
        ],
    })

    engine.stats()['count_by_type']        # {'Point': 1, 'Circle': 1, ...}
    engine.get_metadata(uuids[1]).area     # ~785398 m²
"""

from .config import DEFAULT_STYLES, EngineConfig, RendererConfig
from .engine import GeometryEngine
from .errors import GeometryError, NotFoundError, RenderError, ValidationError
from .geometry import Bounds, GeometryKind
from .rendering import (
    FrameSurface,
    GeometryRenderer,
    InMemorySurface,
    MapSurface,
    Renderer,
    RendererRegistry,
    RenderMetadata,
)
from .store import GeometryRecord, GeometryStore, StoreStats

__version__ = "2.0.0"

__all__ = [
    'DEFAULT_STYLES',
    'EngineConfig',
    'RendererConfig',
    'GeometryEngine',
    'GeometryError',
    'NotFoundError',
    'RenderError',
    'ValidationError',
    'Bounds',
    'GeometryKind',
    'FrameSurface',
    'GeometryRenderer',
    'InMemorySurface',
    'MapSurface',
    'Renderer',
    'RendererRegistry',
    'RenderMetadata',
    'GeometryRecord',
    'GeometryStore',
    'StoreStats',
]
