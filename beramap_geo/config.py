"""
Configuration schema for the geometry engine.

Covers event history capacity, identity handling, viewport padding,
renderer heuristics and the default style of each geometry kind.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union
import yaml

from .geometry import CLOSED_RING_TOLERANCE, DEFAULT_CIRCLE_RADIUS, GeometryKind


DEFAULT_CENTER = (-8.7619, -63.9039)  # (lat, lng) Porto Velho, RO

DEFAULT_STYLES: Dict[str, Dict[str, Any]] = {
    GeometryKind.POINT.value: {
        'color': '#3388ff',
        'radius': 5,
        'fillOpacity': 0.8,
    },
    GeometryKind.LINE_STRING.value: {
        'color': '#d61ab8',
        'weight': 5,
        'opacity': 0.8,
    },
    GeometryKind.POLYGON.value: {
        'color': '#3388ff',
        'weight': 2,
        'opacity': 0.8,
        'fillColor': '#3388ff',
        'fillOpacity': 0.2,
    },
    GeometryKind.CIRCLE.value: {
        'color': '#ff0000',
        'weight': 2,
        'opacity': 0.8,
        'fillColor': '#ff0000',
        'fillOpacity': 0.2,
    },
    GeometryKind.DRAWING.value: {
        'color': '#9c27b0',
        'weight': 2,
        'opacity': 0.9,
        'dashArray': '5, 5',
    },
}


def default_styles() -> Dict[str, Dict[str, Any]]:
    """Fresh copy of the per-kind style presets."""
    return {kind: dict(style) for kind, style in DEFAULT_STYLES.items()}


@dataclass(frozen=True)
class RendererConfig:
    """Renderer heuristics shared by every geometry kind."""

    closed_line_threshold: float = CLOSED_RING_TOLERANCE  # degrees, both axes
    auto_detect_closed: bool = True  # closed drawings render as polygons
    default_radius: float = DEFAULT_CIRCLE_RADIUS  # meters
    debug: bool = False

    def __post_init__(self):
        """Validate renderer configuration."""
        if not 0 < self.closed_line_threshold < 1:
            raise ValueError(
                f"closed_line_threshold must be in (0, 1) degrees, "
                f"got {self.closed_line_threshold}"
            )

        if self.default_radius <= 0:
            raise ValueError(
                f"default_radius must be positive, got {self.default_radius}"
            )


@dataclass(frozen=True)
class EngineConfig:
    """
    Main configuration for GeometryEngine.

    Immutable after construction (frozen dataclass); loaded from YAML or a
    plain dict and validated at construction.
    """

    max_history_size: int = 100
    debug: bool = False

    # Feature-level GeoJSON "id" becomes the identity
    use_feature_ids: bool = True

    fit_bounds_padding: Tuple[int, int] = (50, 50)  # (x, y) pixels
    center: Tuple[float, float] = DEFAULT_CENTER  # (lat, lng)

    renderer: RendererConfig = field(default_factory=RendererConfig)
    styles: Dict[str, Dict[str, Any]] = field(default_factory=default_styles)

    def __post_init__(self):
        """Validate engine configuration."""
        if not 1 <= self.max_history_size <= 10_000:
            raise ValueError(
                f"max_history_size must be in [1, 10000], got {self.max_history_size}"
            )

        if len(self.fit_bounds_padding) != 2 or min(self.fit_bounds_padding) < 0:
            raise ValueError(
                f"fit_bounds_padding must be two non-negative values, "
                f"got {self.fit_bounds_padding}"
            )

        lat, lng = self.center
        if not (-90 <= lat <= 90 and -180 <= lng <= 180):
            raise ValueError(f"center must be a valid (lat, lng), got {self.center}")

        unknown = [kind for kind in self.styles if GeometryKind.parse(kind) is None]
        if unknown:
            raise ValueError(
                f"Unknown geometry kinds in styles: {unknown}. "
                f"Must be among {[k.value for k in GeometryKind]}"
            )

    def style_for(self, kind: Union[str, GeometryKind]) -> Dict[str, Any]:
        """Copy of the configured default style for a kind."""
        parsed = GeometryKind.parse(kind)
        if parsed is None:
            return {}
        return dict(self.styles.get(parsed.value, {}))

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EngineConfig":
        """
        Build from a plain mapping.

        Styles given here are merged over the presets, key by key.

        Raises:
            ValueError: Unknown keys or invalid values
        """
        data = dict(data or {})

        renderer_data = data.pop("renderer", None) or {}
        styles_data = data.pop("styles", None) or {}

        styles = default_styles()
        for kind, style in styles_data.items():
            parsed = GeometryKind.parse(kind)
            key = parsed.value if parsed else kind
            styles[key] = {**styles.get(key, {}), **(style or {})}

        if "fit_bounds_padding" in data:
            data["fit_bounds_padding"] = tuple(data["fit_bounds_padding"])
        if "center" in data:
            data["center"] = tuple(data["center"])

        try:
            renderer = RendererConfig(**renderer_data)
            return cls(renderer=renderer, styles=styles, **data)
        except TypeError as e:
            raise ValueError(f"Invalid engine configuration: {e}") from e

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "EngineConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            max_history_size: 200
            debug: false
            use_feature_ids: true
            fit_bounds_padding: [50, 50]
            center: [-8.7619, -63.9039]

            renderer:
              closed_line_threshold: 0.00001
              auto_detect_closed: true
              default_radius: 500

            styles:
              Polygon:
                color: "#00aa00"
                fillOpacity: 0.3
        """
        path = Path(yaml_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

        if data is not None and not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")

        return cls.from_dict(data)
