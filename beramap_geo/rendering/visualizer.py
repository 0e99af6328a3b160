"""
Geometry Visualizer Module
==========================

Pure drawing layer for projected geometries.

Design:
- Stateless rendering (pure functions over a frame)
- No projection or business logic: callers pass pixel coordinates
- Style dictionaries use map-style keys (color, weight, opacity,
  fillColor, fillOpacity, radius)
- Uses supervision drawing utilities, OpenCV where supervision has none

Dependencies:
- supervision (draw utilities, Color, Point)
- numpy (arrays)
- cv2 (circles, alpha blending)
"""

from typing import Any, Dict, Optional

import cv2
import numpy as np
import supervision as sv


def parse_color(value: Optional[str], fallback: sv.Color) -> sv.Color:
    """'#3388ff' -> sv.Color; anything unparsable falls back."""
    if not value:
        return fallback
    try:
        return sv.Color.from_hex(value)
    except ValueError:
        return fallback


class GeometryVisualizer:
    """
    Stateless visualizer for projected geometries.

    Usage:
        visualizer = GeometryVisualizer(text_scale=0.5)

        frame = visualizer.draw_polygon(frame, vertices, style)
        frame = visualizer.draw_polyline(frame, vertices, style)
        frame = visualizer.draw_circle(frame, (x, y), radius_px, style)
        frame = visualizer.draw_marker(frame, (x, y), style)
        frame = visualizer.draw_label(frame, (x, y), "1.25 km")
    """

    def __init__(
        self,
        default_color: sv.Color = sv.Color(r=51, g=136, b=255),
        text_color: sv.Color = sv.Color(r=255, g=255, b=255),
        text_background_color: sv.Color = sv.Color(r=0, g=0, b=0),
        text_scale: float = 0.5,
        text_thickness: int = 1,
        text_padding: int = 6,
    ):
        """
        Initialize visualizer.

        Args:
            default_color: Used when a style has no parsable color
            text_color: Color for labels
            text_background_color: Background color for labels
            text_scale: Scale factor for labels
            text_thickness: Thickness for labels
            text_padding: Padding for label background
        """
        self.default_color = default_color
        self.text_color = text_color
        self.text_background_color = text_background_color
        self.text_scale = text_scale
        self.text_thickness = text_thickness
        self.text_padding = text_padding

    def _stroke(self, style: Dict[str, Any]) -> sv.Color:
        return parse_color(style.get('color'), self.default_color)

    def _fill(self, style: Dict[str, Any]) -> sv.Color:
        return parse_color(style.get('fillColor') or style.get('color'), self.default_color)

    @staticmethod
    def _thickness(style: Dict[str, Any]) -> int:
        return max(1, int(round(style.get('weight', 2))))

    def draw_polygon(
        self,
        frame: np.ndarray,
        vertices: np.ndarray,
        style: Dict[str, Any],
    ) -> np.ndarray:
        """
        Draw a filled polygon with outline.

        Args:
            frame: Image to draw on
            vertices: Nx2 int array of pixel coordinates
            style: fillColor / fillOpacity for the fill, color / weight for the outline
        """
        fill_opacity = float(style.get('fillOpacity', 0.2))
        if fill_opacity > 0:
            frame = sv.draw_filled_polygon(
                scene=frame,
                polygon=vertices,
                color=self._fill(style),
                opacity=fill_opacity,
            )

        frame = sv.draw_polygon(
            scene=frame,
            polygon=vertices,
            color=self._stroke(style),
            thickness=self._thickness(style),
        )
        return frame

    def draw_polyline(
        self,
        frame: np.ndarray,
        vertices: np.ndarray,
        style: Dict[str, Any],
    ) -> np.ndarray:
        """Draw consecutive segments between Nx2 pixel vertices."""
        color = self._stroke(style)
        thickness = self._thickness(style)

        for start, end in zip(vertices[:-1], vertices[1:]):
            frame = sv.draw_line(
                scene=frame,
                start=sv.Point(x=int(start[0]), y=int(start[1])),
                end=sv.Point(x=int(end[0]), y=int(end[1])),
                color=color,
                thickness=thickness,
            )
        return frame

    def draw_circle(
        self,
        frame: np.ndarray,
        center: tuple,
        radius_px: int,
        style: Dict[str, Any],
    ) -> np.ndarray:
        """Draw a circle with translucent fill and outline."""
        center = (int(center[0]), int(center[1]))
        radius_px = max(1, int(radius_px))

        fill_opacity = float(style.get('fillOpacity', 0.2))
        if fill_opacity > 0:
            overlay = frame.copy()
            cv2.circle(overlay, center, radius_px, self._fill(style).as_bgr(), thickness=-1)
            frame = cv2.addWeighted(overlay, fill_opacity, frame, 1 - fill_opacity, 0)

        cv2.circle(frame, center, radius_px, self._stroke(style).as_bgr(), thickness=self._thickness(style))
        return frame

    def draw_marker(
        self,
        frame: np.ndarray,
        position: tuple,
        style: Dict[str, Any],
    ) -> np.ndarray:
        """Draw a point marker; `radius` is in pixels."""
        radius_px = max(2, int(style.get('radius', 5)))
        style = {**style, 'fillOpacity': style.get('fillOpacity', 0.8), 'weight': 1}
        return self.draw_circle(frame, position, radius_px, style)

    def draw_label(
        self,
        frame: np.ndarray,
        position: tuple,
        text: str,
    ) -> np.ndarray:
        """Draw a text label anchored at a pixel position."""
        return sv.draw_text(
            scene=frame,
            text=text,
            text_anchor=sv.Point(x=int(position[0]), y=int(position[1])),
            text_color=self.text_color,
            text_scale=self.text_scale,
            text_thickness=self.text_thickness,
            text_padding=self.text_padding,
            background_color=self.text_background_color,
        )
