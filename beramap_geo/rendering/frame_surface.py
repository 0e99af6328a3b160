"""
Raster preview surface.

FrameSurface is an InMemorySurface that can also paint its live drawables
onto a numpy image. The viewport is whatever fit_bounds() last received
(or a small box around `center` before that); positions are projected with
an equirectangular projection scaled by cos(latitude) so that shapes keep
their aspect ratio at the viewport's latitude.
"""

from math import cos, radians
from typing import Dict, Optional, Tuple

import numpy as np

from ..config import DEFAULT_CENTER
from ..geometry import Bounds
from .surface import METERS_PER_DEGREE_LAT, Drawable, InMemorySurface
from .visualizer import GeometryVisualizer


class FrameSurface(InMemorySurface):
    """
    Map surface backed by an image.

    Usage:
        surface = FrameSurface(width=1280, height=720)
        engine = GeometryEngine(surface)
        engine.add_geometries(collection, fit_bounds=True)
        frame = surface.render_frame()
        cv2.imwrite("preview.png", frame)
    """

    def __init__(
        self,
        width: int = 1280,
        height: int = 720,
        center: Tuple[float, float] = DEFAULT_CENTER,
        span_deg: float = 0.05,
        background: Tuple[int, int, int] = (255, 255, 255),
        visualizer: Optional[GeometryVisualizer] = None,
    ):
        if width <= 0 or height <= 0:
            raise ValueError(f"Frame size must be positive, got {width}x{height}")
        if span_deg <= 0:
            raise ValueError(f"span_deg must be positive, got {span_deg}")

        super().__init__()
        self.width = width
        self.height = height
        self.center = center
        self.span_deg = span_deg
        self.background = background
        self.visualizer = visualizer or GeometryVisualizer()

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def _view(self) -> Bounds:
        if self.viewport is not None:
            return self.viewport
        lat, lng = self.center
        half = self.span_deg / 2
        return Bounds(lat - half, lng - half, lat + half, lng + half)

    def _scale(self) -> Tuple[float, float, float, float]:
        """(pixels per degree, lng factor, center lat, center lng)"""
        view = self._view()
        center_lat, center_lng = view.center
        lng_factor = max(cos(radians(center_lat)), 1e-12)

        pad_x, pad_y = self.padding if self.viewport is not None else (0, 0)
        usable_w = max(self.width - 2 * pad_x, 1)
        usable_h = max(self.height - 2 * pad_y, 1)

        extent_x = max((view.max_lng - view.min_lng) * lng_factor, 1e-9)
        extent_y = max(view.max_lat - view.min_lat, 1e-9)

        scale = min(usable_w / extent_x, usable_h / extent_y)
        return scale, lng_factor, center_lat, center_lng

    def project(self, lat: float, lng: float) -> Tuple[int, int]:
        """(lat, lng) -> (x, y) pixel."""
        scale, lng_factor, center_lat, center_lng = self._scale()
        x = self.width / 2 + (lng - center_lng) * lng_factor * scale
        y = self.height / 2 - (lat - center_lat) * scale
        return int(round(x)), int(round(y))

    def meters_to_pixels(self, meters: float) -> float:
        scale, _, _, _ = self._scale()
        return meters / METERS_PER_DEGREE_LAT * scale

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_frame(self, labels: Optional[Dict[int, str]] = None) -> np.ndarray:
        """
        Paint every live drawable, oldest first.

        Args:
            labels: Optional text per drawable id, drawn at the drawable's
                first position

        Returns:
            HxWx3 uint8 BGR image
        """
        frame = np.full((self.height, self.width, 3), self.background, dtype=np.uint8)

        for drawable in self.drawables:
            frame = self._draw(frame, drawable)

        for drawable in self.drawables:
            text = (labels or {}).get(drawable.id)
            if text:
                x, y = self.project(*drawable.latlngs[0])
                frame = self.visualizer.draw_label(frame, (x, y - 12), text)

        return frame

    def _draw(self, frame: np.ndarray, drawable: Drawable) -> np.ndarray:
        points = np.array([self.project(lat, lng) for lat, lng in drawable.latlngs], dtype=np.int32)

        if drawable.shape == "polygon":
            return self.visualizer.draw_polygon(frame, points, drawable.style)
        if drawable.shape == "polyline":
            return self.visualizer.draw_polyline(frame, points, drawable.style)
        if drawable.shape == "circle":
            radius_px = self.meters_to_pixels(drawable.radius or 0.0)
            return self.visualizer.draw_circle(frame, tuple(points[0]), radius_px, drawable.style)
        return self.visualizer.draw_marker(frame, tuple(points[0]), drawable.style)
