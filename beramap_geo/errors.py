"""
Geometry engine errors.

These are raised inside the store and the renderers and caught at the
operation boundary: public operations report failure through return values
and the bus `error` event instead of propagating them.
"""

from typing import Optional


class GeometryError(Exception):
    """Base class for geometry engine errors."""
    pass


class ValidationError(GeometryError):
    """Malformed feature or unrecognized geometry kind."""
    pass


class NotFoundError(GeometryError):
    """Operation referenced an unknown identity."""

    def __init__(self, uuid: str):
        super().__init__(f"Geometry '{uuid}' not found")
        self.uuid = uuid


class RenderError(GeometryError):
    """The map surface failed to produce or remove a drawable."""

    def __init__(self, kind: str, uuid: str, cause: Optional[BaseException] = None):
        message = f"Failed to render {kind} '{uuid}'"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.kind = kind
        self.uuid = uuid
        self.cause = cause
