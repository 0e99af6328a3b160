"""
Structured Logging for BeraMap
==============================

Bounded Context: Observability

JSON-structured logging shared by the event bus, the geometry store, the
renderers and the engine.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function

Example:
    >>> from beramap_events.logging import create_logger, LogEvent
    >>> logger = create_logger("store")
    >>> logger.info(
    ...     event=LogEvent.STORE_GEOMETRY_ADDED,
    ...     message="Geometry added",
    ...     metadata={'uuid': 'a1b2', 'kind': 'Polygon'}
    ... )
"""

from .events import LogEvent
from .structured import StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
