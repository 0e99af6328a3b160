"""
Structured JSON Logger
=====================

Bounded Context: Observability Infrastructure

This module provides a structured logger that outputs JSON logs.

Design:
- JSON output (compatible with log aggregators)
- Wraps Python's logging module
- Contextual metadata (component, uuid, kind, etc.)
- Type-safe events (LogEvent enum)

Example:
    >>> logger = StructuredLogger(component="store")
    >>> logger.info(
    ...     event=LogEvent.STORE_GEOMETRY_ADDED,
    ...     message="Geometry added",
    ...     metadata={'uuid': '5f0c...', 'kind': 'Point'}
    ... )

Output:
    {
        "timestamp": "2025-10-24T15:30:45.123456+00:00",
        "level": "INFO",
        "component": "store",
        "event": "store.geometry.added",
        "message": "Geometry added",
        "metadata": {"uuid": "5f0c...", "kind": "Point"}
    }
"""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from .events import LogEvent


class StructuredLogger:
    """
    JSON structured logger.

    Wraps Python's logging module with structured metadata support.

    Attributes:
        component: Component name (e.g., "store", "renderer.Polygon")
        logger: Underlying Python logger instance
    """

    def __init__(
        self,
        component: str,
        level: int = logging.INFO,
        logger_name: Optional[str] = None
    ):
        """
        Initialize structured logger.

        Args:
            component: Component identifier (e.g., "store")
            level: Logging level (default: INFO)
            logger_name: Custom logger name (default: beramap.<component>)
        """
        self.component = component
        self.logger_name = logger_name or f"beramap.{component}"
        self.logger = logging.getLogger(self.logger_name)
        # Shared per name: filtering happens on this instance's own level
        self.level = level
        self.logger.setLevel(logging.DEBUG)

        # Configure JSON formatter if not already configured
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def _log(
        self,
        level: str,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Internal log method with structured format.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR)
            event: Typed log event
            message: Human-readable message
            metadata: Additional context (uuid, kind, etc.)
            exc_info: Exception for ERROR logs
        """
        log_level = getattr(logging, level)
        if log_level < self.level:
            return

        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': level,
            'component': self.component,
            'event': event.value,
            'message': message,
        }

        if metadata:
            log_entry['metadata'] = metadata

        if exc_info:
            log_entry['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info)
            }

        # Metadata may carry arbitrary feature payloads
        self.logger.log(
            log_level,
            json.dumps(log_entry, default=str),
            exc_info=exc_info if level == 'ERROR' else None
        )

    def debug(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log DEBUG level message."""
        self._log('DEBUG', event, message, metadata)

    def info(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log INFO level message.

        Args:
            event: Typed log event
            message: Human-readable message
            metadata: Additional context
        """
        self._log('INFO', event, message, metadata)

    def warning(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log WARNING level message.

        Example:
            >>> logger.warning(
            ...     event=LogEvent.STORE_GEOMETRY_REJECTED,
            ...     message="Feature rejected",
            ...     metadata={'reason': 'missing coordinates'}
            ... )
        """
        self._log('WARNING', event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Log ERROR level message.

        Args:
            event: Typed log event
            message: Human-readable message
            metadata: Additional context
            exc_info: Exception instance for traceback

        Example:
            >>> try:
            ...     surface.create_polygon(latlngs, style, callback)
            ... except RuntimeError as e:
            ...     logger.error(
            ...         event=LogEvent.RENDER_ERROR,
            ...         message="Failed to create polygon",
            ...         exc_info=e,
            ...         metadata={'uuid': uuid}
            ...     )
        """
        self._log('ERROR', event, message, metadata, exc_info)

    def set_level(self, level: int) -> None:
        """
        Change this instance's logging level (other loggers sharing the
        component name are unaffected).

        Args:
            level: New logging level (logging.DEBUG, INFO, WARNING, ERROR)
        """
        self.level = level


class JSONFormatter(logging.Formatter):
    """
    Formatter that passes through the JSON built by StructuredLogger.
    """

    def format(self, record: logging.LogRecord) -> str:
        # The message from StructuredLogger is already JSON
        return record.getMessage()


def create_logger(
    component: str,
    level: int = logging.INFO
) -> StructuredLogger:
    """
    Factory function to create configured StructuredLogger.

    Args:
        component: Component identifier
        level: Logging level (default: INFO)

    Returns:
        Configured StructuredLogger instance

    Example:
        >>> logger = create_logger("engine", level=logging.DEBUG)
    """
    return StructuredLogger(component=component, level=level)
