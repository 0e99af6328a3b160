"""
Event Schemas
=============

Bounded Context: Shared Data Structures

Design Principles:
- Immutability: frozen=True prevents accidental mutation
- Serialization: to_dict() for JSON export

Types:
- Timestamp: ISO 8601 timestamp wrapper
- EventRecord: one entry of the event history ring buffer
- ListenerEntry: one entry of the listener introspection registry
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict


@dataclass(frozen=True)
class Timestamp:
    """
    Immutable ISO 8601 timestamp wrapper (UTC).

    Example:
        >>> ts = Timestamp.now()
        >>> ts.value
        '2025-10-24T15:30:45.123456+00:00'
    """
    value: str

    @classmethod
    def now(cls) -> 'Timestamp':
        """Create timestamp from current time."""
        return cls(value=datetime.now(timezone.utc).isoformat())

    def to_datetime(self) -> datetime:
        """Parse to datetime object.

        Raises:
            ValueError: If timestamp format invalid
        """
        try:
            return datetime.fromisoformat(self.value)
        except ValueError as e:
            raise ValueError(f"Invalid ISO timestamp: {self.value}") from e


def iso_now() -> str:
    """Current UTC time as an ISO 8601 string."""
    return Timestamp.now().value


@dataclass(frozen=True)
class EventRecord:
    """
    History entry for a dispatched event.

    Attributes:
        event_name: Name the event was triggered with
        timestamp: ISO timestamp stamped at dispatch
        data: Copy of the dispatched payload (includes timestamp and event_name)
    """
    event_name: str
    timestamp: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            'event_name': self.event_name,
            'timestamp': self.timestamp,
            'data': dict(self.data),
        }


@dataclass(frozen=True)
class ListenerEntry:
    """Introspection record for a registered listener."""
    callback: Callable[[Dict[str, Any]], Any]
    registered_at: str
