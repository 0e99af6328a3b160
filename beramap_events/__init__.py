"""
BeraMap Events
==============

Bounded Context: Lifecycle notifications for the geometry engine.

Architecture:

    beramap_events/
    ├── names.py       # GeometryEvent (event names + payload shapes)
    ├── schemas.py     # Timestamp, EventRecord, ListenerEntry
    ├── bus.py         # EventBus (dispatch, history, sequences)
    └── logging/       # Structured JSON logging shared by every component

Usage:

    from beramap_events import EventBus, GeometryEvent

    bus = EventBus(max_history_size=100)
    bus.on(GeometryEvent.GEOMETRY_ADDED, lambda event: print(event['uuids']))
    bus.trigger_geometry_added(["5f0c..."])

    for record in bus.get_event_history(limit=10):
        print(record.event_name, record.timestamp)
"""

from .bus import EventBus
from .names import GeometryEvent, event_name
from .schemas import EventRecord, ListenerEntry, Timestamp, iso_now

__all__ = [
    'EventBus',
    'GeometryEvent',
    'event_name',
    'EventRecord',
    'ListenerEntry',
    'Timestamp',
    'iso_now',
]
