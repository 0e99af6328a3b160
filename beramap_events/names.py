"""
Event Names
===========

Bounded Context: Geometry lifecycle notifications.

Names of the events published on the EventBus and the payload each one
carries:

    geometryAdded      {uuids, count}
    geometryUpdated    {uuids, count}
    geometryRemoved    {uuids, count}
    geometryClicked    {uuid, geometry}
    geometryHovered    {uuid, geometry}
    geometryUnhovered  {uuid, geometry}
    cleared            {cleared_at}
    mapReady           {ready_at}
    styleChanged       {geometry_type, style, changed_at}
    selectionChanged   {selected, count}
    error              {message, error, error_at}
"""

from enum import Enum


class GeometryEvent(str, Enum):
    """Event names emitted by the engine."""

    GEOMETRY_ADDED = "geometryAdded"
    GEOMETRY_UPDATED = "geometryUpdated"
    GEOMETRY_REMOVED = "geometryRemoved"
    GEOMETRY_CLICKED = "geometryClicked"
    GEOMETRY_HOVERED = "geometryHovered"
    GEOMETRY_UNHOVERED = "geometryUnhovered"

    MAP_CLEARED = "cleared"
    MAP_READY = "mapReady"

    STYLE_CHANGED = "styleChanged"
    SELECTION_CHANGED = "selectionChanged"

    ERROR = "error"


def event_name(name) -> str:
    """Normalize a GeometryEvent or plain string to the wire name."""
    if isinstance(name, GeometryEvent):
        return name.value
    return str(name)
