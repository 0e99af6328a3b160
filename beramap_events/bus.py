"""
Event Bus
=========

Bounded Context: Lifecycle notification fan-out.

Design:
- Synchronous delivery to listeners, in registration order
- Every dispatched payload is stamped with `timestamp` and `event_name`
  before delivery and before it is appended to the history
- Fixed-capacity history (oldest entries evicted)
- Dispatch table and introspection registry are kept separately: the
  dispatch table only holds callables, the registry also records when
  each listener was registered

Execution model:
    Single-threaded. trigger_sequence() is the only construct that yields
    between dispatches (asyncio.sleep), so a sequence is delivered strictly
    in order and never overlaps with itself.

Example:
    >>> bus = EventBus(max_history_size=50)
    >>> unsubscribe = bus.on(GeometryEvent.GEOMETRY_ADDED, print)
    >>> bus.trigger_geometry_added(["a1", "b2"])
    >>> unsubscribe()
"""

import asyncio
import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .logging import LogEvent, StructuredLogger, create_logger
from .names import GeometryEvent, event_name
from .schemas import EventRecord, ListenerEntry, iso_now

Listener = Callable[[Dict[str, Any]], Any]
EventName = Union[str, GeometryEvent]


class EventBus:
    """
    Registry and dispatcher for engine events.

    Attributes:
        max_history_size: Capacity of the history ring buffer
        debug: When True, every dispatch is logged at DEBUG level
    """

    def __init__(
        self,
        max_history_size: int = 100,
        debug: bool = False,
        logger: Optional[StructuredLogger] = None,
    ):
        if max_history_size < 1:
            raise ValueError(f"max_history_size must be >= 1, got {max_history_size}")

        self.max_history_size = max_history_size
        self.logger = logger or create_logger("bus")
        self.debug = False

        # Dispatch table: name -> callables
        self._handlers: Dict[str, List[Listener]] = {}

        # Introspection registry: name -> ListenerEntry
        self._listeners: Dict[str, List[ListenerEntry]] = {}

        self._history: Deque[EventRecord] = deque(maxlen=max_history_size)

        self.set_debug(debug)

    # ------------------------------------------------------------------
    # Listener registration
    # ------------------------------------------------------------------

    def on(self, name: EventName, callback: Listener) -> Optional[Callable[[], None]]:
        """
        Register a listener.

        Args:
            name: Event name
            callback: Called with the stamped payload dict

        Returns:
            Function that unsubscribes this callback, or None when the
            arguments are invalid
        """
        if not name or not callable(callback):
            self.logger.warning(
                event=LogEvent.BUS_LISTENER_REGISTERED,
                message="on() requires an event name and a callable",
                metadata={'event_name': str(name)}
            )
            return None

        key = event_name(name)
        self._handlers.setdefault(key, []).append(callback)
        self._listeners.setdefault(key, []).append(
            ListenerEntry(callback=callback, registered_at=iso_now())
        )

        if self.debug:
            self.logger.debug(
                event=LogEvent.BUS_LISTENER_REGISTERED,
                message=f"Listener registered for {key}",
                metadata={'event_name': key}
            )

        return lambda: self.off(key, callback)

    def once(self, name: EventName, callback: Listener) -> Optional[Callable[[], None]]:
        """Register a listener that is removed after its first delivery."""
        if not name or not callable(callback):
            self.logger.warning(
                event=LogEvent.BUS_LISTENER_REGISTERED,
                message="once() requires an event name and a callable",
                metadata={'event_name': str(name)}
            )
            return None

        key = event_name(name)

        def wrapper(data: Dict[str, Any]) -> Any:
            self.off(key, wrapper)
            return callback(data)

        return self.on(key, wrapper)

    def off(self, name: EventName, callback: Optional[Listener] = None) -> None:
        """
        Remove listeners.

        Args:
            name: Event name
            callback: Specific callback; when omitted every listener of the
                event is removed
        """
        if not name:
            self.logger.warning(
                event=LogEvent.BUS_LISTENER_REMOVED,
                message="off() requires an event name"
            )
            return

        key = event_name(name)

        if callback is None:
            self._handlers.pop(key, None)
            self._listeners.pop(key, None)
        else:
            if key in self._handlers:
                self._handlers[key] = [cb for cb in self._handlers[key] if cb != callback]
                if not self._handlers[key]:
                    del self._handlers[key]
            if key in self._listeners:
                self._listeners[key] = [
                    entry for entry in self._listeners[key] if entry.callback != callback
                ]
                if not self._listeners[key]:
                    del self._listeners[key]

        if self.debug:
            self.logger.debug(
                event=LogEvent.BUS_LISTENER_REMOVED,
                message=f"Listener(s) removed for {key}",
                metadata={'event_name': key, 'all': callback is None}
            )

    def off_all(self) -> None:
        """Remove every listener of every event."""
        self._handlers.clear()
        self._listeners.clear()
        self.logger.info(
            event=LogEvent.BUS_LISTENER_REMOVED,
            message="All listeners removed"
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def trigger(self, name: EventName, payload: Any = None) -> Optional[Dict[str, Any]]:
        """
        Dispatch an event.

        Args:
            name: Event name
            payload: Free-form payload; a non-mapping value is wrapped as
                {'data': payload}

        Returns:
            The dispatched payload (stamped with timestamp and event_name),
            or None when no name was given
        """
        if not name:
            self.logger.warning(
                event=LogEvent.BUS_EVENT_DISPATCHED,
                message="trigger() requires an event name"
            )
            return None

        key = event_name(name)
        data = _payload_dict(payload)
        data['timestamp'] = iso_now()
        data['event_name'] = key

        if self.debug:
            self.logger.debug(
                event=LogEvent.BUS_EVENT_DISPATCHED,
                message=f"Event dispatched: {key}",
                metadata={'event_name': key, 'listeners': len(self._handlers.get(key, []))}
            )

        self._history.append(
            EventRecord(event_name=key, timestamp=data['timestamp'], data=dict(data))
        )

        # Snapshot: once() listeners unsubscribe during delivery
        for callback in list(self._handlers.get(key, [])):
            try:
                callback(data)
            except Exception as e:
                self.logger.error(
                    event=LogEvent.LISTENER_ERROR,
                    message=f"Listener for {key} raised",
                    metadata={'event_name': key},
                    exc_info=e
                )

        return data

    async def trigger_sequence(
        self,
        events: Iterable[Union[Tuple[EventName, Optional[Dict[str, Any]]], Dict[str, Any]]],
        delay_ms: float = 0,
    ) -> List[Optional[Dict[str, Any]]]:
        """
        Dispatch events one after another.

        Args:
            events: (name, payload) tuples or {'event_name', 'data'} dicts
            delay_ms: Pause between two consecutive dispatches

        Returns:
            Dispatched payloads, in submission order. The coroutine only
            completes after the last entry was dispatched.

        Example:
            >>> asyncio.run(bus.trigger_sequence([
            ...     (GeometryEvent.GEOMETRY_ADDED, {'uuids': ['a']}),
            ...     (GeometryEvent.GEOMETRY_REMOVED, {'uuids': ['a']}),
            ... ], delay_ms=10))
        """
        entries = list(events)
        dispatched = []

        for index, entry in enumerate(entries):
            if isinstance(entry, dict):
                name, payload = entry.get('event_name'), entry.get('data')
            else:
                name, payload = entry
            dispatched.append(self.trigger(name, payload))

            if index < len(entries) - 1:
                await asyncio.sleep(max(delay_ms, 0) / 1000)

        return dispatched

    # ------------------------------------------------------------------
    # Typed helpers
    # ------------------------------------------------------------------

    def trigger_geometry_added(self, uuids: List[str], **extra: Any) -> Optional[Dict[str, Any]]:
        return self.trigger(GeometryEvent.GEOMETRY_ADDED, _batch_payload(uuids, extra))

    def trigger_geometry_updated(self, uuids: List[str], **extra: Any) -> Optional[Dict[str, Any]]:
        return self.trigger(GeometryEvent.GEOMETRY_UPDATED, _batch_payload(uuids, extra))

    def trigger_geometry_removed(self, uuids: List[str], **extra: Any) -> Optional[Dict[str, Any]]:
        return self.trigger(GeometryEvent.GEOMETRY_REMOVED, _batch_payload(uuids, extra))

    def trigger_geometry_clicked(self, uuid: str, geometry: Any) -> Optional[Dict[str, Any]]:
        return self.trigger(GeometryEvent.GEOMETRY_CLICKED, {'uuid': uuid, 'geometry': geometry})

    def trigger_geometry_hovered(self, uuid: str, geometry: Any) -> Optional[Dict[str, Any]]:
        return self.trigger(GeometryEvent.GEOMETRY_HOVERED, {'uuid': uuid, 'geometry': geometry})

    def trigger_geometry_unhovered(self, uuid: str, geometry: Any) -> Optional[Dict[str, Any]]:
        return self.trigger(GeometryEvent.GEOMETRY_UNHOVERED, {'uuid': uuid, 'geometry': geometry})

    def trigger_cleared(self, **extra: Any) -> Optional[Dict[str, Any]]:
        return self.trigger(GeometryEvent.MAP_CLEARED, {'cleared_at': iso_now(), **extra})

    def trigger_map_ready(self, **extra: Any) -> Optional[Dict[str, Any]]:
        return self.trigger(GeometryEvent.MAP_READY, {'ready_at': iso_now(), **extra})

    def trigger_style_changed(self, geometry_type: str, style: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self.trigger(GeometryEvent.STYLE_CHANGED, {
            'geometry_type': geometry_type,
            'style': dict(style),
            'changed_at': iso_now(),
        })

    def trigger_selection_changed(self, uuids: List[str]) -> Optional[Dict[str, Any]]:
        return self.trigger(GeometryEvent.SELECTION_CHANGED, {
            'selected': list(uuids),
            'count': len(uuids),
        })

    def trigger_error(self, message: str, error: Optional[BaseException] = None) -> Optional[Dict[str, Any]]:
        return self.trigger(GeometryEvent.ERROR, {
            'message': message,
            'error': error,
            'error_at': iso_now(),
        })

    # ------------------------------------------------------------------
    # Debug and history
    # ------------------------------------------------------------------

    def set_debug(self, enabled: bool) -> None:
        """Toggle DEBUG-level dispatch logging."""
        self.debug = bool(enabled)
        self.logger.set_level(logging.DEBUG if self.debug else logging.INFO)

    def get_event_history(
        self,
        event_name: Optional[EventName] = None,
        event_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[EventRecord]:
        """
        Read the event history, oldest first.

        Args:
            event_name: Exact name filter
            event_type: Substring filter on the name (e.g. "geometry")
            limit: Keep only the most recent N entries
        """
        history = list(self._history)

        if event_name:
            key = _name(event_name)
            history = [record for record in history if record.event_name == key]

        if event_type:
            history = [record for record in history if event_type in record.event_name]

        if limit is not None:
            history = history[-limit:] if limit > 0 else []

        return history

    def clear_event_history(self) -> int:
        """Drop the history. Returns the number of entries removed."""
        count = len(self._history)
        self._history.clear()
        return count

    def get_event_stats(self) -> Dict[str, Any]:
        """Counts per event name plus first/last dispatch timestamps."""
        by_event_type: Dict[str, int] = {}
        for record in self._history:
            by_event_type[record.event_name] = by_event_type.get(record.event_name, 0) + 1

        return {
            'total_events': len(self._history),
            'by_event_type': by_event_type,
            'first_event_at': self._history[0].timestamp if self._history else None,
            'last_event_at': self._history[-1].timestamp if self._history else None,
        }

    def get_listeners(self, name: Optional[EventName] = None):
        """Registered listeners, for one event (list) or all events (dict)."""
        if name:
            return list(self._listeners.get(_name(name), []))
        return {key: list(entries) for key, entries in self._listeners.items()}

    def get_listener_count(self, name: Optional[EventName] = None) -> int:
        if name:
            return len(self._listeners.get(_name(name), []))
        return sum(len(entries) for entries in self._listeners.values())


def _name(name: EventName) -> str:
    return event_name(name)


def _batch_payload(uuids: List[str], extra: Dict[str, Any]) -> Dict[str, Any]:
    uuids = list(uuids)
    return {'uuids': uuids, 'count': len(uuids), **extra}


def _payload_dict(payload: Any) -> Dict[str, Any]:
    if payload is None:
        return {}
    if isinstance(payload, Mapping):
        return dict(payload)
    return {'data': payload}
