"""
Test EventBus
=============

Registration, stamped dispatch, listener isolation, bounded history and
sequenced dispatch.

Usage:
    pytest test_event_bus.py -v
"""

import asyncio
import logging

import pytest

from beramap_events import EventBus, GeometryEvent
from beramap_events.schemas import Timestamp


def test_trigger_stamps_payload_and_delivers_in_order():
    bus = EventBus()
    received = []

    bus.on("custom", lambda e: received.append(("first", e)))
    bus.on("custom", lambda e: received.append(("second", e)))

    dispatched = bus.trigger("custom", {'value': 1})

    assert [name for name, _ in received] == ["first", "second"]
    assert dispatched['value'] == 1
    assert dispatched['event_name'] == "custom"
    assert Timestamp(dispatched['timestamp']).to_datetime() is not None
    assert received[0][1] is dispatched


def test_trigger_does_not_mutate_caller_payload():
    bus = EventBus()
    payload = {'value': 1}
    bus.trigger("custom", payload)
    assert payload == {'value': 1}


def test_enum_and_string_names_are_equivalent():
    bus = EventBus()
    received = []
    bus.on(GeometryEvent.GEOMETRY_ADDED, received.append)
    bus.trigger("geometryAdded", {'uuids': []})
    assert len(received) == 1
    assert received[0]['event_name'] == "geometryAdded"


def test_unsubscribe_function_from_on():
    bus = EventBus()
    received = []
    unsubscribe = bus.on("custom", received.append)

    bus.trigger("custom")
    unsubscribe()
    bus.trigger("custom")

    assert len(received) == 1
    assert bus.get_listener_count("custom") == 0


def test_once_delivers_a_single_time():
    bus = EventBus()
    received = []
    bus.once("custom", received.append)

    bus.trigger("custom", {'n': 1})
    bus.trigger("custom", {'n': 2})

    assert [e['n'] for e in received] == [1]
    assert bus.get_listener_count("custom") == 0


def test_once_can_be_cancelled_before_firing():
    bus = EventBus()
    received = []
    cancel = bus.once("custom", received.append)
    cancel()
    bus.trigger("custom")
    assert received == []


def test_off_specific_and_all_listeners():
    bus = EventBus()
    a, b = [], []
    bus.on("custom", a.append)
    bus.on("custom", b.append)

    bus.off("custom", a.append)
    bus.trigger("custom")
    assert (len(a), len(b)) == (0, 1)

    bus.off("custom")
    bus.trigger("custom")
    assert len(b) == 1

    bus.on("x", a.append)
    bus.on("y", a.append)
    bus.off_all()
    assert bus.get_listener_count() == 0


def test_listener_exception_does_not_stop_delivery():
    bus = EventBus()
    received = []

    def broken(event):
        raise RuntimeError("listener bug")

    bus.on("custom", broken)
    bus.on("custom", received.append)

    assert bus.trigger("custom") is not None
    assert len(received) == 1


def test_invalid_registration_and_trigger():
    bus = EventBus()
    assert bus.on("", print) is None
    assert bus.on("custom", "not callable") is None
    assert bus.trigger("") is None
    assert bus.get_event_history() == []


def test_history_is_bounded_and_evicts_oldest():
    bus = EventBus(max_history_size=3)
    for n in range(5):
        bus.trigger("tick", {'n': n})

    history = bus.get_event_history()
    assert [r.data['n'] for r in history] == [2, 3, 4]


def test_history_filters_and_limit():
    bus = EventBus()
    bus.trigger_geometry_added(["a"])
    bus.trigger_geometry_removed(["a"])
    bus.trigger_cleared()

    assert [r.event_name for r in bus.get_event_history(event_name=GeometryEvent.GEOMETRY_REMOVED)] == ["geometryRemoved"]
    assert len(bus.get_event_history(event_type="geometry")) == 2
    assert [r.event_name for r in bus.get_event_history(limit=1)] == ["cleared"]

    assert bus.clear_event_history() == 3
    assert bus.get_event_history() == []


def test_event_stats():
    bus = EventBus()
    assert bus.get_event_stats()['total_events'] == 0

    bus.trigger_geometry_added(["a", "b"])
    bus.trigger_geometry_added(["c"])
    bus.trigger_error("boom")

    stats = bus.get_event_stats()
    assert stats['total_events'] == 3
    assert stats['by_event_type'] == {'geometryAdded': 2, 'error': 1}
    assert stats['first_event_at'] <= stats['last_event_at']


def test_listener_introspection():
    bus = EventBus()
    bus.on("a", print)
    bus.on("a", repr)
    bus.on("b", print)

    assert bus.get_listener_count() == 3
    assert bus.get_listener_count("a") == 2
    entries = bus.get_listeners("a")
    assert [e.callback for e in entries] == [print, repr]
    assert all(e.registered_at for e in entries)
    assert set(bus.get_listeners()) == {"a", "b"}


def test_typed_helpers_payloads():
    bus = EventBus()

    added = bus.trigger_geometry_added(["a", "b"], source="import")
    assert added['uuids'] == ["a", "b"]
    assert added['count'] == 2
    assert added['source'] == "import"

    clicked = bus.trigger_geometry_clicked("a", {'kind': 'Point'})
    assert clicked['uuid'] == "a"
    assert clicked['event_name'] == "geometryClicked"

    style = bus.trigger_style_changed("Polygon", {'color': '#fff'})
    assert style['geometry_type'] == "Polygon"

    selection = bus.trigger_selection_changed(["a"])
    assert selection['selected'] == ["a"] and selection['count'] == 1

    error = ValueError("bad")
    assert bus.trigger_error("failed", error)['error'] is error


def test_history_rejects_invalid_capacity():
    with pytest.raises(ValueError):
        EventBus(max_history_size=0)


def test_trigger_sequence_in_order_with_non_decreasing_timestamps():
    bus = EventBus()
    received = []
    bus.on("step", lambda e: received.append(e['n']))

    dispatched = asyncio.run(bus.trigger_sequence([
        ("step", {'n': 1}),
        ("step", {'n': 2}),
        {'event_name': "step", 'data': {'n': 3}},
    ], delay_ms=0))

    assert received == [1, 2, 3]
    assert [d['n'] for d in dispatched] == [1, 2, 3]

    history = bus.get_event_history(event_name="step")
    assert [r.data['n'] for r in history] == [1, 2, 3]
    timestamps = [Timestamp(r.timestamp).to_datetime() for r in history]
    assert timestamps == sorted(timestamps)


def test_trigger_sequence_with_delay_completes_after_last_dispatch():
    bus = EventBus()

    async def run():
        dispatched = await bus.trigger_sequence([("a", None), ("b", None)], delay_ms=5)
        # Completion means everything was dispatched already
        assert [r.event_name for r in bus.get_event_history()] == ["a", "b"]
        return dispatched

    assert len(asyncio.run(run())) == 2


def test_set_debug_toggles_flag():
    bus = EventBus()
    bus.set_debug(True)
    assert bus.debug
    bus.trigger("custom")
    bus.set_debug(False)
    assert not bus.debug


@pytest.mark.parametrize("payload", [["abc"], "x", 42])
def test_non_mapping_payload_is_wrapped(payload):
    bus = EventBus()
    received = []
    bus.on("custom", received.append)

    dispatched = bus.trigger("custom", payload)

    assert dispatched['data'] == payload
    assert dispatched['event_name'] == "custom"
    assert received == [dispatched]
    assert bus.get_event_history()[0].data['data'] == payload


def test_history_limit_zero_returns_nothing():
    bus = EventBus()
    bus.trigger("a")
    bus.trigger("b")
    assert bus.get_event_history(limit=0) == []
    assert [r.event_name for r in bus.get_event_history(limit=None)] == ["a", "b"]


def test_debug_toggle_is_per_bus():
    a, b = EventBus(), EventBus()
    a.set_debug(True)

    assert a.logger.level == logging.DEBUG
    assert b.logger.level == logging.INFO
    # Same underlying stdlib logger, independent thresholds
    assert a.logger.logger is b.logger.logger
