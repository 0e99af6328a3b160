"""
Test GeometryStore
==================

Identity, type index consistency, bounds cache, search and export.

Usage:
    pytest test_geometry_store.py -v
"""

import pytest

from beramap_geo.errors import NotFoundError
from beramap_geo.geometry import Bounds, GeometryKind
from beramap_geo.store import (
    METADATA_BLOB_KEY,
    METADATA_TYPE_KEY,
    METADATA_UUID_KEY,
    GeometryStore,
)


def point(lng, lat, **properties):
    return {'type': 'Feature', 'geometry': {'type': 'Point', 'coordinates': [lng, lat]},
            'properties': properties}


def circle(lng, lat, radius=500, **properties):
    return {'type': 'Feature', 'geometry': {'type': 'Circle', 'coordinates': [lng, lat]},
            'properties': {'radius': radius, **properties}}


def line(*coords, kind='LineString', **properties):
    return {'type': 'Feature', 'geometry': {'type': kind, 'coordinates': [list(c) for c in coords]},
            'properties': properties}


def polygon(ring, **properties):
    return {'type': 'Feature', 'geometry': {'type': 'Polygon', 'coordinates': [ring]},
            'properties': properties}


def assert_index_consistent(store: GeometryStore):
    counts = store.count_by_type()
    assert store.count() == sum(counts.values())
    for kind in GeometryKind:
        assert counts[kind.value] == len(store.get_by_type(kind))
        assert all(r.kind == kind for r in store.get_by_type(kind))


# ============================================================
# add / identity
# ============================================================

def test_add_generates_identity_and_copies_feature():
    store = GeometryStore()
    feature = point(-63.9039, -8.7619, name="Porto Velho")

    uuid = store.add(feature, style={'color': '#000'}, metadata={'source': 'test'})

    assert uuid
    record = store.get(uuid)
    assert record.kind is GeometryKind.POINT
    assert record.feature == feature
    assert record.feature is not feature
    assert record.style == {'color': '#000'}
    assert record.metadata == {'source': 'test'}
    assert record.created_at == record.updated_at

    feature['properties']['name'] = 'changed'
    assert store.get(uuid).properties['name'] == 'Porto Velho'


def test_add_with_supplied_identity_updates_existing_record():
    store = GeometryStore()
    store.add(point(0, 0), uuid="fixed")
    assert store.add(line((0, 0), (1, 1)), uuid="fixed") == "fixed"

    assert store.count() == 1
    assert store.get("fixed").kind is GeometryKind.LINE_STRING
    assert_index_consistent(store)


def test_malformed_feature_is_rejected_without_mutation():
    store = GeometryStore()
    store.add(point(0, 0))
    store.calculate_bounds()

    assert store.add({'type': 'Feature', 'geometry': {'type': 'Hexagon', 'coordinates': []}}) is None
    assert store.add({'type': 'Feature'}) is None
    assert store.add(None) is None

    assert store.count() == 1
    assert_index_consistent(store)


def test_add_batch_skips_malformed_entries():
    store = GeometryStore()
    uuids = store.add_batch([
        point(0, 0),
        {'type': 'Feature', 'geometry': {'type': 'Point'}},
        line((0, 0), (1, 1)),
        line((0, 0)),
    ])
    assert len(uuids) == 2
    assert store.add_batch(None) == []
    assert store.add_batch(point(0, 0)) == []


# ============================================================
# update / remove / clear
# ============================================================

def test_update_moves_record_between_type_buckets():
    store = GeometryStore()
    uuid = store.add(point(0, 0))
    store.add(point(1, 1))

    assert store.update(uuid, polygon([[0, 0], [1, 0], [1, 1], [0, 0]]))

    assert store.count_by_type()['Point'] == 1
    assert store.count_by_type()['Polygon'] == 1
    assert [r.uuid for r in store.get_by_type('Polygon')] == [uuid]
    assert_index_consistent(store)


def test_update_keeps_style_unless_given():
    store = GeometryStore()
    uuid = store.add(point(0, 0), style={'color': 'red'})
    store.update(uuid, point(1, 1))
    assert store.get(uuid).style == {'color': 'red'}
    store.update(uuid, point(1, 1), style={'color': 'blue'})
    assert store.get(uuid).style == {'color': 'blue'}


def test_update_unknown_or_malformed_returns_false():
    store = GeometryStore()
    uuid = store.add(point(0, 0))
    assert not store.update("missing", point(0, 0))
    assert not store.update(uuid, {'type': 'Feature', 'geometry': None})
    assert store.get(uuid).feature['geometry']['coordinates'] == [0, 0]


def test_remove_is_idempotent():
    store = GeometryStore()
    uuid = store.add(point(0, 0))
    store.add(circle(1, 1))

    assert store.remove(uuid) is True
    counts = store.count_by_type()

    assert store.remove(uuid) is False
    assert store.count_by_type() == counts
    assert store.count() == 1
    assert_index_consistent(store)


def test_remove_batch_counts_only_removed():
    store = GeometryStore()
    a = store.add(point(0, 0))
    b = store.add(point(1, 1))
    assert store.remove_batch([a, "nope", b, a]) == 2
    assert store.remove_batch(None) == 0
    assert store.count() == 0


def test_clear_returns_number_removed():
    store = GeometryStore()
    store.add_batch([point(0, 0), circle(1, 1), line((0, 0), (1, 1))])
    assert store.clear() == 3
    assert store.count() == 0
    assert store.calculate_bounds() is None
    assert_index_consistent(store)


def test_index_invariant_over_mixed_sequence():
    store = GeometryStore()
    uuids = store.add_batch([point(0, 0), circle(1, 1), line((0, 0), (1, 1)),
                             line((0, 0), (1, 1), kind='Drawing'),
                             polygon([[0, 0], [1, 0], [1, 1], [0, 0]])])
    assert_index_consistent(store)

    store.update(uuids[0], circle(0, 0))
    assert_index_consistent(store)
    store.update(uuids[2], point(5, 5))
    assert_index_consistent(store)
    store.remove(uuids[1])
    assert_index_consistent(store)
    store.add(point(3, 3), uuid=uuids[3])
    assert_index_consistent(store)
    assert store.stats().total_count == 4


# ============================================================
# Drawables
# ============================================================

def test_detach_hook_runs_before_purge():
    seen = []
    store = GeometryStore()

    def detach(record):
        seen.append((record.uuid, store.has(record.uuid)))

    store.detach = detach
    a = store.add(point(0, 0))
    b = store.add(point(1, 1))
    c = store.add(point(2, 2))
    store.attach_drawable(a, object())
    store.attach_drawable(b, object())

    store.remove(a)
    store.clear()

    # Record still present when detached; c had no drawable
    assert seen == [(a, True), (b, True)]
    assert not store.has(c)


def test_detach_failure_does_not_block_removal():
    store = GeometryStore(detach=lambda record: 1 / 0)
    uuid = store.add(point(0, 0))
    store.attach_drawable(uuid, object())
    assert store.remove(uuid)
    assert store.count() == 0


def test_attach_drawable_unknown_identity():
    store = GeometryStore()
    assert store.attach_drawable("missing", object()) is False


# ============================================================
# Bounds
# ============================================================

def test_bounds_include_point_and_circle_center():
    store = GeometryStore()
    store.add(point(-63.9039, -8.7619))
    store.add(circle(-63.9000, -8.7600, radius=500))

    bounds = store.calculate_bounds()
    assert bounds.contains(-8.7619, -63.9039)
    assert bounds.contains(-8.7600, -63.9000)


def test_bounds_use_polygon_outer_ring_only():
    store = GeometryStore()
    store.add({'type': 'Feature', 'geometry': {'type': 'Polygon', 'coordinates': [
        [[0, 0], [2, 0], [2, 2], [0, 0]],
        [[5, 5], [6, 5], [6, 6], [5, 5]],
    ]}})
    assert store.calculate_bounds() == Bounds(0, 0, 2, 2)


def test_bounds_cache_invalidated_by_mutation():
    store = GeometryStore()
    uuid = store.add(point(0, 0))
    first = store.calculate_bounds()
    assert store.calculate_bounds() is first

    store.update(uuid, point(10, 10))
    assert store.calculate_bounds() == Bounds(10, 10, 10, 10)

    store.add(line((-1, -1), (0, 0)))
    assert store.calculate_bounds() == Bounds(-1, -1, 10, 10)


def test_bounds_empty_store():
    assert GeometryStore().calculate_bounds() is None


# ============================================================
# Queries / search / export
# ============================================================

def test_get_all_filters_sort_and_limit():
    store = GeometryStore()
    store.add(point(0, 0), uuid="b")
    store.add(circle(0, 0), uuid="a")
    store.add(point(1, 1), uuid="c")

    assert [r.uuid for r in store.get_all()] == ["b", "a", "c"]
    assert [r.uuid for r in store.get_all(kind="Point")] == ["b", "c"]
    assert [r.uuid for r in store.get_all(sort_by="uuid")] == ["a", "b", "c"]
    assert [r.uuid for r in store.get_all(limit=2)] == ["b", "a"]
    assert store.uuids("Circle") == ["a"]

    with pytest.raises(ValueError):
        store.get_all(sort_by="color")


def test_require_raises_for_unknown_identity():
    store = GeometryStore()
    with pytest.raises(NotFoundError):
        store.require("missing")


def test_search_by_property_and_regex_search():
    store = GeometryStore()
    a = store.add(point(0, 0, name="Escola Municipal", zone=1))
    b = store.add(point(1, 1, name="Posto de Saúde", zone=2))

    assert [r.uuid for r in store.search_by_property("zone", 2)] == [b]
    assert store.search_by_property("missing", None) == []
    assert [r.uuid for r in store.search("escola")] == [a]
    assert {r.uuid for r in store.search("^(escola|posto)")} == {a, b}
    assert store.search("[unclosed") == []


def test_stats_lists_kinds_in_use():
    store = GeometryStore()
    store.add_batch([point(0, 0), circle(1, 1)])
    stats = store.stats()
    assert stats.total_count == 2
    assert stats.geometry_types == ["Point", "Circle"]
    assert stats.to_dict()['count_by_type']['Polygon'] == 0


def test_export_round_trip_counts_valid_features_only():
    store = GeometryStore()
    store.add_batch([
        point(0, 0),
        {'type': 'Feature', 'geometry': {'type': 'Unknown', 'coordinates': [0, 0]}},
        circle(1, 1),
        line((0, 0)),
        polygon([[0, 0], [1, 0], [1, 1], [0, 0]]),
    ])
    collection = store.export_as_collection()
    assert collection['type'] == 'FeatureCollection'
    assert len(collection['features']) == 3
    assert collection['metadata']['count'] == 3


def test_export_with_metadata_namespace():
    store = GeometryStore()
    uuid = store.add(point(0, 0, name="x"), metadata={'owner': 'ops'})
    store.add(circle(1, 1))

    collection = store.export_as_collection(kind="Point", include_metadata=True)
    assert len(collection['features']) == 1
    props = collection['features'][0]['properties']
    assert props['name'] == "x"
    assert props[METADATA_UUID_KEY] == uuid
    assert props[METADATA_TYPE_KEY] == "Point"
    assert props[METADATA_BLOB_KEY] == {'owner': 'ops'}

    # Export never leaks into the stored feature
    assert METADATA_UUID_KEY not in store.get(uuid).properties


def test_features_with_non_mapping_properties_are_rejected():
    store = GeometryStore()
    listed = point(0, 0)
    listed['properties'] = ['name']
    text = circle(1, 1)
    text['properties'] = 'abc'

    assert store.add(listed) is None
    assert store.add(text) is None
    assert store.count() == 0

    uuid = store.add(point(2, 2, name="x"))
    assert [r.uuid for r in store.search_by_property('name', 'x')] == [uuid]
    assert len(store.export_as_collection(include_metadata=True)['features']) == 1


def test_record_properties_tolerate_missing_mapping():
    store = GeometryStore()
    uuid = store.add({'type': 'Feature', 'geometry': {'type': 'Point', 'coordinates': [0, 0]}})
    assert store.get(uuid).properties == {}
    assert store.search_by_property('name', None) == []
    props = store.export_as_collection(include_metadata=True)['features'][0]['properties']
    assert props[METADATA_UUID_KEY] == uuid


def test_get_all_limit_zero_returns_nothing():
    store = GeometryStore()
    store.add_batch([point(0, 0), point(1, 1)])
    assert store.get_all(limit=0) == []
    assert len(store.get_all(limit=None)) == 2
