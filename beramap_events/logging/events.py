"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

This module defines typed event names for structured logging.

Design:
- Enum-based (prevents typos, enables autocomplete)
- Hierarchical naming (namespace.category.action)
- Searchable in log aggregators (Elasticsearch, CloudWatch Insights)

Event Naming Convention:
    <component>.<category>.<action>

    component: store, render, bus, engine, config, error
    category: geometry, drawable, event, batch
    action: added, removed, rejected, dispatched

Example Log Query (CloudWatch Insights):
    fields @timestamp, event, message, metadata.uuid
    | filter event = "store.geometry.rejected"
    | stats count() by bin(5m)
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - store.*: Geometry store mutations
    - render.*: Drawable lifecycle in renderers
    - bus.*: Event bus dispatch and listeners
    - engine.*: Orchestrator batches
    - error.*: Error conditions
    """

    # ========== Store Events ==========
    STORE_GEOMETRY_ADDED = "store.geometry.added"
    """Record inserted into the store."""

    STORE_GEOMETRY_UPDATED = "store.geometry.updated"
    """Record feature replaced (classification may have moved)."""

    STORE_GEOMETRY_REMOVED = "store.geometry.removed"
    """Record purged from the store."""

    STORE_GEOMETRY_REJECTED = "store.geometry.rejected"
    """Feature failed validation; nothing was mutated."""

    STORE_CLEARED = "store.cleared"
    """All records purged."""

    # ========== Render Events ==========
    RENDER_DRAWABLE_CREATED = "render.drawable.created"
    """Drawable created on the map surface."""

    RENDER_DRAWABLE_REMOVED = "render.drawable.removed"
    """Drawable removed from the map surface."""

    RENDER_SKIPPED = "render.skipped"
    """Feature could not be turned into a drawable (too few points, bad radius)."""

    RENDER_BATCH_COMPLETED = "render.batch.completed"
    """Renderer finished a batch."""

    # ========== Bus Events ==========
    BUS_EVENT_DISPATCHED = "bus.event.dispatched"
    """Event delivered to listeners."""

    BUS_LISTENER_REGISTERED = "bus.listener.registered"
    """Listener added to the bus."""

    BUS_LISTENER_REMOVED = "bus.listener.removed"
    """Listener(s) removed from the bus."""

    # ========== Engine Events ==========
    ENGINE_BATCH_COMPLETED = "engine.batch.completed"
    """Add/update/remove batch processed by the orchestrator."""

    ENGINE_KIND_UNSUPPORTED = "engine.kind.unsupported"
    """No renderer registered for a geometry kind."""

    ENGINE_EMPTY_INPUT = "engine.input.empty"
    """Input normalized to an empty feature list."""

    # ========== Config Events ==========
    CONFIG_LOADED = "config.loaded"
    """Configuration loaded from YAML."""

    # ========== Error Events ==========
    RENDER_ERROR = "error.render"
    """Map surface failed to create or remove a drawable."""

    LISTENER_ERROR = "error.listener"
    """Event listener raised during dispatch."""

    BATCH_ITEM_ERROR = "error.batch_item"
    """Single item failed inside a batch; processing continued."""

