# model/checkout.py
"""
Cart and order assembly.

Cart lines are frozen snapshots of the live selection; orders keep only ids
and are joined back to the catalog when displayed.
"""
import logging
import sqlite3
from enum import Enum

from graphics.layout import assign_slots
from model.errors import OrderError, OrderResult, PersistenceError
from model.models import (CartLineItem, CharmInstance, Order, OrderCharm, OrderLine,
                          new_cart_item_id)

log = logging.getLogger(__name__)


class PreviewSource(str, Enum):
    IMAGE = "image"              # stored preview bitmap
    OVERLAY = "overlay"          # backdrop + charms rebuilt from stored positions
    BACKDROP = "backdrop"        # bracelet only, no positions stored
    PLACEHOLDER = "placeholder"


def snapshot_for_cart(state, cart_item_id=None, preview_image=None):
    """Freezes the current bracelet + charms into a line item. None without a bracelet."""
    if state.bracelet is None:
        return None

    charms = tuple(state.charms)
    return CartLineItem(
        id=cart_item_id or new_cart_item_id(),
        bracelet=state.bracelet,
        charms=charms,
        charm_positions=assign_slots(charms),
        preview_image=preview_image,
    )


def snapshot_for_order(items):
    """
    Strips line items down to what gets persisted.
    Returns (lines, order_preview): the first line preview becomes the order preview.
    """
    preview = next((it.preview_image for it in items if it.preview_image), None)

    lines = []
    for it in items:
        lines.append(OrderLine(
            line_id=it.id,
            bracelet_id=it.bracelet.id,
            charms=tuple(OrderCharm(ci.instance_id, ci.charm.id) for ci in it.charms),
            positions=dict(it.charm_positions) if it.charm_positions else None,
        ))
    return tuple(lines), preview


def cart_total(items):
    return sum(it.total for it in items)


def submit_order(items, total_amount, identity, orders):
    """
    Persists a pending order for the signed-in actor.

    `identity` exposes current_actor(); `orders` exposes insert_order(order) -> id.
    Never raises: failures come back as a tagged OrderResult. There is no
    idempotency key, so submitting twice creates two orders.
    """
    actor = identity.current_actor()
    if actor is None:
        log.info(" [Checkout] Order refused: nobody signed in.")
        return OrderResult.failure(OrderError.NOT_AUTHENTICATED)

    lines, preview = snapshot_for_order(items)
    order = Order(user_id=actor.id, items=lines, total_amount=total_amount, preview_image=preview)

    try:
        order_id = orders.insert_order(order)
    except (PersistenceError, sqlite3.Error) as e:
        log.error(" [Checkout] Error placing order: %s", e)
        return OrderResult.failure(OrderError.PERSISTENCE_FAILED)

    log.info(" [Checkout] Order %s placed (%d lines, %.2f)", order_id[:8], len(lines), total_amount)
    return OrderResult.success(order_id)


def list_orders(user_id, orders):
    """Order history for one user, newest first. A database error yields []."""
    try:
        return orders.get_orders_for_user(user_id)
    except sqlite3.Error as e:
        log.error(" [Checkout] Error fetching orders for %s: %s", user_id, e)
        return []


def hydrate_order(order, catalog):
    """Re-joins an order's ids with reference data. Lines whose bracelet is gone are dropped."""
    hydrated = []
    for line in order.items:
        bracelet = catalog.get_bracelet(line.bracelet_id)
        if bracelet is None:
            log.warning(" [Checkout] Order %s: bracelet %s no longer exists", order.id, line.bracelet_id)
            continue

        charms = []
        for ref in line.charms:
            charm = catalog.get_charm(ref.charm_id)
            if charm is None:
                log.warning(" [Checkout] Order %s: charm %s no longer exists", order.id, ref.charm_id)
                continue
            charms.append(CharmInstance(ref.instance_id, charm))

        hydrated.append(CartLineItem(
            id=line.line_id,
            bracelet=bracelet,
            charms=tuple(charms),
            charm_positions=dict(line.positions) if line.positions else {},
        ))
    return hydrated


def preview_source(line, preview_image=None):
    """Which preview to show: stored bitmap, rebuilt overlay, bare bracelet, or placeholder."""
    if preview_image:
        return PreviewSource.IMAGE
    if line is None or line.bracelet is None or not line.bracelet.image:
        return PreviewSource.PLACEHOLDER
    if line.charm_positions and line.charms:
        return PreviewSource.OVERLAY
    return PreviewSource.BACKDROP


def group_charms(charms):
    """[(charm, quantity)] in first-seen order, for line summaries."""
    groups = {}
    for ci in charms:
        charm, qty = groups.get(ci.charm.id, (ci.charm, 0))
        groups[ci.charm.id] = (charm, qty + 1)
    return list(groups.values())
