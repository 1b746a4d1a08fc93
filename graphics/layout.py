# graphics/layout.py
"""
Charm layout engine.

A charm's position is purely a function of its index in the ordered
selection and the total charm count: instance i sits on slot i of the
slot list for len(charms). Reordering is therefore the only way to move
a charm, and every add/remove re-flows the whole bracelet.
"""
import logging
import math
from collections import namedtuple

import numpy as np

from graphics.snap_points import (DESIGN_WIDTH, DESIGN_HEIGHT, get_bracelet_snap_points,
                                  layout_for_count)

log = logging.getLogger(__name__)

# Radius (design units) within which a press picks up a charm. A bit more than half a charm.
PICK_RADIUS = 95

PlacedCharm = namedtuple("PlacedCharm", ["instance", "slot", "x", "y"])


def _round_half_up(v):
    return int(math.floor(v + 0.5))


def evenly_spaced_indices(count, point_count):
    """Picks `count` indices spread across a list of `point_count` snap points."""
    if count <= 0 or point_count <= 0:
        return []
    if count == 1:
        return [(point_count - 1) // 2]
    return [_round_half_up(i * (point_count - 1) / (count - 1)) for i in range(count)]


def layout_points(count, bracelet_id=None):
    """Design-space slot list for `count` charms on this bracelet."""
    custom = get_bracelet_snap_points(bracelet_id)
    if custom:
        return [custom[i] for i in evenly_spaced_indices(count, len(custom))]
    return list(layout_for_count(count))


def compute_positions(count, canvas_width=DESIGN_WIDTH, canvas_height=DESIGN_HEIGHT, bracelet_id=None):
    """
    Slot positions in canvas pixels for `count` charms.
    The 800x350 design space is stretched to fill the canvas on both axes.
    """
    points = layout_points(count, bracelet_id)
    if not points:
        return []

    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    pts *= np.array([canvas_width / DESIGN_WIDTH, canvas_height / DESIGN_HEIGHT])
    return [(float(x), float(y)) for x, y in pts]


def assign_slots(charms):
    """Explicit instance_id -> slot map for the current order."""
    return {ci.instance_id: i for i, ci in enumerate(charms)}


def stored_slot_count(positions, default=0):
    """Charm count a stored instance_id -> slot map was laid out for (highest slot + 1)."""
    slots = [s for s in positions.values() if isinstance(s, int) and s >= 0]
    return max(slots) + 1 if slots else default


def place_charms(charms, canvas_width=DESIGN_WIDTH, canvas_height=DESIGN_HEIGHT,
                 bracelet_id=None, positions=None):
    """
    Pairs each charm instance with its pixel position.

    With `positions` (a stored instance_id -> slot map) the stored slot wins,
    the slot table is the one for the count the map was saved with, and
    instances missing from the map are skipped. Instances whose slot has no
    point are skipped rather than failing the whole render.
    """
    count = len(charms) if positions is None else stored_slot_count(positions, len(charms))
    points = compute_positions(count, canvas_width, canvas_height, bracelet_id)
    placed = []
    for i, ci in enumerate(charms):
        if positions is not None:
            slot = positions.get(ci.instance_id)
            if slot is None:
                continue
        else:
            slot = i

        if not 0 <= slot < len(points):
            log.debug("No slot %s for %s (%d points)", slot, ci.instance_id, len(points))
            continue
        x, y = points[slot]
        placed.append(PlacedCharm(ci, slot, x, y))
    return placed


def slot_at(points, x, y):
    """Index of the point nearest to (x, y), or None for an empty list."""
    if not len(points):
        return None
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    d2 = ((pts - np.array([x, y])) ** 2).sum(axis=1)
    return int(np.argmin(d2))


def charm_at(charms, x, y, bracelet_id=None, radius=PICK_RADIUS):
    """Instance id of the charm drawn nearest to design point (x, y), if close enough."""
    if not charms:
        return None
    points = layout_points(len(charms), bracelet_id)[:len(charms)]
    idx = slot_at(points, x, y)
    if idx is None:
        return None
    px, py = points[idx]
    if (px - x) ** 2 + (py - y) ** 2 > radius * radius:
        return None
    return charms[idx].instance_id


def move_charm_to_slot(charms, instance_id, slot):
    """
    New ordering where `instance_id` takes `slot` and the charm that was there
    moves into the vacated slot. Unknown ids or bad slots return the order unchanged.
    """
    charms = tuple(charms)
    src = next((i for i, ci in enumerate(charms) if ci.instance_id == instance_id), None)
    if src is None or slot is None or not 0 <= slot < len(charms) or src == slot:
        return charms

    reordered = list(charms)
    reordered[src], reordered[slot] = reordered[slot], reordered[src]
    return tuple(reordered)
