# model/session.py
"""
Small durable copy of the selection so a reload keeps the design and cart.

The blob is cookie-sized: ids only, no images. Preview bitmaps are never
written here. When a blob would exceed the limit the oldest cart lines go
first. Whichever tab writes last wins.
"""
import json
import logging

from model.models import MAX_CHARMS, CartLineItem, CharmInstance, SelectionState, new_cart_item_id

log = logging.getLogger(__name__)

COOKIE_LIMIT = 4096
FORMAT_VERSION = 1


def _encode(payload):
    return json.dumps(payload, separators=(",", ":"), sort_keys=True)


def _pairs(charms):
    return [[ci.instance_id, ci.charm.id] for ci in charms]


def dump_selection(state, limit=COOKIE_LIMIT):
    payload = {
        "v": FORMAT_VERSION,
        "bracelet": state.bracelet.id if state.bracelet else None,
        "charms": _pairs(state.charms),
        "bg": state.show_charm_backgrounds,
        "cart": [
            {
                "id": it.id,
                "bracelet": it.bracelet.id,
                "charms": _pairs(it.charms),
                "positions": it.charm_positions,
            }
            for it in state.cart
        ],
    }

    raw = _encode(payload)
    while len(raw.encode("utf-8")) > limit and payload["cart"]:
        dropped = payload["cart"].pop(0)
        log.warning(" [Session] Blob over %d bytes, dropping cart line %s", limit, dropped["id"])
        raw = _encode(payload)

    if len(raw.encode("utf-8")) > limit:
        log.warning(" [Session] Selection alone exceeds %d bytes, saving bracelet only", limit)
        payload["charms"] = []
        raw = _encode(payload)
    return raw


def _charms_from_pairs(pairs, catalog):
    if not isinstance(pairs, list):
        return ()
    charms = []
    for pair in pairs:
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            continue
        instance_id, charm_id = pair
        charm = catalog.get_charm(charm_id)
        if charm is None:
            log.warning(" [Session] Dropping unknown charm %s", charm_id)
            continue
        charms.append(CharmInstance(instance_id, charm))
    return tuple(charms[:MAX_CHARMS])


def _positions(line):
    """Slot map of a stored cart line. A malformed map is dropped whole."""
    raw = line.get("positions")
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        log.warning(" [Session] Ignoring malformed positions for cart line %s", line.get("id"))
        return {}
    try:
        return {str(k): int(v) for k, v in raw.items()}
    except (TypeError, ValueError):
        log.warning(" [Session] Ignoring malformed positions for cart line %s", line.get("id"))
        return {}


def load_selection(raw, catalog, default_bracelet=None):
    """Rebuilds a SelectionState from a blob. Anything unreadable becomes an empty selection."""
    empty = SelectionState(bracelet=default_bracelet)
    if not raw:
        return empty

    try:
        payload = json.loads(raw)
    except ValueError as e:
        log.warning(" [Session] Corrupt session blob ignored: %s", e)
        return empty
    if not isinstance(payload, dict) or payload.get("v") != FORMAT_VERSION:
        log.warning(" [Session] Unsupported session blob ignored")
        return empty

    bracelet = default_bracelet
    if payload.get("bracelet"):
        bracelet = catalog.get_bracelet(payload["bracelet"]) or default_bracelet

    lines = payload.get("cart")
    cart = []
    for line in lines if isinstance(lines, list) else []:
        if not isinstance(line, dict):
            continue
        line_bracelet = catalog.get_bracelet(line.get("bracelet"))
        if line_bracelet is None:
            log.warning(" [Session] Dropping cart line %s, bracelet gone", line.get("id"))
            continue
        # Slots of charms that are gone stay in the map: they fix the layout the line was saved with
        cart.append(CartLineItem(id=str(line.get("id") or new_cart_item_id()), bracelet=line_bracelet,
                                 charms=_charms_from_pairs(line.get("charms"), catalog),
                                 charm_positions=_positions(line)))

    return SelectionState(
        bracelet=bracelet,
        charms=_charms_from_pairs(payload.get("charms"), catalog),
        cart=tuple(cart),
        show_charm_backgrounds=bool(payload.get("bg", True)),
    )


class SessionPersistence:
    """Keeps one session's blob in the sessions table in step with a Store."""

    def __init__(self, db, catalog, session_id, limit=COOKIE_LIMIT):
        self.db = db
        self.catalog = catalog
        self.session_id = session_id
        self.limit = limit

    def restore(self, store):
        raw = self.db.load_session(self.session_id)
        if raw:
            store.restore(load_selection(raw, self.catalog, store.default_bracelet))
        return store.state

    def save(self, state):
        self.db.save_session(self.session_id, dump_selection(state, self.limit))

    def attach(self, store):
        """Restore now, then write back after every change."""
        self.restore(store)
        return store.subscribe(self.save)
