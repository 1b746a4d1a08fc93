# model/store.py
"""
Selection state: reducers plus a small observable container.

Every mutation is an action handled by a pure `(state, action) -> state`
function. `Store` holds the current state, applies actions one at a time and
pushes the new state to subscribers. No-ops return the same state object and
do not notify.
"""
import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from graphics.layout import move_charm_to_slot
from model.checkout import cart_total, snapshot_for_cart
from model.models import (MAX_CHARMS, Bracelet, CartLineItem, Charm, CharmInstance,
                          SelectionState, new_cart_item_id, new_instance_id)

log = logging.getLogger(__name__)


# --- Actions ---
@dataclass(frozen=True)
class SetBracelet:
    bracelet: Bracelet


@dataclass(frozen=True)
class AddCharm:
    charm: Charm
    instance_id: str


@dataclass(frozen=True)
class RemoveCharm:
    instance_id: str


@dataclass(frozen=True)
class ReorderCharms:
    charms: Tuple[CharmInstance, ...]


@dataclass(frozen=True)
class MoveCharmToSlot:
    instance_id: str
    slot: int


@dataclass(frozen=True)
class AddToCart:
    cart_item_id: str
    preview_image: Optional[bytes] = None


@dataclass(frozen=True)
class RemoveFromCart:
    cart_item_id: str


@dataclass(frozen=True)
class EditCartItem:
    cart_item_id: str


@dataclass(frozen=True)
class ClearSelection:
    default_bracelet: Optional[Bracelet] = None


@dataclass(frozen=True)
class ToggleCharmBackgrounds:
    pass


@dataclass(frozen=True)
class RestoreState:
    state: SelectionState


# --- Reducers ---
def _set_bracelet(state, action):
    return replace(state, bracelet=action.bracelet)


def _add_charm(state, action):
    # Over the cap is a silent no-op; callers check charm_limit_reached() first
    if len(state.charms) >= MAX_CHARMS:
        return state
    return replace(state, charms=state.charms + (CharmInstance(action.instance_id, action.charm),))


def _remove_charm(state, action):
    kept = tuple(ci for ci in state.charms if ci.instance_id != action.instance_id)
    if len(kept) == len(state.charms):
        return state
    return replace(state, charms=kept)


def _reorder_charms(state, action):
    # Wholesale replacement, not checked to be a permutation of the old list
    return replace(state, charms=tuple(action.charms))


def _move_charm_to_slot(state, action):
    reordered = move_charm_to_slot(state.charms, action.instance_id, action.slot)
    if reordered == state.charms:
        return state
    return replace(state, charms=reordered)


def _add_to_cart(state, action):
    item = snapshot_for_cart(state, action.cart_item_id, action.preview_image)
    if item is None:
        return state
    # One design in the editor at a time: charms are cleared, the bracelet stays
    return replace(state, cart=state.cart + (item,), charms=())


def _remove_from_cart(state, action):
    kept = tuple(it for it in state.cart if it.id != action.cart_item_id)
    if len(kept) == len(state.cart):
        return state
    return replace(state, cart=kept)


def _edit_cart_item(state, action):
    item = next((it for it in state.cart if it.id == action.cart_item_id), None)
    if item is None:
        return state

    # Stored slots give the order back; charms without a slot keep their relative order at the end
    ordered = sorted(
        enumerate(item.charms),
        key=lambda pair: (item.charm_positions.get(pair[1].instance_id, len(item.charms) + pair[0])),
    )
    return replace(
        state,
        bracelet=item.bracelet,
        charms=tuple(ci for _, ci in ordered)[:MAX_CHARMS],
        cart=tuple(it for it in state.cart if it.id != item.id),
    )


def _clear_selection(state, action):
    return replace(state, bracelet=action.default_bracelet, charms=())


def _toggle_backgrounds(state, action):
    return replace(state, show_charm_backgrounds=not state.show_charm_backgrounds)


def _restore(state, action):
    return action.state


_REDUCERS = {
    SetBracelet: _set_bracelet,
    AddCharm: _add_charm,
    RemoveCharm: _remove_charm,
    ReorderCharms: _reorder_charms,
    MoveCharmToSlot: _move_charm_to_slot,
    AddToCart: _add_to_cart,
    RemoveFromCart: _remove_from_cart,
    EditCartItem: _edit_cart_item,
    ClearSelection: _clear_selection,
    ToggleCharmBackgrounds: _toggle_backgrounds,
    RestoreState: _restore,
}


def reduce(state, action):
    try:
        handler = _REDUCERS[type(action)]
    except KeyError:
        raise TypeError(f"Unknown action {type(action).__name__}") from None
    return handler(state, action)


# --- Derived values (recomputed on every call) ---
def total_price(state):
    if state.bracelet is None:
        return 0
    return state.bracelet.price + sum(ci.charm.price for ci in state.charms)


def charm_limit_reached(state):
    return len(state.charms) >= MAX_CHARMS


class Store:
    """Holds the selection for one session and notifies subscribers after each change."""

    def __init__(self, state=None, default_bracelet=None):
        self.default_bracelet = default_bracelet
        self._state = state if state is not None else SelectionState(bracelet=default_bracelet)
        self._listeners = []

    @property
    def state(self) -> SelectionState:
        return self._state

    def subscribe(self, listener):
        """listener(state) runs after every change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def dispatch(self, action):
        new_state = reduce(self._state, action)
        if new_state is self._state:
            return self._state
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    # --- Convenience wrappers ---
    def set_bracelet(self, bracelet):
        return self.dispatch(SetBracelet(bracelet))

    def add_charm(self, charm):
        if charm_limit_reached(self._state):
            log.debug(" [Store] Charm limit reached, ignoring %s", charm.id)
        return self.dispatch(AddCharm(charm, new_instance_id(charm)))

    def remove_charm(self, instance_id):
        return self.dispatch(RemoveCharm(instance_id))

    def reorder_charms(self, charms):
        return self.dispatch(ReorderCharms(tuple(charms)))

    def move_charm_to_slot(self, instance_id, slot):
        return self.dispatch(MoveCharmToSlot(instance_id, slot))

    def add_to_cart(self, preview_image=None) -> Optional[CartLineItem]:
        before = len(self._state.cart)
        self.dispatch(AddToCart(new_cart_item_id(), preview_image))
        return self._state.cart[-1] if len(self._state.cart) > before else None

    def remove_from_cart(self, cart_item_id):
        return self.dispatch(RemoveFromCart(cart_item_id))

    def edit_cart_item(self, cart_item_id):
        return self.dispatch(EditCartItem(cart_item_id))

    def clear_selection(self):
        return self.dispatch(ClearSelection(self.default_bracelet))

    def toggle_charm_backgrounds(self):
        return self.dispatch(ToggleCharmBackgrounds())

    def restore(self, state):
        return self.dispatch(RestoreState(state))

    def get_total_price(self):
        return total_price(self._state)

    def get_cart_total(self):
        return cart_total(self._state.cart)
