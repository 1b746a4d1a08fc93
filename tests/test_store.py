import pytest

from graphics.layout import place_charms
from model.models import MAX_CHARMS, Bracelet, CharmInstance, SelectionState
from model.store import (AddCharm, RemoveCharm, SetBracelet, Store, charm_limit_reached, reduce,
                         total_price)


def test_add_charm_stops_at_limit(store, charms):
    for _ in range(MAX_CHARMS + 1):
        store.add_charm(charms[0])

    assert len(store.state.charms) == MAX_CHARMS
    assert charm_limit_reached(store.state)


def test_repeated_adds_of_same_charm_get_distinct_instance_ids(store, charms):
    for _ in range(5):
        store.add_charm(charms[0])

    ids = [ci.instance_id for ci in store.state.charms]
    assert len(set(ids)) == 5
    assert all(i.startswith("charm-a-") for i in ids)


def test_add_over_limit_returns_same_state_object(gold_chain, charms):
    full = SelectionState(bracelet=gold_chain,
                          charms=tuple(CharmInstance(f"i{n}", charms[0]) for n in range(MAX_CHARMS)))
    assert reduce(full, AddCharm(charms[1], "extra")) is full


def test_remove_charm_by_instance_keeps_other_copies(store, charms):
    store.add_charm(charms[0])
    store.add_charm(charms[0])
    first, second = store.state.charms

    store.remove_charm(first.instance_id)
    assert store.state.charms == (second,)


def test_removing_the_same_instance_twice_changes_nothing_the_second_time(store, charms):
    store.add_charm(charms[0])
    store.add_charm(charms[1])
    first, second = store.state.charms

    store.remove_charm(first.instance_id)
    after_first = store.state
    assert reduce(after_first, RemoveCharm(first.instance_id)) is after_first

    store.remove_charm(first.instance_id)
    assert store.state is after_first
    assert store.state.charms == (second,)


def test_remove_unknown_instance_is_a_noop():
    state = SelectionState()
    assert reduce(state, RemoveCharm("nope")) is state


def test_unknown_action_raises():
    with pytest.raises(TypeError):
        reduce(SelectionState(), object())


def test_set_bracelet_keeps_charms(store, charms, gold_chain):
    store.add_charm(charms[0])
    silver = Bracelet(id="bracelet-silver", name="Silver", price=20.0, image="s.png")

    store.set_bracelet(silver)
    assert store.state.bracelet == silver
    assert len(store.state.charms) == 1


def test_total_price(store, charms):
    assert store.get_total_price() == pytest.approx(30.0)
    store.add_charm(charms[0])
    store.add_charm(charms[2])
    assert store.get_total_price() == pytest.approx(45.0)


def test_total_price_without_bracelet_is_zero(charms):
    state = SelectionState(charms=(CharmInstance("x", charms[0]),))
    assert total_price(state) == 0


def test_subscribers_notified_on_change_only(store, charms):
    seen = []
    unsubscribe = store.subscribe(seen.append)

    store.add_charm(charms[0])
    store.remove_charm("missing")
    assert len(seen) == 1
    assert seen[0] is store.state

    unsubscribe()
    store.add_charm(charms[1])
    assert len(seen) == 1


def test_reorder_replaces_sequence(store, charms):
    for c in charms:
        store.add_charm(c)
    a, b, c = store.state.charms

    store.reorder_charms([c, a, b])
    assert store.state.charms == (c, a, b)


def test_move_charm_to_slot(store, charms):
    for c in charms:
        store.add_charm(c)
    a, b, c = store.state.charms

    store.move_charm_to_slot(a.instance_id, 1)
    assert store.state.charms == (b, a, c)


def test_add_to_cart_snapshots_and_clears_charms(store, charms, gold_chain):
    for c in charms:
        store.add_charm(c)
    a, b, c = store.state.charms

    line = store.add_to_cart(preview_image=b"png")

    assert line is not None
    assert line.bracelet == gold_chain
    assert line.charms == (a, b, c)
    assert line.charm_positions == {a.instance_id: 0, b.instance_id: 1, c.instance_id: 2}
    assert line.preview_image == b"png"
    assert line.total == pytest.approx(52.5)
    assert store.state.charms == ()
    assert store.state.bracelet == gold_chain
    assert store.get_cart_total() == pytest.approx(52.5)


def test_cart_line_is_isolated_from_later_edits(store, charms):
    store.add_charm(charms[0])
    line = store.add_to_cart()

    store.add_charm(charms[1])
    store.add_charm(charms[2])
    store.set_bracelet(None)

    assert store.state.cart[0] is line
    assert [ci.charm.id for ci in line.charms] == ["charm-a"]


def test_add_to_cart_without_bracelet_does_nothing(charms):
    store = Store()
    store.add_charm(charms[0])

    assert store.add_to_cart() is None
    assert store.state.cart == ()
    assert len(store.state.charms) == 1


def test_remove_from_cart(store, charms):
    store.add_charm(charms[0])
    line = store.add_to_cart()

    store.remove_from_cart("cart-unknown")
    assert len(store.state.cart) == 1
    store.remove_from_cart(line.id)
    assert store.state.cart == ()


def test_edit_cart_item_moves_line_back_into_editor(store, charms, gold_chain):
    for c in charms:
        store.add_charm(c)
    a, b, c = store.state.charms
    line = store.add_to_cart()

    store.set_bracelet(None)
    store.edit_cart_item(line.id)

    assert store.state.bracelet == gold_chain
    assert store.state.charms == (a, b, c)
    assert store.state.cart == ()


def test_clear_selection_returns_to_default(store, charms, gold_chain):
    store.add_charm(charms[0])
    store.add_to_cart()
    store.add_charm(charms[1])
    store.set_bracelet(None)

    store.clear_selection()
    assert store.state.bracelet == gold_chain
    assert store.state.charms == ()
    assert len(store.state.cart) == 1


def test_toggle_charm_backgrounds(store):
    assert store.state.show_charm_backgrounds
    store.toggle_charm_backgrounds()
    assert not store.state.show_charm_backgrounds


def test_state_is_immutable(store, charms):
    before = store.state
    store.dispatch(SetBracelet(None))
    assert before.bracelet is not None
    with pytest.raises(AttributeError):
        store.state.charms = ()


def test_three_charm_design_end_to_end(store, charms, gold_chain):
    for c in charms:
        store.add_charm(c)
    a, b, c = store.state.charms

    line = store.add_to_cart()

    assert line.charm_positions == {a.instance_id: 0, b.instance_id: 1, c.instance_id: 2}
    assert store.state.charms == ()
    assert len(store.state.cart) == 1
    assert store.state.bracelet == gold_chain

    placed = place_charms(line.charms, positions=line.charm_positions)
    assert [(p.x, p.y) for p in placed] == [(100.0, 140.0), (320.0, 200.0), (540.0, 140.0)]
