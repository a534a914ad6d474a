from boutique.cart.models import ProductSnapshot
from boutique.cart.state import (
    CartState,
    add_item,
    clear,
    remove_item,
    to_order_items,
    total_items,
    update_quantity,
)


def _product(product_id="p1", price=4500, stock=None):
    return ProductSnapshot(id=product_id, name=f"Produit {product_id}", price=price, stock=stock)


def test_add_item_merges_existing_line():
    state = add_item(CartState(), _product(), 1)
    state = add_item(state, _product(), 2)
    assert len(state.lines) == 1
    assert state.lines[0].quantity == 3


def test_add_item_does_not_mutate_previous_state():
    empty = CartState()
    state = add_item(empty, _product(), 1)
    assert empty.lines == []
    assert total_items(state) == 1


def test_quantity_is_clamped_to_known_stock():
    state = add_item(CartState(), _product(stock=2), 5)
    assert state.lines[0].quantity == 2
    state = update_quantity(state, "p1", 10)
    assert state.lines[0].quantity == 2


def test_out_of_stock_product_is_not_added():
    state = add_item(CartState(), _product(stock=0), 1)
    assert state.lines == []


def test_update_quantity_zero_or_negative_removes_line():
    state = add_item(CartState(), _product(), 2)
    assert update_quantity(state, "p1", 0).lines == []
    assert update_quantity(state, "p1", -3).lines == []


def test_update_unknown_product_is_a_no_op():
    state = add_item(CartState(), _product(), 2)
    assert update_quantity(state, "nope", 4) == state


def test_remove_and_clear():
    state = add_item(add_item(CartState(), _product("p1")), _product("p2"), 3)
    assert total_items(state) == 4
    assert [l.product_id for l in remove_item(state, "p1").lines] == ["p2"]
    assert clear(state).lines == []


def test_state_round_trips_through_session_json():
    state = add_item(CartState(), _product(stock=5), 2)
    restored = CartState.model_validate(state.model_dump(mode="json"))
    assert restored == state


def test_to_order_items_freezes_snapshot_price():
    state = add_item(CartState(), _product(price=1234), 2)
    items = to_order_items(state)
    assert items == [{
        "productId": "p1",
        "product": {"id": "p1", "name": "Produit p1", "price": 1234, "stock": None},
        "quantity": 2,
        "price": 1234,
    }]
