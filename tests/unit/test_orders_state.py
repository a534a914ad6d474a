import pytest

from boutique.errors import InvalidOrderState, ValidationError
from boutique.orders.models import Address, Order
from boutique.orders.state import (
    apply_payment_confirmed,
    apply_payment_status,
    check_payment_transition,
    resolve_status,
)


def _order(**overrides) -> Order:
    data = dict(
        id="o1",
        shipping_address=Address(street="1 rue", city="Lyon", postal_code="69001", country="FR"),
    )
    data.update(overrides)
    return Order(**data)


@pytest.mark.parametrize("current, target", [("pending", "paid"), ("pending", "failed"), ("paid", "refunded")])
def test_forward_payment_transitions_are_allowed(current, target):
    assert check_payment_transition(current, target) is True


@pytest.mark.parametrize("current, target", [("paid", "pending"), ("refunded", "paid"), ("failed", "paid"), ("pending", "refunded")])
def test_backward_payment_transitions_are_rejected(current, target):
    with pytest.raises(InvalidOrderState):
        check_payment_transition(current, target)


def test_same_payment_status_is_a_no_op():
    assert check_payment_transition("paid", "paid") is False


def test_unknown_payment_status_is_a_validation_error():
    with pytest.raises(ValidationError):
        check_payment_transition("pending", "settled")


def test_payment_confirmed_sets_paid_and_confirmed_together():
    order = apply_payment_confirmed(_order(), "klarna")
    assert (order.payment_status, order.status, order.payment_method) == ("paid", "confirmed", "klarna")


def test_payment_confirmed_keeps_later_fulfilment_status():
    order = apply_payment_status(_order(status="shipped"), "paid")
    assert order.status == "shipped"
    assert order.payment_status == "paid"


def test_failed_payment_leaves_status_untouched():
    order = apply_payment_status(_order(), "failed")
    assert (order.status, order.payment_status) == ("pending", "failed")


@pytest.mark.parametrize("status", ["pending", "confirmed", "processing"])
def test_tracking_number_promotes_to_shipped(status):
    assert resolve_status(status, "TRACK123") == "shipped"


@pytest.mark.parametrize("tracking", [None, "", "   "])
def test_empty_tracking_keeps_status(tracking):
    assert resolve_status("confirmed", tracking) == "confirmed"


def test_tracking_does_not_demote_delivered_or_cancelled():
    assert resolve_status("delivered", "TRACK123") == "delivered"
    assert resolve_status("cancelled", "TRACK123") == "cancelled"


def test_unknown_order_status_is_rejected():
    with pytest.raises(ValidationError):
        resolve_status("lost", None)
