from types import SimpleNamespace

import pytest
import stripe

from boutique import config


@pytest.fixture(autouse=True)
def stripe_ok(monkeypatch):
    monkeypatch.setattr(
        stripe.checkout.Session, "create",
        lambda **params: SimpleNamespace(id="cs_1", url="https://checkout.stripe.test/cs_1"),
    )


def test_returns_hosted_page_url(client, create_pending_order):
    order_id = create_pending_order()
    res = client.post("/api/v1/payments/checkout-session", json={"orderId": order_id, "baseUrl": "https://shop.example"})
    assert res.status_code == 200
    assert res.json() == {"url": "https://checkout.stripe.test/cs_1"}


def test_missing_order_id_is_bad_request(client):
    res = client.post("/api/v1/payments/checkout-session", json={})
    assert res.status_code == 400
    assert "orderId" in res.json()["error"]


def test_non_json_body_is_bad_request(client):
    res = client.post("/api/v1/payments/checkout-session", content="nope", headers={"Content-Type": "application/json"})
    assert res.status_code == 400
    assert res.json() == {"error": "Corps JSON invalide"}


def test_unknown_order_is_not_found(client):
    res = client.post("/api/v1/payments/checkout-session", json={"orderId": "ghost"})
    assert res.status_code == 404


def test_missing_stripe_key_is_service_unavailable(client, create_pending_order, monkeypatch):
    monkeypatch.setattr(config, "STRIPE_SECRET_KEY", "")
    order_id = create_pending_order()
    res = client.post("/api/v1/payments/checkout-session", json={"orderId": order_id})
    assert res.status_code == 503


def test_provider_rejection_shows_generic_message(client, create_pending_order, monkeypatch):
    def _reject(**params):
        raise stripe.StripeError("Invalid API Key provided: sk_test_***")

    monkeypatch.setattr(stripe.checkout.Session, "create", _reject)
    order_id = create_pending_order()
    res = client.post("/api/v1/payments/checkout-session", json={"orderId": order_id})
    assert res.status_code == 502
    assert res.json() == {"error": "Impossible de démarrer le paiement, veuillez réessayer"}


def test_zero_total_order_is_conflict(client, create_pending_order, make_order_payload):
    free_item = [{"productId": "gift", "product": {"id": "gift", "name": "Carte", "price": 0}, "quantity": 1, "price": 0}]
    order_id = create_pending_order(make_order_payload(free_item, shipping=0))
    res = client.post("/api/v1/payments/checkout-session", json={"orderId": order_id})
    assert res.status_code == 409
