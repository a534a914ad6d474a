import pytest

from boutique import config
from boutique.notifications import email_client
from boutique.notifications import service as notifications_service
from boutique.orders.models import Order


@pytest.fixture()
def order() -> Order:
    return Order.model_validate({
        "id": "order-123456789",
        "customer_name": "Ana Lopez",
        "customer_given_name": "Ana",
        "customer_email": "ana@example.com",
        "items": [
            {"product_id": "p1", "product": {"id": "p1", "name": "Bol <grès>", "price": 4500}, "quantity": 2, "price": 4500},
        ],
        "total": 9000,
        "shipping": 0,
        "status": "confirmed",
        "payment_status": "paid",
        "shipping_address": {"street": "12 rue des Potiers", "city": "Lyon", "postal_code": "69001", "country": "FR"},
    })


@pytest.fixture()
def sent(monkeypatch):
    calls = []

    def _fake_send(*, to, subject, html):
        calls.append({"to": to, "subject": subject, "html": html})
        return {"id": f"msg_{len(calls)}"}

    monkeypatch.setattr(config, "RESEND_API_KEY", "re_test")
    monkeypatch.setattr(email_client, "send_email", _fake_send)
    return calls


def test_not_configured_is_a_no_op(order, monkeypatch):
    def _boom(**kwargs):
        raise AssertionError("ne doit pas être appelé")

    monkeypatch.setattr(email_client, "send_email", _boom)
    result = notifications_service.send_order_confirmation_email(order)
    assert result.status == notifications_service.NOT_CONFIGURED
    assert not result.ok


def test_confirmation_email_renders_order(order, sent):
    result = notifications_service.send_order_confirmation_email(order)
    assert result.ok
    assert result.message_id == "msg_1"
    mail = sent[0]
    assert mail["to"] == ["ana@example.com"]
    assert "order-123456789" in mail["subject"]
    assert "90.00" in mail["html"]
    assert "Offerte" in mail["html"]
    assert "Bol &lt;grès&gt;" in mail["html"]
    assert "69001 Lyon" in mail["html"]


def test_missing_customer_email_is_a_failed_result(order, sent):
    result = notifications_service.send_order_confirmation_email(order.model_copy(update={"customer_email": None}))
    assert result.status == notifications_service.FAILED
    assert sent == []


def test_provider_error_is_captured_not_raised(order, monkeypatch):
    def _fail(**kwargs):
        raise RuntimeError("provider down")

    monkeypatch.setattr(config, "RESEND_API_KEY", "re_test")
    monkeypatch.setattr(email_client, "send_email", _fail)
    result = notifications_service.send_order_confirmation_email(order)
    assert result.status == notifications_service.FAILED
    assert result.error == "provider down"


def test_operator_alert_links_to_back_office(order, sent):
    result = notifications_service.send_new_order_alert(order)
    assert result.ok
    mail = sent[0]
    assert mail["to"] == ["ops@example.com"]
    assert "https://boutique.example/admin/orders/order-123456789" in mail["html"]
    assert "90.00" in mail["subject"]


def test_operator_alert_falls_back_to_first_admin(order, sent, monkeypatch):
    monkeypatch.setattr(config, "ADMIN_NOTIFY_EMAIL", "")
    monkeypatch.setattr(config, "ADMIN_EMAILS", ["owner@example.com"])
    notifications_service.send_new_order_alert(order)
    assert sent[0]["to"] == ["owner@example.com"]


def test_amounts_follow_configured_currency(order, sent, monkeypatch):
    monkeypatch.setattr(config, "STRIPE_CURRENCY", "gbp")
    notifications_service.send_order_confirmation_email(order)
    notifications_service.send_new_order_alert(order)
    confirmation, alert = sent
    assert "90.00 £" in confirmation["html"]
    assert "€" not in confirmation["html"]
    assert alert["subject"].endswith("90.00 GBP")
    assert "90.00 £" in alert["html"]
