import copy
import hashlib
import hmac
import json
import os
import time
import uuid
from typing import Any, Callable, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from boutique import config
from boutique.app import app as fastapi_app
from boutique.utils.security import require_admin, require_user

WEBHOOK_SECRET = "whsec_test_secret"

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


# --- Faux client Supabase (query builder en mémoire) ---

class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.payload: Any = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self._order = None
        self._limit: Optional[int] = None

    def select(self, *columns, **kwargs):
        self.op = "select"
        return self

    def insert(self, doc):
        self.op = "insert"
        self.payload = doc
        return self

    def update(self, data):
        self.op = "update"
        self.payload = data
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = set(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _matching(self) -> List[Dict[str, Any]]:
        rows = self.db.tables.setdefault(self.table_name, [])
        return [row for row in rows if all(f(row) for f in self.filters)]

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table_name, self.op))
        failure = self.db.failures.get((self.table_name, self.op))
        if failure is not None:
            raise failure
        if self.op == "insert":
            row = copy.deepcopy(self.payload)
            row.setdefault("id", uuid.uuid4().hex)
            self.db.tables.setdefault(self.table_name, []).append(row)
            return FakeResponse([copy.deepcopy(row)])
        if self.op == "update":
            updated = []
            for row in self._matching():
                row.update(copy.deepcopy(self.payload))
                updated.append(copy.deepcopy(row))
            return FakeResponse(updated)
        rows = self._matching()
        if self._order:
            column, desc = self._order
            rows = sorted(rows, key=lambda r: r.get(column) or "", reverse=desc)
        if self._limit is not None:
            rows = rows[: self._limit]
        return FakeResponse([copy.deepcopy(r) for r in rows])


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.failures: Dict[tuple, Exception] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, name: str) -> List[Dict[str, Any]]:
        return self.tables.setdefault(name, [])

    def row(self, name: str, row_id: str) -> Optional[Dict[str, Any]]:
        return next((r for r in self.rows(name) if r.get("id") == row_id), None)


@pytest.fixture(autouse=True)
def fake_db(monkeypatch) -> FakeSupabase:
    db = FakeSupabase()
    monkeypatch.setattr("boutique.infra.supabase_client.get_supabase", lambda: db)
    monkeypatch.setattr("boutique.infra.supabase_client.get_service_supabase", lambda: db)
    return db


@pytest.fixture(autouse=True)
def _test_config(monkeypatch):
    monkeypatch.setattr(config, "STRIPE_SECRET_KEY", "sk_test_dummy")
    monkeypatch.setattr(config, "STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setattr(config, "RESEND_API_KEY", "")
    monkeypatch.setattr(config, "ADMIN_NOTIFY_EMAIL", "ops@example.com")
    monkeypatch.setattr(config, "SITE_URL", "https://boutique.example")
    monkeypatch.setattr(config, "STOCK_DECREMENT_MAX_ATTEMPTS", 3)


# --- Application ---

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture()
def customer(app):
    user = {"id": "user-1", "email": "client@example.com", "role": "user"}
    app.dependency_overrides[require_user] = lambda: user
    yield user
    app.dependency_overrides.pop(require_user, None)

@pytest.fixture()
def admin_client(app, client):
    app.dependency_overrides[require_admin] = lambda: {"id": "admin-1", "email": "atelier@example.com", "role": "admin"}
    yield client
    app.dependency_overrides.pop(require_admin, None)


# --- Données ---

def product_row(product_id: str = "p1", *, price: int = 4500, stock: int = 10, name: str = "Bol en grès") -> Dict[str, Any]:
    return {
        "id": product_id,
        "name": name,
        "price": price,
        "stock": stock,
        "in_stock": stock > 0,
        "images": [{"url": f"https://cdn.example/{product_id}.avif"}],
    }

def order_payload(items: Optional[List[Dict[str, Any]]] = None, *, shipping: int = 500, tax: int = 0) -> Dict[str, Any]:
    """Saisie de checkout (camelCase) cohérente: total = Σ prix × qté + port + taxes."""
    if items is None:
        items = [{"productId": "p1", "product": {"id": "p1", "name": "Bol en grès", "price": 4500}, "quantity": 2, "price": 4500}]
    total = sum(i["price"] * i["quantity"] for i in items) + shipping + tax
    return {
        "customerGivenName": "Ana",
        "customerFamilyName": "Lopez",
        "customerEmail": "ana@example.com",
        "customerPhone": "+33 6 00 00 00 00",
        "items": items,
        "total": total,
        "shipping": shipping,
        "tax": tax,
        "shippingOptionName": "Standard",
        "shippingAddress": {
            "street": "12 rue des Potiers",
            "city": "Lyon",
            "postalCode": "69001",
            "country": "FR",
        },
    }

@pytest.fixture()
def seed_products(fake_db):
    def _seed(*rows: Dict[str, Any]) -> None:
        fake_db.rows("products").extend(copy.deepcopy(list(rows)))
    return _seed


# --- Webhook Stripe signé ---

def sign_stripe_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """En-tête Stripe-Signature réel: t=<ts>,v1=HMAC-SHA256(secret, "<ts>.<payload>")."""
    ts = int(timestamp if timestamp is not None else time.time())
    signature = hmac.new(secret.encode("utf-8"), f"{ts}.{payload}".encode("utf-8"), hashlib.sha256).hexdigest()
    return f"t={ts},v1={signature}"

def checkout_completed_event(order_id: Optional[str], *, event_id: str = "evt_test_1", payment_method_types=("card",)) -> Dict[str, Any]:
    metadata = {"orderId": order_id} if order_id else {}
    return {
        "id": event_id,
        "object": "event",
        "type": "checkout.session.completed",
        "data": {"object": {
            "id": "cs_test_1",
            "object": "checkout.session",
            "metadata": metadata,
            "payment_method_types": list(payment_method_types),
            "payment_status": "paid",
        }},
    }

@pytest.fixture()
def post_webhook(client):
    def _post(event: Dict[str, Any], *, signature: Optional[str] = "auto", secret: str = WEBHOOK_SECRET):
        payload = json.dumps(event)
        headers = {"Content-Type": "application/json"}
        if signature == "auto":
            headers["Stripe-Signature"] = sign_stripe_payload(payload, secret)
        elif signature is not None:
            headers["Stripe-Signature"] = signature
        return client.post("/api/v1/payments/webhook", content=payload, headers=headers)
    return _post


@pytest.fixture()
def make_order_payload():
    return order_payload

@pytest.fixture()
def make_product():
    return product_row

@pytest.fixture()
def make_checkout_event():
    return checkout_completed_event

@pytest.fixture()
def sign_payload():
    return sign_stripe_payload

@pytest.fixture()
def create_pending_order(fake_db, seed_products):
    """Crée une commande pending via le service (produits seedés au besoin)."""
    from boutique.orders import service as orders_service

    def _create(payload: Optional[Dict[str, Any]] = None, user_id: Optional[str] = None) -> str:
        payload = payload or order_payload()
        for item in payload["items"]:
            if fake_db.row("products", item["productId"]) is None:
                seed_products(product_row(item["productId"], price=item["price"], stock=10))
        return orders_service.submit_checkout(payload, user_id=user_id)
    return _create
