"""
Pytest fixtures for the till's data-layer tests.

Each test gets its own SQLite file, a pushed app context, and (on request)
a fake remote mounted through httpx.MockTransport.
"""

import json
from decimal import Decimal

import httpx
import pytest

from dokan import create_app
from dokan.context import get_context
from dokan.extensions import db
from dokan.services import auth_service, store_service
from dokan.services.remote_client import RemoteClient


class FakeRemote:
    """
    Stand-in for the remote "apply mutation" endpoint.

    Records every accepted delivery. Set `status_code` to a 5xx to reject,
    or `raise_timeout` to simulate a hung connection. Payload ids listed in
    `reject_ids` are always refused.
    """

    def __init__(self):
        self.received = []
        self.calls = 0
        self.status_code = 200
        self.raise_timeout = False
        self.reject_ids = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.raise_timeout:
            raise httpx.ReadTimeout("timed out", request=request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"error": "unavailable"})

        body = json.loads(request.content)
        if body["payload"].get("id") in self.reject_ids:
            return httpx.Response(500, json={"error": "rejected"})
        body["idempotency_key"] = request.headers.get("Idempotency-Key")
        self.received.append(body)
        return httpx.Response(200, json={"applied": True})

    def operations(self):
        return [(m["collection"], m["operation"]) for m in self.received]


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application for testing, with an app context pushed."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'dokan-test.sqlite3'}",
        'REMOTE_SYNC_URL': None,
        'START_ONLINE': True,
        'SYNC_DRAIN_ON_RECONNECT': True,
        'BCRYPT_ROUNDS': 4,
        'LOW_STOCK_THRESHOLD': 10,
    })

    with app.app_context():
        db.create_all()
        yield app
        ctx = get_context()
        ctx.reconciler.join(timeout=5)
        if ctx.remote is not None:
            ctx.remote.close()
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def remote(app):
    """Attach a FakeRemote to the app's context."""
    fake = FakeRemote()
    get_context().remote = RemoteClient(
        "http://remote.test",
        timeout=1.0,
        transport=httpx.MockTransport(fake.handler),
    )
    return fake


@pytest.fixture(scope='function')
def offline(app):
    """Put the till offline without firing the reconnect drain."""
    get_context().connectivity.set_online(False)


@pytest.fixture(scope='function')
def owner(app):
    """Registered and logged-in shop account (owner / 1234)."""
    return auth_service.register_user("Amar Dokan", "owner", "1234", address="Mirpur 10", phone="01700000000")


@pytest.fixture(scope='function')
def items(app):
    """
    Two catalog items written straight to the store (nothing queued).

    A: price 100, cost 70, stock 5
    B: price 50, cost 30, stock 3
    """
    a = store_service.put("catalog", {
        "id": "A", "name": "Rice", "name_bn": "চাল", "category": "Grocery",
        "price_cents": 100, "cost_cents": 70, "stock": Decimal("5"), "unit": "kg",
    })
    b = store_service.put("catalog", {
        "id": "B", "name": "Soap", "name_bn": "সাবান", "category": "Toiletries",
        "price_cents": 50, "cost_cents": 30, "stock": Decimal("3"), "unit": "pcs",
    })
    return a, b
