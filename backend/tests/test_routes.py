"""
HTTP API tests through the Flask test client.

Covers the login guard, error mapping, checkout, and the sync endpoints
the counter UI polls for its offline badge.
"""

from dokan.context import get_context
from dokan.services import session_service, sync_queue
from dokan.validation import StoreUnavailable


def _register(client, username="owner", pin="1234"):
    return client.post('/api/auth/register', json={
        'store_name': 'Amar Dokan',
        'username': username,
        'pin': pin,
    })


def test_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    body = response.json
    assert body['status'] == 'healthy'
    assert body['online'] is True
    assert body['remote_configured'] is False
    assert body['database']['details']['pending_mutations'] == 0


def test_login_required(client):
    response = client.get('/api/catalog/')
    assert response.status_code == 401
    assert response.json['error'] == 'Login required'


def test_register_login_logout(client):
    response = _register(client)
    assert response.status_code == 201
    assert response.json['user']['username'] == 'owner'
    assert 'pin_hash' not in response.json['user']

    assert client.post('/api/auth/logout').status_code == 200
    assert client.get('/api/auth/me').json['user'] is None

    assert client.post('/api/auth/login', json={'username': 'owner'}).status_code == 400
    assert client.post('/api/auth/login', json={'username': 'owner', 'pin': '0000'}).status_code == 401

    response = client.post('/api/auth/login', json={'username': 'owner', 'pin': 1234})
    assert response.status_code == 200
    assert client.get('/api/auth/me').json['user']['store_name'] == 'Amar Dokan'


def test_register_errors(client):
    assert _register(client, pin='12').status_code == 400
    assert _register(client).status_code == 201
    assert _register(client).status_code == 409


def test_register_and_login_with_numeric_pin(client):
    response = _register(client, pin=4321)
    assert response.status_code == 201

    client.post('/api/auth/logout')
    assert client.post('/api/auth/login', json={'username': 'owner', 'pin': 4321}).status_code == 200
    assert client.post('/api/auth/login', json={'username': 'owner', 'pin': '4321'}).status_code == 200


def test_profile_update(client):
    _register(client)
    response = client.patch('/api/auth/profile', json={'address': 'Dhanmondi 27'})
    assert response.status_code == 200
    assert response.json['user']['address'] == 'Dhanmondi 27'


def test_catalog_crud(client):
    _register(client)

    response = client.post('/api/catalog/', json={
        'id': 'A', 'name': 'Rice', 'price_cents': 100, 'cost_cents': 70, 'stock': '5', 'unit': 'kg',
    })
    assert response.status_code == 201
    assert response.json['item']['stock'] == '5'

    assert client.post('/api/catalog/', json={'id': 'A'}).status_code == 409
    assert client.post('/api/catalog/', json={'price_cents': 1.5}).status_code == 400

    response = client.patch('/api/catalog/A', json={'stock': '2'})
    assert response.status_code == 200
    assert client.get('/api/catalog/low-stock?threshold=3').json['count'] == 1
    assert client.get('/api/catalog/?q=ric').json['count'] == 1

    assert client.delete('/api/catalog/A').status_code == 204
    assert client.get('/api/catalog/A').status_code == 404


def test_checkout_flow(client):
    _register(client)
    client.post('/api/catalog/', json={'id': 'A', 'name': 'Rice', 'price_cents': 100, 'stock': '5'})
    client.post('/api/catalog/', json={'id': 'B', 'name': 'Soap', 'price_cents': 50, 'stock': '3'})
    lines = [{'item_id': 'A', 'quantity': 2}, {'item_id': 'B', 'quantity': 1}]

    preview = client.post('/api/sales/preview', json={'lines': lines, 'paid_cents': 150})
    assert preview.json['totals']['due_cents'] == 100

    response = client.post('/api/sales/checkout', json={'lines': lines, 'paid_cents': 150})
    assert response.status_code == 400
    assert 'Customer name' in response.json['error']

    response = client.post('/api/sales/checkout', json={
        'lines': lines, 'paid_cents': 150, 'customer_name': 'Rahim',
    })
    assert response.status_code == 201
    sale = response.json['sale']
    assert (sale['total_cents'], sale['due_cents'], sale['change_cents']) == (250, 100, 0)
    assert [line['quantity'] for line in sale['lines']] == ['2', '1']

    assert client.get(f"/api/sales/{sale['id']}").json['sale'] == sale
    assert client.get('/api/sales/').json['count'] == 1
    assert client.get('/api/catalog/A').json['item']['stock'] == '3'
    assert client.get('/api/reports/dues').json['total_due_cents'] == 100

    assert client.post('/api/sales/checkout', json={'lines': []}).status_code == 400
    assert client.post('/api/sales/checkout', json={'lines': [{'item_id': 'X', 'quantity': 1}]}).status_code == 404


def test_expenses_and_reports(client):
    _register(client)
    response = client.post('/api/expenses/', json={'description': 'Rent', 'amount_cents': 1000})
    assert response.status_code == 201

    listing = client.get('/api/expenses/').json
    assert listing['count'] == 1
    assert listing['total_cents'] == 1000

    dashboard = client.get('/api/reports/dashboard').json
    assert dashboard['net_profit_cents'] == -1000
    assert client.get('/api/reports/monthly?year=2025&month=0').status_code == 400

    assert client.delete(f"/api/expenses/{response.json['expense']['id']}").status_code == 204
    assert client.get('/api/expenses/').json['count'] == 0


def test_sync_status_and_queue(client):
    _register(client)

    status = client.get('/api/sync/status').json
    assert status['pending'] == 1
    assert status['online'] is True
    assert status['draining'] is False

    queue = client.get('/api/sync/queue').json
    assert queue['items'][0]['collection'] == 'users'


def test_connectivity_toggle_starts_drain(app, client, remote):
    assert client.put('/api/sync/connectivity', json={'online': 'yes'}).status_code == 400

    response = client.put('/api/sync/connectivity', json={'online': False})
    assert response.json == {'online': False, 'drain_started': False}

    _register(client)
    assert sync_queue.count_pending() == 1
    assert remote.calls == 0

    response = client.put('/api/sync/connectivity', json={'online': True})
    assert response.json == {'online': True, 'drain_started': True}
    get_context().reconciler.join(timeout=5)

    assert sync_queue.count_pending() == 0
    assert remote.operations() == [('users', 'create')]


def test_manual_drain(client, remote):
    remote.status_code = 503
    _register(client)
    assert sync_queue.count_pending() == 1

    remote.status_code = 200
    response = client.post('/api/sync/drain')
    assert response.status_code == 200
    assert response.json['delivered'] == 1
    assert response.json['remaining'] == 0


def test_store_unavailable_maps_to_503(client, monkeypatch):
    def broken():
        raise StoreUnavailable("disk I/O error")

    monkeypatch.setattr(session_service, "current_user", broken)
    response = client.get('/api/catalog/')
    assert response.status_code == 503
