# Overview: Pytest coverage for the HTTP surface: auth, status mapping and error bodies.

"""
API Route Tests

Exercises the blueprints through the Flask test client:
- bearer-token authentication and role gates (401 / 403)
- domain outcomes mapped onto status codes (400 / 404 / 409)
- storage faults answer 503 and are marked retryable
- unexpected failures answer a generic 500
"""

import pytest

from barbershop.errors import StorageError
from barbershop.services import inventory_service

from conftest import PASSWORD, get_auth_token, auth_headers


@pytest.fixture
def admin_headers(client, admin_a):
    return auth_headers(get_auth_token(client, "ana@shop-a.test"))


@pytest.fixture
def barber_headers(client, barber_a):
    return auth_headers(get_auth_token(client, "carlos@shop-a.test"))


class TestSystem:

    def test_health(self, client, db_session):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.json['status'] == 'healthy'
        assert response.json['checks']['database']['status'] == 'healthy'

    def test_cors_allowed_origin(self, client, db_session):
        response = client.get('/health', headers={'Origin': 'http://localhost:5173'})
        assert response.headers['Access-Control-Allow-Origin'] == 'http://localhost:5173'

    def test_cors_unknown_origin(self, client, db_session):
        response = client.get('/health', headers={'Origin': 'http://evil.test'})
        assert 'Access-Control-Allow-Origin' not in response.headers


class TestAuthRoutes:

    def test_register_admin_and_login(self, client, db_session):
        response = client.post('/api/auth/register-admin', json={
            'name': 'Zoe Admin',
            'email': 'zoe@shop-z.test',
            'password': PASSWORD,
            'shop_name': 'Shop Z',
        })
        assert response.status_code == 201
        assert response.json['role'] == 'admin'

        login = client.post('/api/auth/login', json={'email': 'zoe@shop-z.test', 'password': PASSWORD})
        assert login.status_code == 200
        assert login.json['token']
        assert login.json['expires_at'].endswith('Z')
        assert login.json['user']['shop_name'] == 'Shop Z'

    def test_duplicate_email_is_409(self, client, admin_a):
        response = client.post('/api/auth/register-admin', json={
            'name': 'Copy', 'email': 'ana@shop-a.test', 'password': PASSWORD, 'shop_name': 'Copy shop',
        })
        assert response.status_code == 409
        assert response.json['error'] == 'email_in_use'

    def test_weak_password_is_400(self, client, admin_a):
        response = client.post('/api/auth/register-barber', json={
            'name': 'X', 'email': 'x@shop-a.test', 'password': '123', 'shop_id': admin_a.shop_id,
        })
        assert response.status_code == 400
        assert response.json['error'] == 'weak_password'

    def test_register_barber_pending(self, client, admin_a):
        response = client.post('/api/auth/register-barber', json={
            'name': 'New Barber', 'email': 'new@shop-a.test', 'password': PASSWORD,
            'shop_id': str(admin_a.shop_id),
        })
        assert response.status_code == 201
        assert response.json['status'] == 'pending'

    def test_bad_login_is_401(self, client, admin_a):
        response = client.post('/api/auth/login', json={'email': 'ana@shop-a.test', 'password': 'nope-nope'})

        assert response.status_code == 401
        assert response.json['error'] == 'invalid_credentials'

    def test_me_requires_token(self, client, db_session):
        assert client.get('/api/auth/me').status_code == 401
        assert client.get('/api/auth/me', headers=auth_headers('bogus')).status_code == 401

    def test_logout_invalidates_token(self, client, admin_headers):
        assert client.get('/api/auth/me', headers=admin_headers).status_code == 200
        assert client.post('/api/auth/logout', headers=admin_headers).status_code == 200
        assert client.get('/api/auth/me', headers=admin_headers).status_code == 401

    def test_shops_is_public(self, client, admin_a, admin_b):
        response = client.get('/api/auth/shops')
        assert response.json['count'] == 2


class TestRoleGates:

    def test_barber_cannot_list_barbers(self, client, barber_headers):
        response = client.get('/api/barbers', headers=barber_headers)
        assert response.status_code == 403

    def test_admin_cannot_use_barber_dashboard(self, client, admin_headers):
        assert client.get('/api/reports/me', headers=admin_headers).status_code == 403

    def test_pending_barber_signs_in_but_cannot_register_haircuts(self, client, pending_barber_a, service_a):
        headers = auth_headers(get_auth_token(client, "pending@shop-a.test"))

        me = client.get('/api/auth/me', headers=headers)
        assert me.json['user']['status'] == 'pending'

        response = client.post('/api/haircuts', headers=headers, json={
            'service_id': service_a.id, 'client_name': 'Luis', 'payment_method': 'cash',
        })
        assert response.status_code == 403


class TestLifecycleRoutes:

    def test_approve_then_conflict(self, client, admin_headers, pending_barber_a):
        url = f'/api/barbers/{pending_barber_a.id}/approve'

        first = client.post(url, headers=admin_headers)
        assert first.status_code == 200
        assert first.json['status'] == 'active'

        second = client.post(url, headers=admin_headers)
        assert second.status_code == 409
        assert second.json['error'] == 'invalid_transition'
        assert second.json['details']['from'] == 'active'

    def test_unknown_barber_is_404(self, client, admin_headers):
        assert client.post('/api/barbers/9999/approve', headers=admin_headers).status_code == 404

    def test_haircut_flow(self, client, admin_headers, barber_headers, service_a):
        created = client.post('/api/haircuts', headers=barber_headers, json={
            'service_id': service_a.id, 'client_name': 'Luis', 'payment_method': 'cash',
        })
        assert created.status_code == 201
        haircut_id = created.json['id']

        pending = client.get('/api/reports/pending', headers=admin_headers)
        assert [h['id'] for h in pending.json['items']] == [haircut_id]

        approved = client.post(f'/api/haircuts/{haircut_id}/approve', headers=admin_headers)
        assert approved.json['approval_status'] == 'approved'

        again = client.post(f'/api/haircuts/{haircut_id}/reject', headers=admin_headers)
        assert again.status_code == 409


class TestInventoryRoutes:

    def test_sell_and_oversell(self, client, barber_headers, product_a):
        url = f'/api/inventory/products/{product_a.id}/sell'

        sold = client.post(url, headers=barber_headers, json={'quantity': 3})
        assert sold.status_code == 201
        assert sold.json['profit_cents'] == 3000

        oversold = client.post(url, headers=barber_headers, json={'quantity': 10})
        assert oversold.status_code == 409
        assert oversold.json['error'] == 'insufficient_stock'
        assert oversold.json['details'] == {'product_id': product_a.id, 'requested': 10, 'available': 2}
        assert oversold.json['retryable'] is False

    def test_foreign_product_is_404(self, client, admin_headers, product_b):
        response = client.post(
            f'/api/inventory/products/{product_b.id}/sell', headers=admin_headers, json={'quantity': 1}
        )
        assert response.status_code == 404

    def test_invalid_product_is_400(self, client, admin_headers):
        response = client.post('/api/inventory/products', headers=admin_headers, json={
            'name': 'Gel', 'cost_cents': 500, 'price_cents': 400,
        })
        assert response.status_code == 400
        assert response.json['details'] == {'field': 'price_cents'}

    def test_barcode_lookup(self, client, barber_headers, product_a):
        found = client.get('/api/inventory/products/barcode/7790001', headers=barber_headers)
        assert found.json['id'] == product_a.id

        missing = client.get('/api/inventory/products/barcode/0000', headers=barber_headers)
        assert missing.status_code == 404

    def test_stats_admin_only(self, client, admin_headers, barber_headers, product_a):
        assert client.get('/api/inventory/stats', headers=barber_headers).status_code == 403

        response = client.get('/api/inventory/stats', headers=admin_headers)
        assert response.status_code == 200
        assert response.json['product_count'] == 1
        assert response.json['stock_value_cents'] == 5000


class TestCatalogRoutes:

    def test_deactivate_with_text_flag(self, client, admin_headers, service_a):
        url = f'/api/services/{service_a.id}/active'

        response = client.post(url, headers=admin_headers, json={'active': 'false'})
        assert response.status_code == 200
        assert response.json['active'] is False

        missing = client.post(url, headers=admin_headers, json={})
        assert missing.status_code == 400


class TestAppointmentRoutes:

    def _book(self, client, headers, barber, service, time='14:00'):
        return client.post('/api/appointments', headers=headers, json={
            'barber_id': barber.id,
            'service_id': service.id,
            'date': '2026-03-10',
            'time': time,
            'client_name': 'Marta',
            'client_phone': '555-0101',
        })

    def test_book_and_double_book(self, client, admin_headers, barber_a, service_a):
        assert self._book(client, admin_headers, barber_a, service_a).status_code == 201

        clash = self._book(client, admin_headers, barber_a, service_a)
        assert clash.status_code == 409
        assert clash.json['error'] == 'slot_taken'

        slots = client.get(
            f'/api/appointments/slots?barber_id={barber_a.id}&date=2026-03-10', headers=admin_headers
        )
        assert len(slots.json['slots']) == 21
        assert '14:00' not in slots.json['slots']

    def test_off_grid_is_400(self, client, admin_headers, barber_a, service_a):
        response = self._book(client, admin_headers, barber_a, service_a, time='14:10')
        assert response.status_code == 400

    def test_slots_need_barber(self, client, admin_headers):
        response = client.get('/api/appointments/slots?date=2026-03-10', headers=admin_headers)
        assert response.status_code == 400

    def test_grid(self, client, admin_headers):
        response = client.get('/api/appointments/grid', headers=admin_headers)
        assert len(response.json['slots']) == 22


class TestReportRoutes:

    def test_dashboard(self, client, admin_headers, barber_a):
        response = client.get('/api/reports/dashboard?date=2026-03-10', headers=admin_headers)

        assert response.status_code == 200
        assert response.json['barbers']['active'] == 1
        assert response.json['today'] == {'total_cents': 0, 'count': 0}

    def test_dashboard_bad_date(self, client, admin_headers):
        response = client.get('/api/reports/dashboard?date=03/10/2026', headers=admin_headers)
        assert response.status_code == 400

    def test_expense_summary(self, client, admin_headers):
        client.post('/api/expenses', headers=admin_headers, json={
            'description': 'Rent', 'amount_cents': 80000, 'type': 'monthly', 'category': 'rent',
        })

        response = client.get('/api/reports/expenses', headers=admin_headers)
        assert response.json['total_monthly_cents'] == 80000
        assert response.json['average_monthly_cents'] == 80000


class TestFaults:

    def test_storage_error_is_503(self, client, monkeypatch, admin_headers):
        def unavailable(*args, **kwargs):
            raise StorageError()

        monkeypatch.setattr(inventory_service, "list_products", unavailable)

        response = client.get('/api/inventory/products', headers=admin_headers)

        assert response.status_code == 503
        assert response.json['error'] == 'storage_error'
        assert response.json['retryable'] is True

    def test_unexpected_error_is_500(self, client, monkeypatch, admin_headers):
        def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(inventory_service, "list_products", broken)

        response = client.get('/api/inventory/products', headers=admin_headers)

        assert response.status_code == 500
        assert response.json == {'error': 'Internal server error'}

    def test_unknown_route_is_404(self, client, db_session):
        assert client.get('/api/nowhere').status_code == 404
