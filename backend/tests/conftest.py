"""
Pytest fixtures for barbershop backend tests.

Provides the test database, two-tenant fixtures (Shop A and Shop B, each
with an admin), barbers, catalog services, products and the test client.
"""

import pytest
from barbershop import create_app
from barbershop.extensions import db
from barbershop.models import User
from barbershop.services import auth_service, catalog_service, inventory_service, lifecycle_service
from barbershop.services.session_service import actor_from_user


PASSWORD = "secret123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STORE_RETRY_BACKOFF': 0,
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def admin_a(db_session):
    """Admin of Shop A (registering the admin creates the shop)."""
    return auth_service.register_admin(
        name="Ana Admin",
        email="ana@shop-a.test",
        password=PASSWORD,
        shop_name="Shop A",
    )


@pytest.fixture(scope='function')
def admin_b(db_session):
    """Admin of Shop B."""
    return auth_service.register_admin(
        name="Bruno Admin",
        email="bruno@shop-b.test",
        password=PASSWORD,
        shop_name="Shop B",
    )


@pytest.fixture(scope='function')
def actor_a(admin_a):
    return actor_from_user(admin_a)


@pytest.fixture(scope='function')
def actor_b(admin_b):
    return actor_from_user(admin_b)


def make_barber(admin: User, email: str, name: str = "Carlos Barber", approve: bool = True) -> User:
    """Self-registered barber in the admin's shop, approved unless told otherwise."""
    barber = auth_service.register_barber(
        name=name,
        email=email,
        password=PASSWORD,
        shop_id=admin.shop_id,
    )
    if approve:
        barber = lifecycle_service.approve_barber(actor_from_user(admin), barber.id)
    return barber


@pytest.fixture(scope='function')
def pending_barber_a(admin_a):
    return make_barber(admin_a, "pending@shop-a.test", name="Pedro Pending", approve=False)


@pytest.fixture(scope='function')
def barber_a(admin_a):
    """Active barber in Shop A."""
    return make_barber(admin_a, "carlos@shop-a.test")


@pytest.fixture(scope='function')
def barber_actor_a(barber_a):
    return actor_from_user(barber_a)


@pytest.fixture(scope='function')
def service_a(actor_a):
    """Classic cut in Shop A: 15.00, 30 minutes."""
    return catalog_service.create_service(actor_a, name="Classic cut", price_cents=1500, duration_minutes=30)


@pytest.fixture(scope='function')
def service_b(actor_b):
    return catalog_service.create_service(actor_b, name="Beard trim", price_cents=800, duration_minutes=15)


@pytest.fixture(scope='function')
def product_a(actor_a):
    """Pomade in Shop A: cost 10.00, price 20.00, stock 5."""
    return inventory_service.upsert_product(actor_a, {
        "name": "Pomade",
        "category": "hair_products",
        "cost_cents": 1000,
        "price_cents": 2000,
        "stock": 5,
        "min_stock": 1,
        "barcode": "7790001",
    })


@pytest.fixture(scope='function')
def product_b(actor_b):
    return inventory_service.upsert_product(actor_b, {
        "name": "Beard oil",
        "category": "beard_products",
        "cost_cents": 500,
        "price_cents": 1200,
        "stock": 3,
        "min_stock": 1,
        "barcode": "7790001",
    })


def get_auth_token(client, email: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
