# Overview: Pytest coverage for the `flask shop` CLI commands.

from barbershop.models import Shop, User, Role
from barbershop.services import inventory_service

from conftest import PASSWORD


class TestShopCommands:

    def test_init_db(self, app, db_session):
        result = app.test_cli_runner().invoke(args=['shop', 'init-db'])

        assert result.exit_code == 0
        assert 'PASS' in result.output

    def test_create_shop(self, app, db_session):
        result = app.test_cli_runner().invoke(args=[
            'shop', 'create-shop',
            '--name', 'Downtown Cuts',
            '--admin-name', 'Dana',
            '--email', 'dana@downtown.test',
            '--password', PASSWORD,
        ])

        assert result.exit_code == 0, result.output
        assert 'PASS Created shop: Downtown Cuts' in result.output

        admin = db_session.query(User).filter_by(email='dana@downtown.test').one()
        assert admin.role == Role.ADMIN
        assert db_session.get(Shop, admin.shop_id).name == 'Downtown Cuts'

    def test_create_shop_weak_password(self, app, db_session):
        result = app.test_cli_runner().invoke(args=[
            'shop', 'create-shop',
            '--name', 'Downtown Cuts',
            '--admin-name', 'Dana',
            '--email', 'dana@downtown.test',
            '--password', '123',
        ])

        assert result.exit_code == 1
        assert 'FAIL' in result.output
        assert db_session.query(Shop).count() == 0

    def test_low_stock(self, app, actor_a, product_a):
        inventory_service.upsert_product(actor_a, {
            "name": "Cola", "category": "drinks", "cost_cents": 50, "price_cents": 150,
            "stock": 40, "min_stock": 10,
        })
        inventory_service.sell(actor_a, product_a.id, 4)

        result = app.test_cli_runner().invoke(args=['shop', 'low-stock', '--shop-id', str(actor_a.shop_id)])

        assert result.exit_code == 0
        assert 'Pomade' in result.output
        assert 'Cola' not in result.output

    def test_low_stock_none(self, app, actor_a, product_a):
        result = app.test_cli_runner().invoke(args=['shop', 'low-stock', '--shop-id', str(actor_a.shop_id)])

        assert result.exit_code == 0
        assert 'No products below minimum stock' in result.output

    def test_low_stock_unknown_shop(self, app, db_session):
        result = app.test_cli_runner().invoke(args=['shop', 'low-stock', '--shop-id', '9999'])

        assert result.exit_code == 1
        assert 'FAIL' in result.output
