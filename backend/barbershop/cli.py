# Overview: Flask CLI command group for bootstrap and inspection.

# backend/barbershop/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask shop <command> [options]
#
# - python -m flask shop init-db
#   Create all tables (use `flask db upgrade` for migrated databases).
# - python -m flask shop create-shop --name "Downtown Cuts" --admin-name "Ana" --email ana@example.com --password "secret1"
#   Create a shop with its admin account (prompts if options are omitted).
# - python -m flask shop low-stock --shop-id 1
#   List products at or below their minimum stock.

import click
from flask.cli import with_appcontext

from .errors import DomainError
from .extensions import db
from .models import Product, Shop
from .services import auth_service, store
from .services.inventory_service import low_stock


@click.group('shop')
def shop_group():
    """Barbershop bootstrap and inspection commands."""


@shop_group.command('init-db')
@with_appcontext
def init_db_cli():
    """Create all tables."""
    db.create_all()
    click.echo("PASS Database tables created")


@shop_group.command('create-shop')
@click.option('--name', 'shop_name', prompt=True, help='Shop name')
@click.option('--admin-name', prompt=True, help='Admin display name')
@click.option('--email', prompt=True, help='Admin email')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Admin password')
@click.option('--phone', default=None, help='Admin phone')
@with_appcontext
def create_shop_cli(shop_name, admin_name, email, password, phone):
    """Create a shop with its admin account."""
    try:
        admin = auth_service.register_admin(
            name=admin_name,
            email=email,
            password=password,
            shop_name=shop_name,
            phone=phone,
        )
    except DomainError as exc:
        click.echo(f"FAIL {exc.message}")
        raise SystemExit(1)

    click.echo(f"PASS Created shop: {shop_name} (ID: {admin.shop_id}), admin {admin.email} (ID: {admin.id})")


@shop_group.command('low-stock')
@click.option('--shop-id', type=int, required=True, help='Shop ID')
@with_appcontext
def low_stock_cli(shop_id):
    """List products at or below their minimum stock."""
    if db.session.get(Shop, shop_id) is None:
        click.echo(f"FAIL Shop ID {shop_id} not found")
        raise SystemExit(1)

    products = store.query("inventory", shop_id, order_by=[Product.name.asc()])
    alerts = low_stock(products)
    if not alerts:
        click.echo("No products below minimum stock")
        return

    click.echo(f"{'ID':<6} {'Name':<30} {'Stock':>6} {'Min':>6}")
    for product in alerts:
        click.echo(f"{product.id:<6} {product.name[:30]:<30} {product.stock:>6} {product.min_stock:>6}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(shop_group)
