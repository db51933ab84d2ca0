# Overview: Flask API routes for inventory operations; parses input and returns JSON responses.

"""
Inventory and sales routes.

Admins manage products; any member of the shop may look up products and
record a sale. A sale that would drive stock negative answers 409
insufficient_stock and writes nothing.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_role
from ..errors import attempt, NotFound
from ..models import Role
from ..services import inventory_service
from ..time_utils import parse_iso_datetime
from .responses import outcome_response, error_response, items

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("/products")
@require_auth
def list_products():
    """Query params: search (name, barcode or provider), category."""
    outcome = attempt(
        inventory_service.list_products,
        g.actor,
        search=request.args.get("search"),
        category=request.args.get("category"),
    )
    return outcome_response(outcome, serialize=items)


@inventory_bp.get("/products/barcode/<barcode>")
@require_auth
def find_by_barcode(barcode: str):
    product = inventory_service.find_by_barcode(g.actor, barcode)
    if product is None:
        return error_response(NotFound("No product with this barcode"))
    return jsonify(product.to_dict()), 200


@inventory_bp.post("/products")
@require_auth
@require_role(Role.ADMIN)
def create_product():
    payload = request.get_json(silent=True) or {}
    return outcome_response(attempt(inventory_service.upsert_product, g.actor, payload), status=201)


@inventory_bp.patch("/products/<int:product_id>")
@require_auth
@require_role(Role.ADMIN)
def update_product(product_id: int):
    payload = request.get_json(silent=True) or {}
    return outcome_response(attempt(inventory_service.upsert_product, g.actor, payload, product_id))


@inventory_bp.delete("/products/<int:product_id>")
@require_auth
@require_role(Role.ADMIN)
def delete_product(product_id: int):
    return outcome_response(attempt(inventory_service.delete_product, g.actor, product_id))


@inventory_bp.get("/low-stock")
@require_auth
def low_stock():
    products = inventory_service.list_products(g.actor)
    return jsonify(items(inventory_service.low_stock(products))), 200


@inventory_bp.post("/products/<int:product_id>/sell")
@require_auth
def sell(product_id: int):
    """Body: {"quantity": int}. Returns the created sale record."""
    payload = request.get_json(silent=True) or {}
    outcome = attempt(inventory_service.sell, g.actor, product_id, payload.get("quantity"))
    return outcome_response(outcome, status=201)


@inventory_bp.get("/sales")
@require_auth
@require_role(Role.ADMIN)
def list_sales():
    """Query params: start, end (ISO-8601; end exclusive), product_id."""
    try:
        start = parse_iso_datetime(request.args.get("start"))
        end = parse_iso_datetime(request.args.get("end"))
    except ValueError:
        return jsonify({"error": "validation_error", "message": "start and end must be ISO-8601 datetimes"}), 400

    outcome = attempt(
        inventory_service.list_sales,
        g.actor,
        start=start,
        end=end,
        product_id=request.args.get("product_id", type=int),
    )
    return outcome_response(outcome, serialize=items)


@inventory_bp.get("/stats")
@require_auth
@require_role(Role.ADMIN)
def stats():
    """Today, month and all-time sales figures with the top products."""
    return jsonify(inventory_service.inventory_stats(g.actor)), 200
