# Overview: Flask API routes for expenses; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_role
from ..errors import attempt
from ..models import Role, EXPENSE_CATEGORIES
from ..services import expense_service
from ..time_utils import parse_iso_date
from .responses import outcome_response, items

expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


@expenses_bp.get("")
@require_auth
@require_role(Role.ADMIN)
def list_expenses():
    """Query params: type (monthly|unexpected), start, end (YYYY-MM-DD, inclusive)."""
    try:
        start = parse_iso_date(request.args.get("start"))
        end = parse_iso_date(request.args.get("end"))
    except ValueError:
        return jsonify({"error": "validation_error", "message": "start and end must be YYYY-MM-DD"}), 400

    outcome = attempt(
        expense_service.list_expenses,
        g.actor,
        type=request.args.get("type"),
        start=start,
        end=end,
    )
    return outcome_response(outcome, serialize=items)


@expenses_bp.get("/categories")
@require_auth
def categories():
    return jsonify({"categories": list(EXPENSE_CATEGORIES)}), 200


@expenses_bp.post("")
@require_auth
@require_role(Role.ADMIN)
def record_expense():
    payload = request.get_json(silent=True) or {}
    outcome = attempt(
        expense_service.record_expense,
        g.actor,
        description=payload.get("description"),
        amount_cents=payload.get("amount_cents"),
        type=payload.get("type"),
        category=payload.get("category"),
        day=payload.get("date"),
    )
    return outcome_response(outcome, status=201)


@expenses_bp.delete("/<int:expense_id>")
@require_auth
@require_role(Role.ADMIN)
def delete_expense(expense_id: int):
    return outcome_response(attempt(expense_service.delete_expense, g.actor, expense_id))
