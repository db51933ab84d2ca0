# Overview: Flask API routes for reporting and analytics; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_role
from ..errors import attempt
from ..models import Role
from ..services import reporting_service, expense_service, haircut_service
from ..services.audit_service import list_audit_events
from ..time_utils import parse_iso_date, utcnow
from .responses import outcome_response, items

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _today():
    """?date=YYYY-MM-DD or the current UTC date."""
    return parse_iso_date(request.args.get("date")) or utcnow().date()


@reports_bp.get("/dashboard")
@require_auth
@require_role(Role.ADMIN)
def shop_dashboard():
    try:
        today = _today()
    except ValueError:
        return jsonify({"error": "validation_error", "message": "date must be YYYY-MM-DD"}), 400
    outcome = attempt(reporting_service.shop_dashboard, g.actor, today)
    return outcome_response(outcome, serialize=lambda data: data)


@reports_bp.get("/me")
@require_auth
@require_role(Role.BARBER)
def barber_dashboard():
    try:
        today = _today()
    except ValueError:
        return jsonify({"error": "validation_error", "message": "date must be YYYY-MM-DD"}), 400
    return jsonify(reporting_service.barber_dashboard(g.actor, today)), 200


@reports_bp.get("/pending")
@require_auth
@require_role(Role.ADMIN)
def pending():
    """The approval queue, newest first."""
    haircuts = haircut_service.list_haircuts(g.actor)
    return jsonify(items(reporting_service.pending_queue(haircuts))), 200


@reports_bp.get("/expenses")
@require_auth
@require_role(Role.ADMIN)
def expenses():
    outcome = attempt(expense_service.list_expenses, g.actor)
    return outcome_response(outcome, serialize=reporting_service.expense_totals)


@reports_bp.get("/barbers/<int:barber_id>/earnings")
@require_auth
@require_role(Role.ADMIN)
def barber_earnings(barber_id: int):
    haircuts = haircut_service.list_haircuts(g.actor, barber_id=barber_id)
    return jsonify(reporting_service.barber_earnings(haircuts, barber_id)), 200


@reports_bp.get("/audit")
@require_auth
@require_role(Role.ADMIN)
def audit_trail():
    """Query params: entity_type, entity_id, limit (default 200)."""
    events = list_audit_events(
        g.actor.shop_id,
        entity_type=request.args.get("entity_type"),
        entity_id=request.args.get("entity_id", type=int),
        limit=min(request.args.get("limit", 200, type=int), 1000),
    )
    return jsonify(items(events)), 200
