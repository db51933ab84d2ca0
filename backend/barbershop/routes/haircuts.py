# Overview: Flask API routes for haircut records; parses input and returns JSON responses.

"""
Haircut record routes.

Barbers register their haircuts and see only their own; admins see the
whole shop and approve or reject pending records.
"""

from flask import Blueprint, request, g

from ..decorators import require_auth, require_role
from ..errors import attempt
from ..models import Role
from ..services import haircut_service, lifecycle_service
from .responses import outcome_response, items

haircuts_bp = Blueprint("haircuts", __name__, url_prefix="/api/haircuts")


@haircuts_bp.get("")
@require_auth
def list_haircuts():
    """Query params: barber_id, status, approval_status (all optional)."""
    outcome = attempt(
        haircut_service.list_haircuts,
        g.actor,
        barber_id=request.args.get("barber_id", type=int),
        status=request.args.get("status"),
        approval_status=request.args.get("approval_status"),
    )
    return outcome_response(outcome, serialize=items)


@haircuts_bp.post("")
@require_auth
def register_haircut():
    payload = request.get_json(silent=True) or {}
    outcome = attempt(
        haircut_service.register_haircut,
        g.actor,
        service_id=payload.get("service_id"),
        client_name=payload.get("client_name"),
        payment_method=payload.get("payment_method"),
        notes=payload.get("notes"),
    )
    return outcome_response(outcome, status=201)


@haircuts_bp.post("/<int:haircut_id>/approve")
@require_auth
@require_role(Role.ADMIN)
def approve_haircut(haircut_id: int):
    return outcome_response(attempt(lifecycle_service.approve_haircut, g.actor, haircut_id))


@haircuts_bp.post("/<int:haircut_id>/reject")
@require_auth
@require_role(Role.ADMIN)
def reject_haircut(haircut_id: int):
    return outcome_response(attempt(lifecycle_service.reject_haircut, g.actor, haircut_id))
