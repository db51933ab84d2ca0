# Overview: Flask API routes for barber accounts; parses input and returns JSON responses.

"""
Barber management routes. Admin only.

Status changes go through the lifecycle engine; an illegal move answers 409
with the state actually found so the client can re-fetch.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_role
from ..errors import attempt
from ..models import Role
from ..services import barber_service, lifecycle_service
from .responses import outcome_response, items

barbers_bp = Blueprint("barbers", __name__, url_prefix="/api/barbers")


@barbers_bp.get("")
@require_auth
@require_role(Role.ADMIN)
def list_barbers():
    """Query params: status (pending|active|inactive|rejected), optional."""
    outcome = attempt(barber_service.list_barbers, g.actor, status=request.args.get("status"))
    return outcome_response(outcome, serialize=items)


@barbers_bp.get("/<int:barber_id>")
@require_auth
@require_role(Role.ADMIN)
def get_barber(barber_id: int):
    return outcome_response(attempt(barber_service.get_barber, g.actor, barber_id))


@barbers_bp.post("")
@require_auth
@require_role(Role.ADMIN)
def create_barber():
    """Provision a barber login. The new barber is active immediately."""
    payload = request.get_json(silent=True) or {}
    outcome = attempt(
        barber_service.create_barber,
        g.actor,
        name=payload.get("name"),
        email=payload.get("email"),
        password=payload.get("password"),
        phone=payload.get("phone"),
    )
    return outcome_response(outcome, status=201)


@barbers_bp.post("/<int:barber_id>/approve")
@require_auth
@require_role(Role.ADMIN)
def approve_barber(barber_id: int):
    return outcome_response(attempt(lifecycle_service.approve_barber, g.actor, barber_id))


@barbers_bp.post("/<int:barber_id>/reject")
@require_auth
@require_role(Role.ADMIN)
def reject_barber(barber_id: int):
    return outcome_response(attempt(lifecycle_service.reject_barber, g.actor, barber_id))


@barbers_bp.post("/<int:barber_id>/toggle-active")
@require_auth
@require_role(Role.ADMIN)
def toggle_barber_active(barber_id: int):
    return outcome_response(attempt(lifecycle_service.toggle_barber_active, g.actor, barber_id))
