# Overview: Flask API routes for the service catalog; parses input and returns JSON responses.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_role
from ..errors import attempt
from ..models import Role
from ..services import catalog_service
from .responses import outcome_response, items

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/services")


@catalog_bp.get("")
@require_auth
def list_services():
    """Any shop member. Query params: active_only=1 to hide deactivated services."""
    active_only = request.args.get("active_only", "").lower() in ("1", "true", "yes")
    outcome = attempt(catalog_service.list_services, g.actor, active_only=active_only)
    return outcome_response(outcome, serialize=items)


@catalog_bp.post("")
@require_auth
@require_role(Role.ADMIN)
def create_service():
    payload = request.get_json(silent=True) or {}
    outcome = attempt(
        catalog_service.create_service,
        g.actor,
        name=payload.get("name"),
        price_cents=payload.get("price_cents"),
        duration_minutes=payload.get("duration_minutes"),
        description=payload.get("description"),
        active=payload.get("active", True),
    )
    return outcome_response(outcome, status=201)


@catalog_bp.patch("/<int:service_id>")
@require_auth
@require_role(Role.ADMIN)
def update_service(service_id: int):
    payload = request.get_json(silent=True) or {}
    return outcome_response(attempt(catalog_service.update_service, g.actor, service_id, payload))


@catalog_bp.post("/<int:service_id>/active")
@require_auth
@require_role(Role.ADMIN)
def set_service_active(service_id: int):
    payload = request.get_json(silent=True) or {}
    outcome = attempt(catalog_service.set_service_active, g.actor, service_id, payload.get("active"))
    return outcome_response(outcome)


@catalog_bp.delete("/<int:service_id>")
@require_auth
@require_role(Role.ADMIN)
def delete_service(service_id: int):
    return outcome_response(attempt(catalog_service.delete_service, g.actor, service_id))
