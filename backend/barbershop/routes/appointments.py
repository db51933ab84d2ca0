# Overview: Flask API routes for appointments; parses input and returns JSON responses.

"""
Appointment routes.

Booking answers 409 slot_taken when the slot is held, including when a
concurrent booking claimed it first. Confirm, complete and cancel are admin
lifecycle moves.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_role
from ..errors import attempt
from ..models import Role
from ..services import scheduling_service, lifecycle_service
from .responses import outcome_response, items

appointments_bp = Blueprint("appointments", __name__, url_prefix="/api/appointments")


@appointments_bp.get("")
@require_auth
def list_appointments():
    """Query params: date (YYYY-MM-DD), barber_id, status."""
    outcome = attempt(
        scheduling_service.list_appointments,
        g.actor,
        day=request.args.get("date"),
        barber_id=request.args.get("barber_id", type=int),
        status=request.args.get("status"),
    )
    return outcome_response(outcome, serialize=items)


@appointments_bp.get("/slots")
@require_auth
def available_slots():
    """Query params: barber_id, date. Returns the free slot labels."""
    barber_id = request.args.get("barber_id", type=int)
    day = request.args.get("date")
    outcome = attempt(scheduling_service.free_slots, g.actor, barber_id, day)
    return outcome_response(
        outcome,
        serialize=lambda slots: {"barber_id": barber_id, "date": day, "slots": slots},
    )


@appointments_bp.post("")
@require_auth
def book():
    payload = request.get_json(silent=True) or {}
    outcome = attempt(
        scheduling_service.book,
        g.actor,
        barber_id=payload.get("barber_id"),
        service_id=payload.get("service_id"),
        day=payload.get("date"),
        slot=payload.get("time"),
        client_name=payload.get("client_name"),
        client_phone=payload.get("client_phone"),
        client_email=payload.get("client_email"),
        notes=payload.get("notes"),
    )
    return outcome_response(outcome, status=201)


@appointments_bp.get("/grid")
@require_auth
def grid():
    config = scheduling_service.schedule_config_from_app()
    return jsonify({
        "open_hour": config.open_hour,
        "close_hour": config.close_hour,
        "slot_minutes": config.slot_minutes,
        "slots": scheduling_service.slot_grid(config),
    }), 200


@appointments_bp.post("/<int:appointment_id>/confirm")
@require_auth
@require_role(Role.ADMIN)
def confirm(appointment_id: int):
    return outcome_response(attempt(lifecycle_service.confirm_appointment, g.actor, appointment_id))


@appointments_bp.post("/<int:appointment_id>/complete")
@require_auth
@require_role(Role.ADMIN)
def complete(appointment_id: int):
    return outcome_response(attempt(lifecycle_service.complete_appointment, g.actor, appointment_id))


@appointments_bp.post("/<int:appointment_id>/cancel")
@require_auth
@require_role(Role.ADMIN)
def cancel(appointment_id: int):
    return outcome_response(attempt(lifecycle_service.cancel_appointment, g.actor, appointment_id))
