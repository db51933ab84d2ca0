# Overview: Service-layer operations for lifecycle; encapsulates business logic and database work.

"""
Barbershop Status Lifecycle Engine

================================================================================
PURPOSE: The only code allowed to move a barber, haircut or appointment
between states.
================================================================================

BARBER ACCOUNT:
    pending -> active <-> inactive
    pending -> rejected            (terminal)

HAIRCUT RECORD (status / approval_status move together):
    pending/pending -> completed/approved   (terminal)
    pending/pending -> rejected/rejected    (terminal)

APPOINTMENT:
    pending -> confirmed -> completed      (completed is terminal)
    pending | confirmed -> cancelled       (terminal)

RULES:
1. Every transition is checked against the table before it is attempted.
2. Every transition is ONE conditional UPDATE keyed on the expected current
   state (store.update_if). If another writer moved the record first, the
   update matches no row and the caller gets InvalidTransition with the
   state actually found. Nothing is half-applied.
3. Every transition appends an audit event in the same DB transaction and
   stamps updated_at / updated_by.
4. Transitions are admin operations.

NOTE: an admin registering a haircut directly creates it completed/approved
(haircut_service.register_haircut). That is a creation path, not a
transition, and does not go through this module.
================================================================================
"""

from __future__ import annotations

from flask import current_app

from ..errors import InvalidTransition, NotFound, PermissionDenied
from ..extensions import db
from ..models import (
    User,
    HaircutRecord,
    Appointment,
    Role,
    BarberStatus,
    HaircutStatus,
    ApprovalStatus,
    AppointmentStatus,
)
from . import store
from .audit_service import append_audit_event
from .concurrency import run_with_retry
from .session_service import ActorContext
from barbershop.time_utils import utcnow


BARBER_TRANSITIONS = {
    (BarberStatus.PENDING, BarberStatus.ACTIVE),
    (BarberStatus.PENDING, BarberStatus.REJECTED),
    (BarberStatus.ACTIVE, BarberStatus.INACTIVE),
    (BarberStatus.INACTIVE, BarberStatus.ACTIVE),
}

HAIRCUT_TRANSITIONS = {
    (HaircutStatus.PENDING, HaircutStatus.COMPLETED),
    (HaircutStatus.PENDING, HaircutStatus.REJECTED),
}

APPOINTMENT_TRANSITIONS = {
    (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED),
    (AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED),
    (AppointmentStatus.PENDING, AppointmentStatus.CANCELLED),
    (AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED),
}

LIFECYCLES = {
    "barber": BARBER_TRANSITIONS,
    "haircut": HAIRCUT_TRANSITIONS,
    "appointment": APPOINTMENT_TRANSITIONS,
}

# approval_status paired with each haircut status
HAIRCUT_APPROVAL = {
    HaircutStatus.PENDING: ApprovalStatus.PENDING,
    HaircutStatus.COMPLETED: ApprovalStatus.APPROVED,
    HaircutStatus.REJECTED: ApprovalStatus.REJECTED,
}

# toggle_barber_active only moves between these two
_TOGGLE = {
    BarberStatus.ACTIVE: BarberStatus.INACTIVE,
    BarberStatus.INACTIVE: BarberStatus.ACTIVE,
}


def can_transition(lifecycle: str, from_state, to_state) -> bool:
    """True if the lifecycle allows from_state -> to_state. Same-state moves are not transitions."""
    return (from_state, to_state) in LIFECYCLES[lifecycle]


def is_terminal(lifecycle: str, state) -> bool:
    """A state with no outgoing transition."""
    return not any(src == state for src, _ in LIFECYCLES[lifecycle])


def _require_admin(actor: ActorContext) -> None:
    if not actor.is_admin:
        raise PermissionDenied("Only shop admins can change statuses")


def _state_name(state) -> str | None:
    return state.value if state is not None else None


def _transition(
    *,
    actor: ActorContext,
    lifecycle: str,
    collection: str,
    model,
    record_id: int,
    to_state,
    action: str,
    extra_patch: dict | None = None,
    extra_conditions: tuple = (),
    load=None,
    sources=None,
):
    """
    Check the table, apply one conditional update, append the audit event,
    commit. Returns the refreshed record.

    sources narrows the legal source states for operations that share a
    target with another operation (approve vs. re-activate).
    """
    _require_admin(actor)
    load = load or (lambda: store.require(collection, actor.shop_id, record_id))

    def _op():
        record = load()
        current = record.status
        allowed = sources is None or current in sources
        if not allowed or not can_transition(lifecycle, current, to_state):
            raise InvalidTransition(lifecycle, _state_name(current), to_state.value)

        now = utcnow()
        patch = {"status": to_state, "updated_at": now, "updated_by": actor.user_id}
        patch.update(extra_patch or {})

        applied = store.update_if(
            collection,
            actor.shop_id,
            record_id,
            [model.status == current, *extra_conditions],
            patch,
        )
        if not applied:
            # Someone else moved it between our read and our write
            db.session.refresh(record)
            raise InvalidTransition(lifecycle, _state_name(record.status), to_state.value)

        append_audit_event(
            shop_id=actor.shop_id,
            entity_type=lifecycle,
            entity_id=record_id,
            action=action,
            actor_id=actor.user_id,
            from_state=current.value,
            to_state=to_state.value,
            occurred_at=now,
        )
        db.session.commit()
        return store.require(collection, actor.shop_id, record_id)

    record = run_with_retry(_op)
    current_app.logger.info(
        "%s %s %s in shop %s by user %s", lifecycle, record_id, action, actor.shop_id, actor.user_id
    )
    return record


# ================================================================================
# BARBER ACCOUNTS
# ================================================================================

def _barber_loader(actor: ActorContext, barber_id: int):
    def _load() -> User:
        user = store.get("users", actor.shop_id, barber_id)
        if user is None or user.role != Role.BARBER:
            raise NotFound("Barber not found")
        return user
    return _load


def approve_barber(actor: ActorContext, barber_id: int) -> User:
    """pending -> active. Records approved_at / approved_by."""
    return _transition(
        actor=actor,
        lifecycle="barber",
        collection="users",
        model=User,
        record_id=barber_id,
        to_state=BarberStatus.ACTIVE,
        action="barber.approved",
        extra_patch={"approved_at": utcnow(), "approved_by": actor.user_id},
        extra_conditions=(User.role == Role.BARBER,),
        load=_barber_loader(actor, barber_id),
        sources={BarberStatus.PENDING},
    )


def reject_barber(actor: ActorContext, barber_id: int) -> User:
    """pending -> rejected (terminal)."""
    return _transition(
        actor=actor,
        lifecycle="barber",
        collection="users",
        model=User,
        record_id=barber_id,
        to_state=BarberStatus.REJECTED,
        action="barber.rejected",
        extra_conditions=(User.role == Role.BARBER,),
        load=_barber_loader(actor, barber_id),
    )


def toggle_barber_active(actor: ActorContext, barber_id: int) -> User:
    """active <-> inactive. Pending and rejected barbers cannot be toggled."""
    _require_admin(actor)
    load = _barber_loader(actor, barber_id)
    current = load().status
    target = _TOGGLE.get(current)
    if target is None:
        raise InvalidTransition("barber", current.value, "active|inactive")

    return _transition(
        actor=actor,
        lifecycle="barber",
        collection="users",
        model=User,
        record_id=barber_id,
        to_state=target,
        action="barber.activated" if target == BarberStatus.ACTIVE else "barber.deactivated",
        extra_conditions=(User.role == Role.BARBER,),
        load=load,
    )


# ================================================================================
# HAIRCUT APPROVAL
# ================================================================================

def approve_haircut(actor: ActorContext, haircut_id: int) -> HaircutRecord:
    """pending/pending -> completed/approved. Stamps approved_at/by/by_name."""
    return _transition(
        actor=actor,
        lifecycle="haircut",
        collection="haircuts",
        model=HaircutRecord,
        record_id=haircut_id,
        to_state=HaircutStatus.COMPLETED,
        action="haircut.approved",
        extra_patch={
            "approval_status": HAIRCUT_APPROVAL[HaircutStatus.COMPLETED],
            "approved_at": utcnow(),
            "approved_by": actor.user_id,
            "approved_by_name": actor.name,
        },
        extra_conditions=(HaircutRecord.approval_status == ApprovalStatus.PENDING,),
    )


def reject_haircut(actor: ActorContext, haircut_id: int) -> HaircutRecord:
    """pending/pending -> rejected/rejected (terminal)."""
    return _transition(
        actor=actor,
        lifecycle="haircut",
        collection="haircuts",
        model=HaircutRecord,
        record_id=haircut_id,
        to_state=HaircutStatus.REJECTED,
        action="haircut.rejected",
        extra_patch={"approval_status": HAIRCUT_APPROVAL[HaircutStatus.REJECTED]},
        extra_conditions=(HaircutRecord.approval_status == ApprovalStatus.PENDING,),
    )


# ================================================================================
# APPOINTMENTS
# ================================================================================

def _appointment_transition(actor: ActorContext, appointment_id: int, to_state: AppointmentStatus, action: str):
    return _transition(
        actor=actor,
        lifecycle="appointment",
        collection="appointments",
        model=Appointment,
        record_id=appointment_id,
        to_state=to_state,
        action=action,
    )


def confirm_appointment(actor: ActorContext, appointment_id: int) -> Appointment:
    return _appointment_transition(actor, appointment_id, AppointmentStatus.CONFIRMED, "appointment.confirmed")


def complete_appointment(actor: ActorContext, appointment_id: int) -> Appointment:
    return _appointment_transition(actor, appointment_id, AppointmentStatus.COMPLETED, "appointment.completed")


def cancel_appointment(actor: ActorContext, appointment_id: int) -> Appointment:
    """pending|confirmed -> cancelled. Frees the slot for new bookings."""
    return _appointment_transition(actor, appointment_id, AppointmentStatus.CANCELLED, "appointment.cancelled")
