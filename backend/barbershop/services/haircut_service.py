# Overview: Service-layer operations for haircut records; encapsulates business logic and database work.

"""
Haircut Records Service

Barbers register the haircuts they performed; admins approve or reject them
through lifecycle_service.

CREATION PATHS:
- barber: requires an active barber. The record starts pending/pending and
  waits in the admin's approval queue.
- admin:  the record is created completed/approved with the approval fields
  stamped. This is a creation shortcut, not a lifecycle transition.

The service name and price are copied onto the record at creation and are
never re-derived from the Service afterwards.
"""

from __future__ import annotations

from flask import current_app

from ..errors import PermissionDenied, ValidationError
from ..extensions import db
from ..models import HaircutRecord, HaircutStatus, ApprovalStatus, PaymentMethod, BarberStatus
from ..validation import require_text, optional_text, coerce_int, coerce_enum
from . import store
from .audit_service import append_audit_event
from .concurrency import run_with_retry
from .session_service import ActorContext
from barbershop.time_utils import utcnow


def register_haircut(
    actor: ActorContext,
    *,
    service_id: int,
    client_name: str,
    payment_method,
    notes: str | None = None,
) -> HaircutRecord:
    """
    Record a performed haircut for the acting user.

    Raises:
        PermissionDenied: barber is not active
        NotFound: service missing (or in another shop)
        ValidationError: inactive service, missing client name, bad payment method
    """
    if actor.is_barber and actor.status != BarberStatus.ACTIVE:
        raise PermissionDenied("Only active barbers can register haircuts")

    service_id = coerce_int(service_id, "service_id")
    client_name = require_text(client_name, "client_name", max_length=120)
    method = coerce_enum(PaymentMethod, payment_method, "payment_method")

    def _op():
        # Status in the token may be stale; the stored account is authoritative
        me = store.require("users", actor.shop_id, actor.user_id)
        if actor.is_barber and me.status != BarberStatus.ACTIVE:
            raise PermissionDenied("Only active barbers can register haircuts")

        service = store.require("services", actor.shop_id, service_id)
        if not service.active:
            raise ValidationError("This service is no longer offered", details={"field": "service_id"})

        now = utcnow()
        data = {
            "barber_id": me.id,
            "barber_name": me.name,
            "service_id": service.id,
            "service_name": service.name,
            "price_cents": service.price_cents,
            "client_name": client_name,
            "payment_method": method,
            "notes": optional_text(notes),
            "created_at": now,
        }
        if actor.is_admin:
            data.update(
                status=HaircutStatus.COMPLETED,
                approval_status=ApprovalStatus.APPROVED,
                approved_at=now,
                approved_by=actor.user_id,
                approved_by_name=actor.name,
            )
        else:
            data.update(status=HaircutStatus.PENDING, approval_status=ApprovalStatus.PENDING)

        record = store.create("haircuts", actor.shop_id, data)
        append_audit_event(
            shop_id=actor.shop_id,
            entity_type="haircut",
            entity_id=record.id,
            action="haircut.registered",
            actor_id=actor.user_id,
            to_state=record.status.value,
            occurred_at=now,
        )
        db.session.commit()
        return record

    record = run_with_retry(_op)
    current_app.logger.info(
        "Haircut %s registered in shop %s by user %s (%s)",
        record.id, actor.shop_id, actor.user_id, record.status.value,
    )
    return record


def list_haircuts(
    actor: ActorContext,
    *,
    barber_id: int | None = None,
    status=None,
    approval_status=None,
) -> list[HaircutRecord]:
    """
    Haircut records of the shop, newest first.

    Barbers only ever see their own records; a barber_id filter from a barber
    is overridden.
    """
    if actor.is_barber:
        barber_id = actor.user_id
    if status is not None:
        status = coerce_enum(HaircutStatus, status, "status")
    if approval_status is not None:
        approval_status = coerce_enum(ApprovalStatus, approval_status, "approval_status")

    return store.query(
        "haircuts",
        actor.shop_id,
        barber_id=barber_id,
        status=status,
        approval_status=approval_status,
        order_by=[HaircutRecord.created_at.desc(), HaircutRecord.id.desc()],
    )
