# Overview: Service-layer operations for the service catalog; encapsulates business logic and database work.

"""
Service Catalog

The services a shop offers (cut, beard trim, ...), with price and duration.

REFERENCE RULE: once any haircut or appointment points at a service, its
price and duration are frozen and it can no longer be deleted; admins
deactivate it instead. Name, description and the active flag stay editable
(last write wins).
"""

from __future__ import annotations

from flask import current_app

from ..errors import ConflictError, PermissionDenied
from ..extensions import db
from ..models import Service
from ..validation import require_text, optional_text, coerce_int, coerce_cents, coerce_bool
from . import store
from .concurrency import run_with_retry
from .session_service import ActorContext
from barbershop.time_utils import utcnow


SERVICE_MUTABLE_FIELDS = {"name", "description", "price_cents", "duration_minutes", "active"}
FROZEN_WHEN_REFERENCED = {"price_cents", "duration_minutes"}


def _require_admin(actor: ActorContext) -> None:
    if not actor.is_admin:
        raise PermissionDenied("Only shop admins can manage services")


def _normalize(patch: dict) -> dict:
    clean = {}
    for key, value in patch.items():
        if key not in SERVICE_MUTABLE_FIELDS:
            continue
        if key == "name":
            clean[key] = require_text(value, "name", max_length=120)
        elif key == "description":
            clean[key] = optional_text(value)
        elif key == "price_cents":
            clean[key] = coerce_cents(value, "price_cents")
        elif key == "duration_minutes":
            clean[key] = coerce_int(value, "duration_minutes", minimum=1, maximum=24 * 60)
        elif key == "active":
            clean[key] = coerce_bool(value, "active")
    return clean


def is_referenced(shop_id: int, service_id: int) -> bool:
    """True if any haircut or appointment of the shop points at the service."""
    if store.query("haircuts", shop_id, service_id=service_id, limit=1):
        return True
    return bool(store.query("appointments", shop_id, service_id=service_id, limit=1))


def create_service(
    actor: ActorContext,
    *,
    name: str,
    price_cents,
    duration_minutes,
    description: str | None = None,
    active: bool = True,
) -> Service:
    _require_admin(actor)
    data = _normalize({
        "name": name,
        "description": description,
        "price_cents": price_cents,
        "duration_minutes": duration_minutes,
        "active": active,
    })

    def _op():
        service = store.create("services", actor.shop_id, data)
        db.session.commit()
        return service

    service = run_with_retry(_op)
    current_app.logger.info("Service %s created in shop %s", service.id, actor.shop_id)
    return service


def update_service(actor: ActorContext, service_id: int, patch: dict) -> Service:
    """
    Patch a service.

    Raises:
        ConflictError: price or duration change on a referenced service
    """
    _require_admin(actor)
    clean = _normalize(patch)

    def _op():
        service = store.require("services", actor.shop_id, service_id)
        changing = {
            key for key in FROZEN_WHEN_REFERENCED
            if key in clean and clean[key] != getattr(service, key)
        }
        if changing and is_referenced(actor.shop_id, service_id):
            raise ConflictError(
                "Price and duration cannot change once the service has been used",
                details={"fields": sorted(changing)},
            )
        clean["updated_at"] = utcnow()
        service = store.update("services", actor.shop_id, service_id, clean)
        db.session.commit()
        return service

    return run_with_retry(_op)


def set_service_active(actor: ActorContext, service_id: int, active: bool) -> Service:
    return update_service(actor, service_id, {"active": active})


def delete_service(actor: ActorContext, service_id: int) -> None:
    """Delete an unused service. Referenced services must be deactivated instead."""
    _require_admin(actor)

    def _op():
        store.require("services", actor.shop_id, service_id)
        if is_referenced(actor.shop_id, service_id):
            raise ConflictError("Service is in use; deactivate it instead")
        store.delete("services", actor.shop_id, service_id)
        db.session.commit()

    run_with_retry(_op)
    current_app.logger.info("Service %s deleted from shop %s", service_id, actor.shop_id)


def list_services(actor: ActorContext, *, active_only: bool = False) -> list[Service]:
    return store.query(
        "services",
        actor.shop_id,
        active=True if active_only else None,
        order_by=[Service.name.asc(), Service.id.asc()],
    )
