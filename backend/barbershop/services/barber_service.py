# Overview: Service-layer operations for barber accounts; encapsulates business logic and database work.

"""
Barber Management

Listing barbers and admin-provisioned barber logins. Status changes
(approve, reject, activate/deactivate) live in lifecycle_service.

ADMIN-CREATED BARBERS:
The account is created pending, a scoped secondary session is opened for it
to prove the credentials work, and the creating admin then approves it
through the lifecycle engine. The secondary session is always revoked,
whether creation succeeds or fails, and the admin's own session is never
touched.
"""

from __future__ import annotations

from flask import current_app

from ..errors import NotFound, PermissionDenied
from ..extensions import db
from ..models import User, Role, BarberStatus
from ..validation import coerce_enum
from . import store, auth_service, lifecycle_service
from .concurrency import run_with_retry
from .session_service import ActorContext, scoped_session


def list_barbers(actor: ActorContext, *, status=None) -> list[User]:
    """Barbers of the actor's shop, optionally filtered by status, by name."""
    if status is not None:
        status = coerce_enum(BarberStatus, status, "status")
    return store.query(
        "users",
        actor.shop_id,
        role=Role.BARBER,
        status=status,
        order_by=[User.name.asc(), User.id.asc()],
    )


def get_barber(actor: ActorContext, barber_id: int) -> User:
    user = store.get("users", actor.shop_id, barber_id)
    if user is None or user.role != Role.BARBER:
        raise NotFound("Barber not found")
    return user


def create_barber(
    actor: ActorContext,
    *,
    name: str,
    email: str,
    password: str,
    phone: str | None = None,
) -> User:
    """
    Provision a barber login on behalf of an admin. Returns the active barber.

    Raises:
        PermissionDenied, WeakPassword, EmailInUse, ValidationError
    """
    if not actor.is_admin:
        raise PermissionDenied("Only shop admins can create barbers")

    def _op():
        user_id = auth_service.sign_up(
            email=email,
            password=password,
            name=name,
            shop_id=actor.shop_id,
            role=Role.BARBER,
            status=BarberStatus.PENDING,
            phone=phone,
            created_by=actor.user_id,
        )
        db.session.commit()
        return user_id

    barber_id = run_with_retry(_op)

    with scoped_session(barber_id) as secondary:
        current_app.logger.info(
            "Secondary session opened for new barber %s in shop %s", secondary.user.id, actor.shop_id
        )
        barber = lifecycle_service.approve_barber(actor, barber_id)

    current_app.logger.info("Barber %s created by admin %s in shop %s", barber.id, actor.user_id, actor.shop_id)
    return barber
