# Overview: Service-layer operations for appointments; encapsulates business logic and database work.

"""
Appointment Scheduler

Daily slot grid per barber, free-slot computation and booking.

GRID: fixed-width slots from open_hour (inclusive) to close_hour
(exclusive), labelled "HH:MM". 09:00-20:00 in 30 minute slots gives 22
slots, 09:00 through 19:30.

DOUBLE BOOKING: a slot is held by any non-cancelled appointment. book()
does not rely on its own read of the taken slots; the partial unique index
uq_appointments_barber_slot on (barber_id, date, time) rejects the second
of two concurrent inserts, which surfaces as SlotTaken. Cancelling an
appointment frees its slot.

Status changes go through lifecycle_service.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import PermissionDenied, SlotTaken, ValidationError
from ..extensions import db
from ..models import Appointment, AppointmentStatus, BarberStatus, Role
from ..validation import require_text, optional_text, coerce_int, coerce_date, coerce_enum
from . import store
from .audit_service import append_audit_event
from .concurrency import run_with_retry
from .session_service import ActorContext
from barbershop.time_utils import utcnow


@dataclass(frozen=True)
class ScheduleConfig:
    open_hour: int = 9
    close_hour: int = 20
    slot_minutes: int = 30

    def __post_init__(self):
        if not (0 <= self.open_hour < self.close_hour <= 24):
            raise ValueError("open_hour must be before close_hour, within 0-24")
        if self.slot_minutes <= 0 or (24 * 60) % self.slot_minutes:
            raise ValueError("slot_minutes must divide a day evenly")


def schedule_config_from_app() -> ScheduleConfig:
    cfg = current_app.config
    return ScheduleConfig(
        open_hour=cfg.get("SCHEDULE_OPEN_HOUR", 9),
        close_hour=cfg.get("SCHEDULE_CLOSE_HOUR", 20),
        slot_minutes=cfg.get("SCHEDULE_SLOT_MINUTES", 30),
    )


def slot_grid(config: ScheduleConfig) -> list[str]:
    """Every slot label of a day, in order."""
    slots = []
    minute = config.open_hour * 60
    end = config.close_hour * 60
    while minute < end:
        slots.append(f"{minute // 60:02d}:{minute % 60:02d}")
        minute += config.slot_minutes
    return slots


def holds_slot(appointment) -> bool:
    return appointment.status != AppointmentStatus.CANCELLED


def available_slots(barber_id: int, day: date, appointments, config: ScheduleConfig) -> list[str]:
    """
    The grid minus slots held by a non-cancelled appointment of barber_id on day.

    Pure: appointments of other barbers or other days are ignored.
    """
    taken = {
        a.time for a in appointments
        if a.barber_id == barber_id and a.date == day and holds_slot(a)
    }
    return [slot for slot in slot_grid(config) if slot not in taken]


def _active_barber(actor: ActorContext, barber_id: int):
    barber = store.get("users", actor.shop_id, barber_id)
    if barber is None or barber.role != Role.BARBER:
        raise ValidationError("Unknown barber", details={"field": "barber_id"})
    if barber.status != BarberStatus.ACTIVE:
        raise ValidationError("This barber is not taking appointments", details={"field": "barber_id"})
    return barber


def free_slots(actor: ActorContext, barber_id: int, day, config: ScheduleConfig | None = None) -> list[str]:
    """available_slots over the stored appointments of the barber's day."""
    barber_id = coerce_int(barber_id, "barber_id")
    day = coerce_date(day, "date")
    config = config or schedule_config_from_app()
    appointments = store.query("appointments", actor.shop_id, barber_id=barber_id, date=day)
    return available_slots(barber_id, day, appointments, config)


def book(
    actor: ActorContext,
    *,
    barber_id: int,
    service_id: int,
    day,
    slot: str,
    client_name: str,
    client_phone: str,
    client_email: str | None = None,
    notes: str | None = None,
    config: ScheduleConfig | None = None,
) -> Appointment:
    """
    Book a slot for a client. The appointment starts pending.

    Barbers may only book into their own calendar.

    Raises:
        ValidationError: unknown/inactive barber or service, slot off the grid
        SlotTaken: the slot is already held, including by a concurrent booking
    """
    barber_id = coerce_int(barber_id, "barber_id")
    service_id = coerce_int(service_id, "service_id")
    if actor.is_barber and barber_id != actor.user_id:
        raise PermissionDenied("Barbers can only book their own appointments")
    config = config or schedule_config_from_app()
    day = coerce_date(day, "date")
    slot = require_text(slot, "time")
    if slot not in slot_grid(config):
        raise ValidationError(f"{slot} is not a bookable slot", details={"field": "time"})
    client_name = require_text(client_name, "client_name", max_length=120)
    client_phone = require_text(client_phone, "client_phone", max_length=32)

    def _op():
        barber = _active_barber(actor, barber_id)
        service = store.require("services", actor.shop_id, service_id)
        if not service.active:
            raise ValidationError("This service is no longer offered", details={"field": "service_id"})

        now = utcnow()
        try:
            appointment = store.create("appointments", actor.shop_id, {
                "barber_id": barber.id,
                "barber_name": barber.name,
                "service_id": service.id,
                "service_name": service.name,
                "price_cents": service.price_cents,
                "client_name": client_name,
                "client_phone": client_phone,
                "client_email": optional_text(client_email),
                "notes": optional_text(notes),
                "date": day,
                "time": slot,
                "status": AppointmentStatus.PENDING,
                "created_at": now,
            })
        except IntegrityError:
            db.session.rollback()
            raise SlotTaken(barber_id, day.isoformat(), slot)

        append_audit_event(
            shop_id=actor.shop_id,
            entity_type="appointment",
            entity_id=appointment.id,
            action="appointment.booked",
            actor_id=actor.user_id,
            to_state=AppointmentStatus.PENDING.value,
            occurred_at=now,
        )
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise SlotTaken(barber_id, day.isoformat(), slot)
        return appointment

    appointment = run_with_retry(_op)
    current_app.logger.info(
        "Appointment %s booked: barber %s %s %s in shop %s",
        appointment.id, barber_id, day.isoformat(), slot, actor.shop_id,
    )
    return appointment


def list_appointments(
    actor: ActorContext,
    *,
    day=None,
    barber_id: int | None = None,
    status=None,
) -> list[Appointment]:
    """Appointments in slot order. Barbers only see their own calendar."""
    if actor.is_barber:
        barber_id = actor.user_id
    if day is not None:
        day = coerce_date(day, "date")
    if status is not None:
        status = coerce_enum(AppointmentStatus, status, "status")

    return store.query(
        "appointments",
        actor.shop_id,
        date=day,
        barber_id=barber_id,
        status=status,
        order_by=[Appointment.date.asc(), Appointment.time.asc(), Appointment.id.asc()],
    )
