from __future__ import annotations

from ..extensions import db
from .enums import AppointmentStatus, enum_column
from barbershop.time_utils import to_utc_z


# Rows that still hold their slot. Literal because partial index predicates
# are rendered as DDL.
_HOLDS_SLOT = db.text("status != 'cancelled'")


class Appointment(db.Model):
    """
    Client appointment in a barber's daily slot grid.

    SLOT EXCLUSIVITY: at most one non-cancelled appointment per
    (barber_id, date, time). Enforced by a partial unique index so two
    concurrent bookings cannot both commit; cancelling frees the slot.
    """
    __tablename__ = "appointments"
    __table_args__ = (
        db.Index(
            "uq_appointments_barber_slot",
            "barber_id",
            "date",
            "time",
            unique=True,
            sqlite_where=_HOLDS_SLOT,
            postgresql_where=_HOLDS_SLOT,
        ),
        db.Index("ix_appointments_shop_date", "shop_id", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    barber_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    service_id = db.Column(db.Integer, db.ForeignKey("services.id"), nullable=False)

    barber_name = db.Column(db.String(120), nullable=False)
    service_name = db.Column(db.String(120), nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)

    client_name = db.Column(db.String(120), nullable=False)
    client_phone = db.Column(db.String(32), nullable=False)
    client_email = db.Column(db.String(255), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    date = db.Column(db.Date, nullable=False)
    # Slot label, "HH:MM"
    time = db.Column(db.String(5), nullable=False)

    status = enum_column(AppointmentStatus, nullable=False, default=AppointmentStatus.PENDING)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)
    updated_by = db.Column(db.Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<Appointment id={self.id} barber_id={self.barber_id} {self.date} {self.time}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "barber_id": self.barber_id,
            "barber_name": self.barber_name,
            "service_id": self.service_id,
            "service_name": self.service_name,
            "price_cents": self.price_cents,
            "client_name": self.client_name,
            "client_phone": self.client_phone,
            "client_email": self.client_email,
            "notes": self.notes,
            "date": self.date.isoformat(),
            "time": self.time,
            "status": self.status.value,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
