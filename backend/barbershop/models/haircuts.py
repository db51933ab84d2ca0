from __future__ import annotations

from ..extensions import db
from .enums import HaircutStatus, ApprovalStatus, PaymentMethod, enum_column
from barbershop.time_utils import to_utc_z


class HaircutRecord(db.Model):
    """
    A completed haircut registered by a barber (or an admin).

    status and approval_status move together:
        pending/pending -> completed/approved
        pending/pending -> rejected/rejected

    price_cents and service_name are snapshots taken at creation and are
    never re-derived from the Service.
    """
    __tablename__ = "haircuts"
    __table_args__ = (
        db.Index("ix_haircuts_shop_approval", "shop_id", "approval_status"),
        db.Index("ix_haircuts_shop_created", "shop_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    barber_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    service_id = db.Column(db.Integer, db.ForeignKey("services.id"), nullable=False, index=True)

    barber_name = db.Column(db.String(120), nullable=False)
    service_name = db.Column(db.String(120), nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)

    client_name = db.Column(db.String(120), nullable=False)
    payment_method = enum_column(PaymentMethod, nullable=False)
    notes = db.Column(db.Text, nullable=True)

    status = enum_column(HaircutStatus, nullable=False, default=HaircutStatus.PENDING)
    approval_status = enum_column(ApprovalStatus, nullable=False, default=ApprovalStatus.PENDING)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)
    approved_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    approved_by_name = db.Column(db.String(120), nullable=True)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)
    updated_by = db.Column(db.Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<HaircutRecord id={self.id} status={self.status.value} shop_id={self.shop_id}>"

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
            "payment_method": self.payment_method.value,
            "notes": self.notes,
            "status": self.status.value,
            "approval_status": self.approval_status.value,
            "created_at": to_utc_z(self.created_at),
            "approved_at": to_utc_z(self.approved_at),
            "approved_by": self.approved_by,
            "approved_by_name": self.approved_by_name,
        }
